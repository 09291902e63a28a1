"""Controller for the email verification page."""

from __future__ import annotations

import httpx

from deiwy.client.page import Notification, Page
from deiwy.client.requests import normal_request

FORM_ID = "emailVerificationCodeForm"
FIRSTNAME_DISPLAY_ID = "FirstnameDisplay"
EMAIL_DISPLAY_ID = "EmailDisplay"
RESEND_BUTTON_ID = "resendVerificationCode"


class EmailVerificationController:
    """Loads the page details, submits the code and resends it on request."""

    def __init__(self, page: Page, client: httpx.AsyncClient) -> None:
        self.page = page
        self.client = client

    def bind(self) -> None:
        self.page.add_event_listener(FORM_ID, "submit", self.submit)
        self.page.add_event_listener(RESEND_BUTTON_ID, "click", self.resend)

    async def load(self) -> None:
        """Show the masked email, first name and any flash messages.

        Visitors without a pending verification are sent elsewhere.
        """
        result = await normal_request(self.client, "/auth/info/email-verification", "GET")
        if result.redirect:
            self.page.navigate(result.redirect)
            return
        if result.error:
            self.page.notify(Notification(type="error", message=result.error.details.message))
            return

        info = result.message or {}
        self.page.get_element(FIRSTNAME_DISPLAY_ID).inner_html = info.get("Firstname", "")
        self.page.get_element(EMAIL_DISPLAY_ID).inner_html = info.get("Email", "")
        for kind, text in (info.get("FlashMessages") or {}).items():
            self.page.notify(Notification(type=kind, message=text))

    async def submit(self) -> None:
        form = self.page.get_element(FORM_ID)
        code = "".join(field.value for field in form.inputs)

        result = await normal_request(
            self.client,
            "/auth/verify-email",
            "POST",
            {"VerificationCode": code},
        )
        if result.redirect:
            self.page.navigate(result.redirect)
            return
        if result.error:
            self.page.notify(Notification(type="error", message=result.error.details.message))
            return

        form.reset()

    async def resend(self) -> None:
        body = {
            "Firstname": self.page.get_element(FIRSTNAME_DISPLAY_ID).inner_html,
            "Email": self.page.get_element(EMAIL_DISPLAY_ID).inner_html,
        }
        result = await normal_request(self.client, "/auth/request-email-verification", "POST", body)
        if result.message:
            self.page.notify(Notification(type="success", message=str(result.message)))
            return
        if result.error:
            self.page.notify(Notification(type="error", message=result.error.details.message))
