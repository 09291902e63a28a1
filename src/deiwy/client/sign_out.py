"""Controller for the sign-out button."""

from __future__ import annotations

import httpx

from deiwy.client.page import Notification, Page
from deiwy.client.requests import normal_request

SIGN_OUT_BUTTON_ID = "signOutButton"
ERROR_DURATION_SECONDS = 7


class SignOutController:
    def __init__(self, page: Page, client: httpx.AsyncClient) -> None:
        self.page = page
        self.client = client

    def bind(self) -> None:
        self.page.add_event_listener(SIGN_OUT_BUTTON_ID, "click", self.sign_out)

    async def sign_out(self) -> None:
        """End the session and follow the redirect the server returns."""
        result = await normal_request(self.client, "/auth/sign-out", "POST")
        if result.redirect:
            self.page.navigate(result.redirect)
            return
        if result.error:
            self.page.notify(
                Notification(
                    type="error",
                    message=result.error.details.message,
                    duration=ERROR_DURATION_SECONDS,
                )
            )
