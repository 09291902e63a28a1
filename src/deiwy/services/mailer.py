"""Outgoing email."""

from __future__ import annotations

import logging
import smtplib
from collections import deque
from email.message import EmailMessage

from deiwy.core.errors import MailerError
from deiwy.core.settings import settings

logger = logging.getLogger(__name__)


def build_verification_email(username: str, email: str, code: str) -> EmailMessage:
    """Compose the message carrying a verification code."""
    name = username.split("#")[0]
    message = EmailMessage()
    message["Subject"] = f"Verification Code: {code}"
    message["From"] = settings.smtp_from_email
    message["To"] = email
    message.set_content(
        f"Hello {name},\n\n"
        f"Your verification code is {code}.\n"
        "Enter this code on the verification page to verify your email address.\n"
        "If you did not request this code, please ignore this email.\n\n"
        f"{settings.app_name} Team\n"
    )
    message.add_alternative(
        f"<p>Hello {name},</p>"
        "<p>To finish signing in, please enter the following verification code:</p>"
        f"<h1>{code}</h1>"
        "<p>If you did not request this verification code, please ignore this email.</p>"
        f"<p>{settings.app_name} Team</p>",
        subtype="html",
    )
    return message


def build_password_reset_email(username: str, email: str, token: str) -> EmailMessage:
    """Compose the message carrying the reset-password link."""
    name = username.split("#")[0]
    link = f"{settings.client_url.rstrip('/')}/password/reset/{token}"
    minutes = settings.password_reset_ttl_seconds // 60
    message = EmailMessage()
    message["Subject"] = "Password Reset Request"
    message["From"] = settings.smtp_from_email
    message["To"] = email
    message.set_content(
        f"Hello {name},\n\n"
        "We received a request to reset the password for your account.\n"
        f"Open this link within {minutes} minutes to choose a new password:\n\n"
        f"{link}\n\n"
        "If you did not request a password reset, ignore this email. "
        "Your password will remain unchanged.\n\n"
        f"{settings.app_name} Team\n"
    )
    message.add_alternative(
        f"<p>Hello {name},</p>"
        "<p>We received a request to reset the password for your account. "
        "To proceed, please click the link below:</p>"
        f'<p><a href="{link}" target="_blank">Reset Password</a></p>'
        f"<p>The link is valid for {minutes} minutes.</p>"
        "<p>If you did not request a password reset, please disregard this email.</p>"
        f"<p>{settings.app_name} Team</p>",
        subtype="html",
    )
    return message


class Mailer:
    """Sends mail through the configured SMTP relay.

    Without ``SMTP_HOST`` messages are only logged, which is what local
    development and the test suite rely on.
    """

    def __init__(self) -> None:
        self.sent: deque[EmailMessage] = deque(maxlen=50)

    def send(self, message: EmailMessage) -> None:
        if not settings.smtp_configured:
            logger.info("SMTP not configured; not sending %r to %s", message["Subject"], message["To"])
            self.sent.append(message)
            return

        try:
            if settings.smtp_use_tls:
                with smtplib.SMTP(
                    settings.smtp_host,
                    settings.smtp_port,
                    timeout=settings.smtp_timeout_seconds,
                ) as server:
                    server.starttls()
                    if settings.smtp_username:
                        server.login(settings.smtp_username, settings.smtp_password or "")
                    server.send_message(message)
            else:
                with smtplib.SMTP_SSL(
                    settings.smtp_host,
                    settings.smtp_port,
                    timeout=settings.smtp_timeout_seconds,
                ) as server:
                    if settings.smtp_username:
                        server.login(settings.smtp_username, settings.smtp_password or "")
                    server.send_message(message)
        except (smtplib.SMTPException, OSError) as exc:
            logger.error("Failed to send email to %s: %s", message["To"], exc)
            raise MailerError() from exc

        logger.info("Email sent to %s", message["To"])
        self.sent.append(message)

    def send_verification_code(self, username: str, email: str, code: str) -> None:
        self.send(build_verification_email(username, email, code))

    def send_password_reset(self, username: str, email: str, token: str) -> None:
        self.send(build_password_reset_email(username, email, token))


_mailer = Mailer()


def get_mailer() -> Mailer:
    """Return the process-wide mailer."""
    return _mailer
