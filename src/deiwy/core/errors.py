"""Application error types rendered into ``{"error": {...}}`` responses.

Every error carries an HTTP status, a user-facing message and, optionally,
a redirect the client should follow instead of showing the message.
"""

from __future__ import annotations

from typing import Any

from fastapi import status


class AppError(Exception):
    """Base class for errors that are reported to the client."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    default_message: str = "The request could not be completed."

    def __init__(self, message: str | None = None, *, redirect: str | None = None) -> None:
        self.message = message or self.default_message
        self.redirect = redirect
        super().__init__(self.message)

    @property
    def name(self) -> str:
        return type(self).__name__

    def to_response(self) -> dict[str, Any]:
        """Return the JSON body describing this error."""
        body: dict[str, Any] = {
            "name": self.name,
            "details": {"message": self.message},
        }
        if self.redirect:
            body["redirect"] = self.redirect
        return {"error": body}


class AuthenticationError(AppError):
    """Raised when a request requires a signed-in session."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "You need to sign in to continue."

    def __init__(self, message: str | None = None, *, redirect: str | None = "/") -> None:
        super().__init__(message, redirect=redirect)


class InvalidCredentialsError(AppError):
    """Raised when an email/password pair does not match an account."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Incorrect email or password."


class EmailError(AppError):
    """Email-related failures.

    Types:
    - ``NotVerified``: the account email has not been verified yet.
    - ``AlreadyVerified``: the account email is verified already.
    """

    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Your email address has not been verified."

    def __init__(
        self,
        error_type: str = "NotVerified",
        message: str | None = None,
        *,
        redirect: str | None = None,
    ) -> None:
        self.type = error_type
        super().__init__(message, redirect=redirect)


class VerificationCodeError(AppError):
    """Raised when a verification code is missing, expired or does not match."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "The verification code is invalid or has expired."

    def __init__(self, error_type: str = "Invalid", message: str | None = None) -> None:
        self.type = error_type
        super().__init__(message)


class ResetPasswordError(AppError):
    """Raised when a password reset token is invalid, expired or already used."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "The password reset link is invalid or has expired."


class ChangePasswordError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "The current password is incorrect."


class DeleteAccountError(AppError):
    """Raised when the confirmation email does not match the signed-in account."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "The email address does not match your account."


class UserNotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "User not found."


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "The requested resource was not found."


class ForbiddenError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "You are not allowed to perform this action."


class ConstraintError(AppError):
    """Raised when a write violates a uniqueness constraint."""

    status_code = status.HTTP_409_CONFLICT
    default_message = "A record with these details already exists."


class MailerError(AppError):
    """Raised when an outgoing email could not be delivered."""

    status_code = status.HTTP_502_BAD_GATEWAY
    default_message = "We could not send the email. Please try again later."
