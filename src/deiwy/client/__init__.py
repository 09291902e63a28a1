"""Page controllers and the request helper they share."""

from .email_verification import EmailVerificationController
from .page import Element, Notification, Page
from .requests import ErrorDetails, RequestError, RequestResult, normal_request
from .sign_out import SignOutController

__all__ = [
    "Element",
    "EmailVerificationController",
    "ErrorDetails",
    "Notification",
    "Page",
    "RequestError",
    "RequestResult",
    "SignOutController",
    "normal_request",
]
