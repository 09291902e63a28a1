"""Business logic services for the Deiwy application."""

from .mailer import Mailer, get_mailer
from .session_store import SessionState, SessionStore
from .verification import VerificationCodeStore, get_verification_store

__all__ = [
    "Mailer",
    "SessionState",
    "SessionStore",
    "VerificationCodeStore",
    "get_mailer",
    "get_verification_store",
]
