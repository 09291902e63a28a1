"""SQLAlchemy models for the Deiwy application."""

from .contact import Contact
from .conversation import Conversation, Member
from .follow import Follow
from .message import Message, MessageStatus
from .session import WebSession
from .user import SchemaValidationError, User

__all__ = [
    "Contact",
    "Conversation", "Member",
    "Follow",
    "Message", "MessageStatus",
    "WebSession",
    "SchemaValidationError", "User",
]
