"""API endpoint modules for version 1."""

from .auth import router as auth_router
from .contacts import router as contacts_router
from .conversations import router as conversations_router
from .messages import router as messages_router
from .profile import router as profile_router
from .users import router as users_router

__all__ = [
    "auth_router",
    "contacts_router",
    "conversations_router",
    "messages_router",
    "profile_router",
    "users_router",
]
