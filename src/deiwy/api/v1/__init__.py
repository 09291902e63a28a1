"""Version 1 API endpoints."""

from .endpoints import (
    auth_router,
    contacts_router,
    conversations_router,
    messages_router,
    profile_router,
    users_router,
)

__all__ = [
    "auth_router",
    "contacts_router",
    "conversations_router",
    "messages_router",
    "profile_router",
    "users_router",
]
