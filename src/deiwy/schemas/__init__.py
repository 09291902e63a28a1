"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .auth import (
    ChangePasswordRequest,
    EmailVerificationInfo,
    ForgotPasswordRequest,
    RegisterRequest,
    ResendVerificationRequest,
    ResetPasswordRequest,
    SignInRequest,
    VerifyEmailRequest,
)
from .conversation import (
    ConversationCreate,
    ConversationResponse,
    MemberProfile,
    MessageCreate,
    MessagePage,
    MessageResponse,
    MessageStatusResponse,
)
from .user import (
    ContactResponse,
    ContactToggleResponse,
    DeleteAccountRequest,
    FollowToggleResponse,
    ProfileResponse,
    ProfileUpdateRequest,
    UserSearchPage,
    UserSearchResult,
    UserSummary,
)

__all__ = [
    "ChangePasswordRequest", "EmailVerificationInfo", "ForgotPasswordRequest",
    "RegisterRequest", "ResendVerificationRequest", "ResetPasswordRequest",
    "SignInRequest", "VerifyEmailRequest",
    "ConversationCreate", "ConversationResponse", "MemberProfile",
    "MessageCreate", "MessagePage", "MessageResponse", "MessageStatusResponse",
    "ContactResponse", "ContactToggleResponse", "DeleteAccountRequest",
    "FollowToggleResponse", "ProfileResponse", "ProfileUpdateRequest",
    "UserSearchPage", "UserSearchResult", "UserSummary",
]
