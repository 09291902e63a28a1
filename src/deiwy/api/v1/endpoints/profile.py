"""The signed-in user's own account: profile, password and deletion."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Response

from deiwy.api.v1.dependencies import (
    CurrentUserDep,
    MailerDep,
    SessionDep,
    SessionStoreDep,
    VerificationStoreDep,
    VerifiedUserDep,
    WebSessionDep,
)
from deiwy.core.errors import MailerError
from deiwy.core.settings import settings
from deiwy.schemas.auth import ChangePasswordRequest
from deiwy.schemas.user import DeleteAccountRequest, ProfileResponse, ProfileUpdateRequest
from deiwy.services import user_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/user", tags=["profile"])


@router.get("/current", response_model=ProfileResponse)
async def current_profile(current_user: CurrentUserDep) -> ProfileResponse:
    return ProfileResponse.model_validate(current_user)


@router.post("/edit", summary="Update profile fields")
def edit_profile(
    payload: ProfileUpdateRequest,
    current_user: VerifiedUserDep,
    web_session: WebSessionDep,
    db: SessionDep,
    sessions: SessionStoreDep,
    codes: VerificationStoreDep,
    mailer: MailerDep,
) -> dict[str, Any]:
    """Save the submitted fields.

    Changing the email address sends a verification code to the new address
    and redirects to the verification page.
    """
    user, email_changed = user_service.update_profile(db, current_user, payload)
    profile = ProfileResponse.model_validate(user).model_dump()
    if not email_changed:
        return {"message": "Your profile has been updated.", "user": profile}

    try:
        user_service.send_verification_code(user, codes, mailer)
    except MailerError as exc:
        logger.warning("Verification email for user %s failed: %s", user.user_id, exc)
        if web_session is not None:
            web_session.flash("error", "We could not send your verification code. Use the resend button to try again.")
            sessions.save(web_session)
    return {
        "message": "Your profile has been updated. Verify your new email address.",
        "redirect": "/email-verification",
        "user": profile,
    }


@router.post("/change-password", summary="Change the account password")
async def change_password(
    payload: ChangePasswordRequest,
    current_user: VerifiedUserDep,
    db: SessionDep,
) -> dict[str, Any]:
    user_service.change_password(db, current_user, payload.current_password, payload.new_password)
    return {"message": "Your password has been changed."}


@router.post("/delete-account", summary="Delete the account and end the session")
async def delete_account(
    payload: DeleteAccountRequest,
    response: Response,
    current_user: CurrentUserDep,
    web_session: WebSessionDep,
    db: SessionDep,
    sessions: SessionStoreDep,
) -> dict[str, Any]:
    """Delete the signed-in account once its email address is confirmed."""
    user_service.delete_account(db, current_user, payload.email)
    if web_session is not None:
        sessions.destroy(web_session.session_id)
    response.delete_cookie(settings.session_cookie_name)
    return {"message": "Your account has been deleted.", "redirect": "/"}
