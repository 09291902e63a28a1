"""Authentication endpoints backing the sign-in and email verification pages."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Response, status

from deiwy.api.v1.dependencies import (
    CurrentUserDep,
    MailerDep,
    PageUserDep,
    SessionDep,
    SessionStoreDep,
    VerificationStoreDep,
    WebSessionDep,
)
from deiwy.core.errors import MailerError
from deiwy.core.security import sign_session_id
from deiwy.core.settings import settings
from deiwy.schemas.auth import (
    EmailVerificationInfo,
    ForgotPasswordRequest,
    RegisterRequest,
    ResendVerificationRequest,
    ResetPasswordRequest,
    SignInRequest,
    VerifyEmailRequest,
)
from deiwy.services import user_service
from deiwy.services.session_store import USER_KEY, SessionState

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["authentication"])


def _set_session_cookie(response: Response, state: SessionState, max_age: int) -> None:
    response.set_cookie(
        key=settings.session_cookie_name,
        value=sign_session_id(state.session_id),
        max_age=max_age,
        httponly=True,
        samesite="lax",
        secure=settings.session_cookie_secure,
    )


@router.post(
    "/register",
    summary="Create an account and send its verification code",
    status_code=status.HTTP_201_CREATED,
)
def register(
    payload: RegisterRequest,
    response: Response,
    db: SessionDep,
    sessions: SessionStoreDep,
    codes: VerificationStoreDep,
    mailer: MailerDep,
) -> dict[str, Any]:
    """Register a new user, sign them in and email a verification code."""
    user = user_service.register_user(db, payload)

    state = sessions.create({USER_KEY: user.user_id})
    try:
        user_service.send_verification_code(user, codes, mailer)
    except MailerError as exc:
        logger.warning("Verification email for user %s failed: %s", user.user_id, exc)
        state.flash("error", "We could not send your verification code. Use the resend button to try again.")
        sessions.save(state)

    _set_session_cookie(response, state, settings.session_ttl_seconds)
    return {
        "message": "Your account has been created. Check your inbox for the verification code.",
        "redirect": "/email-verification",
    }


@router.post("/sign-in", summary="Sign in with email and password")
async def sign_in(
    payload: SignInRequest,
    response: Response,
    db: SessionDep,
    sessions: SessionStoreDep,
) -> dict[str, Any]:
    """Start a session; unverified accounts are sent to the verification page."""
    user = user_service.authenticate(db, payload.email, payload.password)
    ttl = settings.session_remember_ttl_seconds if payload.remember_me else settings.session_ttl_seconds
    state = sessions.create({USER_KEY: user.user_id}, ttl_seconds=ttl)
    _set_session_cookie(response, state, ttl)
    logger.info("User %s signed in", user.user_id)
    return {"redirect": "/chat" if user.is_verified else "/email-verification"}


@router.get("/info/email-verification", summary="Details for the email verification page")
async def email_verification_info(
    user: PageUserDep,
    web_session: WebSessionDep,
    sessions: SessionStoreDep,
) -> dict[str, Any]:
    """Return the masked email, first name and queued flash messages."""
    if user.is_verified:
        return {"redirect": "/chat"}

    flash_messages: dict[str, str] = {}
    if web_session is not None:
        flash_messages = web_session.consume_flash()
        if flash_messages:
            sessions.save(web_session)

    info = EmailVerificationInfo(
        email=user_service.mask_email(user.email),
        firstname=user.firstname,
        flash_messages=flash_messages or None,
    )
    return {"message": info.model_dump(by_alias=True, exclude_none=True)}


@router.post("/verify-email", summary="Verify the account email with a code")
async def verify_email(
    payload: VerifyEmailRequest,
    user: PageUserDep,
    web_session: WebSessionDep,
    db: SessionDep,
    sessions: SessionStoreDep,
    codes: VerificationStoreDep,
) -> dict[str, Any]:
    if user.is_verified:
        return {"redirect": "/chat"}

    user_service.verify_email(db, user, payload.verification_code, codes)
    if web_session is not None:
        web_session.flash("success", "Your email address has been verified.")
        sessions.save(web_session)
    return {"redirect": "/chat"}


@router.post("/request-email-verification", summary="Send a new verification code")
def request_email_verification(
    payload: ResendVerificationRequest,
    user: PageUserDep,
    codes: VerificationStoreDep,
    mailer: MailerDep,
) -> dict[str, Any]:
    """Email a fresh code to the signed-in user.

    The displayed name and email are echoed back by the page; the code always
    goes to the address stored on the account.
    """
    logger.debug("Resend requested for user %s (page showed %s)", user.user_id, payload.email)
    user_service.send_verification_code(user, codes, mailer)
    return {"message": f"A new verification code has been sent to {user_service.mask_email(user.email)}."}


@router.post("/forgot-password", summary="Email a reset-password link")
def forgot_password(payload: ForgotPasswordRequest, db: SessionDep, mailer: MailerDep) -> dict[str, Any]:
    """Send a reset-password link to the account registered with the given email.

    Runs in the threadpool, like every handler that talks to the SMTP relay.
    """
    user = user_service.request_password_reset(db, payload.email, mailer)
    return {"message": f"A password reset link has been sent to {user_service.mask_email(user.email)}."}


@router.post("/reset-password", summary="Choose a new password from a reset link")
async def reset_password(payload: ResetPasswordRequest, db: SessionDep) -> dict[str, Any]:
    user_service.reset_password(db, payload.token, payload.password)
    return {"message": "Your password has been reset. Sign in with your new password.", "redirect": "/sign-in"}


@router.post("/sign-out", summary="End the current session")
async def sign_out(
    response: Response,
    user: CurrentUserDep,
    web_session: WebSessionDep,
    sessions: SessionStoreDep,
) -> dict[str, Any]:
    if web_session is not None:
        sessions.destroy(web_session.session_id)
    response.delete_cookie(settings.session_cookie_name)
    logger.info("User %s signed out", user.user_id)
    return {"redirect": "/"}
