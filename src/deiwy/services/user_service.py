"""Account registration, sign-in and email verification."""
from __future__ import annotations

import hmac
import logging
from datetime import timedelta

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from deiwy.core import security
from deiwy.core.errors import (
    ChangePasswordError,
    ConstraintError,
    DeleteAccountError,
    EmailError,
    InvalidCredentialsError,
    ResetPasswordError,
    UserNotFoundError,
    VerificationCodeError,
)
from deiwy.db.time import utcnow
from deiwy.models import SchemaValidationError, User
from deiwy.models.user import generate_userkey
from deiwy.schemas.auth import RegisterRequest
from deiwy.schemas.user import ProfileUpdateRequest
from deiwy.services.mailer import Mailer
from deiwy.services.verification import VerificationCodeStore

logger = logging.getLogger(__name__)

__all__ = [
    "get_user",
    "get_user_by_email",
    "register_user",
    "authenticate",
    "send_verification_code",
    "verify_email",
    "mask_email",
    "delete_unverified_users",
    "request_password_reset",
    "reset_password",
    "change_password",
    "update_profile",
    "delete_account",
]


def get_user(db: Session, user_id: int) -> User | None:
    """Return a single user by primary key."""
    return db.get(User, user_id)


def get_user_by_email(db: Session, email: str) -> User | None:
    """Return the user registered with ``email`` (case-insensitive)."""
    return db.query(User).filter(User.email == email.strip().lower()).first()


def register_user(db: Session, payload: RegisterRequest) -> User:
    """Persist a new, unverified account.

    Raises:
        SchemaValidationError: If a field does not satisfy its pattern.
        ConstraintError: If the email address is already registered.
    """
    user = User(
        firstname=payload.firstname,
        lastname=payload.lastname,
        username=payload.username,
        email=payload.email,
        password=payload.password,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ConstraintError("This email address is already registered.") from exc
    db.refresh(user)
    logger.info("Registered user %s", user.userkey)
    return user


def authenticate(db: Session, email: str, password: str) -> User:
    """Return the user matching the credentials or raise InvalidCredentialsError."""
    user = get_user_by_email(db, email)
    if user is None or not user.check_password(password):
        raise InvalidCredentialsError()
    return user


def send_verification_code(user: User, store: VerificationCodeStore, mailer: Mailer) -> None:
    """Issue a new code for ``user`` and email it."""
    if user.is_verified:
        raise EmailError("AlreadyVerified", "Your email address is already verified.", redirect="/chat")
    code = store.issue(user.user_id)
    mailer.send_verification_code(user.username, user.email, code)


def verify_email(db: Session, user: User, code: str, store: VerificationCodeStore) -> User:
    """Mark ``user`` verified if ``code`` matches the stored one.

    The code is single use; it is discarded on success.
    """
    stored = store.peek(user.user_id)
    if stored is None:
        raise VerificationCodeError("Expired", "The verification code has expired. Request a new one.")
    if stored != code.strip():
        raise VerificationCodeError("Invalid", "The verification code is incorrect.")

    store.discard(user.user_id)
    user.is_verified = True
    user.last_verified_at = utcnow()
    db.commit()
    db.refresh(user)
    logger.info("Verified email for user %s", user.userkey)
    return user


def mask_email(email: str) -> str:
    """Hide all but the first character of the local part: ``j***@x.com``."""
    local, sep, domain = email.partition("@")
    if not sep:
        return email
    return f"{local[:1]}***@{domain}"


def delete_unverified_users(db: Session, older_than_days: int = 3) -> int:
    """Remove accounts created before the cutoff that were never verified.

    Returns the number of deleted users.
    """
    cutoff = utcnow() - timedelta(days=older_than_days)
    stale = (
        db.query(User)
        .filter(
            User.is_verified.is_(False),
            User.last_verified_at.is_(None),
            User.created_at < cutoff,
        )
        .all()
    )
    for user in stale:
        db.delete(user)
    db.commit()
    if stale:
        logger.info("Deleted %d unverified accounts", len(stale))
    return len(stale)


def request_password_reset(db: Session, email: str, mailer: Mailer) -> User:
    """Email a reset-password link to the account registered with ``email``.

    Raises:
        UserNotFoundError: If no account uses that address.
        MailerError: If the email could not be sent.
    """
    user = get_user_by_email(db, email)
    if user is None:
        raise UserNotFoundError()
    token = security.create_password_reset_token(user.user_id, user.password)
    mailer.send_password_reset(user.username, user.email, token)
    logger.info("Password reset requested for user %s", user.userkey)
    return user


def reset_password(db: Session, token: str, new_password: str) -> User:
    """Set a new password for the user named by a reset token.

    A token stops working once the password it was issued against changes,
    so each link can be used only once.
    """
    claims = security.read_password_reset_token(token)
    if claims is None:
        raise ResetPasswordError()
    user_id, fingerprint = claims
    user = db.get(User, user_id)
    if user is None or not hmac.compare_digest(fingerprint, security.password_fingerprint(user.password)):
        raise ResetPasswordError()

    user.password = new_password
    db.commit()
    logger.info("Password reset for user %s", user.userkey)
    return user


def change_password(db: Session, user: User, current_password: str, new_password: str) -> User:
    if not user.check_password(current_password):
        raise ChangePasswordError()
    user.password = new_password
    db.commit()
    logger.info("Password changed for user %s", user.userkey)
    return user


def update_profile(
    db: Session,
    user: User,
    payload: ProfileUpdateRequest,
) -> tuple[User, bool]:
    """Apply the submitted profile fields and return ``(user, email_changed)``.

    A new email address has to be verified again, so the account drops back
    to unverified. A new username gets a fresh ``userkey``.
    """
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    email_changed = "email" in changes and changes["email"].strip().lower() != user.email
    username_changed = "username" in changes and changes["username"] != user.username

    try:
        for field, value in changes.items():
            setattr(user, field, value)
    except SchemaValidationError:
        db.expire(user)
        raise

    if username_changed:
        user.userkey = generate_userkey(user.username)
    if email_changed:
        user.is_verified = False
        user.last_verified_at = None

    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ConstraintError("This email address is already registered.") from exc
    db.refresh(user)
    logger.info("Profile updated for user %s (fields: %s)", user.userkey, ", ".join(sorted(changes)))
    return user, email_changed


def delete_account(db: Session, user: User, email: str) -> None:
    """Delete the account once the caller has typed its email address again."""
    if email.strip().lower() != user.email:
        raise DeleteAccountError()
    userkey = user.userkey
    db.delete(user)
    db.commit()
    logger.info("Deleted account %s", userkey)
