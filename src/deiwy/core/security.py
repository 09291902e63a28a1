"""Password hashing, session-cookie signing and password-reset tokens."""
from __future__ import annotations

import base64
import hashlib
import hmac
import secrets
from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt

from deiwy.core.settings import settings

_SCRYPT_N = 2**14
_SCRYPT_R = 8
_SCRYPT_P = 1
_SALT_BYTES = 16
_HASH_PREFIX = "scrypt"


def _b64(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).decode().rstrip("=")


def _unb64(data: str) -> bytes:
    padding = "=" * (-len(data) % 4)
    return base64.urlsafe_b64decode(data + padding)


def _derive(password: str, salt: bytes) -> bytes:
    return hashlib.scrypt(
        password.encode("utf-8"),
        salt=salt,
        n=_SCRYPT_N,
        r=_SCRYPT_R,
        p=_SCRYPT_P,
    )


def hash_password(password: str) -> str:
    """Return a salted scrypt hash in the form ``scrypt$<salt>$<digest>``."""
    salt = secrets.token_bytes(_SALT_BYTES)
    return f"{_HASH_PREFIX}${_b64(salt)}${_b64(_derive(password, salt))}"


def is_password_hash(value: str) -> bool:
    """Return True if ``value`` was produced by :func:`hash_password`."""
    return value.startswith(f"{_HASH_PREFIX}$") and value.count("$") == 2


def verify_password(password: str, hashed: str) -> bool:
    """Check ``password`` against a hash produced by :func:`hash_password`."""
    if not is_password_hash(hashed):
        return False
    _, salt_b64, digest_b64 = hashed.split("$")
    expected = _unb64(digest_b64)
    return hmac.compare_digest(_derive(password, _unb64(salt_b64)), expected)


def sign_session_id(session_id: str) -> str:
    """Wrap a session id in a signed token suitable for a cookie value."""
    encoded: str = jwt.encode(
        {"sid": session_id},
        settings.secret_key,
        algorithm=settings.jwt_algorithm,
    )
    return encoded


def read_session_id(token: str | None) -> str | None:
    """Return the session id carried by a signed cookie, or None if it is invalid."""
    if not token:
        return None
    try:
        payload = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError:
        return None
    sid = payload.get("sid")
    return sid if isinstance(sid, str) else None


_RESET_PURPOSE = "password_reset"


def password_fingerprint(password_hash: str) -> str:
    """Short digest of a stored hash; changes whenever the password does."""
    return hashlib.sha256(password_hash.encode("utf-8")).hexdigest()[:16]


def create_password_reset_token(user_id: int, password_hash: str) -> str:
    """Return a signed, expiring token for the reset-password link.

    The token embeds a fingerprint of the current password hash, so it stops
    working once the password has been changed.
    """
    expire = datetime.now(UTC) + timedelta(seconds=settings.password_reset_ttl_seconds)
    encoded: str = jwt.encode(
        {
            "sub": str(user_id),
            "purpose": _RESET_PURPOSE,
            "pwd": password_fingerprint(password_hash),
            "exp": expire,
        },
        settings.secret_key,
        algorithm=settings.jwt_algorithm,
    )
    return encoded


def read_password_reset_token(token: str | None) -> tuple[int, str] | None:
    """Return ``(user_id, password_fingerprint)`` from a valid reset token."""
    if not token:
        return None
    try:
        payload = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError:
        return None
    if payload.get("purpose") != _RESET_PURPOSE:
        return None
    try:
        return int(payload["sub"]), str(payload["pwd"])
    except (KeyError, TypeError, ValueError):
        return None
