"""Storage for short-lived email verification codes."""

from __future__ import annotations

import logging
import secrets
import time
from threading import Lock
from typing import Final

import redis

from deiwy.core.settings import settings

logger = logging.getLogger(__name__)

_CODE_MIN: Final[int] = 100_000
_CODE_MAX: Final[int] = 999_999
_CODE_CACHE: dict[str, tuple[str, float]] = {}
_CACHE_LOCK = Lock()


def generate_code() -> str:
    """Return a random six-digit verification code."""
    return str(_CODE_MIN + secrets.randbelow(_CODE_MAX - _CODE_MIN + 1))


def _key(user_id: int) -> str:
    return f"email_verification:{user_id}"


def _sweep_expired(now: float) -> None:
    # Caller holds _CACHE_LOCK.
    for key in [k for k, (_, expiry) in _CODE_CACHE.items() if expiry <= now]:
        del _CODE_CACHE[key]


class VerificationCodeStore:
    """Keeps the latest verification code per user for a limited time.

    Uses Redis when ``REDIS_URL`` is configured and an in-process cache
    otherwise.
    """

    def __init__(self, ttl_seconds: int | None = None) -> None:
        self._ttl_seconds = ttl_seconds or settings.verification_code_ttl_seconds
        self._redis: redis.Redis | None = None
        if settings.redis_url:
            self._redis = redis.from_url(settings.redis_url, decode_responses=True)

    def issue(self, user_id: int) -> str:
        """Generate, store and return a fresh code, replacing any previous one."""
        code = generate_code()
        if self._redis is not None:
            self._redis.set(_key(user_id), code, ex=self._ttl_seconds)
        else:
            now = time.time()
            with _CACHE_LOCK:
                _sweep_expired(now)
                _CODE_CACHE[_key(user_id)] = (code, now + self._ttl_seconds)
        logger.debug("Issued verification code for user %s", user_id)
        return code

    def peek(self, user_id: int) -> str | None:
        """Return the stored code for ``user_id`` if it has not expired."""
        if self._redis is not None:
            value = self._redis.get(_key(user_id))
            return str(value) if value is not None else None
        with _CACHE_LOCK:
            entry = _CODE_CACHE.get(_key(user_id))
            if entry is None:
                return None
            code, expiry = entry
            if expiry <= time.time():
                _CODE_CACHE.pop(_key(user_id), None)
                return None
            return code

    def discard(self, user_id: int) -> None:
        """Forget the code stored for ``user_id``."""
        if self._redis is not None:
            self._redis.delete(_key(user_id))
            return
        with _CACHE_LOCK:
            _CODE_CACHE.pop(_key(user_id), None)


def get_verification_store() -> VerificationCodeStore:
    """Return a verification code store instance."""
    return VerificationCodeStore()
