"""Server-side session storage backed by the ``sessions`` table."""

from __future__ import annotations

import json
import logging
import secrets
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import delete
from sqlalchemy.orm import Session

from deiwy.core.settings import settings
from deiwy.db.time import epoch_seconds
from deiwy.models import WebSession

logger = logging.getLogger(__name__)

FLASH_KEY = "flash"
USER_KEY = "user_id"


@dataclass
class SessionState:
    """Decoded contents of a stored session."""

    session_id: str
    expires: int
    data: dict[str, Any] = field(default_factory=dict)

    @property
    def user_id(self) -> int | None:
        value = self.data.get(USER_KEY)
        return int(value) if value is not None else None

    def flash(self, kind: str, message: str) -> None:
        """Queue a one-time message for the next page load."""
        self.data.setdefault(FLASH_KEY, {})[kind] = message

    def consume_flash(self) -> dict[str, str]:
        """Return and clear queued flash messages."""
        return self.data.pop(FLASH_KEY, None) or {}


def _encode(data: dict[str, Any]) -> bytes:
    return json.dumps(data, separators=(",", ":")).encode("utf-8")


def _decode(blob: bytes | None) -> dict[str, Any]:
    if not blob:
        return {}
    try:
        decoded = json.loads(blob.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError):
        logger.warning("Discarding undecodable session payload")
        return {}
    return decoded if isinstance(decoded, dict) else {}


class SessionStore:
    """Create, load, persist and destroy browser sessions.

    Expiry is an absolute UNIX timestamp; a row whose ``expires`` lies in the
    past is treated as missing and removed when it is next looked up.
    """

    def __init__(self, db: Session, ttl_seconds: int | None = None) -> None:
        self._db = db
        self._ttl_seconds = ttl_seconds or settings.session_ttl_seconds

    def create(self, data: dict[str, Any] | None = None, *, ttl_seconds: int | None = None) -> SessionState:
        """Persist a new session and return it."""
        state = SessionState(
            session_id=secrets.token_urlsafe(32),
            expires=epoch_seconds() + (ttl_seconds or self._ttl_seconds),
            data=dict(data or {}),
        )
        self._db.add(
            WebSession(
                session_id=state.session_id,
                expires=state.expires,
                data=_encode(state.data),
            )
        )
        self._db.commit()
        return state

    def load(self, session_id: str | None) -> SessionState | None:
        """Return the live session with ``session_id`` or None."""
        if not session_id:
            return None
        record = self._db.get(WebSession, session_id)
        if record is None:
            return None
        if record.expires <= epoch_seconds():
            logger.debug("Session %s expired", session_id)
            self._db.delete(record)
            self._db.commit()
            return None
        return SessionState(
            session_id=record.session_id,
            expires=record.expires,
            data=_decode(record.data),
        )

    def save(self, state: SessionState) -> None:
        """Write ``state.data`` and ``state.expires`` back to storage."""
        record = self._db.get(WebSession, state.session_id)
        if record is None:
            record = WebSession(session_id=state.session_id)
            self._db.add(record)
        record.expires = state.expires
        record.data = _encode(state.data)
        self._db.commit()

    def destroy(self, session_id: str) -> None:
        """Delete the session; unknown ids are ignored."""
        record = self._db.get(WebSession, session_id)
        if record is not None:
            self._db.delete(record)
            self._db.commit()

    def purge_expired(self) -> int:
        """Delete every expired session and return how many were removed."""
        result = self._db.execute(
            delete(WebSession).where(WebSession.expires <= epoch_seconds())
        )
        self._db.commit()
        removed = result.rowcount or 0
        if removed:
            logger.info("Purged %d expired sessions", removed)
        return removed
