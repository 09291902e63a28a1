"""Storage table used by the server-side session store."""

from sqlalchemy import Integer, LargeBinary, String
from sqlalchemy.orm import Mapped, mapped_column

from deiwy.db.session import Base


class WebSession(Base):
    """A browser session.

    ``expires`` is an absolute UNIX timestamp in seconds; ``data`` is an
    opaque payload owned by :mod:`deiwy.services.session_store`.
    """

    __tablename__ = "sessions"

    session_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    expires: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    data: Mapped[bytes | None] = mapped_column(LargeBinary, nullable=True)
