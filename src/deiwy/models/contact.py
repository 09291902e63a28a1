"""Contact entries stored per user."""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from deiwy.db.session import Base

if TYPE_CHECKING:
    from .user import User


def _new_contact_id() -> str:
    return str(uuid.uuid4())


class Contact(Base):
    """Snapshot of another user's public details saved by ``owner``.

    Contacts carry no timestamps.
    """

    __tablename__ = "contacts"
    __table_args__ = (
        UniqueConstraint("user_id", "username", name="uq_contacts_user_id_username"),
    )

    contact_id: Mapped[str] = mapped_column(String(64), primary_key=True, default=_new_contact_id)
    username: Mapped[str | None] = mapped_column(String(20), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    image: Mapped[str | None] = mapped_column(String(512), nullable=True)
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.user_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    owner: Mapped[User] = relationship("User", back_populates="contacts")
