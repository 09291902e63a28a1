"""Models describing conversations and their membership."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Uuid, false, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from deiwy.db.session import Base
from deiwy.db.time import utcnow

if TYPE_CHECKING:
    from .message import Message
    from .user import User


class Conversation(Base):
    """A one-to-one or group conversation.

    ``created_by`` is the user who started the conversation; for groups it is
    the admin. It is a plain column: users are linked to conversations only
    through :class:`Member`.

    ``last_message_at`` orders conversation lists and, while still null, hides
    one-to-one conversations from everyone except their creator.
    """

    __tablename__ = "conversations"

    conversation_id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    image: Mapped[str | None] = mapped_column(String(512), nullable=True)
    is_group: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=false(),
    )
    created_by: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    last_message_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    memberships: Mapped[list[Member]] = relationship(
        "Member",
        back_populates="conversation",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    members: Mapped[list[User]] = relationship(
        "User",
        secondary="members",
        back_populates="conversations",
        viewonly=True,
    )
    messages: Mapped[list[Message]] = relationship(
        "Message",
        back_populates="conversation",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class Member(Base):
    """Association between a user and a conversation they take part in."""

    __tablename__ = "members"

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.user_id", ondelete="CASCADE"),
        primary_key=True,
    )
    conversation_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("conversations.conversation_id", ondelete="CASCADE"),
        primary_key=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.current_timestamp(),
    )
    is_admin: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    user: Mapped[User] = relationship("User", back_populates="memberships")
    conversation: Mapped[Conversation] = relationship("Conversation", back_populates="memberships")
