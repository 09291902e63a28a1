"""Models describing messages and their per-recipient delivery status."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from deiwy.db.session import Base
from deiwy.db.soft_delete import SoftDeleteMixin
from deiwy.db.time import utcnow

if TYPE_CHECKING:
    from .conversation import Conversation
    from .user import User


class Message(SoftDeleteMixin, Base):
    """Message posted to a conversation.

    Deleting a message stamps ``deleted_at``; the row stays so the
    conversation history keeps its shape.
    """

    __tablename__ = "messages"

    message_id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    content: Mapped[str | None] = mapped_column(Text, nullable=True)
    file_url: Mapped[str | None] = mapped_column(String(512), nullable=True)
    sent_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
    )
    sender_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.user_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    conversation_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("conversations.conversation_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    sender: Mapped[User] = relationship("User", back_populates="messages")
    conversation: Mapped[Conversation] = relationship("Conversation", back_populates="messages")
    statuses: Mapped[list[MessageStatus]] = relationship(
        "MessageStatus",
        back_populates="message",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def soft_delete(self, moment: datetime | None = None) -> None:
        """Mark the message as deleted without removing the row."""
        self.deleted_at = moment or utcnow()


class MessageStatus(Base):
    """Delivery and seen timestamps of a message for one recipient."""

    __tablename__ = "messagestatus"

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.user_id", ondelete="CASCADE"),
        primary_key=True,
    )
    message_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("messages.message_id", ondelete="CASCADE"),
        primary_key=True,
    )
    deliver_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    seen_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    user: Mapped[User] = relationship("User", back_populates="message_statuses")
    message: Mapped[Message] = relationship("Message", back_populates="statuses")
