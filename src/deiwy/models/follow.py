"""Follow relations between users."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Index, Integer, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from deiwy.db.session import Base
from deiwy.db.time import utcnow

if TYPE_CHECKING:
    from .user import User


class Follow(Base):
    """``follower`` follows ``followed``; a self-referencing many-to-many on users."""

    __tablename__ = "follows"
    __table_args__ = (
        Index("idx_follow_followed_id", "followed_id"),
        Index("idx_follow_follower_id", "follower_id"),
    )

    follower_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.user_id", ondelete="CASCADE"),
        primary_key=True,
    )
    followed_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.user_id", ondelete="CASCADE"),
        primary_key=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.current_timestamp(),
    )

    follower: Mapped[User] = relationship(
        "User",
        foreign_keys=[follower_id],
        back_populates="following",
    )
    followed: Mapped[User] = relationship(
        "User",
        foreign_keys=[followed_id],
        back_populates="followers",
    )
