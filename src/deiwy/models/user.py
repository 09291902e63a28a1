"""SQLAlchemy models for user accounts."""

from __future__ import annotations

import re
import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import Boolean, DateTime, Integer, String, event
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from deiwy.core import security
from deiwy.db.session import Base
from deiwy.db.time import utcnow

if TYPE_CHECKING:
    from .contact import Contact
    from .conversation import Conversation, Member
    from .follow import Follow
    from .message import Message, MessageStatus

USERNAME_PATTERN = re.compile(r"^[A-Za-z\d_-]{3,20}$")
NAME_PATTERN = re.compile(r"^[A-Za-z]{2,30}$")
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
PASSWORD_PATTERN = re.compile(
    r"^(?=.*[A-Z])(?=.*[a-z])(?=.*\d)(?=.*[@$!%*?&])[A-Za-z\d@$!%*?&*]{8,}$"
)


class SchemaValidationError(ValueError):
    """Raised when a column value does not satisfy its declared pattern."""

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        super().__init__(f"{field}: {message}")


def generate_userkey(username: str) -> str:
    """Return ``username#NNNN`` with a random four-digit discriminator."""
    return f"{username}#{uuid.uuid4().int % 10000}"


class User(Base):
    """Registered account.

    Pattern checks run when an attribute is assigned, so constructing or
    updating a user with an invalid value fails before anything is flushed.
    Passwords are checked against the complexity rule in plain text and then
    stored hashed.
    """

    __tablename__ = "users"

    user_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    firstname: Mapped[str] = mapped_column(String(30), nullable=False)
    lastname: Mapped[str] = mapped_column(String(30), nullable=False)
    username: Mapped[str] = mapped_column(String(20), nullable=False)
    userkey: Mapped[str] = mapped_column(String(32), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    password: Mapped[str] = mapped_column(String(255), nullable=False)
    image: Mapped[str | None] = mapped_column(String(512), nullable=True)
    is_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    last_verified_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    contacts: Mapped[list[Contact]] = relationship(
        "Contact",
        back_populates="owner",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    messages: Mapped[list[Message]] = relationship(
        "Message",
        back_populates="sender",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    memberships: Mapped[list[Member]] = relationship(
        "Member",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    conversations: Mapped[list[Conversation]] = relationship(
        "Conversation",
        secondary="members",
        back_populates="members",
        viewonly=True,
    )
    message_statuses: Mapped[list[MessageStatus]] = relationship(
        "MessageStatus",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    following: Mapped[list[Follow]] = relationship(
        "Follow",
        foreign_keys="Follow.follower_id",
        back_populates="follower",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    followers: Mapped[list[Follow]] = relationship(
        "Follow",
        foreign_keys="Follow.followed_id",
        back_populates="followed",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @validates("username")
    def _validate_username(self, key: str, value: str) -> str:
        if value is None or not USERNAME_PATTERN.fullmatch(value):
            raise SchemaValidationError(
                key,
                "must be 3-20 letters, digits, underscores or hyphens",
            )
        return value

    @validates("firstname", "lastname")
    def _validate_name(self, key: str, value: str) -> str:
        if value is None or not NAME_PATTERN.fullmatch(value):
            raise SchemaValidationError(key, "must be 2-30 letters")
        return value

    @validates("email")
    def _validate_email(self, key: str, value: str) -> str:
        if not value:
            raise SchemaValidationError(key, "must not be empty")
        value = value.strip().lower()
        if not EMAIL_PATTERN.fullmatch(value):
            raise SchemaValidationError(key, "must be a valid email address")
        return value

    @validates("password")
    def _validate_password(self, key: str, value: str) -> str:
        if value and security.is_password_hash(value):
            return value
        if value is None or not PASSWORD_PATTERN.fullmatch(value):
            raise SchemaValidationError(
                key,
                "must be at least 8 characters with upper and lower case letters, "
                "a digit and one of @$!%*?&",
            )
        return security.hash_password(value)

    def check_password(self, candidate: str) -> bool:
        """Return True if ``candidate`` matches the stored password hash."""
        return security.verify_password(candidate, self.password)

    def __repr__(self) -> str:
        return f"User(user_id={self.user_id!r}, userkey={self.userkey!r})"


@event.listens_for(User, "before_insert")
def _assign_userkey(mapper: Any, connection: Any, target: User) -> None:
    if not target.userkey:
        target.userkey = generate_userkey(target.username)
