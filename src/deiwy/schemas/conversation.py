"""Conversation and message schemas."""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_serializer, model_validator

from deiwy.db.time import format_timestamp


class MemberProfile(BaseModel):
    """Public profile of a conversation member or message sender."""

    user_id: int
    username: str
    image: str | None = None

    model_config = ConfigDict(from_attributes=True)


class ConversationCreate(BaseModel):
    """Schema for starting a conversation."""

    member_ids: list[int] = Field(..., min_length=1, description="Other participants")
    is_group: bool = False
    name: str | None = Field(None, max_length=100)
    image: str | None = None

    @model_validator(mode="after")
    def _check_shape(self) -> "ConversationCreate":
        if not self.is_group and len(self.member_ids) != 1:
            raise ValueError("A one-to-one conversation needs exactly one other member")
        if self.is_group and not self.name:
            raise ValueError("Group conversations need a name")
        return self


class ConversationResponse(BaseModel):
    """Conversation as shown in the conversation list."""

    conversation_id: uuid.UUID
    name: str | None
    image: str | None
    is_group: bool
    created_by: int
    created_at: datetime
    last_message_at: datetime | None
    members: list[MemberProfile]
    admin_ids: list[int] | None = None
    unseen_messages_count: int = 0

    @field_serializer("created_at", "last_message_at")
    def _display_time(self, value: datetime | None) -> str | None:
        return format_timestamp(value)


class MessageCreate(BaseModel):
    """Schema for posting a message to a conversation."""

    content: str | None = Field(None, max_length=4000)
    file_url: str | None = Field(None, max_length=512)

    @model_validator(mode="after")
    def _require_body(self) -> "MessageCreate":
        if not self.content and not self.file_url:
            raise ValueError("A message needs content or a file")
        return self


class MessageStatusResponse(BaseModel):
    """Delivery state of a message for one recipient."""

    user_id: int
    deliver_at: datetime | None
    seen_at: datetime | None

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("deliver_at", "seen_at")
    def _display_time(self, value: datetime | None) -> str | None:
        return format_timestamp(value)


class MessageResponse(BaseModel):
    """Message as returned by the API.

    Soft-deleted messages keep their place in the history with ``content``
    and ``file_url`` blanked.
    """

    message_id: uuid.UUID
    conversation_id: uuid.UUID
    content: str | None
    file_url: str | None
    sent_at: datetime
    updated_at: datetime
    deleted_at: datetime | None
    sender: MemberProfile | None
    status: list[MessageStatusResponse] | None = None
    deliver_count: int | None = None
    seen_count: int | None = None

    @field_serializer("sent_at", "updated_at", "deleted_at")
    def _display_time(self, value: datetime | None) -> str | None:
        return format_timestamp(value)


class MessagePage(BaseModel):
    """A batch of messages, newest first."""

    has_next_page: bool
    items: list[MessageResponse]
