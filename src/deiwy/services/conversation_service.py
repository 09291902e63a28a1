"""Conversations, their messages and per-recipient message status."""
from __future__ import annotations

import logging
import uuid

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session, selectinload

from deiwy.core.errors import ForbiddenError, NotFoundError, UserNotFoundError
from deiwy.core.settings import settings
from deiwy.db.soft_delete import INCLUDE_DELETED
from deiwy.db.time import utcnow
from deiwy.models import Conversation, Member, Message, MessageStatus, User
from deiwy.schemas.conversation import (
    ConversationCreate,
    ConversationResponse,
    MemberProfile,
    MessageCreate,
    MessagePage,
    MessageResponse,
    MessageStatusResponse,
)

logger = logging.getLogger(__name__)


def find_direct_conversation(db: Session, user_id: int, other_id: int) -> Conversation | None:
    """Return the existing one-to-one conversation between two users, if any."""
    mine = select(Member.conversation_id).where(Member.user_id == user_id)
    theirs = select(Member.conversation_id).where(Member.user_id == other_id)
    return (
        db.query(Conversation)
        .filter(
            Conversation.is_group.is_(False),
            Conversation.conversation_id.in_(mine),
            Conversation.conversation_id.in_(theirs),
        )
        .first()
    )


def create_conversation(
    db: Session,
    current_user: User,
    payload: ConversationCreate,
) -> tuple[Conversation, bool]:
    """Start a conversation, returning ``(conversation, created)``.

    A one-to-one conversation that already exists between the two users is
    returned as is. In a group the creator becomes an admin member.
    """
    member_ids = [uid for uid in dict.fromkeys(payload.member_ids) if uid != current_user.user_id]
    if not member_ids:
        raise ForbiddenError("You cannot start a conversation with yourself.")

    found = db.query(User.user_id).filter(User.user_id.in_(member_ids)).count()
    if found != len(member_ids):
        raise UserNotFoundError()

    if not payload.is_group:
        existing = find_direct_conversation(db, current_user.user_id, member_ids[0])
        if existing is not None:
            return existing, False

    conversation = Conversation(
        name=payload.name if payload.is_group else None,
        image=payload.image if payload.is_group else None,
        is_group=payload.is_group,
        created_by=current_user.user_id,
        created_at=utcnow(),
    )
    conversation.memberships.append(
        Member(user_id=current_user.user_id, is_admin=payload.is_group)
    )
    for member_id in member_ids:
        conversation.memberships.append(Member(user_id=member_id))

    db.add(conversation)
    db.commit()
    db.refresh(conversation)
    logger.info(
        "User %s created %s conversation %s",
        current_user.user_id,
        "group" if conversation.is_group else "direct",
        conversation.conversation_id,
    )
    return conversation, True


def list_conversations(db: Session, current_user: User) -> list[tuple[Conversation, int]]:
    """Return the caller's visible conversations with their unseen message counts.

    A conversation is listed when the caller created it, when it has
    messages, or when it is a group. Newest activity comes first.
    """
    unseen = (
        select(func.count())
        .select_from(MessageStatus)
        .join(Message, Message.message_id == MessageStatus.message_id)
        .where(
            MessageStatus.user_id == current_user.user_id,
            Message.conversation_id == Conversation.conversation_id,
            MessageStatus.deliver_at.is_not(None),
            MessageStatus.seen_at.is_(None),
        )
        .correlate(Conversation)
        .scalar_subquery()
    )
    mine = select(Member.conversation_id).where(Member.user_id == current_user.user_id)

    rows = db.execute(
        select(Conversation, unseen.label("unseen_messages_count"))
        .where(
            Conversation.conversation_id.in_(mine),
            or_(
                Conversation.created_by == current_user.user_id,
                Conversation.last_message_at.is_not(None),
                Conversation.is_group.is_(True),
            ),
        )
        .options(selectinload(Conversation.memberships).selectinload(Member.user))
        .order_by(
            func.coalesce(Conversation.last_message_at, Conversation.created_at).desc()
        )
    ).all()
    return [(conversation, int(count or 0)) for conversation, count in rows]


def get_member_conversation(db: Session, conversation_id: uuid.UUID, current_user: User) -> Conversation:
    """Return the conversation if the caller is one of its members."""
    conversation = db.get(Conversation, conversation_id)
    if conversation is None:
        raise NotFoundError("Conversation not found.")
    membership = db.get(Member, (current_user.user_id, conversation_id))
    if membership is None:
        raise ForbiddenError("You are not a member of this conversation.")
    return conversation


def get_messages(
    db: Session,
    conversation: Conversation,
    page: int = 0,
) -> tuple[list[Message], bool]:
    """Return one batch of messages, newest first, and whether more exist.

    Soft-deleted messages are included so the history keeps its shape.
    """
    batch = settings.messages_batch_size
    messages = list(
        db.scalars(
            select(Message)
            .where(Message.conversation_id == conversation.conversation_id)
            .options(selectinload(Message.statuses), selectinload(Message.sender))
            .order_by(Message.sent_at.desc())
            .offset(page * batch)
            .limit(batch + 1)
            .execution_options(**{INCLUDE_DELETED: True})
        )
    )
    has_next_page = len(messages) > batch
    return messages[:batch], has_next_page


def send_message(
    db: Session,
    conversation: Conversation,
    sender: User,
    payload: MessageCreate,
) -> Message:
    """Store a message and a delivery status row for every other member."""
    now = utcnow()
    message = Message(
        conversation_id=conversation.conversation_id,
        sender_id=sender.user_id,
        content=payload.content,
        file_url=payload.file_url,
        sent_at=now,
        updated_at=now,
    )
    recipients = db.scalars(
        select(Member.user_id).where(
            Member.conversation_id == conversation.conversation_id,
            Member.user_id != sender.user_id,
        )
    ).all()
    for recipient_id in recipients:
        message.statuses.append(MessageStatus(user_id=recipient_id, deliver_at=now))

    conversation.last_message_at = now
    db.add(message)
    db.commit()
    db.refresh(message)
    return message


def mark_seen(db: Session, message_id: uuid.UUID, current_user: User) -> MessageStatus:
    """Record that the caller has seen a message addressed to them."""
    status_row = db.get(MessageStatus, (current_user.user_id, message_id))
    if status_row is None:
        raise NotFoundError("Message not found.")
    now = utcnow()
    if status_row.deliver_at is None:
        status_row.deliver_at = now
    if status_row.seen_at is None:
        status_row.seen_at = now
    db.commit()
    return status_row


def delete_message(db: Session, message_id: uuid.UUID, current_user: User) -> Message:
    """Soft-delete one of the caller's own messages."""
    message = db.scalars(select(Message).where(Message.message_id == message_id)).first()
    if message is None:
        raise NotFoundError("Message not found.")
    if message.sender_id != current_user.user_id:
        raise ForbiddenError("You can only delete your own messages.")
    message.soft_delete()
    db.commit()
    return message


def delete_conversation(db: Session, conversation_id: uuid.UUID, current_user: User) -> None:
    """Delete a conversation together with its members and messages."""
    conversation = db.get(Conversation, conversation_id)
    if conversation is None:
        raise NotFoundError("Conversation not found.")
    if conversation.created_by != current_user.user_id:
        raise ForbiddenError("Only the creator can delete this conversation.")
    db.delete(conversation)
    db.commit()
    logger.info("Conversation %s deleted by user %s", conversation_id, current_user.user_id)


def _profile(user: User) -> MemberProfile:
    return MemberProfile(user_id=user.user_id, username=user.username, image=user.image)


def to_conversation_response(
    conversation: Conversation,
    current_user: User,
    unseen_messages_count: int = 0,
) -> ConversationResponse:
    """Shape a conversation for the caller; direct chats are named after the other member."""
    members = [membership.user for membership in conversation.memberships]
    name = conversation.name
    if not conversation.is_group and name is None:
        other = next((m for m in members if m.user_id != current_user.user_id), None)
        name = other.username if other is not None else None

    return ConversationResponse(
        conversation_id=conversation.conversation_id,
        name=name,
        image=conversation.image,
        is_group=conversation.is_group,
        created_by=conversation.created_by,
        created_at=conversation.created_at,
        last_message_at=conversation.last_message_at,
        members=[_profile(member) for member in members],
        admin_ids=(
            [m.user_id for m in conversation.memberships if m.is_admin]
            if conversation.is_group
            else None
        ),
        unseen_messages_count=unseen_messages_count,
    )


def to_message_response(message: Message, current_user: User) -> MessageResponse:
    """Shape a message; delivery details are only shown to its sender."""
    response = MessageResponse(
        message_id=message.message_id,
        conversation_id=message.conversation_id,
        content=None if message.is_deleted else message.content,
        file_url=None if message.is_deleted else message.file_url,
        sent_at=message.sent_at,
        updated_at=message.updated_at,
        deleted_at=message.deleted_at,
        sender=_profile(message.sender) if message.sender is not None else None,
    )
    if message.sender_id == current_user.user_id:
        response.status = [
            MessageStatusResponse.model_validate(status_row) for status_row in message.statuses
        ]
        response.deliver_count = sum(1 for s in message.statuses if s.deliver_at is not None)
        response.seen_count = sum(1 for s in message.statuses if s.seen_at is not None)
    return response


def to_message_page(messages: list[Message], has_next_page: bool, current_user: User) -> MessagePage:
    return MessagePage(
        has_next_page=has_next_page,
        items=[to_message_response(message, current_user) for message in messages],
    )
