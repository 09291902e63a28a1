"""Conversation endpoints."""

from __future__ import annotations

import uuid
from typing import Annotated

from fastapi import APIRouter, Query, Response, status

from deiwy.api.v1.dependencies import SessionDep, VerifiedUserDep
from deiwy.schemas.conversation import (
    ConversationCreate,
    ConversationResponse,
    MessageCreate,
    MessagePage,
    MessageResponse,
)
from deiwy.services import conversation_service

router = APIRouter(prefix="/conversations", tags=["conversations"])


@router.post("/", response_model=ConversationResponse, status_code=status.HTTP_201_CREATED)
async def create_conversation(
    payload: ConversationCreate,
    response: Response,
    current_user: VerifiedUserDep,
    db: SessionDep,
) -> ConversationResponse:
    """Start a conversation.

    Returns 200 instead of 201 when a one-to-one conversation with the same
    member already exists.
    """
    conversation, created = conversation_service.create_conversation(db, current_user, payload)
    if not created:
        response.status_code = status.HTTP_200_OK
    return conversation_service.to_conversation_response(conversation, current_user)


@router.get("/", response_model=list[ConversationResponse])
async def list_conversations(current_user: VerifiedUserDep, db: SessionDep) -> list[ConversationResponse]:
    """List the caller's conversations, most recently active first."""
    return [
        conversation_service.to_conversation_response(conversation, current_user, unseen)
        for conversation, unseen in conversation_service.list_conversations(db, current_user)
    ]


@router.delete("/{conversation_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_conversation(
    conversation_id: uuid.UUID,
    current_user: VerifiedUserDep,
    db: SessionDep,
) -> Response:
    conversation_service.delete_conversation(db, conversation_id, current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{conversation_id}/messages", response_model=MessagePage)
async def list_messages(
    conversation_id: uuid.UUID,
    current_user: VerifiedUserDep,
    db: SessionDep,
    page: Annotated[int, Query(ge=0)] = 0,
) -> MessagePage:
    """Return one page of messages, newest first."""
    conversation = conversation_service.get_member_conversation(db, conversation_id, current_user)
    messages, has_next_page = conversation_service.get_messages(db, conversation, page)
    return conversation_service.to_message_page(messages, has_next_page, current_user)


@router.post(
    "/{conversation_id}/messages",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
)
async def send_message(
    conversation_id: uuid.UUID,
    payload: MessageCreate,
    current_user: VerifiedUserDep,
    db: SessionDep,
) -> MessageResponse:
    conversation = conversation_service.get_member_conversation(db, conversation_id, current_user)
    message = conversation_service.send_message(db, conversation, current_user, payload)
    return conversation_service.to_message_response(message, current_user)
