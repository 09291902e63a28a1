"""Per-message actions."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Response, status

from deiwy.api.v1.dependencies import SessionDep, VerifiedUserDep
from deiwy.schemas.conversation import MessageStatusResponse
from deiwy.services import conversation_service

router = APIRouter(prefix="/messages", tags=["messages"])


@router.put("/{message_id}/seen", response_model=MessageStatusResponse)
async def mark_seen(message_id: uuid.UUID, current_user: VerifiedUserDep, db: SessionDep) -> MessageStatusResponse:
    """Mark a received message as seen."""
    status_row = conversation_service.mark_seen(db, message_id, current_user)
    return MessageStatusResponse.model_validate(status_row)


@router.delete("/{message_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_message(message_id: uuid.UUID, current_user: VerifiedUserDep, db: SessionDep) -> Response:
    """Soft-delete one of the caller's messages."""
    conversation_service.delete_message(db, message_id, current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
