"""Message Routes — conversation history, sending, and read receipts per connection.

Invariants:
    - POST is allowed only through the conversation gate (accepted + party)
    - GET and read receipts require the actor to be a party
"""

from uuid import UUID

from fastapi import APIRouter, Depends, status

from app.api.dependencies import get_current_user_id, get_messaging_service
from app.core.domain_types import ConnectionId, UserId
from app.schemas.message import (
    MarkReadResponse, MessageCreate, MessageList, MessageResponse,
)
from app.services.messaging import MessagingService

router = APIRouter(
    prefix="/api/v1/connections/{connection_id}/messages", tags=["messages"],
)


@router.get("", response_model=MessageList)
async def list_messages(
    connection_id: UUID,
    actor: UserId = Depends(get_current_user_id),
    messaging: MessagingService = Depends(get_messaging_service),
):
    """Conversation history, oldest first."""
    messages = await messaging.list_messages(ConnectionId(connection_id), actor)
    return MessageList(messages=[MessageResponse(**m) for m in messages])


@router.post(
    "", response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
)
async def send_message(
    connection_id: UUID,
    body: MessageCreate,
    actor: UserId = Depends(get_current_user_id),
    messaging: MessagingService = Depends(get_messaging_service),
):
    message = await messaging.send_message(
        ConnectionId(connection_id), actor, body.content,
    )
    return MessageResponse(**message)


@router.post("/read", response_model=MarkReadResponse)
async def mark_read(
    connection_id: UUID,
    actor: UserId = Depends(get_current_user_id),
    messaging: MessagingService = Depends(get_messaging_service),
):
    """Mark the other party's unread messages as read."""
    count = await messaging.mark_conversation_read(ConnectionId(connection_id), actor)
    return MarkReadResponse(marked_read=count)
