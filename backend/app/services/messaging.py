"""Messaging Service — direct messages over accepted connections.

Invariants:
    - send_message inserts only when ConversationGate.can_message is True
    - list_messages and mark_conversation_read require the actor to be a party
    - Unknown connections raise ResourceNotFoundError before any party check
    - Messages are returned oldest first

Design Decisions:
    - Reads allowed on non-accepted connections for parties: history survives, but the
      gate still blocks new inserts
    - No optimistic writes: callers update their views only after the insert returns
"""

import logging
from uuid import UUID

from app.core.connection_record import ConnectionRecord
from app.core.domain_types import ConnectionId, UserId
from app.core.errors import (
    ErrorContext,
    InvalidMessageError,
    MessagingNotAllowedError,
    ResourceNotFoundError,
    UnauthorizedActorError,
)
from app.core.pair_key import parse_user_id
from app.core.repository_protocols import ConnectionRepository, MessageRepository
from app.services.connection_manager import Clock, utc_now
from app.services.conversation_gate import ConversationGate

logger = logging.getLogger(__name__)

MAX_MESSAGE_LENGTH = 5000


class MessagingService:
    """Send, read, and acknowledge messages on a connection."""

    def __init__(
        self,
        connections: ConnectionRepository,
        messages: MessageRepository,
        clock: Clock = utc_now,
    ):
        self.connections = connections
        self.messages = messages
        self.gate = ConversationGate(connections)
        self.clock = clock

    async def send_message(
        self, connection_id: ConnectionId, sender: UUID | str, content: str,
    ) -> dict:
        sender_id = parse_user_id(sender)
        ctx = ErrorContext(connection_id=str(connection_id), actor_id=str(sender_id))
        if not await self.gate.can_message(connection_id, sender_id):
            logger.warning(
                "Message refused by conversation gate",
                extra={
                    "connection_id": connection_id,
                    "actor_id": sender_id,
                    "error_code": "MESSAGING_NOT_ALLOWED",
                },
            )
            raise MessagingNotAllowedError(ctx)
        text = content.strip()
        if not text or len(text) > MAX_MESSAGE_LENGTH:
            raise InvalidMessageError(MAX_MESSAGE_LENGTH, ctx)
        return await self.messages.add(connection_id, sender_id, text, self.clock())

    async def list_messages(
        self, connection_id: ConnectionId, actor: UUID | str,
    ) -> list[dict]:
        await self._party_record(connection_id, parse_user_id(actor))
        return await self.messages.list_by_connection(connection_id)

    async def mark_conversation_read(
        self, connection_id: ConnectionId, reader: UUID | str,
    ) -> int:
        reader_id = parse_user_id(reader)
        await self._party_record(connection_id, reader_id)
        count = await self.messages.mark_read(connection_id, reader_id)
        if count:
            logger.info(
                f"Marked {count} message(s) read",
                extra={"connection_id": connection_id, "actor_id": reader_id},
            )
        return count

    async def unread_counts(
        self, user: UUID | str, connection_ids: list[ConnectionId],
    ) -> dict[ConnectionId, int]:
        return await self.messages.count_unread(parse_user_id(user), connection_ids)

    async def _party_record(
        self, connection_id: ConnectionId, actor: UserId,
    ) -> ConnectionRecord:
        ctx = ErrorContext(connection_id=str(connection_id), actor_id=str(actor))
        record = await self.connections.get(connection_id)
        if record is None:
            raise ResourceNotFoundError("Connection", str(connection_id), ctx)
        if not record.involves(actor):
            raise UnauthorizedActorError(
                "Only the two parties can read this conversation", ctx,
            )
        return record
