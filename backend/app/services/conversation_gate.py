"""Conversation Gate — answers whether an actor may post on a connection.

Invariants:
    - can_message never raises for unknown or malformed ids or actors; it answers False
    - Storage faults are not validation outcomes: they propagate to the caller
"""

from uuid import UUID

from app.core.conversation_gate import can_message
from app.core.pair_key import coerce_connection_id
from app.core.repository_protocols import ConnectionRepository


class ConversationGate:
    """Messaging permission check backed by the connection repository."""

    def __init__(self, repository: ConnectionRepository):
        self.repository = repository

    async def can_message(
        self, connection_id: UUID | str | None, actor: UUID | str | None,
    ) -> bool:
        parsed = coerce_connection_id(connection_id)
        if parsed is None:
            return False
        record = await self.repository.get(parsed)
        return can_message(record, actor)
