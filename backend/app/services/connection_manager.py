"""Connection Lifecycle Manager — sole authority for creating and transitioning connections.

Invariants:
    - Validation runs before any write (fail fast, no partial state)
    - request_connection: one pending record per unordered pair; storage uniqueness
      settles concurrent reciprocal requests (the loser gets DuplicateConnectionError)
    - respond_to_connection: compare-and-swap on status == pending; a lost race
      surfaces as InvalidTransitionError
    - find_connection and list_connections never write
    - The manager emits no events; notifying the other party is the caller's job

Design Decisions:
    - Clock injected as a callable: tests control timestamps, core stays pure
    - Rules live in core/connection_lifecycle.py; this class only sequences IO around them
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Callable
from uuid import UUID

from app.core.connection_lifecycle import (
    open_connection, parse_decision, parse_status, plan_response,
    select_for_user,
)
from app.core.connection_record import ConnectionRecord
from app.core.domain_types import (
    ConnectionDecision, ConnectionId, ConnectionStatus,
)
from app.core.errors import ErrorContext, InvalidTransitionError
from app.core.pair_key import normalize_pair, parse_user_id
from app.core.repository_protocols import ConnectionRepository

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ConnectionLifecycleManager:
    """Creates, answers, and looks up connection requests."""

    def __init__(self, repository: ConnectionRepository, clock: Clock = utc_now):
        self.repository = repository
        self.clock = clock

    async def request_connection(
        self, initiator: UUID | str, recipient: UUID | str,
    ) -> ConnectionRecord:
        """Open a pending request from initiator to recipient."""
        initiator_id = parse_user_id(initiator)
        recipient_id = parse_user_id(recipient)
        existing = None
        if initiator_id != recipient_id:
            existing = await self.repository.find_by_pair(
                normalize_pair(initiator_id, recipient_id),
            )
        record = open_connection(
            ConnectionId(uuid.uuid4()), initiator_id, recipient_id,
            existing, self.clock(),
        )
        record = await self.repository.insert(record)
        logger.info(
            "Connection requested",
            extra={"connection_id": record.id, "actor_id": initiator_id},
        )
        return record

    async def respond_to_connection(
        self,
        connection_id: ConnectionId,
        responder: UUID | str,
        decision: ConnectionDecision | str,
    ) -> ConnectionRecord:
        """Accept or reject a pending request. Only the recipient may answer."""
        decision = parse_decision(decision)
        record = await self.repository.get(connection_id)
        planned = plan_response(
            connection_id, record, responder, decision, self.clock(),
        )
        updated = await self.repository.transition_status(
            connection_id,
            expected=ConnectionStatus.PENDING,
            new_status=planned.status,
            updated_at=planned.updated_at,
        )
        if updated is None:
            # another response won the compare-and-swap
            current = await self.repository.get(connection_id)
            current_status = current.status.value if current else "removed"
            logger.warning(
                "Connection response lost the status race",
                extra={
                    "connection_id": connection_id,
                    "actor_id": planned.recipient_id,
                    "error_code": "INVALID_TRANSITION",
                },
            )
            raise InvalidTransitionError(
                current_status,
                ErrorContext(
                    connection_id=str(connection_id),
                    actor_id=str(planned.recipient_id),
                ),
            )
        logger.info(
            f"Connection {updated.status.value}",
            extra={
                "connection_id": connection_id,
                "actor_id": updated.recipient_id,
                "status": updated.status.value,
            },
        )
        return updated

    async def get_connection(
        self, connection_id: ConnectionId,
    ) -> ConnectionRecord | None:
        return await self.repository.get(connection_id)

    async def find_connection(
        self, a: UUID | str, b: UUID | str,
    ) -> ConnectionRecord | None:
        """Record for the unordered pair {a, b}, or None."""
        return await self.repository.find_by_pair(normalize_pair(a, b))

    async def list_connections(
        self,
        user: UUID | str,
        status: ConnectionStatus | str | None = None,
    ) -> list[ConnectionRecord]:
        """All records where user is a party, newest activity first."""
        user_id = parse_user_id(user)
        status_filter = parse_status(status)
        records = await self.repository.list_for_user(user_id, status_filter)
        return select_for_user(records, user_id, status_filter)
