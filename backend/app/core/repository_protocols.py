"""Boundary Protocols — contracts between core and shell.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - All IO operations accessed through Protocol types
    - Implementations provided by shell via dependency injection
    - insert() enforces pair uniqueness atomically (DuplicateConnectionError on conflict)
    - transition_status() is a compare-and-swap: None when the expected status no longer holds

Design Decisions:
    - Protocol over ABC: structural subtyping, no inheritance hierarchy
    - Async in Protocol: boundary methods are async because implementations do IO,
      but core pure functions that USE these protocols are never async themselves —
      the shell orchestrates the async calls around the pure logic
"""

from datetime import datetime
from typing import Protocol

from app.core.connection_record import ConnectionRecord
from app.core.domain_types import (
    ConnectionId, ConnectionStatus, PairKey, UserId,
)


class ConnectionRepository(Protocol):
    """Contract for connection persistence — implemented by shell."""
    async def insert(self, record: ConnectionRecord) -> ConnectionRecord: ...
    async def get(self, connection_id: ConnectionId) -> ConnectionRecord | None: ...
    async def find_by_pair(self, key: PairKey) -> ConnectionRecord | None: ...
    async def list_for_user(
        self, user: UserId, status: ConnectionStatus | None = None,
    ) -> list[ConnectionRecord]: ...
    async def transition_status(
        self,
        connection_id: ConnectionId,
        expected: ConnectionStatus,
        new_status: ConnectionStatus,
        updated_at: datetime,
    ) -> ConnectionRecord | None: ...


class MessageRepository(Protocol):
    """Contract for message persistence — implemented by shell."""
    async def add(
        self,
        connection_id: ConnectionId,
        sender_id: UserId,
        content: str,
        created_at: datetime,
    ) -> dict: ...
    async def list_by_connection(self, connection_id: ConnectionId) -> list[dict]: ...
    async def mark_read(
        self, connection_id: ConnectionId, reader: UserId,
    ) -> int: ...
    async def count_unread(
        self, reader: UserId, connection_ids: list[ConnectionId],
    ) -> dict[ConnectionId, int]: ...
