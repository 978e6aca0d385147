"""Connection Record — immutable value describing a directed request between two users.

Invariants:
    - initiator_id != recipient_id
    - updated_at >= created_at
    - Records are frozen: transitions produce a new record via with_status()
    - pair_key is derived, never stored independently of the two parties

Design Decisions:
    - Frozen dataclass over ORM object in core: the state machine stays testable without a DB
    - Direction helpers live here: every view needs "who is the other person" from one place
"""

from dataclasses import dataclass, replace
from datetime import datetime

from app.core.domain_types import (
    ConnectionDirection, ConnectionId, ConnectionStatus, PairKey, UserId,
)
from app.core.errors import InvalidIdentityError
from app.core.pair_key import normalize_pair


@dataclass(frozen=True)
class ConnectionRecord:
    """A connection request and its current status."""

    id: ConnectionId
    initiator_id: UserId
    recipient_id: UserId
    status: ConnectionStatus
    created_at: datetime
    updated_at: datetime

    def __post_init__(self):
        if self.initiator_id == self.recipient_id:
            raise InvalidIdentityError("Initiator and recipient must differ")
        if self.updated_at < self.created_at:
            raise ValueError("updated_at cannot precede created_at")

    @property
    def pair_key(self) -> PairKey:
        return normalize_pair(self.initiator_id, self.recipient_id)

    def involves(self, user: UserId) -> bool:
        return user in (self.initiator_id, self.recipient_id)

    def other_party(self, user: UserId) -> UserId:
        """The party that is not `user`. Raises ValueError for non-parties."""
        if user == self.initiator_id:
            return self.recipient_id
        if user == self.recipient_id:
            return self.initiator_id
        raise ValueError(f"{user} is not a party to connection {self.id}")

    def direction(self, user: UserId) -> ConnectionDirection:
        if user == self.initiator_id:
            return ConnectionDirection.OUTGOING
        if user == self.recipient_id:
            return ConnectionDirection.INCOMING
        raise ValueError(f"{user} is not a party to connection {self.id}")

    def with_status(
        self, status: ConnectionStatus, at: datetime,
    ) -> "ConnectionRecord":
        """Copy with a new status; updated_at never moves before created_at."""
        return replace(self, status=status, updated_at=max(at, self.created_at))
