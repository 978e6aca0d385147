"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - UserId, ConnectionId, MessageId wrap UUIDs — never use bare UUID in domain logic
    - PairKey is always (lower, higher): order-independent by construction
    - All valid states encoded as Enums — no raw string matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON and to the DB `status` column without custom encoders
"""

from enum import Enum
from typing import NewType
from uuid import UUID


# ─── Identity Types ──────────────────────────────────────────────

UserId = NewType("UserId", UUID)
ConnectionId = NewType("ConnectionId", UUID)
MessageId = NewType("MessageId", UUID)

PairKey = NewType("PairKey", tuple[UUID, UUID])


# ─── Enums ───────────────────────────────────────────────────────

class ConnectionStatus(str, Enum):
    """Connection lifecycle states — maps to DB `status` column."""
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"

    @property
    def is_terminal(self) -> bool:
        return self is not ConnectionStatus.PENDING


class ConnectionDecision(str, Enum):
    """Recipient's answer to a pending request."""
    ACCEPT = "accept"
    REJECT = "reject"

    @property
    def target_status(self) -> ConnectionStatus:
        if self is ConnectionDecision.ACCEPT:
            return ConnectionStatus.ACCEPTED
        return ConnectionStatus.REJECTED


class ConnectionDirection(str, Enum):
    """Direction of a connection as seen by one of its parties."""
    OUTGOING = "outgoing"
    INCOMING = "incoming"
