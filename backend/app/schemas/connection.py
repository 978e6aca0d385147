"""Connection Schemas — Pydantic models for the connection endpoints.

Invariants:
    - ConnectionRespond.decision is accept | reject (Literal, validated by Pydantic)
    - ConnectionView always describes the record from the actor's point of view
"""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field

from app.core.connection_record import ConnectionRecord
from app.core.domain_types import UserId


class ConnectionCreate(BaseModel):
    """Connection request body."""
    recipient_id: UUID


class ConnectionRespond(BaseModel):
    """Recipient's decision on a pending request."""
    decision: Literal["accept", "reject"]


class ConnectionView(BaseModel):
    """A connection as seen by one of its parties."""
    id: UUID
    initiator_id: UUID
    recipient_id: UUID
    status: Literal["pending", "accepted", "rejected"]
    created_at: datetime
    updated_at: datetime
    other_user_id: UUID
    direction: Literal["outgoing", "incoming"]
    unread_count: int = Field(0, ge=0)

    @classmethod
    def for_actor(
        cls, record: ConnectionRecord, actor: UserId, unread_count: int = 0,
    ) -> "ConnectionView":
        return cls(
            id=record.id,
            initiator_id=record.initiator_id,
            recipient_id=record.recipient_id,
            status=record.status.value,
            created_at=record.created_at,
            updated_at=record.updated_at,
            other_user_id=record.other_party(actor),
            direction=record.direction(actor).value,
            unread_count=unread_count,
        )


class ConnectionList(BaseModel):
    connections: list[ConnectionView]


class CanMessageResponse(BaseModel):
    can_message: bool
