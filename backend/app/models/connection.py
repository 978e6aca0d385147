"""Connection ORM — persists a directed connection request between two users.

Invariants:
    - id is UUID primary key
    - (pair_low, pair_high) is UNIQUE: one row per unordered user pair, any status
    - initiator_id <> recipient_id (CHECK)
    - status in (pending, accepted, rejected) (CHECK)
    - updated_at only written by the lifecycle manager's compare-and-swap

Design Decisions:
    - pair_low/pair_high stored next to initiator/recipient: the DB enforces reciprocal
      uniqueness without trusting callers (ADR: no runtime column-name probing)
    - updated_at indexed: every listing orders by it descending
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    CheckConstraint, DateTime, Index, String, UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from app.core.connection_record import ConnectionRecord
from app.core.domain_types import ConnectionId, ConnectionStatus, UserId
from app.db.base import Base


def _as_utc(value: datetime) -> datetime:
    """SQLite drops tzinfo on read; stored values are always UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class Connection(Base):
    """Connection entity — one per unordered user pair."""
    __tablename__ = "connections"
    __table_args__ = (
        UniqueConstraint("pair_low", "pair_high", name="uq_connections_pair"),
        CheckConstraint(
            "initiator_id <> recipient_id", name="ck_connections_not_self",
        ),
        CheckConstraint(
            "status IN ('pending', 'accepted', 'rejected')",
            name="ck_connections_status",
        ),
        Index("ix_connections_updated_at", "updated_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    initiator_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), nullable=False, index=True,
    )
    recipient_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), nullable=False, index=True,
    )
    pair_low: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), nullable=False,
    )
    pair_high: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), nullable=False,
    )
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=ConnectionStatus.PENDING.value,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    messages: Mapped[list["Message"]] = relationship(
        "Message", back_populates="connection",
        cascade="all, delete-orphan", passive_deletes=True,
    )

    @classmethod
    def from_record(cls, record: ConnectionRecord) -> "Connection":
        low, high = record.pair_key
        return cls(
            id=record.id,
            initiator_id=record.initiator_id,
            recipient_id=record.recipient_id,
            pair_low=low,
            pair_high=high,
            status=record.status.value,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )

    def to_record(self) -> ConnectionRecord:
        return ConnectionRecord(
            id=ConnectionId(self.id),
            initiator_id=UserId(self.initiator_id),
            recipient_id=UserId(self.recipient_id),
            status=ConnectionStatus(self.status),
            created_at=_as_utc(self.created_at),
            updated_at=_as_utc(self.updated_at),
        )
