"""Message ORM — a direct message exchanged over an accepted connection.

Invariants:
    - Always belongs to a Connection (connection_id FK, ON DELETE CASCADE)
    - sender_id is one of the connection's parties (enforced by the conversation gate)
    - read flips false -> true once, when the other party opens the conversation
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, ForeignKey, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from app.core.domain_types import ConnectionId, MessageId, UserId
from app.db.base import Base


class Message(Base):
    """Message entity."""
    __tablename__ = "messages"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    connection_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("connections.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    sender_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), nullable=False,
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    read: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    connection: Mapped["Connection"] = relationship(
        "Connection", back_populates="messages",
    )

    def to_dict(self) -> dict:
        created = self.created_at
        if created.tzinfo is None:
            created = created.replace(tzinfo=timezone.utc)
        return {
            "id": MessageId(self.id),
            "connection_id": ConnectionId(self.connection_id),
            "sender_id": UserId(self.sender_id),
            "content": self.content,
            "read": self.read,
            "created_at": created,
        }
