"""Message Repository — SQLAlchemy implementation of MessageRepository.

Invariants:
    - Messages are listed oldest first (conversation order)
    - mark_read() only touches messages sent by the other party
    - Every write commits its own transaction
"""

from datetime import datetime

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.domain_types import ConnectionId, UserId
from app.models import Message


class SqlMessageRepository:
    """Message persistence over an AsyncSession."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def add(
        self,
        connection_id: ConnectionId,
        sender_id: UserId,
        content: str,
        created_at: datetime,
    ) -> dict:
        message = Message(
            connection_id=connection_id, sender_id=sender_id,
            content=content, created_at=created_at,
        )
        self.db.add(message)
        await self.db.commit()
        await self.db.refresh(message)
        return message.to_dict()

    async def list_by_connection(self, connection_id: ConnectionId) -> list[dict]:
        result = await self.db.execute(
            select(Message)
            .where(Message.connection_id == connection_id)
            .order_by(Message.created_at.asc())
            .execution_options(populate_existing=True),
        )
        return [m.to_dict() for m in result.scalars().all()]

    async def mark_read(
        self, connection_id: ConnectionId, reader: UserId,
    ) -> int:
        result = await self.db.execute(
            update(Message)
            .where(Message.connection_id == connection_id)
            .where(Message.sender_id != reader)
            .where(Message.read.is_(False))
            .values(read=True)
            .execution_options(synchronize_session=False),
        )
        await self.db.commit()
        return result.rowcount

    async def count_unread(
        self, reader: UserId, connection_ids: list[ConnectionId],
    ) -> dict[ConnectionId, int]:
        if not connection_ids:
            return {}
        result = await self.db.execute(
            select(Message.connection_id, func.count(Message.id))
            .where(Message.connection_id.in_(connection_ids))
            .where(Message.sender_id != reader)
            .where(Message.read.is_(False))
            .group_by(Message.connection_id),
        )
        counts = {ConnectionId(cid): n for cid, n in result.all()}
        return {cid: counts.get(cid, 0) for cid in connection_ids}
