"""Connection Repository — SQLAlchemy implementation of ConnectionRepository.

Invariants:
    - insert() is one atomic write; the (pair_low, pair_high) unique constraint turns a
      racing reciprocal request into DuplicateConnectionError
    - transition_status() is a single conditional UPDATE (compare-and-swap on status)
    - Every method commits or rolls back its own transaction
    - Reads use populate_existing so rows already in the identity map are refreshed

Design Decisions:
    - Returns ConnectionRecord, never ORM rows: services and core stay free of SQLAlchemy
"""

import logging
from datetime import datetime

from sqlalchemy import or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.connection_record import ConnectionRecord
from app.core.domain_types import (
    ConnectionId, ConnectionStatus, PairKey, UserId,
)
from app.core.errors import DuplicateConnectionError, ErrorContext
from app.models import Connection

logger = logging.getLogger(__name__)


class SqlConnectionRepository:
    """Connection persistence over an AsyncSession."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def insert(self, record: ConnectionRecord) -> ConnectionRecord:
        self.db.add(Connection.from_record(record))
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            logger.warning(
                "Connection insert lost the pair uniqueness race",
                extra={"actor_id": record.initiator_id, "error_code": "DUPLICATE_CONNECTION"},
            )
            raise DuplicateConnectionError(
                ErrorContext(actor_id=str(record.initiator_id)),
            )
        return record

    async def get(self, connection_id: ConnectionId) -> ConnectionRecord | None:
        return await self._one(
            select(Connection).where(Connection.id == connection_id),
        )

    async def find_by_pair(self, key: PairKey) -> ConnectionRecord | None:
        low, high = key
        return await self._one(
            select(Connection)
            .where(Connection.pair_low == low)
            .where(Connection.pair_high == high),
        )

    async def list_for_user(
        self, user: UserId, status: ConnectionStatus | None = None,
    ) -> list[ConnectionRecord]:
        query = select(Connection).where(
            or_(Connection.initiator_id == user, Connection.recipient_id == user),
        )
        if status is not None:
            query = query.where(Connection.status == status.value)
        query = query.order_by(
            Connection.updated_at.desc(), Connection.created_at.desc(),
        ).execution_options(populate_existing=True)
        result = await self.db.execute(query)
        return [row.to_record() for row in result.scalars().all()]

    async def transition_status(
        self,
        connection_id: ConnectionId,
        expected: ConnectionStatus,
        new_status: ConnectionStatus,
        updated_at: datetime,
    ) -> ConnectionRecord | None:
        result = await self.db.execute(
            update(Connection)
            .where(Connection.id == connection_id)
            .where(Connection.status == expected.value)
            .values(status=new_status.value, updated_at=updated_at)
            .execution_options(synchronize_session=False),
        )
        if result.rowcount != 1:
            await self.db.rollback()
            return None
        await self.db.commit()
        return await self.get(connection_id)

    async def _one(self, query) -> ConnectionRecord | None:
        result = await self.db.execute(
            query.execution_options(populate_existing=True),
        )
        row = result.scalar_one_or_none()
        return row.to_record() if row else None
