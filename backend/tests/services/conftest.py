"""Service test fixtures — async DB + FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db dependency overridden to use test DB session
    - db_manager patched so the readiness probe sees the test engine
    - Services get a ticking clock: each reading is one second after the previous

Design Decisions:
    - SQLite in-memory with StaticPool: every session shares one connection, so data
      seeded through test_db is visible to request sessions
"""

from uuid import uuid4

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from sqlalchemy.pool import StaticPool
from httpx import ASGITransport, AsyncClient

from app.core.domain_types import UserId
from app.db.base import Base
import app.models  # noqa: F401
from app.infrastructure.connection_repository import SqlConnectionRepository
from app.infrastructure.database import get_db, DatabaseSessionManager
from app.infrastructure.message_repository import SqlMessageRepository
import app.infrastructure.database as db_module
from app.main import app
from app.services.connection_manager import ConnectionLifecycleManager
from app.services.conversation_gate import ConversationGate
from app.services.messaging import MessagingService
from tests.helpers import TickingClock


@pytest.fixture
def alice():
    return UserId(uuid4())


@pytest.fixture
def bob():
    return UserId(uuid4())


@pytest.fixture
def carol():
    return UserId(uuid4())


@pytest.fixture
def clock():
    return TickingClock()


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False, poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
def connection_repo(test_db):
    return SqlConnectionRepository(test_db)


@pytest.fixture
def message_repo(test_db):
    return SqlMessageRepository(test_db)


@pytest.fixture
def manager(connection_repo, clock):
    return ConnectionLifecycleManager(connection_repo, clock)


@pytest.fixture
def gate(connection_repo):
    return ConversationGate(connection_repo)


@pytest.fixture
def messaging(connection_repo, message_repo, clock):
    return MessagingService(connection_repo, message_repo, clock)


@pytest.fixture
async def client(test_engine, test_session_factory):
    """FastAPI test client with DB dependency overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    # Patch db_manager for the readiness probe, which uses it directly
    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager
