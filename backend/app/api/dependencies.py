"""Request Dependencies — actor identity and per-request service construction.

Invariants:
    - The actor id comes only from the authentication gateway header; it is trusted,
      never re-verified here
    - Missing header -> AuthenticationRequiredError (401); malformed -> InvalidIdentityError (400)
    - Services share the request's AsyncSession
"""

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import get_settings
from app.core.domain_types import UserId
from app.core.errors import AuthenticationRequiredError
from app.core.pair_key import parse_user_id
from app.infrastructure.connection_repository import SqlConnectionRepository
from app.infrastructure.database import get_db
from app.infrastructure.message_repository import SqlMessageRepository
from app.services.connection_manager import ConnectionLifecycleManager
from app.services.conversation_gate import ConversationGate
from app.services.messaging import MessagingService


async def get_current_user_id(request: Request) -> UserId:
    raw = request.headers.get(get_settings().user_id_header)
    if raw is None:
        raise AuthenticationRequiredError()
    return parse_user_id(raw)


async def get_connection_manager(
    db: AsyncSession = Depends(get_db),
) -> ConnectionLifecycleManager:
    return ConnectionLifecycleManager(SqlConnectionRepository(db))


async def get_conversation_gate(
    db: AsyncSession = Depends(get_db),
) -> ConversationGate:
    return ConversationGate(SqlConnectionRepository(db))


async def get_messaging_service(
    db: AsyncSession = Depends(get_db),
) -> MessagingService:
    return MessagingService(SqlConnectionRepository(db), SqlMessageRepository(db))
