"""Connection Routes — request, answer, and look up teammate connections.

Invariants:
    - Every route acts as the gateway-authenticated user (X-User-Id)
    - Only parties can read a connection; only the recipient can answer it
    - Domain errors propagate to the global handler (uniform JSON envelope)
"""

from typing import Literal
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from app.api.dependencies import (
    get_connection_manager,
    get_conversation_gate,
    get_current_user_id,
    get_messaging_service,
)
from app.core.connection_record import ConnectionRecord
from app.core.domain_types import ConnectionId, UserId
from app.core.errors import (
    ErrorContext, ResourceNotFoundError, UnauthorizedActorError,
)
from app.schemas.connection import (
    CanMessageResponse,
    ConnectionCreate,
    ConnectionList,
    ConnectionRespond,
    ConnectionView,
)
from app.services.connection_manager import ConnectionLifecycleManager
from app.services.conversation_gate import ConversationGate
from app.services.messaging import MessagingService

router = APIRouter(prefix="/api/v1/connections", tags=["connections"])


async def get_connection_for_party(
    connection_id: UUID,
    actor: UserId,
    manager: ConnectionLifecycleManager,
) -> ConnectionRecord:
    """Load a connection the actor belongs to, or raise 404/403."""
    ctx = ErrorContext(connection_id=str(connection_id), actor_id=str(actor))
    record = await manager.get_connection(ConnectionId(connection_id))
    if record is None:
        raise ResourceNotFoundError("Connection", str(connection_id), ctx)
    if not record.involves(actor):
        raise UnauthorizedActorError("You are not a party to this connection", ctx)
    return record


@router.post(
    "", response_model=ConnectionView,
    status_code=status.HTTP_201_CREATED,
)
async def request_connection(
    body: ConnectionCreate,
    actor: UserId = Depends(get_current_user_id),
    manager: ConnectionLifecycleManager = Depends(get_connection_manager),
):
    """Send a connection request to another user."""
    record = await manager.request_connection(actor, body.recipient_id)
    return ConnectionView.for_actor(record, actor)


@router.get("", response_model=ConnectionList)
async def list_connections(
    status_filter: Literal["pending", "accepted", "rejected"] | None = Query(
        None, alias="status",
    ),
    actor: UserId = Depends(get_current_user_id),
    manager: ConnectionLifecycleManager = Depends(get_connection_manager),
    messaging: MessagingService = Depends(get_messaging_service),
):
    """List the actor's connections, most recently updated first."""
    records = await manager.list_connections(actor, status_filter)
    unread = await messaging.unread_counts(actor, [r.id for r in records])
    return ConnectionList(
        connections=[
            ConnectionView.for_actor(r, actor, unread.get(r.id, 0))
            for r in records
        ],
    )


@router.get("/with/{user_id}", response_model=ConnectionView)
async def find_connection(
    user_id: UUID,
    actor: UserId = Depends(get_current_user_id),
    manager: ConnectionLifecycleManager = Depends(get_connection_manager),
):
    """Connection between the actor and another user, whichever side requested it."""
    record = await manager.find_connection(actor, user_id)
    if record is None:
        raise ResourceNotFoundError(
            "Connection", f"{actor}:{user_id}", ErrorContext(actor_id=str(actor)),
        )
    return ConnectionView.for_actor(record, actor)


@router.get("/{connection_id}", response_model=ConnectionView)
async def get_connection(
    connection_id: UUID,
    actor: UserId = Depends(get_current_user_id),
    manager: ConnectionLifecycleManager = Depends(get_connection_manager),
):
    record = await get_connection_for_party(connection_id, actor, manager)
    return ConnectionView.for_actor(record, actor)


@router.post("/{connection_id}/respond", response_model=ConnectionView)
async def respond_to_connection(
    connection_id: UUID,
    body: ConnectionRespond,
    actor: UserId = Depends(get_current_user_id),
    manager: ConnectionLifecycleManager = Depends(get_connection_manager),
):
    """Accept or reject a pending request addressed to the actor."""
    record = await manager.respond_to_connection(
        ConnectionId(connection_id), actor, body.decision,
    )
    return ConnectionView.for_actor(record, actor)


@router.get("/{connection_id}/can-message", response_model=CanMessageResponse)
async def can_message(
    connection_id: UUID,
    actor: UserId = Depends(get_current_user_id),
    gate: ConversationGate = Depends(get_conversation_gate),
):
    return CanMessageResponse(
        can_message=await gate.can_message(ConnectionId(connection_id), actor),
    )
