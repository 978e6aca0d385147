"""Connection Lifecycle Rules — pure state machine for connection requests.

Invariants:
    - (none) -> pending -> accepted | rejected; accepted and rejected are terminal
    - At most one record per normalized pair, in ANY status (no re-request after rejection)
    - Only the recipient may respond to a pending request
    - Functions validate and fail fast; they never coerce invalid input
    - Pure: the caller supplies the clock reading and the existing record

Design Decisions:
    - Rules raise typed errors instead of returning descriptors: the shell has nothing to apply
      on failure, it only propagates (ADR: uniform error shape)
    - Check order in plan_response is existence, authorization, status: a non-party never
      learns the state of someone else's connection
"""

from datetime import datetime
from typing import Iterable
from uuid import UUID

from app.core.connection_record import ConnectionRecord
from app.core.domain_types import (
    ConnectionDecision, ConnectionId, ConnectionStatus, UserId,
)
from app.core.errors import (
    DuplicateConnectionError,
    ErrorContext,
    InvalidChoiceError,
    InvalidTransitionError,
    ResourceNotFoundError,
    SelfConnectionError,
    UnauthorizedActorError,
)
from app.core.pair_key import parse_user_id


def parse_decision(raw: ConnectionDecision | str) -> ConnectionDecision:
    """ConnectionDecision for raw, or InvalidChoiceError."""
    try:
        return ConnectionDecision(raw)
    except ValueError:
        raise InvalidChoiceError("decision", raw, [d.value for d in ConnectionDecision])


def parse_status(raw: ConnectionStatus | str | None) -> ConnectionStatus | None:
    """Optional status filter; None passes through."""
    if raw is None:
        return None
    try:
        return ConnectionStatus(raw)
    except ValueError:
        raise InvalidChoiceError("status", raw, [s.value for s in ConnectionStatus])


def validate_request(
    initiator: UUID | str | None,
    recipient: UUID | str | None,
    existing: ConnectionRecord | None,
) -> tuple[UserId, UserId]:
    """Check a connection request. Returns the parsed (initiator, recipient)."""
    initiator_id = parse_user_id(initiator)
    recipient_id = parse_user_id(recipient)
    ctx = ErrorContext(actor_id=str(initiator_id))
    if initiator_id == recipient_id:
        raise SelfConnectionError(ctx)
    if existing is not None:
        ctx.connection_id = str(existing.id)
        raise DuplicateConnectionError(ctx)
    return initiator_id, recipient_id


def open_connection(
    connection_id: ConnectionId,
    initiator: UUID | str | None,
    recipient: UUID | str | None,
    existing: ConnectionRecord | None,
    now: datetime,
) -> ConnectionRecord:
    """Build the pending record for a new request."""
    initiator_id, recipient_id = validate_request(initiator, recipient, existing)
    return ConnectionRecord(
        id=connection_id,
        initiator_id=initiator_id,
        recipient_id=recipient_id,
        status=ConnectionStatus.PENDING,
        created_at=now,
        updated_at=now,
    )


def plan_response(
    connection_id: ConnectionId,
    record: ConnectionRecord | None,
    responder: UUID | str | None,
    decision: ConnectionDecision,
    now: datetime,
) -> ConnectionRecord:
    """Return the record as it must look after the recipient's decision."""
    responder_id = parse_user_id(responder)
    ctx = ErrorContext(connection_id=str(connection_id), actor_id=str(responder_id))
    if record is None:
        raise ResourceNotFoundError("Connection", str(connection_id), ctx)
    if responder_id != record.recipient_id:
        raise UnauthorizedActorError(
            "Only the recipient can respond to a connection request", ctx,
        )
    if record.status.is_terminal:
        raise InvalidTransitionError(record.status.value, ctx)
    return record.with_status(ConnectionDecision(decision).target_status, now)


def select_for_user(
    records: Iterable[ConnectionRecord],
    user: UserId,
    status: ConnectionStatus | None = None,
) -> list[ConnectionRecord]:
    """Records involving `user`, optionally by status, most recently updated first."""
    selected = [
        r for r in records
        if r.involves(user) and (status is None or r.status is status)
    ]
    selected.sort(key=lambda r: (r.updated_at, r.created_at), reverse=True)
    return selected
