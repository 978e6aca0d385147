"""Connection Lifecycle Manager — tests against the SQLAlchemy repository.

Tests cover:
    - request -> pending with created_at == updated_at
    - Reciprocal and repeated requests raise DuplicateConnectionError
    - Self requests raise SelfConnectionError without touching storage
    - respond: accept/reject, NotFound, Unauthorized, InvalidTransition (sequential and lost race)
    - find_connection is order-independent; list_connections filters and orders
    - The end-to-end scenarios: accept path, reject-then-rerequest, pending filter
"""

from uuid import uuid4

import pytest

from app.core.domain_types import (
    ConnectionDecision, ConnectionId, ConnectionStatus,
)
from app.core.errors import (
    DuplicateConnectionError,
    InvalidChoiceError,
    InvalidIdentityError,
    InvalidTransitionError,
    ResourceNotFoundError,
    SelfConnectionError,
    UnauthorizedActorError,
)
from app.infrastructure.connection_repository import SqlConnectionRepository
from app.services.connection_manager import ConnectionLifecycleManager


# ─── request_connection ──────────────────────────────────────────

async def test_request_creates_pending_record(manager, alice, bob):
    record = await manager.request_connection(alice, bob)
    assert record.status is ConnectionStatus.PENDING
    assert record.initiator_id == alice
    assert record.recipient_id == bob
    assert record.created_at == record.updated_at


async def test_request_accepts_string_identities(manager, alice, bob):
    record = await manager.request_connection(str(alice), str(bob))
    assert record.initiator_id == alice


async def test_reciprocal_request_is_duplicate(manager, alice, bob):
    await manager.request_connection(alice, bob)
    with pytest.raises(DuplicateConnectionError):
        await manager.request_connection(bob, alice)


async def test_repeated_request_is_duplicate(manager, alice, bob):
    await manager.request_connection(alice, bob)
    with pytest.raises(DuplicateConnectionError):
        await manager.request_connection(alice, bob)


async def test_self_request_fails(manager, alice):
    with pytest.raises(SelfConnectionError):
        await manager.request_connection(alice, alice)
    assert await manager.list_connections(alice) == []


async def test_request_with_blank_identity_fails(manager, alice):
    with pytest.raises(InvalidIdentityError):
        await manager.request_connection(alice, "  ")


async def test_unique_constraint_settles_race(connection_repo, alice, bob, clock):
    """Two managers that both saw no record: the second insert still loses."""
    first = ConnectionLifecycleManager(connection_repo, clock)

    class BlindRepository(SqlConnectionRepository):
        async def find_by_pair(self, key):
            return None

    second = ConnectionLifecycleManager(BlindRepository(connection_repo.db), clock)

    await first.request_connection(alice, bob)
    with pytest.raises(DuplicateConnectionError):
        await second.request_connection(bob, alice)
    assert len(await first.list_connections(alice)) == 1


# ─── respond_to_connection ───────────────────────────────────────

async def test_recipient_accepts(manager, alice, bob):
    record = await manager.request_connection(alice, bob)
    updated = await manager.respond_to_connection(
        record.id, bob, ConnectionDecision.ACCEPT,
    )
    assert updated.status is ConnectionStatus.ACCEPTED
    assert updated.updated_at > updated.created_at


async def test_recipient_rejects_with_raw_decision(manager, alice, bob):
    record = await manager.request_connection(alice, bob)
    updated = await manager.respond_to_connection(record.id, bob, "reject")
    assert updated.status is ConnectionStatus.REJECTED


async def test_unknown_decision_is_typed_error(manager, alice, bob):
    record = await manager.request_connection(alice, bob)
    with pytest.raises(InvalidChoiceError) as exc:
        await manager.respond_to_connection(record.id, bob, "maybe")
    assert exc.value.http_status == 400
    assert (await manager.get_connection(record.id)).status is ConnectionStatus.PENDING


async def test_respond_to_unknown_connection(manager, bob):
    with pytest.raises(ResourceNotFoundError):
        await manager.respond_to_connection(
            ConnectionId(uuid4()), bob, ConnectionDecision.ACCEPT,
        )


async def test_initiator_cannot_respond(manager, alice, bob):
    record = await manager.request_connection(alice, bob)
    with pytest.raises(UnauthorizedActorError):
        await manager.respond_to_connection(
            record.id, alice, ConnectionDecision.ACCEPT,
        )
    current = await manager.get_connection(record.id)
    assert current.status is ConnectionStatus.PENDING


async def test_outsider_cannot_respond(manager, alice, bob, carol):
    record = await manager.request_connection(alice, bob)
    with pytest.raises(UnauthorizedActorError):
        await manager.respond_to_connection(
            record.id, carol, ConnectionDecision.REJECT,
        )


async def test_second_response_is_invalid_transition(manager, alice, bob):
    record = await manager.request_connection(alice, bob)
    await manager.respond_to_connection(record.id, bob, ConnectionDecision.ACCEPT)
    with pytest.raises(InvalidTransitionError):
        await manager.respond_to_connection(
            record.id, bob, ConnectionDecision.REJECT,
        )
    current = await manager.get_connection(record.id)
    assert current.status is ConnectionStatus.ACCEPTED


async def test_lost_compare_and_swap_is_invalid_transition(
    connection_repo, manager, alice, bob, clock,
):
    """A response planned on a stale pending snapshot loses to the one already applied."""
    record = await manager.request_connection(alice, bob)

    class StaleRepository(SqlConnectionRepository):
        async def get(self, connection_id):
            if connection_id == record.id and not self.served:
                self.served = True
                return record
            return await super().get(connection_id)

    stale = StaleRepository(connection_repo.db)
    stale.served = False
    racer = ConnectionLifecycleManager(stale, clock)

    await manager.respond_to_connection(record.id, bob, ConnectionDecision.REJECT)
    with pytest.raises(InvalidTransitionError) as exc:
        await racer.respond_to_connection(record.id, bob, ConnectionDecision.ACCEPT)
    assert exc.value.current_status == "rejected"

    current = await manager.get_connection(record.id)
    assert current.status is ConnectionStatus.REJECTED


# ─── find / list ─────────────────────────────────────────────────

async def test_find_connection_is_order_independent(manager, alice, bob):
    record = await manager.request_connection(alice, bob)
    assert await manager.find_connection(alice, bob) == record
    assert await manager.find_connection(bob, alice) == record


async def test_find_connection_returns_none_when_absent(manager, alice, bob):
    assert await manager.find_connection(alice, bob) is None


async def test_list_connections_orders_by_updated_at_desc(
    manager, alice, bob, carol,
):
    first = await manager.request_connection(alice, bob)
    second = await manager.request_connection(carol, alice)
    # answering the older one makes it the most recently updated
    await manager.respond_to_connection(first.id, bob, ConnectionDecision.ACCEPT)

    listed = await manager.list_connections(alice)
    assert [r.id for r in listed] == [first.id, second.id]


async def test_list_connections_rejects_unknown_status(manager, alice):
    with pytest.raises(InvalidChoiceError) as exc:
        await manager.list_connections(alice, "bogus")
    assert exc.value.code == "INVALID_CHOICE"


async def test_list_connections_excludes_other_users(manager, alice, bob, carol):
    await manager.request_connection(bob, carol)
    assert await manager.list_connections(alice) == []


# ─── scenarios ───────────────────────────────────────────────────

async def test_scenario_accept_enables_messaging(manager, gate, alice, bob):
    record = await manager.request_connection(alice, bob)
    assert record.status is ConnectionStatus.PENDING

    accepted = await manager.respond_to_connection(
        record.id, bob, ConnectionDecision.ACCEPT,
    )
    assert accepted.status is ConnectionStatus.ACCEPTED
    assert await gate.can_message(record.id, alice)
    assert await gate.can_message(record.id, bob)


async def test_scenario_no_rerequest_after_rejection(manager, alice, carol):
    record = await manager.request_connection(alice, carol)
    rejected = await manager.respond_to_connection(
        record.id, carol, ConnectionDecision.REJECT,
    )
    assert rejected.status is ConnectionStatus.REJECTED
    with pytest.raises(DuplicateConnectionError):
        await manager.request_connection(alice, carol)


async def test_scenario_pending_filter(manager, alice, bob, carol):
    outgoing = await manager.request_connection(alice, bob)
    incoming = await manager.request_connection(carol, alice)
    await manager.respond_to_connection(
        incoming.id, alice, ConnectionDecision.ACCEPT,
    )

    pending = await manager.list_connections(alice, ConnectionStatus.PENDING)
    assert [r.id for r in pending] == [outgoing.id]

    accepted = await manager.list_connections(alice, "accepted")
    assert [r.id for r in accepted] == [incoming.id]
