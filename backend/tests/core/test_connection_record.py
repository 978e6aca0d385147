"""Connection Record — tests for the immutable connection value.

Tests cover:
    - Construction invariants (distinct parties, updated_at >= created_at)
    - Party helpers (involves, other_party, direction)
    - with_status never moves updated_at before created_at
"""

from dataclasses import FrozenInstanceError
from datetime import timedelta
from uuid import uuid4

import pytest

from app.core.connection_record import ConnectionRecord
from app.core.domain_types import (
    ConnectionDirection, ConnectionId, ConnectionStatus,
)
from app.core.errors import InvalidIdentityError
from app.core.pair_key import normalize_pair


def _record(initiator, recipient, t0, status=ConnectionStatus.PENDING):
    return ConnectionRecord(
        id=ConnectionId(uuid4()),
        initiator_id=initiator,
        recipient_id=recipient,
        status=status,
        created_at=t0,
        updated_at=t0,
    )


def test_record_rejects_self_connection(alice, t0):
    with pytest.raises(InvalidIdentityError):
        _record(alice, alice, t0)


def test_record_rejects_updated_before_created(alice, bob, t0):
    with pytest.raises(ValueError):
        ConnectionRecord(
            id=ConnectionId(uuid4()),
            initiator_id=alice,
            recipient_id=bob,
            status=ConnectionStatus.PENDING,
            created_at=t0,
            updated_at=t0 - timedelta(seconds=1),
        )


def test_record_is_frozen(alice, bob, t0):
    record = _record(alice, bob, t0)
    with pytest.raises(FrozenInstanceError):
        record.status = ConnectionStatus.ACCEPTED


def test_pair_key_matches_normalizer(alice, bob, t0):
    assert _record(bob, alice, t0).pair_key == normalize_pair(alice, bob)


def test_involves_only_parties(alice, bob, carol, t0):
    record = _record(alice, bob, t0)
    assert record.involves(alice)
    assert record.involves(bob)
    assert not record.involves(carol)


def test_other_party_and_direction(alice, bob, t0):
    record = _record(alice, bob, t0)
    assert record.other_party(alice) == bob
    assert record.other_party(bob) == alice
    assert record.direction(alice) is ConnectionDirection.OUTGOING
    assert record.direction(bob) is ConnectionDirection.INCOMING


def test_other_party_rejects_outsider(alice, bob, carol, t0):
    record = _record(alice, bob, t0)
    with pytest.raises(ValueError):
        record.other_party(carol)
    with pytest.raises(ValueError):
        record.direction(carol)


def test_with_status_returns_new_record(alice, bob, t0):
    record = _record(alice, bob, t0)
    later = t0 + timedelta(minutes=5)
    updated = record.with_status(ConnectionStatus.ACCEPTED, later)
    assert updated.status is ConnectionStatus.ACCEPTED
    assert updated.updated_at == later
    assert updated.created_at == t0
    assert record.status is ConnectionStatus.PENDING


def test_with_status_clamps_clock_skew(alice, bob, t0):
    record = _record(alice, bob, t0)
    updated = record.with_status(ConnectionStatus.REJECTED, t0 - timedelta(hours=1))
    assert updated.updated_at == t0
