"""Identity Pair Normalizer — order-independent lookup key for two user identities.

Invariants:
    - normalize_pair(a, b) == normalize_pair(b, a) for every valid pair
    - The key is (lower, higher) by UUID ordering — one schema, no column-name probing
    - Fails with InvalidIdentityError on missing identities or a == b
    - No side effects

Design Decisions:
    - Tuple key over concatenated string: maps 1:1 to the (pair_low, pair_high) unique constraint
    - parse_user_id accepts str or UUID: the auth header arrives as text, ORM rows as UUID
"""

from uuid import UUID

from app.core.domain_types import ConnectionId, PairKey, UserId
from app.core.errors import InvalidIdentityError


def parse_user_id(raw: UUID | str | None) -> UserId:
    """Coerce a raw identity into a UserId or raise InvalidIdentityError."""
    if raw is None:
        raise InvalidIdentityError("User identity is required")
    if isinstance(raw, UUID):
        return UserId(raw)
    if not isinstance(raw, str):
        raise InvalidIdentityError(f"Unsupported identity type: {type(raw).__name__}")
    value = raw.strip()
    if not value:
        raise InvalidIdentityError("User identity cannot be empty")
    try:
        return UserId(UUID(value))
    except ValueError:
        raise InvalidIdentityError(f"Malformed user identity: {value!r}")


def coerce_connection_id(raw: UUID | str | None) -> ConnectionId | None:
    """ConnectionId for a UUID or UUID string; None when raw is not one."""
    if isinstance(raw, UUID):
        return ConnectionId(raw)
    if not isinstance(raw, str):
        return None
    try:
        return ConnectionId(UUID(raw.strip()))
    except ValueError:
        return None


def normalize_pair(a: UUID | str | None, b: UUID | str | None) -> PairKey:
    """Canonical key for the unordered pair {a, b}."""
    first = parse_user_id(a)
    second = parse_user_id(b)
    if first == second:
        raise InvalidIdentityError("A pair needs two distinct identities")
    if first < second:
        return PairKey((first, second))
    return PairKey((second, first))
