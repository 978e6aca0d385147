"""Conversation Gate — pure predicate guarding message creation.

Invariants:
    - True iff the record exists, is accepted, and actor is one of its two parties
    - Never raises: malformed actors and missing records simply answer False
"""

from uuid import UUID

from app.core.connection_record import ConnectionRecord
from app.core.domain_types import ConnectionStatus
from app.core.errors import InvalidIdentityError
from app.core.pair_key import parse_user_id


def can_message(record: ConnectionRecord | None, actor: UUID | str | None) -> bool:
    if record is None:
        return False
    try:
        actor_id = parse_user_id(actor)
    except InvalidIdentityError:
        return False
    return record.status is ConnectionStatus.ACCEPTED and record.involves(actor_id)
