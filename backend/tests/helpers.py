"""Test helpers — deterministic clock and request headers."""

from datetime import datetime, timedelta, timezone
from uuid import UUID

T0 = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


class TickingClock:
    """Deterministic clock: starts at `start`, advances one second per call."""

    def __init__(self, start: datetime = T0):
        self.current = start

    def __call__(self) -> datetime:
        value = self.current
        self.current = self.current + timedelta(seconds=1)
        return value


def headers_for(user: UUID) -> dict:
    """Header the authentication gateway sets for a verified user."""
    return {"X-User-Id": str(user)}
