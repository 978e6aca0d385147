"""Core test fixtures — plain values only, no IO."""

from uuid import UUID

import pytest

from app.core.domain_types import UserId
from tests.helpers import T0


@pytest.fixture
def alice():
    return UserId(UUID("11111111-1111-4111-8111-111111111111"))


@pytest.fixture
def bob():
    return UserId(UUID("22222222-2222-4222-8222-222222222222"))


@pytest.fixture
def carol():
    return UserId(UUID("33333333-3333-4333-8333-333333333333"))


@pytest.fixture
def t0():
    return T0
