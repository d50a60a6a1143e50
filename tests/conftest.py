"""
Shared fixtures: a controllable clock, session managers with test secrets,
and a mocked database session.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from academy.core.session import (
    ADMIN_COOKIE_NAME,
    PRINCIPAL_ADMIN,
    PRINCIPAL_STUDENT,
    STUDENT_COOKIE_NAME,
    SessionManager,
)

T0 = 1_700_000_000_000
IDLE_MS = 30 * 60 * 1000
ABSOLUTE_MS = 24 * 60 * 60 * 1000


class FakeClock:
    """Epoch-millisecond clock that only moves when told to."""

    def __init__(self, start: int = T0):
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def admin_sessions(clock):
    """Admin session manager with a fixed test secret."""
    return SessionManager(
        principal_type=PRINCIPAL_ADMIN,
        cookie_name=ADMIN_COOKIE_NAME,
        secret="admin-test-secret",
        idle_timeout_ms=IDLE_MS,
        absolute_max_age_ms=ABSOLUTE_MS,
        secure_cookies=True,
        clock=clock,
    )


@pytest.fixture
def student_sessions(clock):
    """Student session manager with a different test secret."""
    return SessionManager(
        principal_type=PRINCIPAL_STUDENT,
        cookie_name=STUDENT_COOKIE_NAME,
        secret="student-test-secret",
        idle_timeout_ms=IDLE_MS,
        absolute_max_age_ms=ABSOLUTE_MS,
        secure_cookies=True,
        clock=clock,
    )


@pytest.fixture
def mock_db():
    """Create a mock database session."""
    db = AsyncMock()
    db.commit = AsyncMock()
    db.rollback = AsyncMock()
    db.refresh = AsyncMock()
    db.get = AsyncMock()
    db.execute = AsyncMock()
    db.add = MagicMock()
    db.add_all = MagicMock()
    return db
