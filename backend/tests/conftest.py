"""Root conftest - shared test configuration and core fixtures."""

import os
from datetime import datetime, timedelta, timezone

import pytest

# Ensure tests never point at a real database
os.environ.setdefault(
    "DATABASE_URL",
    "sqlite+aiosqlite:///test.db",
)
os.environ.setdefault("BOOTSTRAP_REGISTRAR", "registrar-root")


class FakeClock:
    """Deterministic clock: each call advances by one second."""

    def __init__(self, start: datetime | None = None):
        self.current = start or datetime(2026, 1, 1, tzinfo=timezone.utc)
        self.calls = 0

    def now(self) -> datetime:
        value = self.current
        self.current = self.current + timedelta(seconds=1)
        self.calls += 1
        return value


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
