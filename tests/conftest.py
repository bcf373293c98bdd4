"""Shared fixtures for the EyeRest test suite."""

from datetime import datetime

import pytest

from eyerest.core.scheduler import CooperativeScheduler
from eyerest.persistence.store import WellnessStore

# Monday 6 January 2025, 09:00 local time
T0 = datetime(2025, 1, 6, 9, 0, 0).timestamp()


class FakeClock:
    """Settable clock usable both as a monotonic and a wall clock (seconds)."""

    def __init__(self, now: float = T0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def scheduler(clock):
    return CooperativeScheduler(clock=clock)


@pytest.fixture
def store():
    """In-memory WellnessStore with tables created."""
    s = WellnessStore(":memory:")
    s.init_db()
    yield s
    s.close()
