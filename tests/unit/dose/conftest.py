"""Shared fixtures: in-memory slots and a clock pinned to a local date."""

from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from dose.services.repository import DoseRepository
from dose.services.storage import InMemoryStorage
from dose.services.tracker import DoseTracker

# Naive wall-clock time interpreted in the local zone, so its day never shifts.
LOCAL_NOON = datetime(2024, 6, 12, 12, 0).astimezone()
TODAY = "2024-06-12"


class SteppingClock:
    """Clock that only moves when told to."""

    def __init__(self, start: datetime = LOCAL_NOON) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def clock() -> SteppingClock:
    return SteppingClock()


@pytest.fixture
def storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture
def repository(storage: InMemoryStorage) -> DoseRepository:
    return DoseRepository(storage)


@pytest.fixture
def tracker(repository: DoseRepository, clock: SteppingClock) -> DoseTracker:
    return DoseTracker(repository, clock=clock)


@pytest.fixture
def today(clock: SteppingClock) -> str:
    return clock.now.date().isoformat()
