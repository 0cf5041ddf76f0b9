"""
Pytest configuration and fixtures

Engines run against an in-memory snapshot store and a fixed clock, so streak
values are deterministic.
"""
from datetime import date, timedelta
from typing import Iterable, List

import pytest
import pytest_asyncio

from habitly.core.database import MemorySnapshotStore
from habitly.core.models import HistoryRecord
from habitly.services.habit_engine import HabitEngine

# Friday
TODAY = date(2026, 10, 16)
WEEKDAYS = [1, 2, 3, 4, 5]


def days_ago(n: int, today: date = TODAY) -> date:
    return today - timedelta(days=n)


def records(dates: Iterable[date], status: str = "done") -> List[HistoryRecord]:
    return [HistoryRecord(date=d.isoformat(), status=status) for d in sorted(dates)]


class Clock:
    """Mutable clock for engines under test"""

    def __init__(self, today: date = TODAY):
        self.today = today

    def __call__(self) -> date:
        return self.today


@pytest.fixture
def clock():
    return Clock()


@pytest.fixture
def store():
    return MemorySnapshotStore()


@pytest_asyncio.fixture
async def engine(store, clock):
    engine = HabitEngine(store, clock=clock)
    await engine.reload()
    return engine
