from __future__ import annotations

from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

from src.signin_desk.signin_desk.container import build_container
from src.signin_desk.signin_desk.storage.memory_store import InMemoryTabularStore
from src.signin_desk.signin_desk.storage.tables import attendance_schema, mentors_schema

CHICAGO = ZoneInfo("America/Chicago")


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2025, 3, 1, 10, 0, 0, tzinfo=CHICAGO)


@pytest.fixture
def clock(fixed_now) -> FakeClock:
    return FakeClock(fixed_now)


@pytest.fixture
def store() -> InMemoryTabularStore:
    return InMemoryTabularStore(
        {
            "attendance": [attendance_schema().default_header],
            "mentors": [
                mentors_schema().default_header,
                ["staffa", "Alex", "Rivera", "TRUE"],
                ["STAFFB", "Blair", "Chen", "false"],
                ["STAFFC", "Casey", "Adams", ""],
            ],
        }
    )


@pytest.fixture
def container(store, clock):
    return build_container(
        storage_backend="memory",
        store=store,
        clock=clock,
        roster_tables=("roster_2026",),
        lock_timeout=0.2,
    )


@pytest.fixture
def desk(container):
    return container.desk
