# tests/conftest.py

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from task_api.main import create_app
from task_api.sql_store import SQLTaskStore
from task_api.store import TaskStore


class FakeClock:
    """
    Deterministic clock: every call returns a moment one second later.

    Lets tests assert that updated_at strictly advances without sleeping.
    """

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
        self.calls = 0

    def __call__(self) -> datetime:
        self.calls += 1
        self.now = self.now + timedelta(seconds=1)
        return self.now

    def rewind(self, seconds: float) -> None:
        """Step the clock backwards, as an NTP correction would."""
        self.now = self.now - timedelta(seconds=seconds)


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture(params=["memory", "sql"])
def store(request: pytest.FixtureRequest, tmp_path: Path, clock: FakeClock):
    """
    Every store test runs against both backends.

    The SQL backend uses a real SQLite file per test.
    """
    if request.param == "memory":
        s = TaskStore(clock=clock)
    else:
        s = SQLTaskStore(f"sqlite:///{tmp_path / 'tasks.sqlite3'}", clock=clock)
    yield s
    s.close()


@pytest.fixture()
def client(store) -> TestClient:
    return TestClient(create_app(store=store))
