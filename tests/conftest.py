"""Shared fixtures: a controllable clock, an in-memory store and an API client."""

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from main import app
from models import LineupCreate
from service import LineupService
from store import MemoryLineupStore

START = datetime(2026, 3, 1, 18, 0, tzinfo=timezone.utc)


class FakeClock:
    """Callable clock that only moves when a test advances it."""

    def __init__(self, now: datetime = START):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return MemoryLineupStore()


@pytest.fixture
def service(store, clock):
    return LineupService(store, clock=clock)


@pytest.fixture
def lineup_id(service):
    """A fresh 11-a-side lineup."""
    return service.create(LineupCreate())


@pytest.fixture
def client(service):
    app.state.lineups = service
    yield TestClient(app)
    app.state.lineups = None
