"""
Pytest configuration and shared fixtures for the turtle backend tests.
"""
import asyncio
from typing import Any, Dict, List

import pytest

from turtle_backend import config as C
from turtle_backend.api.deps import set_shared
from turtle_backend.core import SharedState
from turtle_backend.core.session import SessionManager
from turtle_backend.store.path_store import PathStore


def drain(queue: asyncio.Queue) -> List[Dict[str, Any]]:
    """Pop everything currently queued for a client."""
    out = []
    while not queue.empty():
        out.append(queue.get_nowait())
    return out


class EventLog:
    """Collects (event, payload) pairs emitted by a MissionController."""

    def __init__(self):
        self.events: List[tuple] = []

    def __call__(self, event: str, payload: Dict[str, Any]):
        self.events.append((event, dict(payload)))

    def names(self) -> List[str]:
        return [e for e, _ in self.events]

    def of(self, name: str) -> List[Dict[str, Any]]:
        return [p for e, p in self.events if e == name]


@pytest.fixture
def events():
    return EventLog()


@pytest.fixture
def store(tmp_path):
    s = PathStore(tmp_path / "paths.db")
    yield s
    s.close()


@pytest.fixture
def manager(store):
    return SessionManager(store=store)


@pytest.fixture
def fast_ticks(monkeypatch):
    """Run the real mission ticker at 1 kHz."""
    monkeypatch.setattr(C, "MISSION_TICK_PERIOD", 0.001)


@pytest.fixture
def shared(store):
    s = SharedState()
    s.attach_store(store)
    set_shared(s)
    yield s
    set_shared(None)


@pytest.fixture
def client(shared):
    from fastapi.testclient import TestClient
    from turtle_backend.app import app

    with TestClient(app) as c:
        yield c
