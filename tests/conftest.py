# tests/conftest.py
import asyncio

import pytest
from fastapi.testclient import TestClient

from agents.models import TravelRequest
from api.app import app


class FakeAgent:
    """
    Scripted stand-in for TravelAgent: yields the given events, then
    optionally raises or stalls.
    """

    def __init__(self, events=None, error=None, stall=None):
        self.events = list(events or [])
        self.error = error
        self.stall = stall
        self.tasks = []

    async def run_task(self, task, model=None):
        self.tasks.append(task)
        for event in self.events:
            await asyncio.sleep(0)
            yield event
        if self.stall:
            await asyncio.sleep(self.stall)
        if self.error:
            raise self.error


def text_events(*chunks):
    return [{"type": "text", "content": chunk} for chunk in chunks]


@pytest.fixture
def travel_request():
    return TravelRequest(
        destination="Tokyo",
        duration=3,
        travelers=2,
        budget="luxury",
        interests=["food", "art"],
        mobility="public_transport",
    )


@pytest.fixture
def app_env(monkeypatch, tmp_path):
    """Point storage and the audit log at a temp dir; no API key."""
    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
    monkeypatch.setenv("PLANS_STORAGE_ROOT", str(tmp_path / "plans"))
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'sessions.db'}")
    monkeypatch.setenv("PLAN_SESSION_LOGGING", "1")
    return tmp_path


@pytest.fixture
def client(app_env):
    with TestClient(app) as c:
        yield c
