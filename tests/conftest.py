"""Shared fixtures: a temporary SQLite store, a controllable clock and a fake AI provider."""

import random

import pytest

from database import SharedStateStore


class FakeClock:
    """A clock that only moves when told to."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> float:
        self.now += seconds
        return self.now


class FakeProvider:
    """Stands in for an external AI provider; records every call."""

    def __init__(self, classification=None, focus=None, error=None):
        self.classification = classification or {
            "category": "productive", "score": 90, "reasoning": "Looks like work",
        }
        self.focus = focus or {
            "focus_score": 80, "reasoning": "Steady", "suggestions": ["Keep going"],
            "distraction_level": "low",
        }
        self.error = error
        self.calls = []

    def classify_website(self, url, domain):
        self.calls.append(("classify", domain))
        if self.error:
            raise self.error
        return dict(self.classification)

    def analyze_focus(self, request):
        self.calls.append(("analyze", request.current_url))
        if self.error:
            raise self.error
        return dict(self.focus)

    def test_connection(self):
        if self.error:
            raise self.error
        return "API test successful"


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def rng():
    return random.Random(42)


@pytest.fixture
def db_url(tmp_path):
    return f"sqlite:///{tmp_path / 'state.db'}"


@pytest.fixture
def store(db_url, clock):
    state_store = SharedStateStore(db_url, clock=clock)
    yield state_store
    state_store.close()


@pytest.fixture
def make_provider():
    """Factory for fake providers: make_provider(focus={...}, error=...)."""
    return FakeProvider
