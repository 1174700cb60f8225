"""Shared test fixtures for the hydractl test suite.

Provides a controllable clock, a simulated actuator driven by that
clock, and a FastAPI test client wired to the actuator.
"""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from hydractl.actuator.sim import SimulatedActuator
from hydractl.api.server import create_app


VALID_TOKEN = "test-token-1"
OTHER_TOKEN = "test-token-2"


class FakeClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# ---------------------------------------------------------------------------
# Actuator Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def actuator(clock: FakeClock) -> SimulatedActuator:
    """A simulated actuator at position 0 whose worker is not running."""
    return SimulatedActuator(clock=clock)


@pytest.fixture
def client_time() -> datetime:
    return datetime(2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# API Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def known_tokens() -> frozenset[str]:
    return frozenset({VALID_TOKEN, OTHER_TOKEN})


@pytest.fixture
def auth_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {VALID_TOKEN}"}


@pytest.fixture
def time_body() -> dict[str, str]:
    return {"time": "2025-01-01T12:00:00Z"}


@pytest.fixture
def api_client(known_tokens: frozenset[str], actuator: SimulatedActuator) -> TestClient:
    """A test client over the fake-clock actuator (lifespan not entered)."""
    app = create_app(known_tokens=known_tokens, actuator=actuator, start_worker=False)
    return TestClient(app)
