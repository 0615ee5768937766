"""
Shared fixtures. The environment is set before the application is
imported so settings pick up the temporary SQLite database.
"""

import os
import random
import tempfile

_DB_DIR = tempfile.mkdtemp(prefix="snake_logic_tests_")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_DB_DIR}/test.db"
os.environ["RATE_LIMIT_GAME"] = "100000"
os.environ["RATE_LIMIT_LEVELS"] = "100000"
os.environ["AUDIO_MUTED"] = "false"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from snake_logic.services.geometry import Heading, Snake  # noqa: E402


def make_snake(snake_id, points, heading):
    return Snake(snake_id, points, Heading(heading))


class FakeClock:
    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def client():
    from snake_logic.main import app
    from snake_logic.api import game

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
    game.session_store.clear()
