"""Global test fixtures and utilities for habitplanet tests"""
import random
import pytest
from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pybreaker

from habitplanet.db import InMemoryKeyValueStore, SnapshotRepository, StateStore
from habitplanet.models import Habit, HabitType, SubTask, User
from habitplanet.resilience import CONTENT_BREAKER
from habitplanet.services.content_generation import ContentGenerationService
from habitplanet.services.gacha_service import GachaService
from habitplanet.services.habit_service import HabitService
from habitplanet.services.user_service import UserService
from habitplanet.utils.datetime_helpers import FixedClock, to_epoch_ms
from habitplanet.utils.locks import UserLockRegistry


# ============================================================================
# Random source
# ============================================================================

class ScriptedRandom(random.Random):
    """
    random.Random whose random() replays a script

    uniform(a, b) is built on random(), so a draw consumes two values:
    the rarity roll, then the value roll. choice() picks a fixed index.
    """

    def __init__(self, rolls, figure_index=0):
        super().__init__(0)
        self.rolls = list(rolls)
        self.figure_index = figure_index

    def random(self):
        return self.rolls.pop(0)

    def choice(self, seq):
        return seq[self.figure_index]


@pytest.fixture
def scripted_rng():
    """Factory: scripted_rng([0.96, 0.5], figure_index=2)"""
    return ScriptedRandom


# ============================================================================
# Clock & Storage Fixtures
# ============================================================================

TEST_NOW = datetime(2024, 3, 9, 8, 30, tzinfo=timezone.utc)


@pytest.fixture
def clock():
    """Clock pinned to 2024-03-09 08:30 UTC"""
    return FixedClock(TEST_NOW)


@pytest.fixture
def kv():
    return InMemoryKeyValueStore()


@pytest.fixture
def state(kv):
    return StateStore(SnapshotRepository(kv))


@pytest.fixture
def locks():
    return UserLockRegistry()


# ============================================================================
# User & Habit Fixtures
# ============================================================================

@pytest.fixture
def test_user_id():
    """Standard test user ID"""
    return "user-1"


@pytest.fixture
def user(state, test_user_id):
    """Fresh user with starting coins (150) and pet at level 1 / 20 exp"""
    user = User(id=test_user_id)
    state.users.put(user)
    return user


@pytest.fixture
def make_habit(state, clock, test_user_id):
    """Factory that stores a habit for the test user"""
    counter = {"n": 0}

    def _make(**fields):
        counter["n"] += 1
        defaults = {
            "id": f"habit-{counter['n']}",
            "user_id": test_user_id,
            "title": f"Habit {counter['n']}",
            "type": HabitType.STUDY,
            "created_at": to_epoch_ms(TEST_NOW) + counter["n"],
        }
        defaults.update(fields)
        habit = Habit(**defaults)
        state.habits.put(habit)
        return habit

    return _make


@pytest.fixture
def habit_with_subtasks(make_habit):
    return make_habit(
        title="Code Study",
        sub_tasks=[SubTask(id="st-1", title="Read Docs"), SubTask(id="st-2", title="Write Code")],
    )


# ============================================================================
# Content Generation Fixtures
# ============================================================================

@pytest.fixture(autouse=True)
def reset_content_breaker():
    """Reset the shared circuit breaker before each test"""
    CONTENT_BREAKER.close()
    yield
    CONTENT_BREAKER.close()


@pytest.fixture
def mock_openai_client():
    """AsyncOpenAI-shaped mock answering with advice text and a b64 image"""
    client = MagicMock()
    client.chat.completions.create = AsyncMock(return_value=SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content="- Drink water at 7am 💧"))]
    ))
    client.images.generate = AsyncMock(return_value=SimpleNamespace(
        data=[SimpleNamespace(b64_json="aGVsbG8=", url=None)]
    ))
    return client


@pytest.fixture
def content(mock_openai_client):
    return ContentGenerationService(api_key="", client=mock_openai_client, timeout=5)


@pytest.fixture
def unconfigured_content():
    return ContentGenerationService(api_key="", client=None)


# ============================================================================
# Service Fixtures
# ============================================================================

@pytest.fixture
def habit_service(state, clock, locks):
    return HabitService(state, clock, locks)


@pytest.fixture
def gacha_service(state, clock, locks, content):
    return GachaService(state, clock, locks, content, rng=ScriptedRandom([0.10, 0.5] * 50))


@pytest.fixture
def user_service(state, clock, locks, content):
    return UserService(state, clock, locks, content)


@pytest.fixture
def breaker():
    """Fresh breaker so tests don't share failure counts"""
    return pybreaker.CircuitBreaker(fail_max=3, reset_timeout=60, name="test_breaker")
