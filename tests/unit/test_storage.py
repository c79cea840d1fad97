"""Tests for key-value backends, snapshot repository and StateStore"""
import json

import pytest

from habitplanet.db import (
    FileKeyValueStore,
    InMemoryKeyValueStore,
    SnapshotRepository,
    StateStore,
    create_kv_store,
)
from habitplanet.db.repository import HABITS_KEY, USERS_KEY
from habitplanet.exceptions import StorageFailureError
from habitplanet.models import Card, Habit, Rarity, User


# ============================================================================
# Key-value backends
# ============================================================================

@pytest.mark.asyncio
async def test_file_store_round_trip(tmp_path):
    kv = FileKeyValueStore(tmp_path / "data")

    assert await kv.get("missing") is None
    await kv.set("habitplanet_users", '{"a": 1}')

    assert await kv.get("habitplanet_users") == '{"a": 1}'
    assert (tmp_path / "data" / "habitplanet_users.json").exists()
    assert not (tmp_path / "data" / "habitplanet_users.json.tmp").exists()
    assert await kv.ping() is True


@pytest.mark.asyncio
async def test_file_store_write_failure_is_storage_failure(tmp_path):
    blocker = tmp_path / "not_a_dir"
    blocker.write_text("x")
    kv = FileKeyValueStore(blocker)

    with pytest.raises(StorageFailureError) as exc_info:
        await kv.set("habitplanet_users", "{}")
    assert exc_info.value.key == "habitplanet_users"


@pytest.mark.asyncio
async def test_memory_store_quota():
    kv = InMemoryKeyValueStore(quota_bytes=10)

    await kv.set("a", "12345")
    await kv.set("a", "1234567890")  # replacing a key frees its old size
    with pytest.raises(StorageFailureError):
        await kv.set("b", "1")

    assert await kv.get("b") is None


def test_create_kv_store(tmp_path):
    assert isinstance(create_kv_store("memory"), InMemoryKeyValueStore)
    assert isinstance(create_kv_store("file", tmp_path), FileKeyValueStore)


# ============================================================================
# Snapshot repository
# ============================================================================

@pytest.mark.asyncio
async def test_repository_round_trip(kv):
    repo = SnapshotRepository(kv)
    card = Card(id="c1", name="Laozi", title="The Founder", rarity=Rarity.EPIC, value=640, obtained_at=1)
    user = User(id="u1", coins=42, collected_cards=[card])
    habit = Habit(id="h1", user_id="u1", title="Read", streak=3, last_check_in_date="2024-03-08", created_at=5)

    await repo.save_users({"u1": user})
    await repo.save_habits({"h1": habit})

    assert await repo.load_users() == {"u1": user}
    assert await repo.load_habits() == {"h1": habit}
    assert await repo.load_check_ins() == {}


@pytest.mark.asyncio
async def test_repository_documents_are_keyed_by_id(kv):
    await SnapshotRepository(kv).save_users({"u1": User(id="u1")})

    document = json.loads(await kv.get(USERS_KEY))
    assert list(document) == ["u1"]
    assert document["u1"]["pet_name"] == "Gloopy"


@pytest.mark.asyncio
async def test_repository_skips_invalid_records(kv):
    await kv.set(HABITS_KEY, json.dumps({
        "h1": {"id": "h1", "user_id": "u1", "title": "Ok", "created_at": 1},
        "h2": {"id": "h2", "user_id": "u1", "title": "Bad", "target_count": 0, "created_at": 2},
    }))

    habits = await SnapshotRepository(kv).load_habits()

    assert list(habits) == ["h1"]


@pytest.mark.asyncio
async def test_repository_corrupt_document(kv):
    await kv.set(USERS_KEY, "{not json")

    with pytest.raises(StorageFailureError):
        await SnapshotRepository(kv).load_users()


# ============================================================================
# StateStore
# ============================================================================

@pytest.mark.asyncio
async def test_state_load_and_persist(kv):
    state = StateStore(SnapshotRepository(kv))
    state.users.put(User(id="u1"))
    assert await state.persist(users=True) == []

    reloaded = StateStore(SnapshotRepository(kv))
    await reloaded.load()

    assert reloaded.users.exists("u1")


@pytest.mark.asyncio
async def test_persist_failure_returns_warning_and_keeps_memory():
    state = StateStore(SnapshotRepository(InMemoryKeyValueStore(quota_bytes=5)))
    state.users.put(User(id="u1"))

    warnings = await state.persist(users=True, habits=True)

    assert len(warnings) == 1  # the empty habits document fits, users does not
    assert "could not be saved" in warnings[0]
    assert state.users.exists("u1")


def test_habit_store_lists_newest_first(state):
    state.habits.put(Habit(id="old", user_id="u1", title="Old", created_at=1))
    state.habits.put(Habit(id="new", user_id="u1", title="New", created_at=2))
    state.habits.put(Habit(id="other", user_id="u2", title="Other", created_at=3))

    assert [h.id for h in state.habits.list_for_user("u1")] == ["new", "old"]
