"""Persistence adapter and in-memory stores"""
from habitplanet.db.kv import KeyValueStore, FileKeyValueStore, InMemoryKeyValueStore, create_kv_store
from habitplanet.db.repository import SnapshotRepository
from habitplanet.db.stores import HabitStore, UserStore, CheckInLog, StateStore

__all__ = [
    "KeyValueStore",
    "FileKeyValueStore",
    "InMemoryKeyValueStore",
    "create_kv_store",
    "SnapshotRepository",
    "HabitStore",
    "UserStore",
    "CheckInLog",
    "StateStore",
]
