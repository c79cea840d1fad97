"""
Snapshot persistence for the three record sets

Each set is serialized as a flat JSON object keyed by record id:
    {"<habit id>": {...habit fields...}, ...}
No foreign keys are enforced here; the engines own referential integrity.
"""
import json
import logging
from typing import Type, TypeVar

from pydantic import BaseModel, ValidationError as PydanticValidationError

from habitplanet.db.kv import KeyValueStore
from habitplanet.exceptions import StorageFailureError
from habitplanet.models import Habit, User, CheckInRecord

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

HABITS_KEY = "habitplanet_habits"
USERS_KEY = "habitplanet_users"
CHECKINS_KEY = "habitplanet_checkins"


class SnapshotRepository:
    """Load and save whole record sets through a key-value backend"""

    def __init__(self, kv: KeyValueStore):
        self.kv = kv

    async def _load(self, key: str, model: Type[M]) -> dict[str, M]:
        raw = await self.kv.get(key)
        if raw is None:
            return {}

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise StorageFailureError(
                f"Corrupt record set {key}: {e}", key=key, operation="load", cause=e
            )

        records: dict[str, M] = {}
        for record_id, payload in data.items():
            try:
                records[record_id] = model.model_validate(payload)
            except PydanticValidationError as e:
                # Skip the invalid record, keep the rest
                logger.error(f"Skipping invalid {model.__name__} {record_id} in {key}: {e}")
        logger.info(f"Loaded {len(records)} {model.__name__} records from {key}")
        return records

    async def _save(self, key: str, records: dict[str, BaseModel]) -> None:
        payload = {
            record_id: record.model_dump(mode="json")
            for record_id, record in records.items()
        }
        await self.kv.set(key, json.dumps(payload, ensure_ascii=False))

    async def load_habits(self) -> dict[str, Habit]:
        return await self._load(HABITS_KEY, Habit)

    async def save_habits(self, habits: dict[str, Habit]) -> None:
        await self._save(HABITS_KEY, habits)

    async def load_users(self) -> dict[str, User]:
        return await self._load(USERS_KEY, User)

    async def save_users(self, users: dict[str, User]) -> None:
        await self._save(USERS_KEY, users)

    async def load_check_ins(self) -> dict[str, CheckInRecord]:
        return await self._load(CHECKINS_KEY, CheckInRecord)

    async def save_check_ins(self, check_ins: dict[str, CheckInRecord]) -> None:
        await self._save(CHECKINS_KEY, check_ins)
