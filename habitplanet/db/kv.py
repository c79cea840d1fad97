"""
Key-value backends for persisted JSON blobs

STORAGE ARCHITECTURE:
- Each record set (habits, users, checkins) is one JSON document under one key
- FileKeyValueStore: one <key>.json file per key under DATA_PATH
- InMemoryKeyValueStore: process-local dict, optional byte quota
"""
import logging
import os
from pathlib import Path
from typing import Optional

from habitplanet.config import DATA_PATH
from habitplanet.exceptions import StorageFailureError, wrap_external_exception

logger = logging.getLogger(__name__)


class KeyValueStore:
    """Interface for best-effort string storage"""

    name = "abstract"

    async def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    async def set(self, key: str, value: str) -> None:
        raise NotImplementedError

    async def ping(self) -> bool:
        """Whether the backend is currently usable"""
        return True


class FileKeyValueStore(KeyValueStore):
    """Store each key as a JSON file"""

    name = "file"

    def __init__(self, data_path: Path = DATA_PATH):
        self.data_path = data_path

    def _path_for(self, key: str) -> Path:
        return self.data_path / f"{key}.json"

    async def get(self, key: str) -> Optional[str]:
        filepath = self._path_for(key)
        if not filepath.exists():
            return None
        try:
            return filepath.read_text(encoding="utf-8")
        except OSError as e:
            raise wrap_external_exception(e, operation="kv_get", context={"key": key})

    async def set(self, key: str, value: str) -> None:
        """Write through a temp file so a failed write never truncates the old document"""
        filepath = self._path_for(key)
        tmp_path = filepath.with_suffix(".json.tmp")
        try:
            self.data_path.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(value, encoding="utf-8")
            os.replace(tmp_path, filepath)
        except OSError as e:
            raise wrap_external_exception(e, operation="kv_set", context={"key": key})
        logger.debug(f"Wrote {len(value)} bytes to {filepath}")

    async def ping(self) -> bool:
        try:
            self.data_path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error(f"Data path {self.data_path} unusable: {e}")
            return False
        return os.access(self.data_path, os.W_OK)


class InMemoryKeyValueStore(KeyValueStore):
    """
    Dict-backed store

    Args:
        quota_bytes: When set, a write that would push the total size past it
            is rejected with StorageFailureError (like a browser storage quota).
    """

    name = "memory"

    def __init__(self, quota_bytes: Optional[int] = None):
        self._data: dict[str, str] = {}
        self.quota_bytes = quota_bytes

    async def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        if self.quota_bytes is not None:
            used = sum(len(v.encode("utf-8")) for k, v in self._data.items() if k != key)
            if used + len(value.encode("utf-8")) > self.quota_bytes:
                raise StorageFailureError(
                    f"Storage quota of {self.quota_bytes} bytes exceeded",
                    key=key,
                    operation="kv_set"
                )
        self._data[key] = value


def create_kv_store(backend: str, data_path: Path = DATA_PATH) -> KeyValueStore:
    """Build the configured backend"""
    if backend == "memory":
        return InMemoryKeyValueStore()
    return FileKeyValueStore(data_path)
