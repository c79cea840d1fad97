"""Per-user exclusive sections for engine operations"""
import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

logger = logging.getLogger(__name__)


class UserLockRegistry:
    """
    Hands out one asyncio.Lock per user id.

    Every engine call that reads and writes a user's habits or progression
    holds the user's lock for its whole duration, including awaited calls to
    the content generator, so operations for one user never interleave.

    A lock only lives while someone holds or waits for it; the entry is
    dropped when the last caller leaves, so unknown user ids leave nothing
    behind.
    """

    def __init__(self):
        self._locks: dict[str, asyncio.Lock] = {}
        self._users: dict[str, int] = {}

    @asynccontextmanager
    async def for_user(self, user_id: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(user_id, asyncio.Lock())
        self._users[user_id] = self._users.get(user_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[user_id] -= 1
            if not self._users[user_id]:
                del self._users[user_id]
                del self._locks[user_id]
