"""
In-memory stores owned by the engines

The stores are the authoritative state for the running process. They are
loaded once from the SnapshotRepository and written back after each
committed operation; a failed write leaves the in-memory state untouched.
"""
import logging
from typing import Optional

from habitplanet.db.repository import SnapshotRepository
from habitplanet.exceptions import StorageFailureError
from habitplanet.models import Habit, User, CheckInRecord
from habitplanet.observability.metrics import record_storage_failure

logger = logging.getLogger(__name__)


class HabitStore:
    """Habits keyed by id"""

    def __init__(self, habits: Optional[dict[str, Habit]] = None):
        self._habits: dict[str, Habit] = dict(habits or {})

    def get(self, habit_id: str) -> Optional[Habit]:
        return self._habits.get(habit_id)

    def list_for_user(self, user_id: str) -> list[Habit]:
        """User's habits, newest first"""
        habits = [h for h in self._habits.values() if h.user_id == user_id]
        habits.sort(key=lambda h: h.created_at, reverse=True)
        return habits

    def put(self, habit: Habit) -> None:
        self._habits[habit.id] = habit

    def delete(self, habit_id: str) -> bool:
        return self._habits.pop(habit_id, None) is not None

    def snapshot(self) -> dict[str, Habit]:
        return dict(self._habits)


class UserStore:
    """User progression keyed by user id"""

    def __init__(self, users: Optional[dict[str, User]] = None):
        self._users: dict[str, User] = dict(users or {})

    def get(self, user_id: str) -> Optional[User]:
        return self._users.get(user_id)

    def exists(self, user_id: str) -> bool:
        return user_id in self._users

    def put(self, user: User) -> None:
        self._users[user.id] = user

    def snapshot(self) -> dict[str, User]:
        return dict(self._users)


class CheckInLog:
    """Append-only check-in records"""

    def __init__(self, records: Optional[dict[str, CheckInRecord]] = None):
        self._records: dict[str, CheckInRecord] = dict(records or {})

    def append(self, record: CheckInRecord) -> None:
        if record.id in self._records:
            raise ValueError(f"Check-in {record.id} already recorded")
        self._records[record.id] = record

    def for_user(self, user_id: str) -> list[CheckInRecord]:
        """User's check-ins, oldest first"""
        records = [r for r in self._records.values() if r.user_id == user_id]
        records.sort(key=lambda r: r.timestamp)
        return records

    def snapshot(self) -> dict[str, CheckInRecord]:
        return dict(self._records)


class StateStore:
    """
    The three stores plus the repository they are persisted through.

    Services commit changes into the stores first (synchronously, so no other
    coroutine observes a half-applied operation), then call persist().
    """

    def __init__(self, repository: SnapshotRepository):
        self.repository = repository
        self.habits = HabitStore()
        self.users = UserStore()
        self.check_ins = CheckInLog()

    async def load(self) -> None:
        """Replace in-memory state with the persisted snapshot"""
        self.habits = HabitStore(await self.repository.load_habits())
        self.users = UserStore(await self.repository.load_users())
        self.check_ins = CheckInLog(await self.repository.load_check_ins())
        logger.info(
            f"State loaded: {len(self.users.snapshot())} users, "
            f"{len(self.habits.snapshot())} habits, "
            f"{len(self.check_ins.snapshot())} check-ins"
        )

    async def persist(
        self,
        habits: bool = False,
        users: bool = False,
        check_ins: bool = False
    ) -> list[str]:
        """
        Write the selected record sets

        Returns:
            User-facing warnings, one per record set that failed to save.
            StorageFailureError is never raised from here.
        """
        targets = []
        if habits:
            targets.append(("habits", self.repository.save_habits, self.habits.snapshot))
        if users:
            targets.append(("users", self.repository.save_users, self.users.snapshot))
        if check_ins:
            targets.append(("checkins", self.repository.save_check_ins, self.check_ins.snapshot))

        warnings = []
        for record_set, save, snapshot in targets:
            try:
                await save(snapshot())
            except StorageFailureError as e:
                logger.warning(f"Could not persist {record_set}; keeping in-memory state: {e.message}")
                record_storage_failure(record_set)
                warnings.append(e.user_message)
        return warnings
