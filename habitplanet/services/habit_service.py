"""
HabitService - Habit management and the check-in engine

Owns the habit lifecycle (list/create/delete/toggle subtask) and check-ins:
streak update, daily completion, coin and pet-exp rewards.
"""

import logging
from typing import Optional

from habitplanet.db.stores import StateStore
from habitplanet.exceptions import (
    AlreadyCompletedError,
    NotFoundError,
    ValidationError,
)
from habitplanet.gamification import (
    apply_day_rollover,
    calculate_new_streak,
    award_check_in_rewards,
)
from habitplanet.models import (
    CheckInRecord,
    CheckInResult,
    GeoLocation,
    Habit,
    HabitCreate,
    SubTask,
    User,
)
from habitplanet.observability.metrics import record_check_in, record_rejection
from habitplanet.utils.datetime_helpers import Clock
from habitplanet.utils.ids import new_id
from habitplanet.utils.locks import UserLockRegistry

logger = logging.getLogger(__name__)

MAX_NOTE_LENGTH = 1000


class HabitService:
    """
    Service for habits and check-ins.

    Responsibilities:
    - Lazy day rollover of daily progress
    - Habit CRUD and subtask toggling
    - Check-in validation, streaks and rewards
    - Committing habit, check-in log and user changes together
    """

    def __init__(self, state: StateStore, clock: Clock, locks: UserLockRegistry):
        """
        Initialize HabitService.

        Args:
            state: In-memory stores plus their persistence
            clock: Source of today's and yesterday's day strings
            locks: Per-user exclusive sections
        """
        self.state = state
        self.clock = clock
        self.locks = locks
        logger.debug("HabitService initialized")

    def _require_user(self, user_id: str, operation: str) -> User:
        user = self.state.users.get(user_id)
        if user is None:
            record_rejection(operation, "NotFoundError")
            raise NotFoundError(
                f"User {user_id} not found",
                record_type="User",
                record_id=user_id,
                user_id=user_id,
                operation=operation
            )
        return user

    def _require_habit(self, user_id: str, habit_id: str, operation: str) -> Habit:
        habit = self.state.habits.get(habit_id)
        if habit is None or habit.user_id != user_id:
            record_rejection(operation, "NotFoundError")
            raise NotFoundError(
                f"Habit {habit_id} not found",
                record_type="Habit",
                record_id=habit_id,
                user_id=user_id,
                operation=operation
            )
        return habit

    async def list_habits(self, user_id: str) -> list[Habit]:
        """
        Get the user's habits, newest first, with day rollover applied.

        Rolled-over habits are written back so the reset happens once per day.
        """
        async with self.locks.for_user(user_id):
            self._require_user(user_id, "list_habits")
            today = self.clock.today()

            habits = []
            rolled_over = 0
            for stored in self.state.habits.list_for_user(user_id):
                habit = stored.model_copy(deep=True)
                if apply_day_rollover(habit, today):
                    self.state.habits.put(habit)
                    rolled_over += 1
                habits.append(habit)

            if rolled_over:
                logger.info(f"Rolled over {rolled_over} habits for user {user_id}")
                await self.state.persist(habits=True)

            return [h.model_copy(deep=True) for h in habits]

    async def create_habit(self, user_id: str, fields: HabitCreate) -> Habit:
        """
        Create a habit with fresh progress.

        Args:
            user_id: Owner of the habit
            fields: Title, type, frequency, target and subtasks

        Returns:
            The stored habit
        """
        async with self.locks.for_user(user_id):
            self._require_user(user_id, "create_habit")

            habit = Habit(
                id=new_id(),
                user_id=user_id,
                title=fields.title,
                description=fields.description,
                type=fields.type,
                frequency=fields.frequency,
                target_count=fields.target_count,
                sub_tasks=[
                    SubTask(id=draft.id or new_id(), title=draft.title, is_completed=draft.is_completed)
                    for draft in fields.sub_tasks
                ],
                created_at=self.clock.now_ms(),
            )

            self.state.habits.put(habit)
            await self.state.persist(habits=True)

            logger.info(f"Created habit {habit.id} '{habit.title}' for user {user_id}")
            return habit.model_copy(deep=True)

    async def delete_habit(self, user_id: str, habit_id: str) -> None:
        """Delete a habit; its check-in records are kept"""
        async with self.locks.for_user(user_id):
            self._require_habit(user_id, habit_id, "delete_habit")
            self.state.habits.delete(habit_id)
            await self.state.persist(habits=True)
            logger.info(f"Deleted habit {habit_id} for user {user_id}")

    async def toggle_subtask(self, user_id: str, habit_id: str, subtask_id: str) -> Habit:
        """Flip one subtask's completion flag"""
        async with self.locks.for_user(user_id):
            habit = self._require_habit(user_id, habit_id, "toggle_subtask").model_copy(deep=True)

            sub_task = habit.find_sub_task(subtask_id)
            if sub_task is None:
                record_rejection("toggle_subtask", "NotFoundError")
                raise NotFoundError(
                    f"Subtask {subtask_id} not found in habit {habit_id}",
                    record_type="Subtask",
                    record_id=subtask_id,
                    user_id=user_id,
                    operation="toggle_subtask"
                )

            sub_task.is_completed = not sub_task.is_completed
            self.state.habits.put(habit)
            await self.state.persist(habits=True)

            logger.debug(
                f"Toggled subtask {subtask_id} of habit {habit_id} to {sub_task.is_completed}"
            )
            return habit.model_copy(deep=True)

    def _validate_check_in_input(
        self,
        user_id: str,
        note: Optional[str],
        lat: Optional[float],
        lng: Optional[float]
    ) -> Optional[GeoLocation]:
        if note is not None and len(note) > MAX_NOTE_LENGTH:
            raise ValidationError(
                f"Note must be at most {MAX_NOTE_LENGTH} characters",
                field="note",
                value=len(note),
                user_id=user_id,
                operation="check_in"
            )

        if lat is None and lng is None:
            return None
        if lat is None or lng is None:
            raise ValidationError(
                "Latitude and longitude must be given together",
                field="location",
                value={"lat": lat, "lng": lng},
                user_id=user_id,
                operation="check_in"
            )
        if not -90 <= lat <= 90 or not -180 <= lng <= 180:
            raise ValidationError(
                "Coordinates out of range",
                field="location",
                value={"lat": lat, "lng": lng},
                user_id=user_id,
                operation="check_in"
            )
        return GeoLocation(lat=lat, lng=lng)

    async def check_in(
        self,
        user_id: str,
        habit_id: str,
        note: Optional[str] = None,
        lat: Optional[float] = None,
        lng: Optional[float] = None
    ) -> CheckInResult:
        """
        Check in on a habit.

        Validation happens on working copies; nothing is stored unless the
        whole check-in succeeds. Habit, check-in record and user are then
        committed together and persisted.

        Raises:
            NotFoundError: unknown user or habit
            AlreadyCompletedError: single-target habit already done today
            ValidationError: malformed note or coordinates
        """
        async with self.locks.for_user(user_id):
            user = self._require_user(user_id, "check_in")
            habit = self._require_habit(user_id, habit_id, "check_in").model_copy(deep=True)
            try:
                location = self._validate_check_in_input(user_id, note, lat, lng)
            except ValidationError:
                record_rejection("check_in", "ValidationError")
                raise

            today = self.clock.today()
            apply_day_rollover(habit, today)

            # Habits with target_count > 1 accept check-ins past their target
            if habit.is_completed_today and habit.target_count <= 1:
                record_rejection("check_in", "AlreadyCompletedError")
                raise AlreadyCompletedError(
                    habit_id=habit_id,
                    user_id=user_id,
                    operation="check_in"
                )

            old_streak = habit.streak
            habit.streak = calculate_new_streak(
                habit.streak,
                habit.last_check_in_date,
                today,
                self.clock.yesterday()
            )
            habit.completed_count += 1
            if habit.completed_count >= habit.target_count:
                habit.is_completed_today = True
            habit.last_check_in_date = today

            record = CheckInRecord(
                id=new_id(),
                habit_id=habit.id,
                user_id=user_id,
                timestamp=self.clock.now_ms(),
                date_string=today,
                note=note,
                location=location,
            )

            updated_user = user.model_copy(deep=True)
            rewards = award_check_in_rewards(updated_user, habit.streak)

            # Commit: no await between these three writes
            self.state.habits.put(habit)
            self.state.check_ins.append(record)
            self.state.users.put(updated_user)

            warnings = await self.state.persist(habits=True, users=True, check_ins=True)

            record_check_in(habit.type.value, rewards.coins, rewards.level_up)
            logger.info(
                f"Check-in {record.id}: user={user_id}, habit={habit.id}, "
                f"streak {old_streak} → {habit.streak}, "
                f"progress {habit.completed_count}/{habit.target_count}, "
                f"coins +{rewards.coins}"
            )

            return CheckInResult(
                record=record,
                updated_habit=habit.model_copy(deep=True),
                rewards=rewards,
                warnings=list(dict.fromkeys(warnings)),
            )
