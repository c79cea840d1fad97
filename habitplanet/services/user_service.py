"""
UserService - Profiles, stats and coaching advice

Handles account creation (with optional starter habits), profile and
check-in history reads, and advice from the content generator.
"""

import logging

from habitplanet.db.stores import StateStore
from habitplanet.exceptions import (
    ContentGenerationUnavailableError,
    NotFoundError,
    ValidationError,
)
from habitplanet.gamification import apply_day_rollover
from habitplanet.models import CheckInRecord, Habit, HabitType, SubTask, User
from habitplanet.observability.metrics import record_content_generation_failure
from habitplanet.services.content_generation import ContentGenerationService
from habitplanet.utils.datetime_helpers import Clock
from habitplanet.utils.ids import new_id
from habitplanet.utils.locks import UserLockRegistry

logger = logging.getLogger(__name__)

ADVICE_UNCONFIGURED = "AI coach is unavailable right now. Keep checking in and your streaks will speak for themselves! 🔥"
ADVICE_FALLBACK = "Could not generate insights at the moment. Keep going, you're doing great! 💪"


def build_starter_habits(user_id: str, created_at: int) -> list[Habit]:
    """Habits new players start with when they opt in"""
    return [
        Habit(
            id=new_id(),
            user_id=user_id,
            title="Morning Water",
            description="Drink a glass of water after waking up",
            type=HabitType.LIFE,
            created_at=created_at,
        ),
        Habit(
            id=new_id(),
            user_id=user_id,
            title="Code Study",
            description="Learn something new for 1 hour",
            type=HabitType.STUDY,
            sub_tasks=[
                SubTask(id=new_id(), title="Read Docs"),
                SubTask(id=new_id(), title="Write Code"),
            ],
            created_at=created_at + 1,
        ),
    ]


class UserService:
    """
    Service for user accounts.

    Responsibilities:
    - Creating users with starting progression
    - Profile and check-in history lookups
    - Habit advice with graceful fallback
    """

    def __init__(
        self,
        state: StateStore,
        clock: Clock,
        locks: UserLockRegistry,
        content: ContentGenerationService
    ):
        self.state = state
        self.clock = clock
        self.locks = locks
        self.content = content
        logger.debug("UserService initialized")

    def _require_user(self, user_id: str, operation: str) -> User:
        user = self.state.users.get(user_id)
        if user is None:
            raise NotFoundError(
                f"User {user_id} not found",
                record_type="User",
                record_id=user_id,
                user_id=user_id,
                operation=operation
            )
        return user

    async def create_user(
        self,
        user_id: str,
        name: str = "Traveler",
        starter_habits: bool = False
    ) -> User:
        """
        Create a user with starting coins, pet and cosmetics.

        Raises:
            ValidationError: empty id or the user already exists
        """
        if not user_id or not user_id.strip():
            raise ValidationError("User id must not be empty", field="user_id", value=user_id)

        async with self.locks.for_user(user_id):
            if self.state.users.exists(user_id):
                raise ValidationError(
                    f"User {user_id} already exists",
                    field="user_id",
                    value=user_id,
                    operation="create_user"
                )

            user = User(id=user_id, name=name or "Traveler")
            self.state.users.put(user)

            habits = []
            if starter_habits:
                habits = build_starter_habits(user_id, self.clock.now_ms())
                for habit in habits:
                    self.state.habits.put(habit)

            await self.state.persist(users=True, habits=bool(habits))

            logger.info(f"Created user {user_id} with {len(habits)} starter habits")
            return user.model_copy(deep=True)

    async def get_user_profile(self, user_id: str) -> User:
        return self._require_user(user_id, "get_user_profile").model_copy(deep=True)

    async def get_stats(self, user_id: str) -> list[CheckInRecord]:
        """All of the user's check-ins, oldest first"""
        self._require_user(user_id, "get_stats")
        return self.state.check_ins.for_user(user_id)

    async def get_advice(self, user_id: str) -> str:
        """
        Coaching tips for the user's current habits.

        Never raises for content-generation problems; returns a fallback
        message instead.
        """
        self._require_user(user_id, "get_advice")

        # Summaries reflect today's progress without writing anything
        today = self.clock.today()
        habits = []
        for stored in self.state.habits.list_for_user(user_id):
            habit = stored.model_copy(deep=True)
            apply_day_rollover(habit, today)
            habits.append(habit)
        check_ins = self.state.check_ins.for_user(user_id)

        if not self.content.is_configured:
            return ADVICE_UNCONFIGURED

        try:
            return await self.content.generate_advice(habits, check_ins)
        except ContentGenerationUnavailableError as e:
            record_content_generation_failure("advice")
            logger.warning(f"Advice fallback for user {user_id}: {e.message}")
            return ADVICE_FALLBACK
