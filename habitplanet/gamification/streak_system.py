"""
Habit streak and day-rollover rules

Streak logic (applied once per check-in):
- Last check-in today: streak unchanged (already counted)
- Last check-in yesterday: streak continues (+1)
- Never checked in, or a gap of 2+ days: streak starts over at 1

Rollover: a habit whose last check-in day is not today has its daily progress
(completed_count, is_completed_today) cleared before it is read or acted on.
The streak itself is only touched by a check-in.
"""

from typing import Optional
import logging

from habitplanet.models import Habit

logger = logging.getLogger(__name__)


def apply_day_rollover(habit: Habit, today: str) -> bool:
    """
    Reset a habit's daily progress if its last check-in was not today

    Idempotent: a second call on the same day is a no-op.

    Returns:
        True if the habit was changed
    """
    if habit.last_check_in_date == today:
        return False

    if habit.completed_count == 0 and not habit.is_completed_today:
        return False

    logger.debug(
        f"Rolling over habit {habit.id}: last check-in {habit.last_check_in_date}, today {today}"
    )
    habit.completed_count = 0
    habit.is_completed_today = False
    return True


def calculate_new_streak(
    current_streak: int,
    last_check_in_date: Optional[str],
    today: str,
    yesterday: str
) -> int:
    """
    Streak after a check-in made today

    Args:
        current_streak: Streak stored on the habit
        last_check_in_date: Day of the previous check-in (None if never)
        today: Today's day string
        yesterday: Yesterday's day string

    Returns:
        The new streak
    """
    if last_check_in_date == today:
        return current_streak
    if last_check_in_date == yesterday:
        return current_streak + 1
    return 1
