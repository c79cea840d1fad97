"""Unit tests for Streak System (habitplanet/gamification/streak_system.py)"""
import pytest

from habitplanet.gamification.streak_system import apply_day_rollover, calculate_new_streak
from habitplanet.models import Habit

TODAY = "2024-03-09"
YESTERDAY = "2024-03-08"


def _habit(**fields):
    defaults = {"id": "h1", "user_id": "u1", "title": "Read", "created_at": 0}
    defaults.update(fields)
    return Habit(**defaults)


# ============================================================================
# Streak Calculation Tests
# ============================================================================

def test_first_check_in_starts_streak():
    assert calculate_new_streak(0, None, TODAY, YESTERDAY) == 1


def test_consecutive_day_increments_streak():
    assert calculate_new_streak(5, YESTERDAY, TODAY, YESTERDAY) == 6


def test_same_day_keeps_streak():
    """Multi-target habits check in repeatedly without inflating the streak"""
    assert calculate_new_streak(3, TODAY, TODAY, YESTERDAY) == 3


def test_gap_resets_streak_to_one():
    assert calculate_new_streak(12, "2024-03-06", TODAY, YESTERDAY) == 1


@pytest.mark.parametrize("streak", [0, 1, 7, 100])
def test_streak_after_check_in_is_at_least_one(streak):
    assert calculate_new_streak(streak, "2020-01-01", TODAY, YESTERDAY) >= 1


# ============================================================================
# Day Rollover Tests
# ============================================================================

def test_rollover_clears_stale_progress():
    habit = _habit(completed_count=1, is_completed_today=True, last_check_in_date=YESTERDAY, streak=4)

    changed = apply_day_rollover(habit, TODAY)

    assert changed is True
    assert habit.completed_count == 0
    assert habit.is_completed_today is False
    assert habit.streak == 4  # only a check-in touches the streak


def test_rollover_keeps_todays_progress():
    habit = _habit(completed_count=2, target_count=3, last_check_in_date=TODAY)

    assert apply_day_rollover(habit, TODAY) is False
    assert habit.completed_count == 2


def test_rollover_is_idempotent():
    habit = _habit(completed_count=1, is_completed_today=True, last_check_in_date=YESTERDAY)

    assert apply_day_rollover(habit, TODAY) is True
    assert apply_day_rollover(habit, TODAY) is False
    assert habit.completed_count == 0


def test_rollover_on_untouched_habit_is_noop():
    habit = _habit()
    assert apply_day_rollover(habit, TODAY) is False
