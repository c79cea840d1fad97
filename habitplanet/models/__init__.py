"""Data models shared by the check-in and gacha engines"""
from habitplanet.models.habit import Habit, HabitType, HabitFrequency, SubTask, SubTaskDraft, HabitCreate
from habitplanet.models.checkin import CheckInRecord, GeoLocation
from habitplanet.models.card import Card, Rarity, RARITY_MULTIPLIERS
from habitplanet.models.user import User, PET_EXP_PER_LEVEL
from habitplanet.models.results import CheckInRewards, CheckInResult, DrawResult

__all__ = [
    "Habit",
    "HabitType",
    "HabitFrequency",
    "SubTask",
    "SubTaskDraft",
    "HabitCreate",
    "CheckInRecord",
    "GeoLocation",
    "Card",
    "Rarity",
    "RARITY_MULTIPLIERS",
    "User",
    "PET_EXP_PER_LEVEL",
    "CheckInRewards",
    "CheckInResult",
    "DrawResult",
]
