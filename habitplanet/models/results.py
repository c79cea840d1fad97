"""Results returned by the check-in and gacha engines"""
from typing import Optional
from pydantic import BaseModel, Field

from habitplanet.models.card import Card
from habitplanet.models.checkin import CheckInRecord
from habitplanet.models.habit import Habit


class CheckInRewards(BaseModel):
    """What a single check-in earned"""
    coins: int
    exp: int
    level_up: bool = False
    new_level: Optional[int] = None  # only set when level_up


class CheckInResult(BaseModel):
    record: CheckInRecord
    updated_habit: Habit
    rewards: CheckInRewards
    warnings: list[str] = Field(default_factory=list)  # non-fatal, e.g. storage failures


class DrawResult(BaseModel):
    card: Card
    remaining_coins: int
    warnings: list[str] = Field(default_factory=list)
