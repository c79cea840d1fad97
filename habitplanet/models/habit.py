"""Habit models"""
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


class HabitType(str, Enum):
    """Habit categories"""
    STUDY = "Study"
    FITNESS = "Fitness"
    LIFE = "Life"
    WORK = "Work"


class HabitFrequency(str, Enum):
    """Recorded cadence; only daily semantics are enforced"""
    DAILY = "Daily"
    WEEKLY = "Weekly"
    CUSTOM = "Custom"


class SubTask(BaseModel):
    """Checklist item inside a habit"""
    id: str
    title: str
    is_completed: bool = False


class Habit(BaseModel):
    """
    A tracked habit and its daily progress

    is_completed_today holds iff completed_count >= target_count and
    last_check_in_date is today; see gamification.streak_system.apply_day_rollover.
    """
    id: str
    user_id: str
    title: str
    description: str = ""
    type: HabitType = HabitType.LIFE
    frequency: HabitFrequency = HabitFrequency.DAILY
    target_count: int = Field(default=1, ge=1)
    completed_count: int = Field(default=0, ge=0)
    sub_tasks: list[SubTask] = Field(default_factory=list)
    streak: int = Field(default=0, ge=0)
    last_check_in_date: Optional[str] = Field(default=None, pattern=r"^\d{4}-\d{2}-\d{2}$")
    is_completed_today: bool = False
    created_at: int  # ms epoch

    def find_sub_task(self, sub_task_id: str) -> Optional[SubTask]:
        """Return the subtask with this id, if any"""
        for sub_task in self.sub_tasks:
            if sub_task.id == sub_task_id:
                return sub_task
        return None


class SubTaskDraft(BaseModel):
    """Subtask supplied when creating a habit; id is generated when omitted"""
    title: str = Field(min_length=1)
    id: Optional[str] = None
    is_completed: bool = False


class HabitCreate(BaseModel):
    """Caller-supplied fields for a new habit"""
    title: str = Field(default="New Habit", min_length=1, max_length=200)
    description: str = Field(default="", max_length=2000)
    type: HabitType = HabitType.LIFE
    frequency: HabitFrequency = HabitFrequency.DAILY
    target_count: int = Field(default=1, ge=1)
    sub_tasks: list[SubTaskDraft] = Field(default_factory=list)
