"""Goal schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

from streakly.domains.habits.models.habit_models import HabitGoal

GoalTypeWire = Literal["weekly", "monthly", "yearly"]


class GoalCreate(BaseModel):
    target_frequency: int = Field(ge=1)
    goal_type: GoalTypeWire = "weekly"


class GoalUpdate(BaseModel):
    target_frequency: Optional[int] = Field(default=None, ge=1)
    goal_type: Optional[GoalTypeWire] = None


class GoalResponse(BaseModel):
    id: int
    habit_id: int
    user_id: int
    target_frequency: int
    goal_type: GoalTypeWire
    created_at: datetime
    updated_at: datetime


class GoalProgressResponse(BaseModel):
    goal: GoalResponse
    completions: int
    target_frequency: int
    percentage: int
    period_start: datetime


def _goal_response(goal: HabitGoal) -> GoalResponse:
    return GoalResponse(
        id=goal.id,
        habit_id=goal.habit_id,
        user_id=goal.user_id,
        target_frequency=goal.target_frequency,
        goal_type=goal.goal_type.wire,
        created_at=goal.created_at,
        updated_at=goal.updated_at,
    )


def goal_payload(goal: HabitGoal) -> dict:
    return _goal_response(goal).model_dump(mode="json")


def progress_payload(progress: dict) -> dict:
    return GoalProgressResponse(
        goal=_goal_response(progress["goal"]),
        completions=progress["completions"],
        target_frequency=progress["target_frequency"],
        percentage=progress["percentage"],
        period_start=progress["period_start"],
    ).model_dump(mode="json")
