"""Habit and tracking DTOs and schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from streakly.domains.habits.models.habit_models import Habit, HabitTracking

FrequencyWire = Literal["daily", "weekly", "monthly"]


class HabitCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, max_length=4096)
    frequency: FrequencyWire = "daily"
    category: Optional[str] = Field(default=None, max_length=64)
    color: Optional[str] = Field(default=None, max_length=32)


class HabitUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, max_length=4096)
    frequency: Optional[FrequencyWire] = None
    category: Optional[str] = Field(default=None, max_length=64)
    color: Optional[str] = Field(default=None, max_length=32)
    is_active: Optional[bool] = None


class HabitListQuery(BaseModel):
    is_active: Optional[bool] = None


class HabitResponse(BaseModel):
    id: int
    user_id: int
    name: str
    description: Optional[str]
    frequency: FrequencyWire
    category: Optional[str]
    is_active: bool
    color: Optional[str]
    created_at: datetime
    updated_at: datetime
    tracked_today: bool


class TrackingCreate(BaseModel):
    completed_at: Optional[datetime] = None
    notes: Optional[str] = Field(default=None, max_length=2048)


class HistoryQuery(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    # Out-of-range limits are clamped by the service rather than rejected.
    limit: int = 30
    date_from: Optional[datetime] = Field(default=None, alias="from")
    date_to: Optional[datetime] = Field(default=None, alias="to")


class TrackingResponse(BaseModel):
    id: int
    habit_id: int
    user_id: int
    completed_at: datetime
    notes: Optional[str]
    streak: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


def habit_payload(view: dict) -> dict:
    habit: Habit = view["habit"]
    return HabitResponse(
        id=habit.id,
        user_id=habit.user_id,
        name=habit.name,
        description=habit.description,
        frequency=habit.frequency.wire,
        category=habit.category,
        is_active=habit.is_active,
        color=habit.color,
        created_at=habit.created_at,
        updated_at=habit.updated_at,
        tracked_today=view["tracked_today"],
    ).model_dump(mode="json")


def tracking_payload(tracking: HabitTracking) -> dict:
    return TrackingResponse.model_validate(tracking).model_dump(mode="json")
