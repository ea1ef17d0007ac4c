"""Consistency goals and their progress."""

from __future__ import annotations

from datetime import datetime
from typing import Callable, Dict, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, scoped_session

from streakly.core.errors import ConflictError, NotFoundError, ValidationError
from streakly.core.utils.dates import period_start, utcnow
from streakly.domains.habits.constants import GoalType
from streakly.domains.habits.models.habit_models import Habit, HabitGoal, HabitTracking


class GoalService:
    def __init__(self, session: Session | scoped_session, clock: Callable[[], datetime] = utcnow) -> None:
        self.session = session
        self._clock = clock

    def create(
        self,
        habit_id: int,
        user_id: int,
        *,
        target_frequency: int,
        goal_type: str | GoalType,
    ) -> HabitGoal:
        target = _target(target_frequency)
        kind = _goal_type(goal_type)
        if self.session.get(Habit, habit_id) is None:
            raise NotFoundError()
        if self.find_by_habit_and_goal_type(habit_id, kind) is not None:
            raise ConflictError("goal_exists")

        goal = HabitGoal(habit_id=habit_id, user_id=user_id, target_frequency=target, goal_type=kind)
        self.session.add(goal)
        self._commit_or_conflict()
        return goal

    def find_by_habit_id(self, habit_id: int) -> List[HabitGoal]:
        return (
            self.session.query(HabitGoal)
            .filter(HabitGoal.habit_id == habit_id)
            .order_by(HabitGoal.id)
            .all()
        )

    def find_by_habit_and_goal_type(self, habit_id: int, goal_type: str | GoalType) -> Optional[HabitGoal]:
        return (
            self.session.query(HabitGoal)
            .filter_by(habit_id=habit_id, goal_type=_goal_type(goal_type))
            .first()
        )

    def get_by_id(self, goal_id: int) -> Optional[HabitGoal]:
        return self.session.get(HabitGoal, goal_id)

    def update(
        self,
        goal_id: int,
        *,
        target_frequency: Optional[int] = None,
        goal_type: str | GoalType | None = None,
    ) -> HabitGoal:
        goal = self.get_by_id(goal_id)
        if goal is None:
            raise NotFoundError()
        target = _target(target_frequency) if target_frequency is not None else None
        kind = _goal_type(goal_type) if goal_type is not None else None
        if kind is not None and kind != goal.goal_type:
            if self.find_by_habit_and_goal_type(goal.habit_id, kind) is not None:
                raise ConflictError("goal_exists")
            goal.goal_type = kind
        if target is not None:
            goal.target_frequency = target
        self._commit_or_conflict()
        return goal

    def delete(self, goal_id: int) -> None:
        goal = self.get_by_id(goal_id)
        if goal is None:
            raise NotFoundError()
        self.session.delete(goal)
        self.session.commit()

    def get_progress(self, habit_id: int, goal_type: str | GoalType) -> Optional[Dict[str, object]]:
        """Completions in the current period against the goal's target.

        The period (week from Monday, calendar month, calendar year) is
        anchored to the current time. ``percentage`` is rounded half up and
        capped at 100; ``completions`` is reported as counted.
        """
        kind = _goal_type(goal_type)
        goal = self.find_by_habit_and_goal_type(habit_id, kind)
        if goal is None:
            return None

        now = self._clock()
        start = period_start(kind.wire, now)
        completions = (
            self.session.query(HabitTracking)
            .filter(
                HabitTracking.habit_id == habit_id,
                HabitTracking.completed_at >= start,
                HabitTracking.completed_at <= now,
            )
            .count()
        )
        target = goal.target_frequency
        # round(completions / target * 100) with halves rounded up, in integers
        percentage = (completions * 200 + target) // (2 * target)
        return {
            "goal": goal,
            "completions": completions,
            "target_frequency": target,
            "percentage": min(percentage, 100),
            "period_start": start,
        }

    def _commit_or_conflict(self) -> None:
        try:
            self.session.commit()
        except IntegrityError as exc:
            self.session.rollback()
            raise ConflictError("goal_exists") from exc


def _target(value: int) -> int:
    if value is None or int(value) < 1:
        raise ValidationError("invalid_target_frequency")
    return int(value)


def _goal_type(value: str | GoalType) -> GoalType:
    try:
        return GoalType.from_wire(value)
    except ValueError as exc:
        raise ValidationError("invalid_goal_type") from exc
