"""Habit directory: CRUD scoped to an owner, enriched with ``tracked_today``."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Dict, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, scoped_session

from streakly.core.errors import ConflictError, NotFoundError, ValidationError
from streakly.core.utils.dates import day_bounds, utcnow
from streakly.domains.habits.constants import DEFAULT_HABIT_COLOR, Frequency
from streakly.domains.habits.models.habit_models import Habit, HabitTracking

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("name", "description", "frequency", "category", "color", "is_active")
NON_NULLABLE_FIELDS = ("name", "frequency", "is_active")


class HabitService:
    """Results are dicts of the form ``{"habit": Habit, "tracked_today": bool}``."""

    def __init__(self, session: Session | scoped_session, clock: Callable[[], datetime] = utcnow) -> None:
        self.session = session
        self._clock = clock

    def create(
        self,
        user_id: int,
        *,
        name: str,
        description: str | None = None,
        frequency: str | Frequency | None = None,
        category: str | None = None,
        color: str | None = None,
    ) -> Dict[str, object]:
        name_norm = _clean_name(name)
        existing = self.session.query(Habit.id).filter_by(user_id=user_id, name=name_norm).first()
        if existing:
            raise ConflictError("duplicate")

        habit = Habit(
            user_id=user_id,
            name=name_norm,
            description=(description or "").strip() or None,
            frequency=_frequency(frequency or Frequency.DAILY),
            category=(category or "").strip() or None,
            color=(color or "").strip() or DEFAULT_HABIT_COLOR,
        )
        self.session.add(habit)
        self._commit_or_conflict()
        logger.info("Created habit %s for user %s", habit.id, user_id)
        # Nothing can have been tracked for a habit that did not exist yet.
        return {"habit": habit, "tracked_today": False}

    def find_all(self, user_id: int, is_active: Optional[bool] = None) -> List[Dict[str, object]]:
        """List a user's habits newest first.

        ``tracked_today`` comes from a single query over the user's tracking
        rows for today, matched by habit id in memory.
        """
        query = self.session.query(Habit).filter(Habit.user_id == user_id)
        if is_active is not None:
            query = query.filter(Habit.is_active.is_(is_active))
        habits = query.order_by(Habit.created_at.desc(), Habit.id.desc()).all()

        start, end = day_bounds(self._clock())
        tracked_ids = {
            row.habit_id
            for row in self.session.query(HabitTracking.habit_id)
            .filter(
                HabitTracking.user_id == user_id,
                HabitTracking.completed_at >= start,
                HabitTracking.completed_at <= end,
            )
            .all()
        }
        return [{"habit": habit, "tracked_today": habit.id in tracked_ids} for habit in habits]

    def find_by_id(self, habit_id: int) -> Optional[Dict[str, object]]:
        habit = self.session.get(Habit, habit_id)
        if habit is None:
            return None
        return {"habit": habit, "tracked_today": self._is_tracked_today(habit)}

    def find_by_id_and_user(self, habit_id: int, user_id: int) -> Optional[Dict[str, object]]:
        habit = self.session.query(Habit).filter_by(id=habit_id, user_id=user_id).first()
        if habit is None:
            return None
        return {"habit": habit, "tracked_today": self._is_tracked_today(habit)}

    def update(self, habit_id: int, **fields) -> Dict[str, object]:
        habit = self.session.get(Habit, habit_id)
        if habit is None:
            raise NotFoundError()

        for key in UPDATABLE_FIELDS:
            if key not in fields:
                continue
            value = fields[key]
            if value is None and key in NON_NULLABLE_FIELDS:
                continue
            if key == "name":
                value = _clean_name(value)
            elif key == "frequency":
                value = _frequency(value)
            elif isinstance(value, str):
                value = value.strip() or None
            setattr(habit, key, value)
        self._commit_or_conflict()
        return {"habit": habit, "tracked_today": self._is_tracked_today(habit)}

    def delete(self, habit_id: int) -> None:
        """Hard delete; tracking rows and goals go with it."""
        habit = self.session.get(Habit, habit_id)
        if habit is None:
            raise NotFoundError()
        self.session.delete(habit)
        self.session.commit()
        logger.info("Deleted habit %s", habit_id)

    def _is_tracked_today(self, habit: Habit) -> bool:
        start, end = day_bounds(self._clock())
        tracked = (
            self.session.query(HabitTracking.id)
            .filter(
                HabitTracking.habit_id == habit.id,
                HabitTracking.user_id == habit.user_id,
                HabitTracking.completed_at >= start,
                HabitTracking.completed_at <= end,
            )
            .first()
        )
        return tracked is not None

    def _commit_or_conflict(self) -> None:
        try:
            self.session.commit()
        except IntegrityError as exc:
            self.session.rollback()
            raise ConflictError("duplicate") from exc


def _clean_name(name: str | None) -> str:
    name_norm = (name or "").strip()
    if not name_norm or len(name_norm) > 255:
        raise ValidationError()
    return name_norm


def _frequency(value: str | Frequency) -> Frequency:
    try:
        return Frequency.from_wire(value)
    except ValueError as exc:
        raise ValidationError("invalid_frequency") from exc
