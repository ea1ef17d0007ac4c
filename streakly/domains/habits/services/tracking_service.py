"""Completion logging and streaks."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, scoped_session

from streakly.core.errors import DuplicateLogError, NotFoundError
from streakly.core.utils.dates import as_utc, day_bounds, day_index, to_storage, utcnow
from streakly.domains.habits.models.habit_models import Habit, HabitTracking

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 30
MAX_HISTORY_LIMIT = 100


class TrackingService:
    def __init__(self, session: Session | scoped_session, clock: Callable[[], datetime] = utcnow) -> None:
        self.session = session
        self._clock = clock

    def log_completion(
        self,
        habit_id: int,
        user_id: int,
        *,
        completed_at: Optional[datetime] = None,
        notes: Optional[str] = None,
    ) -> HabitTracking:
        """Record one completion and snapshot the streak it extends.

        At most one completion per habit per tracking day. The lookup below
        gives the friendly error; the (habit_id, tracking_day) unique
        constraint is what actually guarantees it under concurrency.

        The streak is the previous row's streak + 1 when the previous row is
        exactly one tracking day earlier, otherwise 1. The previous row is
        the latest by ``completed_at``, so a backdated completion does not
        rewrite the snapshots of rows logged after it.
        """
        habit = self.session.query(Habit.id).filter_by(id=habit_id, user_id=user_id).first()
        if habit is None:
            raise NotFoundError()

        completed_at = to_storage(completed_at or self._clock())
        start, end = day_bounds(completed_at)
        existing = (
            self.session.query(HabitTracking.id)
            .filter(
                HabitTracking.habit_id == habit_id,
                HabitTracking.completed_at >= start,
                HabitTracking.completed_at <= end,
            )
            .first()
        )
        if existing:
            raise DuplicateLogError()

        last = (
            self.session.query(HabitTracking)
            .filter(HabitTracking.habit_id == habit_id)
            .order_by(HabitTracking.completed_at.desc())
            .first()
        )
        streak = 1
        if last is not None and day_index(completed_at) - day_index(last.completed_at) == 1:
            streak = last.streak + 1

        tracking = HabitTracking(
            habit_id=habit_id,
            user_id=user_id,
            completed_at=completed_at,
            tracking_day=day_index(completed_at),
            notes=(notes or "").strip() or None,
            streak=streak,
        )
        self.session.add(tracking)
        try:
            self.session.commit()
        except IntegrityError as exc:
            self.session.rollback()
            logger.info("Concurrent duplicate log for habit %s rejected by constraint", habit_id)
            raise DuplicateLogError() from exc
        return tracking

    def get_history(
        self,
        habit_id: int,
        limit: Optional[int] = DEFAULT_HISTORY_LIMIT,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
    ) -> List[HabitTracking]:
        if limit is None:
            limit = DEFAULT_HISTORY_LIMIT
        limit = max(min(int(limit), MAX_HISTORY_LIMIT), 1)
        query = self.session.query(HabitTracking).filter(HabitTracking.habit_id == habit_id)
        if date_from is not None:
            query = query.filter(HabitTracking.completed_at >= as_utc(date_from))
        if date_to is not None:
            query = query.filter(HabitTracking.completed_at <= as_utc(date_to))
        return query.order_by(HabitTracking.completed_at.desc()).limit(limit).all()

    def get_streak(self, habit_id: int) -> int:
        """Snapshot of the latest completion, not a recomputation."""
        last = (
            self.session.query(HabitTracking.streak)
            .filter(HabitTracking.habit_id == habit_id)
            .order_by(HabitTracking.completed_at.desc())
            .first()
        )
        return last.streak if last else 0

    def get_tracking_by_id(self, tracking_id: int) -> Optional[HabitTracking]:
        return self.session.get(HabitTracking, tracking_id)

    def delete_tracking(self, tracking_id: int) -> None:
        tracking = self.session.get(HabitTracking, tracking_id)
        if tracking is None:
            raise NotFoundError()
        self.session.delete(tracking)
        self.session.commit()
