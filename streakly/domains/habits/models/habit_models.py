"""Habits models with prefixed tables."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy.orm import Mapped, mapped_column, relationship

from streakly.core.utils.dates import utcnow
from streakly.domains.habits.constants import DEFAULT_HABIT_COLOR, Frequency, GoalType
from streakly.extensions import db


class Habit(db.Model):
    __tablename__ = "habits_habit"
    __table_args__ = (
        db.UniqueConstraint("user_id", "name", name="ux_habits_habit_user_name"),
        db.Index("ix_habits_habit_user_active", "user_id", "is_active"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(
        db.ForeignKey("user.id", ondelete="CASCADE"), index=True, nullable=False
    )
    name: Mapped[str] = mapped_column(db.String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(db.Text)
    frequency: Mapped[Frequency] = mapped_column(
        db.Enum(Frequency, native_enum=False, length=16),
        nullable=False,
        default=Frequency.DAILY,
    )
    category: Mapped[str | None] = mapped_column(db.String(64))
    is_active: Mapped[bool] = mapped_column(default=True)
    color: Mapped[str | None] = mapped_column(db.String(32), default=DEFAULT_HABIT_COLOR)
    created_at: Mapped[datetime] = mapped_column(default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(default=utcnow, onupdate=utcnow)

    trackings: Mapped[list["HabitTracking"]] = relationship(
        "HabitTracking",
        back_populates="habit",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    goals: Mapped[list["HabitGoal"]] = relationship(
        "HabitGoal",
        back_populates="habit",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class HabitTracking(db.Model):
    """One completion. ``streak`` is a snapshot taken when the row was written."""

    __tablename__ = "habits_tracking"
    __table_args__ = (
        # Store-level guarantee of one completion per habit per tracking day.
        db.UniqueConstraint("habit_id", "tracking_day", name="ux_habits_tracking_habit_day"),
        db.Index("ix_habits_tracking_habit_completed_at", "habit_id", "completed_at"),
        db.Index("ix_habits_tracking_user_completed_at", "user_id", "completed_at"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    habit_id: Mapped[int] = mapped_column(
        db.ForeignKey("habits_habit.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[int] = mapped_column(
        db.ForeignKey("user.id", ondelete="CASCADE"), nullable=False
    )
    completed_at: Mapped[datetime] = mapped_column(nullable=False)
    tracking_day: Mapped[int] = mapped_column(nullable=False)
    notes: Mapped[str | None] = mapped_column(db.Text)
    streak: Mapped[int] = mapped_column(nullable=False, default=1)
    created_at: Mapped[datetime] = mapped_column(default=utcnow)

    habit: Mapped[Habit] = relationship("Habit", back_populates="trackings")


class HabitGoal(db.Model):
    __tablename__ = "habits_goal"
    __table_args__ = (
        db.UniqueConstraint("habit_id", "goal_type", name="ux_habits_goal_habit_type"),
        db.CheckConstraint("target_frequency > 0", name="ck_habits_goal_target_positive"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    habit_id: Mapped[int] = mapped_column(
        db.ForeignKey("habits_habit.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[int] = mapped_column(
        db.ForeignKey("user.id", ondelete="CASCADE"), index=True, nullable=False
    )
    target_frequency: Mapped[int] = mapped_column(nullable=False)
    goal_type: Mapped[GoalType] = mapped_column(
        db.Enum(GoalType, native_enum=False, length=16),
        nullable=False,
        default=GoalType.WEEKLY,
    )
    created_at: Mapped[datetime] = mapped_column(default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(default=utcnow, onupdate=utcnow)

    habit: Mapped[Habit] = relationship("Habit", back_populates="goals")
