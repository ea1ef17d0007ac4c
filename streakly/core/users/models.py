"""User model."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy.orm import Mapped, mapped_column, relationship

from streakly.core.utils.dates import utcnow
from streakly.extensions import db

if TYPE_CHECKING:
    from streakly.core.auth.models import RefreshToken
    from streakly.domains.habits.models.habit_models import Habit


class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(default=utcnow, onupdate=utcnow)


class User(db.Model, TimestampMixin):
    __tablename__ = "user"

    id: Mapped[int] = mapped_column(primary_key=True)
    email: Mapped[str] = mapped_column(db.String(255), unique=True, nullable=False, index=True)
    password_hash: Mapped[str] = mapped_column(db.String(255), nullable=False)
    name: Mapped[str | None] = mapped_column(db.String(255))

    habits: Mapped[list["Habit"]] = relationship(
        "Habit",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    refresh_tokens: Mapped[list["RefreshToken"]] = relationship(
        "RefreshToken",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
