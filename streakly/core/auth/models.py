"""Authentication models."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy.orm import Mapped, mapped_column

from streakly.core.utils.dates import utcnow
from streakly.extensions import db


class RefreshToken(db.Model):
    """A live refresh token. Deleting the row revokes the token."""

    __tablename__ = "auth_refresh_token"
    __table_args__ = (db.Index("ix_auth_refresh_token_expires_at", "expires_at"),)

    id: Mapped[int] = mapped_column(primary_key=True)
    token: Mapped[str] = mapped_column(db.String(512), unique=True, nullable=False)
    user_id: Mapped[int] = mapped_column(
        db.ForeignKey("user.id", ondelete="CASCADE"), index=True, nullable=False
    )
    expires_at: Mapped[datetime] = mapped_column(nullable=False)
    created_at: Mapped[datetime] = mapped_column(default=utcnow)
