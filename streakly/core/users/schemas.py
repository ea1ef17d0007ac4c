"""Typed schemas for user IO."""

from __future__ import annotations

from datetime import datetime
from typing import Optional, TYPE_CHECKING

from pydantic import BaseModel, ConfigDict

if TYPE_CHECKING:
    from streakly.core.users.models import User


class UserResponse(BaseModel):
    # Response should not re-validate persisted emails.
    id: int
    email: str
    name: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


def serialize_user(user: "User") -> "UserResponse":
    """Public view of a user; the password hash never leaves the service."""
    return UserResponse.model_validate(user)
