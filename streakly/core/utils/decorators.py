"""Reusable decorators for controllers."""

from __future__ import annotations

from functools import wraps
from typing import Callable, TypeVar

from flask import g
from flask_jwt_extended import get_jwt_identity, jwt_required

from streakly.core.container import get_services
from streakly.core.errors import NotFoundError

F = TypeVar("F", bound=Callable)


def current_user_id() -> int:
    return int(get_jwt_identity())


def owned_habit(fn: F) -> F:
    """Require a JWT and a ``habit_id`` that belongs to its subject.

    Someone else's habit is indistinguishable from a missing one (404).
    The resolved view is left on ``g.habit_view``.
    """

    @wraps(fn)
    @jwt_required()
    def wrapper(*args, **kwargs):  # type: ignore[misc]
        view = get_services().habits.find_by_id_and_user(kwargs["habit_id"], current_user_id())
        if view is None:
            raise NotFoundError()
        g.habit_view = view
        return fn(*args, **kwargs)

    return wrapper  # type: ignore[return-value]
