"""Completion tracking endpoints nested under a habit."""

from __future__ import annotations

from flask import Blueprint, jsonify

from streakly.core.container import get_services
from streakly.core.errors import NotFoundError
from streakly.core.utils.decorators import current_user_id, owned_habit
from streakly.core.utils.validation import parse_args, parse_body
from streakly.domains.habits.schemas.habit_schemas import (
    HistoryQuery,
    TrackingCreate,
    tracking_payload,
)

tracking_api_bp = Blueprint("habit_tracking_api", __name__)


@tracking_api_bp.post("/<int:habit_id>/track")
@owned_habit
def track_habit(habit_id: int):
    data = parse_body(TrackingCreate)
    tracking = get_services().tracking.log_completion(
        habit_id,
        current_user_id(),
        completed_at=data.completed_at,
        notes=data.notes,
    )
    return jsonify({"ok": True, "tracking": tracking_payload(tracking)}), 201


@tracking_api_bp.get("/<int:habit_id>/history")
@owned_habit
def habit_history(habit_id: int):
    query = parse_args(HistoryQuery)
    rows = get_services().tracking.get_history(
        habit_id,
        limit=query.limit,
        date_from=query.date_from,
        date_to=query.date_to,
    )
    return jsonify({"ok": True, "history": [tracking_payload(row) for row in rows]})


@tracking_api_bp.get("/<int:habit_id>/streak")
@owned_habit
def habit_streak(habit_id: int):
    return jsonify({"ok": True, "streak": get_services().tracking.get_streak(habit_id)})


@tracking_api_bp.delete("/<int:habit_id>/tracking/<int:tracking_id>")
@owned_habit
def delete_tracking(habit_id: int, tracking_id: int):
    tracking_service = get_services().tracking
    tracking = tracking_service.get_tracking_by_id(tracking_id)
    if tracking is None or tracking.habit_id != habit_id:
        raise NotFoundError()
    tracking_service.delete_tracking(tracking_id)
    return "", 204
