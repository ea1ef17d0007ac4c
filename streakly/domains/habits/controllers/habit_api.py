"""Habits JSON API controllers (thin, schema-validated)."""

from __future__ import annotations

from flask import Blueprint, g, jsonify
from flask_jwt_extended import jwt_required

from streakly.core.container import get_services
from streakly.core.utils.decorators import current_user_id, owned_habit
from streakly.core.utils.validation import parse_args, parse_body
from streakly.domains.habits.schemas.habit_schemas import (
    HabitCreate,
    HabitListQuery,
    HabitUpdate,
    habit_payload,
)

habit_api_bp = Blueprint("habit_api", __name__)


@habit_api_bp.get("")
@jwt_required()
def list_habits():
    query = parse_args(HabitListQuery)
    habits = get_services().habits.find_all(current_user_id(), is_active=query.is_active)
    return jsonify({"ok": True, "habits": [habit_payload(item) for item in habits]})


@habit_api_bp.post("")
@jwt_required()
def create_habit():
    data = parse_body(HabitCreate)
    view = get_services().habits.create(current_user_id(), **data.model_dump())
    return jsonify({"ok": True, "habit": habit_payload(view)}), 201


@habit_api_bp.get("/<int:habit_id>")
@owned_habit
def habit_detail(habit_id: int):
    return jsonify({"ok": True, "habit": habit_payload(g.habit_view)})


@habit_api_bp.patch("/<int:habit_id>")
@owned_habit
def update_habit(habit_id: int):
    data = parse_body(HabitUpdate)
    view = get_services().habits.update(habit_id, **data.model_dump(exclude_unset=True))
    return jsonify({"ok": True, "habit": habit_payload(view)})


@habit_api_bp.delete("/<int:habit_id>")
@owned_habit
def delete_habit(habit_id: int):
    get_services().habits.delete(habit_id)
    return "", 204
