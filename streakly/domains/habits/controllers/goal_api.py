"""Goal endpoints nested under a habit."""

from __future__ import annotations

from flask import Blueprint, jsonify

from streakly.core.container import get_services
from streakly.core.errors import NotFoundError
from streakly.core.utils.decorators import current_user_id, owned_habit
from streakly.core.utils.validation import parse_body
from streakly.domains.habits.schemas.goal_schemas import (
    GoalCreate,
    GoalUpdate,
    goal_payload,
    progress_payload,
)

goal_api_bp = Blueprint("habit_goal_api", __name__)


def _goal_of(habit_id: int, goal_id: int):
    goal = get_services().goals.get_by_id(goal_id)
    if goal is None or goal.habit_id != habit_id:
        raise NotFoundError()
    return goal


@goal_api_bp.get("/<int:habit_id>/goals")
@owned_habit
def list_goals(habit_id: int):
    goals = get_services().goals.find_by_habit_id(habit_id)
    return jsonify({"ok": True, "goals": [goal_payload(goal) for goal in goals]})


@goal_api_bp.post("/<int:habit_id>/goals")
@owned_habit
def create_goal(habit_id: int):
    data = parse_body(GoalCreate)
    goal = get_services().goals.create(
        habit_id,
        current_user_id(),
        target_frequency=data.target_frequency,
        goal_type=data.goal_type,
    )
    return jsonify({"ok": True, "goal": goal_payload(goal)}), 201


@goal_api_bp.get("/<int:habit_id>/goals/<goal_type>/progress")
@owned_habit
def goal_progress(habit_id: int, goal_type: str):
    progress = get_services().goals.get_progress(habit_id, goal_type)
    if progress is None:
        raise NotFoundError()
    return jsonify({"ok": True, "progress": progress_payload(progress)})


@goal_api_bp.patch("/<int:habit_id>/goals/<int:goal_id>")
@owned_habit
def update_goal(habit_id: int, goal_id: int):
    _goal_of(habit_id, goal_id)
    data = parse_body(GoalUpdate)
    goal = get_services().goals.update(
        goal_id,
        target_frequency=data.target_frequency,
        goal_type=data.goal_type,
    )
    return jsonify({"ok": True, "goal": goal_payload(goal)})


@goal_api_bp.delete("/<int:habit_id>/goals/<int:goal_id>")
@owned_habit
def delete_goal(habit_id: int, goal_id: int):
    _goal_of(habit_id, goal_id)
    get_services().goals.delete(goal_id)
    return "", 204
