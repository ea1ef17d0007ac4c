"""Habit services: directory, tracking and goals."""

from streakly.domains.habits.services.goal_service import GoalService
from streakly.domains.habits.services.habit_service import HabitService
from streakly.domains.habits.services.tracking_service import TrackingService

__all__ = ["GoalService", "HabitService", "TrackingService"]
