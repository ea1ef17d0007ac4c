from streakly.domains.habits.models.habit_models import Habit, HabitGoal, HabitTracking

__all__ = ["Habit", "HabitGoal", "HabitTracking"]
