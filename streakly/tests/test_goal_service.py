"""Tests for goals and period progress."""

from datetime import datetime, timedelta

import pytest

pytestmark = pytest.mark.integration

from streakly.core.errors import ConflictError, NotFoundError, ValidationError
from streakly.domains.habits.constants import GoalType
from streakly.domains.habits.models import HabitGoal
from streakly.domains.habits.services import GoalService, HabitService, TrackingService
from streakly.extensions import db

MONDAY = datetime(2024, 1, 15, 5, 0)


@pytest.fixture
def goals(app, clock):
    return GoalService(db.session, clock=clock)


@pytest.fixture
def tracking(app, clock):
    return TrackingService(db.session, clock=clock)


@pytest.fixture
def habit(app, user, clock):
    return HabitService(db.session, clock=clock).create(user.id, name="Run")["habit"]


def _log_days(tracking, habit, user, *days):
    for day in days:
        tracking.log_completion(habit.id, user.id, completed_at=day)


class TestGoalCrud:
    def test_create(self, goals, habit, user):
        goal = goals.create(habit.id, user.id, target_frequency=5, goal_type="weekly")

        assert goal.id is not None
        assert goal.goal_type is GoalType.WEEKLY
        assert goal.target_frequency == 5
        assert goals.find_by_habit_id(habit.id) == [goal]

    def test_one_goal_per_type(self, goals, habit, user):
        goals.create(habit.id, user.id, target_frequency=5, goal_type="weekly")

        with pytest.raises(ConflictError):
            goals.create(habit.id, user.id, target_frequency=3, goal_type="weekly")

        goals.create(habit.id, user.id, target_frequency=20, goal_type="monthly")
        assert len(goals.find_by_habit_id(habit.id)) == 2

    @pytest.mark.parametrize("target", [0, -1])
    def test_target_must_be_positive(self, goals, habit, user, target):
        with pytest.raises(ValidationError):
            goals.create(habit.id, user.id, target_frequency=target, goal_type="weekly")

    def test_unknown_goal_type(self, goals, habit, user):
        with pytest.raises(ValidationError):
            goals.create(habit.id, user.id, target_frequency=1, goal_type="daily")

    def test_missing_habit(self, goals, user):
        with pytest.raises(NotFoundError):
            goals.create(4242, user.id, target_frequency=1, goal_type="weekly")

    def test_update(self, goals, habit, user):
        goal = goals.create(habit.id, user.id, target_frequency=5, goal_type="weekly")

        updated = goals.update(goal.id, target_frequency=7, goal_type="monthly")

        assert updated.target_frequency == 7
        assert updated.goal_type is GoalType.MONTHLY

    def test_update_into_existing_type(self, goals, habit, user):
        goals.create(habit.id, user.id, target_frequency=5, goal_type="weekly")
        monthly = goals.create(habit.id, user.id, target_frequency=20, goal_type="monthly")

        with pytest.raises(ConflictError):
            goals.update(monthly.id, goal_type="weekly")

    def test_update_missing(self, goals):
        with pytest.raises(NotFoundError):
            goals.update(999, target_frequency=2)

    def test_update_rejects_non_positive_target(self, goals, habit, user):
        goal = goals.create(habit.id, user.id, target_frequency=5, goal_type="weekly")

        with pytest.raises(ValidationError):
            goals.update(goal.id, target_frequency=0)

    def test_delete(self, goals, habit, user):
        goal = goals.create(habit.id, user.id, target_frequency=5, goal_type="weekly")

        goals.delete(goal.id)

        assert goals.get_by_id(goal.id) is None
        with pytest.raises(NotFoundError):
            goals.delete(goal.id)


class TestGoalProgress:
    def test_weekly_progress(self, goals, tracking, habit, user):
        goals.create(habit.id, user.id, target_frequency=5, goal_type="weekly")
        _log_days(tracking, habit, user, MONDAY, MONDAY + timedelta(days=1), MONDAY + timedelta(days=2))

        progress = goals.get_progress(habit.id, "weekly")

        assert progress["completions"] == 3
        assert progress["target_frequency"] == 5
        assert progress["percentage"] == 60
        assert progress["period_start"] == datetime(2024, 1, 14, 17, 0)

    def test_previous_week_not_counted(self, goals, tracking, habit, user):
        goals.create(habit.id, user.id, target_frequency=2, goal_type="weekly")
        # Sunday 16:00 UTC is still Sunday in the tracking-day frame.
        _log_days(tracking, habit, user, datetime(2024, 1, 14, 16, 0), MONDAY)

        progress = goals.get_progress(habit.id, "weekly")

        assert progress["completions"] == 1
        assert progress["percentage"] == 50

    def test_percentage_is_capped(self, goals, tracking, habit, user):
        goals.create(habit.id, user.id, target_frequency=2, goal_type="weekly")
        _log_days(tracking, habit, user, MONDAY, MONDAY + timedelta(days=1), MONDAY + timedelta(days=2))

        progress = goals.get_progress(habit.id, "weekly")

        assert progress["completions"] == 3
        assert progress["percentage"] == 100

    @pytest.mark.parametrize(
        "target, logged, expected",
        [(3, 1, 33), (3, 2, 67), (8, 1, 13), (6, 1, 17)],
    )
    def test_percentage_rounds_half_up(self, goals, tracking, habit, user, target, logged, expected):
        goals.create(habit.id, user.id, target_frequency=target, goal_type="monthly")
        _log_days(tracking, habit, user, *[MONDAY + timedelta(days=i) for i in range(logged)])

        assert goals.get_progress(habit.id, "monthly")["percentage"] == expected

    def test_monthly_and_yearly_periods(self, goals, tracking, habit, user):
        goals.create(habit.id, user.id, target_frequency=10, goal_type="monthly")
        goals.create(habit.id, user.id, target_frequency=100, goal_type="yearly")
        # Dec 31 17:30 UTC is Jan 1 in the tracking-day frame; Dec 31 10:00 is not.
        _log_days(tracking, habit, user, datetime(2023, 12, 31, 10, 0), datetime(2023, 12, 31, 17, 30), MONDAY)

        assert goals.get_progress(habit.id, "monthly")["completions"] == 2
        assert goals.get_progress(habit.id, "yearly")["completions"] == 2

    def test_future_completions_not_counted(self, goals, tracking, habit, user, clock):
        goals.create(habit.id, user.id, target_frequency=5, goal_type="weekly")
        _log_days(tracking, habit, user, MONDAY, clock.now + timedelta(days=1))

        assert goals.get_progress(habit.id, "weekly")["completions"] == 1

    def test_no_goal(self, goals, habit):
        assert goals.get_progress(habit.id, "weekly") is None

    def test_goals_removed_with_habit(self, goals, habit, user, clock):
        goals.create(habit.id, user.id, target_frequency=5, goal_type="weekly")

        HabitService(db.session, clock=clock).delete(habit.id)

        assert db.session.query(HabitGoal).count() == 0
