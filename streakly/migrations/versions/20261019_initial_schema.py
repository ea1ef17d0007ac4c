"""Initial schema: users, refresh tokens, habits, tracking and goals.

Revision ID: 20261019_initial_schema
Revises:
Create Date: 2026-10-19

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "20261019_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "user",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_user_email", "user", ["email"], unique=True)

    op.create_table(
        "auth_refresh_token",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("token", sa.String(length=512), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("expires_at", sa.DateTime(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["user.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("token"),
    )
    op.create_index("ix_auth_refresh_token_user_id", "auth_refresh_token", ["user_id"])
    op.create_index("ix_auth_refresh_token_expires_at", "auth_refresh_token", ["expires_at"])

    op.create_table(
        "habits_habit",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column(
            "frequency",
            sa.String(length=16),
            server_default="DAILY",
            nullable=False,
            comment="DAILY, WEEKLY, MONTHLY",
        ),
        sa.Column("category", sa.String(length=64), nullable=True),
        sa.Column("is_active", sa.Boolean(), server_default=sa.text("TRUE"), nullable=False),
        sa.Column("color", sa.String(length=32), server_default="#3B82F6", nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["user.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "name", name="ux_habits_habit_user_name"),
    )
    op.create_index("ix_habits_habit_user_id", "habits_habit", ["user_id"])
    op.create_index("ix_habits_habit_user_active", "habits_habit", ["user_id", "is_active"])

    op.create_table(
        "habits_tracking",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("habit_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("completed_at", sa.DateTime(), nullable=False),
        sa.Column(
            "tracking_day",
            sa.Integer(),
            nullable=False,
            comment="day index of completed_at under the +7h tracking offset",
        ),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("streak", sa.Integer(), server_default="1", nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["habit_id"], ["habits_habit.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["user.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("habit_id", "tracking_day", name="ux_habits_tracking_habit_day"),
    )
    op.create_index(
        "ix_habits_tracking_habit_completed_at",
        "habits_tracking",
        ["habit_id", "completed_at"],
    )
    op.create_index(
        "ix_habits_tracking_user_completed_at",
        "habits_tracking",
        ["user_id", "completed_at"],
    )

    op.create_table(
        "habits_goal",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("habit_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("target_frequency", sa.Integer(), nullable=False),
        sa.Column(
            "goal_type",
            sa.String(length=16),
            server_default="WEEKLY",
            nullable=False,
            comment="WEEKLY, MONTHLY, YEARLY",
        ),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.CheckConstraint("target_frequency > 0", name="ck_habits_goal_target_positive"),
        sa.ForeignKeyConstraint(["habit_id"], ["habits_habit.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["user.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("habit_id", "goal_type", name="ux_habits_goal_habit_type"),
    )
    op.create_index("ix_habits_goal_user_id", "habits_goal", ["user_id"])


def downgrade() -> None:
    op.drop_index("ix_habits_goal_user_id", table_name="habits_goal")
    op.drop_table("habits_goal")
    op.drop_index("ix_habits_tracking_user_completed_at", table_name="habits_tracking")
    op.drop_index("ix_habits_tracking_habit_completed_at", table_name="habits_tracking")
    op.drop_table("habits_tracking")
    op.drop_index("ix_habits_habit_user_active", table_name="habits_habit")
    op.drop_index("ix_habits_habit_user_id", table_name="habits_habit")
    op.drop_table("habits_habit")
    op.drop_index("ix_auth_refresh_token_expires_at", table_name="auth_refresh_token")
    op.drop_index("ix_auth_refresh_token_user_id", table_name="auth_refresh_token")
    op.drop_table("auth_refresh_token")
    op.drop_index("ix_user_email", table_name="user")
    op.drop_table("user")
