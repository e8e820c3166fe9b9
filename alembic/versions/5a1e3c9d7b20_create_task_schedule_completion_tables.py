"""Create task, task_schedule and task_completion tables

Revision ID: 5a1e3c9d7b20
Revises:
Create Date: 2026-10-19
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "5a1e3c9d7b20"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "task",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("notes", sa.String(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("archived_at", sa.DateTime(), nullable=True),
    )
    op.create_index(op.f("ix_task_archived_at"), "task", ["archived_at"], unique=False)

    op.create_table(
        "task_schedule",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("task_id", sa.Integer(), sa.ForeignKey("task.id", ondelete="CASCADE"), nullable=False),
        sa.Column("effective_from", sa.Integer(), nullable=False),
        sa.Column("effective_to", sa.Integer(), nullable=True),
        sa.Column("type", sa.String(), nullable=False),
        sa.Column("weekday_mask", sa.Integer(), nullable=True),
        sa.Column("monthday", sa.Integer(), nullable=True),
        sa.Column("interval_days", sa.Integer(), nullable=True),
        sa.CheckConstraint("type IN ('daily','weekly','monthly','custom')", name="ck_task_schedule_type"),
        sa.CheckConstraint("monthday IS NULL OR monthday BETWEEN 1 AND 28", name="ck_task_schedule_monthday"),
    )
    op.create_index(
        "idx_schedule_task_effective",
        "task_schedule",
        ["task_id", "effective_from", "effective_to"],
        unique=False,
    )

    op.create_table(
        "task_completion",
        sa.Column("task_id", sa.Integer(), sa.ForeignKey("task.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("day", sa.Integer(), primary_key=True, autoincrement=False),
        sa.Column("done_at", sa.DateTime(), nullable=False),
    )
    op.create_index("idx_completion_day", "task_completion", ["day"], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index("idx_completion_day", table_name="task_completion")
    op.drop_table("task_completion")

    op.drop_index("idx_schedule_task_effective", table_name="task_schedule")
    op.drop_table("task_schedule")

    op.drop_index(op.f("ix_task_archived_at"), table_name="task")
    op.drop_table("task")
