"""SQLAlchemy database models for habitgrid.

Three tables: tasks, schedule versions (one row per effective window) and
completions keyed by (task, day). Derived values such as streaks are never
stored here.
"""

import logging
from datetime import datetime

from pydantic import TypeAdapter, ValidationError as PydanticValidationError
from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Boolean,
)
from sqlalchemy.orm import relationship

from habitgrid.database.database import Base
from habitgrid.models.schedule import (
    CustomSchedule,
    DailySchedule,
    MonthlySchedule,
    Schedule,
    WeeklySchedule,
)

logger = logging.getLogger(__name__)

_schedule_adapter = TypeAdapter(Schedule)
_VARIANTS = {
    "daily": DailySchedule,
    "weekly": WeeklySchedule,
    "monthly": MonthlySchedule,
    "custom": CustomSchedule,
}


class TaskDB(Base):
    """Database model for Task."""

    __tablename__ = "task"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String, nullable=False)
    notes = Column(String, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)

    # Timestamps
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    archived_at = Column(DateTime, nullable=True, index=True)

    schedules = relationship(
        "TaskScheduleDB",
        back_populates="task",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="TaskScheduleDB.effective_from",
    )

    def to_pydantic(self):
        """Convert database model to Pydantic model."""
        from habitgrid.models.task import Task

        return Task(
            id=self.id,
            title=self.title,
            notes=self.notes,
            is_active=bool(self.is_active),
            created_at=self.created_at,
            archived_at=self.archived_at,
        )


class TaskScheduleDB(Base):
    """Database model for one schedule version of a task."""

    __tablename__ = "task_schedule"
    __table_args__ = (
        CheckConstraint("type IN ('daily','weekly','monthly','custom')", name="ck_task_schedule_type"),
        CheckConstraint("monthday IS NULL OR monthday BETWEEN 1 AND 28", name="ck_task_schedule_monthday"),
        Index("idx_schedule_task_effective", "task_id", "effective_from", "effective_to"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    task_id = Column(Integer, ForeignKey("task.id", ondelete="CASCADE"), nullable=False)

    # Effective window (inclusive day indices; effective_to NULL = open-ended)
    effective_from = Column(Integer, nullable=False)
    effective_to = Column(Integer, nullable=True)

    # Recurrence rule; only the column of the row's type is set
    type = Column(String, nullable=False)
    weekday_mask = Column(Integer, nullable=True)
    monthday = Column(Integer, nullable=True)
    interval_days = Column(Integer, nullable=True)

    task = relationship("TaskDB", back_populates="schedules")

    def to_pydantic(self):
        """Convert database model to the matching Schedule variant.

        Rows are validated on the way in; a row that fails validation on the
        way out (legacy data) is loaded as-is and evaluates as never-due.
        """
        data = {
            "id": self.id,
            "task_id": self.task_id,
            "effective_from": self.effective_from,
            "effective_to": self.effective_to,
            "type": self.type,
        }
        if self.weekday_mask is not None:
            data["weekday_mask"] = self.weekday_mask
        if self.monthday is not None:
            data["monthday"] = self.monthday
        if self.interval_days is not None:
            data["interval_days"] = self.interval_days
        try:
            return _schedule_adapter.validate_python(data)
        except PydanticValidationError:
            logger.warning(f"Schedule {self.id} of task {self.task_id} is malformed; treating it as never due")
            variant = _VARIANTS.get(self.type, DailySchedule)
            return variant.model_construct(**data)

    @classmethod
    def from_pydantic(cls, schedule):
        """Create database model from a Schedule variant."""
        return cls(
            id=schedule.id,
            task_id=schedule.task_id,
            effective_from=schedule.effective_from,
            effective_to=schedule.effective_to,
            type=schedule.type,
            weekday_mask=getattr(schedule, "weekday_mask", None),
            monthday=getattr(schedule, "monthday", None),
            interval_days=getattr(schedule, "interval_days", None),
        )


class TaskCompletionDB(Base):
    """Database model for a completion fact. A missing row means not done."""

    __tablename__ = "task_completion"
    __table_args__ = (Index("idx_completion_day", "day"),)

    task_id = Column(Integer, ForeignKey("task.id", ondelete="CASCADE"), primary_key=True)
    day = Column(Integer, primary_key=True, autoincrement=False)
    done_at = Column(DateTime, nullable=False, default=datetime.utcnow)
