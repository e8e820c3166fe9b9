"""Derived (read-side) models for habitgrid.

None of these are persisted: they are recomputed from tasks, schedule versions
and completions on every read.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from habitgrid.models.schedule import Schedule
from habitgrid.models.task import Task


class TrackedTask(BaseModel):
    """A task together with its full schedule history (ordered by effective_from)."""

    task: Task
    schedules: List[Schedule] = Field(default_factory=list)

    @field_validator("schedules")
    @classmethod
    def _sort_schedules(cls, v):
        return sorted(v, key=lambda s: s.effective_from)

    @property
    def id(self) -> int:
        return self.task.id


class TaskWithStats(BaseModel):
    """Task plus its effective schedule and streak metrics for a given day."""

    task: Task
    schedule: Optional[Schedule] = Field(
        None, description="Schedule effective on the requested day (latest version if none covers it)"
    )
    current_streak: int = Field(0, ge=0)
    best_streak: int = Field(0, ge=0)
    is_due: bool = Field(False, description="Whether the task is due on the requested day")
    today_status: bool = Field(False, description="Whether the task is done on the requested day")


class MonthTask(BaseModel):
    id: int
    title: str
    is_done: bool


class MonthViewDay(BaseModel):
    """One cell of the month grid."""

    day: int
    due_count: int = 0
    done_count: int = 0
    all_done: bool = False
    tasks: List[MonthTask] = Field(default_factory=list)
