"""Repository for schedule versions (effective windows)."""

import logging
from typing import Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from habitgrid.database.models import TaskScheduleDB
from habitgrid.errors import ValidationError

logger = logging.getLogger(__name__)


class ScheduleRepository:
    """Reads schedule history and stages window transitions.

    The `stage_*` methods only change the session; the caller commits them
    together with whatever else belongs to the same transaction.
    """

    def __init__(self, db: Session):
        self.db = db

    def list_for_task(self, task_id: int) -> List:
        rows = (
            self.db.query(TaskScheduleDB)
            .filter(TaskScheduleDB.task_id == task_id)
            .order_by(TaskScheduleDB.effective_from)
            .all()
        )
        return [row.to_pydantic() for row in rows]

    def list_for_tasks(self, task_ids: Iterable[int]) -> Dict[int, List]:
        """Schedule histories keyed by task id (every requested id is present)."""
        ids = list(task_ids)
        out: Dict[int, List] = {task_id: [] for task_id in ids}
        if not ids:
            return out
        rows = (
            self.db.query(TaskScheduleDB)
            .filter(TaskScheduleDB.task_id.in_(ids))
            .order_by(TaskScheduleDB.task_id, TaskScheduleDB.effective_from)
            .all()
        )
        for row in rows:
            out[row.task_id].append(row.to_pydantic())
        return out

    def get_open_row(self, task_id: int) -> Optional[TaskScheduleDB]:
        """The open-ended version of a task, if any."""
        return (
            self.db.query(TaskScheduleDB)
            .filter(TaskScheduleDB.task_id == task_id, TaskScheduleDB.effective_to.is_(None))
            .first()
        )

    def stage_open(self, task_id: int, schedule) -> TaskScheduleDB:
        """Add a new version for the task."""
        row = TaskScheduleDB.from_pydantic(schedule.model_copy(update={"id": None, "task_id": task_id}))
        self.db.add(row)
        return row

    def stage_transition(self, task_id: int, schedule, day: int) -> TaskScheduleDB:
        """Close the open version at `day - 1` and open `schedule` from `day`.

        If the open version itself starts on `day` it never governed an earlier
        day, so it is replaced instead of being closed to an empty window.

        Raises:
            ValidationError: If `day` precedes the start of the open version
        """
        current = self.get_open_row(task_id)
        if current is not None:
            if day < current.effective_from:
                raise ValidationError(
                    f"edit day {day} precedes the current schedule start {current.effective_from}"
                )
            if current.effective_from == day:
                self.db.delete(current)
            else:
                current.effective_to = day - 1
        new_schedule = schedule.model_copy(update={"effective_from": day, "effective_to": None})
        logger.info(f"Schedule transition for task {task_id} at day {day}: {new_schedule.type}")
        return self.stage_open(task_id, new_schedule)

    def stage_close(self, task_id: int, day: int) -> None:
        """Close the open version so that `day` is the last day it governs.

        Raises:
            ValidationError: If `day` precedes the start of the open version
        """
        current = self.get_open_row(task_id)
        if current is None:
            return
        if day < current.effective_from:
            raise ValidationError(f"day {day} precedes the current schedule start {current.effective_from}")
        current.effective_to = day
