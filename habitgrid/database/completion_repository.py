"""Completion store: per (task, day) done/not-done facts."""

import logging
from datetime import datetime
from typing import Optional, Set, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from habitgrid.database.models import TaskCompletionDB
from habitgrid.errors import StorageError

logger = logging.getLogger(__name__)


class CompletionRepository:
    """Repository for completion facts.

    A row means "done"; the absence of a row means "not done". The store does
    not check whether the task is due on the day it is told about.
    """

    def __init__(self, db: Session):
        self.db = db

    def _get_row(self, task_id: int, day: int) -> Optional[TaskCompletionDB]:
        return (
            self.db.query(TaskCompletionDB)
            .filter(TaskCompletionDB.task_id == task_id, TaskCompletionDB.day == day)
            .first()
        )

    def is_completed(self, task_id: int, day: int) -> bool:
        """Whether (task_id, day) is done; False for unknown keys."""
        return self._get_row(task_id, day) is not None

    def set_completion(self, task_id: int, day: int, done: bool) -> None:
        """Upsert the done state of (task_id, day). Setting the current value again is a no-op."""
        row = self._get_row(task_id, day)
        if done and row is None:
            self.db.add(TaskCompletionDB(task_id=task_id, day=day, done_at=datetime.utcnow()))
        elif not done and row is not None:
            self.db.delete(row)
        else:
            return

        try:
            self.db.commit()
            logger.debug(f"Set completion task={task_id} day={day} done={done}")
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to set completion for task {task_id} day {day}: {type(e).__name__}: {str(e)}")
            raise StorageError(f"Failed to set completion for task {task_id} day {day}") from e

    def toggle_completion(self, task_id: int, day: int) -> bool:
        """Flip the done state of (task_id, day) and return the new value.

        This is a read-modify-write; callers must serialize toggles on the same key.
        """
        done = not self.is_completed(task_id, day)
        self.set_completion(task_id, day, done)
        return done

    def completed_days(self, task_id: int) -> Set[int]:
        rows = self.db.query(TaskCompletionDB.day).filter(TaskCompletionDB.task_id == task_id).all()
        return {row.day for row in rows}

    def completed_keys(self, start_day: Optional[int] = None, end_day: Optional[int] = None) -> Set[Tuple[int, int]]:
        """All (task_id, day) keys that are done, optionally within [start_day, end_day]."""
        query = self.db.query(TaskCompletionDB.task_id, TaskCompletionDB.day)
        if start_day is not None:
            query = query.filter(TaskCompletionDB.day >= start_day)
        if end_day is not None:
            query = query.filter(TaskCompletionDB.day <= end_day)
        return {(row.task_id, row.day) for row in query.all()}
