"""Repository layer for task database operations."""

import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import desc
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from habitgrid.database.models import TaskCompletionDB, TaskDB, TaskScheduleDB
from habitgrid.database.schedule_repository import ScheduleRepository
from habitgrid.errors import HabitGridError, StorageError
from habitgrid.models.task import Task
from habitgrid.models.views import TrackedTask

logger = logging.getLogger(__name__)


class TaskRepository:
    """Repository for Task database operations.

    Every mutating method commits exactly once, so a task and its schedule
    transition are written together or not at all.
    """

    def __init__(self, db: Session):
        self.db = db
        self.schedules = ScheduleRepository(db)

    def _fail(self, action: str, e: SQLAlchemyError) -> None:
        self.db.rollback()
        logger.error(f"Failed to {action}: {type(e).__name__}: {str(e)}")
        raise StorageError(f"Failed to {action}") from e

    def _commit(self, action: str) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self._fail(action, e)

    def _get_row(self, task_id: int) -> Optional[TaskDB]:
        return self.db.query(TaskDB).filter(TaskDB.id == task_id).first()

    def create(self, *, title: str, notes: Optional[str], schedule) -> Task:
        """Create a task together with its initial schedule version."""
        row = TaskDB(title=title, notes=notes, is_active=True, created_at=datetime.utcnow())
        try:
            self.db.add(row)
            self.db.flush()
            self.schedules.stage_open(row.id, schedule)
        except SQLAlchemyError as e:
            self._fail("create task", e)
        self._commit("create task")
        self.db.refresh(row)
        logger.debug(f"Created task {row.id}: {title[:50]}")
        return row.to_pydantic()

    def get(self, task_id: int) -> Optional[Task]:
        """Get task by ID (archived tasks included)."""
        row = self._get_row(task_id)
        return row.to_pydantic() if row else None

    def exists(self, task_id: int) -> bool:
        return self.db.query(TaskDB.id).filter(TaskDB.id == task_id).first() is not None

    def get_tracked(self, task_id: int) -> Optional[TrackedTask]:
        """Get a task with its full schedule history."""
        row = self._get_row(task_id)
        if row is None:
            return None
        return TrackedTask(task=row.to_pydantic(), schedules=self.schedules.list_for_task(task_id))

    def list_tracked(self, active_only: bool = True) -> List[TrackedTask]:
        """All tasks with schedule histories, newest first."""
        query = self.db.query(TaskDB)
        if active_only:
            query = query.filter(TaskDB.archived_at.is_(None), TaskDB.is_active.is_(True))
        rows = query.order_by(desc(TaskDB.created_at), desc(TaskDB.id)).all()
        histories = self.schedules.list_for_tasks(row.id for row in rows)
        return [TrackedTask(task=row.to_pydantic(), schedules=histories[row.id]) for row in rows]

    def update(
        self,
        task_id: int,
        *,
        title: str,
        notes: Optional[str],
        schedule=None,
        day: Optional[int] = None,
    ) -> Optional[Task]:
        """Update title/notes and, when `schedule` is given, switch to it from `day`.

        Returns None if the task does not exist.
        """
        row = self._get_row(task_id)
        if row is None:
            return None
        try:
            row.title = title
            row.notes = notes
            if schedule is not None:
                self.schedules.stage_transition(task_id, schedule, day)
        except (HabitGridError, SQLAlchemyError):
            self.db.rollback()
            raise
        self._commit(f"update task {task_id}")
        self.db.refresh(row)
        logger.debug(f"Updated task {task_id}: {title[:50]}")
        return row.to_pydantic()

    def archive(self, task_id: int, day: int) -> Optional[Task]:
        """Logically delete a task: mark it archived and close its open schedule at `day`."""
        row = self._get_row(task_id)
        if row is None:
            return None
        if row.archived_at is not None:
            return row.to_pydantic()
        try:
            self.schedules.stage_close(task_id, day)
            row.is_active = False
            row.archived_at = datetime.utcnow()
        except (HabitGridError, SQLAlchemyError):
            self.db.rollback()
            raise
        self._commit(f"archive task {task_id}")
        self.db.refresh(row)
        logger.info(f"Archived task {task_id} (last active day {day})")
        return row.to_pydantic()

    def delete(self, task_id: int) -> bool:
        """Hard delete a task with its schedule history and completions."""
        row = self._get_row(task_id)
        if row is None:
            return False
        try:
            self.db.query(TaskCompletionDB).filter(TaskCompletionDB.task_id == task_id).delete(synchronize_session=False)
            self.db.query(TaskScheduleDB).filter(TaskScheduleDB.task_id == task_id).delete(synchronize_session=False)
            self.db.delete(row)
        except SQLAlchemyError as e:
            self._fail(f"delete task {task_id}", e)
        self._commit(f"delete task {task_id}")
        logger.info(f"Deleted task {task_id}")
        return True

    def delete_all(self) -> int:
        """Hard delete every task. Returns the number of tasks removed."""
        try:
            self.db.query(TaskCompletionDB).delete(synchronize_session=False)
            self.db.query(TaskScheduleDB).delete(synchronize_session=False)
            count = self.db.query(TaskDB).delete(synchronize_session=False)
        except SQLAlchemyError as e:
            self._fail("delete all tasks", e)
        self._commit("delete all tasks")
        logger.info(f"Deleted all tasks ({count})")
        return count
