"""Error taxonomy for habitgrid.

Every failure surfaced by the engine or the service layer is one of these.
The HTTP layer maps them onto status codes; nothing below it retries.
"""


class HabitGridError(Exception):
    """Base class for habitgrid errors."""


class ValidationError(HabitGridError, ValueError):
    """Malformed input (schedule parameters, title, month), raised before any write."""


class NotFoundError(HabitGridError, LookupError):
    """An operation referenced a task id that does not exist."""

    def __init__(self, task_id: int):
        super().__init__(f"Task {task_id} not found")
        self.task_id = task_id


class StorageError(HabitGridError):
    """The persistence layer failed (I/O, constraint violation)."""
