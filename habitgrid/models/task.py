"""Task data model for habitgrid."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class Task(BaseModel):
    """Canonical Task (habit) model."""

    id: int = Field(..., description="Task identifier")
    title: str = Field(..., description="Task title")
    notes: Optional[str] = Field(None, description="Free-text notes")
    is_active: bool = Field(True, description="False once the task is archived")
    created_at: datetime = Field(..., description="Creation timestamp (UTC)")
    archived_at: Optional[datetime] = Field(None, description="Archival timestamp (null if active)")
