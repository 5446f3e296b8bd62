"""
Task - a work item on the board.
"""

from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .base import BaseEntity, ensure_utc, reject_cleared


class TaskStatus(str, Enum):
    """Board column a task sits in."""
    TODO = "todo"
    IN_PROGRESS = "in_progress"
    IN_REVIEW = "in_review"
    DONE = "done"


class TaskPriority(str, Enum):
    """Urgency of a task."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


# Sort rank, most urgent first when sorting descending
PRIORITY_RANK = {
    TaskPriority.LOW: 0,
    TaskPriority.MEDIUM: 1,
    TaskPriority.HIGH: 2,
    TaskPriority.URGENT: 3,
}


class Task(BaseEntity):
    """
    A persisted work item.

    Assignee is a loose reference (id plus display fields copied at
    assignment time), not a foreign key.
    """
    title: str = Field(min_length=1)
    description: str = ""
    status: TaskStatus = TaskStatus.TODO
    priority: TaskPriority = TaskPriority.MEDIUM

    assignee_id: Optional[str] = None
    assignee_name: Optional[str] = None
    assignee_avatar: Optional[str] = None
    due_date: Optional[datetime] = None

    @field_validator("due_date")
    @classmethod
    def due_as_utc(cls, value):
        return ensure_utc(value)


class CreateTaskInput(BaseModel):
    """Fields a user supplies when creating a task."""
    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(min_length=1)
    description: str = ""
    status: TaskStatus = TaskStatus.TODO
    priority: TaskPriority = TaskPriority.MEDIUM
    assignee_id: Optional[str] = None
    assignee_name: Optional[str] = None
    assignee_avatar: Optional[str] = None
    due_date: Optional[datetime] = None


class UpdateTaskInput(BaseModel):
    """
    Partial changes to a task.

    Only fields explicitly passed are written; passing None clears the
    field, which only the assignee fields and due_date allow. Use
    changes() rather than model_dump() to get the write set.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    assignee_id: Optional[str] = None
    assignee_name: Optional[str] = None
    assignee_avatar: Optional[str] = None
    due_date: Optional[datetime] = None

    @model_validator(mode="after")
    def check_required_not_cleared(self):
        reject_cleared(self, ("title", "description", "status", "priority"))
        return self

    def changes(self) -> dict:
        """Explicitly set fields, JSON-ready."""
        return self.model_dump(mode="json", exclude_unset=True)
