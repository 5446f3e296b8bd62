"""
Filter criteria for deriving visible collections.
"""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict

from .task import TaskPriority, TaskStatus


class SortField(str, Enum):
    CREATED_AT = "created_at"
    UPDATED_AT = "updated_at"
    DUE_DATE = "due_date"
    PRIORITY = "priority"
    TITLE = "title"


class FilterCriteria(BaseModel):
    """
    What to show. Families are ANDed, values inside a family are ORed.

    None (or an empty list) means "no constraint" for that family.
    """
    model_config = ConfigDict(frozen=True)

    statuses: Optional[list[TaskStatus]] = None
    priorities: Optional[list[TaskPriority]] = None
    assignee_ids: Optional[list[str]] = None
    query: Optional[str] = None

    # Absent sort keeps source order (newest first from the store)
    sort_by: Optional[SortField] = None
    descending: bool = False

    @property
    def is_empty(self) -> bool:
        return not (
            self.statuses
            or self.priorities
            or self.assignee_ids
            or self.search_text
            or self.sort_by
        )

    @property
    def search_text(self) -> str:
        """Lower-cased query, empty when the query is blank."""
        return (self.query or "").strip().lower()
