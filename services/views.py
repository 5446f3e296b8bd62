"""
View composers - the filtered collections the UI renders.

A view recomputes whenever its source collection, criteria or search
text changes, then tells its own subscribers. It never writes to the
source.
"""

from enum import Enum
from typing import Callable, Generic, Optional, TypeVar

from models import Article, FilterCriteria, Task, TaskStatus
from .events import Observable
from .filtering import evaluate, group_by_status
from .mutations import MutationCoordinator

E = TypeVar("E", Task, Article)


class ViewMode(str, Enum):
    BOARD = "board"
    LIST = "list"


class CollectionView(Generic[E]):
    """Derived, filtered view over one coordinator's collection."""

    def __init__(self, source: MutationCoordinator[E], name: str = "VIEW"):
        self.source = source
        self.criteria = FilterCriteria()
        self.search = ""
        self.visible: list[E] = []
        self.changed = Observable(name)
        self._unsubscribe = source.subscribe(self._on_source_changed)
        self.recompute()

    def close(self) -> None:
        self._unsubscribe()

    def subscribe(self, callback: Callable[[list[E]], None]) -> Callable[[], None]:
        return self.changed.subscribe(callback)

    def _on_source_changed(self, _items) -> None:
        self.recompute()

    def effective_criteria(self) -> FilterCriteria:
        return self.criteria.model_copy(update={"query": self.search})

    def recompute(self) -> list[E]:
        self.visible = evaluate(self.source.items, self.effective_criteria())
        self.changed.notify(self.visible)
        return self.visible

    def set_search(self, text: Optional[str]) -> list[E]:
        self.search = text or ""
        return self.recompute()

    def set_criteria(self, criteria: Optional[FilterCriteria]) -> list[E]:
        self.criteria = criteria or FilterCriteria()
        return self.recompute()

    @property
    def count(self) -> int:
        return len(self.visible)


class TaskView(CollectionView[Task]):
    """Tasks page: board or list over the filtered tasks."""

    def __init__(self, source: MutationCoordinator[Task]):
        self.mode = ViewMode.BOARD
        super().__init__(source, "TASK-VIEW")

    def set_status_filter(self, status: Optional[TaskStatus]) -> list[Task]:
        """Single-status dropdown: None means all."""
        statuses = [TaskStatus(status)] if status else None
        return self.set_criteria(self.criteria.model_copy(update={"statuses": statuses}))

    def set_mode(self, mode: ViewMode) -> None:
        self.mode = ViewMode(mode)

    @property
    def board(self) -> dict[TaskStatus, list[Task]]:
        return group_by_status(self.visible)


class ArticleView(CollectionView[Article]):
    """Articles and news pages: free-text search only."""
