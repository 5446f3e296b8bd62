"""
Filter/search evaluator - pure functions over in-memory collections.

Nothing here touches a store or mutates its inputs. Given the same
collection and criteria the output is always the same list in the same
order.
"""

from typing import Iterable, Optional, TypeVar, Union

from models import Article, FilterCriteria, PRIORITY_RANK, SortField, Task, TaskStatus

Item = TypeVar("Item", Task, Article)

BOARD_COLUMNS = [
    (TaskStatus.TODO, "To Do"),
    (TaskStatus.IN_PROGRESS, "In Progress"),
    (TaskStatus.IN_REVIEW, "In Review"),
    (TaskStatus.DONE, "Done"),
]


def text_fields(item: Union[Task, Article]) -> tuple[str, ...]:
    """Fields free-text search looks at."""
    if isinstance(item, Article):
        return (item.title, item.summary, item.content)
    return (item.title, item.description)


def matches_text(item: Union[Task, Article], needle: str) -> bool:
    """Case-insensitive substring match; blank needle matches everything."""
    if not needle:
        return True
    return any(needle in (value or "").lower() for value in text_fields(item))


def matches_criteria(item: Union[Task, Article], criteria: FilterCriteria) -> bool:
    """
    AND across families, OR within a family.

    Attribute families only constrain items that carry the attribute
    (tasks); articles are filtered by text alone.
    """
    if isinstance(item, Task):
        if criteria.statuses and item.status not in criteria.statuses:
            return False
        if criteria.priorities and item.priority not in criteria.priorities:
            return False
        if criteria.assignee_ids:
            if not item.assignee_id or item.assignee_id not in criteria.assignee_ids:
                return False
    return matches_text(item, criteria.search_text)


def _sort_value(item, field: SortField):
    if field == SortField.PRIORITY:
        return PRIORITY_RANK[item.priority]
    if field == SortField.TITLE:
        return item.title.lower()
    return getattr(item, field.value, None)


def sort_items(items: list[Item], field: Optional[SortField], descending: bool = False) -> list[Item]:
    """Stable sort; items without a value for the key go last."""
    if field is None:
        return list(items)
    present = [i for i in items if _sort_value(i, field) is not None]
    missing = [i for i in items if _sort_value(i, field) is None]
    present.sort(key=lambda i: _sort_value(i, field), reverse=descending)
    return present + missing


def evaluate(items: Iterable[Item], criteria: Optional[FilterCriteria] = None) -> list[Item]:
    """
    Derive the visible subsequence of `items`.

    Ties (and everything when no sort is requested) keep source order.
    """
    criteria = criteria or FilterCriteria()
    kept = [item for item in items if matches_criteria(item, criteria)]
    return sort_items(kept, criteria.sort_by, criteria.descending)


def group_by_status(tasks: Iterable[Task]) -> dict[TaskStatus, list[Task]]:
    """Board columns in fixed order, each keeping input order."""
    columns = {status: [] for status, _ in BOARD_COLUMNS}
    for task in tasks:
        columns[task.status].append(task)
    return columns


def count_label(count: int, noun: str = "task") -> str:
    """'1 task', '3 tasks'."""
    return f"{count} {noun if count == 1 else noun + 's'}"
