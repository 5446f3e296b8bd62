"""
Mutation coordinators - the only writers of the in-memory collections.

Each coordinator owns one list of entities mirrored from a store. A
mutation awaits the store, then reconciles the server's copy into the
list and fires the change channel in one synchronous step, so
observers never see "confirmed but not yet recomputed".

Failures leave the list untouched and become one user notification.
Root causes are logged, not shown.

Late responses: a returned entity replaces the held one only if it is
at least as new (updated_at) as what is held. If the entity was deleted
while the request was in flight the response is dropped.
"""

import logging
from typing import Awaitable, Callable, Generic, Optional, TypeVar

from errors import (
    CreateFailed,
    DeleteFailed,
    LoadFailed,
    MutationFailed,
    StatusChangeFailed,
    StoreError,
    UpdateFailed,
)
from models import (
    Article,
    ArticleVisibility,
    CreateArticleInput,
    CreateTaskInput,
    Task,
    TaskStatus,
    UpdateArticleInput,
    UpdateTaskInput,
    User,
)
from repositories import ArticleStore, TaskStore
from .events import Observable
from .notifications import Notifier

logger = logging.getLogger(__name__)

E = TypeVar("E", Task, Article)
R = TypeVar("R")


class MutationCoordinator(Generic[E]):
    """
    Holds one entity collection and applies confirmed server results.

    Subclasses add the entity-specific operations on top of _run().
    """

    noun = "item"

    def __init__(self, notifier: Notifier):
        self.notifier = notifier
        self.changed = Observable(f"{self.noun.upper()}S")
        self._items: list[E] = []
        self.is_loading = False

    @property
    def items(self) -> list[E]:
        """Snapshot of the collection. Mutating it has no effect."""
        return list(self._items)

    def get(self, id: str) -> Optional[E]:
        for item in self._items:
            if item.id == id:
                return item
        return None

    def subscribe(self, callback: Callable[[list[E]], None]) -> Callable[[], None]:
        return self.changed.subscribe(callback)

    def _commit(self, items: list[E]) -> None:
        self._items = items
        self.changed.notify(self.items)

    # === Reconciliation ===

    def _apply_created(self, entity: E) -> None:
        # Store order is newest-created first
        self._commit([entity] + [i for i in self._items if i.id != entity.id])

    def _apply_updated(self, entity: E) -> bool:
        """Swap in the server copy. Returns False if it was stale or orphaned."""
        held = self.get(entity.id)
        if held is None:
            logger.debug("[%sS] Dropping response for deleted %s", self.noun.upper(), entity.id)
            return False
        if entity.updated_at < held.updated_at:
            logger.debug("[%sS] Dropping stale response for %s", self.noun.upper(), entity.id)
            return False
        self._commit([entity if i.id == entity.id else i for i in self._items])
        return True

    def _apply_deleted(self, id: str) -> None:
        self._commit([i for i in self._items if i.id != id])

    def clear(self) -> None:
        """Forget everything, e.g. on sign-out."""
        self._commit([])

    # === Execution ===

    async def _run(
        self,
        call: Awaitable[R],
        failure: type[MutationFailed],
        failure_message: str,
    ) -> Optional[R]:
        """
        Await a store call, converting StoreError into a notification.

        Returns None on failure. Only StoreError is handled; anything
        else is a bug and propagates.
        """
        try:
            return await call
        except StoreError as e:
            logger.warning("[%sS] %s: %s", self.noun.upper(), failure_message, e)
            self.notifier.error(failure_message, failure(str(e), cause=e, user_message=failure_message))
            return None

    async def _load(self, call: Awaitable[list[E]]) -> bool:
        self.is_loading = True
        try:
            items = await self._run(call, LoadFailed, f"Failed to load {self.noun}s")
        finally:
            self.is_loading = False
        if items is None:
            return False
        self._commit(items)
        return True


class TaskCoordinator(MutationCoordinator[Task]):
    """Task mutations for the board and list views."""

    noun = "task"

    def __init__(self, store: TaskStore, notifier: Notifier):
        super().__init__(notifier)
        self.store = store

    async def load(self) -> bool:
        return await self._load(self.store.list())

    async def create(self, data: CreateTaskInput, creator_id: str) -> Optional[Task]:
        task = await self._run(self.store.create(data, creator_id), CreateFailed, "Failed to create task")
        if task is not None:
            self._apply_created(task)
            self.notifier.success("Task created successfully")
        return task

    async def update(self, id: str, data: UpdateTaskInput) -> Optional[Task]:
        task = await self._run(self.store.update(id, data), UpdateFailed, "Failed to update task")
        if task is not None:
            self._apply_updated(task)
            self.notifier.success("Task updated successfully")
        return task

    async def change_status(self, id: str, status: TaskStatus) -> Optional[Task]:
        """Single-field update; same reconciliation as update()."""
        data = UpdateTaskInput(status=status)
        task = await self._run(self.store.update(id, data), StatusChangeFailed, "Failed to update status")
        if task is not None:
            self._apply_updated(task)
            self.notifier.success("Status updated")
        return task

    async def bulk_change_status(self, ids: list[str], status: TaskStatus) -> Optional[list[Task]]:
        """
        Move several tasks at once.

        The backend has no transaction, so on failure the tasks written
        before the error are re-read to keep the mirror truthful.
        """
        tasks = await self._run(
            self.store.bulk_update_status(ids, status), StatusChangeFailed, "Failed to update status"
        )
        if tasks is None:
            await self._refresh(ids)
            return None
        for task in tasks:
            self._apply_updated(task)
        self.notifier.success(f"Updated {len(tasks)} tasks")
        return tasks

    async def _refresh(self, ids: list[str]) -> None:
        for id in ids:
            try:
                fresh = await self.store.get_by_id(id)
            except StoreError as e:
                logger.warning("[TASKS] Refresh of %s failed: %s", id, e)
                continue
            if fresh is None:
                self._apply_deleted(id)
            else:
                self._apply_updated(fresh)

    async def delete(self, id: str) -> bool:
        done = await self._run(self.store.delete(id), DeleteFailed, "Failed to delete task")
        if not done:
            return False
        self._apply_deleted(id)
        self.notifier.success("Task deleted successfully")
        return True


def normalize_article_input(data, can_tag_news: bool):
    """
    Apply the news rules to a create or update input before dispatch.

    Without the news capability is_news is forced off; with is_news on,
    visibility is forced public. Returns a new input object.
    """
    if isinstance(data, UpdateArticleInput):
        changes = data.model_dump(exclude_unset=True)
        if not can_tag_news and "is_news" in changes:
            changes["is_news"] = False
        if changes.get("is_news"):
            changes["visibility"] = ArticleVisibility.PUBLIC
        return UpdateArticleInput(**changes)

    changes = data.model_dump()
    if not can_tag_news:
        changes["is_news"] = False
    if changes["is_news"]:
        changes["visibility"] = ArticleVisibility.PUBLIC
    return CreateArticleInput(**changes)


class ArticleCoordinator(MutationCoordinator[Article]):
    """The signed-in user's own articles."""

    noun = "article"

    def __init__(self, store: ArticleStore, notifier: Notifier, user_provider: Callable[[], Optional[User]]):
        """
        Args:
            store: Article store
            notifier: Where failures and successes are reported
            user_provider: Returns the current identity (for the news capability)
        """
        super().__init__(notifier)
        self.store = store
        self._user = user_provider
        self.results = Observable("ARTICLE-RESULTS")

    @property
    def can_tag_news(self) -> bool:
        user = self._user()
        return bool(user and user.can_tag_news)

    async def load(self) -> bool:
        user = self._user()
        if user is None:
            self.clear()
            return True
        return await self._load(self.store.list_for_creator(user.id))

    async def create(self, data: CreateArticleInput, creator_id: str) -> Optional[Article]:
        data = normalize_article_input(data, self.can_tag_news)
        article = await self._run(self.store.create(data, creator_id), CreateFailed, "Failed to create article")
        if article is not None:
            self._apply_created(article)
            self.results.notify(article)
            self.notifier.success("Article created successfully")
        return article

    async def update(self, id: str, data: UpdateArticleInput) -> Optional[Article]:
        data = normalize_article_input(data, self.can_tag_news)
        article = await self._run(self.store.update(id, data), UpdateFailed, "Failed to update article")
        if article is not None:
            if self._apply_updated(article):
                self.results.notify(article)
            self.notifier.success("Article updated successfully")
        return article

    async def delete(self, id: str) -> bool:
        done = await self._run(self.store.delete(id), DeleteFailed, "Failed to delete article")
        if not done:
            return False
        self._apply_deleted(id)
        self.results.notify(id)
        self.notifier.success("Article deleted successfully")
        return True


class NewsFeed(MutationCoordinator[Article]):
    """
    Public news articles, most recently published first.

    Read-only: it follows ArticleCoordinator results instead of
    mutating anything itself.
    """

    noun = "news article"

    def __init__(self, store: ArticleStore, notifier: Notifier):
        super().__init__(notifier)
        self.store = store

    async def load(self) -> bool:
        return await self._load(self.store.list_news())

    def follow(self, coordinator: ArticleCoordinator) -> Callable[[], None]:
        return coordinator.results.subscribe(self.on_article_result)

    def on_article_result(self, result) -> None:
        """Upsert public news, prune everything else (or deleted ids)."""
        if isinstance(result, str):
            if self.get(result) is not None:
                self._apply_deleted(result)
            return

        others = [a for a in self._items if a.id != result.id]
        if result.is_news and result.visibility == ArticleVisibility.PUBLIC:
            others.append(result)
            published = [a for a in others if a.published_at is not None]
            unpublished = [a for a in others if a.published_at is None]
            published.sort(key=lambda a: a.published_at, reverse=True)
            self._commit(published + unpublished)
        elif len(others) != len(self._items):
            self._commit(others)
