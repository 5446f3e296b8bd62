"""
Unit test fixtures.

All unit tests should be:
- Fast (< 100ms)
- Isolated (in-memory backends, no files)
- Deterministic (same result every time)
"""

import asyncio
from datetime import datetime, timezone

import pytest

from models import Task, TaskPriority, TaskStatus
from repositories import ArticleStore, MemoryBackend, MemoryAuthBackend, TaskStore, TeamStore
from repositories.base import RemoteResponse, UNAVAILABLE
from services import ArticleCoordinator, NewsFeed, TaskCoordinator


class FlakyBackend(MemoryBackend):
    """
    Memory backend that can refuse or hold individual operations.

    fail("update") makes every update answer with an error;
    hold("update") returns an event the next update waits on.
    """

    def __init__(self):
        super().__init__()
        self.failing: dict[str, str] = {}
        self.calls: list[str] = []
        self._holds: dict[str, list[asyncio.Event]] = {}

    def fail(self, op: str, code: str = UNAVAILABLE) -> None:
        self.failing[op] = code

    def recover(self, op: str = None) -> None:
        if op is None:
            self.failing.clear()
        else:
            self.failing.pop(op, None)

    def hold(self, op: str) -> asyncio.Event:
        event = asyncio.Event()
        self._holds.setdefault(op, []).append(event)
        return event

    async def _gate(self, op: str):
        self.calls.append(op)
        holds = self._holds.get(op)
        if holds:
            await holds.pop(0).wait()
        code = self.failing.get(op)
        if code:
            return RemoteResponse.failure(code, f"{op} refused")
        return None

    async def select(self, table, filters=None, order_by=None, descending=False):
        return await self._gate("select") or await super().select(table, filters, order_by, descending)

    async def insert(self, table, record):
        return await self._gate("insert") or await super().insert(table, record)

    async def update(self, table, id, changes):
        return await self._gate("update") or await super().update(table, id, changes)

    async def delete(self, table, id):
        return await self._gate("delete") or await super().delete(table, id)


class BrokenAuthBackend(MemoryAuthBackend):
    """Identity service whose startup lookup always blows up."""

    async def get_current_session(self):
        raise ConnectionError("identity service unreachable")


@pytest.fixture
def fixed_time():
    """Fixed datetime for deterministic tests."""
    return datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def backend():
    return FlakyBackend()


@pytest.fixture
def task_store(backend):
    return TaskStore(backend)


@pytest.fixture
def article_store(backend):
    return ArticleStore(backend)


@pytest.fixture
def team_store(backend):
    return TeamStore(backend)


@pytest.fixture
def tasks(task_store, notifier):
    return TaskCoordinator(task_store, notifier)


@pytest.fixture
def current_user():
    """Mutable holder the article coordinator reads the identity from."""
    return {"user": None}


@pytest.fixture
def articles(article_store, notifier, current_user):
    return ArticleCoordinator(article_store, notifier, lambda: current_user["user"])


@pytest.fixture
def news(article_store, notifier, articles):
    feed = NewsFeed(article_store, notifier)
    feed.follow(articles)
    return feed


@pytest.fixture
def make_task(fixed_time):
    """Build Task objects directly, without a store."""
    counter = {"n": 0}

    def build(title="Task", status=TaskStatus.TODO, priority=TaskPriority.MEDIUM, **kwargs):
        counter["n"] += 1
        return Task(
            id=kwargs.pop("id", f"task-{counter['n']}"),
            title=title,
            status=status,
            priority=priority,
            created_by=kwargs.pop("created_by", "user-owner"),
            created_at=kwargs.pop("created_at", fixed_time),
            updated_at=kwargs.pop("updated_at", fixed_time),
            **kwargs,
        )

    return build


@pytest.fixture
def broken_auth():
    return BrokenAuthBackend()
