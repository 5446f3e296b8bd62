"""Unit tests for the view composers."""

import pytest

from models import CreateArticleInput, CreateTaskInput, FilterCriteria, TaskStatus, UpdateTaskInput
from services import ArticleView, TaskView, ViewMode


@pytest.fixture
def task_view(tasks):
    view = TaskView(tasks)
    yield view
    view.close()


async def add(tasks, title, status="todo"):
    return await tasks.create(CreateTaskInput(title=title, status=status), "u1")


class TestTaskView:

    def test_defaults(self, task_view):
        assert task_view.mode == ViewMode.BOARD
        assert task_view.visible == []
        assert task_view.criteria.is_empty

    async def test_follows_source(self, tasks, task_view):
        await add(tasks, "One")
        await add(tasks, "Two")
        assert [t.title for t in task_view.visible] == ["Two", "One"]

    async def test_recompute_happens_with_the_mutation(self, tasks, task_view):
        """By the time the coordinator's observers run, the view is current."""
        seen = []
        tasks.subscribe(lambda items: seen.append((len(items), task_view.count)))

        await add(tasks, "One")

        assert seen == [(1, 1)]

    async def test_status_filter(self, tasks, task_view):
        await add(tasks, "A")
        done = await add(tasks, "B", "done")

        task_view.set_status_filter(TaskStatus.DONE)
        assert [t.id for t in task_view.visible] == [done.id]

        task_view.set_status_filter(None)
        assert task_view.count == 2

    async def test_search_combines_with_criteria(self, tasks, task_view):
        await add(tasks, "Fix bug", "done")
        await add(tasks, "Fix typo")
        task_view.set_criteria(FilterCriteria(statuses=["todo"]))

        task_view.set_search("FIX")

        assert [t.title for t in task_view.visible] == ["Fix typo"]

    async def test_status_change_moves_between_filters(self, tasks, task_view):
        task = await add(tasks, "Moving")
        task_view.set_status_filter(TaskStatus.TODO)

        await tasks.change_status(task.id, TaskStatus.DONE)

        assert task_view.visible == []

    async def test_board_columns(self, tasks, task_view):
        await add(tasks, "A")
        await add(tasks, "B", "in_review")

        board = task_view.board

        assert [t.title for t in board[TaskStatus.TODO]] == ["A"]
        assert [t.title for t in board[TaskStatus.IN_REVIEW]] == ["B"]

    def test_set_mode(self, task_view):
        task_view.set_mode("list")
        assert task_view.mode == ViewMode.LIST

    async def test_view_never_writes_source(self, tasks, task_view):
        await add(tasks, "A")
        task_view.visible.clear()
        assert len(tasks.items) == 1

    async def test_close_stops_following(self, tasks, task_view):
        task_view.close()
        await add(tasks, "After close")
        assert task_view.visible == []

    async def test_subscribers_get_visible(self, tasks, task_view):
        seen = []
        task_view.subscribe(lambda visible: seen.append(len(visible)))

        task = await add(tasks, "A")
        await tasks.update(task.id, UpdateTaskInput(title="B"))

        assert seen == [1, 1]


class TestArticleView:

    async def test_search_article_body(self, articles, current_user, member):
        current_user["user"] = member
        view = ArticleView(articles)
        await articles.create(CreateArticleInput(title="Budget", content="The council voted"), member.id)
        await articles.create(CreateArticleInput(title="Weather"), member.id)

        view.set_search("council")

        assert [a.title for a in view.visible] == ["Budget"]
        view.close()
