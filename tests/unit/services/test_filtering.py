"""Unit tests for the filter/search evaluator."""

import itertools
from datetime import timedelta

import pytest

from models import Article, FilterCriteria, SortField, TaskPriority, TaskStatus
from services import BOARD_COLUMNS, count_label, evaluate, group_by_status
from services.filtering import matches_text


@pytest.fixture
def board(make_task, fixed_time):
    """Five tasks, newest first: 3 todo, 2 done."""
    return [
        make_task("Write spec", TaskStatus.TODO, TaskPriority.HIGH, assignee_id="m1",
                  description="First draft of the SPEC"),
        make_task("Review PR", TaskStatus.DONE, TaskPriority.LOW, assignee_id="m2"),
        make_task("Fix login bug", TaskStatus.TODO, TaskPriority.URGENT,
                  due_date=fixed_time + timedelta(days=2)),
        make_task("Ship release", TaskStatus.DONE, TaskPriority.MEDIUM, assignee_id="m1",
                  due_date=fixed_time + timedelta(days=1)),
        make_task("Plan sprint", TaskStatus.TODO, TaskPriority.MEDIUM),
    ]


def ids(items):
    return [i.id for i in items]


class TestEvaluate:

    def test_status_filter_keeps_order(self, board):
        result = evaluate(board, FilterCriteria(statuses=[TaskStatus.DONE]))

        assert len(result) == 2
        assert all(t.status == TaskStatus.DONE for t in result)
        assert ids(result) == [board[1].id, board[3].id]

    def test_empty_criteria_is_identity(self, board):
        assert evaluate(board, FilterCriteria()) == board
        assert evaluate(board) == board

    def test_input_not_mutated(self, board):
        before = list(board)
        evaluate(board, FilterCriteria(sort_by=SortField.TITLE))
        assert board == before

    def test_or_within_family(self, board):
        result = evaluate(board, FilterCriteria(priorities=[TaskPriority.LOW, TaskPriority.URGENT]))
        assert ids(result) == [board[1].id, board[2].id]

    def test_and_across_families(self, board):
        result = evaluate(board, FilterCriteria(statuses=[TaskStatus.DONE], assignee_ids=["m1"]))
        assert ids(result) == [board[3].id]

    def test_assignee_filter_excludes_unassigned(self, board):
        result = evaluate(board, FilterCriteria(assignee_ids=["m1", "m2"]))
        assert all(t.assignee_id for t in result)
        assert len(result) == 3

    def test_query_case_insensitive_title(self, board):
        result = evaluate(board, FilterCriteria(query="LOGIN"))
        assert ids(result) == [board[2].id]

    def test_query_matches_description(self, board):
        result = evaluate(board, FilterCriteria(query="draft of the spec"))
        assert ids(result) == [board[0].id]

    def test_whitespace_query_is_no_filter(self, board):
        assert evaluate(board, FilterCriteria(query="   ")) == board

    def test_no_match(self, board):
        assert evaluate(board, FilterCriteria(query="nothing like this")) == []

    def test_sort_by_priority_descending(self, board):
        result = evaluate(board, FilterCriteria(sort_by=SortField.PRIORITY, descending=True))
        assert [t.priority for t in result] == [
            TaskPriority.URGENT, TaskPriority.HIGH, TaskPriority.MEDIUM, TaskPriority.MEDIUM, TaskPriority.LOW,
        ]
        # Ties keep source order
        assert ids(result)[2:4] == [board[3].id, board[4].id]

    def test_sort_missing_values_last(self, board):
        result = evaluate(board, FilterCriteria(sort_by=SortField.DUE_DATE))
        assert ids(result)[:2] == [board[3].id, board[2].id]
        assert ids(result)[2:] == [board[0].id, board[1].id, board[4].id]

    def test_sort_missing_values_last_descending(self, board):
        result = evaluate(board, FilterCriteria(sort_by=SortField.DUE_DATE, descending=True))
        assert ids(result)[:2] == [board[2].id, board[3].id]

    def test_deterministic(self, board):
        criteria = FilterCriteria(statuses=["todo"], query="s", sort_by="title")
        assert evaluate(board, criteria) == evaluate(board, criteria)

    def test_idempotent_over_combinations(self, board):
        statuses = [None, [TaskStatus.TODO], [TaskStatus.DONE, TaskStatus.IN_REVIEW]]
        priorities = [None, [TaskPriority.MEDIUM]]
        assignees = [None, ["m1"]]
        queries = [None, "", "s", "release"]
        sorts = [None, SortField.TITLE, SortField.DUE_DATE]

        for s, p, a, q, sort in itertools.product(statuses, priorities, assignees, queries, sorts):
            criteria = FilterCriteria(statuses=s, priorities=p, assignee_ids=a, query=q, sort_by=sort)
            once = evaluate(board, criteria)
            assert evaluate(once, criteria) == once


class TestArticles:

    def test_article_text_fields(self):
        article = Article(id="a1", title="Budget", summary="Council vote", content="Full BODY text",
                          created_by="u1")
        assert matches_text(article, "body")
        assert matches_text(article, "council")
        assert not matches_text(article, "weather")

    def test_task_families_ignored_for_articles(self):
        article = Article(id="a1", title="Budget", created_by="u1")
        assert evaluate([article], FilterCriteria(statuses=[TaskStatus.DONE])) == [article]


class TestGrouping:

    def test_columns_fixed_order(self, board):
        columns = group_by_status(board)
        assert list(columns) == [status for status, _ in BOARD_COLUMNS]
        assert ids(columns[TaskStatus.TODO]) == [board[0].id, board[2].id, board[4].id]
        assert columns[TaskStatus.IN_REVIEW] == []

    @pytest.mark.parametrize("count,label", [(0, "0 tasks"), (1, "1 task"), (2, "2 tasks")])
    def test_count_label(self, count, label):
        assert count_label(count) == label
