"""Unit tests for task filter clause construction.

Row-level behaviour of the clauses is covered against a database in
tests/integration/test_task_filter_queries.py; these tests check which
clauses are produced for which selections.
"""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
from sqlalchemy.dialects import sqlite

from taskboard.filters import (
    STATUS_BUCKETS,
    TaskFilterParams,
    assignee_clause,
    due_clause,
    query_clause,
    resolve_task_filter,
    status_clause,
    task_ordering,
)
from taskboard.permissions import resolve_principal
from taskboard.status import OPEN_STATUSES, CanonicalStatus

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def render(clause: object) -> str:
    return str(
        clause.compile(  # type: ignore[attr-defined]
            dialect=sqlite.dialect(),
            compile_kwargs={"literal_binds": True},
        )
    )


class TestStatusClause:
    """Test status bucket clauses."""

    @pytest.mark.parametrize("bucket", [None, "", "all", "All", "  ALL "])
    def test_all_means_no_restriction(self, bucket: str | None) -> None:
        assert status_clause(bucket) is None

    def test_bucket_names_are_compacted(self) -> None:
        assert STATUS_BUCKETS["inprogress"] == (CanonicalStatus.in_progress,)
        assert STATUS_BUCKETS["open"] == OPEN_STATUSES

    def test_done_bucket_lists_done_aliases(self) -> None:
        sql = render(status_clause("Done"))
        assert "'done'" in sql
        assert "'closed'" in sql
        assert "'todo'" not in sql

    def test_todo_bucket_matches_empty_status(self) -> None:
        sql = render(status_clause("To do"))
        assert "IS NULL" in sql
        assert "'toassign'" in sql

    def test_open_bucket_covers_all_open_aliases(self) -> None:
        sql = render(status_clause("Open"))
        for alias in ("todo", "open", "inprogress", "stuck", "blocked"):
            assert f"'{alias}'" in sql
        assert "'done'" not in sql

    def test_unknown_bucket_falls_back_to_literal(self) -> None:
        sql = render(status_clause("Review"))
        assert "'review'" in sql


class TestAssigneeClause:
    """Test assignee bucket clauses."""

    @pytest.mark.parametrize("bucket", [None, "", "all"])
    def test_all_means_no_restriction(self, bucket: str | None) -> None:
        assert assignee_clause(bucket, None) is None

    def test_me_uses_every_identity(self) -> None:
        principal = resolve_principal("U1", "ana@example.com", "Ana Lima")
        sql = render(assignee_clause("me", principal))
        assert "'u1'" in sql
        assert "'ana@example.com'" in sql
        assert "'ana lima'" in sql

    def test_me_without_principal_matches_nothing(self) -> None:
        sql = render(assignee_clause("me", None))
        assert sql in ("0", "false")

    def test_unassigned(self) -> None:
        sql = render(assignee_clause("unassigned", None))
        assert "IS NULL" in sql
        assert "'unassigned'" in sql

    def test_literal_value_is_lowered(self) -> None:
        assert "'bob'" in render(assignee_clause("Bob", None))


class TestDueAndQueryClauses:
    """Test due bucket and text query clauses."""

    @pytest.mark.parametrize("bucket", [None, "all", "someday"])
    def test_unknown_due_bucket_is_no_restriction(self, bucket: str | None) -> None:
        assert due_clause(bucket, NOW) is None

    def test_none_bucket(self) -> None:
        assert "IS NULL" in render(due_clause("none", NOW))

    @pytest.mark.parametrize("bucket", ["overdue", "week"])
    def test_date_buckets_produce_clauses(self, bucket: str) -> None:
        assert due_clause(bucket, NOW) is not None

    def test_blank_query_is_no_restriction(self) -> None:
        assert query_clause(None) is None
        assert query_clause("   ") is None

    def test_query_escapes_wildcards(self) -> None:
        sql = render(query_clause("50%"))
        assert "ESCAPE" in sql


class TestResolveTaskFilter:
    """Test the combined filter."""

    def test_no_selection_is_true(self) -> None:
        params = TaskFilterParams()
        assert render(resolve_task_filter(params, now=NOW)) in ("1", "true")

    def test_selections_are_anded(self) -> None:
        params = TaskFilterParams(status="Done", due="none", q="report")
        sql = render(resolve_task_filter(params, now=NOW))
        assert sql.count(" AND ") >= 2

    def test_params_are_frozen(self) -> None:
        params = TaskFilterParams(status="Open")
        with pytest.raises(Exception):
            params.status = "Done"  # type: ignore[misc]

    def test_ordering_puts_undated_last(self) -> None:
        ordering = task_ordering()
        assert len(ordering) == 5
        assert "IS NULL" in render(ordering[0])
