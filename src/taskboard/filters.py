"""Task filter resolution.

Turns the filter selections of the task list (status bucket, assignee bucket,
due bucket, free-text query) into a single SQLAlchemy where-clause over the
tasks table, and defines the list ordering.

Status buckets match stored status text the same way normalize_status reads
it: case-insensitively, ignoring spaces, hyphens and underscores. So the
"To do" bucket matches "To do", "Todo", "to-do", "To Assign" and "Open", and
the "Open" meta-bucket matches every not-done spelling.

Example:
    >>> params = TaskFilterParams(status="Open", assignee="me", due="week")
    >>> clause = resolve_task_filter(params, principal)
    >>> tasks = await list_tasks(session, where=clause, order_by=task_ordering())
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict
from sqlalchemy import ColumnElement, and_, false, func, or_, true

from taskboard.database.models.base import utcnow
from taskboard.database.models.task import Task
from taskboard.permissions import Principal
from taskboard.status import OPEN_STATUSES, STATUS_ALIASES, CanonicalStatus, compact

ALL = "all"
DUE_WINDOW = timedelta(days=7)

# Bucket names, compacted, to the canonical statuses they cover.
STATUS_BUCKETS: dict[str, tuple[CanonicalStatus, ...]] = {
    "todo": (CanonicalStatus.todo,),
    "inprogress": (CanonicalStatus.in_progress,),
    "blocked": (CanonicalStatus.blocked,),
    "stuck": (CanonicalStatus.blocked,),
    "done": (CanonicalStatus.done,),
    "open": OPEN_STATUSES,
}


class TaskFilterParams(BaseModel):
    """Filter selections for a task list.

    Attributes:
        status: Status bucket name ("To do", "In progress", "Blocked",
            "Done", "Open") or "all"
        assignee: "all", "me", "unassigned", or a literal assignee
        due: "all", "overdue", "week" or "none"; anything else means "all"
        q: Free-text query matched against title and description
        project_id: Restrict to one project
    """

    model_config = ConfigDict(frozen=True)

    status: str = ALL
    assignee: str = ALL
    due: str = ALL
    q: str | None = None
    project_id: UUID | None = None


def _compacted(column: Any) -> ColumnElement[Any]:
    # SQL mirror of taskboard.status.compact
    expr = func.lower(func.trim(column))
    for sep in (" ", "-", "_", "\t", "\n", "\r"):
        expr = func.replace(expr, sep, "")
    return expr


def _folded(column: Any) -> ColumnElement[Any]:
    return func.lower(func.trim(column))


def _is_blank(column: Any) -> ColumnElement[bool]:
    # SQL trim() only strips spaces
    expr = column
    for control in ("\t", "\n", "\r"):
        expr = func.replace(expr, control, "")
    return func.trim(expr) == ""


def status_clause(bucket: str | None) -> ColumnElement[bool] | None:
    """Where-clause for a status bucket, or None for no restriction."""
    if bucket is None or not bucket.strip() or bucket.strip().lower() == ALL:
        return None

    statuses = STATUS_BUCKETS.get(compact(bucket))
    if statuses is None:
        return _folded(Task.status) == bucket.strip().lower()

    aliases = sorted(alias for status in statuses for alias in STATUS_ALIASES[status])
    clauses: list[ColumnElement[bool]] = [_compacted(Task.status).in_(aliases)]
    if CanonicalStatus.todo in statuses:
        # empty status reads as todo
        clauses.append(Task.status.is_(None))
        clauses.append(_compacted(Task.status) == "")
    return or_(*clauses)


def assignee_clause(
    assignee: str | None,
    principal: Principal | None,
) -> ColumnElement[bool] | None:
    """Where-clause for an assignee bucket, or None for no restriction.

    "me" matches the principal's id, email or display name. Display names are
    not unique, so two users sharing a name see each other's tasks here.
    """
    value = (assignee or "").strip()
    if not value or value.lower() == ALL:
        return None

    if value.lower() == "unassigned":
        return or_(
            Task.assigned.is_(None),
            _is_blank(Task.assigned),
            _folded(Task.assigned) == "unassigned",
        )

    if value.lower() == "me":
        identities: list[str] = []
        if principal is not None:
            identities = [
                v.strip().lower()
                for v in (principal.id, principal.email, principal.name)
                if v and v.strip()
            ]
        if not identities:
            return false()
        return _folded(Task.assigned).in_(identities)

    return _folded(Task.assigned) == value.lower()


def due_clause(due: str | None, now: datetime) -> ColumnElement[bool] | None:
    """Where-clause for a due bucket relative to ``now``."""
    bucket = (due or ALL).strip().lower()
    if bucket == "overdue":
        return Task.due_date < now
    if bucket == "week":
        return and_(Task.due_date >= now, Task.due_date <= now + DUE_WINDOW)
    if bucket == "none":
        return Task.due_date.is_(None)
    return None


def query_clause(q: str | None) -> ColumnElement[bool] | None:
    """Case-insensitive substring match on title or description.

    LIKE wildcards in ``q`` are escaped and match literally.
    """
    text = (q or "").strip()
    if not text:
        return None
    return or_(
        Task.title.icontains(text, autoescape=True),
        Task.description.icontains(text, autoescape=True),
    )


def resolve_task_filter(
    params: TaskFilterParams,
    principal: Principal | None = None,
    now: datetime | None = None,
) -> ColumnElement[bool]:
    """Combine every active filter clause with AND.

    Args:
        params: Filter selections
        principal: Requesting principal, used by the "me" assignee bucket
        now: Reference time for due buckets (defaults to current UTC time)

    Returns:
        A where-clause over Task; ``true()`` when no filter is active.
    """
    reference = now or utcnow()
    clauses = [
        Task.project_id == params.project_id if params.project_id is not None else None,
        status_clause(params.status),
        assignee_clause(params.assignee, principal),
        due_clause(params.due, reference),
        query_clause(params.q),
    ]
    active = [c for c in clauses if c is not None]
    if not active:
        return true()
    return and_(*active)


def task_ordering() -> tuple[Any, ...]:
    """ORDER BY for task lists.

    Due date ascending with undated tasks last, then most recently updated,
    then most recently created, then id so ties resolve the same way every time.
    """
    return (
        Task.due_date.is_(None),
        Task.due_date.asc(),
        Task.updated_at.desc(),
        Task.created_at.desc(),
        Task.id.asc(),
    )
