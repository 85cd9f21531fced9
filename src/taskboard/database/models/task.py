"""Task and subtask models for Taskboard.

Tasks belong to a project; subtasks belong to a task. Both share the same
work-item columns (WorkItemMixin). ``status`` is free text so legacy rows
survive, but every write stores a canonical value and every read normalizes.

``Subtask.task_id`` is intentionally not a foreign key: deleting a task leaves
its subtasks in place.
"""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import Boolean, ForeignKey, Index, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from taskboard.database.models.base import Base, JSONList, TimestampMixin, UTCDateTime
from taskboard.status import CanonicalStatus, Priority


class WorkItemMixin:
    """Columns shared by tasks and subtasks.

    Attributes:
        creator: Principal token of the creating user.
        name: Legacy label, kept for older rows.
        title: Short title (1-200 chars).
        description: Longer description (up to 2000 chars).
        active: Soft-visibility flag.
        status: Status text, canonical for rows written by this service.
        assigned: Assignee token or free text; empty when unassigned.
        due_date: Optional due timestamp (UTC).
        attached_files: Upload references.
        allowed_users: Principal tokens granted item-level access.
        priority: Low, Medium or High.
    """

    creator: Mapped[str] = mapped_column(Text, nullable=False, default="")
    name: Mapped[str] = mapped_column(Text, nullable=False, default="")
    title: Mapped[str] = mapped_column(Text, nullable=False, default="")
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    status: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
        default=CanonicalStatus.todo.value,
    )
    assigned: Mapped[str | None] = mapped_column(Text, nullable=True, default="")
    due_date: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    attached_files: Mapped[list[str]] = mapped_column(JSONList, nullable=False, default=list)
    allowed_users: Mapped[list[str]] = mapped_column(JSONList, nullable=False, default=list)
    priority: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
        default=Priority.medium.value,
    )


class Task(TimestampMixin, WorkItemMixin, Base):
    """A task within a project.

    Attributes:
        project_id: Foreign key to the owning project.
    """

    __tablename__ = "tasks"
    __table_args__ = (
        Index("ix_tasks_project_due", "project_id", "due_date", "updated_at"),
    )

    project_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("projects.id"),
        nullable=False,
        index=True,
    )


class Subtask(TimestampMixin, WorkItemMixin, Base):
    """A subtask of a task.

    Attributes:
        task_id: Id of the parent task (no foreign key, see module docstring).
    """

    __tablename__ = "subtasks"

    task_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)
