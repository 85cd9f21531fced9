"""Task query functions for Taskboard.

Provides async functions for creating, reading, updating, filtering and
deleting Task rows. Filtering accepts a prepared where-clause and ordering
from :mod:`taskboard.filters`.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any
from uuid import UUID

import structlog
from sqlalchemy import ColumnElement, delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.database.models.task import Task

logger = structlog.get_logger(__name__)


async def create_task(session: AsyncSession, project_id: UUID, **fields: Any) -> Task:
    """Insert a task under ``project_id`` and commit.

    Args:
        session: Active async database session.
        project_id: UUID of the owning project.
        **fields: Task column values (title, creator, status, ...).

    Returns:
        The newly created Task instance.
    """
    task = Task(project_id=project_id, **fields)
    session.add(task)
    await session.commit()
    await session.refresh(task)

    logger.info(
        "task_created",
        task_id=str(task.id),
        project_id=str(project_id),
        status=task.status,
    )
    return task


async def get_task(session: AsyncSession, task_id: UUID) -> Task | None:
    """Retrieve a task by ID, or None."""
    stmt = select(Task).where(Task.id == task_id).execution_options(populate_existing=True)
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def list_tasks(
    session: AsyncSession,
    where: ColumnElement[bool] | None = None,
    order_by: Sequence[Any] = (),
) -> list[Task]:
    """List tasks matching a where-clause, in the given order.

    Args:
        session: Active async database session.
        where: Optional predicate, typically from resolve_task_filter.
        order_by: ORDER BY expressions, typically task_ordering().
    """
    stmt = select(Task)
    if where is not None:
        stmt = stmt.where(where)
    if order_by:
        stmt = stmt.order_by(*order_by)
    else:
        stmt = stmt.order_by(Task.created_at.desc())
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def list_task_statuses(session: AsyncSession, project_id: UUID) -> list[str | None]:
    """Return the raw status of every task in a project."""
    stmt = select(Task.status).where(Task.project_id == project_id)
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def update_task(session: AsyncSession, task: Task, **updates: Any) -> Task:
    """Apply column updates to a loaded task and commit."""
    for key, value in updates.items():
        setattr(task, key, value)
    await session.commit()
    await session.refresh(task)

    logger.info("task_updated", task_id=str(task.id), fields_updated=sorted(updates))
    return task


async def delete_task(session: AsyncSession, task_id: UUID) -> bool:
    """Delete a task row. Subtasks are left untouched.

    Returns:
        True if a row was deleted, False if not found.
    """
    result = await session.execute(delete(Task).where(Task.id == task_id))
    await session.commit()

    deleted = result.rowcount > 0
    if deleted:
        logger.info("task_deleted", task_id=str(task_id))
    else:
        logger.warning("task_not_found", task_id=str(task_id))
    return deleted
