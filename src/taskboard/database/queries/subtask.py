"""Subtask query functions for Taskboard."""

from __future__ import annotations

from typing import Any
from uuid import UUID

import structlog
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.database.models.task import Subtask

logger = structlog.get_logger(__name__)


async def create_subtask(session: AsyncSession, task_id: UUID, **fields: Any) -> Subtask:
    """Insert a subtask under ``task_id`` and commit."""
    subtask = Subtask(task_id=task_id, **fields)
    session.add(subtask)
    await session.commit()
    await session.refresh(subtask)

    logger.info("subtask_created", subtask_id=str(subtask.id), task_id=str(task_id))
    return subtask


async def get_subtask(session: AsyncSession, subtask_id: UUID) -> Subtask | None:
    """Retrieve a subtask by ID, or None."""
    stmt = (
        select(Subtask)
        .where(Subtask.id == subtask_id)
        .execution_options(populate_existing=True)
    )
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def list_subtasks(session: AsyncSession, task_id: UUID) -> list[Subtask]:
    """List a task's subtasks, newest first."""
    stmt = (
        select(Subtask)
        .where(Subtask.task_id == task_id)
        .order_by(Subtask.created_at.desc(), Subtask.id)
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def update_subtask(session: AsyncSession, subtask: Subtask, **updates: Any) -> Subtask:
    """Apply column updates to a loaded subtask and commit."""
    for key, value in updates.items():
        setattr(subtask, key, value)
    await session.commit()
    await session.refresh(subtask)

    logger.info("subtask_updated", subtask_id=str(subtask.id), fields_updated=sorted(updates))
    return subtask


async def delete_subtask(session: AsyncSession, subtask_id: UUID) -> bool:
    """Delete a subtask row. Returns False if it did not exist."""
    result = await session.execute(delete(Subtask).where(Subtask.id == subtask_id))
    await session.commit()
    deleted = result.rowcount > 0
    if deleted:
        logger.info("subtask_deleted", subtask_id=str(subtask_id))
    return deleted
