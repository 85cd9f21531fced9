"""Project query functions for Taskboard.

Provides async functions for creating, reading and updating Project rows
using the SQLAlchemy 2.0 select()/update() API. Write functions commit.
"""

from __future__ import annotations

from typing import Any
from uuid import UUID

import structlog
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.database.models.base import utcnow
from taskboard.database.models.project import Project

logger = structlog.get_logger(__name__)


async def create_project(
    session: AsyncSession,
    creator: str,
    title: str,
    description: str = "",
    name: str = "",
    selected_file: str = "",
    admins: list[str] | None = None,
) -> Project:
    """Insert a new active project.

    Args:
        session: Active async database session.
        creator: Principal token of the creator.
        title: Project title.
        description: Free-text description.
        name: Creator display name.
        selected_file: Cover image reference.
        admins: Initial admin tokens.

    Returns:
        The newly created Project instance.
    """
    project = Project(
        creator=creator,
        name=name,
        title=title,
        description=description,
        active=True,
        selected_file=selected_file,
        admins=list(admins or []),
        managers=[],
        users=[],
    )
    session.add(project)
    await session.commit()
    await session.refresh(project)

    logger.info("project_created", project_id=str(project.id), creator=creator)
    return project


async def get_project(
    session: AsyncSession,
    project_id: UUID,
    for_update: bool = False,
) -> Project | None:
    """Retrieve a project by ID.

    Args:
        session: Active async database session.
        project_id: UUID of the project to retrieve.
        for_update: Lock the row until the transaction ends (ignored by SQLite).

    Returns:
        The Project instance if found, None otherwise.
    """
    stmt = select(Project).where(Project.id == project_id)
    if for_update:
        stmt = stmt.with_for_update()
    stmt = stmt.execution_options(populate_existing=True)
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def list_projects(
    session: AsyncSession,
    include_archived: bool = False,
) -> list[Project]:
    """List projects, newest first.

    Args:
        session: Active async database session.
        include_archived: Also return projects with active = False.
    """
    stmt = select(Project)
    if not include_archived:
        stmt = stmt.where(Project.active.is_(True))
    stmt = stmt.order_by(Project.created_at.desc(), Project.id)
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def update_project(
    session: AsyncSession,
    project: Project,
    **updates: Any,
) -> Project:
    """Apply column updates to a loaded project and commit.

    Args:
        session: Active async database session.
        project: Project instance loaded from this session.
        **updates: Column names and values.

    Returns:
        The refreshed Project instance.
    """
    for key, value in updates.items():
        setattr(project, key, value)
    await session.commit()
    await session.refresh(project)

    logger.info(
        "project_updated",
        project_id=str(project.id),
        fields_updated=sorted(updates),
    )
    return project


async def replace_role_arrays(
    session: AsyncSession,
    project_id: UUID,
    admins: list[str],
    managers: list[str],
    users: list[str],
) -> None:
    """Write all three role arrays in a single UPDATE statement and commit.

    Callers read the current arrays with ``get_project(..., for_update=True)``
    in the same transaction, so the read and this write are one unit.
    """
    stmt = (
        update(Project)
        .where(Project.id == project_id)
        .values(admins=admins, managers=managers, users=users, updated_at=utcnow())
        .execution_options(synchronize_session=False)
    )
    await session.execute(stmt)
    await session.commit()
