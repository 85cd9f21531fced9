"""Project operations.

Creation, visibility-filtered listing, updates, archival, task summary and
cover upload. Membership changes live in :mod:`taskboard.services.membership`.
"""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.database.models.project import Project
from taskboard.database.queries import project as project_queries
from taskboard.database.queries.task import list_task_statuses
from taskboard.errors import Forbidden, InvalidInput, NotFound
from taskboard.permissions import Principal, authenticated, can_edit_project, can_view_project
from taskboard.status import CanonicalStatus, normalize_status
from taskboard.uploads import UploadStore

logger = structlog.get_logger(__name__)

COVER_FOLDER = "covers"


class ProjectDraft(BaseModel):
    """Validated input for a new project."""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(default="", max_length=2000)
    selected_file: str = ""


class ProjectPatch(BaseModel):
    """Partial project update. None means "leave unchanged"."""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=2000)
    active: bool | None = None
    selected_file: str | None = None


@dataclass(frozen=True)
class ProjectSummary:
    """Task counts of a project."""

    project_id: UUID
    total: int
    done: int
    open: int

    @property
    def progress(self) -> int:
        """Percentage of done tasks, rounded down; 0 for an empty project."""
        if self.total == 0:
            return 0
        return self.done * 100 // self.total


def _first_error(exc: ValidationError) -> InvalidInput:
    error = exc.errors()[0]
    field = ".".join(str(p) for p in error.get("loc", ())) or None
    return InvalidInput(f"{field}: {error['msg']}" if field else error["msg"], field=field)


async def create_project(
    session: AsyncSession,
    principal: Principal | None,
    title: str | None,
    description: str | None = "",
    selected_file: str | None = None,
    default_cover: str = "",
) -> Project:
    """Create a project owned by ``principal``.

    The creator becomes an admin (by email when known, else by id).

    Raises:
        Unauthorized: No principal.
        InvalidInput: Title missing or too long, description too long.
    """
    who = authenticated(principal)
    try:
        draft = ProjectDraft(
            title=title or "",
            description=description or "",
            selected_file=selected_file or "",
        )
    except ValidationError as exc:
        raise _first_error(exc) from None

    return await project_queries.create_project(
        session,
        creator=who.primary_token,
        title=draft.title,
        description=draft.description,
        name=who.name or "",
        selected_file=draft.selected_file or default_cover,
        admins=[who.email or who.primary_token],
    )


async def get_visible_project(
    session: AsyncSession,
    project_id: UUID,
    principal: Principal | None,
) -> Project:
    """Load a project the principal may view.

    Raises:
        Unauthorized: No principal.
        NotFound: No such project.
        Forbidden: Principal may not view it.
    """
    authenticated(principal)
    project = await project_queries.get_project(session, project_id)
    if project is None:
        raise NotFound("Project", project_id)
    if not can_view_project(project, principal):
        raise Forbidden("Not allowed to view this project")
    return project


async def get_editable_project(
    session: AsyncSession,
    project_id: UUID,
    principal: Principal | None,
) -> Project:
    """Load a project the principal may edit."""
    authenticated(principal)
    project = await project_queries.get_project(session, project_id)
    if project is None:
        raise NotFound("Project", project_id)
    if not can_edit_project(project, principal):
        raise Forbidden("Not allowed to edit this project")
    return project


async def list_visible_projects(
    session: AsyncSession,
    principal: Principal | None,
    include_archived: bool = False,
) -> list[Project]:
    """Projects the principal created or holds a role in, newest first."""
    who = authenticated(principal)
    projects = await project_queries.list_projects(session, include_archived=include_archived)
    return [p for p in projects if can_view_project(p, who)]


async def update_project(
    session: AsyncSession,
    project_id: UUID,
    principal: Principal | None,
    patch: ProjectPatch,
) -> Project:
    """Apply the set fields of ``patch``."""
    project = await get_editable_project(session, project_id, principal)
    changes = patch.model_dump(exclude_none=True)
    if not changes:
        return project
    return await project_queries.update_project(session, project, **changes)


async def archive_project(
    session: AsyncSession,
    project_id: UUID,
    principal: Principal | None,
) -> Project:
    """Mark a project inactive. Projects are never hard-deleted."""
    project = await get_editable_project(session, project_id, principal)
    project = await project_queries.update_project(session, project, active=False)
    logger.info("project_archived", project_id=str(project_id))
    return project


async def set_project_cover(
    session: AsyncSession,
    project_id: UUID,
    principal: Principal | None,
    store: UploadStore,
    data: bytes,
    filename: str,
) -> Project:
    """Store a cover image and point the project at it."""
    project = await get_editable_project(session, project_id, principal)
    if not data:
        raise InvalidInput("file is empty", field="file")
    reference = await store.save(data, filename, COVER_FOLDER)
    return await project_queries.update_project(session, project, selected_file=reference)


async def project_summary(
    session: AsyncSession,
    project_id: UUID,
    principal: Principal | None,
) -> ProjectSummary:
    """Count a project's tasks by done / not done."""
    await get_visible_project(session, project_id, principal)
    statuses = await list_task_statuses(session, project_id)
    done = sum(1 for s in statuses if normalize_status(s) is CanonicalStatus.done)
    return ProjectSummary(
        project_id=project_id,
        total=len(statuses),
        done=done,
        open=len(statuses) - done,
    )
