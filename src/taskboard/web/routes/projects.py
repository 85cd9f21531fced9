"""Project endpoints for Taskboard.

Routes:
    POST   /projects/                 create (caller becomes creator and admin)
    GET    /projects/                 projects visible to the caller
    GET    /projects/{id}             one project
    PATCH  /projects/{id}             update title/description/active/cover
    DELETE /projects/{id}             archive
    GET    /projects/{id}/summary     task counts and progress
    POST   /projects/{id}/cover       upload a cover image
    POST   /projects/{id}/members     add/move or remove a member
    GET    /projects/{id}/tasks       filtered, ordered task list

Domain errors propagate as TaskboardError and are rendered by the handler
registered in :func:`taskboard.web.app.create_app`.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal
from uuid import UUID

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from fastapi import status as http_status
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from taskboard.config import TaskboardConfig
from taskboard.filters import TaskFilterParams
from taskboard.logging import get_logger
from taskboard.permissions import Principal
from taskboard.services import lifecycle, membership
from taskboard.services import projects as project_service
from taskboard.services.projects import ProjectPatch
from taskboard.uploads import UploadStore
from taskboard.web.dependencies import (
    get_config,
    get_principal,
    get_session_factory,
    get_upload_store,
)
from taskboard.web.routes.tasks import TaskResponse

logger = get_logger(__name__)


class ProjectCreate(BaseModel):
    """Request schema for creating a project.

    Attributes:
        title: Project title (validated by the service: 1-200 characters)
        description: Optional description (up to 2000 characters)
        selected_file: Optional cover reference; the default cover otherwise
    """

    title: str | None = None
    description: str | None = ""
    selected_file: str | None = None


class MemberChange(BaseModel):
    """Request schema for membership changes.

    Attributes:
        member: User id or email of the member
        role: admin, manager or user (ignored when removing)
        action: "add" to set the role, "remove" to drop all roles
    """

    member: str = ""
    role: str = "user"
    action: Literal["add", "remove"] = "add"


class ProjectResponse(BaseModel):
    """Response schema for project data."""

    id: UUID
    creator: str
    name: str
    title: str
    description: str
    active: bool
    selected_file: str
    admins: list[str]
    managers: list[str]
    users: list[str]
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ProjectSummaryResponse(BaseModel):
    """Task counts for a project."""

    project_id: UUID
    total: int
    done: int
    open: int
    progress: int

    model_config = {"from_attributes": True}


def create_projects_router() -> APIRouter:
    """Create the projects router."""
    router = APIRouter(prefix="/projects", tags=["projects"])

    @router.post("/", response_model=ProjectResponse, status_code=http_status.HTTP_201_CREATED)
    async def create_project(
        body: ProjectCreate,
        principal: Principal = Depends(get_principal),  # noqa: B008
        config: TaskboardConfig = Depends(get_config),  # noqa: B008
        session_factory: async_sessionmaker[AsyncSession] = Depends(  # noqa: B008
            get_session_factory
        ),
    ) -> ProjectResponse:
        """Create a project owned by the caller."""
        async with session_factory() as session:
            project = await project_service.create_project(
                session,
                principal,
                title=body.title,
                description=body.description,
                selected_file=body.selected_file,
                default_cover=config.uploads.default_cover,
            )
        logger.info("project_created_via_api", project_id=str(project.id))
        return ProjectResponse.model_validate(project)

    @router.get("/", response_model=list[ProjectResponse])
    async def list_projects(
        include_archived: bool = False,
        principal: Principal = Depends(get_principal),  # noqa: B008
        session_factory: async_sessionmaker[AsyncSession] = Depends(  # noqa: B008
            get_session_factory
        ),
    ) -> list[ProjectResponse]:
        """List projects the caller created or belongs to, newest first."""
        async with session_factory() as session:
            projects = await project_service.list_visible_projects(
                session, principal, include_archived=include_archived
            )
        logger.info("projects_listed", count=len(projects))
        return [ProjectResponse.model_validate(p) for p in projects]

    @router.get("/{project_id}", response_model=ProjectResponse)
    async def get_project(
        project_id: UUID,
        principal: Principal = Depends(get_principal),  # noqa: B008
        session_factory: async_sessionmaker[AsyncSession] = Depends(  # noqa: B008
            get_session_factory
        ),
    ) -> ProjectResponse:
        """Get a project by ID."""
        async with session_factory() as session:
            project = await project_service.get_visible_project(session, project_id, principal)
        return ProjectResponse.model_validate(project)

    @router.patch("/{project_id}", response_model=ProjectResponse)
    async def update_project(
        project_id: UUID,
        patch: ProjectPatch,
        principal: Principal = Depends(get_principal),  # noqa: B008
        session_factory: async_sessionmaker[AsyncSession] = Depends(  # noqa: B008
            get_session_factory
        ),
    ) -> ProjectResponse:
        """Update the provided fields of a project."""
        async with session_factory() as session:
            project = await project_service.update_project(session, project_id, principal, patch)
        return ProjectResponse.model_validate(project)

    @router.delete("/{project_id}", response_model=ProjectResponse)
    async def archive_project(
        project_id: UUID,
        principal: Principal = Depends(get_principal),  # noqa: B008
        session_factory: async_sessionmaker[AsyncSession] = Depends(  # noqa: B008
            get_session_factory
        ),
    ) -> ProjectResponse:
        """Archive a project (projects are never hard-deleted)."""
        async with session_factory() as session:
            project = await project_service.archive_project(session, project_id, principal)
        return ProjectResponse.model_validate(project)

    @router.get("/{project_id}/summary", response_model=ProjectSummaryResponse)
    async def project_summary(
        project_id: UUID,
        principal: Principal = Depends(get_principal),  # noqa: B008
        session_factory: async_sessionmaker[AsyncSession] = Depends(  # noqa: B008
            get_session_factory
        ),
    ) -> ProjectSummaryResponse:
        """Task counts and progress percentage of a project."""
        async with session_factory() as session:
            summary = await project_service.project_summary(session, project_id, principal)
        return ProjectSummaryResponse.model_validate(summary)

    @router.post("/{project_id}/cover", response_model=ProjectResponse)
    async def upload_cover(
        project_id: UUID,
        file: UploadFile = File(...),  # noqa: B008
        principal: Principal = Depends(get_principal),  # noqa: B008
        store: UploadStore = Depends(get_upload_store),  # noqa: B008
        session_factory: async_sessionmaker[AsyncSession] = Depends(  # noqa: B008
            get_session_factory
        ),
    ) -> ProjectResponse:
        """Upload a cover image and set it on the project."""
        data = await file.read()
        try:
            async with session_factory() as session:
                project = await project_service.set_project_cover(
                    session, project_id, principal, store, data, file.filename or ""
                )
        except ValueError as exc:
            raise HTTPException(
                status_code=413,
                detail=str(exc),
            ) from exc
        return ProjectResponse.model_validate(project)

    @router.post("/{project_id}/members", response_model=ProjectResponse)
    async def change_member(
        project_id: UUID,
        body: MemberChange,
        principal: Principal = Depends(get_principal),  # noqa: B008
        session_factory: async_sessionmaker[AsyncSession] = Depends(  # noqa: B008
            get_session_factory
        ),
    ) -> ProjectResponse:
        """Give a member a role, or remove them from every role."""
        async with session_factory() as session:
            if body.action == "remove":
                project = await membership.remove_from_all_roles(
                    session, project_id, body.member, principal
                )
            else:
                project = await membership.set_role(
                    session, project_id, body.member, body.role, principal
                )
        return ProjectResponse.model_validate(project)

    @router.get("/{project_id}/tasks", response_model=list[TaskResponse])
    async def list_project_tasks(
        project_id: UUID,
        status: str = "Open",
        assignee: str = "all",
        due: str = "all",
        q: str | None = None,
        principal: Principal = Depends(get_principal),  # noqa: B008
        session_factory: async_sessionmaker[AsyncSession] = Depends(  # noqa: B008
            get_session_factory
        ),
    ) -> list[TaskResponse]:
        """Filtered task list; the status bucket defaults to Open."""
        params = TaskFilterParams(status=status, assignee=assignee, due=due, q=q)
        async with session_factory() as session:
            tasks = await lifecycle.list_project_tasks(session, project_id, principal, params)
        logger.info("project_tasks_listed", project_id=str(project_id), count=len(tasks))
        return [TaskResponse.model_validate(t) for t in tasks]

    return router
