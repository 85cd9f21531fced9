"""Task endpoints for Taskboard.

Routes:
    POST   /tasks/                    create a task in a project
    GET    /tasks/{id}                one task
    PATCH  /tasks/{id}                partial update, invalid fields dropped
    DELETE /tasks/{id}                delete (status must be done)
    POST   /tasks/{id}/attachments    upload a file and attach it
    GET    /tasks/{id}/subtasks       the task's subtasks

The filtered task list of a project lives under
``GET /projects/{id}/tasks``.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from fastapi import status as http_status
from pydantic import BaseModel, computed_field, field_validator
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from taskboard.logging import get_logger
from taskboard.permissions import Principal
from taskboard.services import lifecycle
from taskboard.services.lifecycle import TaskPatch
from taskboard.status import STATUS_LABELS, normalize_priority, normalize_status
from taskboard.uploads import UploadStore
from taskboard.web.dependencies import get_principal, get_session_factory, get_upload_store

logger = get_logger(__name__)


class TaskCreate(BaseModel):
    """Request schema for creating a task.

    Title and description are validated by the lifecycle service so that a
    bad draft surfaces as ``invalid_input``.
    """

    project_id: UUID
    title: str | None = None
    description: str | None = ""
    name: str | None = ""
    assigned: str | None = ""
    due_date: str | None = None
    priority: str | None = None


class WorkItemResponse(BaseModel):
    """Fields shared by task and subtask responses.

    ``status`` is always canonical, whatever spelling the row holds.
    """

    id: UUID
    creator: str
    name: str
    title: str
    description: str
    active: bool
    status: str
    assigned: str
    due_date: datetime | None
    attached_files: list[str]
    allowed_users: list[str]
    priority: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}

    @field_validator("status", mode="before")
    @classmethod
    def canonical_status(cls, v: Any) -> str:
        return normalize_status(v).value

    @field_validator("priority", mode="before")
    @classmethod
    def known_priority(cls, v: Any) -> str:
        return normalize_priority(v).value

    @field_validator("assigned", mode="before")
    @classmethod
    def empty_assignee(cls, v: Any) -> str:
        return v or ""

    @computed_field  # type: ignore[prop-decorator]
    @property
    def status_label(self) -> str:
        return STATUS_LABELS[normalize_status(self.status)]


class TaskResponse(WorkItemResponse):
    """Response schema for task data."""

    project_id: UUID


class SubtaskResponse(WorkItemResponse):
    """Response schema for subtask data."""

    task_id: UUID


def create_tasks_router() -> APIRouter:
    """Create the tasks router."""
    router = APIRouter(prefix="/tasks", tags=["tasks"])

    @router.post("/", response_model=TaskResponse, status_code=http_status.HTTP_201_CREATED)
    async def create_task(
        body: TaskCreate,
        principal: Principal = Depends(get_principal),  # noqa: B008
        session_factory: async_sessionmaker[AsyncSession] = Depends(  # noqa: B008
            get_session_factory
        ),
    ) -> TaskResponse:
        """Create a task; the caller must be able to edit the project."""
        draft = body.model_dump(exclude={"project_id"}, exclude_none=True)
        async with session_factory() as session:
            task = await lifecycle.create_task(session, body.project_id, principal, draft)
        logger.info("task_created_via_api", task_id=str(task.id))
        return TaskResponse.model_validate(task)

    @router.get("/{task_id}", response_model=TaskResponse)
    async def get_task(
        task_id: UUID,
        principal: Principal = Depends(get_principal),  # noqa: B008
        session_factory: async_sessionmaker[AsyncSession] = Depends(  # noqa: B008
            get_session_factory
        ),
    ) -> TaskResponse:
        """Get a task by ID."""
        async with session_factory() as session:
            task = await lifecycle.get_task(session, task_id, principal)
        return TaskResponse.model_validate(task)

    @router.patch("/{task_id}", response_model=TaskResponse)
    async def update_task(
        task_id: UUID,
        patch: TaskPatch,
        principal: Principal = Depends(get_principal),  # noqa: B008
        session_factory: async_sessionmaker[AsyncSession] = Depends(  # noqa: B008
            get_session_factory
        ),
    ) -> TaskResponse:
        """Apply the valid fields of the patch."""
        async with session_factory() as session:
            task = await lifecycle.update_task(session, task_id, principal, patch)
        return TaskResponse.model_validate(task)

    @router.delete("/{task_id}", status_code=http_status.HTTP_204_NO_CONTENT)
    async def delete_task(
        task_id: UUID,
        principal: Principal = Depends(get_principal),  # noqa: B008
        session_factory: async_sessionmaker[AsyncSession] = Depends(  # noqa: B008
            get_session_factory
        ),
    ) -> None:
        """Delete a done task. Its subtasks are kept."""
        async with session_factory() as session:
            await lifecycle.delete_task(session, task_id, principal)
        logger.info("task_deleted_via_api", task_id=str(task_id))

    @router.post("/{task_id}/attachments", response_model=TaskResponse)
    async def attach_file(
        task_id: UUID,
        file: UploadFile = File(...),  # noqa: B008
        principal: Principal = Depends(get_principal),  # noqa: B008
        store: UploadStore = Depends(get_upload_store),  # noqa: B008
        session_factory: async_sessionmaker[AsyncSession] = Depends(  # noqa: B008
            get_session_factory
        ),
    ) -> TaskResponse:
        """Upload a file and append its reference to the task."""
        data = await file.read()
        try:
            async with session_factory() as session:
                task = await lifecycle.add_task_attachment(
                    session, task_id, principal, store, data, file.filename or ""
                )
        except ValueError as exc:
            raise HTTPException(
                status_code=413,
                detail=str(exc),
            ) from exc
        return TaskResponse.model_validate(task)

    @router.get("/{task_id}/subtasks", response_model=list[SubtaskResponse])
    async def list_subtasks(
        task_id: UUID,
        principal: Principal = Depends(get_principal),  # noqa: B008
        session_factory: async_sessionmaker[AsyncSession] = Depends(  # noqa: B008
            get_session_factory
        ),
    ) -> list[SubtaskResponse]:
        """List a task's subtasks, newest first."""
        async with session_factory() as session:
            subtasks = await lifecycle.list_task_subtasks(session, task_id, principal)
        return [SubtaskResponse.model_validate(s) for s in subtasks]

    return router
