"""Subtask endpoints for Taskboard.

Routes:
    POST   /subtasks/         create a subtask under a task
    GET    /subtasks/{id}     one subtask
    PATCH  /subtasks/{id}     partial update, invalid fields dropped
    DELETE /subtasks/{id}     delete (status must be done)
"""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends
from fastapi import status as http_status
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from taskboard.logging import get_logger
from taskboard.permissions import Principal
from taskboard.services import lifecycle
from taskboard.services.lifecycle import SubtaskPatch
from taskboard.web.dependencies import get_principal, get_session_factory
from taskboard.web.routes.tasks import SubtaskResponse

logger = get_logger(__name__)


class SubtaskCreate(BaseModel):
    """Request schema for creating a subtask.

    ``creator`` defaults to the creator of the parent task.
    """

    task_id: UUID
    title: str | None = None
    description: str | None = ""
    name: str | None = ""
    creator: str | None = None
    assigned: str | None = ""
    due_date: str | None = None
    priority: str | None = None


def create_subtasks_router() -> APIRouter:
    """Create the subtasks router."""
    router = APIRouter(prefix="/subtasks", tags=["subtasks"])

    @router.post("/", response_model=SubtaskResponse, status_code=http_status.HTTP_201_CREATED)
    async def create_subtask(
        body: SubtaskCreate,
        principal: Principal = Depends(get_principal),  # noqa: B008
        session_factory: async_sessionmaker[AsyncSession] = Depends(  # noqa: B008
            get_session_factory
        ),
    ) -> SubtaskResponse:
        """Create a subtask; the caller must edit the parent task or its project."""
        draft = body.model_dump(exclude={"task_id"}, exclude_none=True)
        async with session_factory() as session:
            subtask = await lifecycle.create_subtask(session, body.task_id, principal, draft)
        logger.info("subtask_created_via_api", subtask_id=str(subtask.id))
        return SubtaskResponse.model_validate(subtask)

    @router.get("/{subtask_id}", response_model=SubtaskResponse)
    async def get_subtask(
        subtask_id: UUID,
        principal: Principal = Depends(get_principal),  # noqa: B008
        session_factory: async_sessionmaker[AsyncSession] = Depends(  # noqa: B008
            get_session_factory
        ),
    ) -> SubtaskResponse:
        async with session_factory() as session:
            subtask = await lifecycle.get_subtask(session, subtask_id, principal)
        return SubtaskResponse.model_validate(subtask)

    @router.patch("/{subtask_id}", response_model=SubtaskResponse)
    async def update_subtask(
        subtask_id: UUID,
        patch: SubtaskPatch,
        principal: Principal = Depends(get_principal),  # noqa: B008
        session_factory: async_sessionmaker[AsyncSession] = Depends(  # noqa: B008
            get_session_factory
        ),
    ) -> SubtaskResponse:
        async with session_factory() as session:
            subtask = await lifecycle.update_subtask(session, subtask_id, principal, patch)
        return SubtaskResponse.model_validate(subtask)

    @router.delete("/{subtask_id}", status_code=http_status.HTTP_204_NO_CONTENT)
    async def delete_subtask(
        subtask_id: UUID,
        principal: Principal = Depends(get_principal),  # noqa: B008
        session_factory: async_sessionmaker[AsyncSession] = Depends(  # noqa: B008
            get_session_factory
        ),
    ) -> None:
        """Delete a done subtask."""
        async with session_factory() as session:
            await lifecycle.delete_subtask(session, subtask_id, principal)
        logger.info("subtask_deleted_via_api", subtask_id=str(subtask_id))

    return router
