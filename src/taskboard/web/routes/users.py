"""User profile endpoint for Taskboard.

``GET /users/me`` records the caller's profile from the identity headers
(creating it on first sight) and returns it. Callers known only by id, with
no email header, get their identity echoed back without a stored profile.
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from taskboard.database.queries.user import upsert_user
from taskboard.logging import get_logger
from taskboard.permissions import Principal
from taskboard.web.dependencies import get_principal, get_session_factory

logger = get_logger(__name__)


class UserResponse(BaseModel):
    """Response schema for the calling user."""

    id: UUID | None = None
    external_id: str | None = None
    email: str | None = None
    name: str = ""
    role: str = "MEMBER"
    created_at: datetime | None = None


def create_users_router() -> APIRouter:
    """Create the users router."""
    router = APIRouter(prefix="/users", tags=["users"])

    @router.get("/me", response_model=UserResponse)
    async def me(
        principal: Principal = Depends(get_principal),  # noqa: B008
        session_factory: async_sessionmaker[AsyncSession] = Depends(  # noqa: B008
            get_session_factory
        ),
    ) -> UserResponse:
        """Return (and record) the calling user's profile."""
        if principal.email is None:
            return UserResponse(external_id=principal.id, name=principal.name or "")

        async with session_factory() as session:
            user = await upsert_user(
                session,
                email=principal.email,
                name=principal.name,
                external_id=principal.id,
            )
        return UserResponse(
            id=user.id,
            external_id=user.external_id,
            email=user.email,
            name=user.name,
            role=user.role.value,
            created_at=user.created_at,
        )

    return router
