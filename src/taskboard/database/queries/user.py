"""User profile query functions for Taskboard."""

from __future__ import annotations

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.database.models.user import User

logger = structlog.get_logger(__name__)


async def get_user_by_email(session: AsyncSession, email: str) -> User | None:
    """Retrieve a user by (lower-cased) email."""
    result = await session.execute(select(User).where(User.email == email.lower()))
    return result.scalar_one_or_none()


async def upsert_user(
    session: AsyncSession,
    email: str,
    name: str | None = None,
    external_id: str | None = None,
    provider: str = "credentials",
) -> User:
    """Create the user with ``email`` or refresh its name and external id.

    Args:
        session: Active async database session.
        email: Email address; stored lower-cased.
        name: Display name, kept unchanged when None.
        external_id: Identity-provider id, kept unchanged when None.
        provider: Provider recorded on first creation.

    Returns:
        The stored User.
    """
    user = await get_user_by_email(session, email)
    if user is None:
        user = User(
            email=email.lower(),
            name=name or "",
            external_id=external_id,
            provider=provider,
        )
        session.add(user)
        logger.info("user_registered", email=email.lower())
    else:
        if name is not None:
            user.name = name
        if external_id is not None:
            user.external_id = external_id
    await session.commit()
    await session.refresh(user)
    return user
