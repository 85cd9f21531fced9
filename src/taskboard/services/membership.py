"""Project membership management.

A principal token holds at most one role in a project. Changing a member's
role removes the token from all three role arrays and appends it to the target
array; the row is read under ``SELECT ... FOR UPDATE`` and all three arrays
are written by one UPDATE, so concurrent invites of the same member cannot
leave it in two arrays.
"""

from __future__ import annotations

from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.database.models.project import Project, ProjectRole
from taskboard.database.queries.project import get_project, replace_role_arrays
from taskboard.errors import Forbidden, InvalidInput, NotFound
from taskboard.permissions import PrincipalLike, can_edit_project, normalize_token

logger = structlog.get_logger(__name__)

MEMBER_MIN_LENGTH = 3
MEMBER_MAX_LENGTH = 200


def validate_member(member: str | None) -> str:
    """Normalize a member token, raising InvalidInput if it is unusable."""
    token = normalize_token(member)
    if not token:
        raise InvalidInput("member is required", field="member")
    if not MEMBER_MIN_LENGTH <= len(token) <= MEMBER_MAX_LENGTH:
        raise InvalidInput(
            f"member must be {MEMBER_MIN_LENGTH}-{MEMBER_MAX_LENGTH} characters",
            field="member",
        )
    return token


def _without(tokens: list[str] | None, member: str) -> list[str]:
    # Drops the member and any duplicates left by older writers, keeping order
    kept: list[str] = []
    for token in tokens or []:
        if normalize_token(token) == member or token in kept:
            continue
        kept.append(token)
    return kept


async def _load_for_edit(
    session: AsyncSession,
    project_id: UUID,
    actor: PrincipalLike,
) -> Project:
    project = await get_project(session, project_id, for_update=True)
    if project is None:
        raise NotFound("Project", project_id)
    if not can_edit_project(project, actor):
        logger.warning("membership_change_forbidden", project_id=str(project_id))
        raise Forbidden("Not allowed to manage members of this project")
    return project


async def set_role(
    session: AsyncSession,
    project_id: UUID,
    member: str | None,
    role: ProjectRole | str | None,
    actor: PrincipalLike,
) -> Project:
    """Give ``member`` exactly the ``role`` in the project.

    Args:
        session: Active async database session.
        project_id: Project to modify.
        member: Member token (user id or email).
        role: Target role, as ProjectRole or a spelling ProjectRole.parse accepts.
        actor: Principal performing the change; must be a project editor.

    Returns:
        The project as stored after the update.

    Raises:
        InvalidInput: Member token or role is invalid.
        NotFound: Project does not exist.
        Forbidden: Actor may not edit the project.
    """
    token = validate_member(member)
    target = role if isinstance(role, ProjectRole) else ProjectRole.parse(role)
    if target is None:
        raise InvalidInput(f"Unknown role: {role}", field="role")

    project = await _load_for_edit(session, project_id, actor)

    arrays = {column.value: _without(getattr(project, column.value), token) for column in ProjectRole}
    arrays[target.value].append(token)

    await replace_role_arrays(session, project_id, **arrays)
    logger.info(
        "member_role_set",
        project_id=str(project_id),
        member=token,
        role=target.name,
    )
    return await _reload(session, project_id)


async def remove_from_all_roles(
    session: AsyncSession,
    project_id: UUID,
    member: str | None,
    actor: PrincipalLike,
) -> Project:
    """Remove ``member`` from every role array of the project.

    Raises:
        InvalidInput: Member token is invalid.
        NotFound: Project does not exist.
        Forbidden: Actor may not edit the project.
    """
    token = validate_member(member)
    project = await _load_for_edit(session, project_id, actor)

    arrays = {column.value: _without(getattr(project, column.value), token) for column in ProjectRole}

    await replace_role_arrays(session, project_id, **arrays)
    logger.info("member_removed", project_id=str(project_id), member=token)
    return await _reload(session, project_id)


async def _reload(session: AsyncSession, project_id: UUID) -> Project:
    project = await get_project(session, project_id)
    if project is None:
        raise NotFound("Project", project_id)
    return project
