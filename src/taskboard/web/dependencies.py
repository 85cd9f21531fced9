"""FastAPI dependencies shared by the Taskboard routers.

The identity provider sits upstream; by the time a request reaches a route
the caller's id, email and name are in headers whose names come from
``config.auth``. :func:`get_principal` resolves them once per request.
"""

from __future__ import annotations

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from taskboard.config import TaskboardConfig
from taskboard.errors import Unauthorized
from taskboard.permissions import Principal, resolve_principal
from taskboard.uploads import UploadStore


def get_config(request: Request) -> TaskboardConfig:
    """Dependency returning the app configuration."""
    return request.app.state.config  # type: ignore[no-any-return]


def get_session_factory(request: Request) -> async_sessionmaker[AsyncSession]:
    """Dependency that retrieves session factory from app state.

    Args:
        request: FastAPI request object

    Returns:
        Session factory from app.state
    """
    return request.app.state.session_factory  # type: ignore[no-any-return]


def get_upload_store(request: Request) -> UploadStore:
    """Dependency returning the upload store built in the lifespan."""
    return request.app.state.upload_store  # type: ignore[no-any-return]


def principal_from_headers(request: Request) -> Principal | None:
    """Resolve the identity headers of ``request``, or None if absent."""
    auth = request.app.state.config.auth
    return resolve_principal(
        request.headers.get(auth.id_header),
        request.headers.get(auth.email_header),
        request.headers.get(auth.name_header),
    )


def get_principal(request: Request) -> Principal:
    """Dependency returning the calling principal.

    Raises:
        Unauthorized: Neither a user id nor an email header is present.
    """
    principal = principal_from_headers(request)
    if principal is None:
        raise Unauthorized()
    return principal
