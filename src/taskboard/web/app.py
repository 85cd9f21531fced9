"""FastAPI application factory for Taskboard.

This module provides the main application factory function that creates
and configures a FastAPI application with:
- CORS middleware for cross-origin requests
- Request logging middleware with correlation IDs
- Database and upload store lifecycle management
- A single handler rendering domain errors as JSON

Example usage:
    >>> from taskboard.config import TaskboardConfig
    >>> from taskboard.web.app import create_app
    >>>
    >>> app = create_app(TaskboardConfig())
    >>>
    >>> import uvicorn
    >>> uvicorn.run(app, host="0.0.0.0", port=8000)
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from taskboard import __version__
from taskboard.config import TaskboardConfig
from taskboard.database.connection import Database
from taskboard.errors import (
    Forbidden,
    InvalidInput,
    NotFound,
    PreconditionFailed,
    TaskboardError,
    Unauthorized,
)
from taskboard.logging import get_logger
from taskboard.uploads import LocalUploadStore
from taskboard.web.middleware import RequestLoggingMiddleware
from taskboard.web.routes.health import create_health_router
from taskboard.web.routes.projects import create_projects_router
from taskboard.web.routes.subtasks import create_subtasks_router
from taskboard.web.routes.tasks import create_tasks_router
from taskboard.web.routes.users import create_users_router

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

logger = get_logger(__name__)

ERROR_STATUS: dict[type[TaskboardError], int] = {
    Unauthorized: status.HTTP_401_UNAUTHORIZED,
    Forbidden: status.HTTP_403_FORBIDDEN,
    NotFound: status.HTTP_404_NOT_FOUND,
    InvalidInput: 422,
    PreconditionFailed: status.HTTP_409_CONFLICT,
}


def status_for(exc: TaskboardError) -> int:
    """HTTP status code for a domain error (500 for unmapped subclasses)."""
    for error_type in type(exc).__mro__:
        if error_type in ERROR_STATUS:
            return ERROR_STATUS[error_type]
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def handle_taskboard_error(request: Request, exc: TaskboardError) -> JSONResponse:
    """Render a TaskboardError as ``{"error": kind, "detail": message}``."""
    code = status_for(exc)
    logger.info(
        "request_rejected",
        path=request.url.path,
        error=exc.kind,
        status_code=code,
        detail=exc.message,
    )
    return JSONResponse(status_code=code, content={"error": exc.kind, "detail": exc.message})


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Create the database handle and upload store, dispose on shutdown."""
    config: TaskboardConfig = app.state.config

    logger.info("app_startup_begin", host=config.web.host, port=config.web.port)

    database = Database(config.database)
    app.state.database = database
    app.state.session_factory = database.session_factory
    app.state.upload_store = LocalUploadStore(config.uploads)

    yield

    logger.info("app_shutdown_begin")
    await database.dispose()


def create_app(config: TaskboardConfig | None = None) -> FastAPI:
    """Create and configure a FastAPI application.

    Args:
        config: Optional TaskboardConfig. If None, creates default config.

    Returns:
        Configured FastAPI application instance.
    """
    if config is None:
        config = TaskboardConfig()

    app = FastAPI(
        title="Taskboard",
        version=__version__,
        description="Collaborative project and task tracking",
        lifespan=lifespan,
    )

    app.state.config = config

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.web.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestLoggingMiddleware)

    app.add_exception_handler(TaskboardError, handle_taskboard_error)  # type: ignore[arg-type]

    app.include_router(create_health_router())
    app.include_router(create_projects_router())
    app.include_router(create_tasks_router())
    app.include_router(create_subtasks_router())
    app.include_router(create_users_router())

    logger.info(
        "app_created",
        cors_origins=config.web.cors_origins,
        version=__version__,
    )

    return app
