"""Web interface for Taskboard.

FastAPI application factory, request logging middleware and the REST
routers for projects, tasks, subtasks, users and health checks.
"""

from __future__ import annotations

from taskboard.web.app import create_app
from taskboard.web.middleware import RequestLoggingMiddleware

__all__ = [
    "create_app",
    "RequestLoggingMiddleware",
]
