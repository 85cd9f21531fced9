"""FastAPI route definitions for Taskboard.

Each module exposes a ``create_*_router()`` factory plus the request and
response schemas of its endpoints.
"""

from __future__ import annotations

from taskboard.web.routes.health import (
    HealthResponse,
    ReadinessResponse,
    create_health_router,
)
from taskboard.web.routes.projects import (
    MemberChange,
    ProjectCreate,
    ProjectResponse,
    ProjectSummaryResponse,
    create_projects_router,
)
from taskboard.web.routes.subtasks import SubtaskCreate, create_subtasks_router
from taskboard.web.routes.tasks import (
    SubtaskResponse,
    TaskCreate,
    TaskResponse,
    create_tasks_router,
)
from taskboard.web.routes.users import UserResponse, create_users_router

__all__ = [
    # Health
    "HealthResponse",
    "ReadinessResponse",
    "create_health_router",
    # Projects
    "MemberChange",
    "ProjectCreate",
    "ProjectResponse",
    "ProjectSummaryResponse",
    "create_projects_router",
    # Tasks
    "TaskCreate",
    "TaskResponse",
    "create_tasks_router",
    # Subtasks
    "SubtaskCreate",
    "SubtaskResponse",
    "create_subtasks_router",
    # Users
    "UserResponse",
    "create_users_router",
]
