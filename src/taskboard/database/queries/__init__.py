"""Database query functions for Taskboard.

This package provides async query functions per entity:
- Project CRUD and single-statement role-array replacement
- Task CRUD and filtered listing
- Subtask CRUD
- User profile upsert
"""

from taskboard.database.queries.project import (
    create_project,
    get_project,
    list_projects,
    replace_role_arrays,
    update_project,
)
from taskboard.database.queries.subtask import (
    create_subtask,
    delete_subtask,
    get_subtask,
    list_subtasks,
    update_subtask,
)
from taskboard.database.queries.task import (
    create_task,
    delete_task,
    get_task,
    list_task_statuses,
    list_tasks,
    update_task,
)
from taskboard.database.queries.user import get_user_by_email, upsert_user

__all__ = [
    # Project queries
    "create_project",
    "get_project",
    "list_projects",
    "update_project",
    "replace_role_arrays",
    # Task queries
    "create_task",
    "get_task",
    "list_tasks",
    "list_task_statuses",
    "update_task",
    "delete_task",
    # Subtask queries
    "create_subtask",
    "get_subtask",
    "list_subtasks",
    "update_subtask",
    "delete_subtask",
    # User queries
    "get_user_by_email",
    "upsert_user",
]
