"""SQLAlchemy ORM models for Taskboard.

Defines the schema for projects, tasks, subtasks and users. All models use
SQLAlchemy 2.0 declarative style with Mapped[] type annotations.
"""

from taskboard.database.models.base import Base, TimestampMixin
from taskboard.database.models.project import ROLE_COLUMNS, Project, ProjectRole
from taskboard.database.models.task import Subtask, Task
from taskboard.database.models.user import User, UserRole

__all__ = [
    "Base",
    "TimestampMixin",
    "Project",
    "ProjectRole",
    "ROLE_COLUMNS",
    "Task",
    "Subtask",
    "User",
    "UserRole",
]
