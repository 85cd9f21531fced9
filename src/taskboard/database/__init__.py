"""Database layer for Taskboard.

Public API:
    Database: Explicit engine + session factory handle.
    get_engine: Create an AsyncEngine from DatabaseConfig.
    get_session_factory: Create an async_sessionmaker from an engine.
    Base: SQLAlchemy declarative base for all models.
"""

from taskboard.database.connection import Database, get_engine, get_session_factory
from taskboard.database.models import (
    Base,
    Project,
    ProjectRole,
    Subtask,
    Task,
    TimestampMixin,
    User,
    UserRole,
)

__all__ = [
    "Database",
    "get_engine",
    "get_session_factory",
    "Base",
    "TimestampMixin",
    "Project",
    "ProjectRole",
    "Task",
    "Subtask",
    "User",
    "UserRole",
]
