"""Taskboard - collaborative project and task tracking service.

This package provides the permission model, status normalization, task
filtering, membership management and task/subtask lifecycle behind a FastAPI
REST API and a Typer CLI, persisted through async SQLAlchemy.
"""

__version__ = "0.1.0"
