"""Domain operations for Taskboard.

Each operation takes an AsyncSession and the calling Principal, enforces
permissions, and raises :class:`taskboard.errors.TaskboardError` subclasses
on failure.
"""

from taskboard.services.lifecycle import (
    SubtaskDraft,
    SubtaskPatch,
    TaskDraft,
    TaskPatch,
    parse_due_date,
)
from taskboard.services.membership import remove_from_all_roles, set_role
from taskboard.services.projects import ProjectDraft, ProjectPatch, ProjectSummary

__all__ = [
    "ProjectDraft",
    "ProjectPatch",
    "ProjectSummary",
    "SubtaskDraft",
    "SubtaskPatch",
    "TaskDraft",
    "TaskPatch",
    "parse_due_date",
    "remove_from_all_roles",
    "set_role",
]
