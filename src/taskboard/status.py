"""Status and priority vocabularies.

Stored status values have accumulated several historical spellings ("Open",
"To Assign", "Stuck", "in-progress", ...). Everything that compares or
persists a status goes through :func:`normalize_status`, which folds any input
into one of four canonical values and never fails.
"""

from __future__ import annotations

import enum
import re

_SEPARATORS = re.compile(r"[\s_-]+")


class CanonicalStatus(str, enum.Enum):
    """Canonical task/subtask status."""

    todo = "todo"
    in_progress = "in_progress"
    blocked = "blocked"
    done = "done"


class Priority(str, enum.Enum):
    """Task/subtask priority."""

    low = "Low"
    medium = "Medium"
    high = "High"


# Compacted spellings (lower-case, separators removed) per canonical status.
# ``todo`` also absorbs anything unrecognised, see normalize_status.
STATUS_ALIASES: dict[CanonicalStatus, frozenset[str]] = {
    CanonicalStatus.todo: frozenset({"todo", "open", "toassign", "backlog"}),
    CanonicalStatus.in_progress: frozenset({"inprogress", "progress", "doing", "wip"}),
    CanonicalStatus.blocked: frozenset({"blocked", "block", "stuck"}),
    CanonicalStatus.done: frozenset({"done", "closed"}),
}

OPEN_STATUSES: tuple[CanonicalStatus, ...] = (
    CanonicalStatus.todo,
    CanonicalStatus.in_progress,
    CanonicalStatus.blocked,
)

STATUS_LABELS: dict[CanonicalStatus, str] = {
    CanonicalStatus.todo: "To do",
    CanonicalStatus.in_progress: "In Progress",
    CanonicalStatus.blocked: "Blocked",
    CanonicalStatus.done: "Done",
}

_PRIORITY_ALIASES: dict[str, Priority] = {
    "low": Priority.low,
    "medium": Priority.medium,
    "normal": Priority.medium,
    "default": Priority.medium,
    "high": Priority.high,
}


def compact(raw: object) -> str:
    """Lower-case ``raw`` and drop whitespace, hyphens and underscores."""
    if raw is None:
        return ""
    return _SEPARATORS.sub("", str(raw).strip().lower())


def normalize_status(raw: object) -> CanonicalStatus:
    """Map free-text status input to a canonical status.

    Unknown, empty and None inputs land in ``todo``. Canonical values map to
    themselves, so the function is idempotent.

    Examples:
        >>> normalize_status("In-Progress")
        <CanonicalStatus.in_progress: 'in_progress'>
        >>> normalize_status("Stuck")
        <CanonicalStatus.blocked: 'blocked'>
        >>> normalize_status(None)
        <CanonicalStatus.todo: 'todo'>
    """
    if isinstance(raw, CanonicalStatus):
        return raw
    key = compact(raw)
    for status in (CanonicalStatus.done, CanonicalStatus.blocked, CanonicalStatus.in_progress):
        if key in STATUS_ALIASES[status]:
            return status
    return CanonicalStatus.todo


def is_open_status(raw: object) -> bool:
    """True when ``raw`` normalizes to anything but done."""
    return normalize_status(raw) in OPEN_STATUSES


def parse_priority(raw: object) -> Priority | None:
    """Strictly parse a priority, returning None for unrecognised input."""
    if isinstance(raw, Priority):
        return raw
    if not isinstance(raw, str):
        return None
    return _PRIORITY_ALIASES.get(raw.strip().lower())


def normalize_priority(raw: object) -> Priority:
    """Map free-text priority input to a priority, defaulting to Medium."""
    return parse_priority(raw) or Priority.medium
