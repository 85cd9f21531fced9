"""Domain errors raised by Taskboard operations.

All errors derive from :class:`TaskboardError` so a boundary layer (HTTP,
CLI) can catch the family with one clause and pick its own status code from
``kind``.

Hierarchy::

    TaskboardError
    ├── Unauthorized        no identity present
    ├── Forbidden           identity present, lacks the role/relationship
    ├── NotFound            referenced project/task/subtask id does not resolve
    ├── InvalidInput        required field missing or fails validation
    └── PreconditionFailed  deletion attempted while status is not done
"""

from __future__ import annotations

from typing import Any

DELETE_REQUIRES_DONE = "cannot delete unless status is Done"


class TaskboardError(Exception):
    """Base exception for all Taskboard domain errors."""

    kind = "error"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details: dict[str, Any] = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return f"{type(self).__name__}(message={self.message!r})"


class Unauthorized(TaskboardError):
    """Raised when a request carries no user id and no email."""

    kind = "unauthorized"

    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(message)


class Forbidden(TaskboardError):
    """Raised when the principal may not act on the resource."""

    kind = "forbidden"

    def __init__(self, message: str = "Forbidden") -> None:
        super().__init__(message)


class NotFound(TaskboardError):
    """Raised when a referenced entity does not exist."""

    kind = "not_found"

    def __init__(self, entity: str, identifier: Any = None) -> None:
        message = f"{entity} not found"
        if identifier is not None:
            message = f"{entity} {identifier} not found"
        super().__init__(message, {"entity": entity})
        self.entity = entity
        self.identifier = identifier


class InvalidInput(TaskboardError):
    """Raised when input fails validation as a whole."""

    kind = "invalid_input"

    def __init__(self, message: str = "Invalid input", field: str | None = None) -> None:
        super().__init__(message, {"field": field} if field else None)
        self.field = field


class PreconditionFailed(TaskboardError):
    """Raised when an operation's state precondition does not hold."""

    kind = "precondition_failed"

    def __init__(self, message: str = DELETE_REQUIRES_DONE) -> None:
        super().__init__(message)
