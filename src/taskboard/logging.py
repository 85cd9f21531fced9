"""Structured logging configuration for Taskboard.

Configures structlog on top of stdlib logging handlers:
- JSON and console output formats
- File rotation based on size
- Correlation IDs carried per request
- Principal context binding, so every log line of a request names its caller

Example usage:
    >>> from taskboard.config import LoggingConfig
    >>> from taskboard.logging import setup_logging, get_logger
    >>>
    >>> setup_logging(LoggingConfig(level="INFO", format="console"))
    >>> logger = get_logger(__name__)
    >>> logger.info("task_created", task_id="...")
"""

from __future__ import annotations

import contextvars
import logging
import logging.handlers
import sys
from typing import Any

import structlog

from taskboard.config import LoggingConfig

_correlation_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "correlation_id", default=None
)


def add_correlation_id(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """structlog processor adding correlation_id when one is set."""
    correlation_id = _correlation_id.get()
    if correlation_id is not None:
        event_dict["correlation_id"] = correlation_id
    return event_dict


def set_correlation_id(correlation_id: str | None) -> None:
    """Set (or clear, with None) the correlation ID for the current context."""
    _correlation_id.set(correlation_id)


def get_correlation_id() -> str | None:
    """Return the correlation ID of the current context, if any."""
    return _correlation_id.get()


def bind_principal_context(principal_id: str | None, email: str | None) -> None:
    """Bind the calling principal to all subsequent logs in this context.

    Args:
        principal_id: Opaque user id, if known
        email: Lower-cased email, if known
    """
    structlog.contextvars.bind_contextvars(principal_id=principal_id, principal_email=email)


def clear_principal_context() -> None:
    """Drop principal fields bound by bind_principal_context."""
    structlog.contextvars.unbind_contextvars("principal_id", "principal_email")


def setup_logging(config: LoggingConfig) -> None:
    """Configure structlog and the stdlib root logger.

    Args:
        config: Logging configuration from TaskboardConfig
    """
    log_level = getattr(logging, config.level)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    handler: logging.Handler
    if config.file is not None:
        config.file.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.handlers.RotatingFileHandler(
            filename=config.file,
            maxBytes=config.rotation_size_mb * 1024 * 1024,
            backupCount=config.retention_count,
            encoding="utf-8",
        )
    else:
        handler = logging.StreamHandler(sys.stdout)

    handler.setLevel(log_level)
    root_logger.addHandler(handler)

    if config.format == "json":
        renderer: Any = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.contextvars.merge_contextvars,
            add_correlation_id,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        context_class=dict,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance.

    Args:
        name: Logger name (typically __name__ of the calling module)
    """
    return structlog.get_logger(name)
