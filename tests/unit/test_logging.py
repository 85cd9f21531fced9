"""Unit tests for logging configuration."""

from __future__ import annotations

import json
import logging
import logging.handlers
from io import StringIO
from pathlib import Path
from typing import Any

import pytest
import structlog

from taskboard.config import LoggingConfig
from taskboard.logging import (
    add_correlation_id,
    bind_principal_context,
    clear_principal_context,
    get_correlation_id,
    get_logger,
    set_correlation_id,
    setup_logging,
)


@pytest.fixture(autouse=True)
def reset_logging() -> None:
    """Reset logging configuration before each test."""
    root = logging.getLogger()
    root.handlers.clear()

    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()
    set_correlation_id(None)


@pytest.fixture
def capture_stream() -> StringIO:
    """Create a StringIO stream for capturing log output."""
    return StringIO()


@pytest.fixture
def json_config() -> LoggingConfig:
    return LoggingConfig(level="INFO", format="json", file=None)


@pytest.fixture
def console_config() -> LoggingConfig:
    return LoggingConfig(level="DEBUG", format="console", file=None)


def _capture(stream: StringIO) -> None:
    root = logging.getLogger()
    root.handlers[0].stream = stream  # type: ignore[attr-defined]


def _last_entry(stream: StringIO) -> dict[str, Any]:
    lines = [line for line in stream.getvalue().splitlines() if line.strip()]
    return json.loads(lines[-1])


def test_json_output_format(json_config: LoggingConfig, capture_stream: StringIO) -> None:
    """Test that JSON format produces valid JSON output."""
    setup_logging(json_config)
    _capture(capture_stream)

    logger = get_logger("taskboard.services.lifecycle")
    logger.info("task_created", task_id="t-1", project_id="p-1")

    log_entry = _last_entry(capture_stream)
    assert log_entry["event"] == "task_created"
    assert log_entry["task_id"] == "t-1"
    assert log_entry["project_id"] == "p-1"
    assert log_entry["level"] == "info"
    assert log_entry["logger"] == "taskboard.services.lifecycle"
    assert "timestamp" in log_entry


def test_console_output_format(console_config: LoggingConfig, capture_stream: StringIO) -> None:
    """Test that console format produces human-readable output."""
    setup_logging(console_config)
    _capture(capture_stream)

    logger = get_logger("test.module")
    logger.debug("member_role_set", role="managers")

    output = capture_stream.getvalue()
    assert "member_role_set" in output
    assert "managers" in output
    with pytest.raises(json.JSONDecodeError):
        json.loads(output.strip())


def test_log_level_filtering(json_config: LoggingConfig, capture_stream: StringIO) -> None:
    """INFO level filters out DEBUG."""
    setup_logging(json_config)
    _capture(capture_stream)

    logger = get_logger("test.module")
    logger.debug("debug_message")
    assert capture_stream.getvalue() == ""

    logger.warning("warning_message")
    assert "warning_message" in capture_stream.getvalue()


def test_correlation_id_binding(json_config: LoggingConfig, capture_stream: StringIO) -> None:
    """Test that correlation ID is added to log entries while set."""
    setup_logging(json_config)
    _capture(capture_stream)
    logger = get_logger("test.module")

    set_correlation_id("corr-12345")
    assert get_correlation_id() == "corr-12345"
    logger.info("with_correlation")
    assert _last_entry(capture_stream)["correlation_id"] == "corr-12345"

    set_correlation_id(None)
    assert get_correlation_id() is None
    logger.info("without_correlation")
    assert "correlation_id" not in _last_entry(capture_stream)


def test_correlation_id_processor() -> None:
    event_dict: dict[str, Any] = {"event": "test"}

    result = add_correlation_id(None, "", event_dict.copy())
    assert "correlation_id" not in result

    set_correlation_id("test-id")
    result = add_correlation_id(None, "", event_dict.copy())
    assert result["correlation_id"] == "test-id"


def test_principal_context_binding(json_config: LoggingConfig, capture_stream: StringIO) -> None:
    """Bound principal fields appear on every logger until cleared."""
    setup_logging(json_config)
    _capture(capture_stream)

    bind_principal_context("u1", "ana@example.com")

    get_logger("module1").info("event1")
    first = _last_entry(capture_stream)
    get_logger("module2").info("event2")
    second = _last_entry(capture_stream)

    for entry in (first, second):
        assert entry["principal_id"] == "u1"
        assert entry["principal_email"] == "ana@example.com"

    clear_principal_context()
    get_logger("module1").info("event3")
    third = _last_entry(capture_stream)
    assert "principal_id" not in third
    assert "principal_email" not in third


def test_file_rotation_handler_configuration(tmp_path: Path) -> None:
    """Test that the rotating file handler is configured from LoggingConfig."""
    log_file = tmp_path / "logs" / "taskboard.log"
    config = LoggingConfig(
        level="INFO",
        format="json",
        file=log_file,
        rotation_size_mb=10,
        retention_count=3,
    )

    setup_logging(config)

    assert log_file.parent.exists()
    root = logging.getLogger()
    assert len(root.handlers) == 1

    handler = root.handlers[0]
    assert isinstance(handler, logging.handlers.RotatingFileHandler)
    assert handler.maxBytes == 10 * 1024 * 1024
    assert handler.backupCount == 3

    get_logger("test.module").info("upload_saved", reference="/uploads/covers/x.png")
    handler.flush()

    log_entry = json.loads(log_file.read_text().strip())
    assert log_entry["event"] == "upload_saved"
    assert log_entry["reference"] == "/uploads/covers/x.png"


def test_setup_replaces_existing_handlers(json_config: LoggingConfig) -> None:
    setup_logging(json_config)
    setup_logging(json_config)
    assert len(logging.getLogger().handlers) == 1
