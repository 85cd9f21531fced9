"""Unit tests for status and priority normalization."""

from __future__ import annotations

import pytest

from taskboard.status import (
    OPEN_STATUSES,
    STATUS_LABELS,
    CanonicalStatus,
    Priority,
    compact,
    is_open_status,
    normalize_priority,
    normalize_status,
    parse_priority,
)


class TestNormalizeStatus:
    """Test folding of free-text statuses into canonical values."""

    @pytest.mark.parametrize(
        "raw",
        ["done", "Done", "DONE", " done ", "closed", "Closed"],
    )
    def test_done_spellings(self, raw: str) -> None:
        assert normalize_status(raw) is CanonicalStatus.done

    @pytest.mark.parametrize("raw", ["blocked", "Block", "stuck", "STUCK"])
    def test_blocked_spellings(self, raw: str) -> None:
        assert normalize_status(raw) is CanonicalStatus.blocked

    @pytest.mark.parametrize(
        "raw",
        ["in_progress", "In Progress", "in-progress", "inprogress", "progress", "doing", "WIP"],
    )
    def test_in_progress_spellings(self, raw: str) -> None:
        assert normalize_status(raw) is CanonicalStatus.in_progress

    @pytest.mark.parametrize(
        "raw",
        ["todo", "To do", "to-do", "TODO", "open", "Open", "to_assign", "To Assign", "backlog"],
    )
    def test_todo_spellings(self, raw: str) -> None:
        assert normalize_status(raw) is CanonicalStatus.todo

    @pytest.mark.parametrize("raw", [None, "", "   ", "whatever", "archived", 42])
    def test_unknown_input_is_todo(self, raw: object) -> None:
        assert normalize_status(raw) is CanonicalStatus.todo

    def test_idempotent(self) -> None:
        """Normalizing a normalized value gives the same value back."""
        for raw in ["Stuck", "In-Progress", "Closed", "To Assign", None, "???"]:
            once = normalize_status(raw)
            assert normalize_status(once) is once
            assert normalize_status(once.value) is once

    def test_canonical_values_map_to_themselves(self) -> None:
        for status in CanonicalStatus:
            assert normalize_status(status.value) is status


class TestStatusHelpers:
    """Test the helpers built on normalize_status."""

    def test_compact_strips_separators(self) -> None:
        assert compact(" In - Progress_ ") == "inprogress"
        assert compact(None) == ""

    def test_open_statuses_exclude_done(self) -> None:
        assert CanonicalStatus.done not in OPEN_STATUSES
        assert set(OPEN_STATUSES) == set(CanonicalStatus) - {CanonicalStatus.done}

    def test_is_open_status(self) -> None:
        assert is_open_status("Stuck") is True
        assert is_open_status(None) is True
        assert is_open_status("Closed") is False

    def test_every_status_has_a_label(self) -> None:
        assert set(STATUS_LABELS) == set(CanonicalStatus)
        assert STATUS_LABELS[CanonicalStatus.todo] == "To do"


class TestPriority:
    """Test priority parsing."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("low", Priority.low),
            ("LOW", Priority.low),
            ("high", Priority.high),
            (" High ", Priority.high),
            ("medium", Priority.medium),
            ("Normal", Priority.medium),
            ("default", Priority.medium),
        ],
    )
    def test_parse_known_values(self, raw: str, expected: Priority) -> None:
        assert parse_priority(raw) is expected

    @pytest.mark.parametrize("raw", ["urgent", "", None, 3])
    def test_parse_rejects_unknown(self, raw: object) -> None:
        assert parse_priority(raw) is None

    @pytest.mark.parametrize("raw", ["urgent", "", None])
    def test_normalize_defaults_to_medium(self, raw: object) -> None:
        assert normalize_priority(raw) is Priority.medium

    def test_normalize_keeps_known_values(self) -> None:
        assert normalize_priority("low") is Priority.low
        assert normalize_priority("HIGH") is Priority.high
