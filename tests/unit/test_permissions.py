"""Unit tests for principal resolution and permission predicates."""

from __future__ import annotations

from types import SimpleNamespace

import pytest

from taskboard.errors import Unauthorized
from taskboard.permissions import (
    Principal,
    authenticated,
    can_edit_project,
    can_edit_task,
    can_view_project,
    can_view_task,
    normalize_token,
    resolve_principal,
)


def make_project(**overrides: object) -> SimpleNamespace:
    fields: dict[str, object] = {
        "creator": "u1",
        "admins": [],
        "managers": [],
        "users": [],
    }
    fields.update(overrides)
    return SimpleNamespace(**fields)


def make_task(**overrides: object) -> SimpleNamespace:
    fields: dict[str, object] = {
        "creator": "u1",
        "assigned": "",
        "allowed_users": [],
    }
    fields.update(overrides)
    return SimpleNamespace(**fields)


class TestResolvePrincipal:
    """Test building principals from identity values."""

    def test_id_and_email(self) -> None:
        principal = resolve_principal("u1", "Ana@Example.COM", "Ana")
        assert principal is not None
        assert principal.id == "u1"
        assert principal.email == "ana@example.com"
        assert principal.name == "Ana"
        assert principal.tokens == frozenset({"u1", "ana@example.com"})

    def test_email_only(self) -> None:
        principal = resolve_principal(None, "ana@example.com")
        assert principal is not None
        assert principal.primary_token == "ana@example.com"

    def test_id_preferred_as_primary_token(self) -> None:
        principal = resolve_principal("u1", "ana@example.com")
        assert principal is not None
        assert principal.primary_token == "u1"

    @pytest.mark.parametrize(("user_id", "email"), [(None, None), ("", ""), ("  ", None)])
    def test_no_identity(self, user_id: str | None, email: str | None) -> None:
        assert resolve_principal(user_id, email) is None

    def test_authenticated(self) -> None:
        who = resolve_principal("u1")
        assert who is not None
        assert authenticated(who) is who
        with pytest.raises(Unauthorized):
            authenticated(None)
        with pytest.raises(Unauthorized):
            authenticated(Principal())

    def test_normalize_token(self) -> None:
        assert normalize_token(" Bob@Example.com ") == "bob@example.com"
        assert normalize_token(" UserId42 ") == "UserId42"
        assert normalize_token(None) == ""


class TestProjectPermissions:
    """Test project edit/view predicates."""

    def test_creator_can_edit(self) -> None:
        assert can_edit_project(make_project(creator="u1"), "u1") is True

    @pytest.mark.parametrize("role", ["admins", "managers", "users"])
    def test_any_role_can_edit(self, role: str) -> None:
        project = make_project(**{role: ["u2"]})
        assert can_edit_project(project, "u2") is True

    def test_stranger_cannot_edit(self) -> None:
        project = make_project(admins=["u2"], managers=["u3"], users=["u4"])
        assert can_edit_project(project, "u5") is False

    @pytest.mark.parametrize("principal", [None, "", Principal()])
    def test_missing_principal_is_false(self, principal: object) -> None:
        assert can_edit_project(make_project(creator=""), principal) is False  # type: ignore[arg-type]

    def test_missing_project_is_false(self) -> None:
        assert can_edit_project(None, "u1") is False

    def test_email_token_matches_case_insensitively(self) -> None:
        project = make_project(creator="someone", users=["ana@example.com"])
        principal = resolve_principal("u9", "ANA@example.com")
        assert can_edit_project(project, principal) is True

    def test_any_token_matches(self) -> None:
        """A principal recorded by email is recognised when it also has an id."""
        project = make_project(creator="other", admins=["bob@example.com"])
        assert can_edit_project(project, resolve_principal("u2", "bob@example.com")) is True
        assert can_edit_project(project, resolve_principal("u2")) is False

    def test_malformed_role_arrays_do_not_raise(self) -> None:
        project = make_project(creator="x", admins=None, managers="u2", users=[None, 3, "u2"])
        assert can_edit_project(project, "u2") is True
        assert can_edit_project(project, "u3") is False

    def test_view_equals_edit(self) -> None:
        project = make_project(users=["u2"])
        for who in ["u1", "u2", "u3", None]:
            assert can_view_project(project, who) == can_edit_project(project, who)


class TestTaskPermissions:
    """Test task edit/view predicates."""

    def test_creator_assignee_and_allowed_users(self) -> None:
        task = make_task(creator="u1", assigned="u2", allowed_users=["u3"])
        assert can_edit_task(task, "u1") is True
        assert can_edit_task(task, "u2") is True
        assert can_edit_task(task, "u3") is True
        assert can_edit_task(task, "u4") is False

    def test_assigned_email_matches(self) -> None:
        task = make_task(creator="x", assigned="Ana@Example.com")
        assert can_edit_task(task, resolve_principal(None, "ana@example.com")) is True

    def test_assigned_id_matches_case_insensitively(self) -> None:
        task = make_task(creator="x", assigned=" U2 ")
        assert can_edit_task(task, "u2") is True
        assert can_edit_task(task, resolve_principal("U2")) is True

    def test_display_name_does_not_grant_edit(self) -> None:
        task = make_task(creator="x", assigned="Bea")
        assert can_edit_task(task, resolve_principal("u2", None, "Bea")) is False

    def test_missing_task_or_principal(self) -> None:
        assert can_edit_task(None, "u1") is False
        assert can_edit_task(make_task(), None) is False

    def test_view_equals_edit(self) -> None:
        task = make_task(assigned="u2")
        for who in ["u1", "u2", "u3", None]:
            assert can_view_task(task, who) == can_edit_task(task, who)
