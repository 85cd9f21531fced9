"""Permission evaluation over project and task snapshots.

A principal may be recorded in role arrays either by opaque user id or by
lower-cased email. :func:`resolve_principal` folds a request's identity into a
token set once; every predicate then accepts if any token matches.

View and edit are the same capability at every level. This is the observed
behaviour of the product and is kept as is.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any, Union

from taskboard.errors import Unauthorized


def normalize_token(token: str | None) -> str:
    """Trim a principal token, lower-casing it when it looks like an email."""
    if not token:
        return ""
    token = token.strip()
    return token.lower() if "@" in token else token


@dataclass(frozen=True)
class Principal:
    """An authenticated caller.

    Attributes:
        id: Opaque user id from the identity provider
        email: Lower-cased email address
        name: Display name, only used by the "me" assignee filter
        tokens: Every token this caller may appear under in role arrays
    """

    id: str | None = None
    email: str | None = None
    name: str | None = None
    tokens: frozenset[str] = field(default_factory=frozenset)

    @property
    def primary_token(self) -> str:
        """Token recorded as creator of new entities (id, else email)."""
        return self.id or self.email or ""

    def matches(self, token: str | None) -> bool:
        return bool(token) and normalize_token(token) in self.tokens

    def matches_any(self, tokens: Iterable[str] | None) -> bool:
        return any(self.matches(t) for t in _as_list(tokens))

    def is_assignee(self, assigned: str | None) -> bool:
        """Case-insensitive match of an assignee value against id or email.

        Shared by task edit rights and the "me" assignee filter.
        """
        if not isinstance(assigned, str) or not assigned.strip():
            return False
        folded = assigned.strip().lower()
        return any(folded == token.lower() for token in self.tokens)


PrincipalLike = Union[Principal, str, None]


def resolve_principal(
    user_id: str | None,
    email: str | None = None,
    name: str | None = None,
) -> Principal | None:
    """Build a Principal from raw identity values.

    Returns:
        Principal, or None when neither an id nor an email is present.
    """
    uid = (user_id or "").strip() or None
    mail = normalize_token(email) or None
    if uid is None and mail is None:
        return None
    display = (name or "").strip() or None
    return Principal(
        id=uid,
        email=mail,
        name=display,
        tokens=frozenset(t for t in (uid, mail) if t),
    )


def authenticated(principal: Principal | None) -> Principal:
    """Return ``principal`` or raise Unauthorized when there is no identity."""
    if principal is None or not principal.tokens:
        raise Unauthorized()
    return principal


def _coerce(principal: PrincipalLike) -> Principal | None:
    if isinstance(principal, Principal):
        return principal if principal.tokens else None
    if isinstance(principal, str):
        if "@" in principal:
            return resolve_principal(None, principal)
        return resolve_principal(principal)
    return None


def _as_list(value: Any) -> list[str]:
    if isinstance(value, (list, tuple, set, frozenset)):
        return [v for v in value if isinstance(v, str)]
    return []


def can_edit_project(project: Any, principal: PrincipalLike) -> bool:
    """True iff the principal created the project or holds any role in it."""
    who = _coerce(principal)
    if who is None or project is None:
        return False
    if who.matches(getattr(project, "creator", None)):
        return True
    return (
        who.matches_any(getattr(project, "admins", None))
        or who.matches_any(getattr(project, "managers", None))
        or who.matches_any(getattr(project, "users", None))
    )


def can_view_project(project: Any, principal: PrincipalLike) -> bool:
    """Same predicate as can_edit_project."""
    return can_edit_project(project, principal)


def can_edit_task(task: Any, principal: PrincipalLike) -> bool:
    """True iff the principal created, is assigned to, or is allowed on the task.

    Subtasks carry the same fields and are evaluated the same way.
    """
    who = _coerce(principal)
    if who is None or task is None:
        return False
    return (
        who.matches(getattr(task, "creator", None))
        or who.is_assignee(getattr(task, "assigned", None))
        or who.matches_any(getattr(task, "allowed_users", None))
    )


def can_view_task(task: Any, principal: PrincipalLike) -> bool:
    """Same predicate as can_edit_task."""
    return can_edit_task(task, principal)
