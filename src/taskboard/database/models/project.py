"""Project model for Taskboard.

A project owns tasks and carries three role arrays (admins, managers,
users). Any principal listed in one of them, or the creator, may view and
edit the project. Projects are archived (``active = False``) rather than
deleted.
"""

from __future__ import annotations

import enum

from sqlalchemy import Boolean, Text
from sqlalchemy.orm import Mapped, mapped_column

from taskboard.database.models.base import Base, JSONList, TimestampMixin


class ProjectRole(enum.Enum):
    """Membership role within a project, mapped to its role-array column."""

    admin = "admins"
    manager = "managers"
    user = "users"

    @classmethod
    def parse(cls, raw: str | None) -> ProjectRole | None:
        """Accept "admin", "ADMIN", "managers" and similar spellings."""
        key = (raw or "").strip().lower().rstrip("s")
        try:
            return cls[key]
        except KeyError:
            return None


ROLE_COLUMNS: tuple[str, ...] = tuple(role.value for role in ProjectRole)


class Project(TimestampMixin, Base):
    """A collaborative project.

    Attributes:
        id: UUID primary key (from TimestampMixin).
        creator: Principal token of the creating user.
        name: Creator's display name at creation time.
        title: Project title.
        description: Free-text description.
        active: False once the project is archived.
        selected_file: Cover image reference returned by the upload store.
        admins: Principal tokens holding the admin role.
        managers: Principal tokens holding the manager role.
        users: Principal tokens holding the user role.
        created_at: Row creation timestamp (from TimestampMixin).
        updated_at: Last modification timestamp (from TimestampMixin).
    """

    __tablename__ = "projects"

    creator: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    name: Mapped[str] = mapped_column(Text, nullable=False, default="")
    title: Mapped[str] = mapped_column(Text, nullable=False, default="")
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    selected_file: Mapped[str] = mapped_column(Text, nullable=False, default="")
    admins: Mapped[list[str]] = mapped_column(JSONList, nullable=False, default=list)
    managers: Mapped[list[str]] = mapped_column(JSONList, nullable=False, default=list)
    users: Mapped[list[str]] = mapped_column(JSONList, nullable=False, default=list)

    def role_of(self, token: str) -> ProjectRole | None:
        """Return the role array currently holding ``token``, if any."""
        for role in ProjectRole:
            if token in (getattr(self, role.value) or []):
                return role
        return None
