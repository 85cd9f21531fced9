"""User profile model for Taskboard.

Profiles are recorded from the identity headers the first time a principal
calls ``GET /users/me``. Permissions never consult this table; role arrays
hold principal tokens directly.
"""

from __future__ import annotations

import enum

from sqlalchemy import Text
from sqlalchemy.orm import Mapped, mapped_column

from taskboard.database.models.base import Base, TimestampMixin


class UserRole(enum.Enum):
    """Site-wide role."""

    ADMIN = "ADMIN"
    MEMBER = "MEMBER"


class User(TimestampMixin, Base):
    """A known user.

    Attributes:
        external_id: Opaque id issued by the identity provider.
        email: Lower-cased, unique email address.
        name: Display name.
        image: Avatar URL.
        role: Site-wide role.
        provider: Identity provider name ("credentials" or "google").
    """

    __tablename__ = "users"

    external_id: Mapped[str | None] = mapped_column(Text, nullable=True, index=True)
    email: Mapped[str] = mapped_column(Text, nullable=False, unique=True, index=True)
    name: Mapped[str] = mapped_column(Text, nullable=False, default="")
    image: Mapped[str | None] = mapped_column(Text, nullable=True)
    role: Mapped[UserRole] = mapped_column(default=UserRole.MEMBER, nullable=False)
    provider: Mapped[str] = mapped_column(Text, nullable=False, default="credentials")
