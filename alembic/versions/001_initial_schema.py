"""Initial schema for Taskboard.

Creates the projects, tasks, subtasks and users tables. Ids and timestamps
are assigned by the application, so the schema carries no server defaults
for them and runs unchanged on PostgreSQL and SQLite.

Revision ID: 001
Revises: None
Create Date: 2026-10-19
"""

from __future__ import annotations

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects.postgresql import JSONB

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

JSONList = sa.JSON().with_variant(JSONB(), "postgresql")


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def _work_item_columns() -> list[sa.Column]:
    return [
        sa.Column("creator", sa.Text(), nullable=False, server_default=""),
        sa.Column("name", sa.Text(), nullable=False, server_default=""),
        sa.Column("title", sa.Text(), nullable=False, server_default=""),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("status", sa.Text(), nullable=True, server_default="todo"),
        sa.Column("assigned", sa.Text(), nullable=True, server_default=""),
        sa.Column("due_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("attached_files", JSONList, nullable=False),
        sa.Column("allowed_users", JSONList, nullable=False),
        sa.Column("priority", sa.Text(), nullable=True, server_default="Medium"),
    ]


def upgrade() -> None:
    # Projects table
    op.create_table(
        "projects",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("creator", sa.Text(), nullable=False),
        sa.Column("name", sa.Text(), nullable=False, server_default=""),
        sa.Column("title", sa.Text(), nullable=False, server_default=""),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("selected_file", sa.Text(), nullable=False, server_default=""),
        sa.Column("admins", JSONList, nullable=False),
        sa.Column("managers", JSONList, nullable=False),
        sa.Column("users", JSONList, nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_projects_creator", "projects", ["creator"])

    # Tasks table
    op.create_table(
        "tasks",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("project_id", sa.Uuid(), sa.ForeignKey("projects.id"), nullable=False),
        *_work_item_columns(),
        *_timestamps(),
    )
    op.create_index("ix_tasks_project_id", "tasks", ["project_id"])
    op.create_index("ix_tasks_project_due", "tasks", ["project_id", "due_date", "updated_at"])

    # Subtasks table; task_id has no foreign key so subtasks outlive their task
    op.create_table(
        "subtasks",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("task_id", sa.Uuid(), nullable=False),
        *_work_item_columns(),
        *_timestamps(),
    )
    op.create_index("ix_subtasks_task_id", "subtasks", ["task_id"])

    # Users table
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("external_id", sa.Text(), nullable=True),
        sa.Column("email", sa.Text(), nullable=False),
        sa.Column("name", sa.Text(), nullable=False, server_default=""),
        sa.Column("image", sa.Text(), nullable=True),
        sa.Column(
            "role",
            sa.Enum("ADMIN", "MEMBER", name="userrole"),
            nullable=False,
            server_default="MEMBER",
        ),
        sa.Column("provider", sa.Text(), nullable=False, server_default="credentials"),
        *_timestamps(),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_external_id", "users", ["external_id"])


def downgrade() -> None:
    op.drop_index("ix_users_external_id", table_name="users")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
    sa.Enum(name="userrole").drop(op.get_bind(), checkfirst=True)

    op.drop_index("ix_subtasks_task_id", table_name="subtasks")
    op.drop_table("subtasks")

    op.drop_index("ix_tasks_project_due", table_name="tasks")
    op.drop_index("ix_tasks_project_id", table_name="tasks")
    op.drop_table("tasks")

    op.drop_index("ix_projects_creator", table_name="projects")
    op.drop_table("projects")
