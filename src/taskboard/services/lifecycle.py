"""Task and subtask lifecycle.

Statuses form a flat set (todo, in_progress, blocked, done) and any
transition is allowed. Deletion is only possible from ``done``.

Creation validates its draft as a whole and fails with InvalidInput. Updates
validate every patch field on its own: a field that does not validate is
dropped and the remaining fields are still written.

Who may act:

- create task: project editor
- create subtask: project editor or editor of the parent task
- edit / delete / view task: project editor or task editor
- edit / delete / view subtask: project editor, parent task editor, or
  subtask editor
- replace a task's ``allowed_users``: project editor
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

import structlog
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ModelWrapValidatorHandler,
    PrivateAttr,
    ValidationError,
    model_validator,
)
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.database.models.project import Project
from taskboard.database.models.task import Subtask, Task
from taskboard.database.queries import project as project_queries
from taskboard.database.queries import subtask as subtask_queries
from taskboard.database.queries import task as task_queries
from taskboard.errors import Forbidden, InvalidInput, NotFound, PreconditionFailed
from taskboard.filters import TaskFilterParams, resolve_task_filter, task_ordering
from taskboard.permissions import (
    Principal,
    authenticated,
    can_edit_project,
    can_edit_task,
    can_view_project,
    normalize_token,
)
from taskboard.status import CanonicalStatus, Priority, normalize_status, parse_priority
from taskboard.uploads import UploadStore

logger = structlog.get_logger(__name__)

TITLE_MAX_LENGTH = 200
DESCRIPTION_MAX_LENGTH = 2000
ATTACHMENT_FOLDER = "attachments"

_DATE_ONLY = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class TaskDraft(BaseModel):
    """Validated input for a new task."""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(..., min_length=1, max_length=TITLE_MAX_LENGTH)
    description: str = Field(default="", max_length=DESCRIPTION_MAX_LENGTH)
    name: str = ""
    assigned: str = ""
    due_date: str | datetime | None = None
    priority: str | None = None


class SubtaskDraft(TaskDraft):
    """Validated input for a new subtask.

    ``creator`` defaults to the parent task's creator.
    """

    creator: str | None = None


class _FieldPatch(BaseModel):
    """Base for partial updates.

    A field whose JSON type does not fit is left unset and remembered in
    ``mistyped_fields`` instead of failing the whole patch.
    """

    _mistyped: list[str] = PrivateAttr(default_factory=list)

    @model_validator(mode="wrap")
    @classmethod
    def _unset_mistyped(cls, data: Any, handler: ModelWrapValidatorHandler[Any]) -> Any:
        try:
            return handler(data)
        except ValidationError as exc:
            if not isinstance(data, dict):
                raise
            bad = {str(error["loc"][0]) for error in exc.errors() if error.get("loc")}
            patch = handler({key: value for key, value in data.items() if key not in bad})
            patch._mistyped = sorted(bad)
            return patch

    @property
    def mistyped_fields(self) -> list[str]:
        return list(self._mistyped)


class TaskPatch(_FieldPatch):
    """Partial task update. Unset (None) fields are left unchanged.

    ``due_date`` set to "" clears the due date.
    """

    title: str | None = None
    description: str | None = None
    status: str | None = None
    assigned: str | None = None
    due_date: str | datetime | None = None
    priority: str | None = None
    active: bool | None = None
    allowed_users: list[str] | None = None


class SubtaskPatch(_FieldPatch):
    """Partial subtask update. Same fields as TaskPatch minus the access list."""

    title: str | None = None
    description: str | None = None
    status: str | None = None
    assigned: str | None = None
    due_date: str | datetime | None = None
    priority: str | None = None
    active: bool | None = None


def parse_due_date(raw: str | datetime | None) -> datetime | None:
    """Parse due date input into an aware UTC datetime.

    Accepts a datetime, an ISO 8601 string (a trailing "Z" is fine) or a
    bare ``YYYY-MM-DD`` date, which means midnight UTC. Naive values are taken
    as UTC. Empty input returns None.

    Raises:
        ValueError: If the input cannot be parsed.
    """
    if raw is None:
        return None
    if isinstance(raw, datetime):
        value = raw
    else:
        text = raw.strip()
        if not text:
            return None
        if _DATE_ONLY.match(text):
            value = datetime.strptime(text, "%Y-%m-%d")
        else:
            if text.endswith(("Z", "z")):
                text = text[:-1] + "+00:00"
            value = datetime.fromisoformat(text)
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _trimmed_text(value: str, max_length: int, min_length: int = 0) -> str | None:
    text = value.strip()
    if not min_length <= len(text) <= max_length:
        return None
    return text


def validated_changes(patch: TaskPatch | SubtaskPatch) -> tuple[dict[str, Any], list[str]]:
    """Validate each set field of ``patch`` independently.

    Returns:
        (column updates, names of dropped fields)
    """
    changes: dict[str, Any] = {}
    dropped: list[str] = patch.mistyped_fields

    if patch.title is not None:
        title = _trimmed_text(patch.title, TITLE_MAX_LENGTH, min_length=1)
        if title is None:
            dropped.append("title")
        else:
            changes["title"] = title

    if patch.description is not None:
        description = _trimmed_text(patch.description, DESCRIPTION_MAX_LENGTH)
        if description is None:
            dropped.append("description")
        else:
            changes["description"] = description

    if patch.status is not None:
        changes["status"] = normalize_status(patch.status).value

    if patch.assigned is not None:
        changes["assigned"] = patch.assigned.strip()

    if patch.due_date is not None:
        try:
            changes["due_date"] = parse_due_date(patch.due_date)
        except ValueError:
            dropped.append("due_date")

    if patch.priority is not None:
        priority = parse_priority(patch.priority)
        if priority is None:
            dropped.append("priority")
        else:
            changes["priority"] = priority.value

    if patch.active is not None:
        changes["active"] = patch.active

    return changes, dropped


def _draft(model: type[TaskDraft], **values: Any) -> Any:
    try:
        return model(**values)
    except ValidationError as exc:
        error = exc.errors()[0]
        field = ".".join(str(p) for p in error.get("loc", ())) or None
        raise InvalidInput(f"{field}: {error['msg']}" if field else error["msg"], field=field) from None


def _draft_fields(draft: TaskDraft) -> dict[str, Any]:
    try:
        due_date = parse_due_date(draft.due_date)
    except ValueError:
        raise InvalidInput("due_date: invalid date", field="due_date") from None
    priority = parse_priority(draft.priority) or Priority.medium
    return {
        "name": draft.name,
        "title": draft.title,
        "description": draft.description,
        "active": True,
        "status": CanonicalStatus.todo.value,
        "assigned": draft.assigned,
        "due_date": due_date,
        "priority": priority.value,
        "attached_files": [],
        "allowed_users": [],
    }


async def _project_of(session: AsyncSession, task: Task) -> Project | None:
    return await project_queries.get_project(session, task.project_id)


async def _load_task(session: AsyncSession, task_id: UUID) -> Task:
    task = await task_queries.get_task(session, task_id)
    if task is None:
        raise NotFound("Task", task_id)
    return task


async def _load_subtask(session: AsyncSession, subtask_id: UUID) -> Subtask:
    subtask = await subtask_queries.get_subtask(session, subtask_id)
    if subtask is None:
        raise NotFound("Subtask", subtask_id)
    return subtask


async def _may_edit_task(session: AsyncSession, task: Task, who: Principal) -> bool:
    if can_edit_task(task, who):
        return True
    return can_edit_project(await _project_of(session, task), who)


async def _may_edit_subtask(session: AsyncSession, subtask: Subtask, who: Principal) -> bool:
    if can_edit_task(subtask, who):
        return True
    parent = await task_queries.get_task(session, subtask.task_id)
    if parent is None:
        # orphaned subtask: only its own editors remain
        return False
    return await _may_edit_task(session, parent, who)


async def _editable_task(session: AsyncSession, task_id: UUID, principal: Principal | None) -> Task:
    who = authenticated(principal)
    task = await _load_task(session, task_id)
    if not await _may_edit_task(session, task, who):
        logger.warning("task_access_denied", task_id=str(task_id))
        raise Forbidden("Not allowed to edit this task")
    return task


async def _editable_subtask(
    session: AsyncSession,
    subtask_id: UUID,
    principal: Principal | None,
) -> Subtask:
    who = authenticated(principal)
    subtask = await _load_subtask(session, subtask_id)
    if not await _may_edit_subtask(session, subtask, who):
        logger.warning("subtask_access_denied", subtask_id=str(subtask_id))
        raise Forbidden("Not allowed to edit this subtask")
    return subtask


async def create_task(
    session: AsyncSession,
    project_id: UUID,
    principal: Principal | None,
    draft: TaskDraft | dict[str, Any],
) -> Task:
    """Create a task in a project.

    Args:
        session: Active async database session.
        project_id: Owning project.
        principal: Creator; must be a project editor.
        draft: TaskDraft or the raw values to build one from.

    Raises:
        Unauthorized: No principal.
        NotFound: Project does not exist.
        Forbidden: Principal may not edit the project.
        InvalidInput: Title missing or too long, description too long, or
            due date unparseable.
    """
    who = authenticated(principal)
    if isinstance(draft, dict):
        draft = _draft(TaskDraft, **draft)

    project = await project_queries.get_project(session, project_id)
    if project is None:
        raise NotFound("Project", project_id)
    if not can_edit_project(project, who):
        raise Forbidden("Not allowed to add tasks to this project")

    return await task_queries.create_task(
        session,
        project_id,
        creator=who.primary_token,
        **_draft_fields(draft),
    )


async def create_subtask(
    session: AsyncSession,
    task_id: UUID,
    principal: Principal | None,
    draft: SubtaskDraft | dict[str, Any],
) -> Subtask:
    """Create a subtask under a task.

    Raises:
        Unauthorized: No principal.
        NotFound: Parent task does not exist.
        Forbidden: Principal edits neither the parent task nor its project.
        InvalidInput: Draft fails validation.
    """
    who = authenticated(principal)
    if isinstance(draft, dict):
        draft = _draft(SubtaskDraft, **draft)

    task = await _load_task(session, task_id)
    if not await _may_edit_task(session, task, who):
        raise Forbidden("Not allowed to add subtasks to this task")

    creator = getattr(draft, "creator", None) or task.creator
    return await subtask_queries.create_subtask(
        session,
        task_id,
        creator=creator,
        **_draft_fields(draft),
    )


async def get_task(session: AsyncSession, task_id: UUID, principal: Principal | None) -> Task:
    """Load a task the principal may view."""
    return await _editable_task(session, task_id, principal)


async def get_subtask(
    session: AsyncSession,
    subtask_id: UUID,
    principal: Principal | None,
) -> Subtask:
    """Load a subtask the principal may view."""
    return await _editable_subtask(session, subtask_id, principal)


async def update_task(
    session: AsyncSession,
    task_id: UUID,
    principal: Principal | None,
    patch: TaskPatch,
) -> Task:
    """Apply the valid fields of ``patch`` to a task.

    Raises:
        Unauthorized: No principal.
        NotFound: Task does not exist.
        Forbidden: Principal may not edit the task, or sets allowed_users
            without being a project editor.
    """
    who = authenticated(principal)
    task = await _editable_task(session, task_id, who)
    changes, dropped = validated_changes(patch)

    if patch.allowed_users is not None:
        if not can_edit_project(await _project_of(session, task), who):
            raise Forbidden("Only project members may change task access")
        access: list[str] = []
        for token in (normalize_token(t) for t in patch.allowed_users):
            if token and token not in access:
                access.append(token)
        changes["allowed_users"] = access

    if dropped:
        logger.info("task_patch_fields_dropped", task_id=str(task_id), fields=dropped)
    if not changes:
        return task
    return await task_queries.update_task(session, task, **changes)


async def update_subtask(
    session: AsyncSession,
    subtask_id: UUID,
    principal: Principal | None,
    patch: SubtaskPatch,
) -> Subtask:
    """Apply the valid fields of ``patch`` to a subtask."""
    subtask = await _editable_subtask(session, subtask_id, principal)
    changes, dropped = validated_changes(patch)
    if dropped:
        logger.info("subtask_patch_fields_dropped", subtask_id=str(subtask_id), fields=dropped)
    if not changes:
        return subtask
    return await subtask_queries.update_subtask(session, subtask, **changes)


async def delete_task(session: AsyncSession, task_id: UUID, principal: Principal | None) -> None:
    """Delete a task whose status is done. Its subtasks are kept.

    Raises:
        Unauthorized: No principal.
        NotFound: Task does not exist.
        Forbidden: Principal may not edit the task.
        PreconditionFailed: Task status is not done.
    """
    task = await _editable_task(session, task_id, principal)
    if normalize_status(task.status) is not CanonicalStatus.done:
        logger.info("task_delete_refused", task_id=str(task_id), status=task.status)
        raise PreconditionFailed()
    await task_queries.delete_task(session, task_id)


async def delete_subtask(
    session: AsyncSession,
    subtask_id: UUID,
    principal: Principal | None,
) -> None:
    """Delete a subtask whose status is done."""
    subtask = await _editable_subtask(session, subtask_id, principal)
    if normalize_status(subtask.status) is not CanonicalStatus.done:
        logger.info("subtask_delete_refused", subtask_id=str(subtask_id), status=subtask.status)
        raise PreconditionFailed()
    await subtask_queries.delete_subtask(session, subtask_id)


async def add_task_attachment(
    session: AsyncSession,
    task_id: UUID,
    principal: Principal | None,
    store: UploadStore,
    data: bytes,
    filename: str,
) -> Task:
    """Store an upload and append its reference to the task's attachments."""
    task = await _editable_task(session, task_id, principal)
    if not data:
        raise InvalidInput("file is empty", field="file")
    reference = await store.save(data, filename, ATTACHMENT_FOLDER)
    return await task_queries.update_task(
        session,
        task,
        attached_files=[*(task.attached_files or []), reference],
    )


async def list_project_tasks(
    session: AsyncSession,
    project_id: UUID,
    principal: Principal | None,
    params: TaskFilterParams | None = None,
    now: datetime | None = None,
) -> list[Task]:
    """Filtered, ordered tasks of a project the principal may view.

    Raises:
        Unauthorized: No principal.
        NotFound: Project does not exist.
        Forbidden: Principal may not view the project.
    """
    who = authenticated(principal)
    project = await project_queries.get_project(session, project_id)
    if project is None:
        raise NotFound("Project", project_id)
    if not can_view_project(project, who):
        raise Forbidden("Not allowed to view this project")

    params = (params or TaskFilterParams()).model_copy(update={"project_id": project_id})
    clause = resolve_task_filter(params, who, now=now)
    return await task_queries.list_tasks(session, where=clause, order_by=task_ordering())


async def list_task_subtasks(
    session: AsyncSession,
    task_id: UUID,
    principal: Principal | None,
) -> list[Subtask]:
    """Subtasks of a task the principal may view, newest first."""
    await _editable_task(session, task_id, principal)
    return await subtask_queries.list_subtasks(session, task_id)
