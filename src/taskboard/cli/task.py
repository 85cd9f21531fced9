"""Task management CLI commands.

This module provides CLI commands for listing, creating, updating and
deleting tasks.
"""

from __future__ import annotations

import json
from typing import Annotated, Optional
from uuid import UUID

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from taskboard.cli.options import EmailOption, FormatOption, UserOption
from taskboard.filters import TaskFilterParams
from taskboard.services import lifecycle
from taskboard.services.lifecycle import TaskPatch
from taskboard.status import STATUS_LABELS, CanonicalStatus, normalize_status

app = typer.Typer(help="Task management commands")
console = Console()

STATUS_COLORS = {
    CanonicalStatus.todo: "white",
    CanonicalStatus.in_progress: "cyan",
    CanonicalStatus.blocked: "red",
    CanonicalStatus.done: "green",
}


def _parse_uuid(value: str, what: str) -> UUID:
    try:
        return UUID(value)
    except ValueError:
        console.print(f"[red]Invalid {what} UUID:[/red] {value}")
        raise typer.Exit(code=1)


@app.command("list")
def list_tasks(
    project_id: Annotated[str, typer.Argument(help="Project UUID")],
    status: Annotated[
        str,
        typer.Option("--status", "-s", help="Status bucket (To do, In progress, Blocked, Done, Open, all)"),
    ] = "Open",
    assignee: Annotated[
        str,
        typer.Option("--assignee", "-a", help="Assignee bucket (all, me, unassigned, or a name)"),
    ] = "all",
    due: Annotated[
        str,
        typer.Option("--due", help="Due bucket (all, overdue, week, none)"),
    ] = "all",
    query: Annotated[
        Optional[str],
        typer.Option("--query", "-q", help="Text to look for in title or description"),
    ] = None,
    format: FormatOption = "table",
    user: UserOption = None,
    email: EmailOption = None,
) -> None:
    """List a project's tasks, filtered and ordered by due date."""
    from taskboard.main import fail, get_app_context, require_principal

    ctx = get_app_context()
    principal = require_principal(user, email)
    project_uuid = _parse_uuid(project_id, "project")
    params = TaskFilterParams(status=status, assignee=assignee, due=due, q=query)

    async def _list(session):  # type: ignore[no-untyped-def]
        return await lifecycle.list_project_tasks(session, project_uuid, principal, params)

    try:
        tasks = ctx.run(_list)
    except Exception as e:
        raise fail("listing tasks", e) from e

    if format == "json":
        output = [
            {
                "id": str(t.id),
                "title": t.title,
                "status": normalize_status(t.status).value,
                "assigned": t.assigned or "",
                "priority": t.priority,
                "due_date": t.due_date.isoformat() if t.due_date else None,
            }
            for t in tasks
        ]
        typer.echo(json.dumps(output, indent=2))
        return

    if not tasks:
        console.print("[yellow]No tasks found[/yellow]")
        return

    table = Table(title="Tasks")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Title", style="bold")
    table.add_column("Status")
    table.add_column("Assigned")
    table.add_column("Priority")
    table.add_column("Due", style="dim")

    for t in tasks:
        canonical = normalize_status(t.status)
        color = STATUS_COLORS[canonical]
        table.add_row(
            str(t.id),
            t.title,
            f"[{color}]{STATUS_LABELS[canonical]}[/{color}]",
            t.assigned or "-",
            t.priority or "",
            t.due_date.strftime("%Y-%m-%d") if t.due_date else "-",
        )

    console.print(table)


@app.command()
def create(
    project_id: Annotated[str, typer.Argument(help="Project UUID")],
    title: Annotated[str, typer.Argument(help="Task title")],
    description: Annotated[
        str,
        typer.Option("--description", "-d", help="Detailed task description"),
    ] = "",
    assigned: Annotated[
        str,
        typer.Option("--assign", help="Assignee (user id, email or name)"),
    ] = "",
    due_date: Annotated[
        Optional[str],
        typer.Option("--due", help="Due date (YYYY-MM-DD or ISO 8601)"),
    ] = None,
    priority: Annotated[
        Optional[str],
        typer.Option("--priority", "-p", help="Low, Medium or High"),
    ] = None,
    user: UserOption = None,
    email: EmailOption = None,
) -> None:
    """Create a task in a project."""
    from taskboard.main import fail, get_app_context, require_principal

    ctx = get_app_context()
    principal = require_principal(user, email)
    project_uuid = _parse_uuid(project_id, "project")

    draft = {
        "title": title,
        "description": description,
        "assigned": assigned,
        "due_date": due_date,
        "priority": priority,
    }

    async def _create(session):  # type: ignore[no-untyped-def]
        return await lifecycle.create_task(session, project_uuid, principal, draft)

    try:
        task = ctx.run(_create)
    except Exception as e:
        raise fail("creating task", e) from e

    panel = Panel(
        f"[green]Task created successfully![/green]\n\n"
        f"[bold]ID:[/bold] {task.id}\n"
        f"[bold]Title:[/bold] {task.title}\n"
        f"[bold]Status:[/bold] {STATUS_LABELS[normalize_status(task.status)]}\n"
        f"[bold]Priority:[/bold] {task.priority}",
        title="Task Created",
        border_style="green",
    )
    console.print(panel)


@app.command("set")
def set_fields(
    task_id: Annotated[str, typer.Argument(help="Task UUID")],
    status: Annotated[Optional[str], typer.Option("--status", "-s", help="New status")] = None,
    title: Annotated[Optional[str], typer.Option("--title", "-t", help="New title")] = None,
    assigned: Annotated[Optional[str], typer.Option("--assign", help="New assignee")] = None,
    due_date: Annotated[
        Optional[str],
        typer.Option("--due", help="New due date; empty string clears it"),
    ] = None,
    priority: Annotated[Optional[str], typer.Option("--priority", "-p", help="New priority")] = None,
    user: UserOption = None,
    email: EmailOption = None,
) -> None:
    """Update fields of a task. Values that do not validate are skipped."""
    from taskboard.main import fail, get_app_context, require_principal

    ctx = get_app_context()
    principal = require_principal(user, email)
    task_uuid = _parse_uuid(task_id, "task")

    patch = TaskPatch(
        status=status,
        title=title,
        assigned=assigned,
        due_date=due_date,
        priority=priority,
    )

    async def _update(session):  # type: ignore[no-untyped-def]
        return await lifecycle.update_task(session, task_uuid, principal, patch)

    try:
        task = ctx.run(_update)
    except Exception as e:
        raise fail("updating task", e) from e

    console.print(
        f"[green]Task updated:[/green] {task.title} "
        f"({STATUS_LABELS[normalize_status(task.status)]})"
    )


@app.command()
def delete(
    task_id: Annotated[str, typer.Argument(help="Task UUID")],
    user: UserOption = None,
    email: EmailOption = None,
) -> None:
    """Delete a task. Only tasks whose status is Done can be deleted."""
    from taskboard.main import fail, get_app_context, require_principal

    ctx = get_app_context()
    principal = require_principal(user, email)
    task_uuid = _parse_uuid(task_id, "task")

    async def _delete(session):  # type: ignore[no-untyped-def]
        await lifecycle.delete_task(session, task_uuid, principal)

    try:
        ctx.run(_delete)
    except Exception as e:
        raise fail("deleting task", e) from e

    console.print(f"[green]Task deleted:[/green] {task_id}")
