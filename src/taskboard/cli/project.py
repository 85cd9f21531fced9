"""Project management CLI commands.

This module provides CLI commands for creating, listing and inspecting
projects, and for managing their members.
"""

from __future__ import annotations

import json
from typing import Annotated
from uuid import UUID

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from taskboard.cli.options import EmailOption, FormatOption, UserOption
from taskboard.services import membership
from taskboard.services import projects as project_service

app = typer.Typer(help="Project management commands")
console = Console()


def _parse_uuid(value: str) -> UUID:
    try:
        return UUID(value)
    except ValueError:
        console.print(f"[red]Invalid project UUID:[/red] {value}")
        raise typer.Exit(code=1)


@app.command()
def create(
    title: Annotated[str, typer.Argument(help="Project title")],
    description: Annotated[
        str,
        typer.Option("--description", "-d", help="Project description"),
    ] = "",
    user: UserOption = None,
    email: EmailOption = None,
) -> None:
    """Create a new project owned by the acting principal."""
    from taskboard.main import fail, get_app_context, require_principal

    ctx = get_app_context()
    principal = require_principal(user, email)

    async def _create(session):  # type: ignore[no-untyped-def]
        return await project_service.create_project(
            session,
            principal,
            title=title,
            description=description,
            default_cover=ctx.config.uploads.default_cover,
        )

    try:
        project = ctx.run(_create)
    except Exception as e:
        raise fail("creating project", e) from e

    panel = Panel(
        f"[green]Project created successfully![/green]\n\n"
        f"[bold]ID:[/bold] {project.id}\n"
        f"[bold]Title:[/bold] {project.title}\n"
        f"[bold]Admins:[/bold] {', '.join(project.admins)}",
        title="Project Created",
        border_style="green",
    )
    console.print(panel)


@app.command("list")
def list_projects(
    include_archived: Annotated[
        bool,
        typer.Option("--all", "-a", help="Include archived projects"),
    ] = False,
    format: FormatOption = "table",
    user: UserOption = None,
    email: EmailOption = None,
) -> None:
    """List projects the acting principal created or belongs to."""
    from taskboard.main import fail, get_app_context, require_principal

    ctx = get_app_context()
    principal = require_principal(user, email)

    async def _list(session):  # type: ignore[no-untyped-def]
        return await project_service.list_visible_projects(
            session, principal, include_archived=include_archived
        )

    try:
        projects = ctx.run(_list)
    except Exception as e:
        raise fail("listing projects", e) from e

    if format == "json":
        output = [
            {
                "id": str(p.id),
                "title": p.title,
                "active": p.active,
                "creator": p.creator,
                "admins": p.admins,
                "managers": p.managers,
                "users": p.users,
                "created_at": p.created_at.isoformat(),
            }
            for p in projects
        ]
        typer.echo(json.dumps(output, indent=2))
        return

    if not projects:
        console.print("[yellow]No projects found[/yellow]")
        return

    table = Table(title="Projects")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Title", style="bold")
    table.add_column("Members", justify="right")
    table.add_column("Created", style="dim")

    for p in projects:
        members = len(p.admins) + len(p.managers) + len(p.users)
        title = p.title if p.active else f"[dim]{p.title} (archived)[/dim]"
        table.add_row(str(p.id), title, str(members), p.created_at.strftime("%Y-%m-%d %H:%M"))

    console.print(table)


@app.command()
def invite(
    project_id: Annotated[str, typer.Argument(help="Project UUID")],
    member: Annotated[str, typer.Argument(help="User id or email of the member")],
    role: Annotated[
        str,
        typer.Option("--role", "-r", help="Role to give (admin, manager, user)"),
    ] = "user",
    remove: Annotated[
        bool,
        typer.Option("--remove", help="Remove the member from every role instead"),
    ] = False,
    user: UserOption = None,
    email: EmailOption = None,
) -> None:
    """Give a member a role in a project, or remove them."""
    from taskboard.main import fail, get_app_context, require_principal

    ctx = get_app_context()
    principal = require_principal(user, email)
    project_uuid = _parse_uuid(project_id)

    async def _change(session):  # type: ignore[no-untyped-def]
        if remove:
            return await membership.remove_from_all_roles(session, project_uuid, member, principal)
        return await membership.set_role(session, project_uuid, member, role, principal)

    try:
        project = ctx.run(_change)
    except Exception as e:
        raise fail("updating members", e) from e

    if remove:
        console.print(f"[green]Removed[/green] {member} from {project.title}")
    else:
        console.print(f"[green]Member set:[/green] {member} is now {role} of {project.title}")


@app.command()
def summary(
    project_id: Annotated[str, typer.Argument(help="Project UUID")],
    format: FormatOption = "table",
    user: UserOption = None,
    email: EmailOption = None,
) -> None:
    """Show task counts and progress of a project."""
    from taskboard.main import fail, get_app_context, require_principal

    ctx = get_app_context()
    principal = require_principal(user, email)
    project_uuid = _parse_uuid(project_id)

    async def _summary(session):  # type: ignore[no-untyped-def]
        return await project_service.project_summary(session, project_uuid, principal)

    try:
        result = ctx.run(_summary)
    except Exception as e:
        raise fail("summarizing project", e) from e

    if format == "json":
        typer.echo(
            json.dumps(
                {
                    "project_id": str(result.project_id),
                    "total": result.total,
                    "done": result.done,
                    "open": result.open,
                    "progress": result.progress,
                }
            )
        )
        return

    console.print(
        f"[bold]Tasks:[/bold] {result.total}  "
        f"[bold]Done:[/bold] {result.done}  "
        f"[bold]Open:[/bold] {result.open}  "
        f"[bold]Progress:[/bold] {result.progress}%"
    )
