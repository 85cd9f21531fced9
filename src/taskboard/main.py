"""Main CLI entry point for Taskboard.

This module provides the main Typer application with sub-commands for
serving the API, creating the schema, and working with projects and tasks.

Usage:
    taskboard initdb
    taskboard serve --port 8000
    taskboard project create "Website relaunch" --email ana@example.com
    taskboard task list <project-id> --status Open --email ana@example.com
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Annotated, Optional, TypeVar

import typer
from rich.console import Console
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from taskboard.cli import project as project_cli
from taskboard.cli import task as task_cli
from taskboard.config import TaskboardConfig, load_config
from taskboard.database.connection import Database
from taskboard.errors import TaskboardError
from taskboard.logging import setup_logging
from taskboard.permissions import Principal, resolve_principal

T = TypeVar("T")

app = typer.Typer(
    name="taskboard",
    help="Taskboard: collaborative project and task tracking",
    no_args_is_help=True,
)

app.add_typer(project_cli.app, name="project", help="Manage projects")
app.add_typer(task_cli.app, name="task", help="Manage tasks")

console = Console()


class AppContext:
    """Application context shared across CLI commands.

    Attributes:
        config: Loaded Taskboard configuration
        database: Engine and session factory handle
    """

    def __init__(self, config: TaskboardConfig):
        self.config = config
        self.database = Database(config.database)

    @property
    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        return self.database.session_factory

    def run(self, operation: Callable[[AsyncSession], Awaitable[T]]) -> T:
        """Run ``operation`` with a fresh session on a new event loop.

        Pooled connections are closed afterwards because each command runs
        its own event loop.
        """

        async def _runner() -> T:
            try:
                async with self.database.session_factory() as session:
                    return await operation(session)
            finally:
                await self.database.dispose()

        return asyncio.run(_runner())


_app_context: AppContext | None = None


def get_app_context() -> AppContext:
    """Get the shared application context.

    Raises:
        RuntimeError: If context has not been initialized
    """
    if _app_context is None:
        raise RuntimeError("Application context not initialized. Call initialize_context first.")
    return _app_context


def initialize_context(config: TaskboardConfig) -> AppContext:
    """Initialize the global application context."""
    global _app_context
    _app_context = AppContext(config)
    return _app_context


def require_principal(user: str | None, email: str | None) -> Principal:
    """Resolve the acting principal from CLI options, exiting if there is none."""
    principal = resolve_principal(user, email)
    if principal is None:
        console.print("[red]Error:[/red] pass --user or --email to act as a principal")
        raise typer.Exit(code=1)
    return principal


def fail(action: str, exc: Exception) -> typer.Exit:
    """Print a failed action and return the Exit to raise."""
    if isinstance(exc, TaskboardError):
        console.print(f"[red]Error {action}:[/red] {exc.kind}: {exc.message}")
    else:
        console.print(f"[red]Error {action}:[/red] {exc}")
    return typer.Exit(code=1)


@app.command()
def serve(
    host: Annotated[
        Optional[str],
        typer.Option("--host", "-h", help="Host to bind to (default from config)"),
    ] = None,
    port: Annotated[
        Optional[int],
        typer.Option("--port", "-p", help="Port to bind to (default from config)"),
    ] = None,
) -> None:
    """Start the Taskboard web server."""
    import uvicorn

    from taskboard.web.app import create_app

    ctx = get_app_context()
    bind_host = host or ctx.config.web.host
    bind_port = port or ctx.config.web.port

    console.print("[bold cyan]Starting Taskboard Web Server[/bold cyan]")
    console.print(f"[dim]Host:[/dim] {bind_host}")
    console.print(f"[dim]Port:[/dim] {bind_port}")
    console.print()

    uvicorn.run(
        create_app(ctx.config),
        host=bind_host,
        port=bind_port,
        log_level="info",
    )


@app.command()
def initdb() -> None:
    """Create every table in the configured database.

    Intended for development databases; production schemas are managed with
    ``alembic upgrade head``.
    """
    ctx = get_app_context()

    async def _create() -> None:
        try:
            await ctx.database.create_all()
        finally:
            await ctx.database.dispose()

    try:
        asyncio.run(_create())
    except Exception as e:
        raise fail("creating schema", e) from e

    console.print("[green]Database schema created[/green]")


@app.callback()
def main_callback(
    config_path: Annotated[
        Optional[Path],
        typer.Option(
            "--config",
            "-c",
            help="Path to configuration file (TOML format)",
            exists=True,
            dir_okay=False,
            readable=True,
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable debug logging"),
    ] = False,
) -> None:
    """Configure global options and initialize application context."""
    try:
        config = load_config(config_path)
    except Exception as e:
        console.print(f"[red]Error loading configuration:[/red] {e}")
        raise typer.Exit(code=1)

    setup_logging(
        config.logging.model_copy(
            update={"level": "DEBUG" if verbose else "WARNING", "format": "console"}
        )
    )

    try:
        initialize_context(config)
    except Exception as e:
        console.print(f"[red]Error initializing application:[/red] {e}")
        raise typer.Exit(code=1)

    if verbose:
        console.print("[dim]Debug logging enabled[/dim]")


if __name__ == "__main__":
    app()
