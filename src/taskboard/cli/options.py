"""Options shared by CLI commands that act on behalf of a principal."""

from __future__ import annotations

from typing import Annotated, Optional

import typer

UserOption = Annotated[
    Optional[str],
    typer.Option("--user", "-u", envvar="TASKBOARD_USER", help="Act as this user id"),
]

EmailOption = Annotated[
    Optional[str],
    typer.Option("--email", "-e", envvar="TASKBOARD_EMAIL", help="Act as this email"),
]

FormatOption = Annotated[
    str,
    typer.Option("--format", "-f", help="Output format (table or json)"),
]
