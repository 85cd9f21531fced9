"""Typer sub-applications for the ``taskboard`` command."""
