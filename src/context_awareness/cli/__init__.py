"""Typer application for the ``cc-context-awareness`` command."""

from __future__ import annotations

import logging

import typer
from rich.logging import RichHandler

from context_awareness import __version__
from context_awareness.cli.commands import register_commands
from context_awareness.cli.helpers import console

app = typer.Typer(
    name="cc-context-awareness",
    help="Configurable context window thresholds for Claude Code",
    add_completion=False,
    no_args_is_help=True,
)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"cc-context-awareness {__version__}")
        raise typer.Exit()


@app.callback()
def callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log every change made to disk"),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show the version and exit",
    ),
) -> None:
    """Install and manage context-awareness thresholds, hooks and templates."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=console, show_path=False)],
        )


register_commands(app)

__all__ = ["app"]
