"""Shared console and error reporting for CLI commands."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

import typer
from rich.console import Console
from rich.markup import escape

from context_awareness.errors import ContextAwarenessError
from context_awareness.steps import StepTracker

console = Console()


@contextmanager
def tracked(title: str) -> Iterator[StepTracker]:
    """Run a command body with a step tracker and print it afterwards.

    On failure the steps finished before the error are still printed, then
    the error message, and the command exits with status 1.
    """
    tracker = StepTracker(title)
    try:
        yield tracker
    except ContextAwarenessError as exc:
        if tracker.steps:
            console.print(tracker.render())
        console.print(f"[red]Error:[/red] {escape(exc.message)}")
        raise typer.Exit(1)
    except OSError as exc:
        if tracker.steps:
            console.print(tracker.render())
        console.print(f"[red]Error:[/red] {escape(str(exc))}")
        raise typer.Exit(1)

    console.print(tracker.render())


def restart_hint() -> None:
    console.print("  [dim]Restart Claude Code to apply changes.[/dim]")
