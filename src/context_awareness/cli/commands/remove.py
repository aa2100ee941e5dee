"""``cc-context-awareness remove`` command."""

from __future__ import annotations

import typer

from context_awareness import installer
from context_awareness.cli.helpers import console, restart_hint, tracked
from context_awareness.paths import get_paths


def remove(
    template: str = typer.Argument(..., help="Template id to remove"),
    global_scope: bool = typer.Option(False, "--global", help="Target ~/.claude/"),
) -> None:
    """Remove the active template's thresholds, hooks and files."""
    paths = get_paths(global_scope)

    with tracked(f"Removing {template} ({paths.scope})") as tracker:
        result = installer.remove_template(template, paths, tracker=tracker)

    if not result.removed:
        console.print(f'[yellow]Template "{template}" is not currently active.[/yellow]')
        if result.active_template:
            console.print(f"  [dim]Active template: {result.active_template}[/dim]")
        else:
            console.print("  [dim]No template is currently active.[/dim]")
        return

    console.print(f"[green]{template} removed.[/green]")
    restart_hint()
