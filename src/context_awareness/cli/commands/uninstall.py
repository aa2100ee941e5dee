"""``cc-context-awareness uninstall`` command."""

from __future__ import annotations

import typer

from context_awareness import installer
from context_awareness.cli.helpers import console, restart_hint, tracked
from context_awareness.paths import get_paths


def uninstall(
    global_scope: bool = typer.Option(False, "--global", help="Target ~/.claude/"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
) -> None:
    """Remove cc-context-awareness, its templates, hooks and settings entries."""
    paths = get_paths(global_scope)

    if not paths.install_dir.exists():
        console.print(f"[yellow]cc-context-awareness is not installed ({paths.scope}).[/yellow]")
        return

    if not yes:
        console.print("[yellow]This will remove cc-context-awareness and all templates.[/yellow]")
        if not typer.confirm("Are you sure?", default=False):
            console.print("Cancelled.")
            return

    with tracked(f"Uninstalling ({paths.scope})") as tracker:
        installer.uninstall(paths, tracker=tracker)

    console.print(f"[green]cc-context-awareness uninstalled ({paths.scope}).[/green]")
    restart_hint()
