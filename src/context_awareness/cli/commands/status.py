"""``cc-context-awareness status`` command."""

from __future__ import annotations

import json

import typer
from rich.table import Table

from context_awareness import installer
from context_awareness.cli.helpers import console
from context_awareness.errors import ContextAwarenessError
from context_awareness.paths import get_paths


def _print_thresholds(thresholds) -> None:
    table = Table(title="Thresholds", show_header=True)
    table.add_column("Percent", style="magenta", justify="right")
    table.add_column("Level", style="cyan")
    for threshold in thresholds:
        table.add_row(f"{threshold.get('percent', '?')}%", str(threshold.get("level", "")))
    console.print(table)


def status(
    global_scope: bool = typer.Option(False, "--global", help="Target ~/.claude/"),
    json_output: bool = typer.Option(False, "--json", help="Output machine-readable JSON"),
) -> None:
    """Show install scope, thresholds, settings patches and the active template."""
    paths = get_paths(global_scope)

    try:
        result = installer.get_status(paths)
    except ContextAwarenessError as exc:
        console.print(f"[red]Error:[/red] {exc.message}")
        raise typer.Exit(1)

    if json_output:
        typer.echo(json.dumps(result.to_dict(), indent=2))
        return

    if not result.installed:
        console.print(f"[yellow]cc-context-awareness is not installed ({paths.scope}).[/yellow]")
        console.print("  [dim]Run: cc-context-awareness install[/dim]")
        return

    console.print(f"Install scope: [bold]{result.scope}[/bold]")
    console.print(f"Version: {result.version}")
    console.print(f"Config: {result.config_file}")
    console.print(f"Settings: {result.settings_file}")
    console.print(f"statusLine: {result.status_line.value}")
    for script, events in result.hook_events.items():
        wired = ", ".join(events) if events else "[red]not registered[/red]"
        console.print(f"Hook {script}: {wired}")

    if result.thresholds:
        _print_thresholds(result.thresholds)
    else:
        console.print("Thresholds: 0")

    active = result.active_template or "none"
    console.print(f"Active template: [bold white]{active}[/bold white]")
