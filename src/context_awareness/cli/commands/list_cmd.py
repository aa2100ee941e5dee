"""``cc-context-awareness list`` command."""

from __future__ import annotations

import json

import typer
from rich.table import Table

from context_awareness.cli.helpers import console
from context_awareness.templates import load_catalog


def list_templates(
    json_output: bool = typer.Option(False, "--json", help="Output machine-readable JSON"),
) -> None:
    """Show the templates that can be installed."""
    catalog = load_catalog()

    if json_output:
        typer.echo(json.dumps([t.model_dump() for t in catalog.templates], indent=2))
        return

    table = Table(title="Available templates", show_header=True)
    table.add_column("Template", style="bold white")
    table.add_column("Name", style="cyan")
    table.add_column("Description", style="bright_black")
    for template in catalog.templates:
        table.add_row(template.id, template.name, template.description)

    console.print(table)
    console.print("[dim]Install with: cc-context-awareness install <template>[/dim]")
