"""``cc-context-awareness install`` command."""

from __future__ import annotations

from typing import Optional

import typer

from context_awareness import installer
from context_awareness.cli.helpers import console, restart_hint, tracked
from context_awareness.paths import get_paths
from context_awareness.settings import StatusLineAction


def install(
    template: Optional[str] = typer.Argument(None, help="Template id to install (see 'list')"),
    global_scope: bool = typer.Option(False, "--global", help="Install to ~/.claude/ instead of ./.claude/"),
    no_claude_md: bool = typer.Option(False, "--no-claude-md", help="Skip CLAUDE.md modification"),
    no_skill: bool = typer.Option(False, "--no-skill", help="Skip agent skill installation"),
) -> None:
    """Install the base system, or a template on top of it."""
    paths = get_paths(global_scope)
    title = f"Installing {template or 'base system'} ({paths.scope})"

    with tracked(title) as tracker:
        result = installer.install(
            template,
            paths,
            skill=not no_skill,
            claude_md=not no_claude_md,
            tracker=tracker,
        )

    if result.base is not None:
        if result.base.status_line.action is StatusLineAction.PREPENDED:
            console.print(f"  [dim]statusLine: {result.base.status_line.command}[/dim]")
        console.print(f"[green]cc-context-awareness installed ({paths.scope})![/green]")
        console.print(f"  [dim]Config:   {paths.config_file}[/dim]")
        console.print(f"  [dim]Settings: {paths.settings_file}[/dim]")

    if result.template is not None:
        if result.template.replaced:
            console.print(f"[yellow]Replaced previously active template:[/yellow] {result.template.replaced}")
        console.print(f"[green]{result.template.name} installed![/green]")

    restart_hint()
