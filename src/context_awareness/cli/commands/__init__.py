"""CLI command modules for cc-context-awareness."""

from __future__ import annotations

import typer

from . import install as install_module
from . import list_cmd as list_module
from . import remove as remove_module
from . import status as status_module
from . import uninstall as uninstall_module


def register_commands(app: typer.Typer) -> None:
    """Attach every command to the root Typer app."""
    app.command(help="Install base system, or install a template")(install_module.install)
    app.command(help="Remove a template")(remove_module.remove)
    app.command(name="list", help="Available templates")(list_module.list_templates)
    app.command(help="Show what's installed")(status_module.status)
    app.command(help="Remove everything")(uninstall_module.uninstall)


__all__ = ["register_commands"]
