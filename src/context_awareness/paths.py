"""Install target resolution and bundled asset discovery.

Provides the canonical functions for locating:
- The ``.claude/`` directory for a local (project) or global (home) install
- The package-bundled ``runtime/``, ``templates/`` and ``docs/`` assets
"""

from __future__ import annotations

import importlib.resources
import os
from dataclasses import dataclass
from pathlib import Path

INSTALL_DIR_NAME = "cc-context-awareness"
SKILL_DIR_NAME = "configure-context-awareness"
META_FILE_NAME = ".install-meta.json"

BRIDGE_SCRIPT = "bridge.sh"
CHECK_SCRIPT = "check-thresholds.sh"
RESET_SCRIPT = "reset.sh"

ASSET_ROOT_ENV = "CC_CONTEXT_AWARENESS_ASSET_ROOT"


@dataclass(frozen=True)
class InstallPaths:
    """Every filesystem location touched by one install scope."""

    scope: str
    claude_dir: Path
    install_dir: Path
    settings_file: Path
    config_file: Path
    skill_dir: Path
    meta_file: Path
    project_dir: Path

    @property
    def bridge_path(self) -> Path:
        return self.install_dir / BRIDGE_SCRIPT

    @property
    def check_path(self) -> Path:
        return self.install_dir / CHECK_SCRIPT

    @property
    def reset_path(self) -> Path:
        return self.install_dir / RESET_SCRIPT

    @property
    def claude_md(self) -> Path:
        return self.project_dir / "CLAUDE.md"

    def template_install_dir(self, template_id: str) -> Path:
        """Directory holding a template's copied hook scripts.

        Raises:
            ValueError: If *template_id* is not a single path component.
        """
        if template_id in ("", ".", "..") or Path(template_id).name != template_id:
            raise ValueError(f"Invalid template id: {template_id!r}")
        return self.claude_dir / template_id


def get_paths(
    global_scope: bool,
    *,
    home: Path | None = None,
    cwd: Path | None = None,
) -> InstallPaths:
    """Resolve install paths for the given scope.

    Global installs live under ``~/.claude/`` and patch ``settings.json``;
    local installs live under ``./.claude/`` and patch
    ``settings.local.json``.
    """
    project_dir = cwd or Path.cwd()
    claude_dir = (home or Path.home()) / ".claude" if global_scope else project_dir / ".claude"
    install_dir = claude_dir / INSTALL_DIR_NAME
    settings_name = "settings.json" if global_scope else "settings.local.json"

    return InstallPaths(
        scope="global" if global_scope else "local",
        claude_dir=claude_dir,
        install_dir=install_dir,
        settings_file=claude_dir / settings_name,
        config_file=install_dir / "config.json",
        skill_dir=claude_dir / "skills" / SKILL_DIR_NAME,
        meta_file=install_dir / META_FILE_NAME,
        project_dir=project_dir,
    )


def get_asset_root() -> Path:
    """Return the directory containing bundled ``runtime/``, ``templates/`` and ``docs/``.

    Resolution order:
    1. CC_CONTEXT_AWARENESS_ASSET_ROOT environment variable (CI/testing)
    2. importlib.resources.files("context_awareness") / "assets" (installed package)
    3. Path(__file__).parent / "assets" (development layout)

    Raises:
        FileNotFoundError: If no valid asset root can be found.
    """
    if env_root := os.environ.get(ASSET_ROOT_ENV):
        root = Path(env_root)
        if root.is_dir():
            return root
        raise FileNotFoundError(f"{ASSET_ROOT_ENV} path does not exist: {env_root}")

    try:
        pkg_root = importlib.resources.files("context_awareness")
        assets_dir = Path(str(pkg_root)) / "assets"
        if assets_dir.is_dir():
            return assets_dir
    except (TypeError, ModuleNotFoundError):
        pass

    dev_root = Path(__file__).parent / "assets"
    if dev_root.is_dir():
        return dev_root

    raise FileNotFoundError(
        f"Cannot locate package assets. Set {ASSET_ROOT_ENV} or reinstall cc-context-awareness."
    )


def get_runtime_dir() -> Path:
    return get_asset_root() / "runtime"


def get_templates_dir() -> Path:
    return get_asset_root() / "templates"


def get_docs_dir() -> Path:
    return get_asset_root() / "docs"
