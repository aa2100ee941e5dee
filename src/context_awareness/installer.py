"""Top-level install, remove, uninstall and status orchestration.

The base install copies the runtime scripts, creates config.json and patches
the host settings (statusLine bridge plus two hooks). Template operations are
delegated to :mod:`context_awareness.lifecycle`. Uninstall reverses both, the
active template first.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from context_awareness import __version__
from context_awareness.config import create_default_config, read_config
from context_awareness.errors import BaseNotInstalledError, NotInstalledError
from context_awareness.lifecycle import (
    TemplateInstallResult,
    install_template,
    prepare_template,
    remove_template_assets,
)
from context_awareness.metadata import InstallMetadata, read_metadata, write_metadata
from context_awareness.paths import (
    BRIDGE_SCRIPT,
    CHECK_SCRIPT,
    RESET_SCRIPT,
    InstallPaths,
    get_docs_dir,
    get_runtime_dir,
)
from context_awareness.placement import copy_file, path_exists, remove_dir_if_empty, remove_path
from context_awareness.settings import (
    StatusLineKind,
    StatusLineResult,
    add_hook,
    find_hook_events,
    get_status_line,
    read_settings,
    remove_hook,
    remove_status_line,
    set_status_line,
    write_settings,
)
from context_awareness.steps import StepTracker

logger = logging.getLogger(__name__)

RUNTIME_SCRIPTS: tuple[str, ...] = (BRIDGE_SCRIPT, CHECK_SCRIPT, RESET_SCRIPT)

# (event, matcher, script) registered by the base install.
BASE_HOOKS: tuple[tuple[str, str, str], ...] = (
    ("PreToolUse", "", CHECK_SCRIPT),
    ("SessionStart", "compact", RESET_SCRIPT),
)

SKILL_FILE = "SKILL.md"

# Written by the runtime scripts; one file per session.
FLAG_DIR = Path("/tmp")
FLAG_FILE_PATTERNS: tuple[str, ...] = (".cc-ctx-pct-*", ".cc-ctx-fired-*", ".cc-ctx-compacted-*")


@dataclass(frozen=True)
class BaseInstallResult:
    scope: str
    config_created: bool
    status_line: StatusLineResult
    hooks_added: tuple[str, ...]
    skill_installed: bool


@dataclass(frozen=True)
class InstallResult:
    base: BaseInstallResult | None
    template: TemplateInstallResult | None


@dataclass(frozen=True)
class TemplateRemoveResult:
    """Outcome of :func:`remove_template`.

    ``removed`` is False when the requested template was not the active one;
    ``active_template`` then names what is active (or None).
    """

    template_id: str
    removed: bool
    active_template: str | None


@dataclass(frozen=True)
class UninstallResult:
    scope: str
    removed_template: str | None
    settings_outcome: str
    skill_removed: bool
    flag_files_removed: int


@dataclass(frozen=True)
class InstallStatus:
    scope: str
    installed: bool
    version: str | None = None
    active_template: str | None = None
    installed_at: str | None = None
    thresholds: tuple[dict[str, Any], ...] = ()
    status_line: StatusLineKind = StatusLineKind.ABSENT
    hook_events: dict[str, list[str]] = field(default_factory=dict)
    config_file: Path | None = None
    settings_file: Path | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "scope": self.scope,
            "installed": self.installed,
            "version": self.version,
            "activeTemplate": self.active_template,
            "installedAt": self.installed_at,
            "thresholds": list(self.thresholds),
            "statusLine": self.status_line.value,
            "hooks": self.hook_events,
            "configFile": str(self.config_file) if self.config_file else None,
            "settingsFile": str(self.settings_file) if self.settings_file else None,
        }


def install_base(
    paths: InstallPaths,
    *,
    skill: bool = True,
    tracker: StepTracker | None = None,
) -> BaseInstallResult:
    """Install the base system (runtime scripts, config, settings patches).

    Safe to re-run: scripts are refreshed, an existing config.json is kept,
    settings patches are idempotent and the active template is preserved.
    """
    tracker = tracker or StepTracker(f"Install base ({paths.scope})")
    runtime_dir = get_runtime_dir()

    for script in RUNTIME_SCRIPTS:
        copy_file(runtime_dir / script, paths.install_dir / script, executable=True)
    tracker.done("scripts", "Runtime scripts", str(paths.install_dir))

    config_created = False
    if read_config(paths.config_file) is None:
        config = create_default_config(paths.config_file)
        config_created = True
        tracker.done("config", "Config created", f"{len(config.get('thresholds', []))} thresholds")
    else:
        tracker.skip("config", "existing config.json preserved")

    settings = read_settings(paths.settings_file)
    status_line = set_status_line(settings, paths.bridge_path)
    tracker.done("statusline", "statusLine", status_line.action.value)

    hooks_added = []
    for event, matcher, script in BASE_HOOKS:
        if add_hook(settings, event, matcher, paths.install_dir / script):
            hooks_added.append(event)
    tracker.done("hooks", "Hooks", ", ".join(hooks_added) if hooks_added else "already registered")

    write_settings(paths.settings_file, settings)
    tracker.done("settings", f"Settings {paths.settings_file.name}", "written")

    if skill:
        copy_file(get_docs_dir() / SKILL_FILE, paths.skill_dir / SKILL_FILE)
        tracker.done("skill", "Agent skill", str(paths.skill_dir))

    meta = read_metadata(paths.meta_file)
    if meta is None:
        meta = InstallMetadata(scope=paths.scope)
    else:
        meta.version = __version__
        meta.scope = paths.scope
    write_metadata(paths.meta_file, meta)
    tracker.done("metadata", "Install metadata")

    logger.info("Base system installed (%s) at %s", paths.scope, paths.install_dir)
    return BaseInstallResult(
        scope=paths.scope,
        config_created=config_created,
        status_line=status_line,
        hooks_added=tuple(hooks_added),
        skill_installed=skill,
    )


def ensure_base_installed(
    paths: InstallPaths,
    *,
    skill: bool = True,
    tracker: StepTracker | None = None,
) -> BaseInstallResult | None:
    """Install the base system if no install metadata exists."""
    if path_exists(paths.meta_file):
        return None
    logger.info("Base system not found, installing it first")
    return install_base(paths, skill=skill, tracker=tracker)


def install(
    template_id: str | None,
    paths: InstallPaths,
    *,
    skill: bool = True,
    claude_md: bool = True,
    tracker: StepTracker | None = None,
) -> InstallResult:
    """Install the base system, or a template (installing the base first if needed).

    The template is validated before anything is written.
    """
    if template_id is None:
        return InstallResult(base=install_base(paths, skill=skill, tracker=tracker), template=None)

    prepare_template(template_id)
    base = ensure_base_installed(paths, skill=skill, tracker=tracker)
    template = install_template(template_id, paths, claude_md=claude_md, tracker=tracker)
    return InstallResult(base=base, template=template)


def remove_template(
    template_id: str,
    paths: InstallPaths,
    *,
    tracker: StepTracker | None = None,
) -> TemplateRemoveResult:
    """Remove *template_id* if it is the active template.

    Raises:
        BaseNotInstalledError: If nothing is installed in this scope.
    """
    meta = read_metadata(paths.meta_file)
    if meta is None:
        raise BaseNotInstalledError()

    if meta.active_template != template_id:
        logger.debug("Template %s is not active (active: %s)", template_id, meta.active_template)
        return TemplateRemoveResult(template_id=template_id, removed=False, active_template=meta.active_template)

    remove_template_assets(template_id, paths, tracker=tracker)
    meta.active_template = None
    write_metadata(paths.meta_file, meta)
    return TemplateRemoveResult(template_id=template_id, removed=True, active_template=None)


def cleanup_flag_files(flag_dir: Path = FLAG_DIR) -> int:
    """Delete per-session flag files left by the runtime scripts."""
    removed = 0
    for pattern in FLAG_FILE_PATTERNS:
        for flag in flag_dir.glob(pattern):
            try:
                flag.unlink()
                removed += 1
            except OSError:
                pass  # best-effort cleanup
    return removed


def uninstall(
    paths: InstallPaths,
    *,
    tracker: StepTracker | None = None,
    flag_dir: Path | None = None,
) -> UninstallResult:
    """Remove the active template, every settings patch, and all installed files.

    Raises:
        NotInstalledError: If the install directory does not exist.
    """
    tracker = tracker or StepTracker(f"Uninstall ({paths.scope})")
    if not path_exists(paths.install_dir):
        raise NotInstalledError(paths.scope)

    removed_template = None
    meta = read_metadata(paths.meta_file)
    if meta is not None and meta.active_template:
        removed_template = meta.active_template
        remove_template_assets(removed_template, paths, tracker=tracker)
        tracker.done("template", f"Removed {removed_template}")

    settings = read_settings(paths.settings_file)
    remove_status_line(settings, paths.bridge_path)
    for _event, _matcher, script in BASE_HOOKS:
        remove_hook(settings, paths.install_dir / script)
    outcome = write_settings(paths.settings_file, settings)
    tracker.done("settings", f"Settings {paths.settings_file.name}", outcome)

    remove_path(paths.install_dir)
    tracker.done("install_dir", "Removed install directory", str(paths.install_dir))

    skill_removed = remove_path(paths.skill_dir)
    if skill_removed:
        remove_dir_if_empty(paths.skill_dir.parent)
        tracker.done("skill", "Removed agent skill")

    flags = cleanup_flag_files(flag_dir or FLAG_DIR)
    if flags:
        tracker.done("flags", "Cleaned up flag files", str(flags))

    logger.info("Uninstalled (%s)", paths.scope)
    return UninstallResult(
        scope=paths.scope,
        removed_template=removed_template,
        settings_outcome=outcome,
        skill_removed=skill_removed,
        flag_files_removed=flags,
    )


def get_status(paths: InstallPaths) -> InstallStatus:
    """Describe what is installed in one scope."""
    meta = read_metadata(paths.meta_file)
    if meta is None:
        return InstallStatus(scope=paths.scope, installed=False)

    config = read_config(paths.config_file) or {}
    settings = read_settings(paths.settings_file)
    hook_events = {
        script: find_hook_events(settings, paths.install_dir / script) for _event, _matcher, script in BASE_HOOKS
    }

    return InstallStatus(
        scope=paths.scope,
        installed=True,
        version=meta.version,
        active_template=meta.active_template,
        installed_at=meta.installed_at,
        thresholds=tuple(config.get("thresholds", [])),
        status_line=get_status_line(settings, paths.bridge_path).kind,
        hook_events=hook_events,
        config_file=paths.config_file,
        settings_file=paths.settings_file,
    )
