"""Template install/remove lifecycle.

At most one template is active per install scope. Installing a different
template first removes the active one completely; reinstalling the active
template refreshes it in place.

Install steps run in a fixed order and are not rolled back when a later step
fails: every step is idempotent, so re-running the install finishes the job.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from context_awareness.config import ThresholdUpsertResult, remove_thresholds_by_prefix, upsert_thresholds
from context_awareness.errors import BaseNotInstalledError, ManifestInvalidError, TemplateNotFoundError
from context_awareness.metadata import read_metadata, write_metadata
from context_awareness.paths import InstallPaths
from context_awareness.placement import copy_file, ensure_dir, remove_dir_if_empty, remove_path
from context_awareness.settings import add_hook, read_settings, remove_hook, write_settings
from context_awareness.steps import StepTracker
from context_awareness.templates import (
    TemplateManifest,
    TemplateSummary,
    get_template_dir,
    load_catalog,
    load_template_manifest,
    load_template_thresholds,
)

logger = logging.getLogger(__name__)

SNIPPET_SEPARATOR = "\n---\n\n"


@dataclass(frozen=True)
class TemplateInstallResult:
    """Outcome of :func:`install_template`."""

    template_id: str
    name: str
    replaced: str | None
    thresholds: ThresholdUpsertResult | None
    hooks_registered: tuple[str, ...]
    agents_installed: tuple[str, ...]
    directories_created: tuple[str, ...]
    claude_md: str


@dataclass(frozen=True)
class TemplateRemovalResult:
    """Outcome of :func:`remove_template_assets`."""

    template_id: str
    fallback: bool
    thresholds_removed: int = 0
    hooks_removed: int = 0
    agents_removed: tuple[str, ...] = ()


def require_template(template_id: str) -> TemplateSummary:
    """Return the catalog entry for *template_id*.

    Raises:
        TemplateNotFoundError: If the catalog has no such template.
    """
    entry = load_catalog().find(template_id)
    if entry is None:
        raise TemplateNotFoundError(template_id)
    return entry


def prepare_template(template_id: str) -> tuple[TemplateSummary, TemplateManifest, list[dict[str, Any]]]:
    """Load and validate everything a template install reads, without writing.

    Raises:
        TemplateNotFoundError: If the id is unknown or has no manifest.
        ManifestInvalidError: If the manifest or thresholds file is invalid.
    """
    entry = require_template(template_id)
    manifest = load_template_manifest(template_id)
    thresholds = load_template_thresholds(template_id, manifest)
    return entry, manifest, thresholds


def _apply_claude_snippet(manifest: TemplateManifest, template_dir: Path, claude_md: Path) -> str:
    if not manifest.claude_snippet:
        return "none"

    snippet_path = template_dir / manifest.claude_snippet
    if not snippet_path.is_file():
        logger.warning("Snippet %s not found, CLAUDE.md left alone", snippet_path)
        return "missing"

    snippet = snippet_path.read_text(encoding="utf-8")
    if not claude_md.exists():
        claude_md.write_text(snippet, encoding="utf-8")
        return "created"

    marker = manifest.claude_snippet_marker
    if marker and marker in claude_md.read_text(encoding="utf-8"):
        return "present"

    with claude_md.open("a", encoding="utf-8") as fh:
        fh.write(SNIPPET_SEPARATOR + snippet)
    return "appended"


def install_template(
    template_id: str,
    paths: InstallPaths,
    *,
    claude_md: bool = True,
    tracker: StepTracker | None = None,
) -> TemplateInstallResult:
    """Install a template: thresholds, hooks, agents, directories, CLAUDE.md.

    Args:
        template_id: Catalog id of the template.
        paths: Resolved install paths for the target scope.
        claude_md: Append the template's snippet to the project CLAUDE.md.
        tracker: Receives one entry per finished step.

    Raises:
        TemplateNotFoundError: Before any mutation, if the id is unknown.
        ManifestInvalidError: Before any mutation, if its files are invalid.
        BaseNotInstalledError: If the base system has not been installed.
    """
    tracker = tracker or StepTracker(f"Install {template_id}")

    entry, manifest, new_thresholds = prepare_template(template_id)
    template_dir = get_template_dir(template_id)
    install_dir = paths.template_install_dir(template_id)

    meta = read_metadata(paths.meta_file)
    if meta is None:
        raise BaseNotInstalledError()

    replaced = None
    if meta.active_template and meta.active_template != template_id:
        replaced = meta.active_template
        logger.info("Template %s is active; removing it before installing %s", replaced, template_id)
        remove_template_assets(replaced, paths, tracker=tracker)
        meta.active_template = None
        write_metadata(paths.meta_file, meta)
        tracker.done("replace", f"Removed {replaced}")

    settings = read_settings(paths.settings_file)

    thresholds = None
    if new_thresholds:
        thresholds = upsert_thresholds(paths.config_file, new_thresholds)
        levels = ", ".join(t["level"] for t in new_thresholds)
        tracker.done("thresholds", "Thresholds", f"{len(new_thresholds)}: {levels}")

    hooks_registered: list[str] = []
    for hook in manifest.hooks:
        dest = copy_file(template_dir / hook.script, install_dir / hook.script, executable=True)
        add_hook(settings, hook.event, hook.matcher, dest)
        hooks_registered.append(hook.script)
        tracker.done(f"hook:{hook.script}", f"Hook {hook.script}", hook.event)

    agents_installed: list[str] = []
    for agent in manifest.agents:
        copy_file(template_dir / agent.source, paths.claude_dir / agent.dest)
        agents_installed.append(agent.dest)
        tracker.done(f"agent:{agent.dest}", f"Agent {Path(agent.dest).name}")

    for directory in manifest.directories:
        ensure_dir(paths.claude_dir / directory)
    if manifest.directories:
        tracker.done(
            "directories",
            "Directories",
            ", ".join(f".claude/{d}/" for d in manifest.directories),
        )

    outcome = write_settings(paths.settings_file, settings)
    tracker.done("settings", f"Settings {paths.settings_file.name}", outcome)

    if claude_md:
        snippet_state = _apply_claude_snippet(manifest, template_dir, paths.claude_md)
        if snippet_state in ("created", "appended"):
            tracker.done("claude_md", "CLAUDE.md", snippet_state)
        elif snippet_state == "present":
            tracker.skip("claude_md", "instructions already present")
    else:
        snippet_state = "disabled"

    meta.active_template = template_id
    write_metadata(paths.meta_file, meta)
    tracker.done("metadata", "Active template", template_id)

    logger.info("Installed template %s (%s)", template_id, paths.scope)
    return TemplateInstallResult(
        template_id=template_id,
        name=entry.name,
        replaced=replaced,
        thresholds=thresholds,
        hooks_registered=tuple(hooks_registered),
        agents_installed=tuple(agents_installed),
        directories_created=tuple(manifest.directories),
        claude_md=snippet_state,
    )


def _remove_template_fallback(
    template_id: str,
    paths: InstallPaths,
    tracker: StepTracker,
) -> TemplateRemovalResult:
    """Best-effort removal when the template's manifest cannot be loaded.

    Only the template's own install directory is deleted; thresholds, hooks
    and agents it may have registered are left for the user to clean up.
    """
    try:
        install_dir = paths.template_install_dir(template_id)
    except ValueError:
        logger.warning("Template id %r is not a directory name, skipping file cleanup", template_id)
        tracker.skip(f"fallback:{template_id}", "invalid template id")
        return TemplateRemovalResult(template_id=template_id, fallback=True)

    if remove_path(install_dir):
        tracker.done(f"fallback:{template_id}", f"Removed {install_dir.name}/", "best-effort")
    else:
        tracker.skip(f"fallback:{template_id}", "nothing to remove")
    return TemplateRemovalResult(template_id=template_id, fallback=True)


def remove_template_assets(
    template_id: str,
    paths: InstallPaths,
    *,
    tracker: StepTracker | None = None,
) -> TemplateRemovalResult:
    """Undo everything :func:`install_template` registered for *template_id*.

    Used both by ``remove`` and when switching templates. Metadata is not
    touched here; callers clear ``activeTemplate`` themselves.
    """
    tracker = tracker or StepTracker(f"Remove {template_id}")

    try:
        manifest = load_template_manifest(template_id)
        install_dir = paths.template_install_dir(template_id)
    except (TemplateNotFoundError, ManifestInvalidError, ValueError) as exc:
        logger.warning("Could not load manifest for %s (%s), doing best-effort cleanup", template_id, exc)
        return _remove_template_fallback(template_id, paths, tracker)

    settings = read_settings(paths.settings_file)

    thresholds_removed = 0
    if manifest.thresholds_level_prefix:
        thresholds_removed = remove_thresholds_by_prefix(paths.config_file, manifest.thresholds_level_prefix)
        if thresholds_removed:
            tracker.done(f"thresholds:{template_id}", "Removed thresholds", str(thresholds_removed))

    hooks_removed = sum(1 for hook in manifest.hooks if remove_hook(settings, install_dir / hook.script))
    if manifest.hooks:
        tracker.done(f"hooks:{template_id}", "Removed hooks from settings", str(hooks_removed))

    agents_removed: list[str] = []
    for agent in manifest.agents:
        agent_path = paths.claude_dir / agent.dest
        if remove_path(agent_path):
            agents_removed.append(agent.dest)
            tracker.done(f"agent:{agent.dest}", f"Removed {agent_path.name}")
        parent = agent_path.parent
        if parent != paths.claude_dir and paths.claude_dir in parent.parents:
            remove_dir_if_empty(parent)

    write_settings(paths.settings_file, settings)
    remove_path(install_dir)

    logger.info("Removed template %s (%s)", template_id, paths.scope)
    return TemplateRemovalResult(
        template_id=template_id,
        fallback=False,
        thresholds_removed=thresholds_removed,
        hooks_removed=hooks_removed,
        agents_removed=tuple(agents_removed),
    )
