"""Threshold store backed by ``config.json``.

The config document is ``{"thresholds": [...], ...}``. Every record is keyed
by its ``level`` string; fields other than ``level`` pass through untouched,
as do any top-level keys besides ``thresholds``.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from context_awareness.errors import ConfigCorruptedError
from context_awareness.paths import get_runtime_dir

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_NAME = "config.default.json"


@dataclass(frozen=True)
class ThresholdUpsertResult:
    """Counts reported by :func:`upsert_thresholds`."""

    added: int
    updated: int


def read_config(config_path: Path) -> dict[str, Any] | None:
    """Read and parse config.json.

    Returns:
        The parsed document, or None when the file does not exist.

    Raises:
        ConfigCorruptedError: If the file exists but is not a JSON object.
    """
    try:
        raw = config_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None

    try:
        config = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ConfigCorruptedError(config_path) from exc

    if not isinstance(config, dict):
        raise ConfigCorruptedError(config_path)
    thresholds = config.get("thresholds", [])
    if not isinstance(thresholds, list) or not all(isinstance(t, dict) for t in thresholds):
        raise ConfigCorruptedError(config_path)
    return config


def write_config(config_path: Path, config: dict[str, Any]) -> None:
    """Write config.json with pretty formatting."""
    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(json.dumps(config, indent=2) + "\n", encoding="utf-8")


def create_default_config(config_path: Path) -> dict[str, Any]:
    """Create config.json from the bundled ``config.default.json``."""
    default_path = get_runtime_dir() / DEFAULT_CONFIG_NAME
    config = json.loads(default_path.read_text(encoding="utf-8"))
    write_config(config_path, config)
    logger.info("Created default config at %s", config_path)
    return config


def merge_thresholds(
    existing: list[dict[str, Any]],
    new_thresholds: list[dict[str, Any]],
) -> tuple[list[dict[str, Any]], int, int]:
    """Merge *new_thresholds* into *existing* by level.

    Existing records whose level is being re-applied are dropped; the new
    records go first, followed by the retained ones in their original order.

    Returns:
        ``(merged, added, updated)``
    """
    new_levels = {t.get("level") for t in new_thresholds}
    kept = [t for t in existing if t.get("level") not in new_levels]

    updated = len(existing) - len(kept)
    added = len(new_thresholds) - updated
    return [*new_thresholds, *kept], added, updated


def upsert_thresholds(config_path: Path, new_thresholds: list[dict[str, Any]]) -> ThresholdUpsertResult:
    """Prepend *new_thresholds*, replacing records with matching levels.

    An absent config.json is treated as an empty one and created.

    Raises:
        ConfigCorruptedError: If config.json exists but cannot be parsed.
    """
    config = read_config(config_path)
    if config is None:
        config = {"thresholds": []}

    merged, added, updated = merge_thresholds(config.get("thresholds", []), new_thresholds)
    config["thresholds"] = merged
    write_config(config_path, config)

    logger.info("Upserted thresholds in %s: %d added, %d updated", config_path, added, updated)
    return ThresholdUpsertResult(added=added, updated=updated)


def remove_thresholds_by_prefix(config_path: Path, prefix: str) -> int:
    """Remove thresholds whose level starts with *prefix*.

    Args:
        config_path: Path to config.json.
        prefix: e.g. ``"memory-"`` removes memory-50, memory-65, memory-80.

    Returns:
        Number of thresholds removed (0 when config.json does not exist).
    """
    config = read_config(config_path)
    if config is None:
        return 0

    before = config.get("thresholds", [])
    remaining = [t for t in before if not str(t.get("level", "")).startswith(prefix)]
    removed = len(before) - len(remaining)

    if removed > 0:
        config["thresholds"] = remaining
        write_config(config_path, config)
        logger.info("Removed %d thresholds with prefix %r from %s", removed, prefix, config_path)
    else:
        logger.debug("No thresholds with prefix %r in %s", prefix, config_path)

    return removed
