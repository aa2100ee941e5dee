"""Install metadata stored in ``.install-meta.json``."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from context_awareness import __version__
from context_awareness.errors import ConfigCorruptedError

logger = logging.getLogger(__name__)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


@dataclass
class InstallMetadata:
    """What is installed in one scope."""

    scope: str
    version: str = __version__
    active_template: str | None = None
    installed_at: str = field(default_factory=_now_iso)

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "scope": self.scope,
            "activeTemplate": self.active_template,
            "installedAt": self.installed_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> InstallMetadata:
        active = data.get("activeTemplate")
        return cls(
            scope=str(data.get("scope") or "local"),
            version=str(data.get("version") or "unknown"),
            active_template=active if isinstance(active, str) and active else None,
            installed_at=str(data.get("installedAt") or ""),
        )


def read_metadata(meta_path: Path) -> InstallMetadata | None:
    """Return the install metadata, or None when nothing is installed.

    Raises:
        ConfigCorruptedError: If the metadata file is not a JSON object.
    """
    try:
        raw = meta_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None

    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ConfigCorruptedError(meta_path) from exc
    if not isinstance(data, dict):
        raise ConfigCorruptedError(meta_path)
    return InstallMetadata.from_dict(data)


def write_metadata(meta_path: Path, meta: InstallMetadata) -> None:
    meta_path.parent.mkdir(parents=True, exist_ok=True)
    meta_path.write_text(json.dumps(meta.to_dict(), indent=2) + "\n", encoding="utf-8")
    logger.debug("Wrote install metadata to %s", meta_path)
