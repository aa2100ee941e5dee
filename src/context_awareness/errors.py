"""Exception hierarchy for cc-context-awareness operations."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any


class ErrorCode(str, Enum):
    """Machine-readable error codes."""

    TEMPLATE_NOT_FOUND = "TEMPLATE_NOT_FOUND"
    BASE_NOT_INSTALLED = "BASE_NOT_INSTALLED"
    CONFIG_CORRUPTED = "CONFIG_CORRUPTED"
    SETTINGS_CORRUPTED = "SETTINGS_CORRUPTED"
    NOT_INSTALLED = "NOT_INSTALLED"
    MANIFEST_INVALID = "MANIFEST_INVALID"


class ContextAwarenessError(Exception):
    """Base exception for all user-facing failures.

    Carries a human-readable message, a machine-readable ``code`` and a
    free-form ``context`` mapping (offending id, path, ...).
    """

    code: ErrorCode

    def __init__(self, message: str, code: ErrorCode, context: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.context = context or {}

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": type(self).__name__,
            "message": self.message,
            "code": self.code.value,
            "context": self.context,
        }


class TemplateNotFoundError(ContextAwarenessError):
    """Template id is not in the catalog or has no manifest."""

    def __init__(self, template_id: str):
        self.template_id = template_id
        super().__init__(
            f'Template "{template_id}" not found. '
            'Run "cc-context-awareness list" to see available templates.',
            ErrorCode.TEMPLATE_NOT_FOUND,
            {"id": template_id},
        )


class BaseNotInstalledError(ContextAwarenessError):
    """A template operation was requested before the base install."""

    def __init__(self) -> None:
        super().__init__(
            'cc-context-awareness is not installed. Run "cc-context-awareness install" first.',
            ErrorCode.BASE_NOT_INSTALLED,
        )


class ConfigCorruptedError(ContextAwarenessError):
    """config.json (or install metadata) exists but is not valid JSON."""

    def __init__(self, path: Path):
        self.path = path
        super().__init__(
            f"Config file contains invalid JSON: {path}\nFix the file manually and re-run.",
            ErrorCode.CONFIG_CORRUPTED,
            {"path": str(path)},
        )


class SettingsCorruptedError(ContextAwarenessError):
    """The host settings file exists but is not a JSON object."""

    def __init__(self, path: Path):
        self.path = path
        super().__init__(
            f"Settings file contains invalid JSON: {path}\nFix the file manually and re-run.",
            ErrorCode.SETTINGS_CORRUPTED,
            {"path": str(path)},
        )


class NotInstalledError(ContextAwarenessError):
    """Nothing is installed in the requested scope."""

    def __init__(self, scope: str):
        self.scope = scope
        super().__init__(
            f"cc-context-awareness is not installed here ({scope}).",
            ErrorCode.NOT_INSTALLED,
            {"scope": scope},
        )


class ManifestInvalidError(ContextAwarenessError):
    """A template manifest or thresholds file does not parse or validate."""

    def __init__(self, template_id: str, path: Path, reason: str):
        self.template_id = template_id
        self.path = path
        super().__init__(
            f'Template "{template_id}" has an invalid file {path}: {reason}',
            ErrorCode.MANIFEST_INVALID,
            {"id": template_id, "path": str(path)},
        )


__all__ = [
    "BaseNotInstalledError",
    "ConfigCorruptedError",
    "ContextAwarenessError",
    "ErrorCode",
    "ManifestInvalidError",
    "NotInstalledError",
    "SettingsCorruptedError",
    "TemplateNotFoundError",
]
