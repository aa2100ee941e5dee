"""Host settings patching: ``statusLine`` and the ``hooks`` registry.

The settings document is shared with the host application and with the
user. Only two sub-fields are owned here:

- ``statusLine``: one shell pipeline. The bridge command is either the whole
  pipeline or piped in front of a foreign command (``bridge | downstream``).
- ``hooks``: ``{event: [{"matcher": str, "hooks": [{"type": "command",
  "command": str}]}]}``.

Every other key is carried through untouched. Functions that take a
``settings`` dict mutate it in place; the caller reads it with
:func:`read_settings` and persists it with :func:`write_settings`.
"""

from __future__ import annotations

import json
import logging
import re
import string
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Literal

from context_awareness.errors import SettingsCorruptedError

logger = logging.getLogger(__name__)

Settings = dict[str, Any]

_SEPARATOR_CHARS = "|" + string.whitespace
_LEADING_PIPE = re.compile(r"^\|\s*")
_TRAILING_PIPE = re.compile(r"\s*\|\s*$")


# ---------------------------------------------------------------------------
# Document I/O
# ---------------------------------------------------------------------------


def read_settings(settings_path: Path) -> Settings:
    """Read the settings file. Returns an empty dict if it doesn't exist.

    Raises:
        SettingsCorruptedError: If the file exists but is not a JSON object.
    """
    try:
        raw = settings_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return {}

    try:
        settings = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise SettingsCorruptedError(settings_path) from exc

    if not isinstance(settings, dict):
        raise SettingsCorruptedError(settings_path)
    return settings


def write_settings(settings_path: Path, settings: Settings) -> Literal["written", "removed"]:
    """Write the settings file, or delete it when *settings* is empty."""
    if not settings:
        settings_path.unlink(missing_ok=True)
        logger.info("Removed empty settings file %s", settings_path)
        return "removed"

    settings_path.parent.mkdir(parents=True, exist_ok=True)
    settings_path.write_text(json.dumps(settings, indent=2) + "\n", encoding="utf-8")
    return "written"


# ---------------------------------------------------------------------------
# statusLine
# ---------------------------------------------------------------------------


class StatusLineKind(str, Enum):
    """Ownership state of the ``statusLine`` pipeline."""

    ABSENT = "absent"
    OWNED = "owned"
    COMPOSED = "composed"
    FOREIGN = "foreign"


class StatusLineAction(str, Enum):
    """What :func:`set_status_line` / :func:`remove_status_line` did."""

    CREATED = "created"
    PREPENDED = "prepended"
    ALREADY_PRESENT = "already_present"
    REMOVED = "removed"
    RESTORED = "restored"
    NOT_PRESENT = "not_present"


@dataclass(frozen=True)
class StatusLine:
    """Parsed ``statusLine`` value relative to one bridge path.

    Attributes:
        kind: Ownership state.
        raw: The full command string as stored (empty when absent).
        downstream: The foreign command piped after the bridge (COMPOSED only),
            with surrounding whitespace trimmed.
    """

    kind: StatusLineKind
    raw: str = ""
    downstream: str = ""

    @classmethod
    def parse(cls, value: Any, bridge_path: str) -> StatusLine:
        command = _command_of(value)
        if not command:
            return cls(StatusLineKind.ABSENT)
        if bridge_path not in command:
            return cls(StatusLineKind.FOREIGN, raw=command)

        remainder = command.replace(bridge_path, "", 1).strip()
        if not remainder.strip(_SEPARATOR_CHARS):
            return cls(StatusLineKind.OWNED, raw=command)

        downstream = _TRAILING_PIPE.sub("", _LEADING_PIPE.sub("", remainder))
        return cls(StatusLineKind.COMPOSED, raw=command, downstream=downstream)

    @property
    def has_bridge(self) -> bool:
        return self.kind in (StatusLineKind.OWNED, StatusLineKind.COMPOSED)


@dataclass(frozen=True)
class StatusLineResult:
    action: StatusLineAction
    command: str | None = None


def _command_of(value: Any) -> str:
    """Extract the command string from a bare-string or object ``statusLine``."""
    if isinstance(value, str):
        return value
    if isinstance(value, dict):
        command = value.get("command")
        return command if isinstance(command, str) else ""
    return ""


def _store_command(settings: Settings, command: str) -> None:
    # Object form keeps its other keys (type, padding, ...).
    current = settings.get("statusLine")
    if isinstance(current, dict):
        settings["statusLine"] = {**current, "command": command}
    else:
        settings["statusLine"] = command


def get_status_line(settings: Settings, bridge_path: str | Path) -> StatusLine:
    return StatusLine.parse(settings.get("statusLine"), str(bridge_path))


def set_status_line(settings: Settings, bridge_path: str | Path) -> StatusLineResult:
    """Install the bridge into ``statusLine``.

    - No statusLine: the bridge becomes the sole command (``created``).
    - Bridge already present anywhere in the command: no-op (``already_present``).
    - Another command: pipe through the bridge, ``"bridge | existing"``
      (``prepended``).
    """
    bridge = str(bridge_path)
    state = get_status_line(settings, bridge)

    if state.kind is StatusLineKind.ABSENT:
        _store_command(settings, bridge)
        logger.info("statusLine set to %s", bridge)
        return StatusLineResult(StatusLineAction.CREATED, bridge)

    if state.has_bridge:
        logger.debug("statusLine already contains %s", bridge)
        return StatusLineResult(StatusLineAction.ALREADY_PRESENT, state.raw)

    piped = f"{bridge} | {state.raw}"
    _store_command(settings, piped)
    logger.info("Bridge prepended to statusLine: %s", piped)
    return StatusLineResult(StatusLineAction.PREPENDED, piped)


def remove_status_line(settings: Settings, bridge_path: str | Path) -> StatusLineResult:
    """Take the bridge back out of ``statusLine``.

    - Bridge is the only command: delete the key, or just its ``command``
      when the object form carries other keys (``removed``).
    - ``"bridge | downstream"``: restore the downstream command (``restored``).
    - No bridge present: no-op (``not_present``).
    """
    state = get_status_line(settings, str(bridge_path))

    if state.kind is StatusLineKind.OWNED:
        current = settings["statusLine"]
        if isinstance(current, dict) and current.keys() - {"command"}:
            settings["statusLine"] = {k: v for k, v in current.items() if k != "command"}
        else:
            del settings["statusLine"]
        logger.info("Removed statusLine %s", state.raw)
        return StatusLineResult(StatusLineAction.REMOVED)

    if state.kind is StatusLineKind.COMPOSED:
        _store_command(settings, state.downstream)
        logger.info("Restored statusLine to %s", state.downstream)
        return StatusLineResult(StatusLineAction.RESTORED, state.downstream)

    return StatusLineResult(StatusLineAction.NOT_PRESENT, state.raw or None)


# ---------------------------------------------------------------------------
# hooks
# ---------------------------------------------------------------------------


def _entry_has_command(entry: Any, command_path: str) -> bool:
    if not isinstance(entry, dict) or not isinstance(entry.get("hooks"), list):
        return False
    return any(isinstance(h, dict) and h.get("command") == command_path for h in entry["hooks"])


def add_hook(settings: Settings, event: str, matcher: str, command_path: str | Path) -> bool:
    """Register *command_path* under *event*.

    A command already registered under *event* counts as a duplicate no
    matter which matcher it was registered with.

    Returns:
        True if added, False if duplicate.
    """
    command = str(command_path)
    hooks = settings.setdefault("hooks", {})
    entries = hooks.setdefault(event, [])

    if any(_entry_has_command(entry, command) for entry in entries):
        logger.debug("Hook %s already registered for %s", command, event)
        return False

    entries.append(
        {
            "matcher": matcher,
            "hooks": [{"type": "command", "command": command}],
        }
    )
    logger.info("Registered %s hook (matcher=%r): %s", event, matcher, command)
    return True


def remove_hook(settings: Settings, command_path: str | Path) -> bool:
    """Remove every registration entry that runs *command_path*.

    Matching is per entry: an entry is dropped whole when any of its
    commands matches, taking co-registered commands with it. Event lists this
    call empties are deleted, and so is ``hooks`` once no events remain.
    Nothing changes when the command is not registered.

    Returns:
        True if at least one entry was removed.
    """
    hooks = settings.get("hooks")
    if not isinstance(hooks, dict):
        return False

    command = str(command_path)
    found = False

    for event in list(hooks):
        entries = hooks[event]
        if not isinstance(entries, list):
            continue
        remaining = [entry for entry in entries if not _entry_has_command(entry, command)]
        if len(remaining) == len(entries):
            continue

        found = True
        logger.info("Removed %s hook: %s", event, command)
        if remaining:
            hooks[event] = remaining
        else:
            del hooks[event]

    if found and not hooks:
        del settings["hooks"]

    return found


def find_hook_events(settings: Settings, command_path: str | Path) -> list[str]:
    """Return the events under which *command_path* is registered."""
    hooks = settings.get("hooks")
    if not isinstance(hooks, dict):
        return []

    command = str(command_path)
    return [
        event
        for event, entries in hooks.items()
        if isinstance(entries, list) and any(_entry_has_command(entry, command) for entry in entries)
    ]
