from __future__ import annotations

import json
from pathlib import Path

import pytest

from context_awareness.paths import ASSET_ROOT_ENV, InstallPaths, get_paths

ALPHA_THRESHOLDS = [
    {"level": "alpha-50", "percent": 50, "message": "alpha half"},
    {"level": "alpha-80", "percent": 80, "message": "alpha late"},
]
BETA_THRESHOLDS = [{"level": "beta-90", "percent": 90}]


def _write_json(path: Path, data: object) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")


def _write_script(path: Path, body: str = "exit 0") -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(f"#!/usr/bin/env bash\n{body}\n", encoding="utf-8")


def build_asset_root(root: Path) -> Path:
    """Create a minimal runtime/templates/docs tree."""
    runtime = root / "runtime"
    for script in ("bridge.sh", "check-thresholds.sh", "reset.sh"):
        _write_script(runtime / script)
    _write_json(
        runtime / "config.default.json",
        {"thresholds": [{"level": "warning-80", "percent": 80}], "repeat_mode": "once_per_session"},
    )

    (root / "docs").mkdir(parents=True)
    (root / "docs" / "SKILL.md").write_text("# skill\n", encoding="utf-8")

    templates = root / "templates"
    _write_json(
        templates / "catalog.json",
        {
            "templates": [
                {"id": "alpha", "name": "Alpha", "description": "First template"},
                {"id": "beta", "name": "Beta", "description": "Second template"},
                {"id": "broken", "name": "Broken", "description": "Manifest is not JSON"},
            ]
        },
    )

    alpha = templates / "alpha"
    _write_json(
        alpha / "template.json",
        {
            "thresholds_file": "thresholds.json",
            "thresholds_level_prefix": "alpha-",
            "hooks": [
                {"event": "PreToolUse", "matcher": "Bash", "script": "hooks/alpha-check.sh"},
                {"event": "SessionStart", "matcher": "compact", "script": "hooks/alpha-restore.sh"},
            ],
            "agents": [{"source": "agents/alpha-agent.md", "dest": "agents/alpha-agent.md"}],
            "directories": ["alpha-notes"],
            "claude_snippet": "snippet.md",
            "claude_snippet_marker": "<!-- alpha -->",
        },
    )
    _write_json(alpha / "thresholds.json", ALPHA_THRESHOLDS)
    _write_script(alpha / "hooks" / "alpha-check.sh")
    _write_script(alpha / "hooks" / "alpha-restore.sh")
    (alpha / "agents").mkdir(parents=True, exist_ok=True)
    (alpha / "agents" / "alpha-agent.md").write_text("alpha agent\n", encoding="utf-8")
    (alpha / "snippet.md").write_text("<!-- alpha -->\n## Alpha\n", encoding="utf-8")

    beta = templates / "beta"
    _write_json(
        beta / "template.json",
        {
            "thresholds_file": "thresholds.json",
            "thresholds_level_prefix": "beta-",
            "hooks": [{"event": "Stop", "matcher": "", "script": "hooks/beta-stop.sh"}],
            "agents": [{"source": "beta.md", "dest": "agents/beta/beta.md"}],
        },
    )
    _write_json(beta / "thresholds.json", BETA_THRESHOLDS)
    _write_script(beta / "hooks" / "beta-stop.sh")
    (beta / "beta.md").write_text("beta agent\n", encoding="utf-8")

    broken = templates / "broken"
    broken.mkdir(parents=True)
    (broken / "template.json").write_text("{not json", encoding="utf-8")

    return root


@pytest.fixture()
def asset_root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    root = build_asset_root(tmp_path / "assets")
    monkeypatch.setenv(ASSET_ROOT_ENV, str(root))
    return root


@pytest.fixture()
def paths(tmp_path: Path) -> InstallPaths:
    project = tmp_path / "project"
    project.mkdir()
    return get_paths(False, cwd=project, home=tmp_path / "home")


@pytest.fixture()
def installed(asset_root: Path, paths: InstallPaths) -> InstallPaths:
    from context_awareness.installer import install_base

    install_base(paths)
    return paths