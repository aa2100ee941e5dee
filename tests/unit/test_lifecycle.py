"""Template install, refresh, switch and removal against a fake asset root."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from context_awareness.errors import BaseNotInstalledError, ManifestInvalidError, TemplateNotFoundError
from context_awareness.installer import remove_template
from context_awareness.lifecycle import SNIPPET_SEPARATOR, install_template, remove_template_assets
from context_awareness.metadata import read_metadata
from context_awareness.paths import InstallPaths
from context_awareness.steps import StepTracker


def _load(path: Path) -> dict:
    return json.loads(path.read_text(encoding="utf-8"))


def _levels(paths: InstallPaths) -> list[str]:
    return [t["level"] for t in _load(paths.config_file)["thresholds"]]


def _commands(paths: InstallPaths) -> dict[str, list[str]]:
    hooks = _load(paths.settings_file).get("hooks", {})
    return {event: [h["command"] for entry in entries for h in entry["hooks"]] for event, entries in hooks.items()}


class TestInstallTemplate:
    def test_installs_every_part(self, installed: InstallPaths) -> None:
        tracker = StepTracker("test")

        result = install_template("alpha", installed, tracker=tracker)

        assert result.replaced is None
        assert (result.thresholds.added, result.thresholds.updated) == (2, 0)
        assert _levels(installed) == ["alpha-50", "alpha-80", "warning-80"]

        alpha_dir = installed.claude_dir / "alpha"
        check = alpha_dir / "hooks" / "alpha-check.sh"
        restore = alpha_dir / "hooks" / "alpha-restore.sh"
        assert check.is_file()
        assert restore.is_file()
        commands = _commands(installed)
        assert commands["PreToolUse"] == [str(installed.check_path), str(check)]
        assert commands["SessionStart"] == [str(installed.reset_path), str(restore)]
        settings = _load(installed.settings_file)
        assert settings["hooks"]["PreToolUse"][1]["matcher"] == "Bash"

        assert (installed.claude_dir / "agents" / "alpha-agent.md").read_text(encoding="utf-8") == "alpha agent\n"
        assert (installed.claude_dir / "alpha-notes").is_dir()
        assert installed.claude_md.read_text(encoding="utf-8") == "<!-- alpha -->\n## Alpha\n"
        assert result.claude_md == "created"

        assert read_metadata(installed.meta_file).active_template == "alpha"
        assert tracker.steps[-1]["key"] == "metadata"
        assert tracker.steps[-1]["status"] == "done"

    def test_reinstall_is_idempotent(self, installed: InstallPaths) -> None:
        install_template("alpha", installed)
        settings_before = installed.settings_file.read_text(encoding="utf-8")
        config_before = installed.config_file.read_text(encoding="utf-8")

        result = install_template("alpha", installed)

        assert result.replaced is None
        assert result.claude_md == "present"
        assert installed.settings_file.read_text(encoding="utf-8") == settings_before
        assert installed.config_file.read_text(encoding="utf-8") == config_before
        assert installed.claude_md.read_text(encoding="utf-8").count("<!-- alpha -->") == 1

    def test_snippet_appended_to_existing_claude_md(self, installed: InstallPaths) -> None:
        installed.claude_md.write_text("# Project\n", encoding="utf-8")

        result = install_template("alpha", installed)

        assert result.claude_md == "appended"
        expected = "# Project\n" + SNIPPET_SEPARATOR + "<!-- alpha -->\n## Alpha\n"
        assert installed.claude_md.read_text(encoding="utf-8") == expected

    def test_claude_md_can_be_skipped(self, installed: InstallPaths) -> None:
        result = install_template("alpha", installed, claude_md=False)

        assert result.claude_md == "disabled"
        assert not installed.claude_md.exists()

    def test_requires_base_install(self, asset_root: Path, paths: InstallPaths) -> None:
        with pytest.raises(BaseNotInstalledError):
            install_template("alpha", paths)

        assert not paths.claude_dir.exists()

    def test_unknown_template_changes_nothing(self, installed: InstallPaths) -> None:
        install_template("alpha", installed)
        settings_before = installed.settings_file.read_text(encoding="utf-8")

        with pytest.raises(TemplateNotFoundError):
            install_template("nope", installed)

        assert installed.settings_file.read_text(encoding="utf-8") == settings_before
        assert read_metadata(installed.meta_file).active_template == "alpha"

    def test_invalid_manifest_keeps_active_template(self, installed: InstallPaths) -> None:
        install_template("alpha", installed)

        with pytest.raises(ManifestInvalidError):
            install_template("broken", installed)

        assert read_metadata(installed.meta_file).active_template == "alpha"
        assert (installed.claude_dir / "alpha").is_dir()


class TestTemplateSwitch:
    def test_switch_removes_previous_template(self, installed: InstallPaths) -> None:
        install_template("alpha", installed)

        result = install_template("beta", installed)

        assert result.replaced == "alpha"
        assert _levels(installed) == ["beta-90", "warning-80"]
        assert not (installed.claude_dir / "alpha").exists()
        assert not (installed.claude_dir / "agents" / "alpha-agent.md").exists()

        commands = _commands(installed)
        assert commands["PreToolUse"] == [str(installed.check_path)]
        assert commands["SessionStart"] == [str(installed.reset_path)]
        assert commands["Stop"] == [str(installed.claude_dir / "beta" / "hooks" / "beta-stop.sh")]

        assert (installed.claude_dir / "agents" / "beta" / "beta.md").is_file()
        assert read_metadata(installed.meta_file).active_template == "beta"

    def test_switch_back_leaves_no_trace_of_other_template(self, installed: InstallPaths) -> None:
        install_template("alpha", installed)
        install_template("beta", installed)

        install_template("alpha", installed)

        assert _levels(installed) == ["alpha-50", "alpha-80", "warning-80"]
        assert "Stop" not in _commands(installed)
        assert not (installed.claude_dir / "beta").exists()
        assert not (installed.claude_dir / "agents" / "beta").exists()
        assert read_metadata(installed.meta_file).active_template == "alpha"


class TestRemoveTemplate:
    def test_remove_restores_base_state(self, installed: InstallPaths) -> None:
        settings_before = _load(installed.settings_file)
        install_template("alpha", installed)

        result = remove_template("alpha", installed)

        assert result.removed is True
        assert _load(installed.settings_file) == settings_before
        assert _levels(installed) == ["warning-80"]
        assert not (installed.claude_dir / "alpha").exists()
        assert not (installed.claude_dir / "agents").exists()
        assert installed.claude_dir.is_dir()
        assert read_metadata(installed.meta_file).active_template is None

    def test_user_data_is_kept(self, installed: InstallPaths) -> None:
        install_template("alpha", installed)
        (installed.claude_dir / "alpha-notes" / "note.md").write_text("keep me", encoding="utf-8")

        remove_template("alpha", installed)

        assert (installed.claude_dir / "alpha-notes" / "note.md").is_file()
        assert "<!-- alpha -->" in installed.claude_md.read_text(encoding="utf-8")

    def test_remove_inactive_template_is_noop(self, installed: InstallPaths) -> None:
        install_template("alpha", installed)
        settings_before = installed.settings_file.read_text(encoding="utf-8")

        result = remove_template("beta", installed)

        assert result.removed is False
        assert result.active_template == "alpha"
        assert installed.settings_file.read_text(encoding="utf-8") == settings_before

    def test_remove_without_base_install(self, asset_root: Path, paths: InstallPaths) -> None:
        with pytest.raises(BaseNotInstalledError):
            remove_template("alpha", paths)

    def test_fallback_when_manifest_disappears(self, installed: InstallPaths, asset_root: Path) -> None:
        install_template("alpha", installed)
        (asset_root / "templates" / "alpha" / "template.json").unlink()

        result = remove_template_assets("alpha", installed)

        assert result.fallback is True
        assert not (installed.claude_dir / "alpha").exists()
        # Without a manifest nothing else is known about the template.
        assert "alpha-50" in _levels(installed)

    def test_fallback_clears_active_template(self, installed: InstallPaths, asset_root: Path) -> None:
        install_template("alpha", installed)
        (asset_root / "templates" / "alpha" / "template.json").write_text("{", encoding="utf-8")

        result = remove_template("alpha", installed)

        assert result.removed is True
        assert read_metadata(installed.meta_file).active_template is None

    def test_fallback_with_path_like_template_id(self, installed: InstallPaths) -> None:
        result = remove_template_assets("gone/away", installed)

        assert result.fallback is True
        assert installed.install_dir.is_dir()


class TestPartialInstall:
    def test_missing_hook_script_stops_after_thresholds(self, installed: InstallPaths, asset_root: Path) -> None:
        (asset_root / "templates" / "alpha" / "hooks" / "alpha-restore.sh").unlink()
        settings_before = installed.settings_file.read_text(encoding="utf-8")

        with pytest.raises(FileNotFoundError):
            install_template("alpha", installed)

        assert _levels(installed)[:2] == ["alpha-50", "alpha-80"]
        assert installed.settings_file.read_text(encoding="utf-8") == settings_before
        assert read_metadata(installed.meta_file).active_template is None

    def test_rerun_after_fixing_the_bundle_finishes(self, installed: InstallPaths, asset_root: Path) -> None:
        restore = asset_root / "templates" / "alpha" / "hooks" / "alpha-restore.sh"
        content = restore.read_text(encoding="utf-8")
        restore.unlink()
        with pytest.raises(FileNotFoundError):
            install_template("alpha", installed)
        restore.write_text(content, encoding="utf-8")

        install_template("alpha", installed)

        assert _levels(installed) == ["alpha-50", "alpha-80", "warning-80"]
        assert read_metadata(installed.meta_file).active_template == "alpha"
