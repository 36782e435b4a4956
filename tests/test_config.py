#!/usr/bin/env python3
# this_file: tests/test_config.py
"""Tests for safe settings editing in ConfigManager."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from devhooks.config import HOOK_COMMAND, HOOK_EVENT, HOOK_MATCHER, ConfigManager


@pytest.fixture()
def project(tmp_path: Path) -> Path:
    """Provide an isolated project directory."""
    return tmp_path


def _write_json(path: Path, payload: dict) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload))


def _read_json(path: Path) -> dict:
    return json.loads(path.read_text())


def test_enable_edit_hook_when_no_settings_then_file_created(project: Path) -> None:
    """Enabling creates ``.claude/settings.json`` with the PostToolUse hook."""
    manager = ConfigManager(project)

    manager.enable_edit_hook()

    config = _read_json(project / ".claude" / "settings.json")
    assert config["hooks"][HOOK_EVENT] == [
        {"matcher": HOOK_MATCHER, "hooks": [{"type": "command", "command": HOOK_COMMAND}]}
    ]
    assert manager.is_edit_hook_enabled()


def test_enable_edit_hook_when_run_twice_then_single_entry(project: Path) -> None:
    """Repeated installs replace rather than duplicate the hook."""
    manager = ConfigManager(project)

    manager.enable_edit_hook()
    manager.enable_edit_hook()

    entries = _read_json(manager.claude_config)["hooks"][HOOK_EVENT]
    assert len(entries) == 1


def test_enable_edit_hook_when_other_hooks_present_then_preserved(project: Path) -> None:
    """Unrelated settings and hooks survive installation."""
    settings_path = project / ".claude" / "settings.json"
    foreign = {"matcher": "Bash", "hooks": [{"type": "command", "command": "audit.sh"}]}
    _write_json(settings_path, {"model": "x", "hooks": {HOOK_EVENT: [foreign], "Stop": []}})

    ConfigManager(project).enable_edit_hook()

    config = _read_json(settings_path)
    assert config["model"] == "x"
    assert config["hooks"]["Stop"] == []
    assert config["hooks"][HOOK_EVENT][0] == foreign
    assert len(config["hooks"][HOOK_EVENT]) == 2


def test_disable_edit_hook_when_only_entry_then_containers_removed(project: Path) -> None:
    """Disabling removes empty ``hooks`` containers it leaves behind."""
    manager = ConfigManager(project)
    manager.enable_edit_hook()

    manager.disable_edit_hook()

    assert _read_json(manager.claude_config) == {}
    assert not manager.is_edit_hook_enabled()


def test_disable_edit_hook_when_absent_then_file_untouched(project: Path) -> None:
    """Nothing is rewritten when the hook was never installed."""
    settings_path = project / ".claude" / "settings.json"
    _write_json(settings_path, {"hooks": {"Stop": []}})
    before = settings_path.read_text()

    ConfigManager(project).disable_edit_hook()

    assert settings_path.read_text() == before
    assert not list(settings_path.parent.glob("settings.json.backup.*"))


def test_is_edit_hook_enabled_when_settings_corrupt_then_false(project: Path) -> None:
    """Unreadable settings are reported as not enabled."""
    settings_path = project / ".claude" / "settings.json"
    settings_path.parent.mkdir(parents=True)
    settings_path.write_text("{broken")

    assert ConfigManager(project).is_edit_hook_enabled() is False


def test_enable_edit_hook_when_write_fails_then_original_restored(
    project: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Enable should restore original settings when writing fails."""
    settings_path = project / ".claude" / "settings.json"
    original = {"hooks": {"Stop": []}}
    _write_json(settings_path, original)

    manager = ConfigManager(project)

    def boom(*args, **kwargs):  # type: ignore[no-untyped-def]
        raise RuntimeError("boom")

    monkeypatch.setattr(json, "dump", boom)

    with pytest.raises(RuntimeError):
        manager.enable_edit_hook()

    assert _read_json(settings_path) == original, "Settings must be restored from backup"
    assert not settings_path.with_suffix(".json.tmp").exists()


def test_enable_edit_hook_when_validation_fails_then_new_file_removed(
    project: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """A failed first write leaves no half-written settings behind."""
    manager = ConfigManager(project)

    def fail_validation(self: ConfigManager, path: Path) -> None:  # noqa: ARG001
        raise ValueError("invalid")

    monkeypatch.setattr(ConfigManager, "_validate_json_file", fail_validation)

    with pytest.raises(ValueError):
        manager.enable_edit_hook()

    assert not manager.claude_config.exists()


def test_backup_settings_when_file_present_then_timestamped_copy(project: Path) -> None:
    """Backups sit beside the project's settings file and match its content."""
    manager = ConfigManager(project)
    assert manager.backup_settings() is None

    settings_path = project / ".claude" / "settings.json"
    _write_json(settings_path, {"model": "x"})
    backup = manager.backup_settings()

    assert backup is not None
    assert backup.parent == settings_path.parent
    assert backup.name.startswith("settings.json.backup.")
    assert _read_json(backup) == {"model": "x"}
