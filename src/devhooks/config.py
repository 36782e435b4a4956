#!/usr/bin/env python3
# this_file: src/devhooks/config.py
"""Register the edit hook in a project's Claude settings file.

The :class:`ConfigManager` owns ``<project>/.claude/settings.json``.  Every
write goes to a sibling ``.tmp`` file first, is re-read as a JSON object, and
only then replaces the real file; a timestamped backup is restored if any
step fails.
"""

from __future__ import annotations

import json
import shutil
from datetime import datetime
from pathlib import Path
from typing import Any

from loguru import logger

HOOK_EVENT = "PostToolUse"
HOOK_MATCHER = "Edit|Write|MultiEdit"
HOOK_COMMAND = "devhooks-edit"


class ConfigManager:
    """Add or remove the devhooks ``PostToolUse`` entry for one project."""

    def __init__(self, project_dir: Path | None = None) -> None:
        """Initialise the manager for ``project_dir`` (defaults to the cwd)."""
        self.project_dir = Path(project_dir) if project_dir else Path.cwd()
        self.claude_config = self.project_dir / ".claude" / "settings.json"

    def backup_settings(self) -> Path | None:
        """Copy ``settings.json`` to ``settings.json.backup.<timestamp>``.

        Returns:
            Path | None: The backup, or ``None`` when there is no file yet.
        """
        if not self.claude_config.exists():
            return None
        backup = self.claude_config.with_suffix(
            f".json.backup.{datetime.now():%Y%m%d_%H%M%S}"
        )
        shutil.copy2(self.claude_config, backup)
        logger.debug("Backed up {} to {}", self.claude_config, backup)
        return backup

    def is_edit_hook_enabled(self) -> bool:
        """Check whether a ``PostToolUse`` hook already runs ``devhooks-edit``.

        Returns:
            bool: ``True`` if the hook configuration references the command;
            unreadable settings count as not enabled.
        """
        if not self.claude_config.exists():
            return False
        try:
            hooks = self._load_settings().get("hooks", {})
        except (OSError, ValueError) as error:
            logger.debug("Error checking edit hook: {}", error)
            return False
        return any(self._is_ours(entry) for entry in hooks.get(HOOK_EVENT, []))

    def enable_edit_hook(self) -> None:
        """Write a ``PostToolUse`` hook that runs ``devhooks-edit``.

        Any previous devhooks entry is replaced so repeated installs do not
        stack duplicate hooks.
        """
        config = self._load_settings()
        entries = config.setdefault("hooks", {}).setdefault(HOOK_EVENT, [])
        entries[:] = [entry for entry in entries if not self._is_ours(entry)]
        entries.append(
            {
                "matcher": HOOK_MATCHER,
                "hooks": [{"type": "command", "command": HOOK_COMMAND}],
            }
        )
        self._save_settings(config)
        logger.info("Edit hook enabled in {}", self.claude_config)

    def disable_edit_hook(self) -> None:
        """Remove the devhooks ``PostToolUse`` entry if present."""
        if not self.claude_config.exists():
            return
        config = self._load_settings()
        hooks = config.get("hooks", {})
        entries = hooks.get(HOOK_EVENT, [])
        kept = [entry for entry in entries if not self._is_ours(entry)]
        if len(kept) == len(entries):
            logger.debug("Edit hook already absent; nothing to disable")
            return
        if kept:
            hooks[HOOK_EVENT] = kept
        else:
            del hooks[HOOK_EVENT]
        if not hooks:
            config.pop("hooks", None)
        self._save_settings(config)

    def is_tool_installed(self, tool: str) -> bool:
        """Return whether ``tool`` is discoverable in ``PATH``."""
        return shutil.which(tool) is not None

    @staticmethod
    def _is_ours(entry: Any) -> bool:
        if not isinstance(entry, dict):
            return False
        return any(
            HOOK_COMMAND in str(inner.get("command", ""))
            for inner in entry.get("hooks", [])
            if isinstance(inner, dict)
        )

    def _load_settings(self) -> dict[str, Any]:
        """Return the parsed settings, or ``{}`` when the file is missing."""
        if not self.claude_config.exists():
            return {}
        with open(self.claude_config, encoding="utf-8") as handle:
            return json.load(handle)

    def _save_settings(self, data: dict[str, Any]) -> None:
        """Replace ``settings.json`` with ``data``, rolling back on failure.

        Raises:
            Exception: Whatever the write or validation raised, after the
                previous file (or its absence) has been restored.
        """
        backup = self.backup_settings()
        tmp_path = self.claude_config.with_suffix(".json.tmp")
        try:
            self.claude_config.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as handle:
                json.dump(data, handle, indent=2)
            self._validate_json_file(tmp_path)
            tmp_path.replace(self.claude_config)
        except Exception:
            tmp_path.unlink(missing_ok=True)
            if backup is not None:
                shutil.copy2(backup, self.claude_config)
            else:
                self.claude_config.unlink(missing_ok=True)
            raise

    def _validate_json_file(self, path: Path) -> None:
        """Read ``path`` ensuring it contains a JSON object."""
        with open(path, encoding="utf-8") as handle:
            if not isinstance(json.load(handle), dict):
                raise ValueError(f"{path} must contain a JSON object")


__all__ = ["ConfigManager", "HOOK_COMMAND", "HOOK_EVENT", "HOOK_MATCHER"]
