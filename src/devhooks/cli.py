#!/usr/bin/env python3
# this_file: src/devhooks/cli.py
"""Command-line entrypoints for devhooks.

The CLI is implemented using :mod:`fire` to provide a nested command
hierarchy.  Each sub-command operates on a thin facade and delegates to the
corresponding manager classes, keeping collaborators injectable for tests.
"""

from __future__ import annotations

import subprocess
from collections.abc import Callable
from pathlib import Path

import fire
from fire.core import FireError

from . import __version__
from .checks import Ignore, SingleFileValidator, classify, run_check, validator_path
from .config import ConfigManager
from .launchers import LauncherManager
from .user_settings import (
    LOG_LEVELS,
    UserSettings,
    load_user_settings,
    save_user_settings,
)


class SettingsCLI:
    """Fire namespace for inspecting and tuning hook settings.

    Attributes:
        _load: Loader that returns the latest persisted user settings.
        _save: Saver that persists mutated settings to disk.
    """

    def __init__(
        self,
        loader: Callable[[], UserSettings],
        saver: Callable[[UserSettings], Path],
    ) -> None:
        """Create the namespace with injected persistence helpers."""
        self._load = loader
        self._save = saver

    def show(self) -> dict[str, object]:
        """Return a serialisable snapshot of the current settings."""
        return self._load().to_dict()

    def timeout(self, check: str, seconds: float) -> str:
        """Set the timeout for ``source`` or a named validator.

        Args:
            check: ``source`` or a validator name such as ``rhai``.
            seconds: New timeout; must be positive.

        Returns:
            str: Confirmation message.

        Raises:
            FireError: If ``check`` is unknown or ``seconds`` is not positive.
        """
        value = float(seconds)
        if value <= 0:
            raise FireError("timeout must be positive")
        settings = self._load()
        if check == "source":
            settings.source_check.timeout = value
        elif check in settings.validators:
            settings.validators[check].timeout = value
        else:
            names = ", ".join(["source", *settings.validators])
            raise FireError(f"check must be one of {names}")
        self._save(settings)
        return f"Timeout for {check} set to {value:g}s"

    def tools_dir(self, directory: str) -> str:
        """Set the project-relative directory holding ``target/release``."""
        if not directory:
            raise FireError("tools directory must be non-empty")
        settings = self._load()
        settings.tools_dir = directory
        self._save(settings)
        return f"Tools directory set to {directory}"

    def log_level(self, level: str) -> str:
        """Set the edit hook's stderr log level."""
        normalized = level.upper()
        if normalized not in LOG_LEVELS:
            raise FireError(f"log level must be one of {', '.join(LOG_LEVELS)}")
        settings = self._load()
        settings.log_level = normalized
        self._save(settings)
        return f"Log level set to {normalized}"


class DevhooksCLI:
    """Top-level Fire component wiring together CLI operations.

    Each public method corresponds to a CLI command exposed to users.
    """

    def __init__(
        self,
        config_factory: Callable[[Path | None], ConfigManager] = ConfigManager,
        launcher_factory: Callable[[Path | None], LauncherManager] = LauncherManager,
        settings_loader: Callable[[], UserSettings] = load_user_settings,
        settings_saver: Callable[[UserSettings], Path] = save_user_settings,
        runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
    ) -> None:
        """Initialise the CLI with factories for its collaborators.

        Args:
            config_factory: Produces :class:`ConfigManager` for a project.
            launcher_factory: Produces :class:`LauncherManager` for a tools
                directory.
            settings_loader: Loads persisted user settings.
            settings_saver: Persists updated settings back to disk.
            runner: Callable used by ``check`` to run checkers.
        """
        self._config_factory = config_factory
        self._launcher_factory = launcher_factory
        self._settings_loader = settings_loader
        self._runner = runner

        self.settings = SettingsCLI(settings_loader, settings_saver)

    def version(self) -> str:
        """Return the installed devhooks version string."""
        return __version__

    def install(self, project: str | None = None) -> str:
        """Register the edit hook in the project's Claude settings.

        Args:
            project: Project directory; defaults to the current directory.

        Returns:
            str: Confirmation naming the settings file.
        """
        config_mgr = self._config_factory(Path(project) if project else None)
        config_mgr.enable_edit_hook()
        return f"Edit hook registered in {config_mgr.claude_config}"

    def uninstall(self, project: str | None = None) -> str:
        """Remove the edit hook from the project's Claude settings."""
        config_mgr = self._config_factory(Path(project) if project else None)
        config_mgr.disable_edit_hook()
        return f"Edit hook removed from {config_mgr.claude_config}"

    def status(self, project: str | None = None) -> str:
        """Return a short human-readable summary of install state.

        Returns:
            str: Multi-line string describing hook registration, checker
            availability, and which validator binaries are built.
        """
        config_mgr = self._config_factory(Path(project) if project else None)
        settings = self._settings_loader()
        project_dir = config_mgr.project_dir
        enabled = config_mgr.is_edit_hook_enabled()
        source_tool = settings.source_check.command[0]
        lines = [
            "devhooks status",
            f"Edit hook: {'enabled' if enabled else 'disabled'}",
            f"{settings.source_check.label}: installed={config_mgr.is_tool_installed(source_tool)}",
        ]
        for name, prefs in settings.validators.items():
            check = SingleFileValidator(name, prefs.binary, prefs.label, prefs.timeout)
            built = validator_path(check, project_dir, settings).is_file()
            lines.append(f"{prefs.label}: built={built}")
        return "\n".join(lines)

    def check(self, file: str, project: str | None = None) -> str:
        """Run the checker that owns ``file`` and return its diagnostics.

        Unlike the hook, failures here propagate so they can be debugged.

        Args:
            file: File to check.
            project: Project directory; defaults to the current directory.

        Returns:
            str: Diagnostic text, or a notice when nothing was checked or
            nothing was reported.

        Raises:
            FireError: If ``file`` does not exist.
        """
        project_dir = Path(project) if project else Path.cwd()
        path = Path(file)
        if not path.is_absolute():
            path = project_dir / path
        if not path.exists():
            raise FireError(f"no such file: {path}")
        settings = self._settings_loader()
        selected = classify(path, settings)
        if isinstance(selected, Ignore):
            return f"No checker configured for {path.suffix or path.name}"
        if isinstance(selected, SingleFileValidator):
            binary = validator_path(selected, project_dir, settings)
            if not binary.is_file():
                return f"Validator {selected.name} not found at {binary}"
        diagnostic = run_check(selected, path, project_dir, settings, self._runner)
        return diagnostic or "No issues reported"

    def launch(self, name: str, tools_dir: str | None = None) -> None:
        """Run helper binary ``name`` and exit with its status.

        Nothing is printed on success because the child owns stdout.

        Raises:
            SystemExit: Always, carrying the child's exit code.
        """
        if not name:
            raise FireError("server name must be non-empty")
        launcher = self._launcher_factory(Path(tools_dir) if tools_dir else None)
        raise SystemExit(launcher.launch(name))


def main() -> None:
    """Invoke Fire with :class:`DevhooksCLI` as the root component."""
    fire.Fire(DevhooksCLI)


if __name__ == "__main__":
    main()
