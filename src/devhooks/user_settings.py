#!/usr/bin/env python3
# this_file: src/devhooks/user_settings.py
"""Load, validate, and persist user settings for the edit hook."""

from __future__ import annotations

import shutil
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

import tomli
import tomli_w

SETTINGS_DIR_NAME = ".devhooks"
SETTINGS_FILE_NAME = "settings.toml"
LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")

DEFAULT_SOURCE_COMMAND = ["cargo", "check", "--quiet", "--message-format=short"]
DEFAULT_SOURCE_TIMEOUT = 60.0
DEFAULT_VALIDATOR_TIMEOUT = 15.0


@dataclass
class SourceCheckPrefs:
    """Describe the project-wide compile check run for source files."""

    label: str = "cargo check"
    command: list[str] = field(default_factory=lambda: list(DEFAULT_SOURCE_COMMAND))
    timeout: float = DEFAULT_SOURCE_TIMEOUT
    extensions: list[str] = field(default_factory=lambda: [".rs"])


@dataclass
class ValidatorPrefs:
    """Describe a single-file validator binary and the files it owns."""

    binary: str
    label: str
    extensions: list[str]
    timeout: float = DEFAULT_VALIDATOR_TIMEOUT


def _default_validators() -> dict[str, ValidatorPrefs]:
    return {
        "rhai": ValidatorPrefs("rhai-mcp-server", "rhai check", [".rhai"]),
        "jinja": ValidatorPrefs("minijinja-mcp-server", "jinja check", [".j2", ".jinja"]),
    }


@dataclass
class UserSettings:
    """Concrete settings object persisted to ``settings.toml``."""

    source_check: SourceCheckPrefs
    validators: dict[str, ValidatorPrefs]
    tools_dir: str = "tools"
    log_level: str = "WARNING"

    @classmethod
    def default(cls) -> UserSettings:
        """Return a :class:`UserSettings` instance with packaged defaults.

        Returns:
            UserSettings: Settings initialised with bundled defaults.
        """
        return cls(SourceCheckPrefs(), _default_validators())

    def validate(self) -> None:
        """Ensure extensions, timeouts, and the log level are usable.

        Raises:
            ValueError: If an extension is malformed or claimed twice, a
                timeout is not positive, the source command is empty, or the
                log level is unknown.
        """
        if not self.source_check.command:
            raise ValueError("source check command must not be empty")
        owners: dict[str, str] = {}
        checks = [("source", self.source_check.extensions, self.source_check.timeout)]
        checks.extend(
            (name, prefs.extensions, prefs.timeout) for name, prefs in self.validators.items()
        )
        for name, extensions, timeout in checks:
            if timeout <= 0:
                raise ValueError(f"timeout for {name} must be positive")
            for extension in extensions:
                if not extension.startswith("."):
                    raise ValueError(f"extension '{extension}' for {name} must start with '.'")
                key = extension.lower()
                if key in owners:
                    raise ValueError(
                        f"extension '{extension}' claimed by both {owners[key]} and {name}"
                    )
                owners[key] = name
        if self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(f"unknown log level '{self.log_level}'")

    def extension_map(self) -> dict[str, str]:
        """Map lower-case extensions to ``"source"`` or a validator name."""
        mapping = {extension.lower(): "source" for extension in self.source_check.extensions}
        for name, prefs in self.validators.items():
            mapping.update({extension.lower(): name for extension in prefs.extensions})
        return mapping

    def to_dict(self) -> dict[str, object]:
        """Serialise the settings dataclass into a TOML-friendly mapping.

        Returns:
            dict[str, object]: Mapping ready to be written to ``settings.toml``.
        """
        return {
            "tools_dir": self.tools_dir,
            "log_level": self.log_level,
            "source_check": {
                "label": self.source_check.label,
                "command": list(self.source_check.command),
                "timeout": float(self.source_check.timeout),
                "extensions": list(self.source_check.extensions),
            },
            "validators": {
                name: {
                    "binary": prefs.binary,
                    "label": prefs.label,
                    "extensions": list(prefs.extensions),
                    "timeout": float(prefs.timeout),
                }
                for name, prefs in self.validators.items()
            },
        }

    @classmethod
    def from_dict(cls, payload: dict[str, object]) -> UserSettings:
        """Create :class:`UserSettings` from a mapping previously serialised.

        Missing sections fall back to packaged defaults, so a settings file
        only needs to mention what it overrides.

        Args:
            payload: Deserialised TOML content.

        Returns:
            UserSettings: Fully populated and validated settings instance.

        Raises:
            ValueError: If a section is not a table or the result is invalid.
        """
        defaults = SourceCheckPrefs()
        source_payload = _table(payload.get("source_check", {}), "source_check")
        source_check = SourceCheckPrefs(
            label=str(source_payload.get("label", defaults.label)),
            command=[str(part) for part in source_payload.get("command", defaults.command)],
            timeout=float(source_payload.get("timeout", defaults.timeout)),
            extensions=list(source_payload.get("extensions", defaults.extensions)),
        )

        validators = _default_validators()
        for name, info in _table(payload.get("validators", {}), "validators").items():
            info = _table(info, f"validators.{name}")
            base = validators.get(name)
            validators[name] = ValidatorPrefs(
                binary=str(info.get("binary", base.binary if base else name)),
                label=str(info.get("label", base.label if base else f"{name} check")),
                extensions=list(info.get("extensions", base.extensions if base else [])),
                timeout=float(
                    info.get("timeout", base.timeout if base else DEFAULT_VALIDATOR_TIMEOUT)
                ),
            )

        settings = cls(
            source_check,
            validators,
            tools_dir=str(payload.get("tools_dir", "tools")),
            log_level=str(payload.get("log_level", "WARNING")).upper(),
        )
        settings.validate()
        return settings


def _table(value: object, section: str) -> dict:
    if not isinstance(value, dict):
        raise ValueError(f"settings section '{section}' must be a table")
    return value


def settings_path(home: Path | None = None) -> Path:
    """Return the full path to ``settings.toml`` under ``home``.

    Args:
        home: Optional override directory; defaults to the current user's home.

    Returns:
        Path: Location of the settings file.
    """
    base = home or Path.home()
    return base / SETTINGS_DIR_NAME / SETTINGS_FILE_NAME


def load_user_settings(home: Path | None = None) -> UserSettings:
    """Load user settings from disk, falling back to defaults.

    Nothing is written when the file is missing: the edit hook calls this on
    every file edit and must not leave artefacts behind.

    Args:
        home: Optional home directory override.

    Returns:
        UserSettings: Persisted settings or packaged defaults.
    """
    path = settings_path(home)
    if not path.exists():
        return UserSettings.default()
    with open(path, "rb") as handle:
        payload = tomli.load(handle)
    return UserSettings.from_dict(payload)


def save_user_settings(settings: UserSettings, home: Path | None = None) -> Path:
    """Persist ``settings`` to disk, creating a timestamped backup first.

    Args:
        settings: Settings instance to write.
        home: Optional home directory override.

    Returns:
        Path: Path to the written settings file.
    """
    settings.validate()
    target = settings_path(home)
    target.parent.mkdir(parents=True, exist_ok=True)
    if target.exists():
        backup = target.with_suffix(f"{target.suffix}.backup.{datetime.now():%Y%m%d_%H%M%S}")
        shutil.copy2(target, backup)
    with open(target, "wb") as handle:
        tomli_w.dump(settings.to_dict(), handle)
    return target
