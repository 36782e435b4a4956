#!/usr/bin/env python3
# this_file: src/devhooks/checks.py
"""Classify edited files and run the checker that owns them.

A file maps to exactly one :data:`Check` variant: the project-wide source
check, a single-file validator binary, or :class:`Ignore`.  Classification is
a pure function of the extension and the settings; execution shells out with
a bounded timeout and returns diagnostic text rather than printing it.
"""

from __future__ import annotations

import subprocess
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from loguru import logger

from .launchers import release_binary_path
from .user_settings import UserSettings

Runner = Callable[..., subprocess.CompletedProcess]


@dataclass(frozen=True)
class SourceCheck:
    """Project-wide compile check triggered by a source file edit."""

    label: str
    command: tuple[str, ...]
    timeout: float


@dataclass(frozen=True)
class SingleFileValidator:
    """External ``--validate`` run against the edited file only."""

    name: str
    binary: str
    label: str
    timeout: float


@dataclass(frozen=True)
class Ignore:
    """No checker owns this file."""


Check = SourceCheck | SingleFileValidator | Ignore


def classify(path: Path, settings: UserSettings) -> Check:
    """Return the check responsible for ``path`` based on its extension.

    Args:
        path: Edited file; only its suffix is inspected.
        settings: Settings providing the extension table.

    Returns:
        Check: The selected variant, :class:`Ignore` for unknown suffixes.
    """
    owner = settings.extension_map().get(path.suffix.lower())
    if owner is None:
        return Ignore()
    if owner == "source":
        prefs = settings.source_check
        return SourceCheck(prefs.label, tuple(prefs.command), prefs.timeout)
    prefs = settings.validators[owner]
    return SingleFileValidator(owner, prefs.binary, prefs.label, prefs.timeout)


def validator_path(check: SingleFileValidator, project_dir: Path, settings: UserSettings) -> Path:
    """Return where the validator binary for ``check`` is expected."""
    return release_binary_path(project_dir / settings.tools_dir, check.binary)


def run_check(
    check: Check,
    path: Path,
    project_dir: Path,
    settings: UserSettings,
    runner: Runner = subprocess.run,
) -> str:
    """Execute ``check`` and return diagnostic text, empty when clean.

    Args:
        check: Variant returned by :func:`classify`.
        path: Edited file handed to single-file validators.
        project_dir: Working directory for the project-wide check and the
            root under which validator binaries are looked up.
        settings: Settings providing the tools directory.
        runner: Callable with the :func:`subprocess.run` signature.

    Returns:
        str: Labelled diagnostic text or ``""``.

    Raises:
        subprocess.TimeoutExpired: If the checker exceeds its timeout.
        OSError: If the checker cannot be started.
    """
    if isinstance(check, SourceCheck):
        return _run_source_check(check, project_dir, runner)
    if isinstance(check, SingleFileValidator):
        binary = validator_path(check, project_dir, settings)
        if not binary.is_file():
            logger.debug("Validator {} not built at {}; skipping", check.name, binary)
            return ""
        return _run_validator(check, binary, path, runner)
    return ""


def _run_source_check(check: SourceCheck, project_dir: Path, runner: Runner) -> str:
    result = runner(
        list(check.command),
        cwd=str(project_dir),
        stdin=subprocess.DEVNULL,
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT,
        encoding="utf-8",
        errors="replace",
        timeout=check.timeout,
        check=False,
    )
    output = (result.stdout or "").strip()
    if not output:
        return ""
    return f"[{check.label}]\n{output}"


def _run_validator(check: SingleFileValidator, binary: Path, path: Path, runner: Runner) -> str:
    result = runner(
        [str(binary), "--validate", str(path)],
        stdin=subprocess.DEVNULL,
        capture_output=True,
        encoding="utf-8",
        errors="replace",
        timeout=check.timeout,
        check=False,
    )
    if result.returncode == 0:
        return ""
    errors = (result.stderr or "").strip()
    header = f"[{check.label}] {path}"
    return f"{header}\n{errors}" if errors else header


__all__ = [
    "Check",
    "Ignore",
    "SingleFileValidator",
    "SourceCheck",
    "classify",
    "run_check",
    "validator_path",
]
