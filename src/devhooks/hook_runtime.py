#!/usr/bin/env python3
# this_file: src/devhooks/hook_runtime.py
"""Post-edit hook entry point.

The host runs ``devhooks-edit`` after every file edit and pipes a JSON event
on stdin.  The hook picks a checker for the edited file, forwards whatever it
reports to stderr, and always exits 0: a broken checker, an unreadable event,
or a timeout must never block the host.  :func:`run_hook` is the single place
where that contract is enforced.
"""

from __future__ import annotations

import json
import os
import subprocess
import sys
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, TextIO

from loguru import logger

from .checks import Check, Ignore, Runner, classify, run_check
from .user_settings import UserSettings, load_user_settings

ENV_PROJECT_KEY = "CLAUDE_PROJECT_DIR"


@dataclass(frozen=True)
class HookOutcome:
    """Result of a single hook run; never signals failure to the host."""

    check: Check = field(default_factory=Ignore)
    diagnostic: str = ""
    reason: str = ""


def read_payload(stream: TextIO) -> dict[str, Any]:
    """Return the hook payload streamed via ``stream``.

    Returns:
        dict[str, Any]: Parsed payload or an empty dictionary when the stream
        is empty, deserialisation fails, or the document is not an object.
    """
    try:
        raw = stream.read()
    except (OSError, ValueError):
        return dict()
    if not raw.strip():
        return dict()
    try:
        payload = json.loads(raw)
    except ValueError:
        return dict()
    return payload if isinstance(payload, dict) else dict()


def extract_file_path(payload: Mapping[str, Any]) -> str | None:
    """Return ``tool_input.file_path`` when it is a non-empty string."""
    tool_input = payload.get("tool_input")
    if not isinstance(tool_input, Mapping):
        return None
    file_path = tool_input.get("file_path")
    if isinstance(file_path, str) and file_path.strip():
        return file_path
    return None


def determine_project_dir(
    payload: Mapping[str, Any], environ: Mapping[str, str] | None = None
) -> Path:
    """Resolve the project directory using multiple fallbacks.

    Args:
        payload: Event supplied by the host.
        environ: Environment mapping; defaults to :data:`os.environ`.

    Returns:
        Path: Directory that should be considered the active project.
    """
    environ = os.environ if environ is None else environ
    env_value = environ.get(ENV_PROJECT_KEY)
    if env_value:
        path = Path(env_value).expanduser()
        if path.is_dir():
            return path

    candidate = payload.get("cwd")
    if isinstance(candidate, str) and candidate.strip():
        path = Path(candidate.strip()).expanduser()
        if path.is_dir():
            return path

    return Path(os.getcwd())


def run_hook(
    stream: TextIO,
    *,
    settings_loader: Callable[[], UserSettings] = load_user_settings,
    runner: Runner = subprocess.run,
    environ: Mapping[str, str] | None = None,
) -> HookOutcome:
    """Process one edit event, converting every failure into a no-op.

    Args:
        stream: Text stream carrying the JSON event.
        settings_loader: Returns the settings used for classification.
        runner: Callable with the :func:`subprocess.run` signature.
        environ: Environment mapping used to locate the project.

    Returns:
        HookOutcome: Selected check, diagnostic text, and a short reason.
    """
    try:
        payload = read_payload(stream)
        file_path = extract_file_path(payload)
        if file_path is None:
            return HookOutcome(reason="no file path in event")

        project_dir = determine_project_dir(payload, environ)
        path = Path(file_path).expanduser()
        if not path.is_absolute():
            path = project_dir / path
        if not path.exists():
            return HookOutcome(reason="file not found")

        settings = settings_loader()
        check = classify(path, settings)
        if isinstance(check, Ignore):
            return HookOutcome(check, reason="no checker for extension")

        logger.debug("Running {} for {}", type(check).__name__, path)
        diagnostic = run_check(check, path, project_dir, settings, runner)
        return HookOutcome(check, diagnostic, reason="checked")
    except Exception as error:
        logger.debug("Edit hook failure ignored: {!r}", error)
        return HookOutcome(reason=f"ignored failure: {type(error).__name__}")


def _load_settings_with_logging() -> UserSettings:
    """Load settings and attach a stderr sink at the configured level."""
    settings = load_user_settings()
    logger.add(sys.stderr, level=settings.log_level.upper())
    return settings


def main() -> None:
    """Entry point invoked by the host after a file edit."""
    logger.remove()
    outcome = run_hook(sys.stdin, settings_loader=_load_settings_with_logging)
    if outcome.diagnostic:
        try:
            sys.stderr.write(outcome.diagnostic + "\n")
            sys.stderr.flush()
        except (OSError, ValueError):
            pass
    sys.exit(0)


if __name__ == "__main__":
    main()
