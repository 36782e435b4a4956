#!/usr/bin/env python3
# this_file: src/devhooks/launchers.py
"""Cross-platform launcher for helper binaries built next to the launcher."""

from __future__ import annotations

import os
import subprocess
import sys
from pathlib import Path

from loguru import logger

RELEASE_DIR = Path("target") / "release"


def release_binary_path(base_dir: Path, name: str, platform_name: str | None = None) -> Path:
    """Return ``<base_dir>/target/release/<name>`` with the platform suffix.

    Args:
        base_dir: Directory that holds the ``target`` build output.
        name: Binary name without extension.
        platform_name: Value compared against ``"win32"``; defaults to
            :data:`sys.platform`.

    Returns:
        Path: Location where the binary is expected.
    """
    platform_name = platform_name or sys.platform
    suffix = ".exe" if platform_name == "win32" else ""
    return base_dir / RELEASE_DIR / f"{name}{suffix}"


def _script_dir() -> Path:
    """Directory of the invoked launcher script, without following symlinks."""
    return Path(os.path.abspath(sys.argv[0])).parent


class LauncherManager:
    """Resolve helper binaries and run them with the caller's stdio.

    The launcher is a transparent stand-in for the binary: standard streams
    and environment are inherited untouched, and the child's exit status
    becomes the launcher's.
    """

    def __init__(self, tools_dir: Path | None = None):
        """Remember the directory whose ``target/release`` holds binaries."""
        self.tools_dir = Path(tools_dir) if tools_dir else _script_dir()

    def binary_path(self, name: str) -> Path:
        """Return the expected path of the binary called ``name``."""
        return release_binary_path(self.tools_dir, name)

    def launch(self, name: str) -> int:
        """Run the binary called ``name`` and wait for it to finish.

        Args:
            name: Logical server name, i.e. the binary name without suffix.

        Returns:
            int: The child's exit code, or ``1`` when it was killed by a
            signal or could not be started.
        """
        binary = self.binary_path(name)
        logger.debug("Launching {}", binary)
        try:
            process = subprocess.Popen([str(binary)], env=os.environ)
        except OSError as e:
            logger.error(f"failed to start '{binary}': {e}")
            return 1

        returncode = process.wait()
        if returncode < 0:
            logger.debug("{} terminated by signal {}", binary, -returncode)
            return 1
        return returncode


# Console script entry point
def main(argv: list[str] | None = None) -> None:
    """Console entry point: ``devhooks-launch <server-name>``."""
    logger.remove()
    logger.add(sys.stderr, format="mcp-launcher: {message}", level="INFO")

    args = sys.argv[1:] if argv is None else argv
    if not args or not args[0]:
        logger.error("missing server name argument")
        sys.exit(1)

    launcher = LauncherManager()
    sys.exit(launcher.launch(args[0]))


if __name__ == "__main__":
    main()
