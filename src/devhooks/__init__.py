"""Public package interface for ``devhooks``.

Two independent entry points live here:

* the post-edit hook (``devhooks-edit``), which runs a checker for the file
  the host just edited and reports to stderr without ever failing;
* the process launcher (``devhooks-launch``), which runs a helper binary from
  ``target/release`` next to the launcher and mirrors its exit status.
"""
# this_file: src/devhooks/__init__.py

from .__version__ import __version__
from .checks import Check, Ignore, SingleFileValidator, SourceCheck, classify, run_check
from .config import ConfigManager
from .hook_runtime import HookOutcome, run_hook
from .launchers import LauncherManager, release_binary_path
from .user_settings import UserSettings, load_user_settings, save_user_settings

__all__ = [
    "__version__",
    "Check",
    "ConfigManager",
    "HookOutcome",
    "Ignore",
    "LauncherManager",
    "SingleFileValidator",
    "SourceCheck",
    "UserSettings",
    "classify",
    "load_user_settings",
    "release_binary_path",
    "run_check",
    "run_hook",
    "save_user_settings",
]
