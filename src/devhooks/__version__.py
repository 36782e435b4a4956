# this_file: src/devhooks/__version__.py
"""Installed package version."""

__version__ = "0.1.0"
