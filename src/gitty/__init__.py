"""gitty - a keyboard-driven terminal menu for everyday git and GitHub tasks.

This package provides the `gitty` command: a single-screen menu for staging,
committing (optionally with an AI-written message), pushing, pulling,
releasing and publishing a repository.

Exports:
    __version__: Package version string.
"""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "0.1.0"
