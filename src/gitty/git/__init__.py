"""Git operations and GitHub hosting.

This package provides:
    - GitRepository: async git commands rooted at one directory
    - RepositoryStatus: immutable working-tree snapshot
    - Hosting helpers: gh repo creation, auth hints, browser launch
"""

from __future__ import annotations

from .client import (
    GitRepository,
    RepositoryStatus,
    StatusEntry,
    classify_status,
    parse_ahead_behind,
    parse_status_line,
    to_web_url,
)
from .hosting import (
    auth_hint,
    build_repo_create_args,
    create_remote_repository,
    fallback_repo_url,
    open_in_browser,
)

__all__ = [
    "GitRepository",
    "RepositoryStatus",
    "StatusEntry",
    "auth_hint",
    "build_repo_create_args",
    "classify_status",
    "create_remote_repository",
    "fallback_repo_url",
    "open_in_browser",
    "parse_ahead_behind",
    "parse_status_line",
    "to_web_url",
]
