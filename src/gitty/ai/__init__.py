"""AI commit message helpers."""

from __future__ import annotations

from gitty.ai.commit import (
    COMMIT_SYSTEM_PROMPT,
    TRUNCATION_MARKER,
    build_messages,
    compose_message,
    generate_commit_message,
    split_message,
    strip_code_fences,
    truncate_diff,
)

__all__ = [
    "COMMIT_SYSTEM_PROMPT",
    "TRUNCATION_MARKER",
    "build_messages",
    "compose_message",
    "generate_commit_message",
    "split_message",
    "strip_code_fences",
    "truncate_diff",
]
