"""
Result types and error hierarchy for gitty.

This module provides:
1. Result[T, E] type for explicit error handling
2. Domain-specific exception hierarchy

Usage:
    from gitty.core.result import Ok, Err, Result, GitError

    async def push(repo) -> Result[None, GitError]:
        if not await repo.has_remote("origin"):
            return Err(GitError("No remote named origin"))
        return Ok(None)

    match await push(repo):
        case Ok(_):
            print("pushed")
        case Err(err):
            print(err)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Generic, TypeVar

T = TypeVar("T")
U = TypeVar("U")
E = TypeVar("E", bound=Exception)


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Represents a successful result containing a value."""

    value: T

    def unwrap(self) -> T:
        """Return the contained value."""
        return self.value

    def unwrap_or(self, default: T) -> T:
        """Return the contained value (ignores default for Ok)."""
        return self.value

    def map(self, fn: Callable[[T], U]) -> Ok[U]:
        """Apply a function to the contained value."""
        return Ok(fn(self.value))


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """Represents a failed result containing an error."""

    error: E

    def unwrap(self) -> T:
        """Raise the contained error."""
        raise self.error

    def unwrap_or(self, default: T) -> T:
        """Return the default value."""
        return default

    def map(self, fn: Callable[[T], U]) -> Err[E]:
        """No-op for Err - returns self unchanged."""
        return self


# Type alias for Result
Result = Ok[T] | Err[E]


# ---------------------------------------------------------------------------
# Domain-specific error hierarchy
# ---------------------------------------------------------------------------


class GittyError(Exception):
    """Base exception for all gitty errors.

    Carries a human-readable message plus optional structured context that
    ends up in the debug log, never in the status line.
    """

    def __init__(self, message: str, *, context: dict | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        return self.message

    def describe(self) -> str:
        """Message plus context, for logging."""
        if self.context:
            ctx_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} [{ctx_str}]"
        return self.message


class GitError(GittyError):
    """Raised when a git invocation fails.

    The message is git's combined output, verbatim.
    """


class HostingError(GittyError):
    """Raised when the hosting CLI (gh) or the browser launcher fails."""


class ConfigurationError(GittyError):
    """Raised for configuration issues.

    Examples:
    - Config file parse errors
    - Invalid config values
    """


class ModelProviderError(GittyError):
    """Raised when commit message generation fails.

    Examples:
    - API key not configured
    - Provider returned an error object
    - Timeout or non-2xx response
    """


class FlowProtocolError(GittyError):
    """Raised when the controller is asked to run two operations at once."""


__all__ = [
    # Result types
    "Ok",
    "Err",
    "Result",
    # Error hierarchy
    "GittyError",
    "GitError",
    "HostingError",
    "ConfigurationError",
    "ModelProviderError",
    "FlowProtocolError",
]
