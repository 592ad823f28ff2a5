"""
Completion provider abstraction for gitty.

One interface over the OpenAI and Anthropic APIs, used to turn a staged
diff into a commit message. Requests are single-shot: no streaming, no
tools, no retries.

Usage:
    from gitty.providers import Message, CompletionOptions
    from gitty.providers.factory import get_provider

    provider = get_provider(config)
    response = await provider.complete(
        messages=[Message(role="user", content="Hello")],
        options=CompletionOptions(temperature=0.7),
    )
"""

from __future__ import annotations

import os
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum, auto
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from gitty.core.config import AppConfig

# Seconds before an API request is abandoned.
REQUEST_TIMEOUT = 30.0


class ProviderType(Enum):
    """Supported completion backends."""

    OPENAI = auto()
    ANTHROPIC = auto()


@dataclass(frozen=True, slots=True)
class Message:
    """A message in the conversation history."""

    role: str  # "user", "assistant", "system"
    content: str


@dataclass(frozen=True, slots=True)
class TokenUsage:
    """Token usage for a completion request."""

    prompt_tokens: int
    completion_tokens: int
    total_tokens: int | None = None

    def __post_init__(self) -> None:
        if self.total_tokens is None:
            object.__setattr__(self, "total_tokens", self.prompt_tokens + self.completion_tokens)


@dataclass(slots=True)
class CompletionResponse:
    """Response from a completion request."""

    content: str
    model: str
    finish_reason: str | None = None
    usage: TokenUsage | None = None
    raw_response: Any = None


@dataclass(frozen=True, slots=True)
class CompletionOptions:
    """Options for completion requests, mapped per provider."""

    temperature: float | None = None
    max_tokens: int | None = None
    system_prompt: str | None = None


class ProviderError(Exception):
    """Base exception for provider errors."""


class AuthenticationError(ProviderError):
    """Raised when authentication fails."""


class RateLimitError(ProviderError):
    """Raised when rate limit is exceeded."""

    def __init__(self, message: str, retry_after: float | None = None) -> None:
        super().__init__(message)
        self.retry_after = retry_after


class ModelNotFoundError(ProviderError):
    """Raised when the requested model or provider is not available."""


class ContextLengthError(ProviderError):
    """Raised when input exceeds the model's context length."""


# Pattern to match potential API keys in error messages
_API_KEY_PATTERN = re.compile(
    r"""
    # OpenAI and Anthropic key shapes: sk-..., sk-ant-...
    sk-(?:ant-)?[A-Za-z0-9_\-]{20,}|
    # Generic key assignments that might appear in error messages
    (?:api[_-]?key|secret|token|password|credential)
    \s*[=:]\s*
    ['"]?[A-Za-z0-9_\-]{16,}['"]?
    """,
    re.IGNORECASE | re.VERBOSE,
)


def redact_api_key(message: str, *known_keys: str) -> str:
    """Remove API keys from error text before it reaches the status line or log."""
    for key in (*known_keys, os.environ.get("OPENAI_API_KEY", ""), os.environ.get("ANTHROPIC_API_KEY", "")):
        if key and key in message:
            message = message.replace(key, "[REDACTED]")
    return _API_KEY_PATTERN.sub("[REDACTED]", message)


class BaseLLMProvider(ABC):
    """Abstract base class for completion providers."""

    def __init__(self, config: AppConfig) -> None:
        self._config = config

    @property
    def api_key(self) -> str:
        return self._config.ai.api_key

    @property
    @abstractmethod
    def provider_type(self) -> ProviderType:
        """Return the provider type."""
        ...

    @property
    @abstractmethod
    def default_model(self) -> str:
        """Return the default model ID."""
        ...

    @abstractmethod
    async def complete(
        self,
        messages: list[Message],
        model: str | None = None,
        options: CompletionOptions | None = None,
    ) -> CompletionResponse:
        """Send a completion request.

        Raises:
            ProviderError: On API errors, timeouts and empty replies
        """
        ...


__all__ = [
    "REQUEST_TIMEOUT",
    # Types
    "ProviderType",
    "Message",
    "CompletionResponse",
    "TokenUsage",
    "CompletionOptions",
    # Errors
    "ProviderError",
    "AuthenticationError",
    "RateLimitError",
    "ModelNotFoundError",
    "ContextLengthError",
    # Base
    "BaseLLMProvider",
    # Helpers
    "redact_api_key",
]
