"""
Anthropic Claude provider implementation.

Messages API over the official async SDK with a fixed request timeout and
automatic retries disabled.

Usage:
    from gitty.providers.anthropic import AnthropicProvider

    provider = AnthropicProvider(config)
    response = await provider.complete(
        messages=[Message(role="user", content="Hello")],
        model="claude-3-5-sonnet-20241022",
    )
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, cast

import anthropic

from gitty.providers import (
    REQUEST_TIMEOUT,
    AuthenticationError,
    BaseLLMProvider,
    CompletionOptions,
    CompletionResponse,
    ContextLengthError,
    Message,
    ModelNotFoundError,
    ProviderError,
    ProviderType,
    RateLimitError,
    TokenUsage,
    redact_api_key,
)

if TYPE_CHECKING:
    from gitty.core.config import AppConfig

DEFAULT_CLAUDE_MODEL = "claude-3-5-sonnet-20241022"
DEFAULT_MAX_TOKENS = 1024


class _ContentBlock(Protocol):
    type: str
    text: str | None


class _Usage(Protocol):
    input_tokens: int
    output_tokens: int


class _MessageResponse(Protocol):
    content: list[_ContentBlock]
    model: str
    stop_reason: str | None
    usage: _Usage | None


class _MessagesAPI(Protocol):
    async def create(self, **kwargs: object) -> object: ...


class AnthropicClientProtocol(Protocol):
    messages: _MessagesAPI


def resolve_model_id(model: str) -> str:
    """Models that are not Claude models fall back to the default Claude model."""
    if not model.startswith("claude"):
        return DEFAULT_CLAUDE_MODEL
    return model


def _convert_messages_to_anthropic(
    messages: list[Message],
    system_prompt: str | None = None,
) -> tuple[str | None, list[dict[str, object]]]:
    """Convert our Message format to Anthropic's.

    Anthropic expects the system prompt separate from the messages.

    Returns:
        Tuple of (system_prompt, messages)
    """
    system = system_prompt
    converted: list[dict[str, object]] = []

    for msg in messages:
        if msg.role == "system":
            system = f"{system}\n\n{msg.content}" if system else msg.content
        else:
            role = "user" if msg.role == "user" else "assistant"
            converted.append({"role": role, "content": msg.content})

    return system, converted


def _extract_text_content(content_blocks: list[_ContentBlock]) -> str:
    """Text of the first text block; the reply is a single block in practice."""
    for block in content_blocks:
        if block.type == "text" and block.text:
            return block.text
    return ""


class AnthropicProvider(BaseLLMProvider):
    """Anthropic Claude provider implementation.

    The API key comes from ``ai.api_key``, which the config loader fills from
    ANTHROPIC_API_KEY when blank.
    """

    def __init__(self, config: AppConfig, client: AnthropicClientProtocol | None = None) -> None:
        super().__init__(config)
        self._client = client

    def _get_client(self) -> AnthropicClientProtocol:
        """Lazy-initialize the Anthropic client."""
        if self._client is not None:
            return self._client

        if not self.api_key:
            raise AuthenticationError("Anthropic API key not configured")

        client = anthropic.AsyncAnthropic(
            api_key=self.api_key,
            timeout=REQUEST_TIMEOUT,
            max_retries=0,
        )
        self._client = cast(AnthropicClientProtocol, client)
        return self._client

    @property
    def provider_type(self) -> ProviderType:
        return ProviderType.ANTHROPIC

    @property
    def default_model(self) -> str:
        return DEFAULT_CLAUDE_MODEL

    async def complete(
        self,
        messages: list[Message],
        model: str | None = None,
        options: CompletionOptions | None = None,
    ) -> CompletionResponse:
        """Send a completion request to Anthropic."""
        client = self._get_client()
        opts = options or CompletionOptions()

        model_id = resolve_model_id(model or self.default_model)
        system, converted_messages = _convert_messages_to_anthropic(messages, opts.system_prompt)

        params: dict[str, object] = {
            "model": model_id,
            "messages": converted_messages,
            "max_tokens": opts.max_tokens or DEFAULT_MAX_TOKENS,
        }
        if system:
            params["system"] = system
        if opts.temperature is not None:
            params["temperature"] = opts.temperature

        try:
            response_obj = await client.messages.create(**params)
        except Exception as exc:
            self._handle_api_error(exc)
            raise AssertionError("unreachable")

        response = cast(_MessageResponse, response_obj)
        if not response.content:
            raise ProviderError("no response from Anthropic")

        usage = None
        if response.usage:
            usage = TokenUsage(
                prompt_tokens=response.usage.input_tokens,
                completion_tokens=response.usage.output_tokens,
            )

        return CompletionResponse(
            content=_extract_text_content(response.content),
            model=response.model,
            finish_reason=response.stop_reason,
            usage=usage,
            raw_response=response,
        )

    def _handle_api_error(self, exc: Exception) -> None:
        """Convert Anthropic exceptions to our error types, redacting keys."""
        raw = getattr(exc, "message", None) or str(exc)
        safe_msg = redact_api_key(str(raw), self.api_key)

        if isinstance(exc, anthropic.APITimeoutError):
            raise ProviderError(
                f"Anthropic request timed out after {REQUEST_TIMEOUT:.0f}s"
            ) from exc
        if isinstance(exc, anthropic.AuthenticationError):
            raise AuthenticationError(safe_msg) from exc
        if isinstance(exc, anthropic.RateLimitError):
            raise RateLimitError(safe_msg) from exc
        if isinstance(exc, anthropic.NotFoundError):
            raise ModelNotFoundError(safe_msg) from exc
        if isinstance(exc, anthropic.BadRequestError):
            msg_lower = safe_msg.lower()
            if "context" in msg_lower or "too long" in msg_lower:
                raise ContextLengthError(safe_msg) from exc
            raise ProviderError(safe_msg) from exc

        raise ProviderError(safe_msg) from exc


__all__ = [
    "DEFAULT_CLAUDE_MODEL",
    "AnthropicProvider",
    "resolve_model_id",
]
