"""
OpenAI provider implementation.

Chat completions over the official async SDK with a fixed request timeout
and automatic retries disabled.

Usage:
    from gitty.providers.openai import OpenAIProvider

    provider = OpenAIProvider(config)
    response = await provider.complete(
        messages=[Message(role="user", content="Hello")],
        model="gpt-4o-mini",
    )
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, cast

import openai

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


class _CompletionMessage(Protocol):
    content: str | None


class _CompletionChoice(Protocol):
    message: _CompletionMessage
    finish_reason: str | None


class _Usage(Protocol):
    prompt_tokens: int
    completion_tokens: int


class _CompletionResponse(Protocol):
    choices: list[_CompletionChoice]
    usage: _Usage | None
    model: str


class _CompletionsAPI(Protocol):
    async def create(self, **kwargs: object) -> object: ...


class _ChatAPI(Protocol):
    completions: _CompletionsAPI


class OpenAIClientProtocol(Protocol):
    chat: _ChatAPI


def _convert_messages_to_openai(
    messages: list[Message],
    system_prompt: str | None = None,
) -> list[dict[str, object]]:
    """Convert our Message format to OpenAI's, prepending the system prompt."""
    converted: list[dict[str, object]] = []
    if system_prompt:
        converted.append({"role": "system", "content": system_prompt})
    converted.extend({"role": msg.role, "content": msg.content} for msg in messages)
    return converted


def _build_completion_params(
    model_id: str,
    messages: list[dict[str, object]],
    opts: CompletionOptions,
) -> dict[str, object]:
    params: dict[str, object] = {
        "model": model_id,
        "messages": messages,
    }
    if opts.temperature is not None:
        params["temperature"] = opts.temperature
    if opts.max_tokens:
        params["max_tokens"] = opts.max_tokens
    return params


def _error_message(exc: Exception) -> str:
    """Prefer the message of the API's error object over the exception repr."""
    body = getattr(exc, "body", None)
    if isinstance(body, dict):
        error = body.get("error", body)
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
    message = getattr(exc, "message", None)
    return str(message or exc)


class OpenAIProvider(BaseLLMProvider):
    """OpenAI provider implementation.

    The API key comes from ``ai.api_key``, which the config loader fills from
    OPENAI_API_KEY when blank.
    """

    def __init__(self, config: AppConfig, client: OpenAIClientProtocol | None = None) -> None:
        super().__init__(config)
        self._client = client

    def _get_client(self) -> OpenAIClientProtocol:
        """Lazy-initialize the OpenAI client."""
        if self._client is not None:
            return self._client

        if not self.api_key:
            raise AuthenticationError("OpenAI API key not configured")

        client = openai.AsyncOpenAI(
            api_key=self.api_key,
            timeout=REQUEST_TIMEOUT,
            max_retries=0,
        )
        self._client = cast(OpenAIClientProtocol, client)
        return self._client

    @property
    def provider_type(self) -> ProviderType:
        return ProviderType.OPENAI

    @property
    def default_model(self) -> str:
        return "gpt-4o-mini"

    async def complete(
        self,
        messages: list[Message],
        model: str | None = None,
        options: CompletionOptions | None = None,
    ) -> CompletionResponse:
        """Send a completion request to OpenAI."""
        client = self._get_client()
        opts = options or CompletionOptions()

        model_id = model or self.default_model
        converted_messages = _convert_messages_to_openai(messages, opts.system_prompt)
        params = _build_completion_params(model_id, converted_messages, opts)

        try:
            response_obj = await client.chat.completions.create(**params)
        except Exception as exc:
            self._handle_api_error(exc)
            raise AssertionError("unreachable")

        response = cast(_CompletionResponse, response_obj)
        if not response.choices:
            raise ProviderError("no response from OpenAI")

        choice = response.choices[0]
        usage = None
        if response.usage:
            usage = TokenUsage(
                prompt_tokens=response.usage.prompt_tokens,
                completion_tokens=response.usage.completion_tokens,
            )

        return CompletionResponse(
            content=choice.message.content or "",
            model=response.model,
            finish_reason=choice.finish_reason,
            usage=usage,
            raw_response=response,
        )

    def _handle_api_error(self, exc: Exception) -> None:
        """Convert OpenAI exceptions to our error types, redacting keys."""
        safe_msg = redact_api_key(_error_message(exc), self.api_key)

        if isinstance(exc, openai.APITimeoutError):
            raise ProviderError(f"OpenAI request timed out after {REQUEST_TIMEOUT:.0f}s") from exc
        if isinstance(exc, openai.AuthenticationError):
            raise AuthenticationError(safe_msg) from exc
        if isinstance(exc, openai.RateLimitError):
            raise RateLimitError(safe_msg) from exc
        if isinstance(exc, openai.NotFoundError):
            raise ModelNotFoundError(safe_msg) from exc
        if isinstance(exc, openai.BadRequestError):
            msg_lower = safe_msg.lower()
            if "context" in msg_lower or "length" in msg_lower:
                raise ContextLengthError(safe_msg) from exc
            raise ProviderError(safe_msg) from exc

        raise ProviderError(safe_msg) from exc


__all__ = [
    "OpenAIProvider",
]
