"""Commit message generation from a staged diff."""

from __future__ import annotations

from gitty.core.config import API_KEY_ENV_VARS, AppConfig, default_config_path
from gitty.core.console import get_logger
from gitty.core.result import Err, ModelProviderError, Ok, Result
from gitty.providers import BaseLLMProvider, CompletionOptions, Message, ProviderError
from gitty.providers.factory import get_provider

logger = get_logger(__name__)

TRUNCATION_MARKER = "\n...(truncated)"

COMMIT_SYSTEM_PROMPT = """You are a skilled developer writing git commit messages.
Format the message strictly as follows:
1. A single concise subject line (max 50 chars) that describes WHAT changed.
2. A blank line.
3. A detailed bulleted list of changes explaining WHY and HOW.

Use conventional commit prefixes when appropriate:
- feat: new feature
- fix: bug fix
- refactor: code refactoring
- docs: documentation changes
- style: formatting changes
- test: adding tests
- chore: maintenance tasks

IMPORTANT: Return raw text only. Do NOT wrap in markdown code blocks."""

_FENCE_MARKERS = ("```markdown", "```")


def truncate_diff(diff: str, max_bytes: int) -> str:
    """Limit diff to max_bytes of UTF-8, appending a marker when cut."""
    encoded = diff.encode("utf-8")
    if len(encoded) <= max_bytes:
        return diff
    # A multi-byte character split by the cut is dropped whole.
    head = encoded[:max_bytes].decode("utf-8", errors="ignore")
    return head + TRUNCATION_MARKER


def build_messages(diff: str, max_bytes: int) -> list[Message]:
    user_prompt = f"Generate a commit message for this diff:\n\n{truncate_diff(diff, max_bytes)}"
    return [
        Message(role="system", content=COMMIT_SYSTEM_PROMPT),
        Message(role="user", content=user_prompt),
    ]


def strip_code_fences(text: str) -> str:
    for marker in _FENCE_MARKERS:
        text = text.replace(marker, "")
    return text.strip()


def compose_message(title: str, body: str) -> str:
    """Join title and body with one blank line; an empty body adds nothing."""
    title = title.strip()
    body = body.strip()
    if not body:
        return title
    return f"{title}\n\n{body}"


def split_message(message: str) -> tuple[str, str]:
    """Inverse of compose_message: split on the first blank line."""
    title, sep, body = message.partition("\n\n")
    if not sep:
        return message.strip(), ""
    return title.strip(), body.strip()


async def generate_commit_message(
    diff: str,
    config: AppConfig,
    provider: BaseLLMProvider | None = None,
) -> Result[str, ModelProviderError]:
    """Ask the configured provider for a commit message. No retries."""
    if not config.ai.api_key:
        env_var = API_KEY_ENV_VARS.get(config.ai.provider, "OPENAI_API_KEY")
        return Err(
            ModelProviderError(
                f"API key not configured. Set it in {default_config_path()} or {env_var} env var"
            )
        )

    try:
        backend = provider or get_provider(config)
        messages = build_messages(diff, config.ai.max_diff_size)
        response = await backend.complete(
            messages,
            model=config.ai.model,
            options=CompletionOptions(temperature=config.ai.temperature),
        )
    except ProviderError as exc:
        logger.debug("Commit message generation failed: %s", exc)
        return Err(
            ModelProviderError(
                f"{config.ai.provider} error: {exc}",
                context={"model": config.ai.model},
            )
        )

    message = strip_code_fences(response.content)
    if not message:
        return Err(ModelProviderError(f"empty response from {config.ai.provider}"))
    return Ok(message)


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
