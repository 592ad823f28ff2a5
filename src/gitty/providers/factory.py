"""
Provider factory for creating completion provider instances.

Usage:
    from gitty.providers.factory import get_provider

    provider = get_provider(config)  # selected by ai.provider
    provider = get_provider(config, provider_type=ProviderType.ANTHROPIC)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from gitty.providers import BaseLLMProvider, ModelNotFoundError, ProviderType

if TYPE_CHECKING:
    from gitty.core.config import AppConfig


def parse_provider_type(provider_str: str) -> ProviderType:
    """Parse a provider string ("openai", "anthropic") to ProviderType.

    Raises:
        ModelNotFoundError: If the provider string is not recognized
    """
    ptype_map = {
        "openai": ProviderType.OPENAI,
        "anthropic": ProviderType.ANTHROPIC,
    }
    ptype = ptype_map.get(provider_str.strip().lower())
    if ptype is None:
        raise ModelNotFoundError(f"Unknown provider: {provider_str}")
    return ptype


def get_provider(
    config: AppConfig,
    *,
    provider_type: ProviderType | None = None,
) -> BaseLLMProvider:
    """Get a provider instance for the configured backend.

    Args:
        config: Application configuration
        provider_type: Explicit provider type (overrides ``ai.provider``)

    Raises:
        ModelNotFoundError: If ``ai.provider`` names an unknown backend
    """
    ptype = provider_type or parse_provider_type(config.ai.provider)

    if ptype == ProviderType.ANTHROPIC:
        from gitty.providers.anthropic import AnthropicProvider

        return AnthropicProvider(config)

    from gitty.providers.openai import OpenAIProvider

    return OpenAIProvider(config)


__all__ = [
    "get_provider",
    "parse_provider_type",
]
