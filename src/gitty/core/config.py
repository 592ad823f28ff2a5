"""Application configuration management.

Handles loading and validating configuration from multiple sources:
    - YAML config file (~/.config/gitty/config.yaml)
    - Environment variables (GITTY_* prefix, nested with "__")
    - Default values

Key components:
    - AppConfig: Main configuration model
    - load_config(): Safe config loading with fallback to defaults
    - save_config(): Write the configuration back to disk
    - ConfigLoadResult: Metadata about config source
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from contextlib import nullcontext
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal
from unittest.mock import patch

import yaml
from pydantic import BaseModel, Field, ValidationError
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from gitty.core.console import get_logger
from gitty.core.result import ConfigurationError

logger = get_logger(__name__)

CONFIG_ENV_VAR = "GITTY_CONFIG"

API_KEY_ENV_VARS: dict[str, str] = {
    "openai": "OPENAI_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
}


# -----------------------------------------------------------------------------
# Sub-configuration Models
# -----------------------------------------------------------------------------


class GitConfig(BaseModel):
    """Identity applied to freshly published repositories."""

    user_name: str = Field(default="", description="git user.name for new repositories.")
    user_email: str = Field(default="", description="git user.email for new repositories.")
    editor: str = Field(default="vim", description="Editor command.")


class AIConfig(BaseModel):
    """AI commit message settings."""

    provider: Literal["openai", "anthropic"] = Field(
        default="openai", description="Completion provider."
    )
    model: str = Field(default="gpt-4o-mini", description="Model used for commit messages.")
    api_key: str = Field(
        default="", description="API key; blank falls back to the provider's env var."
    )
    max_diff_size: int = Field(
        default=4000, ge=1, description="Maximum diff bytes sent to the model."
    )
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)


class UIConfig(BaseModel):
    """UI preferences."""

    theme: str = Field(default="charm", description="Color theme name.")
    show_icons: bool = Field(default=True, description="Render Nerd Font icons.")
    animation_ms: int = Field(default=100, ge=16, description="Spinner frame interval.")


class GitHubConfig(BaseModel):
    """GitHub publishing settings."""

    default_visibility: Literal["public", "private"] = "public"
    normalize_author: bool = False


@dataclass
class ConfigLoadResult:
    path: Path
    file_loaded: bool
    created: bool = False
    env_overrides: set[str] = field(default_factory=set)
    error: str | None = None


class AppConfig(BaseSettings):
    """Application-wide configuration with nested sub-configs."""

    model_config = SettingsConfigDict(
        env_prefix="GITTY_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    git: GitConfig = Field(default_factory=GitConfig)
    ai: AIConfig = Field(default_factory=AIConfig)
    ui: UIConfig = Field(default_factory=UIConfig)
    github: GitHubConfig = Field(default_factory=GitHubConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Environment variables override config file entries.
        return (env_settings, init_settings, dotenv_settings, file_secret_settings)


def default_config_path(env_vars: Mapping[str, str] | None = None) -> Path:
    env_vars = os.environ if env_vars is None else env_vars
    candidate = env_vars.get(CONFIG_ENV_VAR)
    if candidate:
        return Path(candidate).expanduser()
    return Path.home() / ".config" / "gitty" / "config.yaml"


def _read_config_file(path: Path) -> dict[str, Any]:
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigurationError(f"Cannot read {path}: {exc}") from exc

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Syntax error in {path}: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config root in {path} must be a mapping.")
    return data


def _detect_env_overrides(env_vars: Mapping[str, str]) -> set[str]:
    """Detect which fields are overridden by environment variables.

    For nested models, detects vars like GITTY_AI__MODEL, GITTY_UI__SHOW_ICONS.
    """
    prefix = AppConfig.model_config.get("env_prefix", "")
    delimiter = AppConfig.model_config.get("env_nested_delimiter", "__")
    overrides: set[str] = set()

    nested_models: dict[str, type[BaseModel]] = {
        "git": GitConfig,
        "ai": AIConfig,
        "ui": UIConfig,
        "github": GitHubConfig,
    }

    for group_name, model_cls in nested_models.items():
        for name in model_cls.model_fields:
            env_key = f"{prefix}{group_name}{delimiter}{name}".upper()
            if env_key in env_vars:
                overrides.add(f"{group_name}.{name}")

    return overrides


def apply_api_key_fallback(config: AppConfig, env_vars: Mapping[str, str]) -> AppConfig:
    """Fill a blank ai.api_key from the provider's environment variable."""
    if config.ai.api_key:
        return config
    env_key = API_KEY_ENV_VARS.get(config.ai.provider, "OPENAI_API_KEY")
    value = env_vars.get(env_key, "")
    if not value:
        return config
    updated_ai = config.ai.model_copy(update={"api_key": value})
    return config.model_copy(update={"ai": updated_ai})


def save_config(config: AppConfig, path: Path | None = None) -> Path:
    """Write the configuration as YAML, creating parent directories.

    Raises:
        ConfigurationError: when the file cannot be written
    """
    target = path or default_config_path()
    data = config.model_dump(mode="json")
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(yaml.safe_dump(data, sort_keys=False), encoding="utf-8")
    except OSError as exc:
        raise ConfigurationError(f"Cannot write {target}: {exc}") from exc
    return target


def load_config(
    config_path: Path | None = None,
    env: Mapping[str, str] | None = None,
) -> tuple[AppConfig, ConfigLoadResult]:
    """
    Load configuration with Safe Mode fallback.

    A missing file is created with defaults. If the file is invalid, returns
    the default config plus an error message instead of raising.
    """
    env_vars: Mapping[str, str] = os.environ if env is None else {**os.environ, **env}
    resolved_path = config_path.expanduser() if config_path else default_config_path(env_vars)
    env_overrides = _detect_env_overrides(env_vars)

    error: str | None = None
    file_loaded = False
    created = False
    file_data: dict[str, Any] = {}

    if resolved_path.exists():
        try:
            file_data = _read_config_file(resolved_path)
            file_loaded = True
        except ConfigurationError as exc:
            error = str(exc)
    else:
        try:
            save_config(AppConfig.model_construct(), resolved_path)
            created = True
            logger.debug("Created default config at %s", resolved_path)
        except ConfigurationError as exc:
            logger.warning("Could not create default config: %s", exc)

    context_manager = (
        patch.dict(os.environ, env_vars, clear=False) if env is not None else nullcontext()
    )

    try:
        with context_manager:
            config = AppConfig(**file_data)
    except ValidationError as exc:
        error = str(exc)
        config = AppConfig.model_construct()

    config = apply_api_key_fallback(config, env_vars)

    load_result = ConfigLoadResult(
        path=resolved_path,
        file_loaded=file_loaded,
        created=created,
        env_overrides=env_overrides,
        error=error,
    )

    return config, load_result
