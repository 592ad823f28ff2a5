from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from gitty.core.config import (
    AppConfig,
    apply_api_key_fallback,
    default_config_path,
    load_config,
    save_config,
)
from gitty.core.result import ConfigurationError


def test_default_path_honours_env(isolate_config: Path) -> None:
    assert default_config_path() == isolate_config


def test_default_path_without_env() -> None:
    assert default_config_path({}) == Path.home() / ".config" / "gitty" / "config.yaml"


def test_missing_file_is_created_with_defaults(isolate_config: Path) -> None:
    config, meta = load_config()

    assert meta.created is True
    assert meta.file_loaded is False
    assert meta.error is None
    assert isolate_config.exists()
    written = yaml.safe_load(isolate_config.read_text(encoding="utf-8"))
    assert written["ai"]["model"] == "gpt-4o-mini"
    assert written["git"]["editor"] == "vim"
    assert config.ui.animation_ms == 100


def test_file_values_are_loaded(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text(
        "ai:\n  provider: anthropic\n  model: claude-3-5-sonnet-20241022\n"
        "github:\n  default_visibility: private\n",
        encoding="utf-8",
    )

    config, meta = load_config(config_path=path)

    assert meta.file_loaded is True
    assert config.ai.provider == "anthropic"
    assert config.github.default_visibility == "private"
    assert config.ai.max_diff_size == 4000


def test_env_overrides_file(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("ai:\n  model: from-file\n", encoding="utf-8")

    config, meta = load_config(config_path=path, env={"GITTY_AI__MODEL": "from-env"})

    assert config.ai.model == "from-env"
    assert "ai.model" in meta.env_overrides


@pytest.mark.parametrize(
    "content",
    [
        "ai: [unclosed\n",
        "- just\n- a list\n",
        "github:\n  default_visibility: internal\n",
    ],
)
def test_invalid_file_falls_back_to_defaults(tmp_path: Path, content: str) -> None:
    path = tmp_path / "config.yaml"
    path.write_text(content, encoding="utf-8")

    config, meta = load_config(config_path=path)

    assert meta.error
    assert config.github.default_visibility == "public"
    assert config.ai.provider == "openai"


def test_api_key_fallback_per_provider() -> None:
    openai_config = apply_api_key_fallback(AppConfig(), {"OPENAI_API_KEY": "sk-openai"})
    assert openai_config.ai.api_key == "sk-openai"

    anthropic_config = AppConfig.model_validate({"ai": {"provider": "anthropic"}})
    resolved = apply_api_key_fallback(anthropic_config, {"ANTHROPIC_API_KEY": "sk-ant"})
    assert resolved.ai.api_key == "sk-ant"


def test_configured_key_is_kept() -> None:
    config = AppConfig.model_validate({"ai": {"api_key": "from-file"}})
    assert apply_api_key_fallback(config, {"OPENAI_API_KEY": "env"}).ai.api_key == "from-file"


def test_save_round_trip(tmp_path: Path) -> None:
    target = tmp_path / "nested" / "dir" / "config.yaml"
    config = AppConfig.model_validate({"git": {"user_name": "Ada", "user_email": "ada@example.com"}})

    assert save_config(config, target) == target

    loaded, meta = load_config(config_path=target)
    assert meta.file_loaded
    assert loaded.git.user_name == "Ada"


def test_save_reports_unwritable_target(tmp_path: Path) -> None:
    blocker = tmp_path / "file"
    blocker.write_text("", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        save_config(AppConfig(), blocker / "config.yaml")
