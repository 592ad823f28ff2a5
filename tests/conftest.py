from __future__ import annotations

import logging
import shutil
import sys
from collections.abc import Iterator, Sequence
from pathlib import Path
from typing import Any

import pytest
from rich.console import Console
from typer.testing import CliRunner

ROOT = Path(__file__).resolve().parent.parent
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from gitty.core.runner import CommandResult  # noqa: E402

HAS_GIT = shutil.which("git") is not None


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Skip tests that drive a real git binary when none is installed."""
    if HAS_GIT:
        return
    skip_git = pytest.mark.skip(reason="git executable not available")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip_git)


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture(autouse=True)
def isolate_config(tmp_path: Path, monkeypatch: Any) -> Path:
    """Point config to a temp path so tests don't touch user state."""
    cfg_path = tmp_path / "gitty" / "config.yaml"
    monkeypatch.setenv("GITTY_CONFIG", str(cfg_path))
    for var in ("OPENAI_API_KEY", "ANTHROPIC_API_KEY", "GITHUB_USER"):
        monkeypatch.delenv(var, raising=False)
    return cfg_path


@pytest.fixture(autouse=True)
def capture_console(monkeypatch: Any) -> Console:
    """Use an in-memory Rich console during tests."""
    test_console = Console(record=True, width=120)
    import gitty.core.console as core_console
    import gitty.main as gitty_main

    monkeypatch.setattr(core_console, "console", test_console)
    monkeypatch.setattr(gitty_main, "console", test_console)
    return test_console


@pytest.fixture
def restore_logging() -> Iterator[None]:
    """Undo handler changes made by setup_logging."""
    root = logging.getLogger()
    app_logger = logging.getLogger("gitty")
    saved = (list(root.handlers), root.level, list(app_logger.handlers), app_logger.propagate)
    yield
    root.handlers[:] = saved[0]
    root.setLevel(saved[1])
    app_logger.handlers[:] = saved[2]
    app_logger.propagate = saved[3]


class FakeGit:
    """Scripted command runner keyed by the git argument tuple.

    Unscripted commands succeed with empty output. Every call is recorded.
    """

    def __init__(self, responses: dict[tuple[str, ...], CommandResult] | None = None) -> None:
        self.responses = dict(responses or {})
        self.calls: list[tuple[str, ...]] = []

    def set(self, args: tuple[str, ...], returncode: int = 0, output: str = "") -> None:
        self.responses[args] = CommandResult(returncode, output)

    async def __call__(self, program: str, args: Sequence[str], cwd: Path | None) -> CommandResult:
        key = tuple(args)
        self.calls.append(key)
        return self.responses.get(key, CommandResult(0, ""))

    def called(self, *args: str) -> bool:
        return tuple(args) in self.calls


@pytest.fixture
def fake_git() -> FakeGit:
    return FakeGit()
