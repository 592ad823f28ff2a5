from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Any

import pytest

from gitty.core.result import Err, HostingError, Ok
from gitty.core.runner import CommandResult
from gitty.git import hosting
from gitty.git.hosting import (
    AUTH_HINT,
    auth_hint,
    build_repo_create_args,
    create_remote_repository,
    fallback_repo_url,
    open_in_browser,
)


class TestRepoCreateArgs:
    def test_public_without_description(self) -> None:
        assert build_repo_create_args("proj", "public") == [
            "repo",
            "create",
            "proj",
            "--public",
            "--source=.",
            "--remote=origin",
            "--push",
        ]

    def test_private_with_description(self) -> None:
        args = build_repo_create_args("proj", "private", "A small tool")
        assert "--private" in args
        assert args[-1] == "--description=A small tool"


class TestCreateRemoteRepository:
    @pytest.mark.asyncio
    async def test_success(self, monkeypatch: Any) -> None:
        calls: list[tuple[str, list[str], Path | None]] = []

        async def fake_run(program: str, args: Sequence[str], cwd: Path | None = None) -> CommandResult:
            calls.append((program, list(args), cwd))
            return CommandResult(0, "https://github.com/me/proj\n")

        monkeypatch.setattr(hosting, "run_command", fake_run)

        result = await create_remote_repository("proj", "public", cwd=Path("/tmp/proj"))

        assert result == Ok(None)
        assert calls[0][0] == "gh"
        assert calls[0][2] == Path("/tmp/proj")

    @pytest.mark.asyncio
    async def test_failure_keeps_gh_output(self, monkeypatch: Any) -> None:
        async def fake_run(program: str, args: Sequence[str], cwd: Path | None = None) -> CommandResult:
            return CommandResult(1, "To get started with GitHub CLI, please run:  gh auth login\n")

        monkeypatch.setattr(hosting, "run_command", fake_run)

        match await create_remote_repository("proj", "private"):
            case Err(err):
                assert isinstance(err, HostingError)
                assert "gh auth login" in str(err)
                assert auth_hint(str(err)) == AUTH_HINT
            case _:
                pytest.fail("expected gh failure")


class TestAuthHint:
    @pytest.mark.parametrize(
        "text",
        [
            "HTTP 401: Bad credentials",
            "You are not logged into any GitHub hosts",
            "gh: command not found",
            "gh: executable not found ([Errno 2] No such file or directory)",
            "error validating token",
        ],
    )
    def test_auth_related(self, text: str) -> None:
        assert auth_hint(text) == AUTH_HINT

    @pytest.mark.parametrize(
        "text",
        [
            "Name already exists on this account",
            "failed to commit: Author identity unknown",
            "fatal: unable to auto-detect email address (got 'ada@host.(none)')",
        ],
    )
    def test_unrelated(self, text: str) -> None:
        assert auth_hint(text) is None


class TestFallbackUrl:
    def test_uses_github_user(self) -> None:
        assert fallback_repo_url("proj", {"GITHUB_USER": "ada"}) == "https://github.com/ada/proj"

    def test_placeholder_user(self) -> None:
        assert fallback_repo_url("proj", {}) == "https://github.com/user/proj"


class TestOpenInBrowser:
    def test_prefers_zen_browser(self, monkeypatch: Any) -> None:
        launched: list[list[str]] = []

        def fake_popen(args: list[str], **kwargs: Any) -> None:
            assert kwargs["start_new_session"] is True
            launched.append(args)

        monkeypatch.setattr(hosting.subprocess, "Popen", fake_popen)
        monkeypatch.setattr(hosting.webbrowser, "open", lambda url: pytest.fail("should not fall back"))

        which = {"zen-browser": "/usr/bin/zen-browser"}.get
        result = open_in_browser("https://github.com/me/proj", which=which)

        assert result == Ok(None)
        assert launched == [["/usr/bin/zen-browser", "https://github.com/me/proj"]]

    def test_falls_back_to_system_browser(self, monkeypatch: Any) -> None:
        opened: list[str] = []

        def fake_open(url: str) -> bool:
            opened.append(url)
            return True

        monkeypatch.setattr(hosting.webbrowser, "open", fake_open)

        assert open_in_browser("https://example.test", which=lambda _: None) == Ok(None)
        assert opened == ["https://example.test"]

    def test_no_browser(self, monkeypatch: Any) -> None:
        monkeypatch.setattr(hosting.webbrowser, "open", lambda url: False)

        result = open_in_browser("https://example.test", which=lambda _: None)

        assert isinstance(result, Err)
        assert isinstance(result.error, HostingError)
