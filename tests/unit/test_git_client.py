from __future__ import annotations

from pathlib import Path

import pytest

from conftest import FakeGit
from gitty.core.result import Err, GitError, Ok
from gitty.git.client import (
    GitRepository,
    RepositoryStatus,
    classify_status,
    parse_ahead_behind,
    parse_status_line,
    to_web_url,
)

AHEAD_BEHIND = ("rev-list", "--left-right", "--count", "HEAD...@{upstream}")


def _repo(fake_git: FakeGit, root: Path = Path("/tmp/project")) -> GitRepository:
    return GitRepository(root, runner=fake_git)


class TestStatusParsing:
    def test_short_lines_are_skipped(self) -> None:
        assert parse_status_line("") is None
        assert parse_status_line("M ") is None

    def test_line_fields(self) -> None:
        entry = parse_status_line("MM src/app.py")
        assert entry is not None
        assert (entry.index_state, entry.worktree_state, entry.path) == ("M", "M", "src/app.py")
        assert entry.staged and entry.modified and not entry.untracked

    def test_classify_grid(self) -> None:
        output = "\n".join(
            [
                "M  staged.py",
                " M modified.py",
                "MM both.py",
                "A  added.py",
                "?? new.txt",
                " D deleted.py",
            ]
        )
        staged, modified, untracked = classify_status(output)
        assert staged == ("staged.py", "both.py", "added.py")
        assert modified == ("modified.py", "both.py", "deleted.py")
        assert untracked == ("new.txt",)

    def test_untracked_is_not_staged_or_modified(self) -> None:
        staged, modified, untracked = classify_status("?? notes.md\n")
        assert staged == ()
        assert modified == ()
        assert untracked == ("notes.md",)

    def test_stderr_warnings_are_not_records(self) -> None:
        output = (
            "warning: in the working copy of 'a.txt', LF will be replaced by CRLF\n"
            " M a.txt\n"
            "hint: use --no-warn to silence this\n"
        )
        staged, modified, untracked = classify_status(output)
        assert staged == ()
        assert modified == ("a.txt",)
        assert untracked == ()
        assert parse_status_line("warning: ignoring broken ref") is None

    @pytest.mark.parametrize(
        "output,expected",
        [
            ("3\t1\n", (3, 1)),
            ("0 0", (0, 0)),
            ("", (0, 0)),
            ("7", (0, 0)),
            ("a b", (0, 0)),
            ("1 2 3", (0, 0)),
        ],
    )
    def test_parse_ahead_behind(self, output: str, expected: tuple[int, int]) -> None:
        assert parse_ahead_behind(output) == expected


class TestWebUrl:
    @pytest.mark.parametrize(
        "remote,expected",
        [
            ("git@github.com:user/repo.git", "https://github.com/user/repo"),
            ("https://github.com/user/repo.git", "https://github.com/user/repo"),
            ("https://github.com/user/repo", "https://github.com/user/repo"),
        ],
    )
    def test_github_remotes(self, remote: str, expected: str) -> None:
        assert to_web_url(remote) == Ok(expected)

    def test_non_github_remote(self) -> None:
        match to_web_url("git@gitlab.com:user/repo.git"):
            case Err(err):
                assert isinstance(err, GitError)
                assert "not a GitHub repository" in str(err)
            case _:
                pytest.fail("expected an error for a non-GitHub remote")


class TestReadOperations:
    @pytest.mark.asyncio
    async def test_status_outside_repository(self, fake_git: FakeGit) -> None:
        fake_git.set(("rev-parse", "--is-inside-work-tree"), 128, "fatal: not a git repository")
        status = await _repo(fake_git).status()
        assert status == RepositoryStatus(is_repository=False)
        assert fake_git.calls == [("rev-parse", "--is-inside-work-tree")]

    @pytest.mark.asyncio
    async def test_status_snapshot(self, fake_git: FakeGit) -> None:
        fake_git.set(("rev-parse", "--is-inside-work-tree"), 0, "true\n")
        fake_git.set(("branch", "--show-current"), 0, "feature\n")
        fake_git.set(("remote", "get-url", "origin"), 0, "git@github.com:me/proj.git\n")
        fake_git.set(("status", "--porcelain"), 0, "M  a.py\n M b.py\n?? c.py\n")
        fake_git.set(AHEAD_BEHIND, 0, "2\t1\n")

        status = await _repo(fake_git).status()

        assert status.is_repository
        assert status.branch == "feature"
        assert status.staged_files == ("a.py",)
        assert status.modified_files == ("b.py",)
        assert status.untracked_files == ("c.py",)
        assert (status.ahead, status.behind) == (2, 1)
        assert status.remote_url == "git@github.com:me/proj.git"
        assert not status.is_clean

    @pytest.mark.asyncio
    async def test_no_upstream_defaults_to_zero(self, fake_git: FakeGit) -> None:
        fake_git.set(("rev-parse", "--is-inside-work-tree"), 0, "true\n")
        fake_git.set(("remote", "get-url", "origin"), 2, "error: No such remote 'origin'")
        fake_git.set(AHEAD_BEHIND, 128, "fatal: no upstream configured for branch 'main'")

        status = await _repo(fake_git).status()

        assert (status.ahead, status.behind) == (0, 0)
        assert status.remote_url is None
        assert status.branch == "main"
        assert status.is_clean

    @pytest.mark.asyncio
    async def test_has_staged_changes_uses_exit_code(self, fake_git: FakeGit) -> None:
        repo = _repo(fake_git)
        fake_git.set(("diff", "--cached", "--quiet"), 1)
        assert await repo.has_staged_changes() is True
        fake_git.set(("diff", "--cached", "--quiet"), 0)
        assert await repo.has_staged_changes() is False

    @pytest.mark.asyncio
    async def test_branches_strip_current_marker(self, fake_git: FakeGit) -> None:
        fake_git.set(("branch", "-a"), 0, "  develop\n* main\n  remotes/origin/main\n")
        assert await _repo(fake_git).branches() == Ok(["develop", "main", "remotes/origin/main"])

    @pytest.mark.asyncio
    async def test_github_url_from_origin(self, fake_git: FakeGit) -> None:
        fake_git.set(("remote", "get-url", "origin"), 0, "git@github.com:me/proj.git\n")
        assert await _repo(fake_git).github_url() == Ok("https://github.com/me/proj")

    def test_repo_name_is_directory_name(self, fake_git: FakeGit) -> None:
        assert _repo(fake_git, Path("/work/my-tool")).repo_name() == "my-tool"


class TestWriteOperations:
    @pytest.mark.asyncio
    async def test_failure_carries_raw_output(self, fake_git: FakeGit) -> None:
        fake_git.set(("push",), 1, "fatal: The current branch has no upstream branch.\n")

        result = await _repo(fake_git).push()

        match result:
            case Err(err):
                assert str(err) == "fatal: The current branch has no upstream branch."
                assert err.context["returncode"] == 1
                assert err.context["args"] == ["push"]
            case _:
                pytest.fail("push should have failed")

    @pytest.mark.asyncio
    async def test_commit_passes_message_verbatim(self, fake_git: FakeGit) -> None:
        message = "feat: add thing\n\n- detail"
        assert await _repo(fake_git).commit(message) == Ok(None)
        assert fake_git.calls == [("commit", "-m", message)]

    @pytest.mark.asyncio
    async def test_lightweight_tag_without_message(self, fake_git: FakeGit) -> None:
        await _repo(fake_git).tag_annotated("v1.0.0", "")
        assert fake_git.calls == [("tag", "v1.0.0")]

    @pytest.mark.asyncio
    async def test_annotated_tag_with_message(self, fake_git: FakeGit) -> None:
        await _repo(fake_git).tag_annotated("v1.0.0", "First release")
        assert fake_git.calls == [("tag", "-a", "v1.0.0", "-m", "First release")]

    @pytest.mark.asyncio
    async def test_rollback_resets_to_parent(self, fake_git: FakeGit) -> None:
        await _repo(fake_git).rollback()
        assert fake_git.calls == [("reset", "--hard", "HEAD^")]

    @pytest.mark.asyncio
    async def test_set_user_stops_on_first_failure(self, fake_git: FakeGit) -> None:
        fake_git.set(("config", "user.name", "Ada"), 1, "error: could not lock config file")

        result = await _repo(fake_git).set_user("Ada", "ada@example.com")

        assert isinstance(result, Err)
        assert fake_git.calls == [("config", "user.name", "Ada")]
