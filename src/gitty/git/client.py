from __future__ import annotations

import os
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from pathlib import Path

from gitty.core.console import get_logger
from gitty.core.result import Err, GitError, Ok, Result
from gitty.core.runner import CommandResult, run_command

logger = get_logger(__name__)

CommandRunner = Callable[[str, Sequence[str], Path | None], Awaitable[CommandResult]]

# Slot values in a short-format status code that mean "no change in this slot".
_UNCHANGED_SLOTS = frozenset({" ", "?"})
_STATUS_CODES = frozenset(" MTADRCU?!")


@dataclass(frozen=True, slots=True)
class RepositoryStatus:
    """Point-in-time snapshot of the working tree, replaced wholesale on refresh."""

    is_repository: bool = False
    branch: str = ""
    staged_files: tuple[str, ...] = ()
    modified_files: tuple[str, ...] = ()
    untracked_files: tuple[str, ...] = ()
    ahead: int = 0
    behind: int = 0
    remote_url: str | None = None

    @property
    def has_staged(self) -> bool:
        return bool(self.staged_files)

    @property
    def has_modified(self) -> bool:
        return bool(self.modified_files)

    @property
    def has_untracked(self) -> bool:
        return bool(self.untracked_files)

    @property
    def is_clean(self) -> bool:
        return not (self.staged_files or self.modified_files or self.untracked_files)


@dataclass(frozen=True, slots=True)
class StatusEntry:
    index_state: str
    worktree_state: str
    path: str

    @property
    def staged(self) -> bool:
        return self.index_state not in _UNCHANGED_SLOTS

    @property
    def modified(self) -> bool:
        return self.worktree_state not in _UNCHANGED_SLOTS

    @property
    def untracked(self) -> bool:
        return self.index_state == "?" and self.worktree_state == "?"


def parse_status_line(line: str) -> StatusEntry | None:
    """Parse one ``git status --porcelain`` record.

    Short lines and lines that are not an ``XY path`` record, such as warnings
    git writes to stderr, yield None.
    """
    if len(line) < 4 or line[2] != " ":
        return None
    if line[0] not in _STATUS_CODES or line[1] not in _STATUS_CODES:
        return None
    return StatusEntry(index_state=line[0], worktree_state=line[1], path=line[3:].strip())


def classify_status(output: str) -> tuple[tuple[str, ...], tuple[str, ...], tuple[str, ...]]:
    """Split porcelain output into (staged, modified, untracked) path tuples."""
    staged: list[str] = []
    modified: list[str] = []
    untracked: list[str] = []
    for line in output.splitlines():
        entry = parse_status_line(line)
        if entry is None:
            continue
        if entry.staged:
            staged.append(entry.path)
        if entry.modified:
            modified.append(entry.path)
        if entry.untracked:
            untracked.append(entry.path)
    return tuple(staged), tuple(modified), tuple(untracked)


def parse_ahead_behind(output: str) -> tuple[int, int]:
    """Parse ``git rev-list --left-right --count`` output; anything else is 0/0."""
    parts = output.split()
    if len(parts) != 2:
        return 0, 0
    return _safe_int(parts[0]), _safe_int(parts[1])


def _safe_int(value: str) -> int:
    try:
        return max(int(value), 0)
    except (TypeError, ValueError):
        return 0


def to_web_url(remote_url: str) -> Result[str, GitError]:
    """Convert a GitHub remote URL (SSH or HTTPS) into its web URL."""
    if "github.com" not in remote_url:
        return Err(GitError("not a GitHub repository", context={"remote": remote_url}))

    url = remote_url.strip()
    if url.startswith("git@"):
        url = "https://" + url.removeprefix("git@").replace(":", "/", 1)
    return Ok(url.removesuffix(".git"))


class GitRepository:
    """Async git wrapper over the command executor, rooted at one directory."""

    def __init__(self, root: Path | None = None, runner: CommandRunner = run_command) -> None:
        self._root = root or Path.cwd()
        self._runner = runner

    @property
    def path(self) -> Path:
        return self._root

    async def _git(self, *args: str) -> CommandResult:
        return await self._runner("git", args, self._root)

    async def _git_checked(self, *args: str) -> Result[str, GitError]:
        """Run git and map a failing exit status to GitError with the raw output."""
        result = await self._git(*args)
        if not result.exit_succeeded:
            detail = result.output.strip() or f"git {' '.join(args)} failed"
            return Err(
                GitError(
                    detail,
                    context={"cwd": str(self._root), "args": list(args), "returncode": result.returncode},
                )
            )
        return Ok(result.output)

    async def _git_void(self, *args: str) -> Result[None, GitError]:
        result = await self._git_checked(*args)
        return result.map(lambda _: None)

    # -------------------------------------------------------------------------
    # Read operations
    # -------------------------------------------------------------------------

    async def is_repository(self) -> bool:
        result = await self._git("rev-parse", "--is-inside-work-tree")
        return result.exit_succeeded and result.output.strip() == "true"

    async def current_branch(self) -> Result[str, GitError]:
        match await self._git_checked("branch", "--show-current"):
            case Ok(output):
                return Ok(output.strip() or "main")
            case Err(err):
                return Err(err)

    async def remote_url(self, name: str = "origin") -> Result[str, GitError]:
        match await self._git_checked("remote", "get-url", name):
            case Ok(output):
                return Ok(output.strip())
            case Err(err):
                return Err(err)

    async def has_remote(self, name: str = "origin") -> bool:
        return (await self._git("remote", "get-url", name)).exit_succeeded

    async def ahead_behind(self) -> tuple[int, int]:
        """Commits ahead of/behind upstream; no upstream means (0, 0)."""
        result = await self._git("rev-list", "--left-right", "--count", "HEAD...@{upstream}")
        if not result.exit_succeeded:
            return 0, 0
        return parse_ahead_behind(result.output)

    async def status(self) -> RepositoryStatus:
        """Read a fresh RepositoryStatus. Never fails; partial reads degrade to defaults."""
        if not await self.is_repository():
            return RepositoryStatus(is_repository=False)

        branch = (await self.current_branch()).unwrap_or("")
        remote = (await self.remote_url()).unwrap_or("") or None

        match await self._git_checked("status", "--porcelain"):
            case Ok(output):
                staged, modified, untracked = classify_status(output)
            case Err(err):
                logger.debug("git status failed: %s", err.describe())
                staged, modified, untracked = (), (), ()

        ahead, behind = await self.ahead_behind()
        return RepositoryStatus(
            is_repository=True,
            branch=branch,
            staged_files=staged,
            modified_files=modified,
            untracked_files=untracked,
            ahead=ahead,
            behind=behind,
            remote_url=remote,
        )

    async def branches(self) -> Result[list[str], GitError]:
        match await self._git_checked("branch", "-a"):
            case Ok(output):
                names = [line.strip().removeprefix("*").strip() for line in output.splitlines()]
                return Ok([name for name in names if name])
            case Err(err):
                return Err(err)

    async def has_staged_changes(self) -> bool:
        # Exit code 1 means the index differs from HEAD.
        result = await self._git("diff", "--cached", "--quiet")
        return result.returncode == 1

    async def staged_diff(self) -> Result[str, GitError]:
        return await self._git_checked("diff", "--cached")

    async def github_url(self) -> Result[str, GitError]:
        match await self.remote_url():
            case Ok(url):
                return to_web_url(url)
            case Err(err):
                return Err(err)

    def repo_name(self) -> str:
        return self._root.name or os.path.basename(os.getcwd()) or "repo"

    # -------------------------------------------------------------------------
    # Write operations
    # -------------------------------------------------------------------------

    async def init(self) -> Result[None, GitError]:
        return await self._git_void("init")

    async def add_all(self) -> Result[None, GitError]:
        return await self._git_void("add", ".")

    async def commit(self, message: str) -> Result[None, GitError]:
        return await self._git_void("commit", "-m", message)

    async def push(self) -> Result[None, GitError]:
        return await self._git_void("push")

    async def push_with_upstream(self, remote: str, branch: str) -> Result[None, GitError]:
        return await self._git_void("push", "-u", remote, branch)

    async def pull(self) -> Result[None, GitError]:
        return await self._git_void("pull")

    async def reset_hard(self) -> Result[None, GitError]:
        return await self._git_void("reset", "--hard")

    async def rollback(self) -> Result[None, GitError]:
        """Discard the most recent commit and all uncommitted changes."""
        return await self._git_void("reset", "--hard", "HEAD^")

    async def tag(self, name: str) -> Result[None, GitError]:
        return await self._git_void("tag", name)

    async def tag_annotated(self, name: str, message: str) -> Result[None, GitError]:
        """Create an annotated tag, or a lightweight one when message is empty."""
        if not message:
            return await self.tag(name)
        return await self._git_void("tag", "-a", name, "-m", message)

    async def push_tags(self) -> Result[None, GitError]:
        return await self._git_void("push", "--tags")

    async def set_config(self, key: str, value: str) -> Result[None, GitError]:
        return await self._git_void("config", key, value)

    async def set_user(self, name: str, email: str) -> Result[None, GitError]:
        match await self.set_config("user.name", name):
            case Err(err):
                return Err(err)
            case Ok(_):
                pass
        return await self.set_config("user.email", email)
