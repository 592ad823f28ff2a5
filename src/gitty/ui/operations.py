"""Execution of operation descriptors.

The menu controller only describes work; ``OperationRunner.run`` performs it
against the repository, the hosting CLI and the commit message provider and
returns a Result. Failures come back as ``Err``; nothing here raises for an
expected command failure.
"""

from __future__ import annotations

from gitty.ai import generate_commit_message
from gitty.core.config import AppConfig
from gitty.core.console import get_logger
from gitty.core.result import Err, GitError, GittyError, Ok
from gitty.git.client import GitRepository, RepositoryStatus
from gitty.git.hosting import create_remote_repository, fallback_repo_url, open_in_browser
from gitty.providers import BaseLLMProvider
from gitty.ui.types import (
    CheckStagedChanges,
    CommitChanges,
    CreateRelease,
    GenerateCommitMessage,
    InspectPublishTarget,
    ListBranches,
    OpenInBrowser,
    Operation,
    OperationResult,
    PublishNew,
    PublishOutcome,
    PublishTarget,
    Pull,
    Push,
    PushExisting,
    ResetHard,
    RollbackLastCommit,
    StageAll,
    StagedChanges,
)

logger = get_logger(__name__)

DEFAULT_BRANCH = "main"
UPDATE_COMMIT_MESSAGE = "Update"
ORIGIN = "origin"


def _prefixed(prefix: str, err: GittyError) -> GitError:
    return GitError(f"{prefix}: {err}", context=err.context)


class OperationRunner:
    """Runs one operation at a time on behalf of the application shell."""

    def __init__(
        self,
        repo: GitRepository,
        config: AppConfig,
        provider: BaseLLMProvider | None = None,
    ) -> None:
        self.repo = repo
        self.config = config
        self.provider = provider

    async def status(self) -> RepositoryStatus:
        return await self.repo.status()

    async def run(self, operation: Operation) -> OperationResult:
        logger.debug("Running %s", type(operation).__name__)
        match operation:
            case StageAll():
                return await self.repo.add_all()
            case Push():
                return await self.repo.push()
            case Pull():
                return await self.repo.pull()
            case OpenInBrowser():
                return await self._open_in_browser()
            case ListBranches():
                return await self.repo.branches()
            case CheckStagedChanges(include_diff=include_diff):
                return await self._check_staged(include_diff)
            case GenerateCommitMessage(diff=diff):
                return await generate_commit_message(diff, self.config, self.provider)
            case CommitChanges(message=message):
                return await self.repo.commit(message)
            case ResetHard():
                return await self.repo.reset_hard()
            case RollbackLastCommit():
                return await self.repo.rollback()
            case CreateRelease(tag=tag, message=message):
                return await self._create_release(tag, message)
            case InspectPublishTarget():
                return await self._inspect_publish_target()
            case PushExisting(branch=branch):
                return await self._push_existing(branch)
            case PublishNew():
                return await self._publish_new(operation)
        raise TypeError(f"Unknown operation: {operation!r}")

    async def _open_in_browser(self) -> OperationResult:
        match await self.repo.github_url():
            case Err(err):
                return Err(err)
            case Ok(url):
                return open_in_browser(url).map(lambda _: url)

    async def _check_staged(self, include_diff: bool) -> OperationResult:
        if not await self.repo.has_staged_changes():
            return Ok(StagedChanges(has_changes=False))
        if not include_diff:
            return Ok(StagedChanges(has_changes=True))
        return (await self.repo.staged_diff()).map(lambda diff: StagedChanges(True, diff))

    async def _create_release(self, tag: str, message: str) -> OperationResult:
        match await self.repo.tag_annotated(tag, message):
            case Err(err):
                return Err(_prefixed("failed to create tag", err))
        match await self.repo.push_tags():
            case Err(err):
                return Err(_prefixed("failed to push tags", err))
        return Ok(tag)

    async def _inspect_publish_target(self) -> OperationResult:
        if not await self.repo.is_repository():
            match await self.repo.init():
                case Err(err):
                    return Err(_prefixed("failed to initialize repository", err))
        branch = (await self.repo.current_branch()).unwrap_or(DEFAULT_BRANCH) or DEFAULT_BRANCH
        return Ok(PublishTarget(branch=branch, has_remote=await self.repo.has_remote(ORIGIN)))

    async def _repository_url(self) -> str | None:
        match await self.repo.github_url():
            case Ok(url):
                return url
        match await self.repo.remote_url(ORIGIN):
            case Ok(remote):
                return remote
        return None

    async def _push_existing(self, branch: str) -> OperationResult:
        status = await self.repo.status()
        if status.has_modified or status.has_untracked:
            match await self.repo.add_all():
                case Err(err):
                    return Err(_prefixed("failed to stage changes", err))
            match await self.repo.commit(UPDATE_COMMIT_MESSAGE):
                case Err(err):
                    return Err(_prefixed("failed to commit", err))

        match await self.repo.push_with_upstream(ORIGIN, branch):
            case Err(err):
                return Err(_prefixed("failed to push", err))

        url = await self._repository_url() or fallback_repo_url(self.repo.repo_name())
        return Ok(PublishOutcome(url=url))

    async def _publish_new(self, request: PublishNew) -> OperationResult:
        git_config = self.config.git
        if git_config.user_name and git_config.user_email:
            match await self.repo.set_user(git_config.user_name, git_config.user_email):
                case Err(err):
                    logger.warning("Could not set git user: %s", err.describe())

        match await self.repo.add_all():
            case Err(err):
                return Err(_prefixed("failed to stage changes", err))

        if await self.repo.has_staged_changes():
            match await self.repo.commit(request.commit_message):
                case Err(err):
                    return Err(_prefixed("failed to commit", err))

        warning = await self._tag_for_publish(request.tag) if request.tag else None

        created = await create_remote_repository(
            request.name, request.visibility, request.description, cwd=self.repo.path
        )
        if isinstance(created, Err):
            return created

        url = (await self.repo.github_url()).unwrap_or("") or fallback_repo_url(request.name)
        return Ok(PublishOutcome(url=url, warning=warning))

    async def _tag_for_publish(self, tag: str) -> str | None:
        """Tag the initial commit; a failure is reported but never blocks publishing."""
        match await self.repo.tag(tag):
            case Ok(_):
                return None
            case Err(err) if "already exists" in str(err):
                logger.debug("Tag %s already exists, keeping it", tag)
                return None
            case Err(err):
                logger.warning("Failed to create tag %s: %s", tag, err.describe())
                return f"tag {tag} not created"
        return None


__all__ = ["OperationRunner"]
