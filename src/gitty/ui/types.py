"""Values exchanged between the menu controller, its flows and the app shell.

Everything here is an immutable dataclass. The controller consumes events
and returns effects; operations are descriptors that only the operation
runner knows how to execute.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Literal

from gitty.core.result import Err, GittyError, Ok
from gitty.git.client import RepositoryStatus

if TYPE_CHECKING:
    from gitty.ui.flows import Flow

CANCEL_KEYS = frozenset({"escape", "ctrl+c"})
QUIT_KEYS = frozenset({"q", "ctrl+c"})
NEWLINE_KEYS = frozenset({"alt+enter", "ctrl+j"})

# Seconds a status message stays visible.
MESSAGE_TTL = 3.0


class Severity(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    ERROR = "error"


class Mode(str, Enum):
    IDLE = "idle"
    DELEGATING = "delegating"
    LOADING = "loading"
    QUITTING = "quitting"


@dataclass(frozen=True, slots=True)
class StatusMessage:
    """Transient status line; seq identifies it for expiry."""

    text: str
    severity: Severity
    seq: int


# -----------------------------------------------------------------------------
# Operations
# -----------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class StageAll:
    pass


@dataclass(frozen=True, slots=True)
class Push:
    pass


@dataclass(frozen=True, slots=True)
class Pull:
    pass


@dataclass(frozen=True, slots=True)
class OpenInBrowser:
    pass


@dataclass(frozen=True, slots=True)
class ListBranches:
    pass


@dataclass(frozen=True, slots=True)
class CheckStagedChanges:
    include_diff: bool = False


@dataclass(frozen=True, slots=True)
class GenerateCommitMessage:
    diff: str


@dataclass(frozen=True, slots=True)
class CommitChanges:
    message: str


@dataclass(frozen=True, slots=True)
class ResetHard:
    pass


@dataclass(frozen=True, slots=True)
class RollbackLastCommit:
    pass


@dataclass(frozen=True, slots=True)
class CreateRelease:
    tag: str
    message: str = ""


@dataclass(frozen=True, slots=True)
class InspectPublishTarget:
    pass


@dataclass(frozen=True, slots=True)
class PushExisting:
    branch: str


@dataclass(frozen=True, slots=True)
class PublishNew:
    name: str
    visibility: Literal["public", "private"]
    description: str = ""
    commit_message: str = "Initial commit"
    tag: str = ""


Operation = (
    StageAll
    | Push
    | Pull
    | OpenInBrowser
    | ListBranches
    | CheckStagedChanges
    | GenerateCommitMessage
    | CommitChanges
    | ResetHard
    | RollbackLastCommit
    | CreateRelease
    | InspectPublishTarget
    | PushExisting
    | PublishNew
)


@dataclass(frozen=True, slots=True)
class StagedChanges:
    has_changes: bool
    diff: str = ""


@dataclass(frozen=True, slots=True)
class PublishTarget:
    branch: str
    has_remote: bool


@dataclass(frozen=True, slots=True)
class PublishOutcome:
    url: str
    warning: str | None = None


OperationResult = Ok[Any] | Err[GittyError]


# -----------------------------------------------------------------------------
# Events
# -----------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class KeyPressed:
    """A key, named as Textual names it, plus its printable character if any."""

    key: str
    character: str | None = None


@dataclass(frozen=True, slots=True)
class OperationDone:
    ticket: int
    result: OperationResult


@dataclass(frozen=True, slots=True)
class StatusLoaded:
    status: RepositoryStatus


@dataclass(frozen=True, slots=True)
class MessageExpired:
    seq: int


Event = KeyPressed | OperationDone | StatusLoaded | MessageExpired


# -----------------------------------------------------------------------------
# Effects
# -----------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class RunOperation:
    operation: Operation
    ticket: int


@dataclass(frozen=True, slots=True)
class RefreshStatus:
    pass


@dataclass(frozen=True, slots=True)
class ScheduleMessageClear:
    seq: int
    delay: float = MESSAGE_TTL


@dataclass(frozen=True, slots=True)
class SuspendFor:
    """Hand the terminal to a full-screen program; completes like an operation."""

    program: str
    ticket: int


@dataclass(frozen=True, slots=True)
class Quit:
    pass


Effect = RunOperation | RefreshStatus | ScheduleMessageClear | SuspendFor | Quit


# -----------------------------------------------------------------------------
# Flow handback
# -----------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class FlowExit:
    """Request to return to the menu; text None means a silent return."""

    text: str | None = None
    severity: Severity = Severity.INFO

    @classmethod
    def silent(cls) -> FlowExit:
        return cls()

    @classmethod
    def info(cls, text: str) -> FlowExit:
        return cls(text, Severity.INFO)

    @classmethod
    def success(cls, text: str) -> FlowExit:
        return cls(text, Severity.SUCCESS)

    @classmethod
    def error(cls, text: str) -> FlowExit:
        return cls(text, Severity.ERROR)


@dataclass(frozen=True, slots=True)
class FlowStep:
    """Outcome of feeding one key or completion to a flow."""

    flow: Flow
    dispatch: Operation | None = None
    exit: FlowExit | None = None
