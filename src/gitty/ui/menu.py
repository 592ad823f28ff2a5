"""Menu controller.

``update(state, event)`` is a pure transition function. It never runs a
command or touches the terminal; it returns the next MenuState together with
the effects the application shell must execute.

Invariants:
    - at most one flow is active, and only while mode is DELEGATING
    - at most one operation is pending; dispatching a second one raises
      FlowProtocolError
    - a completion whose ticket is not the pending ticket is dropped
    - a flow exit is applied once, after which the flow is gone
    - a message expiry only clears the message carrying the same seq
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Literal

from gitty.core.console import get_logger
from gitty.core.result import Err, FlowProtocolError, GitError, GittyError, Ok
from gitty.git.client import RepositoryStatus
from gitty.ui import styles
from gitty.ui.flows import Flow, commit, confirm, flow_on_key, flow_on_result, publish, release
from gitty.ui.flows.confirm import ConfirmKind
from gitty.ui.types import (
    MESSAGE_TTL,
    QUIT_KEYS,
    Effect,
    Event,
    FlowExit,
    FlowStep,
    KeyPressed,
    ListBranches,
    MessageExpired,
    Mode,
    OpenInBrowser,
    Operation,
    OperationDone,
    OperationResult,
    Pull,
    Push,
    Quit,
    RefreshStatus,
    RunOperation,
    ScheduleMessageClear,
    Severity,
    StageAll,
    StatusLoaded,
    StatusMessage,
    SuspendFor,
)

logger = get_logger(__name__)


class MenuAction(str, Enum):
    STAGE_ALL = "stage_all"
    COMMIT = "commit"
    AI_COMMIT = "ai_commit"
    PUSH = "push"
    PULL = "pull"
    RESET = "reset"
    ROLLBACK = "rollback"
    RELEASE = "release"
    PUBLISH = "publish"
    OPEN = "open"
    LAZYGIT = "lazygit"
    BRANCHES = "branches"
    QUIT = "quit"


@dataclass(frozen=True, slots=True)
class MenuEntry:
    icon: str
    label: str
    description: str
    shortcut: str
    action: MenuAction


MENU_ENTRIES: tuple[MenuEntry, ...] = (
    MenuEntry(styles.Icons.ADD, "Stage All", "git add .", "a", MenuAction.STAGE_ALL),
    MenuEntry(styles.Icons.COMMIT, "Commit", "Commit with message", "c", MenuAction.COMMIT),
    MenuEntry(styles.Icons.AI, "AI Commit", "Generate commit message with AI", "i", MenuAction.AI_COMMIT),
    MenuEntry(styles.Icons.PUSH, "Push", "Push to remote", "p", MenuAction.PUSH),
    MenuEntry(styles.Icons.PULL, "Pull", "Pull from remote", "l", MenuAction.PULL),
    MenuEntry(styles.Icons.RESET, "Reset", "Reset changes (hard)", "r", MenuAction.RESET),
    MenuEntry(styles.Icons.RESET, "Rollback", "Undo the last commit (hard)", "z", MenuAction.ROLLBACK),
    MenuEntry(styles.Icons.STAR, "Release", "Tag and push a release", "t", MenuAction.RELEASE),
    MenuEntry(styles.Icons.PUBLISH, "Publish", "Publish to GitHub", "u", MenuAction.PUBLISH),
    MenuEntry(styles.Icons.OPEN, "Open Repo", "Open repo in browser", "o", MenuAction.OPEN),
    MenuEntry(styles.Icons.LAZYGIT, "Lazygit", "Open lazygit", "g", MenuAction.LAZYGIT),
    MenuEntry(styles.Icons.BRANCH, "Branches", "View branches", "b", MenuAction.BRANCHES),
    MenuEntry(styles.Icons.QUIT, "Quit", "Exit gitty", "q", MenuAction.QUIT),
)

_SHORTCUTS: dict[str, MenuEntry] = {entry.shortcut: entry for entry in MENU_ENTRIES}


@dataclass(frozen=True, slots=True)
class DirectAction:
    """A menu action that runs one operation without a flow."""

    operation: Operation
    success: str
    failure: str


_DIRECT_ACTIONS: dict[MenuAction, DirectAction] = {
    MenuAction.STAGE_ALL: DirectAction(StageAll(), "All files staged", "Failed to add"),
    MenuAction.PUSH: DirectAction(Push(), "Pushed to remote", "Push failed"),
    MenuAction.PULL: DirectAction(Pull(), "Pulled from remote", "Pull failed"),
    MenuAction.OPEN: DirectAction(OpenInBrowser(), "Opened in browser", "Failed to open"),
    MenuAction.BRANCHES: DirectAction(ListBranches(), "Branches", "Failed to get branches"),
}

LAZYGIT_PROGRAM = "lazygit"


@dataclass(frozen=True, slots=True)
class MenuSettings:
    repo_name: str = "repo"
    default_visibility: Literal["public", "private"] = "public"
    message_ttl: float = MESSAGE_TTL


@dataclass(frozen=True, slots=True)
class MenuState:
    settings: MenuSettings = MenuSettings()
    status: RepositoryStatus | None = None
    cursor: int = 0
    mode: Mode = Mode.IDLE
    flow: Flow | None = None
    message: StatusMessage | None = None
    pending_ticket: int | None = None
    pending_action: MenuAction | None = None
    next_ticket: int = 1
    next_seq: int = 1

    @property
    def selected(self) -> MenuEntry:
        return MENU_ENTRIES[self.cursor]


@dataclass(frozen=True, slots=True)
class Transition:
    state: MenuState
    effects: tuple[Effect, ...] = ()


def initial_state(settings: MenuSettings | None = None) -> Transition:
    return Transition(MenuState(settings=settings or MenuSettings()), (RefreshStatus(),))


def update(state: MenuState, event: Event) -> Transition:
    match event:
        case KeyPressed():
            return _on_key(state, event)
        case OperationDone(ticket=ticket, result=result):
            return _on_operation_done(state, ticket, result)
        case StatusLoaded(status=status):
            return Transition(replace(state, status=status))
        case MessageExpired(seq=seq):
            if state.message is not None and state.message.seq == seq:
                return Transition(replace(state, message=None))
            return Transition(state)
    return Transition(state)


# -----------------------------------------------------------------------------
# Keys
# -----------------------------------------------------------------------------


def _on_key(state: MenuState, key: KeyPressed) -> Transition:
    if state.mode is Mode.QUITTING:
        return Transition(state)

    if state.mode is Mode.DELEGATING and state.flow is not None:
        return _apply_step(state, flow_on_key(state.flow, key))

    if key.key in QUIT_KEYS:
        return _quit(state)

    if state.mode is Mode.LOADING:
        return Transition(state)

    match key.key:
        case "up" | "k":
            return Transition(replace(state, cursor=max(state.cursor - 1, 0)))
        case "down" | "j":
            return Transition(replace(state, cursor=min(state.cursor + 1, len(MENU_ENTRIES) - 1)))
        case "enter" | "space":
            return run_action(state, state.selected.action)

    entry = _SHORTCUTS.get(key.key)
    if entry is not None:
        return run_action(state, entry.action)
    return Transition(state)


def _quit(state: MenuState) -> Transition:
    return Transition(replace(state, mode=Mode.QUITTING), (Quit(),))


def run_action(state: MenuState, action: MenuAction) -> Transition:
    """Start the flow or direct operation behind a menu entry."""
    settings = state.settings
    match action:
        case MenuAction.QUIT:
            return _quit(state)
        case MenuAction.COMMIT:
            return _enter_flow(state, commit.start(use_ai=False))
        case MenuAction.AI_COMMIT:
            return _enter_flow(state, commit.start(use_ai=True))
        case MenuAction.RESET:
            return _enter_flow(state, confirm.start(ConfirmKind.RESET))
        case MenuAction.ROLLBACK:
            return _enter_flow(state, confirm.start(ConfirmKind.ROLLBACK))
        case MenuAction.RELEASE:
            return _enter_flow(state, release.start())
        case MenuAction.PUBLISH:
            return _enter_flow(state, publish.start(settings.repo_name, settings.default_visibility))
        case MenuAction.LAZYGIT:
            ticket, state = _claim_ticket(state)
            loading = replace(state, mode=Mode.LOADING, pending_action=action)
            return Transition(loading, (SuspendFor(LAZYGIT_PROGRAM, ticket),))

    direct = _DIRECT_ACTIONS[action]
    state, effects = _dispatch(replace(state, mode=Mode.LOADING, pending_action=action), direct.operation)
    return Transition(state, effects)


# -----------------------------------------------------------------------------
# Operations
# -----------------------------------------------------------------------------


def _claim_ticket(state: MenuState) -> tuple[int, MenuState]:
    if state.pending_ticket is not None:
        raise FlowProtocolError(
            "an operation is already in flight",
            context={"pending_ticket": state.pending_ticket},
        )
    ticket = state.next_ticket
    return ticket, replace(state, pending_ticket=ticket, next_ticket=ticket + 1)


def _dispatch(state: MenuState, operation: Operation) -> tuple[MenuState, tuple[Effect, ...]]:
    ticket, state = _claim_ticket(state)
    logger.debug("Dispatching %s as ticket %d", type(operation).__name__, ticket)
    return state, (RunOperation(operation, ticket),)


def _on_operation_done(state: MenuState, ticket: int, result: OperationResult) -> Transition:
    if ticket != state.pending_ticket:
        logger.debug("Dropping stale completion for ticket %d", ticket)
        return Transition(state)

    state = replace(state, pending_ticket=None)

    if state.mode is Mode.DELEGATING and state.flow is not None:
        return _apply_step(state, flow_on_result(state.flow, result))

    if state.mode is Mode.LOADING and state.pending_action is not None:
        return _finish_direct(state, state.pending_action, result)

    return Transition(state)


def _finish_direct(state: MenuState, action: MenuAction, result: OperationResult) -> Transition:
    state = replace(state, mode=Mode.IDLE, pending_action=None)
    exit_ = _direct_exit(action, result)
    return _return_to_menu(state, exit_)


def _direct_exit(action: MenuAction, result: OperationResult) -> FlowExit:
    if action is MenuAction.LAZYGIT:
        match result:
            case Err(err):
                return FlowExit.error(f"Lazygit error: {err}")
        return FlowExit.silent()

    direct = _DIRECT_ACTIONS[action]
    match result:
        case Ok(list() as branches) if action is MenuAction.BRANCHES:
            return FlowExit.success(f"{direct.success}: {', '.join(branches)}")
        case Ok(_):
            return FlowExit.success(direct.success)
        case Err(err):
            return FlowExit.error(f"{_failure_prefix(action, err)}: {err}")
    return FlowExit.silent()


def _failure_prefix(action: MenuAction, err: GittyError) -> str:
    # Opening fails either reading the remote (GitError) or launching (HostingError).
    if action is MenuAction.OPEN and isinstance(err, GitError):
        return "Not a GitHub repo"
    return _DIRECT_ACTIONS[action].failure


# -----------------------------------------------------------------------------
# Flows
# -----------------------------------------------------------------------------


def _enter_flow(state: MenuState, step: FlowStep) -> Transition:
    delegating = replace(state, mode=Mode.DELEGATING, flow=step.flow)
    return _apply_step(delegating, step)


def _apply_step(state: MenuState, step: FlowStep) -> Transition:
    if step.exit is not None:
        # The flow is dropped here; later events for it find no flow.
        returned = replace(state, mode=Mode.IDLE, flow=None)
        return _return_to_menu(returned, step.exit)

    state = replace(state, flow=step.flow)
    if step.dispatch is None:
        return Transition(state)
    state, effects = _dispatch(state, step.dispatch)
    return Transition(state, effects)


def _return_to_menu(state: MenuState, exit_: FlowExit) -> Transition:
    if exit_.text:
        state = _post_message(state, exit_.text, exit_.severity)

    effects: list[Effect] = [RefreshStatus()]
    if state.message is not None:
        effects.append(ScheduleMessageClear(state.message.seq, state.settings.message_ttl))
    return Transition(state, tuple(effects))


def _post_message(state: MenuState, text: str, severity: Severity) -> MenuState:
    message = StatusMessage(text=text, severity=severity, seq=state.next_seq)
    return replace(state, message=message, next_seq=state.next_seq + 1)


__all__ = [
    "MENU_ENTRIES",
    "MenuAction",
    "MenuEntry",
    "MenuSettings",
    "MenuState",
    "Transition",
    "initial_state",
    "run_action",
    "update",
]
