"""Single-confirmation destructive flows: reset and rollback."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum

from gitty.core.result import Err, Ok
from gitty.ui.types import (
    CANCEL_KEYS,
    FlowExit,
    FlowStep,
    KeyPressed,
    Operation,
    OperationResult,
    ResetHard,
    RollbackLastCommit,
)


class ConfirmKind(str, Enum):
    RESET = "reset"
    ROLLBACK = "rollback"


class ConfirmStage(str, Enum):
    CONFIRM = "confirm"
    WORKING = "working"
    DONE = "done"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class ConfirmCopy:
    title: str
    question: str
    description: str
    affirmative: str
    working: str
    cancelled: str
    done: str


COPY: dict[ConfirmKind, ConfirmCopy] = {
    ConfirmKind.RESET: ConfirmCopy(
        title="Reset Changes",
        question="Reset all changes?",
        description="This will discard all uncommitted changes (git reset --hard)",
        affirmative="Yes, reset",
        working="Resetting...",
        cancelled="Reset cancelled",
        done="Reset complete",
    ),
    ConfirmKind.ROLLBACK: ConfirmCopy(
        title="Rollback Commit",
        question="Rollback last commit?",
        description="This will discard the last commit and all changes (git reset --hard HEAD^)",
        affirmative="Yes, rollback",
        working="Rolling back...",
        cancelled="Rollback cancelled",
        done="Rolled back last commit",
    ),
}

_TOGGLE_KEYS = frozenset({"left", "right", "tab", "shift+tab", "h", "l"})


@dataclass(frozen=True, slots=True)
class ConfirmFlow:
    kind: ConfirmKind
    stage: ConfirmStage = ConfirmStage.CONFIRM
    # Highlighted answer; Cancel is highlighted first.
    affirmative: bool = False
    error: str = ""

    @property
    def copy(self) -> ConfirmCopy:
        return COPY[self.kind]


def _operation(kind: ConfirmKind) -> Operation:
    if kind is ConfirmKind.RESET:
        return ResetHard()
    return RollbackLastCommit()


def start(kind: ConfirmKind) -> FlowStep:
    return FlowStep(ConfirmFlow(kind=kind))


def on_key(flow: ConfirmFlow, key: KeyPressed) -> FlowStep:
    match flow.stage:
        case ConfirmStage.CONFIRM:
            if key.key in CANCEL_KEYS or key.character in ("n", "N"):
                return FlowStep(flow, exit=FlowExit.info(flow.copy.cancelled))
            if key.character in ("y", "Y"):
                return _run(flow)
            if key.key in _TOGGLE_KEYS:
                return FlowStep(replace(flow, affirmative=not flow.affirmative))
            if key.key == "enter":
                if flow.affirmative:
                    return _run(flow)
                return FlowStep(flow, exit=FlowExit.info(flow.copy.cancelled))
        case ConfirmStage.ERROR:
            if key.key == "enter" or key.key in CANCEL_KEYS:
                return FlowStep(flow, exit=FlowExit.error(f"Error: {flow.error}"))
    return FlowStep(flow)


def _run(flow: ConfirmFlow) -> FlowStep:
    working = replace(flow, stage=ConfirmStage.WORKING, affirmative=True)
    return FlowStep(working, dispatch=_operation(flow.kind))


def on_result(flow: ConfirmFlow, result: OperationResult) -> FlowStep:
    if flow.stage is not ConfirmStage.WORKING:
        return FlowStep(flow)
    match result:
        case Ok(_):
            return FlowStep(replace(flow, stage=ConfirmStage.DONE), exit=FlowExit.success(flow.copy.done))
        case Err(err):
            return FlowStep(replace(flow, stage=ConfirmStage.ERROR, error=str(err)))
    return FlowStep(flow)


__all__ = ["COPY", "ConfirmFlow", "ConfirmKind", "ConfirmStage", "on_key", "on_result", "start"]
