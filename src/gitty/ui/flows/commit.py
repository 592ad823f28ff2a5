"""Commit flow, manual and AI-assisted.

CHECKING -> NO_CHANGES | INPUT | GENERATING -> CONFIRM -> COMMITTING -> DONE
Any failed operation lands in ERROR until acknowledged.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Literal

from gitty.ai import compose_message, split_message
from gitty.core.result import Err, Ok
from gitty.ui.fields import TextField, apply_key, set_value
from gitty.ui.types import (
    CANCEL_KEYS,
    CheckStagedChanges,
    CommitChanges,
    FlowExit,
    FlowStep,
    GenerateCommitMessage,
    KeyPressed,
    NEWLINE_KEYS,
    OperationResult,
    StagedChanges,
)

NO_CHANGES_MESSAGE = "No staged changes to commit"
CANCELLED_MESSAGE = "Commit cancelled"
DONE_MESSAGE = "Commit successful!"
EMPTY_TITLE_MESSAGE = "commit title cannot be empty"


class CommitStage(str, Enum):
    CHECKING = "checking"
    NO_CHANGES = "no_changes"
    INPUT = "input"
    GENERATING = "generating"
    CONFIRM = "confirm"
    COMMITTING = "committing"
    DONE = "done"
    ERROR = "error"


# Stages with an operation in flight; keys are ignored there.
BUSY_STAGES = frozenset({CommitStage.CHECKING, CommitStage.GENERATING, CommitStage.COMMITTING})


def _title_field() -> TextField:
    return TextField.create(placeholder="Enter commit message...", max_length=200)


def _body_field() -> TextField:
    return TextField.create(multiline=True, placeholder="Enter detailed commit message (optional)...")


@dataclass(frozen=True, slots=True)
class CommitFlow:
    use_ai: bool = False
    stage: CommitStage = CommitStage.CHECKING
    title: TextField = field(default_factory=_title_field)
    body: TextField = field(default_factory=_body_field)
    focus: Literal["title", "body"] = "title"
    message: str = ""
    generated: bool = False
    validation: str = ""
    error: str = ""


def start(use_ai: bool) -> FlowStep:
    flow = CommitFlow(use_ai=use_ai)
    return FlowStep(flow, dispatch=CheckStagedChanges(include_diff=use_ai))


def on_key(flow: CommitFlow, key: KeyPressed) -> FlowStep:
    if flow.stage in BUSY_STAGES or flow.stage is CommitStage.DONE:
        return FlowStep(flow)

    match flow.stage:
        case CommitStage.NO_CHANGES:
            if key.key == "enter" or key.key in CANCEL_KEYS:
                return FlowStep(flow, exit=FlowExit.info(NO_CHANGES_MESSAGE))
            return FlowStep(flow)
        case CommitStage.ERROR:
            if key.key == "enter" or key.key in CANCEL_KEYS:
                return FlowStep(flow, exit=FlowExit.error(f"Error: {flow.error}"))
            return FlowStep(flow)
        case CommitStage.CONFIRM:
            return _confirm_key(flow, key)
        case _:
            return _input_key(flow, key)


def _confirm_key(flow: CommitFlow, key: KeyPressed) -> FlowStep:
    if key.key in CANCEL_KEYS:
        return FlowStep(flow, exit=FlowExit.silent())
    match key.character:
        case "y" | "Y":
            committing = replace(flow, stage=CommitStage.COMMITTING)
            return FlowStep(committing, dispatch=CommitChanges(flow.message))
        case "n" | "N":
            return FlowStep(flow, exit=FlowExit.info(CANCELLED_MESSAGE))
        case "e" | "E":
            title, body = split_message(flow.message)
            editing = replace(
                flow,
                stage=CommitStage.INPUT,
                title=set_value(flow.title, title),
                body=set_value(flow.body, body),
                focus="title",
                validation="",
            )
            return FlowStep(editing)
    return FlowStep(flow)


def _input_key(flow: CommitFlow, key: KeyPressed) -> FlowStep:
    if key.key in CANCEL_KEYS:
        return FlowStep(flow, exit=FlowExit.silent())

    if key.key in ("tab", "shift+tab"):
        return FlowStep(replace(flow, focus="body" if flow.focus == "title" else "title"))

    if key.key == "enter":
        return _submit(flow)

    if key.key in NEWLINE_KEYS and flow.focus == "title":
        return FlowStep(flow)

    if flow.focus == "title":
        return FlowStep(replace(flow, title=apply_key(flow.title, key), validation=""))
    return FlowStep(replace(flow, body=apply_key(flow.body, key)))


def _submit(flow: CommitFlow) -> FlowStep:
    if flow.title.is_blank:
        return FlowStep(replace(flow, validation=EMPTY_TITLE_MESSAGE))
    message = compose_message(flow.title.text, flow.body.text)
    return FlowStep(replace(flow, stage=CommitStage.CONFIRM, message=message, validation=""))


def on_result(flow: CommitFlow, result: OperationResult) -> FlowStep:
    match flow.stage, result:
        case CommitStage.CHECKING, Ok(StagedChanges(has_changes=False)):
            return FlowStep(replace(flow, stage=CommitStage.NO_CHANGES))
        case CommitStage.CHECKING, Ok(StagedChanges(diff=diff)):
            if flow.use_ai:
                generating = replace(flow, stage=CommitStage.GENERATING)
                return FlowStep(generating, dispatch=GenerateCommitMessage(diff))
            return FlowStep(replace(flow, stage=CommitStage.INPUT))
        case CommitStage.GENERATING, Ok(str() as message):
            return FlowStep(replace(flow, stage=CommitStage.CONFIRM, message=message, generated=True))
        case CommitStage.COMMITTING, Ok(_):
            return FlowStep(replace(flow, stage=CommitStage.DONE), exit=FlowExit.success(DONE_MESSAGE))
        case (CommitStage.CHECKING | CommitStage.GENERATING | CommitStage.COMMITTING), Err(err):
            return FlowStep(replace(flow, stage=CommitStage.ERROR, error=str(err)))
    return FlowStep(flow)


__all__ = ["CommitFlow", "CommitStage", "on_key", "on_result", "start"]
