"""Release flow: tag the current commit and push all tags."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Literal

from gitty.core.result import Err, Ok
from gitty.ui.fields import TextField, apply_key
from gitty.ui.types import (
    CANCEL_KEYS,
    CreateRelease,
    FlowExit,
    FlowStep,
    KeyPressed,
    OperationResult,
)

CANCELLED_MESSAGE = "Release cancelled"
EMPTY_TAG_MESSAGE = "tag name cannot be empty"


class ReleaseStage(str, Enum):
    INPUT = "input"
    CONFIRM = "confirm"
    WORKING = "working"
    DONE = "done"
    ERROR = "error"


def _tag_field() -> TextField:
    return TextField.create(placeholder="v1.0.0", max_length=64)


def _message_field() -> TextField:
    return TextField.create(placeholder="Release notes or summary")


@dataclass(frozen=True, slots=True)
class ReleaseFlow:
    stage: ReleaseStage = ReleaseStage.INPUT
    tag: TextField = field(default_factory=_tag_field)
    message: TextField = field(default_factory=_message_field)
    focus: Literal["tag", "message"] = "tag"
    validation: str = ""
    error: str = ""


def start() -> FlowStep:
    return FlowStep(ReleaseFlow())


def on_key(flow: ReleaseFlow, key: KeyPressed) -> FlowStep:
    match flow.stage:
        case ReleaseStage.INPUT:
            return _input_key(flow, key)
        case ReleaseStage.CONFIRM:
            if key.key in CANCEL_KEYS or key.character in ("n", "N"):
                return FlowStep(flow, exit=FlowExit.info(CANCELLED_MESSAGE))
            if key.character in ("y", "Y"):
                working = replace(flow, stage=ReleaseStage.WORKING)
                return FlowStep(working, dispatch=CreateRelease(flow.tag.text, flow.message.text))
        case ReleaseStage.ERROR:
            if key.key == "enter" or key.key in CANCEL_KEYS:
                return FlowStep(flow, exit=FlowExit.error(f"Error: {flow.error}"))
    return FlowStep(flow)


def _input_key(flow: ReleaseFlow, key: KeyPressed) -> FlowStep:
    if key.key in CANCEL_KEYS:
        return FlowStep(flow, exit=FlowExit.info(CANCELLED_MESSAGE))
    if key.key in ("tab", "shift+tab", "up", "down"):
        return FlowStep(replace(flow, focus="message" if flow.focus == "tag" else "tag"))
    if key.key == "enter":
        if flow.tag.is_blank:
            return FlowStep(replace(flow, focus="tag", validation=EMPTY_TAG_MESSAGE))
        return FlowStep(replace(flow, stage=ReleaseStage.CONFIRM, validation=""))
    if flow.focus == "tag":
        return FlowStep(replace(flow, tag=apply_key(flow.tag, key), validation=""))
    return FlowStep(replace(flow, message=apply_key(flow.message, key)))


def on_result(flow: ReleaseFlow, result: OperationResult) -> FlowStep:
    if flow.stage is not ReleaseStage.WORKING:
        return FlowStep(flow)
    match result:
        case Ok(_):
            done = replace(flow, stage=ReleaseStage.DONE)
            return FlowStep(done, exit=FlowExit.success(f"Release {flow.tag.text} created and pushed"))
        case Err(err):
            return FlowStep(replace(flow, stage=ReleaseStage.ERROR, error=str(err)))
    return FlowStep(flow)


__all__ = ["ReleaseFlow", "ReleaseStage", "on_key", "on_result", "start"]
