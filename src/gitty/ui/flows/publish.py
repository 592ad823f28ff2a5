"""Publish flow.

With an existing origin the form is skipped: pending changes are committed
and the branch is pushed with upstream tracking. Without one, the form
collects the repository details and nothing runs until it is confirmed.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Literal

from gitty.core.result import Err, Ok
from gitty.git.hosting import auth_hint
from gitty.ui.fields import TextField, apply_key, set_value
from gitty.ui.types import (
    CANCEL_KEYS,
    FlowExit,
    FlowStep,
    InspectPublishTarget,
    KeyPressed,
    OperationResult,
    PublishNew,
    PublishOutcome,
    PublishTarget,
    PushExisting,
)

CANCELLED_MESSAGE = "Publish cancelled"
DEFAULT_COMMIT_MESSAGE = "Initial commit"

Visibility = Literal["public", "private"]
FormField = Literal["name", "description", "visibility", "commit_message", "add_tag", "tag"]


class PublishStage(str, Enum):
    CHECKING = "checking"
    FORM = "form"
    CONFIRM = "confirm"
    WORKING = "working"
    DONE = "done"
    ERROR = "error"


def _commit_field() -> TextField:
    return TextField.create(DEFAULT_COMMIT_MESSAGE, placeholder=DEFAULT_COMMIT_MESSAGE, max_length=200)


def _description_field() -> TextField:
    return TextField.create(placeholder="A brief description...", max_length=200)


def _tag_field() -> TextField:
    return TextField.create(placeholder="v1.0.0", max_length=20)


@dataclass(frozen=True, slots=True)
class PublishFlow:
    default_name: str
    stage: PublishStage = PublishStage.CHECKING
    name: TextField = field(default_factory=lambda: TextField.create(max_length=100))
    description: TextField = field(default_factory=_description_field)
    visibility: Visibility = "public"
    commit_message: TextField = field(default_factory=_commit_field)
    add_tag: bool = False
    tag: TextField = field(default_factory=_tag_field)
    focus: FormField = "name"
    branch: str = "main"
    has_remote: bool = False
    validation: str = ""
    error: str = ""
    hint: str | None = None

    @property
    def fields(self) -> tuple[FormField, ...]:
        """Form fields in tab order; the tag input only exists when tagging."""
        order: tuple[FormField, ...] = ("name", "description", "visibility", "commit_message", "add_tag")
        return (*order, "tag") if self.add_tag else order

    def request(self) -> PublishNew:
        return PublishNew(
            name=self.name.text or self.default_name,
            visibility=self.visibility,
            description=self.description.text,
            commit_message=self.commit_message.text or DEFAULT_COMMIT_MESSAGE,
            tag=self.tag.text if self.add_tag else "",
        )


def start(default_name: str, default_visibility: Visibility = "public") -> FlowStep:
    flow = PublishFlow(
        default_name=default_name,
        name=TextField.create(default_name, placeholder=default_name, max_length=100),
        visibility=default_visibility,
    )
    return FlowStep(flow, dispatch=InspectPublishTarget())


def on_key(flow: PublishFlow, key: KeyPressed) -> FlowStep:
    match flow.stage:
        case PublishStage.FORM:
            return _form_key(flow, key)
        case PublishStage.CONFIRM:
            if key.key in CANCEL_KEYS:
                return FlowStep(flow, exit=FlowExit.info(CANCELLED_MESSAGE))
            if key.key == "enter":
                return FlowStep(replace(flow, stage=PublishStage.WORKING), dispatch=flow.request())
            if key.key == "backspace":
                return FlowStep(replace(flow, stage=PublishStage.FORM))
        case PublishStage.ERROR:
            if key.key == "enter" or key.key in CANCEL_KEYS:
                return FlowStep(flow, exit=FlowExit.error(f"Error: {flow.error}"))
    return FlowStep(flow)


def _move_focus(flow: PublishFlow, delta: int) -> PublishFlow:
    order = flow.fields
    index = order.index(flow.focus) if flow.focus in order else 0
    return replace(flow, focus=order[(index + delta) % len(order)])


def _form_key(flow: PublishFlow, key: KeyPressed) -> FlowStep:
    if key.key in CANCEL_KEYS:
        return FlowStep(flow, exit=FlowExit.info(CANCELLED_MESSAGE))
    if key.key in ("tab", "down"):
        return FlowStep(_move_focus(flow, 1))
    if key.key in ("shift+tab", "up"):
        return FlowStep(_move_focus(flow, -1))
    if key.key == "enter":
        return _advance(flow)

    match flow.focus:
        case "visibility":
            if key.key in ("left", "right", "space"):
                toggled: Visibility = "private" if flow.visibility == "public" else "public"
                return FlowStep(replace(flow, visibility=toggled))
            return FlowStep(flow)
        case "add_tag":
            if key.key in ("left", "right", "space"):
                return FlowStep(replace(flow, add_tag=not flow.add_tag))
            if key.character in ("y", "Y"):
                return FlowStep(replace(flow, add_tag=True))
            if key.character in ("n", "N"):
                return FlowStep(replace(flow, add_tag=False))
            return FlowStep(flow)
        case "name":
            return FlowStep(replace(flow, name=apply_key(flow.name, key), validation=""))
        case "description":
            return FlowStep(replace(flow, description=apply_key(flow.description, key)))
        case "commit_message":
            return FlowStep(replace(flow, commit_message=apply_key(flow.commit_message, key)))
        case "tag":
            return FlowStep(replace(flow, tag=apply_key(flow.tag, key), validation=""))
    return FlowStep(flow)


def _advance(flow: PublishFlow) -> FlowStep:
    """Enter moves to the next field; on the last field it completes the form."""
    if flow.focus == "name" and flow.name.is_blank:
        return FlowStep(replace(flow, name=set_value(flow.name, flow.default_name)))
    if flow.focus != flow.fields[-1]:
        return FlowStep(_move_focus(flow, 1))
    if flow.add_tag and flow.tag.is_blank:
        return FlowStep(replace(flow, focus="tag", validation="tag name cannot be empty"))
    return FlowStep(replace(flow, stage=PublishStage.CONFIRM, validation=""))


def on_result(flow: PublishFlow, result: OperationResult) -> FlowStep:
    match flow.stage, result:
        case PublishStage.CHECKING, Ok(PublishTarget(branch=branch, has_remote=True)):
            working = replace(flow, stage=PublishStage.WORKING, branch=branch, has_remote=True)
            return FlowStep(working, dispatch=PushExisting(branch))
        case PublishStage.CHECKING, Ok(PublishTarget(branch=branch)):
            return FlowStep(replace(flow, stage=PublishStage.FORM, branch=branch, has_remote=False))
        case PublishStage.WORKING, Ok(PublishOutcome(url=url, warning=warning)):
            text = f"Published to {url}"
            if warning:
                text = f"{text} ({warning})"
            return FlowStep(replace(flow, stage=PublishStage.DONE), exit=FlowExit.success(text))
        case (PublishStage.CHECKING | PublishStage.WORKING), Err(err):
            detail = str(err)
            return FlowStep(
                replace(flow, stage=PublishStage.ERROR, error=detail, hint=auth_hint(detail))
            )
    return FlowStep(flow)


__all__ = ["PublishFlow", "PublishStage", "on_key", "on_result", "start"]
