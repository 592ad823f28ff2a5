"""Modal sub-flows.

Each flow is a frozen dataclass advanced by pure ``on_key``/``on_result``
functions returning a FlowStep. The active flow is one variant of ``Flow``;
routing matches on the variant.
"""

from __future__ import annotations

from gitty.ui.flows import commit, confirm, publish, release
from gitty.ui.flows.commit import CommitFlow
from gitty.ui.flows.confirm import ConfirmFlow, ConfirmKind
from gitty.ui.flows.publish import PublishFlow
from gitty.ui.flows.release import ReleaseFlow
from gitty.ui.types import FlowStep, KeyPressed, OperationResult

Flow = CommitFlow | ConfirmFlow | PublishFlow | ReleaseFlow


def flow_on_key(flow: Flow, key: KeyPressed) -> FlowStep:
    match flow:
        case CommitFlow():
            return commit.on_key(flow, key)
        case ConfirmFlow():
            return confirm.on_key(flow, key)
        case PublishFlow():
            return publish.on_key(flow, key)
        case ReleaseFlow():
            return release.on_key(flow, key)
    raise TypeError(f"Unknown flow: {flow!r}")


def flow_on_result(flow: Flow, result: OperationResult) -> FlowStep:
    match flow:
        case CommitFlow():
            return commit.on_result(flow, result)
        case ConfirmFlow():
            return confirm.on_result(flow, result)
        case PublishFlow():
            return publish.on_result(flow, result)
        case ReleaseFlow():
            return release.on_result(flow, result)
    raise TypeError(f"Unknown flow: {flow!r}")


__all__ = [
    "CommitFlow",
    "ConfirmFlow",
    "ConfirmKind",
    "Flow",
    "PublishFlow",
    "ReleaseFlow",
    "flow_on_key",
    "flow_on_result",
]
