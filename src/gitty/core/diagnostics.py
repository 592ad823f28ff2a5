"""External dependency checks run at startup.

git is required; gh (publish) and lazygit are optional and only reported.
"""

from __future__ import annotations

import shutil
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from pydantic import BaseModel


class ExternalTool(BaseModel):
    name: str
    binary: str
    required: bool = True
    install_hint: str | None = None


@dataclass
class ToolCheck:
    tool: ExternalTool
    status: str
    path: str | None

    @property
    def missing(self) -> bool:
        return self.status == "missing"

    def describe(self) -> str:
        kind = "required" if self.tool.required else "optional"
        return f"{self.tool.binary} ({kind})"


DEFAULT_TOOLS: list[ExternalTool] = [
    ExternalTool(
        name="Git", binary="git", install_hint="Install via your package manager (brew, apt, etc.)"
    ),
    ExternalTool(
        name="GitHub CLI",
        binary="gh",
        required=False,
        install_hint="Needed for publish: https://cli.github.com",
    ),
    ExternalTool(
        name="lazygit",
        binary="lazygit",
        required=False,
        install_hint="Install via your package manager (brew, apt, etc.)",
    ),
]


def check_tool(tool: ExternalTool, which: Callable[[str], str | None] = shutil.which) -> ToolCheck:
    resolved = which(tool.binary)
    if not resolved:
        return ToolCheck(tool=tool, status="missing", path=None)
    return ToolCheck(tool=tool, status="ok", path=resolved)


def check_dependencies(
    tools: Iterable[ExternalTool] | None = None,
    which: Callable[[str], str | None] = shutil.which,
) -> list[ToolCheck]:
    """Return one ToolCheck per tool, in declaration order."""
    return [check_tool(tool, which) for tool in (tools or DEFAULT_TOOLS)]


def missing_required(checks: Iterable[ToolCheck]) -> list[ToolCheck]:
    return [check for check in checks if check.missing and check.tool.required]


__all__ = [
    "DEFAULT_TOOLS",
    "ExternalTool",
    "ToolCheck",
    "check_dependencies",
    "check_tool",
    "missing_required",
]
