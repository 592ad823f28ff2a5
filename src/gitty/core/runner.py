"""External command execution.

Provides:
- CommandResult: exit status plus combined stdout/stderr text
- run_command: async invocation that reports failure instead of raising
- run_interactive: hand the terminal to a full-screen program

Commands are only awaited from inside background tasks; the menu controller
never calls into this module directly.
"""

from __future__ import annotations

import asyncio
import subprocess
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from gitty.core.console import get_logger

logger = get_logger(__name__)

# Exit status reported when the program could not be started at all.
NOT_FOUND_RETURNCODE = 127


@dataclass(frozen=True, slots=True)
class CommandResult:
    """Result of an external command execution."""

    returncode: int
    output: str

    @property
    def exit_succeeded(self) -> bool:
        return self.returncode == 0


async def run_command(
    program: str,
    args: Sequence[str],
    cwd: Path | None = None,
) -> CommandResult:
    """Run ``program args...`` and capture stdout and stderr as one text."""
    try:
        proc = await asyncio.create_subprocess_exec(
            program,
            *args,
            cwd=cwd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.STDOUT,
            stdin=asyncio.subprocess.DEVNULL,
        )
    except FileNotFoundError as exc:
        logger.debug("%s not found: %s", program, exc)
        return CommandResult(NOT_FOUND_RETURNCODE, f"{program}: executable not found ({exc})")
    except OSError as exc:
        logger.debug("Failed to start %s: %s", program, exc)
        return CommandResult(NOT_FOUND_RETURNCODE, f"{program}: failed to start ({exc})")

    stdout_bytes, _ = await proc.communicate()
    returncode = proc.returncode if proc.returncode is not None else 1
    output = stdout_bytes.decode("utf-8", errors="replace")
    logger.debug("%s %s -> %s", program, " ".join(args), returncode)
    return CommandResult(returncode=returncode, output=output)


def run_interactive(program: str, args: Sequence[str] = (), cwd: Path | None = None) -> int:
    """Run a full-screen program attached to the current terminal.

    The caller must have released the terminal first. Returns the exit code,
    or NOT_FOUND_RETURNCODE when the program cannot be started.
    """
    try:
        completed = subprocess.run([program, *args], cwd=cwd, check=False)
    except OSError as exc:
        logger.debug("Failed to start %s: %s", program, exc)
        return NOT_FOUND_RETURNCODE
    logger.debug("%s exited with %s", program, completed.returncode)
    return completed.returncode


__all__ = [
    "CommandResult",
    "NOT_FOUND_RETURNCODE",
    "run_command",
    "run_interactive",
]
