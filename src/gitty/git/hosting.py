"""GitHub CLI publishing and browser helpers."""

from __future__ import annotations

import os
import re
import shutil
import subprocess
import webbrowser
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Literal

from gitty.core.console import get_logger
from gitty.core.result import Err, HostingError, Ok, Result
from gitty.core.runner import run_command

logger = get_logger(__name__)

Visibility = Literal["public", "private"]

AUTH_HINT = "Make sure the GitHub CLI (gh) is installed and authenticated. Run: gh auth login"

_AUTH_PATTERN = re.compile(
    r"\b(?:authenticat\w*|gh auth|log ?in|credentials?|tokens?|not logged)\b"
    r"|gh: (?:command|executable) not found",
    re.IGNORECASE,
)

_PREFERRED_BROWSERS = ("zen-browser", "zen")


def build_repo_create_args(name: str, visibility: Visibility, description: str = "") -> list[str]:
    args = ["repo", "create", name, f"--{visibility}", "--source=.", "--remote=origin", "--push"]
    if description:
        args.append(f"--description={description}")
    return args


async def create_remote_repository(
    name: str,
    visibility: Visibility,
    description: str = "",
    cwd: Path | None = None,
) -> Result[None, HostingError]:
    """Create the hosted repository, wire it as origin and push in one step."""
    args = build_repo_create_args(name, visibility, description)
    result = await run_command("gh", args, cwd)
    if not result.exit_succeeded:
        return Err(
            HostingError(
                result.output.strip() or "gh repo create failed",
                context={"name": name, "returncode": result.returncode},
            )
        )
    return Ok(None)


def auth_hint(text: str) -> str | None:
    """Return a login hint when failure text looks authentication related."""
    if _AUTH_PATTERN.search(text):
        return AUTH_HINT
    return None


def fallback_repo_url(name: str, env_vars: Mapping[str, str] | None = None) -> str:
    env_vars = os.environ if env_vars is None else env_vars
    user = env_vars.get("GITHUB_USER") or "user"
    return f"https://github.com/{user}/{name}"


def open_in_browser(url: str, which: Callable[[str], str | None] = shutil.which) -> Result[None, HostingError]:
    """Open url without waiting for the browser to exit."""
    for browser in _PREFERRED_BROWSERS:
        path = which(browser)
        if not path:
            continue
        try:
            subprocess.Popen(
                [path, url],
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                start_new_session=True,
            )
        except OSError as exc:
            return Err(HostingError(f"Failed to launch {browser}: {exc}", context={"url": url}))
        logger.debug("Opened %s with %s", url, browser)
        return Ok(None)

    if not webbrowser.open(url):
        return Err(HostingError("No browser available", context={"url": url}))
    return Ok(None)


__all__ = [
    "AUTH_HINT",
    "Visibility",
    "auth_hint",
    "build_repo_create_args",
    "create_remote_repository",
    "fallback_repo_url",
    "open_in_browser",
]
