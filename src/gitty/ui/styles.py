"""Palette, Nerd Font icons and Rich styles shared by the views."""

from __future__ import annotations

from rich.style import Style
from rich.text import Text

# Palette
PINK = "#FF6B9D"
PURPLE = "#A855F7"
BLUE = "#60A5FA"
CYAN = "#22D3EE"
WHITE = "#FFFFFF"
RED = "#F87171"
GREEN = "#4ADE80"
YELLOW = "#FBBF24"
MUTED = "#9CA3AF"
BORDER = "#6B7280"


class Icons:
    """Nerd Font glyphs."""

    GIT = ""
    BRANCH = ""
    COMMIT = ""
    PUSH = ""
    PULL = ""
    ADD = ""
    RESET = ""
    PUBLISH = ""
    OPEN = ""
    AI = ""
    CONFIG = ""
    CHECK = ""
    CROSS = ""
    ARROW = ""
    DOT = ""
    STAR = ""
    LIGHTNING = ""
    FOLDER = ""
    FILE = ""
    WARNING = ""
    INFO = ""
    LAZYGIT = ""
    QUIT = ""


# Plain-text stand-ins used when icons are disabled.
PLAIN_ICONS: dict[str, str] = {
    Icons.CHECK: "✓",
    Icons.CROSS: "✗",
    Icons.ARROW: ">",
    Icons.WARNING: "!",
    Icons.INFO: "i",
}

TITLE = Style(color=PINK, bold=True)
BRANCH_STYLE = Style(color=CYAN, bold=True)
SELECTED = Style(color=PINK, bold=True)
ITEM = Style(color=WHITE)
ACCENT = Style(color=PURPLE)
SHORTCUT_SELECTED = Style(color=BLUE)
HELP = Style(color=MUTED)
SUCCESS = Style(color=GREEN, bold=True)
ERROR = Style(color=RED, bold=True)
WARNING = Style(color=YELLOW, bold=True)
INFO = Style(color=CYAN)
SPINNER = Style(color=PINK)
DIVIDER = Style(color=BORDER)

SPINNER_FRAMES = ("⣾", "⣽", "⣻", "⢿", "⡿", "⣟", "⣯", "⣷")


class Theme:
    """Icon rendering switch; styles themselves are fixed."""

    def __init__(self, show_icons: bool = True) -> None:
        self.show_icons = show_icons

    def icon(self, glyph: str) -> str:
        if self.show_icons:
            return glyph
        return PLAIN_ICONS.get(glyph, "")

    def success(self, message: str) -> Text:
        return Text(self._prefixed(Icons.CHECK, message), style=SUCCESS)

    def error(self, message: str) -> Text:
        return Text(self._prefixed(Icons.CROSS, message), style=ERROR)

    def info(self, message: str) -> Text:
        return Text(self._prefixed(Icons.INFO, message), style=INFO)

    def warning(self, message: str) -> Text:
        return Text(self._prefixed(Icons.WARNING, message), style=WARNING)

    def title(self, glyph: str, label: str) -> Text:
        return Text(self._prefixed(glyph, label), style=TITLE)

    def _prefixed(self, glyph: str, message: str) -> str:
        icon = self.icon(glyph)
        return f"{icon} {message}" if icon else message


def spinner_frame(frame: int) -> Text:
    return Text(SPINNER_FRAMES[frame % len(SPINNER_FRAMES)], style=SPINNER)


def divider(width: int = 40) -> Text:
    return Text("─" * max(width, 1), style=DIVIDER)
