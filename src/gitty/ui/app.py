"""Textual application shell for the gitty menu.

The shell owns the single MenuState. Keys and worker completions are fed to
the pure controller on the event loop; the effects it returns are executed
here and nowhere else.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Protocol

from rich.console import RenderableType
from textual.app import App, ComposeResult, SuspendNotSupported
from textual.css.query import NoMatches
from textual.events import Key
from textual.message import Message
from textual.screen import Screen
from textual.widgets import Static

from gitty.core.console import get_logger
from gitty.core.result import Err, FlowProtocolError, GittyError, Ok
from gitty.core.runner import NOT_FOUND_RETURNCODE, run_interactive
from gitty.git.client import RepositoryStatus
from gitty.ui.menu import MenuSettings, MenuState, Transition, initial_state, update
from gitty.ui.styles import Theme
from gitty.ui.types import (
    Effect,
    Event,
    KeyPressed,
    MessageExpired,
    Operation,
    OperationDone,
    OperationResult,
    Quit,
    RefreshStatus,
    RunOperation,
    ScheduleMessageClear,
    StatusLoaded,
    SuspendFor,
)
from gitty.ui.views import render

logger = get_logger(__name__)


class OperationBackend(Protocol):
    """What the shell needs from the operation runner."""

    async def run(self, operation: Operation) -> OperationResult: ...

    async def status(self) -> RepositoryStatus: ...


class ControllerEvent(Message):
    """Carries a controller event back onto the app's message queue."""

    def __init__(self, event: Event) -> None:
        super().__init__()
        self.event = event


class MenuScreen(Screen):
    """Single full-screen view; every key goes to the controller."""

    def __init__(
        self,
        on_key_pressed: Callable[[KeyPressed], None],
        render_view: Callable[[], RenderableType],
    ) -> None:
        super().__init__()
        self._on_key_pressed = on_key_pressed
        self._render_view = render_view

    def compose(self) -> ComposeResult:
        yield Static(self._render_view(), id="view")

    def show(self, renderable: RenderableType) -> None:
        try:
            self.query_one("#view", Static).update(renderable)
        except NoMatches:
            # Not composed yet; compose renders the current state.
            return

    def on_key(self, event: Key) -> None:
        # Keep screen and app bindings (tab focus and the like) out of the way.
        event.prevent_default()
        event.stop()
        self._on_key_pressed(KeyPressed(event.key, event.character))


class GittyApp(App[int]):
    """Interactive git menu."""

    TITLE = "gitty"

    CSS = """
    MenuScreen {
        padding: 1 2;
    }

    #view {
        width: 100%;
    }
    """

    def __init__(
        self,
        backend: OperationBackend,
        settings: MenuSettings | None = None,
        *,
        view_theme: Theme | None = None,
        animation_ms: int = 100,
        workdir: Path | None = None,
        interactive_runner: Callable[[str], int] | None = None,
    ) -> None:
        super().__init__()
        self.backend = backend
        self.view_theme = view_theme or Theme()
        self.animation_ms = animation_ms
        self.workdir = workdir
        self._interactive_runner = interactive_runner or self._run_program
        self._startup = initial_state(settings)
        self.state: MenuState = self._startup.state
        self.frame = 0
        self._menu_screen = MenuScreen(self.handle_key, self.render_state)

    def get_default_screen(self) -> Screen:
        return self._menu_screen

    def on_mount(self) -> None:
        self._execute_all(self._startup.effects)
        self.set_interval(self.animation_ms / 1000, self._tick)

    # -------------------------------------------------------------------------
    # Controller plumbing
    # -------------------------------------------------------------------------

    def handle_key(self, key: KeyPressed) -> None:
        self.dispatch(key)

    def on_controller_event(self, message: ControllerEvent) -> None:
        self.dispatch(message.event)

    def dispatch(self, event: Event) -> None:
        """Apply one event to the controller and execute the resulting effects."""
        try:
            transition: Transition = update(self.state, event)
        except FlowProtocolError as exc:
            logger.error("Controller rejected %s: %s", type(event).__name__, exc.describe())
            self.notify(str(exc), severity="error")
            return

        self.state = transition.state
        self._execute_all(transition.effects)
        self.refresh_view()

    def _execute_all(self, effects: tuple[Effect, ...]) -> None:
        for effect in effects:
            self._execute(effect)

    def _execute(self, effect: Effect) -> None:
        match effect:
            case RunOperation(operation=operation, ticket=ticket):
                self.run_worker(self._run_operation(operation, ticket), group="operations")
            case RefreshStatus():
                self.run_worker(self._load_status(), group="status", exclusive=True)
            case ScheduleMessageClear(seq=seq, delay=delay):
                self.set_timer(delay, lambda: self.post_message(ControllerEvent(MessageExpired(seq))))
            case SuspendFor(program=program, ticket=ticket):
                # Runs after the current transition has been committed.
                self.call_later(self._suspend_for, program, ticket)
            case Quit():
                self.exit(0)

    async def _run_operation(self, operation: Operation, ticket: int) -> None:
        name = type(operation).__name__
        result: OperationResult
        try:
            result = await self.backend.run(operation)
        except Exception as exc:
            logger.exception("%s raised", name)
            result = Err(GittyError(f"unexpected error: {exc}", context={"operation": name}))
        match result:
            case Err(err):
                logger.info("%s failed: %s", name, err.describe())
        self.post_message(ControllerEvent(OperationDone(ticket, result)))

    async def _load_status(self) -> None:
        status = await self.backend.status()
        self.post_message(ControllerEvent(StatusLoaded(status)))

    def _suspend_for(self, program: str, ticket: int) -> None:
        result: OperationResult
        try:
            with self.suspend():
                returncode = self._interactive_runner(program)
        except SuspendNotSupported:
            result = Err(GittyError("terminal cannot be handed over in this environment"))
        else:
            result = _interactive_result(program, returncode)
        self.dispatch(OperationDone(ticket, result))

    def _run_program(self, program: str) -> int:
        return run_interactive(program, cwd=self.workdir)

    # -------------------------------------------------------------------------
    # Rendering
    # -------------------------------------------------------------------------

    def render_state(self) -> RenderableType:
        return render(self.state, self.view_theme, self.frame)

    def refresh_view(self) -> None:
        self._menu_screen.show(self.render_state())

    def _tick(self) -> None:
        if self.state.pending_ticket is None:
            return
        self.frame += 1
        self.refresh_view()


def _interactive_result(program: str, returncode: int) -> OperationResult:
    if returncode == NOT_FOUND_RETURNCODE:
        return Err(GittyError(f"{program} not found", context={"program": program}))
    if returncode != 0:
        return Err(GittyError(f"{program} exited with status {returncode}", context={"program": program}))
    return Ok(None)


__all__ = ["ControllerEvent", "GittyApp", "MenuScreen", "OperationBackend"]
