"""Rich rendering of the menu state and the active flow."""

from __future__ import annotations

from rich.console import Group, RenderableType
from rich.padding import Padding
from rich.panel import Panel
from rich.text import Text

from gitty.git.client import RepositoryStatus
from gitty.ui import styles
from gitty.ui.fields import TextField
from gitty.ui.flows import CommitFlow, ConfirmFlow, Flow, PublishFlow, ReleaseFlow
from gitty.ui.flows.commit import CommitStage
from gitty.ui.flows.confirm import ConfirmStage
from gitty.ui.flows.publish import PublishStage
from gitty.ui.flows.release import ReleaseStage
from gitty.ui.menu import MENU_ENTRIES, MenuState
from gitty.ui.styles import Icons, Theme
from gitty.ui.types import Mode, Severity, StatusMessage

APP_NAME = "gitty"


def render(state: MenuState, theme: Theme | None = None, frame: int = 0) -> RenderableType:
    theme = theme or Theme()
    if state.flow is not None:
        return render_flow(state.flow, theme, frame)

    parts: list[RenderableType] = [
        render_header(state.status, theme),
        styles.divider(48),
        render_menu(state.cursor, theme),
    ]
    if state.message is not None:
        parts.append(Text())
        parts.append(render_message(state.message, theme))
    if state.mode is Mode.LOADING:
        parts.append(Text())
        parts.append(Text.assemble(styles.spinner_frame(frame), " Working..."))
    parts.append(Text())
    parts.append(render_help())
    return Group(*parts)


def render_header(status: RepositoryStatus | None, theme: Theme) -> Text:
    header = Text(APP_NAME, style=styles.TITLE)
    header.append(" | ", style=styles.HELP)

    if status is None:
        header.append("loading...", style=styles.HELP)
        return header
    if not status.is_repository:
        header.append_text(theme.warning("Not a git repo"))
        return header

    header.append(status.branch or "(no branch)", style=styles.BRANCH_STYLE)
    counts: list[Text] = []
    if status.has_staged:
        counts.append(Text(f"+{len(status.staged_files)}", style=styles.SUCCESS))
    if status.has_modified:
        counts.append(Text(f"~{len(status.modified_files)}", style=styles.WARNING))
    if status.has_untracked:
        counts.append(Text(f"?{len(status.untracked_files)}", style=styles.INFO))
    if status.ahead > 0:
        counts.append(Text(f"↑{status.ahead}", style=styles.SHORTCUT_SELECTED))
    if status.behind > 0:
        counts.append(Text(f"↓{status.behind}", style=styles.WARNING))
    if status.is_clean:
        counts.append(Text(theme.icon(Icons.CHECK) or "clean", style=styles.SUCCESS))

    if counts:
        header.append("  ")
        header.append_text(Text(" ").join(counts))
    return header


def render_menu(cursor: int, theme: Theme) -> Text:
    lines: list[Text] = []
    for index, entry in enumerate(MENU_ENTRIES):
        icon = theme.icon(entry.icon)
        if index == cursor:
            line = Text(f"  {theme.icon(Icons.ARROW)} ", style=styles.SELECTED)
            line.append(icon, style=styles.ACCENT)
            line.append(f" {entry.label}", style=styles.SELECTED)
            line.append(f" [{entry.shortcut}]", style=styles.SHORTCUT_SELECTED)
            line.append(f"  {entry.description}", style=styles.HELP)
        else:
            line = Text("     ")
            line.append(icon, style=styles.HELP)
            line.append(f" {entry.label}", style=styles.ITEM)
            line.append(f" [{entry.shortcut}]", style=styles.HELP)
        lines.append(line)
    return Text("\n").join(lines)


def render_message(message: StatusMessage, theme: Theme) -> Text:
    match message.severity:
        case Severity.SUCCESS:
            return theme.success(message.text)
        case Severity.ERROR:
            return theme.error(message.text)
    return theme.info(message.text)


def render_help(pairs: tuple[tuple[str, str], ...] | None = None) -> Text:
    pairs = pairs or (("↑↓", "navigate"), ("enter", "select"), ("q", "quit"))
    help_text = Text()
    for index, (key, description) in enumerate(pairs):
        if index:
            help_text.append("  ")
        help_text.append(key, style=styles.ACCENT)
        help_text.append(f" {description}", style=styles.HELP)
    return help_text


def render_field(label: str, field: TextField, focused: bool) -> Group:
    label_text = Text(label, style=styles.ACCENT if focused else styles.HELP)
    if not field.value and not focused:
        body = Text(field.placeholder, style=styles.HELP)
    elif focused:
        before = field.value[: field.cursor]
        at = field.value[field.cursor : field.cursor + 1] or " "
        after = field.value[field.cursor + 1 :]
        body = Text(before)
        body.append(" " if at == "\n" else at, style="reverse")
        if at == "\n":
            body.append("\n")
        body.append(after)
    else:
        body = Text(field.value)
    marker = Text("> " if focused else "  ", style=styles.SELECTED)
    return Group(label_text, Text.assemble(marker, body))


def _working(frame: int, text: str) -> Text:
    return Text.assemble(styles.spinner_frame(frame), f" {text}")


def _ack_help(action: str = "go back") -> Text:
    return Text(f"Press enter or esc to {action}", style=styles.HELP)


# -----------------------------------------------------------------------------
# Flows
# -----------------------------------------------------------------------------


def render_flow(flow: Flow, theme: Theme, frame: int = 0) -> RenderableType:
    match flow:
        case CommitFlow():
            body = _render_commit(flow, theme, frame)
            title = theme.title(Icons.AI if flow.use_ai else Icons.COMMIT, "AI Commit" if flow.use_ai else "Commit")
        case ConfirmFlow():
            body = _render_confirm(flow, theme, frame)
            title = theme.title(Icons.RESET, flow.copy.title)
        case ReleaseFlow():
            body = _render_release(flow, theme, frame)
            title = theme.title(Icons.STAR, "Create Release")
        case PublishFlow():
            body = _render_publish(flow, theme, frame)
            title = theme.title(Icons.PUBLISH, "Publish to GitHub")
        case _:
            raise TypeError(f"Unknown flow: {flow!r}")
    return Group(title, Text(), body)


def _render_commit(flow: CommitFlow, theme: Theme, frame: int) -> RenderableType:
    match flow.stage:
        case CommitStage.CHECKING:
            return _working(frame, "Checking status...")
        case CommitStage.NO_CHANGES:
            return Group(
                theme.warning("No staged changes"),
                Text(),
                Text("You need to stage changes before committing."),
                Text("Use 'Stage All' (a) from the menu or 'git add <file>'."),
                Text(),
                _ack_help(),
            )
        case CommitStage.INPUT:
            parts: list[RenderableType] = [
                Text("Enter your commit message:"),
                Text(),
                render_field("Title:", flow.title, flow.focus == "title"),
                Text(),
                render_field("Body (optional):", flow.body, flow.focus == "body"),
            ]
            if flow.validation:
                parts += [Text(), theme.error(flow.validation)]
            parts += [
                Text(),
                Text("tab: switch fields • enter: commit • alt+enter: new line • esc: cancel", style=styles.HELP),
            ]
            return Group(*parts)
        case CommitStage.GENERATING:
            return Group(
                _working(frame, "Generating commit message with AI..."),
                Text("This may take a few seconds...", style=styles.HELP),
            )
        case CommitStage.CONFIRM:
            return Group(
                Text("Commit message:"),
                Panel(Text(flow.message), border_style=styles.PURPLE, padding=(1, 2), expand=False),
                Text(),
                Text("Commit with this message?", style=styles.INFO),
                Text("y: confirm • n: cancel • e: edit", style=styles.HELP),
            )
        case CommitStage.COMMITTING:
            return _working(frame, "Committing changes...")
        case CommitStage.DONE:
            return theme.success("Commit successful!")
    return Group(theme.error(f"Error: {flow.error}"), Text(), _ack_help())


def _render_confirm(flow: ConfirmFlow, theme: Theme, frame: int) -> RenderableType:
    copy = flow.copy
    match flow.stage:
        case ConfirmStage.CONFIRM:
            yes = Text(f" {copy.affirmative} ", style="reverse bold" if flow.affirmative else styles.HELP)
            no = Text(" Cancel ", style=styles.HELP if flow.affirmative else "reverse bold")
            return Group(
                Text(copy.question, style=styles.ACCENT),
                Text(copy.description, style=styles.HELP),
                Text(),
                Text.assemble(yes, "  ", no),
                Text(),
                Text("←/→ choose • enter: accept • y/n • esc: cancel", style=styles.HELP),
            )
        case ConfirmStage.WORKING:
            return _working(frame, copy.working)
        case ConfirmStage.DONE:
            return theme.success(copy.done)
    return Group(theme.error(f"Error: {flow.error}"), Text(), _ack_help())


def _render_release(flow: ReleaseFlow, theme: Theme, frame: int) -> RenderableType:
    match flow.stage:
        case ReleaseStage.INPUT:
            parts: list[RenderableType] = [
                render_field("Tag Name (e.g. v1.0.0)", flow.tag, flow.focus == "tag"),
                Text(),
                render_field("Message (Optional)", flow.message, flow.focus == "message"),
            ]
            if flow.validation:
                parts += [Text(), theme.error(flow.validation)]
            parts += [Text(), Text("tab: switch fields • enter: continue • esc: cancel", style=styles.HELP)]
            return Group(*parts)
        case ReleaseStage.CONFIRM:
            lines = [Text(f"  Tag: {flow.tag.text}")]
            if flow.message.text:
                lines.append(Text(f"  Message: {flow.message.text}"))
            return Group(
                Text("Create and Push Release?", style=styles.ACCENT),
                Text(),
                *lines,
                Text(),
                Text("y: create and push • n: cancel", style=styles.HELP),
            )
        case ReleaseStage.WORKING:
            return _working(frame, "Creating and pushing release...")
        case ReleaseStage.DONE:
            return theme.success("Release created successfully")
    return Group(theme.error(f"Error: {flow.error}"), Text(), _ack_help())


def _render_publish(flow: PublishFlow, theme: Theme, frame: int) -> RenderableType:
    match flow.stage:
        case PublishStage.CHECKING:
            return _working(frame, "Checking repository...")
        case PublishStage.FORM:
            return _render_publish_form(flow, theme)
        case PublishStage.CONFIRM:
            info = [
                Text(f"  {theme.icon(Icons.FOLDER)} Repository: {flow.name.text or flow.default_name}"),
                Text(f"  {theme.icon(Icons.GIT)} Visibility: {flow.visibility}"),
                Text(f"  {theme.icon(Icons.BRANCH)} Branch: {flow.branch}"),
            ]
            if flow.description.text:
                info.append(Text(f"  {theme.icon(Icons.FILE)} Description: {flow.description.text}"))
            if flow.add_tag:
                info.append(Text(f"  {theme.icon(Icons.STAR)} Tag: {flow.tag.text}"))
            return Group(
                Text("Ready to publish:"),
                Text(),
                *info,
                Text(),
                Text("Press enter to publish, esc to cancel", style=styles.HELP),
            )
        case PublishStage.WORKING:
            detail = "Pushing to origin..." if flow.has_remote else "Creating repository and pushing code..."
            return Group(
                _working(frame, "Publishing to GitHub..."),
                Text(detail, style=styles.HELP),
            )
        case PublishStage.DONE:
            return theme.success("Published successfully!")

    parts: list[RenderableType] = [theme.error(f"Error: {flow.error}"), Text()]
    if flow.hint:
        parts.append(Text(flow.hint, style=styles.WARNING))
    parts.append(_ack_help())
    return Group(*parts)


def _render_publish_form(flow: PublishFlow, theme: Theme) -> RenderableType:
    def choice(label: str, selected: bool) -> Text:
        return Text(f" {label} ", style="reverse bold" if selected else styles.HELP)

    visibility = Text.assemble(
        choice("Public", flow.visibility == "public"), " ", choice("Private", flow.visibility == "private")
    )
    add_tag = Text.assemble(choice("Yes", flow.add_tag), " ", choice("No", not flow.add_tag))

    parts: list[RenderableType] = [
        render_field("Repository name", flow.name, flow.focus == "name"),
        render_field("Description (optional)", flow.description, flow.focus == "description"),
        Group(Text("Visibility", style=styles.ACCENT if flow.focus == "visibility" else styles.HELP), visibility),
        render_field("Commit message", flow.commit_message, flow.focus == "commit_message"),
        Group(Text("Add version tag?", style=styles.ACCENT if flow.focus == "add_tag" else styles.HELP), add_tag),
    ]
    if flow.add_tag:
        parts.append(render_field("Tag", flow.tag, flow.focus == "tag"))
    if flow.validation:
        parts.append(theme.error(flow.validation))
    parts.append(Text("tab/↑↓: move • ←/→: toggle • enter: next • esc: cancel", style=styles.HELP))
    return Padding(Group(*parts), (0, 0))
