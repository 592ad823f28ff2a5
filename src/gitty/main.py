from __future__ import annotations

import logging
from pathlib import Path

import typer
from rich.panel import Panel

from . import __version__
from .core.config import AppConfig, ConfigLoadResult, load_config
from .core.console import console, setup_logging, stderr_console
from .core.diagnostics import ToolCheck, check_dependencies, missing_required
from .git.client import GitRepository
from .ui.app import GittyApp
from .ui.menu import MenuSettings
from .ui.operations import OperationRunner
from .ui.styles import Theme

app = typer.Typer(
    help="gitty: a keyboard-driven menu for everyday git and GitHub tasks.",
    add_completion=False,
)
logger = logging.getLogger(__name__)

LOG_FILE_NAME = "gitty.log"


def _version_callback(value: bool) -> None:
    if value:
        console.print(__version__)
        raise typer.Exit()


def _report_missing(missing: list[ToolCheck]) -> None:
    for check in missing:
        hint = f" {check.tool.install_hint}" if check.tool.install_hint else ""
        stderr_console.print(
            f"[bold red]Error:[/bold red] {check.tool.binary} is not installed or not on PATH.{hint}"
        )


def _warn_config_error(meta: ConfigLoadResult) -> None:
    console.print(
        Panel(
            f"[bold red]Configuration Error[/bold red]\n\n"
            f"Failed to load {meta.path}:\n{meta.error}\n\n"
            f"[yellow]Using default settings.[/yellow]",
            border_style="red",
        )
    )


def build_app(config: AppConfig, root: Path | None = None) -> GittyApp:
    """Wire the repository, operation runner and settings into the Textual app."""
    repo = GitRepository(root)
    settings = MenuSettings(
        repo_name=repo.repo_name(),
        default_visibility=config.github.default_visibility,
    )
    return GittyApp(
        OperationRunner(repo, config),
        settings,
        view_theme=Theme(show_icons=config.ui.show_icons),
        animation_ms=config.ui.animation_ms,
        workdir=repo.path,
    )


@app.command()
def main(
    config: Path | None = typer.Option(
        None, "--config", "-c", help="Path to a gitty config file (YAML)."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Print the gitty version and exit.",
    ),
) -> None:
    """Open the interactive git menu in the current directory."""
    checks = check_dependencies()
    missing = missing_required(checks)
    if missing:
        _report_missing(missing)
        raise typer.Exit(code=1)

    loaded_config, meta = load_config(config_path=config)

    try:
        log = setup_logging(verbose=verbose, log_file=meta.path.parent / LOG_FILE_NAME)
    except OSError as exc:
        stderr_console.print(f"[bold red]Error:[/bold red] cannot open log file: {exc}")
        raise typer.Exit(code=1) from exc

    for check in checks:
        if check.missing:
            log.debug("Optional tool missing: %s", check.describe())

    if meta.error:
        log.warning("Config error in %s: %s", meta.path, meta.error)
        _warn_config_error(meta)
    else:
        log.debug(
            "Loaded configuration from %s (created: %s, env overrides: %s)",
            meta.path,
            meta.created,
            sorted(meta.env_overrides),
        )

    exit_code = build_app(loaded_config).run()
    raise typer.Exit(code=exit_code or 0)


def cli() -> None:
    app()


if __name__ == "__main__":
    cli()
