"""commit-lsp CLI: run the language server or check the environment."""

import asyncio
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from commit_lsp import __version__
from commit_lsp.healthcheck import HealthReport, collect_repo_state, render, run_health_checks
from commit_lsp.logging import setup_logging
from commit_lsp.settings import get_settings

app = typer.Typer(help="Language server for git commit messages", no_args_is_help=True)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"commit-lsp {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option("--version", callback=_version_callback, is_eager=True, help="Show the version and exit"),
    ] = False,
) -> None:
    """Language server for git commit messages."""


@app.command("run")
def run() -> None:
    """Start the language server on stdin/stdout."""
    # Imported here so checkhealth does not pay for pygls start-up.
    from commit_lsp.server import start_io

    settings = get_settings()
    setup_logging(settings.log_level, settings.log_file)
    start_io()


async def _checkhealth(cwd: Path) -> HealthReport:
    settings = get_settings()
    report = HealthReport()
    state = await collect_repo_state(cwd, settings, report)
    await run_health_checks(state, settings, report)
    return report


@app.command("checkhealth")
def checkhealth(
    path: Annotated[
        Path | None,
        typer.Option("--path", "-C", help="Repository to check (defaults to the current directory)"),
    ] = None,
) -> None:
    """Check configuration, credentials and issue tracker access."""
    settings = get_settings()
    # Keep the report readable: only problems go to the log.
    setup_logging("WARNING", settings.log_file)
    report = asyncio.run(_checkhealth(path or Path.cwd()))
    render(report.results, Console())
    if report.failed:
        raise typer.Exit(1)
