"""Environment checks for ``commit-lsp checkhealth``.

Runs the same resolution pipeline as issue completion, but records the
outcome of every stage instead of collapsing failures into an empty list.
"""

from enum import StrEnum
from pathlib import Path

from pydantic import BaseModel, ConfigDict
from rich.console import Console
from rich.markup import escape

from commit_lsp import builder
from commit_lsp.credentials import acquire
from commit_lsp.errors import CommitLspError, ConfigError
from commit_lsp.git import GitUrl, get_remote_url, get_toplevel
from commit_lsp.models import ConfigFile
from commit_lsp.remote import select_tracker
from commit_lsp.repo import RepoState
from commit_lsp.settings import CommitLspSettings, load_config_file, repo_config_path, user_config_path


class CheckStatus(StrEnum):
    OK = "OK"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


_STATUS_STYLE = {
    CheckStatus.OK: "green",
    CheckStatus.INFO: "blue",
    CheckStatus.WARNING: "yellow",
    CheckStatus.ERROR: "red",
}


class CheckResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    status: CheckStatus
    detail: str | None = None
    section: str = ""


class HealthReport:
    """Accumulates check results under the current section heading."""

    def __init__(self, section: str = "") -> None:
        self.results: list[CheckResult] = []
        self._section = section

    def section(self, name: str) -> None:
        self._section = name

    def add(self, name: str, status: CheckStatus, detail: str | None = None) -> None:
        self.results.append(CheckResult(name=name, status=status, detail=detail, section=self._section))

    def ok(self, name: str, detail: str | None = None) -> None:
        self.add(name, CheckStatus.OK, detail)

    def info(self, name: str, detail: str) -> None:
        self.add(name, CheckStatus.INFO, detail)

    def warn(self, name: str, detail: str) -> None:
        self.add(name, CheckStatus.WARNING, detail)

    def error(self, name: str, detail: str) -> None:
        self.add(name, CheckStatus.ERROR, detail)

    @property
    def failed(self) -> bool:
        return any(r.status is CheckStatus.ERROR for r in self.results)


def _load_layer(report: HealthReport, name: str, path: Path) -> ConfigFile:
    if not path.exists():
        report.info(name, f"No config file at {path}")
        return ConfigFile()
    try:
        config = load_config_file(path)
    except ConfigError as exc:
        report.error(name, str(exc))
        return ConfigFile()
    report.ok(name, f"{path} ({len(config.remotes)} remote(s))")
    return config


async def collect_repo_state(cwd: Path, settings: CommitLspSettings, report: HealthReport) -> RepoState:
    """Load both config layers, reporting each, and read the remote URL.

    An invalid layer is reported and then treated as empty so the remaining
    checks still run.
    """
    report.section("Configuration")
    root = await get_toplevel(cwd)
    if root is None:
        report.warn("Find repository root", f"{cwd} is not inside a git work tree")
        root = cwd
    else:
        report.ok("Find repository root", str(root))
    user_config = _load_layer(report, "Load user config", user_config_path(settings))
    repo_config = _load_layer(report, "Load repository config", repo_config_path(root))
    return RepoState(
        root=root,
        remote_url=await get_remote_url(root, settings.remote),
        repo_config=repo_config,
        user_config=user_config,
    )


async def run_health_checks(
    state: RepoState, settings: CommitLspSettings, report: HealthReport | None = None
) -> list[CheckResult]:
    """Walk the issue tracker pipeline, one result per stage, stopping at the first failure."""
    report = report or HealthReport()
    report.section("Issue Tracker")

    name = "Retrieve repo url"
    if state.remote_url is None:
        report.error(name, f"Failed to get the url of remote '{settings.remote}'")
        return report.results
    try:
        remote_url = GitUrl.parse(state.remote_url)
    except ValueError as exc:
        report.error(name, str(exc))
        return report.results
    report.ok(name, f"Got '{remote_url}'")

    name = "Select issue tracker"
    try:
        selection = select_tracker(remote_url, state.repo_config, state.user_config)
    except CommitLspError as exc:
        report.error(name, str(exc))
        return report.results
    if selection is None:
        report.warn(
            name,
            f"No [[remotes]] entry matches '{remote_url.location}', issue completion is disabled",
        )
        return report.results
    source = f"matched remote '{selection.remote.host}'" if selection.remote else "repository override"
    report.ok(name, f"{selection.kind.label} ({source})")

    if selection.url_overridden:
        report.ok("Apply url override", str(selection.url))

    name = "Parse tracker url"
    try:
        prepared = builder.prepare(selection)
    except CommitLspError as exc:
        report.error(name, str(exc))
        return report.results
    report.ok(name, ", ".join(f"{k}={v}" for k, v in prepared.context.model_dump().items()))

    credential = None
    if not prepared.credentials_command:
        report.info("Check for credentials command", "None configured")
    else:
        report.ok("Check for credentials command", " ".join(prepared.credentials_command))
        try:
            credential = await acquire(prepared.credentials_command, timeout=settings.credentials_timeout)
        except CommitLspError as exc:
            report.error("Get credentials", str(exc))
            return report.results
        report.ok("Get credentials")

    name = f"Connect to {selection.kind.label}"
    try:
        adapter = await builder.build(prepared, credential, settings)
    except CommitLspError as exc:
        report.error(name, str(exc))
        return report.results
    del credential
    report.ok(name, adapter.describe())

    name = "Request issues"
    async with adapter:
        try:
            issues = await adapter.fetch_issues()
        except CommitLspError as exc:
            report.error(name, str(exc))
            return report.results
    if not issues:
        report.warn(name, "Got empty list of issues")
    else:
        example = issues[0]
        report.ok(name, f"{len(issues)} issue(s), example: #{example.id} '{example.title}'")
    return report.results


def render(results: list[CheckResult], console: Console) -> None:
    section = None
    for result in results:
        if result.section != section:
            section = result.section
            padding = "-" * max((80 - len(section) - 2) // 2, 0)
            console.print(f"{padding} [bold]{escape(section)}[/bold] {padding}")
        style = _STATUS_STYLE[result.status]
        console.print(f"\n- {escape(result.name)}: [{style}]{result.status.value}[/{style}]")
        if result.detail:
            console.print(f"    {escape(result.detail)}")
