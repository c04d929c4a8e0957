"""Smoke tests for all CLI commands using typer CliRunner."""

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from typer.testing import CliRunner

from commit_lsp import __version__
from commit_lsp.healthcheck import HealthReport
from commit_lsp.main import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def quiet_logging():
    """Keep setup_logging from binding a handler to CliRunner's stderr."""
    with patch("commit_lsp.main.setup_logging") as mock:
        yield mock


def _report(*, failed: bool) -> HealthReport:
    report = HealthReport("Issue Tracker")
    report.ok("Retrieve repo url", "Got 'https://github.com/acme/widgets'")
    if failed:
        report.error("Get credentials", "Credentials command 'pass' was not found")
    return report


def test_version() -> None:
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert result.output.strip() == f"commit-lsp {__version__}"


def test_no_args_shows_help() -> None:
    result = runner.invoke(app, [])
    assert "checkhealth" in result.output


class TestCheckhealth:
    def test_healthy(self) -> None:
        with patch("commit_lsp.main._checkhealth", AsyncMock(return_value=_report(failed=False))):
            result = runner.invoke(app, ["checkhealth"])
        assert result.exit_code == 0
        assert "Retrieve repo url: OK" in result.output

    def test_failure_exits_nonzero(self) -> None:
        with patch("commit_lsp.main._checkhealth", AsyncMock(return_value=_report(failed=True))):
            result = runner.invoke(app, ["checkhealth"])
        assert result.exit_code == 1
        assert "Get credentials: ERROR" in result.output
        assert "was not found" in result.output

    def test_path_option(self, tmp_path: Path) -> None:
        check = AsyncMock(return_value=_report(failed=False))
        with patch("commit_lsp.main._checkhealth", check):
            result = runner.invoke(app, ["checkhealth", "-C", str(tmp_path)])
        assert result.exit_code == 0
        check.assert_awaited_once_with(tmp_path)

    def test_logs_only_warnings(self, quiet_logging: MagicMock) -> None:
        with patch("commit_lsp.main._checkhealth", AsyncMock(return_value=_report(failed=False))):
            runner.invoke(app, ["checkhealth"])
        assert quiet_logging.call_args.args[0] == "WARNING"


class TestRun:
    def test_starts_server_with_configured_logging(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, quiet_logging: MagicMock
    ) -> None:
        monkeypatch.setenv("COMMIT_LSP_LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("COMMIT_LSP_LOG_FILE", str(tmp_path / "lsp.log"))
        with patch("commit_lsp.server.start_io") as start_io:
            result = runner.invoke(app, ["run"])
        assert result.exit_code == 0
        start_io.assert_called_once_with()
        quiet_logging.assert_called_once_with("DEBUG", tmp_path / "lsp.log")
