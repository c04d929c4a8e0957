"""Shared test fixtures."""

import sys
from pathlib import Path

import pytest

import commit_lsp.settings as settings_module
from commit_lsp.models import ConfigFile, IssueReference, RemoteConfig, TrackerKind
from commit_lsp.repo import RepoState
from commit_lsp.settings import CommitLspSettings


def echo_command(output: str) -> list[str]:
    """A credentials command that prints ``output`` (no spaces allowed) and exits 0."""
    return [sys.executable, "-c", f"print({output!r})"]


@pytest.fixture(autouse=True)
def reset_settings_cache():
    """Clear the lru_cache before each test."""
    settings_module.get_settings.cache_clear()
    yield
    settings_module.get_settings.cache_clear()


@pytest.fixture
def settings(tmp_path: Path) -> CommitLspSettings:
    return CommitLspSettings(
        http_timeout=2.0,
        credentials_timeout=10.0,
        user_config=tmp_path / "user.toml",
    )


@pytest.fixture
def github_state(tmp_path: Path) -> RepoState:
    """acme/widgets on github.com with no credentials configured."""
    return RepoState(
        root=tmp_path,
        remote_url="https://github.com/acme/widgets.git",
        user_config=ConfigFile(remotes=[RemoteConfig(host="github.com")]),
    )


@pytest.fixture
def gitlab_state(tmp_path: Path) -> RepoState:
    return RepoState(
        root=tmp_path,
        remote_url="git@gitlab.example.com:platform/tools/widgets.git",
        user_config=ConfigFile(
            remotes=[
                RemoteConfig(
                    host="gitlab.example.com",
                    credentials_command=echo_command("glpat-test"),
                    issue_tracker_type=TrackerKind.GITLAB,
                )
            ]
        ),
    )


@pytest.fixture
def sample_issue() -> IssueReference:
    return IssueReference(
        id="42",
        title="Fix null check in auth middleware",
        url="https://github.com/acme/widgets/issues/42",
    )
