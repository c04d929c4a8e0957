"""Tests for commit_lsp.builder: phase 1 is pure, phase 2 owns the client."""

import asyncio

import httpx
import pytest
from pytest_httpx import HTTPXMock

from commit_lsp import builder
from commit_lsp.errors import AuthenticationRejected, UnrecognizedUrlShape
from commit_lsp.git import GitUrl
from commit_lsp.models import (
    AzureDevOpsContext,
    Credential,
    GitHubContext,
    GitLabContext,
    RemoteConfig,
    TrackerKind,
)
from commit_lsp.remote import Selection
from commit_lsp.settings import CommitLspSettings
from commit_lsp.trackers import AzureDevOpsAdapter, GitHubAdapter, GitLabAdapter


def _selection(kind: TrackerKind, raw: str, command: list[str] | None = None) -> Selection:
    return Selection(
        kind=kind,
        url=GitUrl.parse(raw),
        remote=RemoteConfig(host="example", credentials_command=command or []),
    )


@pytest.fixture
def no_io(monkeypatch: pytest.MonkeyPatch) -> None:
    """Fail the test if anything spawns a process or opens an HTTP client."""

    def _forbidden(*args, **kwargs):
        raise AssertionError("phase 1 must not perform I/O")

    monkeypatch.setattr(asyncio, "create_subprocess_exec", _forbidden)
    monkeypatch.setattr(httpx.AsyncClient, "__init__", _forbidden)
    monkeypatch.setattr(httpx.Client, "__init__", _forbidden)


class TestAdapterClass:
    @pytest.mark.parametrize(
        ("kind", "cls"),
        [
            (TrackerKind.GITHUB, GitHubAdapter),
            (TrackerKind.GITLAB, GitLabAdapter),
            (TrackerKind.AZURE_DEVOPS, AzureDevOpsAdapter),
        ],
    )
    def test_one_adapter_per_kind(self, kind: TrackerKind, cls: type) -> None:
        assert builder.adapter_class(kind) is cls
        assert cls.kind is kind


class TestPrepare:
    def test_github(self, no_io: None) -> None:
        prepared = builder.prepare(_selection(TrackerKind.GITHUB, "https://github.com/acme/widgets.git"))
        assert prepared.kind is TrackerKind.GITHUB
        assert isinstance(prepared.context, GitHubContext)
        assert prepared.context.owner == "acme"
        assert prepared.credentials_command == []

    def test_gitlab_carries_credentials_command(self, no_io: None) -> None:
        selection = _selection(TrackerKind.GITLAB, "git@gitlab.com:team/widgets.git", ["pass", "gitlab"])
        prepared = builder.prepare(selection)
        assert isinstance(prepared.context, GitLabContext)
        assert prepared.credentials_command == ["pass", "gitlab"]

    def test_azure(self, no_io: None) -> None:
        prepared = builder.prepare(
            _selection(TrackerKind.AZURE_DEVOPS, "https://dev.azure.com/acme/Widgets/_git/widgets")
        )
        assert prepared.context == AzureDevOpsContext(organization="acme", project="Widgets")

    @pytest.mark.parametrize(
        ("kind", "raw"),
        [
            (TrackerKind.GITHUB, "https://github.com/acme"),
            (TrackerKind.GITLAB, "https://gitlab.com/widgets"),
            (TrackerKind.AZURE_DEVOPS, "https://dev.azure.com/acme"),
        ],
    )
    def test_unrecognized_shape_without_io(self, no_io: None, kind: TrackerKind, raw: str) -> None:
        with pytest.raises(UnrecognizedUrlShape):
            builder.prepare(_selection(kind, raw, ["never-run"]))


class TestBuild:
    async def test_returns_bound_adapter(self, settings: CommitLspSettings) -> None:
        prepared = builder.prepare(_selection(TrackerKind.GITHUB, "https://github.com/acme/widgets.git"))
        adapter = await builder.build(prepared, None, settings)
        async with adapter:
            assert isinstance(adapter, GitHubAdapter)
            assert adapter._client.timeout.read == settings.http_timeout
            assert adapter._client.headers["User-Agent"] == "commit-lsp"
        assert adapter._client.is_closed

    async def test_failed_build_closes_client(
        self, settings: CommitLspSettings, httpx_mock: HTTPXMock, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        clients: list[httpx.AsyncClient] = []
        original_build = GitLabAdapter.build.__func__

        async def _spy(cls, context, credential, client):
            clients.append(client)
            return await original_build(cls, context, credential, client)

        monkeypatch.setattr(GitLabAdapter, "build", classmethod(_spy))
        httpx_mock.add_response(url="https://gitlab.com/api/v4/user", status_code=401)
        prepared = builder.prepare(_selection(TrackerKind.GITLAB, "https://gitlab.com/team/widgets"))

        with pytest.raises(AuthenticationRejected):
            await builder.build(prepared, Credential("glpat-bad"), settings)
        assert clients and clients[0].is_closed
