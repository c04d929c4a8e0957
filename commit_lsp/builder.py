"""Two-phase adapter builder.

Phase 1 (``prepare``) picks the adapter class for a Selection and parses its
context. It is pure: no process is spawned and no request is sent.
Phase 2 (``build``) opens an HTTP client and lets the adapter exchange the
credential for an authenticated session.
"""

import httpx
from pydantic import BaseModel, ConfigDict

from commit_lsp.models import AdapterContext, Credential, TrackerKind
from commit_lsp.remote import Selection
from commit_lsp.settings import CommitLspSettings
from commit_lsp.trackers import AzureDevOpsAdapter, GitHubAdapter, GitLabAdapter, TrackerAdapter
from commit_lsp.trackers.base import USER_AGENT


def adapter_class(kind: TrackerKind) -> type[TrackerAdapter]:
    match kind:
        case TrackerKind.GITHUB:
            return GitHubAdapter
        case TrackerKind.GITLAB:
            return GitLabAdapter
        case TrackerKind.AZURE_DEVOPS:
            return AzureDevOpsAdapter


class PreparedAdapter(BaseModel):
    """Everything needed for phase 2 except the secret."""

    model_config = ConfigDict(frozen=True)

    kind: TrackerKind
    context: AdapterContext
    credentials_command: list[str] = []


def prepare(selection: Selection) -> PreparedAdapter:
    """Phase 1. Raises UnrecognizedUrlShape if the URL does not fit the tracker."""
    context = adapter_class(selection.kind).parse_context(selection.url)
    return PreparedAdapter(
        kind=selection.kind,
        context=context,
        credentials_command=selection.credentials_command,
    )


async def build(
    prepared: PreparedAdapter,
    credential: Credential | None,
    settings: CommitLspSettings,
) -> TrackerAdapter:
    """Phase 2. Returns a bound adapter that owns its client; use it with ``async with``.

    Raises AuthenticationRejected or AdapterNetworkError. The client is closed
    if the build fails.
    """
    client = httpx.AsyncClient(
        timeout=settings.http_timeout,
        headers={"User-Agent": USER_AGENT},
    )
    try:
        return await adapter_class(prepared.kind).build(prepared.context, credential, client)
    except BaseException:
        await client.aclose()
        raise
