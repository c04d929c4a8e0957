"""Abstract base class for issue tracker adapters.

An adapter instance is a *bound* adapter: it owns an authenticated
httpx.AsyncClient for one completion or health-check invocation and closes it
on exit. Construction goes through two phases:

- ``parse_context(url)``: pure, no I/O; extracts addressing info from the URL.
- ``build(context, credential, client)``: may call the tracker to validate
  the credential before returning a ready adapter.
"""

from abc import ABC, abstractmethod
from typing import Any, ClassVar, Self

import httpx

from commit_lsp.errors import (
    AdapterNetworkError,
    AuthenticationRejected,
    FetchError,
    FetchNetworkError,
    NotFound,
    RateLimited,
    Unauthorized,
)
from commit_lsp.git import GitUrl
from commit_lsp.models import AdapterContext, Credential, IssueReference, TrackerKind

USER_AGENT = "commit-lsp"


class TrackerAdapter(ABC):
    kind: ClassVar[TrackerKind]

    def __init__(self, context: AdapterContext, client: httpx.AsyncClient) -> None:
        self.context = context
        self._client = client

    @classmethod
    @abstractmethod
    def parse_context(cls, url: GitUrl) -> AdapterContext: ...

    @classmethod
    @abstractmethod
    async def build(cls, context: Any, credential: Credential | None, client: httpx.AsyncClient) -> Self: ...

    @abstractmethod
    async def fetch_issues(self) -> list[IssueReference]: ...

    def describe(self) -> str:
        """Short human-readable target, e.g. ``acme/widgets``."""
        return str(self.context)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    # -----------------------------------------------------------------------
    # HTTP helpers shared by all trackers
    # -----------------------------------------------------------------------

    async def _fetch(self, method: str, url: str, **kwargs: Any) -> Any:
        """Send a request for fetch_issues and return decoded JSON.

        Maps transport failures and HTTP statuses onto FetchError subclasses.
        """
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.TimeoutException as exc:
            raise FetchNetworkError(f"{self.kind.label} request timed out") from exc
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise FetchNetworkError(f"{self.kind.label} request failed: {exc}") from exc
        raise_for_fetch(response, self.kind)
        try:
            return response.json()
        except ValueError as exc:
            raise FetchError(f"{self.kind.label} returned a malformed response") from exc


def is_rate_limited(response: httpx.Response) -> bool:
    if response.status_code == 429:
        return True
    return response.status_code == 403 and response.headers.get("x-ratelimit-remaining") == "0"


def raise_for_fetch(response: httpx.Response, kind: TrackerKind) -> None:
    status = response.status_code
    if status == 203 and kind is TrackerKind.AZURE_DEVOPS:
        # An invalid PAT gets the HTML sign-in page with a 203 instead of a 401.
        raise Unauthorized(f"{kind.label} API returned the sign-in page. Check the configured PAT.")
    if is_rate_limited(response):
        raise RateLimited(f"{kind.label} API rate limit exceeded")
    if status in (401, 403):
        raise Unauthorized(f"{kind.label} API returned {status}. Check the configured credentials.")
    if status == 404:
        raise NotFound(f"{kind.label} API returned 404 for {response.request.url.path}")
    if status >= 400:
        raise FetchError(f"{kind.label} API returned {status}")


async def check_credential(client: httpx.AsyncClient, url: str, kind: TrackerKind) -> dict:
    """Make the lightweight authenticated call used during build.

    Returns the decoded user object on success.
    """
    try:
        response = await client.get(url)
    except httpx.TimeoutException as exc:
        raise AdapterNetworkError(f"{kind.label} did not respond in time") from exc
    except (httpx.HTTPError, httpx.InvalidURL) as exc:
        raise AdapterNetworkError(f"Could not reach {kind.label}: {exc}") from exc
    if response.status_code in (401, 403) and not is_rate_limited(response):
        raise AuthenticationRejected(f"{kind.label} rejected the token ({response.status_code})")
    if response.status_code >= 400:
        raise AdapterNetworkError(f"{kind.label} returned {response.status_code} while validating the token")
    try:
        data = response.json()
    except ValueError as exc:
        raise AdapterNetworkError(f"{kind.label} returned a malformed user response") from exc
    if not isinstance(data, dict):
        raise AdapterNetworkError(f"{kind.label} returned a malformed user response")
    return data
