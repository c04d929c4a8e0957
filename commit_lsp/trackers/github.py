"""GitHub REST API v3 adapter."""

import logging
from typing import Self

import httpx
from pydantic import ValidationError

from commit_lsp.errors import FetchError, UnrecognizedUrlShape
from commit_lsp.git import GitUrl
from commit_lsp.models import Credential, GitHubContext, IssueReference, TrackerKind
from commit_lsp.trackers.base import TrackerAdapter, check_credential

logger = logging.getLogger(__name__)

BASE_URL = "https://api.github.com"


def api_url_for(url: GitUrl) -> str:
    """github.com uses api.github.com; GitHub Enterprise serves /api/v3 on its own host."""
    if url.host in ("github.com", "ssh.github.com", "www.github.com"):
        return BASE_URL
    port = f":{url.web_port}" if url.web_port else ""
    return f"{url.web_scheme}://{url.host}{port}/api/v3"


class GitHubAdapter(TrackerAdapter):
    kind = TrackerKind.GITHUB
    context: GitHubContext

    def __init__(self, context: GitHubContext, client: httpx.AsyncClient, assignee: str) -> None:
        super().__init__(context, client)
        self.assignee = assignee

    @classmethod
    def parse_context(cls, url: GitUrl) -> GitHubContext:
        # https://github.com/<owner>/<repo>(.git) or git@github.com:<owner>/<repo>.git
        if len(url.segments) < 2:
            raise UnrecognizedUrlShape(f"Expected <owner>/<repo> in GitHub url '{url}'")
        owner, repo = url.segments[0], url.segments[1]
        return GitHubContext(api_url=api_url_for(url), owner=owner, repo=repo)

    @classmethod
    async def build(cls, context: GitHubContext, credential: Credential | None, client: httpx.AsyncClient) -> Self:
        client.headers.update(
            {
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
            }
        )
        if credential is None:
            # Anonymous access: public issues assigned to the repository owner.
            logger.info("No GitHub token configured, listing issues assigned to %s", context.owner)
            return cls(context, client, assignee=context.owner)

        client.headers["Authorization"] = f"Bearer {credential.get_secret_value()}"
        user = await check_credential(client, f"{context.api_url}/user", cls.kind)
        login = user.get("login") or context.owner
        return cls(context, client, assignee=login)

    def describe(self) -> str:
        return f"{self.context.owner}/{self.context.repo} (assigned to {self.assignee})"

    async def fetch_issues(self) -> list[IssueReference]:
        # NOTE: fetches page 1 only (up to 100 results). Full pagination not implemented.
        nodes = await self._fetch(
            "GET",
            f"{self.context.api_url}/repos/{self.context.owner}/{self.context.repo}/issues",
            params={"assignee": self.assignee, "state": "open", "per_page": "100"},
        )
        if not isinstance(nodes, list):
            raise FetchError("GitHub returned a malformed issue list")
        result = []
        for node in nodes:
            if not isinstance(node, dict):
                raise FetchError("GitHub returned a malformed issue")
            # The issues endpoint also returns pull requests.
            if "pull_request" in node:
                continue
            try:
                result.append(
                    IssueReference(
                        id=str(node["number"]),
                        title=node["title"],
                        url=node.get("html_url"),
                        description=node.get("body"),
                    )
                )
            except (KeyError, TypeError, ValidationError) as exc:
                raise FetchError("GitHub returned a malformed issue") from exc
        return result
