"""GitLab REST API v4 adapter (gitlab.com and self-hosted instances)."""

from typing import Self
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from commit_lsp.errors import AuthenticationRejected, FetchError, UnrecognizedUrlShape
from commit_lsp.git import GitUrl
from commit_lsp.models import Credential, GitLabContext, IssueReference, TrackerKind
from commit_lsp.trackers.base import TrackerAdapter, check_credential


class GitLabAdapter(TrackerAdapter):
    kind = TrackerKind.GITLAB
    context: GitLabContext

    @classmethod
    def parse_context(cls, url: GitUrl) -> GitLabContext:
        # https://<host>/<group>[/<subgroup>...]/<project>(.git), possibly a web
        # url with a trailing /-/issues/... part.
        segments = list(url.segments)
        if "-" in segments:
            segments = segments[: segments.index("-")]
        if len(segments) < 2:
            raise UnrecognizedUrlShape(f"Expected <namespace>/<project> in GitLab url '{url}'")
        port = f":{url.web_port}" if url.web_port else ""
        return GitLabContext(
            api_url=f"{url.web_scheme}://{url.host}{port}/api/v4",
            namespace="/".join(segments[:-1]),
            project=segments[-1],
        )

    @classmethod
    async def build(cls, context: GitLabContext, credential: Credential | None, client: httpx.AsyncClient) -> Self:
        if credential is None:
            raise AuthenticationRejected("GitLab requires a personal access token; configure credentials_command")
        client.headers["PRIVATE-TOKEN"] = credential.get_secret_value()
        await check_credential(client, f"{context.api_url}/user", cls.kind)
        return cls(context, client)

    def describe(self) -> str:
        return self.context.project_path

    async def fetch_issues(self) -> list[IssueReference]:
        project_id = quote(self.context.project_path, safe="")
        nodes = await self._fetch(
            "GET",
            f"{self.context.api_url}/projects/{project_id}/issues",
            params={"state": "opened", "per_page": "100"},
        )
        if not isinstance(nodes, list):
            raise FetchError("GitLab returned a malformed issue list")
        try:
            return [
                IssueReference(
                    id=str(n["iid"]),
                    title=n["title"],
                    url=n.get("web_url"),
                    description=n.get("description"),
                )
                for n in nodes
            ]
        except (AttributeError, KeyError, TypeError, ValidationError) as exc:
            raise FetchError("GitLab returned a malformed issue") from exc
