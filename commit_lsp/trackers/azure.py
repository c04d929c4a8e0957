"""Azure DevOps work item adapter (WIQL + work item batch API).

The PAT needs the "Work Items (Read)" scope.
"""

from typing import Self

import httpx
from pydantic import ValidationError

from commit_lsp.errors import AuthenticationRejected, FetchError, UnrecognizedUrlShape
from commit_lsp.git import GitUrl
from commit_lsp.models import AzureDevOpsContext, Credential, IssueReference, TrackerKind
from commit_lsp.trackers.base import TrackerAdapter

API_VERSION = "7.0"
BATCH_SIZE = 200  # workitemsbatch accepts at most 200 ids per call

_BATCH_FIELDS = ["System.Id", "System.Title", "System.Description"]

_RECENT_ACTIVITY_QUERY = (
    "SELECT [System.Id] FROM WorkItems "
    "WHERE [System.TeamProject] = @project "
    "AND [Assigned To] = @me "
    "AND [System.Id] IN (@MyRecentActivity)"
)


class AzureDevOpsAdapter(TrackerAdapter):
    kind = TrackerKind.AZURE_DEVOPS
    context: AzureDevOpsContext

    @classmethod
    def parse_context(cls, url: GitUrl) -> AzureDevOpsContext:
        """Extract organization and project.

        Accepts:
        - https://dev.azure.com/<org>/<project>/_git/<repo>
        - git@ssh.dev.azure.com:v3/<org>/<project>/<repo>
        - https://<org>.visualstudio.com/[DefaultCollection/]<project>/_git/<repo>
        - <org>@vs-ssh.visualstudio.com:v3/<org>/<project>/<repo>
        """
        segments = list(url.segments)
        if segments and segments[0] == "v3":
            segments = segments[1:]
            organization = segments.pop(0) if segments else None
        elif url.host == "dev.azure.com":
            organization = segments.pop(0) if segments else None
        elif url.host.endswith(".visualstudio.com"):
            organization = url.host.split(".", 1)[0]
            if segments and segments[0] == "DefaultCollection":
                segments.pop(0)
        else:
            raise UnrecognizedUrlShape(f"'{url.host}' is not an Azure DevOps host")

        project = segments[0] if segments and segments[0] != "_git" else None
        if not organization or not project:
            raise UnrecognizedUrlShape(f"Expected an organization and project in Azure DevOps url '{url}'")
        return AzureDevOpsContext(organization=organization, project=project)

    @classmethod
    async def build(
        cls, context: AzureDevOpsContext, credential: Credential | None, client: httpx.AsyncClient
    ) -> Self:
        if credential is None:
            raise AuthenticationRejected("Azure DevOps requires a PAT; configure credentials_command")
        # No handshake: the PAT is checked on the first query.
        client.auth = httpx.BasicAuth("", credential.get_secret_value())
        client.headers["Accept"] = "application/json"
        return cls(context, client)

    def describe(self) -> str:
        return f"{self.context.organization}/{self.context.project}"

    async def _post(self, path: str, body: dict) -> dict:
        data = await self._fetch(
            "POST",
            f"{self.context.api_url}/{path}",
            params={"api-version": API_VERSION},
            json=body,
        )
        if not isinstance(data, dict):
            raise FetchError("Azure DevOps returned a malformed response")
        return data

    async def fetch_issues(self) -> list[IssueReference]:
        result = await self._post("wit/wiql", {"query": _RECENT_ACTIVITY_QUERY})
        try:
            ids = [int(item["id"]) for item in result.get("workItems", [])]
        except (KeyError, TypeError, ValueError) as exc:
            raise FetchError("Azure DevOps returned a malformed query result") from exc

        issues = []
        for start in range(0, len(ids), BATCH_SIZE):
            batch = await self._post(
                "wit/workitemsbatch",
                {"ids": ids[start : start + BATCH_SIZE], "fields": _BATCH_FIELDS},
            )
            try:
                for item in batch.get("value", []):
                    item_id = item["id"]
                    fields = item["fields"]
                    issues.append(
                        IssueReference(
                            id=str(item_id),
                            title=fields["System.Title"],
                            description=fields.get("System.Description"),
                            url=f"https://dev.azure.com/{self.context.organization}/{self.context.project}"
                            f"/_workitems/edit/{item_id}",
                        )
                    )
            except (AttributeError, KeyError, TypeError, ValidationError) as exc:
                raise FetchError("Azure DevOps returned a malformed work item") from exc
        return issues
