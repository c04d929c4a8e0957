"""Shared pydantic models: the contract between config, trackers and the server."""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, SecretStr


class TrackerKind(StrEnum):
    # Values are the spellings accepted by issue_tracker_type in config files.
    GITHUB = "Github"
    GITLAB = "Gitlab"
    AZURE_DEVOPS = "AzureDevOps"

    @property
    def label(self) -> str:
        return _KIND_LABELS[self]


_KIND_LABELS = {
    TrackerKind.GITHUB: "GitHub",
    TrackerKind.GITLAB: "GitLab",
    TrackerKind.AZURE_DEVOPS: "Azure DevOps",
}


class Credential(SecretStr):
    """A secret token obtained from a credentials command.

    Renders as ``**********`` like any SecretStr, and compares by identity so
    a token never ends up in an assertion message or a set lookup by accident.
    Use ``get_secret_value()`` at the single place the token goes on the wire.
    """

    __eq__ = object.__eq__
    __hash__ = object.__hash__


class IssueReference(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str  # GitHub/GitLab issue number, Azure DevOps work item id
    title: str
    url: str | None = None
    description: str | None = None  # issue body; Markdown on GitHub/GitLab, HTML on Azure DevOps


# ---------------------------------------------------------------------------
# Adapter contexts: addressing info parsed from a remote URL, no I/O involved
# ---------------------------------------------------------------------------


class GitHubContext(BaseModel):
    model_config = ConfigDict(frozen=True)

    api_url: str  # https://api.github.com or https://<host>/api/v3
    owner: str
    repo: str


class GitLabContext(BaseModel):
    model_config = ConfigDict(frozen=True)

    api_url: str  # https://<host>/api/v4
    namespace: str  # may contain nested groups: group/subgroup
    project: str

    @property
    def project_path(self) -> str:
        return f"{self.namespace}/{self.project}"


class AzureDevOpsContext(BaseModel):
    model_config = ConfigDict(frozen=True)

    organization: str
    project: str

    @property
    def api_url(self) -> str:
        return f"https://dev.azure.com/{self.organization}/{self.project}/_apis"


AdapterContext = GitHubContext | GitLabContext | AzureDevOpsContext


# ---------------------------------------------------------------------------
# Config file shapes (user-level and repository-level share one schema)
# ---------------------------------------------------------------------------


class RemoteConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    host: str  # matched as a substring of the remote's host-plus-path
    credentials_command: list[str] = []
    issue_tracker_type: TrackerKind | None = None
    issue_tracker_url: str | None = None


class TaxonomyEntry(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str
    summary: str = ""
    description: str = ""


class ConfigFile(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    # Only honoured in the repository layer.
    issue_tracker_type: TrackerKind | None = None
    issue_tracker_url: str | None = None

    remotes: list[RemoteConfig] = []
    types: list[TaxonomyEntry] = []
    scopes: list[TaxonomyEntry] = []
