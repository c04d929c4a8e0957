"""Tests for commit_lsp.models."""

import pytest

from commit_lsp.models import (
    AzureDevOpsContext,
    ConfigFile,
    Credential,
    GitLabContext,
    IssueReference,
    RemoteConfig,
    TrackerKind,
)


def test_issue_frozen(sample_issue: IssueReference) -> None:
    with pytest.raises(Exception):  # ValidationError or TypeError depending on pydantic version
        sample_issue.title = "changed"  # type: ignore[misc]


def test_issue_url_optional() -> None:
    assert IssueReference(id="7", title="Crash").url is None


def test_remote_config_frozen() -> None:
    remote = RemoteConfig(host="github.com")
    with pytest.raises(Exception):
        remote.host = "gitlab.com"  # type: ignore[misc]


class TestCredential:
    def test_never_rendered(self) -> None:
        cred = Credential("ghp_secret")
        assert "ghp_secret" not in str(cred)
        assert "ghp_secret" not in repr(cred)
        assert cred.get_secret_value() == "ghp_secret"

    def test_compares_by_identity(self) -> None:
        cred = Credential("ghp_secret")
        assert cred == cred
        assert cred != Credential("ghp_secret")


class TestTrackerKind:
    @pytest.mark.parametrize(
        ("value", "kind", "label"),
        [
            ("Github", TrackerKind.GITHUB, "GitHub"),
            ("Gitlab", TrackerKind.GITLAB, "GitLab"),
            ("AzureDevOps", TrackerKind.AZURE_DEVOPS, "Azure DevOps"),
        ],
    )
    def test_config_spelling_and_label(self, value: str, kind: TrackerKind, label: str) -> None:
        assert TrackerKind(value) is kind
        assert kind.label == label

    def test_parsed_from_config(self) -> None:
        config = ConfigFile.model_validate({"remotes": [{"host": "gitlab.com", "issue_tracker_type": "Gitlab"}]})
        assert config.remotes[0].issue_tracker_type is TrackerKind.GITLAB


class TestContexts:
    def test_gitlab_project_path(self) -> None:
        ctx = GitLabContext(api_url="https://gitlab.com/api/v4", namespace="group/sub", project="widgets")
        assert ctx.project_path == "group/sub/widgets"

    def test_azure_api_url(self) -> None:
        ctx = AzureDevOpsContext(organization="acme", project="Widgets")
        assert ctx.api_url == "https://dev.azure.com/acme/Widgets/_apis"
