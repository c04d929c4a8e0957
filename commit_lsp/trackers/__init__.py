"""Issue tracker adapters, one per TrackerKind."""

from commit_lsp.trackers.azure import AzureDevOpsAdapter
from commit_lsp.trackers.base import TrackerAdapter
from commit_lsp.trackers.github import GitHubAdapter
from commit_lsp.trackers.gitlab import GitLabAdapter

__all__ = ["AzureDevOpsAdapter", "GitHubAdapter", "GitLabAdapter", "TrackerAdapter"]
