"""Remote selection: decide which tracker applies to a repository.

Precedence (highest to lowest):
1. issue_tracker_type / issue_tracker_url at the top level of the repository config
2. first [[remotes]] entry of the repository config whose host occurs in the remote URL
3. first [[remotes]] entry of the user config whose host occurs in the remote URL

The host match is a case-insensitive substring test against the remote URL
as written (scheme and user info removed) so that self-hosted instances under
arbitrary subdomains or path prefixes match.
When one configured host is a substring of another, declaration order decides.
"""

from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict

from commit_lsp.errors import InvalidTrackerUrl
from commit_lsp.git import GitUrl
from commit_lsp.models import ConfigFile, RemoteConfig, TrackerKind


class Selection(BaseModel):
    """Outcome of remote selection: which tracker, which URL, which credentials."""

    model_config = ConfigDict(frozen=True)

    kind: TrackerKind
    url: GitUrl  # the URL tracker context is parsed from (override or remote)
    remote: RemoteConfig | None = None  # matched [[remotes]] entry, if any
    url_overridden: bool = False

    @property
    def credentials_command(self) -> list[str]:
        return list(self.remote.credentials_command) if self.remote else []


def guess_tracker_kind(url: GitUrl) -> TrackerKind | None:
    """Infer the tracker kind from the shape of a remote URL."""
    host = url.host
    if host in ("dev.azure.com", "ssh.dev.azure.com") or host.endswith("visualstudio.com"):
        return TrackerKind.AZURE_DEVOPS
    if host == "github.com" or host.endswith(".github.com"):
        return TrackerKind.GITHUB
    if "gitlab" in host or "-" in url.segments:
        return TrackerKind.GITLAB
    return None


def find_remote(url: GitUrl, *layers: Iterable[RemoteConfig]) -> RemoteConfig | None:
    """Return the first entry, layer by layer, whose host occurs in the URL.

    The URL is taken as written (minus scheme and user info), and also in its
    normalized host/path form so ``github.com/acme`` matches an scp-like remote.
    Comparison ignores case.
    """
    haystacks = (url.location.casefold(), url.host_and_path.casefold())
    for layer in layers:
        for remote in layer:
            needle = remote.host.casefold()
            if needle and any(needle in haystack for haystack in haystacks):
                return remote
    return None


def _parse_override(url: str) -> GitUrl:
    try:
        return GitUrl.parse(url)
    except ValueError as exc:
        raise InvalidTrackerUrl(f"issue_tracker_url '{url}' is not a valid url: {exc}") from exc


def select_tracker(remote_url: GitUrl, repo_config: ConfigFile, user_config: ConfigFile) -> Selection | None:
    """Pick the tracker for a repository, or None when issue completion should stay off.

    Raises InvalidTrackerUrl when a matching override URL cannot be parsed.
    """
    remote = find_remote(remote_url, repo_config.remotes, user_config.remotes)

    if repo_config.issue_tracker_type or repo_config.issue_tracker_url:
        url = _parse_override(repo_config.issue_tracker_url) if repo_config.issue_tracker_url else remote_url
        kind = repo_config.issue_tracker_type or guess_tracker_kind(url)
        if kind is None:
            return None
        return Selection(
            kind=kind,
            url=url,
            remote=remote,
            url_overridden=repo_config.issue_tracker_url is not None,
        )

    if remote is None:
        return None

    url = _parse_override(remote.issue_tracker_url) if remote.issue_tracker_url else remote_url
    kind = remote.issue_tracker_type or guess_tracker_kind(url)
    if kind is None:
        return None
    return Selection(kind=kind, url=url, remote=remote, url_overridden=remote.issue_tracker_url is not None)
