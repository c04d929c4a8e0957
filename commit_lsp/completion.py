"""Issue reference completion: run the resolution pipeline and format the result."""

import logging
from collections.abc import Iterable
from enum import StrEnum

from lsprotocol import types

from commit_lsp import builder
from commit_lsp.credentials import acquire
from commit_lsp.errors import CommitLspError, ResolutionError
from commit_lsp.git import GitUrl
from commit_lsp.models import IssueReference
from commit_lsp.remote import select_tracker
from commit_lsp.repo import RepoState
from commit_lsp.settings import CommitLspSettings

logger = logging.getLogger(__name__)

_LABEL_DESCRIPTION_LEN = 20


class Stage(StrEnum):
    REMOTE_URL = "parse remote url"
    SELECT = "select tracker"
    CONTEXT = "parse tracker url"
    CREDENTIALS = "get credentials"
    BUILD = "connect"
    FETCH = "request issues"


def ellipsize(text: str, length: int, ellipsis: str = "…") -> str:
    """Truncate to ``length`` characters, appending ``ellipsis`` when cut.

    A length of 0 yields an empty string without the ellipsis.
    """
    if len(text) <= length:
        return text
    if length == 0:
        return ""
    return text[:length] + ellipsis


def dedupe(issues: Iterable[IssueReference]) -> list[IssueReference]:
    """Drop repeated ids, keeping the first occurrence and the original order."""
    seen: set[str] = set()
    result = []
    for issue in issues:
        if issue.id in seen:
            continue
        seen.add(issue.id)
        result.append(issue)
    return result


def _documentation(issue: IssueReference) -> types.MarkupContent | str | None:
    """The issue body as Markdown with the link below it, or just the link."""
    if not issue.description:
        return issue.url
    value = f"{issue.description}\n\n{issue.url}" if issue.url else issue.description
    return types.MarkupContent(kind=types.MarkupKind.Markdown, value=value)


def issue_completion_item(issue: IssueReference) -> types.CompletionItem:
    label = f"#{issue.id}"
    return types.CompletionItem(
        label=label,
        kind=types.CompletionItemKind.Reference,
        detail=issue.title,
        insert_text=label,
        filter_text=label,
        label_details=types.CompletionItemLabelDetails(
            description=ellipsize(issue.title, _LABEL_DESCRIPTION_LEN),
        ),
        documentation=_documentation(issue),
    )


class IssueCompletionProvider:
    """Resolves the tracker from scratch on every call; nothing is cached between requests."""

    def __init__(self, settings: CommitLspSettings) -> None:
        self._settings = settings

    async def fetch_issues(self, state: RepoState) -> list[IssueReference]:
        """Run the pipeline and return the tracker's issues, or [] when disabled.

        Raises CommitLspError; the exception carries a ``stage`` attribute.
        """
        stage = Stage.REMOTE_URL
        tracker = None
        try:
            if state.remote_url is None:
                logger.debug("No git remote, issue completion disabled")
                return []
            remote_url = _parse_remote_url(state.remote_url)

            stage = Stage.SELECT
            selection = select_tracker(remote_url, state.repo_config, state.user_config)
            if selection is None:
                logger.debug("No issue tracker configured for %s", remote_url.host)
                return []
            tracker = selection.kind

            stage = Stage.CONTEXT
            prepared = builder.prepare(selection)

            stage = Stage.CREDENTIALS
            credential = None
            if prepared.credentials_command:
                credential = await acquire(prepared.credentials_command, timeout=self._settings.credentials_timeout)

            stage = Stage.BUILD
            adapter = await builder.build(prepared, credential, self._settings)
            del credential

            stage = Stage.FETCH
            async with adapter:
                issues = await adapter.fetch_issues()
            logger.debug("Fetched %d issue(s)", len(issues), extra={"tracker": tracker.label})
            return issues
        except CommitLspError as exc:
            exc.stage = stage  # type: ignore[attr-defined]
            exc.tracker = tracker  # type: ignore[attr-defined]
            raise

    async def complete(self, state: RepoState) -> list[types.CompletionItem]:
        """Return completion items for the repository's tracker; never raises pipeline errors."""
        try:
            issues = await self.fetch_issues(state)
        except CommitLspError as exc:
            stage = getattr(exc, "stage", None)
            extra = {"stage": str(stage), "error": type(exc).__name__}
            if tracker := getattr(exc, "tracker", None):
                extra["tracker"] = tracker.label
            level = logging.INFO if isinstance(exc, ResolutionError) else logging.WARNING
            logger.log(
                level,
                "Issue completion unavailable, stage '%s' failed: %s",
                stage,
                exc,
                extra=extra,
            )
            return []
        return [issue_completion_item(issue) for issue in dedupe(issues)]


def _parse_remote_url(url: str) -> GitUrl:
    try:
        return GitUrl.parse(url)
    except ValueError as exc:
        raise ResolutionError(f"Cannot parse remote url '{url}': {exc}") from exc
