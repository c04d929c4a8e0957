"""Language server for commit message buffers."""

import logging
from pathlib import Path

from lsprotocol import types
from pygls.lsp.server import LanguageServer

from commit_lsp import __version__
from commit_lsp.completion import IssueCompletionProvider
from commit_lsp.errors import ConfigError
from commit_lsp.repo import load_repo_state
from commit_lsp.settings import get_settings
from commit_lsp.taxonomy import complete_subject

logger = logging.getLogger(__name__)

server = LanguageServer("commit-lsp", __version__)


def _workspace_root(ls: LanguageServer) -> Path:
    # git starts the editor from the work tree root, so cwd is the fallback
    root = ls.workspace.root_path
    return Path(root) if root else Path.cwd()


def _wants_issue(prefix: str) -> bool:
    word = prefix.rsplit(maxsplit=1)[-1] if prefix.strip() else ""
    return word.startswith("#")


@server.feature(
    types.TEXT_DOCUMENT_COMPLETION,
    types.CompletionOptions(trigger_characters=["#", "("], resolve_provider=False),
)
async def completions(ls: LanguageServer, params: types.CompletionParams) -> types.CompletionList:
    """Types and scopes on the subject line, issue references everywhere else or after '#'."""
    document = ls.workspace.get_text_document(params.text_document.uri)
    line_no = params.position.line
    line = document.lines[line_no] if line_no < len(document.lines) else ""
    prefix = line[: params.position.character]

    settings = get_settings()
    try:
        state = await load_repo_state(_workspace_root(ls), settings)
    except ConfigError as exc:
        logger.warning("Ignoring invalid configuration: %s", exc, extra={"stage": "load config"})
        return types.CompletionList(is_incomplete=False, items=[])

    if line_no == 0 and not _wants_issue(prefix):
        items = complete_subject(prefix, state.repo_config)
    else:
        items = await IssueCompletionProvider(settings).complete(state)
    return types.CompletionList(is_incomplete=False, items=items)


def start_io() -> None:
    """Serve over stdio until the client disconnects."""
    logger.info("Starting commit-lsp %s", __version__)
    server.start_io()
