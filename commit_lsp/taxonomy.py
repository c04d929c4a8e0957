"""Conventional commit type/scope completion from the repository taxonomy."""

import re

from lsprotocol import types

from commit_lsp.models import ConfigFile, TaxonomyEntry

# Subject text left of the cursor: "fe" completes a type, "feat(ls" a scope.
_TYPE_PREFIX = re.compile(r"^[\w-]*$")
_SCOPE_PREFIX = re.compile(r"^[\w-]+\([\w-]*$")


def _item(entry: TaxonomyEntry, kind: types.CompletionItemKind) -> types.CompletionItem:
    return types.CompletionItem(
        label=entry.name,
        kind=kind,
        detail=entry.summary or None,
        documentation=types.MarkupContent(kind=types.MarkupKind.Markdown, value=entry.description)
        if entry.description
        else None,
    )


def complete_subject(prefix: str, config: ConfigFile) -> list[types.CompletionItem]:
    """Complete a type or scope given the subject line text left of the cursor."""
    if _SCOPE_PREFIX.match(prefix):
        return [_item(e, types.CompletionItemKind.Module) for e in config.scopes]
    if _TYPE_PREFIX.match(prefix):
        return [_item(e, types.CompletionItemKind.Keyword) for e in config.types]
    return []
