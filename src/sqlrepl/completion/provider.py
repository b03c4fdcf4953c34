"""Candidate generation for a classified completion context."""

from __future__ import annotations

from collections.abc import Callable, Iterable
import logging

from sqlrepl.exceptions import SchemaFetchError
from sqlrepl.schema.cache import SchemaCache

from .constants import DOT_COMMANDS, MODE_NAMES, ON_OFF, SQL_FUNCTIONS, SQL_KEYWORDS
from .context import CompletionContext, ContextKind

_logger = logging.getLogger(__name__)

# Static argument vocabularies, keyed by dot command name (without the dot).
_STATIC_ARGUMENTS: dict[str, tuple[str, ...]] = {
    "mode": MODE_NAMES,
    "headers": ON_OFF,
    "timer": ON_OFF,
    "echo": ON_OFF,
    "bail": ON_OFF,
}


def filter_prefix(candidates: Iterable[str], prefix: str) -> list[str]:
    """Keep candidates starting with `prefix` (case-insensitive), dropping duplicates."""
    lowered = prefix.lower()
    seen: set[str] = set()
    out: list[str] = []
    for cand in candidates:
        if cand in seen or not cand.lower().startswith(lowered):
            continue
        seen.add(cand)
        out.append(cand)
    return out


def _column_candidates(context: CompletionContext, cache: SchemaCache) -> list[str]:
    if context.qualifier is not None:
        return cache.get_columns(context.table_refs[0]) if context.table_refs else []

    known = [t for t in (cache.resolve_table(ref) for ref in context.table_refs) if t]
    if not known:
        return cache.get_all_columns()
    columns: list[str] = []
    for table in known:
        columns.extend(cache.get_columns(table))
    return columns


def _dot_argument_candidates(context: CompletionContext, cache: SchemaCache) -> list[str]:
    command = context.command_name or ""
    if command in _STATIC_ARGUMENTS:
        return list(_STATIC_ARGUMENTS[command])
    if command in {"schema", "dump"}:
        return cache.get_tables()
    if command == "import" and context.argument_index >= 1:
        return cache.get_tables()
    return []


_SOURCES: dict[ContextKind, Callable[[CompletionContext, SchemaCache], list[str]]] = {
    ContextKind.KEYWORD: lambda _ctx, _cache: [*SQL_KEYWORDS, *SQL_FUNCTIONS],
    ContextKind.TABLE_NAME: lambda _ctx, cache: cache.get_tables(),
    ContextKind.COLUMN_NAME: _column_candidates,
    ContextKind.DOT_COMMAND: lambda _ctx, _cache: list(DOT_COMMANDS),
    ContextKind.DOT_ARGUMENT: _dot_argument_candidates,
}


def provide(context: CompletionContext, cache: SchemaCache) -> list[str]:
    """Return ordered, de-duplicated candidates matching `context.prefix`.

    Schema-dependent contexts fall back to an empty list when the schema
    cannot be fetched; the cache keeps the error for diagnostics.
    """
    try:
        source = _SOURCES[context.kind](context, cache)
    except SchemaFetchError as exc:
        _logger.warning("No schema candidates for %s: %s", context.kind.name, exc)
        return []
    return filter_prefix(source, context.prefix)
