"""Completion entry points.

`Completer` composes classification and candidate generation behind the two
operations the REPL needs: `complete(line, cursor)` and
`invalidate_schema_cache()`. `SqlCompleter` adapts it to prompt_toolkit.
"""

from __future__ import annotations

from collections.abc import Iterable
import logging

from prompt_toolkit.completion import CompleteEvent, Completion, PathCompleter
from prompt_toolkit.completion import Completer as PromptCompleter
from prompt_toolkit.document import Document

from sqlrepl.schema.cache import SchemaCache

from .constants import PATH_ARGUMENT_COMMANDS
from .context import CompletionContext, ContextKind, classify
from .provider import provide

_logger = logging.getLogger(__name__)


class Completer:
    """Context-aware completion over a session-owned `SchemaCache`."""

    def __init__(self, cache: SchemaCache) -> None:
        self.cache = cache

    def classify(self, line: str, cursor: int) -> CompletionContext:
        return classify(line, cursor)

    def complete(self, line: str, cursor: int) -> list[str]:
        """Candidate strings for the token ending at `cursor`.

        Never raises: any failure degrades to no suggestions.
        """
        try:
            return provide(classify(line, cursor), self.cache)
        except Exception:  # noqa: BLE001 - completion must not break line editing
            _logger.warning("Completion failed for %r", line[:cursor], exc_info=True)
            return []

    def invalidate_schema_cache(self) -> None:
        self.cache.invalidate()


class SqlCompleter(PromptCompleter):
    """prompt_toolkit adapter around `Completer`.

    Replaces the in-progress token with the chosen candidate. File-taking dot
    commands (`.read`, `.open`, `.output`, the first `.import` argument)
    complete paths instead.
    """

    def __init__(self, completer: Completer) -> None:
        self.completer = completer
        self._paths = PathCompleter(expanduser=True)

    def get_completions(
        self, document: Document, complete_event: CompleteEvent
    ) -> Iterable[Completion]:
        line = document.current_line
        cursor = document.cursor_position_col
        context = self.completer.classify(line, cursor)

        if (
            context.kind is ContextKind.DOT_ARGUMENT
            and PATH_ARGUMENT_COMMANDS.get(context.command_name or "") == context.argument_index
        ):
            yield from self._paths.get_completions(Document(context.prefix), complete_event)
            return

        for candidate in self.completer.complete(line, cursor):
            yield Completion(candidate, start_position=-len(context.prefix))
