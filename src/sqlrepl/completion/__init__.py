"""Context-aware completion engine.

Exports the classifier, the candidate provider and the completer facade used
by the REPL's line editor.
"""

from __future__ import annotations

from .completer import Completer, SqlCompleter
from .context import CompletionContext, ContextKind, classify
from .provider import filter_prefix, provide

__all__ = [
    "CompletionContext",
    "Completer",
    "ContextKind",
    "SqlCompleter",
    "classify",
    "filter_prefix",
    "provide",
]
