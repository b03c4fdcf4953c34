"""Completion context classification.

Given the text typed so far, decide what kind of token is being completed.
Classification is a single, stateless pass over the tokens before the cursor:
the nearest preceding word (the anchor keyword) selects the context through a
fixed lookup table. Nested subqueries are not parsed, and words inside string
literals or comments are not treated specially when locating the prefix.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
import logging
import re
from typing import Final, NamedTuple

import sqlglot
from sqlglot.tokens import TokenType

from .constants import COLUMN_ANCHORS, NON_ALIAS_WORDS, TABLE_ANCHORS

_logger = logging.getLogger(__name__)

DOT_PREFIX: Final[str] = "."

_PREFIX_RE: Final[re.Pattern[str]] = re.compile(r"[\w$]*$")
# sqlglot emits some multi-word keywords ("ORDER BY") as one token.
_WORD_RE: Final[re.Pattern[str]] = re.compile(r"^[\w$]+(?:\s+[\w$]+)*$")
_FALLBACK_TOKEN_RE: Final[re.Pattern[str]] = re.compile(r"[\w$]+|[^\s\w$]")

_LITERAL_TYPES: Final[frozenset[TokenType]] = frozenset(
    token_type
    for name in (
        "STRING",
        "NUMBER",
        "HEX_STRING",
        "BIT_STRING",
        "BYTE_STRING",
        "NATIONAL_STRING",
        "RAW_STRING",
    )
    if (token_type := getattr(TokenType, name, None)) is not None
)


class ContextKind(Enum):
    """What the token under the cursor is expected to be."""

    KEYWORD = auto()
    TABLE_NAME = auto()
    COLUMN_NAME = auto()
    DOT_COMMAND = auto()
    DOT_ARGUMENT = auto()


@dataclass(frozen=True, slots=True)
class CompletionContext:
    """Classification of one completion request.

    `command_name` and `argument_index` are only meaningful for
    `DOT_ARGUMENT`; `qualifier` and `table_refs` only for `COLUMN_NAME`.
    """

    kind: ContextKind
    prefix: str = ""
    command_name: str | None = None
    argument_index: int = 0
    qualifier: str | None = None
    table_refs: tuple[str, ...] = ()


class _Tok(NamedTuple):
    text: str
    kind: str  # "word" | "ident" | "literal" | "comma" | "lparen" | "rparen" | "punct"


def _from_sqlglot(sql: str) -> list[_Tok]:
    out: list[_Tok] = []
    for token in sqlglot.tokenize(sql, read="sqlite"):
        tt = token.token_type
        if tt in _LITERAL_TYPES:
            kind = "literal"
        elif tt == TokenType.IDENTIFIER:
            kind = "ident"
        elif tt == TokenType.COMMA:
            kind = "comma"
        elif tt == TokenType.L_PAREN:
            kind = "lparen"
        elif tt == TokenType.R_PAREN:
            kind = "rparen"
        elif _WORD_RE.match(token.text):
            kind = "word"
        else:
            kind = "punct"
        out.append(_Tok(token.text, kind))
    return out


def _from_regex(sql: str) -> list[_Tok]:
    out: list[_Tok] = []
    for text in _FALLBACK_TOKEN_RE.findall(sql):
        if _WORD_RE.match(text):
            kind = "word"
        elif text == ",":
            kind = "comma"
        elif text == "(":
            kind = "lparen"
        elif text == ")":
            kind = "rparen"
        else:
            kind = "punct"
        out.append(_Tok(text, kind))
    return out


def tokenize(sql: str) -> list[_Tok]:
    """Tokenize with sqlglot, falling back to a plain splitter.

    The fallback covers input sqlglot rejects, such as an unterminated quote
    while the user is still typing inside a string.
    """
    if not sql.strip():
        return []
    try:
        return _from_sqlglot(sql)
    except Exception as exc:  # noqa: BLE001 - partial input is expected to be malformed
        _logger.debug("sqlglot tokenize failed (%s); using fallback splitter", exc)
        return _from_regex(sql)


def _find_anchor(tokens: list[_Tok]) -> str | None:
    """Return the governing anchor keyword (uppercased), or None.

    Punctuation is skipped. A comma puts the scan in list mode: the list's
    items are skipped until the clause keyword that opened the list, which
    keeps `SELECT a, b` in a column context. Parenthesized groups are skipped
    whole; an unmatched `(` ends a list scan because the list lives inside it.
    """
    in_list = False
    depth = 0
    for tok in reversed(tokens):
        if tok.kind == "rparen":
            depth += 1
            continue
        if tok.kind == "lparen":
            if depth == 0 and in_list:
                return None
            depth = max(0, depth - 1)
            continue
        if depth > 0:
            continue
        if tok.kind == "comma":
            in_list = True
            continue
        if tok.kind == "punct":
            if in_list and tok.text == ";":
                return None
            continue
        word = tok.text.upper() if tok.kind == "word" else None
        if word is not None and (word in TABLE_ANCHORS or word in COLUMN_ANCHORS):
            return word
        if not in_list:
            return None
    return None


def extract_table_refs(tokens: list[_Tok]) -> tuple[list[str], dict[str, str]]:
    """Collect table names following FROM/JOIN/UPDATE/INTO, plus their aliases.

    Returns the referenced tables in order of appearance and a mapping of
    lowercased alias (and table name) to table name.
    """
    tables: list[str] = []
    aliases: dict[str, str] = {}

    def is_name(i: int) -> bool:
        return i < len(tokens) and tokens[i].kind in {"word", "ident"}

    def ends_reference(i: int) -> bool:
        tok = tokens[i]
        return tok.kind == "word" and (
            " " in tok.text or tok.text.split()[0].upper() in NON_ALIAS_WORDS
        )

    i = 0
    while i < len(tokens):
        tok = tokens[i]
        if not (tok.kind == "word" and tok.text.upper() in TABLE_ANCHORS):
            i += 1
            continue
        j = i + 1
        while is_name(j):
            name = tokens[j].text
            # schema.table -> table
            while j + 2 < len(tokens) and tokens[j + 1].text == "." and is_name(j + 2):
                j += 2
                name = tokens[j].text
            if ends_reference(j):
                break
            if name not in tables:
                tables.append(name)
            aliases.setdefault(name.lower(), name)
            j += 1
            if is_name(j) and tokens[j].text.upper() == "AS":
                j += 1
            if is_name(j) and not ends_reference(j):
                aliases[tokens[j].text.lower()] = name
                j += 1
            if j < len(tokens) and tokens[j].kind == "comma":
                j += 1
                continue
            break
        i = max(j, i + 1)
    return tables, aliases


def _classify_dot(text: str) -> CompletionContext:
    if not any(ch.isspace() for ch in text):
        return CompletionContext(kind=ContextKind.DOT_COMMAND, prefix=text)
    parts = text.split()
    command_name = parts[0][len(DOT_PREFIX) :].lower()
    if text[-1].isspace():
        prefix = ""
        argument_index = len(parts) - 1
    else:
        prefix = parts[-1]
        argument_index = len(parts) - 2
    return CompletionContext(
        kind=ContextKind.DOT_ARGUMENT,
        prefix=prefix,
        command_name=command_name,
        argument_index=argument_index,
    )


def classify(line: str, cursor: int) -> CompletionContext:
    """Classify the completion request for `line` with the cursor at `cursor`."""
    cursor = max(0, min(cursor, len(line)))
    before = line[:cursor]

    stripped = before.lstrip()
    if stripped.startswith(DOT_PREFIX):
        return _classify_dot(stripped)

    match = _PREFIX_RE.search(before)
    prefix = match.group(0) if match else ""
    head = before[: len(before) - len(prefix)]

    if head.endswith("."):
        qualifier_match = _PREFIX_RE.search(head[:-1])
        qualifier = qualifier_match.group(0) if qualifier_match else ""
        if qualifier:
            _, aliases = extract_table_refs(tokenize(line))
            table = aliases.get(qualifier.lower(), qualifier)
            return CompletionContext(
                kind=ContextKind.COLUMN_NAME,
                prefix=prefix,
                qualifier=qualifier,
                table_refs=(table,),
            )

    anchor = _find_anchor(tokenize(head))
    if anchor in TABLE_ANCHORS:
        return CompletionContext(kind=ContextKind.TABLE_NAME, prefix=prefix)
    if anchor in COLUMN_ANCHORS:
        tables, _ = extract_table_refs(tokenize(line))
        return CompletionContext(
            kind=ContextKind.COLUMN_NAME, prefix=prefix, table_refs=tuple(tables)
        )
    return CompletionContext(kind=ContextKind.KEYWORD, prefix=prefix)
