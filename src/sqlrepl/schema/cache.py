"""Lazily refreshed table/column cache backing completion.

The cache is owned by one REPL session and mutated only from the thread
reading user input. `invalidate()` is cheap; the refetch happens on the next
read, so several invalidations in a row still cost a single refresh.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging

from sqlrepl.exceptions import SchemaFetchError
from sqlrepl.schema.reflection import SchemaIntrospector

_logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Column:
    """A column name plus a back-reference to its table (lookup only)."""

    name: str
    owning_table: str


@dataclass(frozen=True, slots=True)
class Table:
    """A table and its columns in declaration order."""

    name: str
    columns: tuple[Column, ...] = ()

    @property
    def column_names(self) -> list[str]:
        return [c.name for c in self.columns]


class SchemaCache:
    """Mapping of table name to `Table`, refreshed on demand.

    Invariant: while `dirty` is true the next read refetches everything from
    the introspector before answering. A failed refresh keeps the previous
    mapping, records the error and leaves the cache dirty so the following
    read retries.
    """

    def __init__(self, introspector: SchemaIntrospector) -> None:
        self._introspector = introspector
        self._tables: dict[str, Table] = {}
        self.dirty = True
        self.refresh_count = 0
        self.last_error: str | None = None

    @property
    def tables(self) -> dict[str, Table]:
        """Current mapping without triggering a refresh."""
        return self._tables

    def invalidate(self) -> None:
        """Mark the cache stale; the next read refetches."""
        if not self.dirty:
            _logger.debug("Schema cache invalidated")
        self.dirty = True

    def refresh(self) -> None:
        """Refetch the full table/column set from the introspector.

        Raises:
            SchemaFetchError: If any introspection call fails. The cached
                contents are left untouched.
        """
        self.refresh_count += 1
        try:
            names = self._introspector.list_tables()
            rebuilt: dict[str, Table] = {}
            for name in names:
                if name in rebuilt:
                    continue
                cols = tuple(
                    Column(name=col, owning_table=name)
                    for col in self._introspector.list_columns(name)
                )
                rebuilt[name] = Table(name=name, columns=cols)
        except Exception as exc:  # noqa: BLE001 - any driver error keeps the old mapping
            self.last_error = str(exc)
            _logger.warning(
                "Schema refresh failed; keeping %d cached tables: %s", len(self._tables), exc
            )
            msg = f"Failed to fetch schema: {exc}"
            raise SchemaFetchError(msg) from exc

        self._tables = rebuilt
        self.dirty = False
        self.last_error = None
        _logger.debug("Schema cache refreshed (%d tables)", len(rebuilt))

    def _ensure_fresh(self) -> None:
        if self.dirty:
            self.refresh()

    # ---- reads -------------------------------------------------------------
    def get_tables(self) -> list[str]:
        """Table names in the database's listing order."""
        self._ensure_fresh()
        return list(self._tables)

    def resolve_table(self, name: str) -> str | None:
        """Return the cached spelling of `name`, matching case-insensitively."""
        self._ensure_fresh()
        if name in self._tables:
            return name
        lowered = name.lower()
        for table in self._tables:
            if table.lower() == lowered:
                return table
        return None

    def get_columns(self, table_name: str) -> list[str]:
        """Column names of `table_name`, or an empty list when unknown."""
        resolved = self.resolve_table(table_name)
        if resolved is None:
            return []
        return self._tables[resolved].column_names

    def get_all_columns(self) -> list[str]:
        """Union of column names across all tables, first occurrence wins."""
        self._ensure_fresh()
        seen: dict[str, None] = {}
        for table in self._tables.values():
            for col in table.columns:
                seen.setdefault(col.name, None)
        return list(seen)
