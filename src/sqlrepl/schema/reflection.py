"""Database schema introspection adapter.

This module provides the introspection collaborator used by the schema
cache. `SqlAlchemyIntrospector` answers the two questions completion needs,
which tables exist and which columns each one has, through SQLAlchemy's
inspector API.

Classes:
- SchemaIntrospector: Protocol describing the collaborator contract
- SqlAlchemyIntrospector: SQLAlchemy-backed implementation
"""

from __future__ import annotations

import logging
from typing import Protocol

import sqlalchemy as sa
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.engine.reflection import Inspector

_logger = logging.getLogger(__name__)


class SchemaIntrospector(Protocol):
    """Schema enumeration contract consumed by `SchemaCache`."""

    def list_tables(self) -> list[str]:
        """Return table names in the database's own listing order."""
        ...

    def list_columns(self, table_name: str) -> list[str]:
        """Return column names of `table_name` in declaration order."""
        ...


class SqlAlchemyIntrospector:
    """Introspector backed by `sqlalchemy.inspect`.

    A fresh `Inspector` is created per call: inspectors memoize their results,
    and a memoized table list would hide tables created since the last
    refresh.

    Attributes:
        bind: Engine or Connection to introspect. Passing the session's own
            connection keeps `:memory:` databases and uncommitted DDL visible.
    """

    def __init__(self, bind: Engine | Connection) -> None:
        self.bind = bind

    def _inspector(self) -> Inspector:
        return sa.inspect(self.bind)

    def list_tables(self) -> list[str]:
        """List user tables; SQLite reports them ordered by name."""
        tables = list(self._inspector().get_table_names())
        _logger.debug("Introspected %d tables", len(tables))
        return tables

    def list_columns(self, table_name: str) -> list[str]:
        """List the columns of one table in declaration order."""
        columns = self._inspector().get_columns(table_name)
        return [str(col["name"]) for col in columns]
