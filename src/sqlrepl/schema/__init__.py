"""Schema cache and introspection used by completion."""

from __future__ import annotations

from .cache import Column, SchemaCache, Table
from .reflection import SchemaIntrospector, SqlAlchemyIntrospector

__all__ = [
    "Column",
    "SchemaCache",
    "SchemaIntrospector",
    "SqlAlchemyIntrospector",
    "Table",
]
