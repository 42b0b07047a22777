"""Statement builders for the table synchronization engine.

Data values always travel as ``?`` placeholders. Identifiers cannot be bound,
so they are double-quoted here and MUST already be confirmed present in the
schema catalog by the caller; quoting alone is not the access check.
"""
from __future__ import annotations
from typing import Optional, Sequence

TABLE_LIST_QUERY = (
    "SELECT name FROM sqlite_master "
    "WHERE type='table' AND name NOT LIKE 'sqlite\\_%' ESCAPE '\\' "
    "ORDER BY name"
)
VALIDATION_QUERY = "SELECT count(*) FROM sqlite_master"


def quote_identifier(name: str) -> str:
    """Quote SQL identifier."""
    return '"' + name.replace('"', '""') + '"'


def build_select_all(table: str, columns: Optional[Sequence[str]] = None) -> str:
    """Every row of ``table``; with ``columns``, exactly those, in that order.

    ``SELECT *`` also returns generated columns that ``PRAGMA table_info``
    omits, so callers lining cells up with catalog columns pass them here.
    """
    if not columns:
        return f"SELECT * FROM {quote_identifier(table)}"
    cols = ", ".join(quote_identifier(c) for c in columns)
    return f"SELECT {cols} FROM {quote_identifier(table)}"


def build_delete_all(table: str) -> str:
    return f"DELETE FROM {quote_identifier(table)}"


def build_insert(table: str, columns: Sequence[str]) -> str:
    if not columns:
        raise ValueError("INSERT requires at least one column")
    cols = ", ".join(quote_identifier(c) for c in columns)
    placeholders = ", ".join("?" for _ in columns)
    return f"INSERT INTO {quote_identifier(table)} ({cols}) VALUES ({placeholders})"


def build_column_introspection(table: str) -> str:
    return f"PRAGMA table_info({quote_identifier(table)})"
