"""Schema catalog: which user tables exist and what columns they have.

The table list is cached and refreshed once per successful open. Column lists
are looked up fresh on every call; this is an administrative path, not a hot
one, and columns may change between refreshes.
"""
from __future__ import annotations
import sqlite3
from typing import List

from .base_backend import ConnectionSource
from .logging_util import warn, debug
from .query_builder import TABLE_LIST_QUERY, build_column_introspection


class SchemaCatalog:
    def __init__(self, source: ConnectionSource):
        self._source = source
        self._tables: List[str] = []

    def refresh(self) -> List[str]:
        """Re-read the user table list; errors leave it empty."""
        self._tables = []
        conn = self._source.connection
        if conn is None:
            return []
        try:
            rows = conn.execute(TABLE_LIST_QUERY).fetchall()
        except sqlite3.Error as e:
            warn("catalog_tables_failed", error=str(e))
            return []
        self._tables = [r[0] for r in rows if r[0]]
        debug("catalog_refreshed", tables=self._tables)
        return list(self._tables)

    def list_tables(self) -> List[str]:
        if not self._source.is_open:
            return []
        return list(self._tables)

    def has_table(self, table: str) -> bool:
        return self._source.is_open and table in self._tables

    def get_columns(self, table: str) -> List[str]:
        """Column names in declaration order; empty means "cannot proceed"."""
        conn = self._source.connection
        if conn is None or not self.has_table(table):
            return []
        try:
            rows = conn.execute(build_column_introspection(table)).fetchall()
        except sqlite3.Error as e:
            warn("catalog_columns_failed", table=table, error=str(e))
            return []
        # table_info rows: (cid, name, type, notnull, dflt_value, pk)
        return [r[1] for r in rows]

    def clear(self) -> None:
        self._tables = []
