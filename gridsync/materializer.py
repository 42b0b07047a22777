"""Read a table into a fresh Grid. Never writes to storage."""
from __future__ import annotations
import sqlite3
from typing import Any, Dict

from .base_backend import ConnectionSource
from .catalog import SchemaCatalog
from .errors import FailureKind, fail, ok
from .grid import Grid, cell_text
from .logging_util import info, warn
from .query_builder import build_select_all


class GridMaterializer:
    def __init__(self, source: ConnectionSource, catalog: SchemaCatalog):
        self._source = source
        self._catalog = catalog

    def load_table(self, table: str) -> Dict[str, Any]:
        columns = self._catalog.get_columns(table)
        if not columns:
            return fail(FailureKind.SCHEMA_UNAVAILABLE,
                        f"Could not retrieve column information for table {table!r}")
        conn = self._source.connection
        if conn is None:
            return fail(FailureKind.SCHEMA_UNAVAILABLE, "No database loaded")

        query = build_select_all(table, columns)
        try:
            cursor = conn.execute(query)
            rows = [[cell_text(v) for v in raw] for raw in cursor]
        except sqlite3.Error as e:
            warn("table_load_failed", table=table, query=query, error=str(e))
            return fail(FailureKind.QUERY_FAILED, str(e))

        grid = Grid(headers=list(columns), rows=rows)
        info("table_loaded", table=table, rows=len(rows), columns=len(columns))
        return ok(table=table, grid=grid, row_count=len(rows))
