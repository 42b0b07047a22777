"""Table synchronizer: atomic full-table replacement from a Grid.

A commit walks these states, in order:

    IDLE -> TRANSACTION_STARTED -> CLEARED -> COLUMNS_RESOLVED
         -> INSERTING -> COMMITTED -> IDLE

Any failure after BEGIN issues ROLLBACK before returning, so the stored table
is either exactly what it was before the call or exactly the grid. Rollback
is the only recovery mechanism; prior rows are not copied anywhere.
"""
from __future__ import annotations
import sqlite3
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, NamedTuple, Optional, Sequence, Tuple

from .base_backend import ConnectionLike, ConnectionSource
from .catalog import SchemaCatalog
from .errors import FailureKind, fail, ok
from .grid import Grid
from .logging_util import debug, info, warn
from .query_builder import build_delete_all, build_insert


class SyncState(str, Enum):
    IDLE = "idle"
    TRANSACTION_STARTED = "transaction_started"
    CLEARED = "cleared"
    COLUMNS_RESOLVED = "columns_resolved"
    INSERTING = "inserting"
    COMMITTED = "committed"


class ColumnSource(str, Enum):
    FROM_GRID = "from_grid"
    FROM_CATALOG = "from_catalog"
    SYNTHESIZED = "synthesized"


class ResolvedColumn(NamedTuple):
    name: str
    source: ColumnSource


@dataclass(frozen=True)
class CommitUnit:
    table: str
    columns: Tuple[str, ...]
    # None binds as NULL
    rows: Tuple[Tuple[Optional[str], ...], ...]


def resolve_columns(headers: Sequence[Optional[str]], catalog_columns: Sequence[str],
                    width: int) -> List[ResolvedColumn]:
    """Pick a column name per grid position: grid header, catalog, then ``Column_<n+1>``."""
    resolved = []
    for i in range(width):
        label = headers[i] if i < len(headers) else None
        if label:
            resolved.append(ResolvedColumn(label, ColumnSource.FROM_GRID))
        elif i < len(catalog_columns):
            resolved.append(ResolvedColumn(catalog_columns[i], ColumnSource.FROM_CATALOG))
        else:
            resolved.append(ResolvedColumn(f"Column_{i + 1}", ColumnSource.SYNTHESIZED))
    return resolved


class TableSynchronizer:
    """Replace a table's content with a grid inside one transaction.

    Calls must be serialized by the caller; no other statement may be issued
    on the same connection while a commit is in flight.
    """

    def __init__(self, source: ConnectionSource, catalog: SchemaCatalog):
        self._source = source
        self._catalog = catalog
        self.state = SyncState.IDLE
        # States visited by the most recent commit_grid call.
        self.trace: List[SyncState] = [SyncState.IDLE]

    def commit_grid(self, table: str, grid: Optional[Grid]) -> Dict[str, Any]:
        self.state = SyncState.IDLE
        self.trace = [SyncState.IDLE]
        conn = self._source.connection
        if conn is None:
            return fail(FailureKind.INVALID_REQUEST, "No database loaded")
        if not table:
            return fail(FailureKind.INVALID_REQUEST, "Empty table name")
        if not isinstance(grid, Grid):
            return fail(FailureKind.INVALID_REQUEST, "No grid supplied")
        if not self._catalog.has_table(table):
            return fail(FailureKind.INVALID_REQUEST, f"Unknown table {table!r}")
        catalog_columns = self._catalog.get_columns(table)
        if not catalog_columns:
            return fail(FailureKind.INVALID_REQUEST, f"No columns discoverable for table {table!r}")
        unknown = [h for h in grid.headers if h and h not in catalog_columns]
        if unknown:
            return fail(FailureKind.INVALID_REQUEST, f"Unknown columns for table {table!r}: {unknown}")
        width = grid.width
        if width == 0 and grid.rows:
            return fail(FailureKind.INVALID_REQUEST, "Grid has rows but no columns")

        started = False
        try:
            conn.execute("BEGIN")
            started = True
            # FK checks (when enabled) run at COMMIT so rows may be cleared and reinserted.
            conn.execute("PRAGMA defer_foreign_keys=ON")
        except sqlite3.Error as e:
            if started:
                self._rollback(conn, table)
            warn("sync_begin_failed", table=table, error=str(e))
            return fail(FailureKind.TRANSACTION_UNAVAILABLE, f"Failed to start transaction: {e}")
        self._enter(SyncState.TRANSACTION_STARTED, table)

        try:
            conn.execute(build_delete_all(table))
        except sqlite3.Error as e:
            self._rollback(conn, table)
            warn("sync_delete_failed", table=table, error=str(e))
            return fail(FailureKind.DELETE_FAILED, f"Failed to delete existing data: {e}")
        self._enter(SyncState.CLEARED, table)

        resolved = resolve_columns(grid.headers, catalog_columns, width)
        unit = CommitUnit(
            table=table,
            columns=tuple(c.name for c in resolved),
            rows=tuple(tuple(grid.padded_row(r)) for r in range(grid.row_count)),
        )
        self._enter(SyncState.COLUMNS_RESOLVED, table, columns=list(unit.columns))

        self._enter(SyncState.INSERTING, table, rows=len(unit.rows))
        if unit.rows:
            statement = build_insert(table, unit.columns)
            for index, values in enumerate(unit.rows):
                try:
                    conn.execute(statement, values)
                except sqlite3.Error as e:
                    self._rollback(conn, table)
                    warn("sync_insert_failed", table=table, row=index, error=str(e))
                    return fail(FailureKind.INSERT_FAILED, f"Failed to insert row {index}: {e}",
                                row_index=index)

        try:
            conn.execute("COMMIT")
        except sqlite3.Error as e:
            self._rollback(conn, table)
            warn("sync_commit_failed", table=table, error=str(e))
            return fail(FailureKind.COMMIT_FAILED, f"Failed to commit transaction: {e}")
        self._enter(SyncState.COMMITTED, table)
        self.state = SyncState.IDLE

        info("table_replaced", table=table, rows=len(unit.rows))
        return ok(
            table=table,
            rows_written=len(unit.rows),
            columns=list(unit.columns),
            column_sources=[c.source.value for c in resolved],
        )

    # --- Internal -------------------------------------------------------------------
    def _enter(self, state: SyncState, table: str, **fields: Any) -> None:
        self.state = state
        self.trace.append(state)
        debug("sync_state", table=table, state=state.value, **fields)

    def _rollback(self, conn: ConnectionLike, table: str) -> None:
        self.state = SyncState.IDLE
        if not getattr(conn, "in_transaction", True):
            return
        try:
            conn.execute("ROLLBACK")
        except sqlite3.Error as e:
            warn("sync_rollback_failed", table=table, error=str(e))
        else:
            debug("sync_rolled_back", table=table)
