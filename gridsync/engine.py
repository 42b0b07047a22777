"""
Table synchronization engine facade.

The boundary a presentation layer talks to: open a file, list tables, load a
table into a Grid, commit an edited Grid back, close. Every storage-facing
call returns a result dict (see gridsync.errors); nothing here raises for an
engine-level failure.
"""
from __future__ import annotations
from typing import Any, Dict, List, Optional

from .catalog import SchemaCatalog
from .connection import ConnectionHandle, EngineConfig
from .errors import FailureKind, fail
from .grid import Grid
from .logging_util import info
from .materializer import GridMaterializer
from .synchronizer import TableSynchronizer


class TableSyncEngine:
    """One engine instance owns exactly one connection handle.

    Single-threaded: operations run to completion on the calling thread and
    must not be interleaved on the same instance.
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        self.handle = ConnectionHandle(config)
        self.catalog = SchemaCatalog(self.handle)
        self.materializer = GridMaterializer(self.handle, self.catalog)
        self.synchronizer = TableSynchronizer(self.handle, self.catalog)

    @property
    def is_open(self) -> bool:
        return self.handle.is_open

    @property
    def current_path(self) -> Optional[str]:
        return self.handle.path

    def open(self, path: str) -> Dict[str, Any]:
        self.catalog.clear()
        result = self.handle.open(path)
        if not result["success"]:
            return result
        tables = self.catalog.refresh()
        info("database_loaded", handle=self.handle.name, path=path, tables=len(tables))
        result["tables"] = tables
        return result

    def list_tables(self) -> List[str]:
        return self.catalog.list_tables()

    def load_table(self, name: str) -> Dict[str, Any]:
        if not self.handle.is_open:
            return fail(FailureKind.SCHEMA_UNAVAILABLE, "No database loaded")
        return self.materializer.load_table(name)

    def commit_grid(self, name: str, grid: Optional[Grid]) -> Dict[str, Any]:
        return self.synchronizer.commit_grid(name, grid)

    def close(self) -> None:
        self.catalog.clear()
        self.handle.close()

    def health_check(self) -> Dict[str, Any]:
        return self.handle.health_check()

    def __enter__(self) -> "TableSyncEngine":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
