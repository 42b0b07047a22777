"""Connection lifecycle for one database file per engine instance.

Responsibilities:
  - Resolve EngineConfig from the environment with clamping + sanity logging
  - Open a file in explicit-transaction (autocommit) mode and validate it
  - Tear down the previous connection before opening another one
  - Health check helper + optional integrity_check (GRIDSYNC_VERIFY_ON_CONNECT=1)

Each handle carries a generated, process-unique name used to tell engine
instances apart in log records. There is no shared registry.
"""
from __future__ import annotations
import sqlite3, os, uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from .errors import FailureKind, fail, ok
from .logging_util import warn, info, debug
from .query_builder import VALIDATION_QUERY

MAX_BUSY_TIMEOUT_MS = 600_000
DEFAULT_BUSY_TIMEOUT_MS = 5000


@dataclass
class EngineConfig:
    busy_timeout_ms: int = DEFAULT_BUSY_TIMEOUT_MS
    foreign_keys: bool = False
    verify_on_connect: bool = False
    create_missing: bool = False

    @classmethod
    def from_env(cls) -> "EngineConfig":
        def _int(name: str, default: int) -> int:
            raw = os.environ.get(name)
            if raw is None:
                return default
            try:
                return int(raw)
            except ValueError:
                warn("invalid_env_int", key=name, value=raw, default=default)
                return default
        busy = _int("GRIDSYNC_BUSY_TIMEOUT_MS", DEFAULT_BUSY_TIMEOUT_MS)
        if busy < 0 or busy > MAX_BUSY_TIMEOUT_MS:
            clamped = min(MAX_BUSY_TIMEOUT_MS, max(0, busy))
            warn("engine_config_clamped", key="GRIDSYNC_BUSY_TIMEOUT_MS", original=busy, clamped=clamped)
            busy = clamped
        return cls(
            busy_timeout_ms=busy,
            foreign_keys=os.environ.get("GRIDSYNC_FOREIGN_KEYS", "0") == "1",
            verify_on_connect=os.environ.get("GRIDSYNC_VERIFY_ON_CONNECT", "0") == "1",
            create_missing=os.environ.get("GRIDSYNC_CREATE_MISSING", "0") == "1",
        )


def _generate_name() -> str:
    return f"gridsync-{uuid.uuid4().hex}"


class ConnectionHandle:
    """Exclusive owner of one sqlite3 connection.

    ``open()`` always closes the current connection first, so at most one is
    live per handle, and gives each new connection a fresh ``name``.
    ``close()`` is safe to call repeatedly.
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or EngineConfig.from_env()
        self.name = _generate_name()
        self._conn: Optional[sqlite3.Connection] = None
        self._path: Optional[str] = None

    # --- Public API -----------------------------------------------------------------
    @property
    def connection(self) -> Optional[sqlite3.Connection]:
        return self._conn

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    @property
    def path(self) -> Optional[str]:
        return self._path

    def open(self, path: str) -> Dict[str, Any]:
        self.close()
        self.name = _generate_name()
        if not path:
            return fail(FailureKind.OPEN_FAILED, "Empty file path provided")
        if os.path.isdir(path):
            return fail(FailureKind.OPEN_FAILED, f"Path points to a directory, expected file: {path}")
        exists = os.path.exists(path)
        if not exists and not self.config.create_missing:
            return fail(FailureKind.OPEN_FAILED, f"Database file not found: {path}")

        mode = "rw" if exists else "rwc"
        uri = f"{Path(path).resolve().as_uri()}?mode={mode}"
        try:
            conn = sqlite3.connect(uri, uri=True, isolation_level=None)
        except sqlite3.Error as e:
            warn("connection_open_failed", handle=self.name, path=path, error=str(e))
            return fail(FailureKind.OPEN_FAILED, f"Cannot open database file {path}: {e}")

        try:
            conn.execute(VALIDATION_QUERY).fetchone()
        except sqlite3.Error as e:
            warn("connection_validation_failed", handle=self.name, path=path, error=str(e))
            conn.close()
            return fail(FailureKind.INVALID_DATABASE, f"Invalid database {path}: {e}")

        self._apply_pragmas(conn)
        if self.config.verify_on_connect:
            try:
                res = conn.execute("PRAGMA integrity_check").fetchone()[0]
                if res != "ok":
                    warn("integrity_check_failed", handle=self.name, path=path, result=res)
            except sqlite3.Error as e:
                warn("integrity_check_error", handle=self.name, error=str(e))

        self._conn = conn
        self._path = path
        info("connection_opened", handle=self.name, path=path)
        return ok(path=path, handle=self.name)

    def close(self) -> None:
        if self._conn is None:
            return
        try:
            self._conn.close()
        except sqlite3.Error as e:
            warn("connection_close_failed", handle=self.name, error=str(e))
        debug("connection_closed", handle=self.name, path=self._path)
        self._conn = None
        self._path = None

    def health_check(self) -> Dict[str, Any]:
        """Return current core pragma values and basic status."""
        if self._conn is None:
            return {"ok": False, "error": "No database loaded", "name": self.name}
        try:
            return {
                "ok": True,
                "name": self.name,
                "path": self._path,
                "foreign_keys": self._conn.execute("PRAGMA foreign_keys").fetchone()[0],
                "journal_mode": self._conn.execute("PRAGMA journal_mode").fetchone()[0],
                "busy_timeout": self._conn.execute("PRAGMA busy_timeout").fetchone()[0],
                "in_transaction": self._conn.in_transaction,
            }
        except sqlite3.Error as e:
            return {"ok": False, "error": str(e), "name": self.name}

    def __enter__(self) -> "ConnectionHandle":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    # --- Internal -------------------------------------------------------------------
    def _apply_pragmas(self, conn: sqlite3.Connection) -> None:
        pragmas = [
            (f"foreign_keys={'ON' if self.config.foreign_keys else 'OFF'}", "foreign_keys"),
            (f"busy_timeout={self.config.busy_timeout_ms}", "busy_timeout"),
        ]
        for p, tag in pragmas:
            try:
                conn.execute(f"PRAGMA {p}")
            except sqlite3.Error as e:
                warn("pragma_failed", pragma=p, tag=tag, handle=self.name, error=str(e))
