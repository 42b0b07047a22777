"""Structural types shared by the engine components.

The catalog, materializer and synchronizer only need "something that may hold
an open DB-API connection". Keeping that as a Protocol lets tests wrap a real
sqlite3 connection to inject failures at a chosen statement.
"""
from __future__ import annotations
from typing import Protocol, Optional, Any

class ConnectionLike(Protocol):  # pragma: no cover - structural typing helper
    def execute(self, *args: Any, **kwargs: Any) -> Any: ...
    def close(self) -> None: ...

class ConnectionSource(Protocol):  # pragma: no cover - structural typing helper
    @property
    def connection(self) -> Optional[ConnectionLike]:
        """Open connection, or None when nothing is loaded."""
        ...

    @property
    def is_open(self) -> bool: ...
