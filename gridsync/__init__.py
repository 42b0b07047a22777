"""gridsync package initialization.

Single source of truth for the package version so that code, tests, and
scripts can import it without duplicating literals. The engine facade is
re-exported for convenience.
"""

PACKAGE_VERSION = "0.1.0"  # Keep in sync with pyproject version.

from .engine import TableSyncEngine  # noqa: E402
from .grid import Grid  # noqa: E402
from .errors import FailureKind  # noqa: E402

__all__ = ["PACKAGE_VERSION", "TableSyncEngine", "Grid", "FailureKind"]
