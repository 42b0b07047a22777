"""In-memory grid: ordered rows of text cells under (optional) column headers."""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, List, Optional

Cell = Optional[str]


def cell_text(value: Any) -> Cell:
    """Textual rendering of a stored value. NULL stays ``None``."""
    if value is None:
        return None
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)


@dataclass
class Grid:
    """Rows x named columns as displayed/edited by the presentation layer.

    ``headers`` may be shorter than the rows or hold ``None`` for positions
    without a label; the synchronizer resolves those from the catalog.
    A ``None`` cell is SQL NULL. Rows shorter than ``width`` are read as
    padded with ``""``.
    """
    headers: List[Optional[str]] = field(default_factory=list)
    rows: List[List[Cell]] = field(default_factory=list)

    @property
    def width(self) -> int:
        longest = max((len(r) for r in self.rows), default=0)
        return max(len(self.headers), longest)

    @property
    def row_count(self) -> int:
        return len(self.rows)

    def cell(self, row: int, col: int) -> Cell:
        values = self.rows[row]
        return values[col] if col < len(values) else ""

    def padded_row(self, row: int) -> List[Cell]:
        return [self.cell(row, c) for c in range(self.width)]

    def header(self, col: int) -> Optional[str]:
        return self.headers[col] if col < len(self.headers) else None

    def set_cell(self, row: int, col: int, value: Cell) -> None:
        values = self.rows[row]
        if col >= len(values):
            values.extend([""] * (col + 1 - len(values)))
        values[col] = value

    def append_row(self, values: Optional[List[Cell]] = None) -> int:
        self.rows.append(list(values) if values is not None else [""] * self.width)
        return len(self.rows) - 1

    def remove_row(self, row: int) -> List[Cell]:
        return self.rows.pop(row)

    def copy(self) -> "Grid":
        return Grid(headers=list(self.headers), rows=[list(r) for r in self.rows])
