"""Export a loaded Grid to an HTML document and an Excel-friendly CSV file.

Only the in-memory grid is read; these helpers never touch a connection.
"""
from __future__ import annotations
import csv, html, io
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .grid import Grid
from .logging_util import info, warn

PathLike = Union[str, Path]

_CSS = (
    "body{font-family:Arial,sans-serif;margin:20px}"
    "h1{color:#333;text-align:center;margin-bottom:20px}"
    "table{border-collapse:collapse;width:100%;margin:0 auto}"
    "th,td{border:1px solid #ddd;padding:8px;text-align:left}"
    "th{background-color:#f2f2f2;font-weight:bold}"
    "tr:nth-child(even){background-color:#f9f9f9}"
    ".info{font-size:12px;color:#666;text-align:center;margin-top:20px}"
)


def display_headers(grid: Grid) -> List[str]:
    return [grid.header(c) or f"Column_{c + 1}" for c in range(grid.width)]


def display_row(grid: Grid, row: int) -> List[str]:
    return ["" if v is None else v for v in grid.padded_row(row)]


def grid_to_html(grid: Grid, table_name: str, exported_at: Optional[datetime] = None) -> str:
    E = html.escape
    stamp = (exported_at or datetime.now()).strftime("%Y-%m-%d %H:%M:%S")
    parts = [
        "<!DOCTYPE html><html><head><meta charset='utf-8'>",
        f"<title>Table: {E(table_name)}</title><style>{_CSS}</style></head><body>",
        f"<h1>Table: {E(table_name)}</h1><table><tr>",
    ]
    parts.extend(f"<th>{E(h)}</th>" for h in display_headers(grid))
    parts.append("</tr>")
    for r in range(grid.row_count):
        parts.append("<tr>" + "".join(f"<td>{E(v)}</td>" for v in display_row(grid, r)) + "</tr>")
    parts.append("</table>")
    parts.append(f"<div class='info'>Exported on {stamp} | Total rows: {grid.row_count}</div>")
    parts.append("</body></html>")
    return "".join(parts)


def grid_to_csv(grid: Grid) -> str:
    out = io.StringIO()
    w = csv.writer(out, lineterminator="\n")
    w.writerow(display_headers(grid))
    for r in range(grid.row_count):
        w.writerow(display_row(grid, r))
    return out.getvalue()


def write_csv(grid: Grid, path: PathLike) -> Path:
    path = Path(path)
    # utf-8-sig writes the BOM Excel needs to detect UTF-8
    path.write_text(grid_to_csv(grid), encoding="utf-8-sig", newline="")
    return path


def read_csv(path: PathLike) -> Grid:
    """Parse a CSV written by write_csv (or any header-first CSV) into a Grid."""
    with open(path, "r", encoding="utf-8-sig", newline="") as f:
        records = list(csv.reader(f))
    if not records:
        return Grid()
    return Grid(headers=list(records[0]), rows=[list(r) for r in records[1:]])


def export_grid(grid: Grid, table_name: str, directory: PathLike,
                now: Optional[datetime] = None) -> Dict[str, Any]:
    """Write ``<table>_<timestamp>.html`` and ``.csv`` into ``directory``."""
    if not table_name or grid.row_count == 0:
        return {"success": False, "error": "No table data to export"}
    now = now or datetime.now()
    directory = Path(directory)
    base = f"{table_name}_{now.strftime('%Y-%m-%d_%H-%M-%S')}"
    try:
        directory.mkdir(parents=True, exist_ok=True)
        html_path = directory / f"{base}.html"
        html_path.write_text(grid_to_html(grid, table_name, now), encoding="utf-8")
        csv_path = write_csv(grid, directory / f"{base}.csv")
    except OSError as e:
        warn("export_failed", table=table_name, directory=str(directory), error=str(e))
        return {"success": False, "error": str(e)}
    info("table_exported", table=table_name, rows=grid.row_count, html=str(html_path), csv=str(csv_path))
    return {"success": True, "html": str(html_path), "csv": str(csv_path)}
