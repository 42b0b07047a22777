"""Command line entry point (``gridsync``) printing JSON results to stdout.

Usage:
  gridsync tables DB
  gridsync show DB TABLE
  gridsync export DB TABLE --out DIR
  gridsync commit DB TABLE CSV
  gridsync health DB

Exit codes: 0 success, 1 failure result, 2 usage error.
"""
from __future__ import annotations
import argparse, json, sys
from typing import Any, Dict, List, Optional

from . import PACKAGE_VERSION
from .engine import TableSyncEngine
from .export import export_grid, read_csv


def _emit(payload: Dict[str, Any]) -> int:
    print(json.dumps(payload, indent=2, default=str))
    return 0 if payload.get("success", payload.get("ok")) else 1


def _cmd_tables(engine: TableSyncEngine, args) -> Dict[str, Any]:
    return {"success": True, "tables": engine.list_tables()}


def _cmd_show(engine: TableSyncEngine, args) -> Dict[str, Any]:
    res = engine.load_table(args.table)
    if not res["success"]:
        return res
    grid = res["grid"]
    return {"success": True, "table": args.table, "headers": grid.headers, "rows": grid.rows}


def _cmd_export(engine: TableSyncEngine, args) -> Dict[str, Any]:
    res = engine.load_table(args.table)
    if not res["success"]:
        return res
    return export_grid(res["grid"], args.table, args.out)


def _cmd_commit(engine: TableSyncEngine, args) -> Dict[str, Any]:
    try:
        grid = read_csv(args.csv)
    except (OSError, UnicodeDecodeError) as e:
        return {"success": False, "error": f"Cannot read {args.csv}: {e}"}
    return engine.commit_grid(args.table, grid)


def _cmd_health(engine: TableSyncEngine, args) -> Dict[str, Any]:
    return engine.health_check()


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="gridsync", description="Browse, export and replace SQLite tables")
    ap.add_argument("--version", action="version", version=f"%(prog)s {PACKAGE_VERSION}")
    sub = ap.add_subparsers(dest="command", required=True)

    p = sub.add_parser("tables", help="List user tables")
    p.add_argument("db")
    p.set_defaults(func=_cmd_tables)

    p = sub.add_parser("show", help="Print a table as headers + rows")
    p.add_argument("db")
    p.add_argument("table")
    p.set_defaults(func=_cmd_show)

    p = sub.add_parser("export", help="Write HTML and CSV exports of a table")
    p.add_argument("db")
    p.add_argument("table")
    p.add_argument("--out", required=True, help="Target directory")
    p.set_defaults(func=_cmd_export)

    p = sub.add_parser("commit", help="Replace a table's rows with the rows of a CSV file")
    p.add_argument("db")
    p.add_argument("table")
    p.add_argument("csv", help="Header-first CSV file")
    p.set_defaults(func=_cmd_commit)

    p = sub.add_parser("health", help="Show connection pragmas")
    p.add_argument("db")
    p.set_defaults(func=_cmd_health)
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    with TableSyncEngine() as engine:
        opened = engine.open(args.db)
        if not opened["success"]:
            return _emit(opened)
        return _emit(args.func(engine, args))


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
