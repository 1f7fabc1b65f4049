#!/usr/bin/env python3
"""Evaluate a sheet of CRS cell calls offline.

Input CSV columns (header row required):

    function,crs,arg,point1,point2

- ``crs``/``arg``: one cell, or two cells separated by ``|`` (``EPSG|28992``).
  ``arg`` is the index or the second CRS, depending on the function.
- ``point1``/``point2``: ordinates separated by ``;`` (``5.0;52.0``).
- A cell that parses as a number is a number; prefix with ``'`` to keep it
  as text, as on the sheet (``'4326``).
"""
from __future__ import annotations

import argparse
import csv
import json
import os
import sys
from typing import Any, Dict, List, Optional, Tuple

# Make sheet-backend importable
THIS_DIR = os.path.dirname(__file__)
BACKEND_DIR = os.path.abspath(os.path.join(THIS_DIR, "..", "sheet-backend"))
if BACKEND_DIR not in sys.path:
    sys.path.insert(0, BACKEND_DIR)

from app.crs.function_catalog import lookup  # type: ignore
from app.schemas import CrsCallRequest  # type: ignore
from app.sheet import to_cell_result  # type: ignore


def _cell(text: str) -> Any:
    s = text.strip()
    if not s:
        return None
    if s.startswith("'"):
        return s[1:]
    try:
        return float(s)
    except ValueError:
        return s


def _block(text: Optional[str], sep: str = "|") -> Optional[List[List[Any]]]:
    if text is None or not text.strip():
        return None
    return [[_cell(part) for part in text.split(sep)]]


def _request(row: Dict[str, str], params: Tuple[str, ...]) -> CrsCallRequest:
    arg = row.get("arg")
    fields: Dict[str, Any] = {
        "crs": _block(row.get("crs")),
        "point1": _block(row.get("point1"), ";"),
        "point2": _block(row.get("point2"), ";"),
    }
    if "crs2" in params:
        fields["crs2"] = _block(arg)
    elif arg and arg.strip():
        fields["index"] = _cell(arg)
    return CrsCallRequest(**fields)


def evaluate_rows(rows: List[Dict[str, str]]) -> Tuple[List[dict], dict]:
    results: List[dict] = []
    agg = {"cells": 0, "values": 0, "errors": 0, "unknown": 0, "missing": 0}
    for i, row in enumerate(rows, start=2):
        name = (row.get("function") or "").strip()
        agg["cells"] += 1
        try:
            entry = lookup(name)
        except KeyError:
            agg["unknown"] += 1
            results.append({"line": i, "function": name, "value": None, "error": "unknown function", "detail": None})
            continue
        req = _request(row, entry.params)
        missing = entry.missing(req)
        if missing:
            agg["missing"] += 1
            results.append({"line": i, "function": name, "value": None, "error": "missing argument", "detail": ", ".join(missing)})
            continue
        cell = to_cell_result(entry.fn(*(getattr(req, p) for p in entry.params)))
        agg["errors" if cell.error else "values"] += 1
        results.append({"line": i, "function": name, **cell.model_dump()})
    return results, agg


def main():
    ap = argparse.ArgumentParser(description="Evaluate CRS cell functions from a CSV file.")
    ap.add_argument("csv_file", help="CSV with columns function,crs,arg,point1,point2")
    ap.add_argument("--format", choices=["pretty", "json", "csv"], default="pretty")
    ap.add_argument("--output", help="Optional path to write JSON/CSV output")
    args = ap.parse_args()

    with open(args.csv_file, newline="") as f:
        rows = list(csv.DictReader(f))
    if not rows:
        print("No rows found in input.")
        sys.exit(1)

    results, agg = evaluate_rows(rows)

    if args.format == "pretty":
        for r in results:
            shown = r["error"] if r["error"] else r["value"]
            detail = f" ({r['detail']})" if r.get("detail") else ""
            print(f"{r['line']:>4} {r['function']}: {shown}{detail}")
        print("\n--- aggregate ---")
        print(json.dumps(agg, indent=2))

    if args.output:
        if args.format == "json":
            with open(args.output, "w") as f:
                json.dump({"aggregate": agg, "results": results}, f, indent=2)
            print(f"Wrote JSON to {args.output}")
        elif args.format == "csv":
            with open(args.output, "w", newline="") as f:
                w = csv.writer(f)
                w.writerow(["line", "function", "value", "error", "detail"])
                for r in results:
                    w.writerow([r["line"], r["function"], r["value"], r["error"], r["detail"]])
            print(f"Wrote CSV to {args.output}")


if __name__ == "__main__":
    main()
