"""Helpers for raw spreadsheet cell values.

The host hands us untyped cells: numbers (always doubles on the sheet side),
strings, booleans and a blank/missing marker. Blank and missing are both
represented as ``None`` by the time they reach this package; strings holding
only whitespace are treated the same way.
"""
from __future__ import annotations

import math
import numbers
import re
from typing import Any, List, Optional, Sequence

from .errors import MalformedSpec

Cell = Any
CellBlock = Sequence[Sequence[Cell]]

# Same acceptance as an integer TryParse: optional sign, digits, surrounding blanks
_INT_TEXT_RE = re.compile(r"\s*[+-]?\d+\s*")


def is_absent(v: Cell) -> bool:
    if v is None:
        return True
    return isinstance(v, str) and not v.strip()


def is_number(v: Cell) -> bool:
    return isinstance(v, numbers.Real) and not isinstance(v, bool)


def to_int(v: Cell) -> int:
    """Truncate a numeric cell: first as double, then to int (4326.0 -> 4326)."""
    d = float(v)
    if not math.isfinite(d):
        raise MalformedSpec("cell", f"non-finite number {v!r}")
    return int(d)


def parse_int_text(s: str) -> Optional[int]:
    if not _INT_TEXT_RE.fullmatch(s):
        return None
    return int(s.strip())


def block_shape(block: CellBlock) -> tuple[int, int]:
    """Rows and columns of a rectangular block; ragged blocks are malformed."""
    rows = list(block) if block is not None else []
    if not rows:
        return 0, 0
    widths = {len(r) for r in rows}
    if len(widths) != 1:
        raise MalformedSpec("cell block", "rows of unequal length")
    return len(rows), widths.pop()


def single_row(block: CellBlock, what: str, min_cols: int, max_cols: int) -> List[Cell]:
    if isinstance(block, (str, bytes)):
        raise MalformedSpec(what, "not a 2-D cell range")
    try:
        n_rows, n_cols = block_shape(block)
    except TypeError:
        raise MalformedSpec(what, "not a 2-D cell range")
    if n_rows != 1:
        raise MalformedSpec(what, f"expected 1 row, got {n_rows}")
    if n_cols < min_cols or n_cols > max_cols:
        raise MalformedSpec(what, f"expected {min_cols}-{max_cols} columns, got {n_cols}")
    return list(list(block)[0])


def index_arg(v: Cell, default: int = 0) -> int:
    """Zero-based index argument; an absent cell means ``default``."""
    if is_absent(v):
        return default
    if is_number(v):
        return to_int(v)
    if isinstance(v, str):
        n = parse_int_text(v)
        if n is not None:
            return n
    raise MalformedSpec("index", f"{v!r} is not a number")


__all__ = [
    "Cell",
    "CellBlock",
    "is_absent",
    "is_number",
    "to_int",
    "parse_int_text",
    "block_shape",
    "single_row",
    "index_arg",
]
