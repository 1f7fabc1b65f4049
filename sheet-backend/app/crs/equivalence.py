from __future__ import annotations

from typing import Any, Optional

from app.options import ProjOptions

from .boundary import cell_function
from .cells import CellBlock
from .engine import create_context
from .resolver import resolve


def is_equivalent(crs1: CellBlock, crs2: CellBlock, relaxed_axis_order: bool, options: Optional[ProjOptions] = None) -> Any:
    """Compare two CRSs as given (no axis normalization) in one context.

    Either side failing to resolve raises ResolutionFailed or MalformedSpec.
    """
    with create_context(options) as ctx:
        a = resolve(crs1, ctx)
        b = resolve(crs2, ctx)
        return bool(a.equals(b, ignore_axis_order=relaxed_axis_order))


@cell_function
def is_equivalent_to(crs1: CellBlock, crs2: CellBlock, *, options: Optional[ProjOptions] = None) -> Any:
    return is_equivalent(crs1, crs2, False, options)


@cell_function
def is_equivalent_to_relaxed(crs1: CellBlock, crs2: CellBlock, *, options: Optional[ProjOptions] = None) -> Any:
    return is_equivalent(crs1, crs2, True, options)


__all__ = ["is_equivalent", "is_equivalent_to", "is_equivalent_to_relaxed"]
