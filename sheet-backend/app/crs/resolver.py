from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Iterator, Optional

from pyproj import CRS
from pyproj.exceptions import ProjError

from app.options import ProjOptions

from .cells import CellBlock
from .engine import ProjContext, create_context
from .errors import ResolutionFailed
from .kinds import (
    AuthorityCode,
    CrsSpecKind,
    GenericText,
    NumericEpsg,
    TextualEpsg,
    WellKnownText,
    classify,
)

logger = logging.getLogger(__name__)


def _construct(kind: CrsSpecKind, ctx: Any) -> Optional[CRS]:
    if isinstance(kind, (NumericEpsg, TextualEpsg)):
        return ctx.create_from_epsg(kind.code)
    if isinstance(kind, WellKnownText):
        return ctx.create_from_wkt(kind.text)
    if isinstance(kind, GenericText):
        return ctx.create_from_descriptor(kind.text)
    if isinstance(kind, AuthorityCode):
        return ctx.create_from_authority_code(kind.authority, kind.code)
    raise TypeError(f"unhandled CRS kind {kind!r}")  # pragma: no cover


def resolve(cells: CellBlock, ctx: ProjContext) -> CRS:
    """Turn a 1x1 or 1x2 cell block into a CRS owned by ``ctx``.

    Raises MalformedSpec for unrecognized shapes and ResolutionFailed when
    the engine rejects the description. Exactly one engine call is made.
    """
    kind = classify(cells)
    label = type(kind).__name__
    try:
        crs = _construct(kind, ctx)
    except ProjError as e:
        raise ResolutionFailed(label, str(e)) from e
    if crs is None:
        raise ResolutionFailed(label, "engine returned no CRS")
    logger.debug("resolved %s", kind)
    return crs


@contextmanager
def open_crs(cells: CellBlock, ctx: ProjContext, normalized: bool = True) -> Iterator[CRS]:
    crs = resolve(cells, ctx)
    yield ctx.with_axis_normalized(crs) if normalized else crs


@contextmanager
def crs_scope(cells: CellBlock, options: Optional[ProjOptions] = None, normalized: bool = True) -> Iterator[CRS]:
    """Context and CRS for one read; both are released however the block exits."""
    with create_context(options) as ctx:
        with open_crs(cells, ctx, normalized=normalized) as crs:
            yield crs


__all__ = ["resolve", "open_crs", "crs_scope"]
