from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from .cells import CellBlock, is_absent, is_number, parse_int_text, single_row, to_int
from .errors import MalformedSpec

# Any of these substrings marks a single-cell string as Well-Known Text
WKT_MARKERS = ("PROJCS", "GEOGCS", "SPHEROID")


@dataclass(frozen=True)
class NumericEpsg:
    code: int


@dataclass(frozen=True)
class TextualEpsg:
    code: int


@dataclass(frozen=True)
class WellKnownText:
    text: str


@dataclass(frozen=True)
class GenericText:
    """PROJ string, PROJJSON, a textual name or an ``AUTH:CODE`` string."""

    text: str


@dataclass(frozen=True)
class AuthorityCode:
    authority: str
    code: int


CrsSpecKind = Union[NumericEpsg, TextualEpsg, WellKnownText, GenericText, AuthorityCode]


def _classify_single(v) -> CrsSpecKind:
    if is_number(v):
        return NumericEpsg(to_int(v))
    if isinstance(v, str) and not is_absent(v):
        code = parse_int_text(v)
        if code is not None:
            return TextualEpsg(code)
        if any(m in v for m in WKT_MARKERS):
            return WellKnownText(v)
        return GenericText(v)
    raise MalformedSpec("CRS", f"unsupported cell {v!r}")


def _classify_pair(auth, code) -> CrsSpecKind:
    if not isinstance(auth, str) or is_absent(auth):
        raise MalformedSpec("CRS", "authority must be a string")
    if is_number(code):
        return AuthorityCode(auth.strip(), to_int(code))
    if isinstance(code, str):
        n = parse_int_text(code)
        if n is not None:
            return AuthorityCode(auth.strip(), n)
    raise MalformedSpec("CRS", f"code {code!r} is not a number")


def classify(cells: CellBlock) -> CrsSpecKind:
    """Decide which of the five CRS description shapes a cell block holds.

    Order matters and is fixed: the cell count decides authority+code first,
    then numbers win over text, then WKT markers win over the generic
    descriptor. The result names the one engine entry point to call.
    """
    row = single_row(cells, "CRS", 1, 2)
    if len(row) == 1:
        return _classify_single(row[0])
    return _classify_pair(row[0], row[1])


__all__ = [
    "WKT_MARKERS",
    "NumericEpsg",
    "TextualEpsg",
    "WellKnownText",
    "GenericText",
    "AuthorityCode",
    "CrsSpecKind",
    "classify",
]
