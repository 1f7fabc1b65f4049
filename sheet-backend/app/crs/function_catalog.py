"""Name -> callable registry of the cell functions offered to the host.

Each entry lists the request fields the function consumes, in call order.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Tuple

from . import query
from .distance import geo_distance, geo_distance_z
from .equivalence import is_equivalent_to, is_equivalent_to_relaxed


@dataclass(frozen=True)
class CatalogEntry:
    name: str
    fn: Callable[..., Any]
    params: Tuple[str, ...]
    optional: Tuple[str, ...] = ()

    @property
    def description(self) -> str:
        doc = (self.fn.__doc__ or "").strip()
        return doc.splitlines()[0] if doc else ""

    def missing(self, args: Any) -> List[str]:
        """Required parameters that ``args`` (a request object) leaves as None."""
        return [p for p in self.params if getattr(args, p, None) is None and p not in self.optional]


CRS_ONLY = ("crs",)
CRS_INDEX = ("crs", "index")
TWO_CRS = ("crs", "crs2")
CRS_TWO_POINTS = ("crs", "point1", "point2")

_INDEXED = {
    "axis_abbreviation",
    "axis_direction",
    "axis_name",
    "axis_unit_auth_name",
    "axis_unit_code",
    "axis_unit_name",
    "axis_unit_conversion_factor",
    "coordinate_system_axis_abbreviation",
    "coordinate_system_axis_direction",
    "coordinate_system_axis_name",
    "coordinate_system_axis_unit_auth_name",
    "coordinate_system_axis_unit_code",
    "coordinate_system_axis_unit_name",
    "coordinate_system_axis_unit_conversion_factor",
    "identifiers_authority",
    "identifiers_code",
}

# Host-facing names that differ from the Python attribute
_RENAMED = {"crs_type": "type"}

_HELPERS = {"read_value", "read_text", "read_number", "read_flag", "read_indexed"}


def _build() -> Dict[str, CatalogEntry]:
    entries: Dict[str, CatalogEntry] = {}
    for attr in query.__all__:
        if attr in _HELPERS:
            continue
        public = _RENAMED.get(attr, attr)
        if attr in _INDEXED:
            entries[public] = CatalogEntry(public, getattr(query, attr), CRS_INDEX, optional=("index",))
        else:
            entries[public] = CatalogEntry(public, getattr(query, attr), CRS_ONLY)
    entries["geo_distance"] = CatalogEntry("geo_distance", geo_distance, CRS_TWO_POINTS)
    entries["geo_distance_z"] = CatalogEntry("geo_distance_z", geo_distance_z, CRS_TWO_POINTS)
    entries["is_equivalent_to"] = CatalogEntry("is_equivalent_to", is_equivalent_to, TWO_CRS)
    entries["is_equivalent_to_relaxed"] = CatalogEntry("is_equivalent_to_relaxed", is_equivalent_to_relaxed, TWO_CRS)
    return entries


CATALOG: Dict[str, CatalogEntry] = _build()


def lookup(name: str) -> CatalogEntry:
    """Raise KeyError for an unknown function name."""
    return CATALOG[name]


def list_functions() -> List[Dict[str, Any]]:
    return [
        {"name": e.name, "params": list(e.params), "optional": list(e.optional), "description": e.description}
        for e in sorted(CATALOG.values(), key=lambda e: e.name)
    ]


__all__ = ["CatalogEntry", "CATALOG", "lookup", "list_functions"]
