"""Read-only CRS properties for spreadsheet cells.

Every property is one selector plugged into a shared reader, so the
defensive policy lives in one place:

- the CRS is resolved and axis-normalized per call (raw axis-count and type
  reads use the CRS as given);
- blank/missing strings read as ``<NotFound>``;
- indexed collections answer ``<index out of range>`` outside [0, count);
- numbers without a natural zero read as ``-1`` when missing;
- context and CRS handles are released before the call returns.
"""
from __future__ import annotations

import math
import warnings
from typing import Any, Callable, Dict, List, Optional

from pyproj import CRS, Transformer

from app.options import ProjOptions

from .boundary import cell_function
from .cells import Cell, CellBlock, index_arg
from .errors import INDEX_OUT_OF_RANGE, NOT_FOUND, NUMBER_NOT_FOUND, CellError
from .resolver import crs_scope

Selector = Callable[[CRS], Any]

# pyproj's own marker for a name PROJ did not provide
_UNDEFINED = "undefined"


def _path(obj: Any, *attrs: str) -> Any:
    """getattr chain that stops at the first missing sub-object."""
    for a in attrs:
        if obj is None:
            return None
        obj = getattr(obj, a, None)
    return obj


def _text(v: Any) -> str:
    if v is None:
        return NOT_FOUND
    s = str(v)
    if not s.strip() or s == _UNDEFINED:
        return NOT_FOUND
    return s


def _json_type(obj: Any) -> Optional[str]:
    if obj is None:
        return None
    return obj.to_json_dict().get("type")


def _identifiers(crs: CRS) -> List[Dict[str, Any]]:
    d = crs.to_json_dict()
    if d.get("ids"):
        return list(d["ids"])
    return [d["id"]] if d.get("id") else []


def _scope(crs: CRS) -> Optional[str]:
    d = crs.to_json_dict()
    if d.get("scope"):
        return d["scope"]
    for usage in d.get("usages") or []:
        if usage.get("scope"):
            return usage["scope"]
    return None


def read_value(cells: CellBlock, selector: Selector, options: Optional[ProjOptions] = None, normalized: bool = True) -> Any:
    with crs_scope(cells, options, normalized=normalized) as crs:
        return selector(crs)


def read_text(cells: CellBlock, selector: Selector, options: Optional[ProjOptions] = None, normalized: bool = True) -> str:
    return _text(read_value(cells, selector, options, normalized))


def read_number(cells, selector, options=None, normalized=True, missing: Any = NUMBER_NOT_FOUND):
    v = read_value(cells, selector, options, normalized)
    return missing if v is None else v


def read_flag(cells, selector, options=None, normalized=True) -> bool:
    return bool(read_value(cells, selector, options, normalized))


def read_indexed(cells: CellBlock, index: Cell, items: Selector, item_value: Callable[[Any], Any],
                 options: Optional[ProjOptions] = None, normalized: bool = True) -> Any:
    n = index_arg(index)

    def pick(crs: CRS) -> Any:
        seq = items(crs) or []
        if n < 0 or n >= len(seq):
            return INDEX_OUT_OF_RANGE
        return item_value(seq[n])

    return read_value(cells, pick, options, normalized)


# -----------------------------
# Property factories
# -----------------------------

def _named(fn: Callable[..., Any], name: str, doc: str) -> Callable[..., Any]:
    fn.__name__ = fn.__qualname__ = name
    fn.__doc__ = doc
    return cell_function(fn)


def text_property(name: str, selector: Selector, doc: str, normalized: bool = True):
    def prop(crs: CellBlock, *, options: Optional[ProjOptions] = None) -> Any:
        return read_text(crs, selector, options, normalized)
    return _named(prop, name, doc)


def number_property(name: str, selector: Selector, doc: str, missing: Any = NUMBER_NOT_FOUND, normalized: bool = True):
    def prop(crs: CellBlock, *, options: Optional[ProjOptions] = None) -> Any:
        return read_number(crs, selector, options, normalized, missing=missing)
    return _named(prop, name, doc)


def flag_property(name: str, selector: Selector, doc: str):
    def prop(crs: CellBlock, *, options: Optional[ProjOptions] = None) -> Any:
        return read_flag(crs, selector, options)
    return _named(prop, name, doc)


def indexed_property(name: str, items: Selector, item_value: Callable[[Any], Any], doc: str, normalized: bool = True):
    def prop(crs: CellBlock, index: Cell = None, *, options: Optional[ProjOptions] = None) -> Any:
        return read_indexed(crs, index, items, item_value, options, normalized)
    return _named(prop, name, doc)


def _axis_text(attr: str) -> Callable[[Any], str]:
    return lambda axis: _text(getattr(axis, attr, None))


def _crs_axes(crs: CRS) -> List[Any]:
    return list(crs.axis_info or [])


def _cs_axes(crs: CRS) -> List[Any]:
    return list(_path(crs, "coordinate_system", "axis_list") or [])


def _count(items: Selector) -> Selector:
    def count(crs: CRS) -> Optional[int]:
        seq = items(crs)
        return len(seq) if seq else None
    return count


# -----------------------------
# CRS
# -----------------------------

name = text_property("name", lambda c: c.name, "Name of the CRS.")
scope = text_property("scope", _scope, "Scope (intended use) of the CRS.")
crs_type = text_property("crs_type", lambda c: c.type_name, "Kind of CRS, e.g. 'Projected CRS'.", normalized=False)
is_deprecated = flag_property("is_deprecated", lambda c: c.is_deprecated, "TRUE when the registry marks the CRS deprecated.")

# -----------------------------
# Axes of the CRS (all components of a compound CRS)
# -----------------------------

axis_count = number_property("axis_count", _count(_crs_axes), "Number of CRS axes, -1 if none.", normalized=False)
axis_abbreviation = indexed_property("axis_abbreviation", _crs_axes, _axis_text("abbrev"), "Short name of axis N.")
axis_direction = indexed_property("axis_direction", _crs_axes, _axis_text("direction"), "Direction of axis N.")
axis_name = indexed_property("axis_name", _crs_axes, _axis_text("name"), "Name of axis N.")
axis_unit_auth_name = indexed_property("axis_unit_auth_name", _crs_axes, _axis_text("unit_auth_code"), "Authority of the unit of axis N.")
axis_unit_code = indexed_property("axis_unit_code", _crs_axes, _axis_text("unit_code"), "Code of the unit of axis N.")
axis_unit_name = indexed_property("axis_unit_name", _crs_axes, _axis_text("unit_name"), "Unit name of axis N.")
axis_unit_conversion_factor = indexed_property(
    "axis_unit_conversion_factor", _crs_axes, lambda a: a.unit_conversion_factor,
    "Factor converting axis N's unit to SI.",
)

# -----------------------------
# Coordinate system object
# -----------------------------

coordinate_system_axis_count = number_property(
    "coordinate_system_axis_count", _count(_cs_axes), "Number of coordinate-system axes, -1 if none.", normalized=False
)
coordinate_system_axis_abbreviation = indexed_property(
    "coordinate_system_axis_abbreviation", _cs_axes, _axis_text("abbrev"), "Short name of coordinate-system axis N."
)
coordinate_system_axis_direction = indexed_property(
    "coordinate_system_axis_direction", _cs_axes, _axis_text("direction"), "Direction of coordinate-system axis N."
)
coordinate_system_axis_name = indexed_property(
    "coordinate_system_axis_name", _cs_axes, _axis_text("name"), "Name of coordinate-system axis N."
)
coordinate_system_axis_unit_auth_name = indexed_property(
    "coordinate_system_axis_unit_auth_name", _cs_axes, _axis_text("unit_auth_code"), "Unit authority of coordinate-system axis N."
)
coordinate_system_axis_unit_code = indexed_property(
    "coordinate_system_axis_unit_code", _cs_axes, _axis_text("unit_code"), "Unit code of coordinate-system axis N."
)
coordinate_system_axis_unit_name = indexed_property(
    "coordinate_system_axis_unit_name", _cs_axes, _axis_text("unit_name"), "Unit name of coordinate-system axis N."
)
coordinate_system_axis_unit_conversion_factor = indexed_property(
    "coordinate_system_axis_unit_conversion_factor", _cs_axes, lambda a: a.unit_conversion_factor,
    "Factor converting coordinate-system axis N's unit to SI.",
)
coordinate_system_type = text_property(
    "coordinate_system_type",
    lambda c: (c.coordinate_system.to_json_dict().get("subtype") if c.coordinate_system is not None else None),
    "Coordinate system type, e.g. 'Cartesian' or 'ellipsoidal'.",
)
coordinate_system_name = text_property(
    "coordinate_system_name", lambda c: _path(c, "coordinate_system", "name"), "Name of the coordinate system."
)
coordinate_system_kind = text_property(
    "coordinate_system_kind", lambda c: _json_type(c.coordinate_system), "Object type of the coordinate system."
)

# -----------------------------
# Datum, ellipsoid, prime meridian
# -----------------------------

datum_name = text_property("datum_name", lambda c: _path(c, "datum", "name"), "Name of the datum (or datum ensemble).")
datum_type = text_property("datum_type", lambda c: _json_type(c.datum), "Datum object type, e.g. 'DatumEnsemble'.")

ellipsoid_name = text_property("ellipsoid_name", lambda c: _path(c, "ellipsoid", "name"), "Name of the ellipsoid.")
ellipsoid_type = text_property("ellipsoid_type", lambda c: _json_type(c.ellipsoid), "Ellipsoid object type.")
ellipsoid_semi_major_metre = number_property(
    "ellipsoid_semi_major_metre", lambda c: _path(c, "ellipsoid", "semi_major_metre"), "Semi-major axis [m], -1 if none."
)
ellipsoid_semi_minor_metre = number_property(
    "ellipsoid_semi_minor_metre", lambda c: _path(c, "ellipsoid", "semi_minor_metre"), "Semi-minor axis [m], -1 if none."
)
ellipsoid_inverse_flattening = number_property(
    "ellipsoid_inverse_flattening", lambda c: _path(c, "ellipsoid", "inverse_flattening"), "Inverse flattening, -1 if none."
)
ellipsoid_is_semi_minor_computed = flag_property(
    "ellipsoid_is_semi_minor_computed", lambda c: _path(c, "ellipsoid", "is_semi_minor_computed"),
    "TRUE when the semi-minor axis was derived rather than defined.",
)

prime_meridian_name = text_property(
    "prime_meridian_name", lambda c: _path(c, "prime_meridian", "name"), "Name of the prime meridian."
)
prime_meridian_longitude = number_property(
    "prime_meridian_longitude", lambda c: _path(c, "prime_meridian", "longitude"), "Prime meridian longitude, -1 if none."
)
prime_meridian_unit_conversion_factor = number_property(
    "prime_meridian_unit_conversion_factor", lambda c: _path(c, "prime_meridian", "unit_conversion_factor"),
    "Unit conversion factor of the prime meridian, -1 if none.",
)
prime_meridian_unit_name = text_property(
    "prime_meridian_unit_name", lambda c: _path(c, "prime_meridian", "unit_name"), "Unit of the prime meridian longitude."
)

# -----------------------------
# Identifiers and geodetic CRS
# -----------------------------

# Read from the normalized CRS: a reordered one such as 4326 carries no identifiers
identifiers_count = number_property(
    "identifiers_count", lambda c: len(_identifiers(c)), "Number of identifiers, 0 if none.", missing=0
)
identifiers_authority = indexed_property(
    "identifiers_authority", _identifiers, lambda i: _text(i.get("authority")), "Authority of identifier N."
)
identifiers_code = indexed_property(
    "identifiers_code", _identifiers, lambda i: _text(i.get("code")), "Code of identifier N."
)

geodetic_crs_name = text_property("geodetic_crs_name", lambda c: _path(c, "geodetic_crs", "name"), "Name of the geodetic CRS.")
geodetic_crs_type = text_property(
    "geodetic_crs_type", lambda c: _path(c, "geodetic_crs", "type_name"), "Kind of the geodetic CRS."
)

# -----------------------------
# Usage area
# -----------------------------

def _area(crs: CRS) -> Any:
    return crs.area_of_use


def _to_crs(crs: CRS) -> Optional[Transformer]:
    geo = crs.geodetic_crs
    if geo is None:
        return None
    return Transformer.from_crs(geo, crs, always_xy=True)


def _center_lonlat(area: Any) -> tuple[float, float]:
    west, east = area.west, area.east
    if west > east:  # crosses the antimeridian
        east += 360.0
    lon = (west + east) / 2.0
    if lon > 180.0:
        lon -= 360.0
    return lon, (area.south + area.north) / 2.0


def _projected_bounds(crs: CRS) -> Optional[tuple]:
    area = _area(crs)
    if area is None:
        return None
    t = _to_crs(crs)
    if t is None:
        return None
    return t.transform_bounds(area.west, area.south, area.east, area.north)


def _projected_center(crs: CRS) -> Optional[tuple]:
    area = _area(crs)
    if area is None:
        return None
    t = _to_crs(crs)
    if t is None:
        return None
    x, y = t.transform(*_center_lonlat(area))
    return float(x), float(y)


def _bound(i: int) -> Selector:
    def pick(crs: CRS) -> Any:
        b = _projected_bounds(crs)
        return b[i] if b else None
    return pick


def _center(i: int) -> Selector:
    def pick(crs: CRS) -> Any:
        c = _projected_center(crs)
        return c[i] if c else None
    return pick


usage_area_name = text_property("usage_area_name", lambda c: _path(c, "area_of_use", "name"), "Name of the usage area.")
usage_area_west_longitude = number_property(
    "usage_area_west_longitude", lambda c: _path(c, "area_of_use", "west"), "West bound [deg].", missing=NOT_FOUND
)
usage_area_east_longitude = number_property(
    "usage_area_east_longitude", lambda c: _path(c, "area_of_use", "east"), "East bound [deg].", missing=NOT_FOUND
)
usage_area_south_latitude = number_property(
    "usage_area_south_latitude", lambda c: _path(c, "area_of_use", "south"), "South bound [deg].", missing=NOT_FOUND
)
usage_area_north_latitude = number_property(
    "usage_area_north_latitude", lambda c: _path(c, "area_of_use", "north"), "North bound [deg].", missing=NOT_FOUND
)
usage_area_min_x = number_property("usage_area_min_x", _bound(0), "Minimum X of the usage area in CRS units.", missing=NOT_FOUND)
usage_area_min_y = number_property("usage_area_min_y", _bound(1), "Minimum Y of the usage area in CRS units.", missing=NOT_FOUND)
usage_area_max_x = number_property("usage_area_max_x", _bound(2), "Maximum X of the usage area in CRS units.", missing=NOT_FOUND)
usage_area_max_y = number_property("usage_area_max_y", _bound(3), "Maximum Y of the usage area in CRS units.", missing=NOT_FOUND)
_NO_AREA = CellError.value("CRS has no usage area")

usage_area_center_x = number_property("usage_area_center_x", _center(0), "X of the usage area center.", missing=_NO_AREA)
usage_area_center_y = number_property("usage_area_center_y", _center(1), "Y of the usage area center.", missing=_NO_AREA)


def _center_has_values(crs: CRS) -> bool:
    c = _projected_center(crs)
    return c is not None and all(math.isfinite(v) for v in c)


usage_area_center_has_values = flag_property(
    "usage_area_center_has_values", _center_has_values, "TRUE when the usage area center has finite values."
)


@cell_function
def usage_area_center(crs: CellBlock, *, options: Optional[ProjOptions] = None) -> Any:
    """Center of the usage area as one row of two cells."""
    c = read_value(crs, _projected_center, options)
    if c is None:
        return _NO_AREA
    return [[c[0], c[1]]]


# -----------------------------
# Text renderings
# -----------------------------

def _proj4(crs: CRS) -> Optional[str]:
    with warnings.catch_warnings():
        # pyproj warns that PROJ strings lose information; that is the point here
        warnings.simplefilter("ignore", UserWarning)
        return crs.to_proj4()


def _rendering(name_: str, selector: Selector, doc: str, normalized: bool = True):
    def prop(crs: CellBlock, *, options: Optional[ProjOptions] = None) -> Any:
        s = read_value(crs, selector, options, normalized)
        if s is None or not str(s).strip():
            return CellError.value("empty rendering")
        return s
    return _named(prop, name_, doc)


as_json_string = _rendering("as_json_string", lambda c: c.to_json(), "CRS as PROJJSON.")
as_proj_string = _rendering("as_proj_string", _proj4, "CRS as a PROJ string.", normalized=False)
as_wkt_string = _rendering("as_wkt_string", lambda c: c.to_wkt(), "CRS as WKT2.")


__all__ = [
    "read_value",
    "read_text",
    "read_number",
    "read_flag",
    "read_indexed",
    "name",
    "scope",
    "crs_type",
    "is_deprecated",
    "axis_count",
    "axis_abbreviation",
    "axis_direction",
    "axis_name",
    "axis_unit_auth_name",
    "axis_unit_code",
    "axis_unit_name",
    "axis_unit_conversion_factor",
    "coordinate_system_axis_count",
    "coordinate_system_axis_abbreviation",
    "coordinate_system_axis_direction",
    "coordinate_system_axis_name",
    "coordinate_system_axis_unit_auth_name",
    "coordinate_system_axis_unit_code",
    "coordinate_system_axis_unit_name",
    "coordinate_system_axis_unit_conversion_factor",
    "coordinate_system_type",
    "coordinate_system_name",
    "coordinate_system_kind",
    "datum_name",
    "datum_type",
    "ellipsoid_name",
    "ellipsoid_type",
    "ellipsoid_semi_major_metre",
    "ellipsoid_semi_minor_metre",
    "ellipsoid_inverse_flattening",
    "ellipsoid_is_semi_minor_computed",
    "prime_meridian_name",
    "prime_meridian_longitude",
    "prime_meridian_unit_conversion_factor",
    "prime_meridian_unit_name",
    "identifiers_count",
    "identifiers_authority",
    "identifiers_code",
    "geodetic_crs_name",
    "geodetic_crs_type",
    "usage_area_name",
    "usage_area_west_longitude",
    "usage_area_east_longitude",
    "usage_area_south_latitude",
    "usage_area_north_latitude",
    "usage_area_min_x",
    "usage_area_min_y",
    "usage_area_max_x",
    "usage_area_max_y",
    "usage_area_center_x",
    "usage_area_center_y",
    "usage_area_center_has_values",
    "usage_area_center",
    "as_json_string",
    "as_proj_string",
    "as_wkt_string",
]
