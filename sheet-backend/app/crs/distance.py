from __future__ import annotations

import logging
import math
from typing import Any, Optional

from pyproj import Transformer

from app.options import ProjOptions

from .boundary import cell_function
from .cells import CellBlock
from .errors import CellError, ResolutionFailed
from .point import Point
from .resolver import crs_scope

logger = logging.getLogger(__name__)


def distance(crs: CellBlock, p1: CellBlock, p2: CellBlock, with_elevation: bool, options: Optional[ProjOptions] = None) -> Any:
    """Ellipsoidal distance in metres between two points given in ``crs``.

    Both points are read in axis-normalized order (easting/longitude first).
    With ``with_elevation`` the height difference is folded in; a missing z
    counts as 0. Non-finite results come back as ``#N/A``.
    """
    a = Point.from_row(p1, "point1")
    b = Point.from_row(p2, "point2")

    with crs_scope(crs, options) as c:
        geo = c.geodetic_crs
        if geo is None:
            raise ResolutionFailed("CRS", "no geodetic CRS to measure on")
        to_geo = Transformer.from_crs(c, geo, always_xy=True)
        lon1, lat1 = to_geo.transform(a.x, a.y)
        lon2, lat2 = to_geo.transform(b.x, b.y)
        _, _, d = c.get_geod().inv(lon1, lat1, lon2, lat2)

    if with_elevation:
        d = math.hypot(d, (b.z or 0.0) - (a.z or 0.0))
    if not math.isfinite(d):
        logger.debug("distance is not finite for %s -> %s", a, b)
        return CellError.not_applicable("distance is not a finite number")
    return float(d)


@cell_function
def geo_distance(crs: CellBlock, point1: CellBlock, point2: CellBlock, *, options: Optional[ProjOptions] = None) -> Any:
    return distance(crs, point1, point2, False, options)


@cell_function
def geo_distance_z(crs: CellBlock, point1: CellBlock, point2: CellBlock, *, options: Optional[ProjOptions] = None) -> Any:
    return distance(crs, point1, point2, True, options)


__all__ = ["distance", "geo_distance", "geo_distance_z"]
