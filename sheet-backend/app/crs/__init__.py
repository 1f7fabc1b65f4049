"""CRS resolution and query core for spreadsheet cells.

Modules:
 - kinds / resolver: classify a 1x1 or 1x2 cell block and build the CRS
 - engine: scoped pyproj context (network flag, PROJ log bridge, handles)
 - query: read-only CRS properties with sentinel policies
 - distance / equivalence: two-point distance and CRS comparison
 - boundary: error and log translation at the host edge
 - function_catalog: host-facing names of all cell functions
"""

__all__ = [
    "boundary",
    "cells",
    "distance",
    "engine",
    "equivalence",
    "errors",
    "function_catalog",
    "kinds",
    "point",
    "query",
    "resolver",
]
