"""Execution context around the PROJ engine (pyproj).

One ``ProjContext`` is created per cell evaluation and closed when the
evaluation ends, success or failure:

    with create_context() as ctx:
        crs = ctx.create_from_epsg(4326)
        ...

The context owns every CRS it hands out and drops them on close, wires the
network-access flag into the engine, and (only when the configured log level
asks for it) bridges PROJ diagnostics into our logging.
"""
from __future__ import annotations

import logging
import threading
from typing import Any, Dict, List, Optional

from pyproj import CRS
from pyproj import network as proj_network

from app.options import ProjOptions, get_options

from .boundary import process_engine_record

logger = logging.getLogger(__name__)

# pyproj reports every PROJ message on this logger at DEBUG level
PYPROJ_LOGGER = "pyproj"
PROJ_ERROR_PREFIX = "PROJ_ERROR"

_bridge_lock = threading.Lock()
_bridge_users = 0
_saved_level: Optional[int] = None
_saved_propagate = True


class _ProjLogBridge(logging.Handler):
    """Forwards PROJ records emitted on the owning thread to the boundary.

    Level 1 forwards only engine errors; levels 2 and 3 forward every PROJ
    message. PROJ's own verbosity is left untouched either way.
    """

    def __init__(self, log_level: int):
        super().__init__(level=logging.DEBUG)
        self.log_level = log_level
        self.thread_id = threading.get_ident()

    def emit(self, record: logging.LogRecord) -> None:
        if record.thread != self.thread_id:
            return
        if self.log_level < 2 and not record.getMessage().startswith(PROJ_ERROR_PREFIX):
            return
        process_engine_record(record)


def _attach(bridge: _ProjLogBridge) -> None:
    global _bridge_users, _saved_level, _saved_propagate
    plog = logging.getLogger(PYPROJ_LOGGER)
    with _bridge_lock:
        if _bridge_users == 0:
            _saved_level = plog.level
            _saved_propagate = plog.propagate
            plog.setLevel(logging.DEBUG)
            # records reach the root handlers once, re-emitted by the boundary
            plog.propagate = False
        _bridge_users += 1
        plog.addHandler(bridge)


def _detach(bridge: _ProjLogBridge) -> None:
    global _bridge_users, _saved_level
    plog = logging.getLogger(PYPROJ_LOGGER)
    with _bridge_lock:
        plog.removeHandler(bridge)
        _bridge_users -= 1
        if _bridge_users == 0:
            if _saved_level is not None:
                plog.setLevel(_saved_level)
            _saved_level = None
            plog.propagate = _saved_propagate


def _swap_if_north_east(d: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """PROJJSON of ``d`` with east/north axis order, or None when already so."""
    kind = d.get("type")
    if kind == "CompoundCRS":
        comps = d.get("components") or []
        head = _swap_if_north_east(comps[0]) if comps else None
        if head is None:
            return None
        out = dict(d, components=[head, *comps[1:]])
    elif kind == "BoundCRS":
        src = _swap_if_north_east(d.get("source_crs") or {})
        if src is None:
            return None
        out = dict(d, source_crs=src)
    else:
        cs = d.get("coordinate_system") or {}
        axes = cs.get("axis") or []
        if len(axes) < 2:
            return None
        if axes[0].get("direction") not in ("north", "south") or axes[1].get("direction") not in ("east", "west"):
            return None
        out = dict(d, coordinate_system=dict(cs, axis=[axes[1], axes[0], *axes[2:]]))
    # A reordered CRS is no longer the registry object it was created from
    ident = out.pop("id", None)
    out.pop("ids", None)
    if ident:
        out["remarks"] = f"Axis order reversed compared to {ident.get('authority')}:{ident.get('code')}"
    return out


class ProjContext:
    def __init__(self, options: ProjOptions):
        self.options = options
        self._handles: List[CRS] = []
        self._bridge: Optional[_ProjLogBridge] = None
        self._closed = False
        proj_network.set_network_enabled(active=bool(options.allow_network))
        # Only pay for the callback when someone will read it
        if options.log_level > 0:
            self._bridge = _ProjLogBridge(options.log_level)
            _attach(self._bridge)

    def __enter__(self) -> "ProjContext":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def live_handles(self) -> int:
        return len(self._handles)

    @property
    def has_log_callback(self) -> bool:
        return self._bridge is not None

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        released = len(self._handles)
        self._handles.clear()
        logger.debug("context closed, released %d CRS handle(s)", released)
        if self._bridge is not None:
            _detach(self._bridge)
            self._bridge = None

    def _adopt(self, crs: CRS) -> CRS:
        if crs is not None:
            self._handles.append(crs)
        return crs

    def _check_open(self) -> None:
        if self._closed:
            raise RuntimeError("ProjContext is closed")

    def create_from_epsg(self, code: int) -> CRS:
        self._check_open()
        return self._adopt(CRS.from_epsg(code))

    def create_from_wkt(self, text: str) -> CRS:
        self._check_open()
        return self._adopt(CRS.from_wkt(text))

    def create_from_descriptor(self, text: str) -> CRS:
        """PROJ string, PROJJSON, object name or ``AUTH:CODE``."""
        self._check_open()
        return self._adopt(CRS.from_user_input(text))

    def create_from_authority_code(self, authority: str, code: int) -> CRS:
        self._check_open()
        return self._adopt(CRS.from_authority(authority, code))

    def with_axis_normalized(self, crs: CRS) -> CRS:
        """Same CRS with easting/longitude first; returned as-is when it already is."""
        self._check_open()
        swapped = _swap_if_north_east(crs.to_json_dict())
        if swapped is None:
            return crs
        return self._adopt(CRS.from_json_dict(swapped))


def create_context(options: Optional[ProjOptions] = None) -> ProjContext:
    return ProjContext(options if options is not None else get_options())


__all__ = ["ProjContext", "create_context"]
