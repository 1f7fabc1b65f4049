"""HTTP entry points for the cell functions.

``POST /crs/{function}`` evaluates one cell. Evaluated cells always come
back with status 200; a failed cell is a ``CellResult`` carrying the error
code. Only requests that cannot be dispatched (unknown function, missing
argument) are HTTP errors.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List

import anyio
from fastapi import APIRouter, HTTPException

from app.crs.errors import CellError
from app.crs.function_catalog import CatalogEntry, list_functions, lookup
from app.schemas import CellResult, CrsCallRequest, FunctionInfo

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/crs")


def to_cell_result(value: Any) -> CellResult:
    if isinstance(value, CellError):
        return CellResult(value=None, error=value.code, detail=value.detail)
    return CellResult(value=value)


def _arguments(entry: CatalogEntry, req: CrsCallRequest) -> List[Any]:
    missing = entry.missing(req)
    if missing:
        raise HTTPException(status_code=422, detail=f"'{entry.name}' needs argument '{missing[0]}'")
    return [getattr(req, p) for p in entry.params]


def evaluate(name: str, req: CrsCallRequest) -> CellResult:
    try:
        entry = lookup(name)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"unknown function '{name}'")
    result = entry.fn(*_arguments(entry, req))
    if isinstance(result, CellError):
        logger.debug("cell error", extra={"function": name, "cell_error": result.code})
    return to_cell_result(result)


@router.get("/functions", response_model=List[FunctionInfo])
async def functions() -> List[Dict[str, Any]]:
    return list_functions()


@router.post("/{function}", response_model=CellResult)
async def call_function(function: str, req: CrsCallRequest) -> CellResult:
    """Evaluate one cell function; pyproj work runs off the event loop."""
    return await anyio.to_thread.run_sync(evaluate, function, req)


__all__ = ["router", "evaluate", "to_cell_result"]
