"""Settings functions over the key-value store, plus their HTTP routes.

Messages follow the sheet convention, e.g. ``[key:<LogLevel>, value:<1>]``,
so a cell shows what happened without a separate status column.
"""
from __future__ import annotations

import logging
import sys
from typing import Any, Optional

from fastapi import APIRouter, Query, Request

from app.crs.cells import parse_int_text
from app.crs.errors import CellError
from app.options import LOG_LEVEL_KEY, NETWORK_KEY, apply_store_options
from app.schemas import CellResult, KeyValueRequest
from app.sheet import to_cell_result

logger = logging.getLogger(__name__)

# Returned by the typed readers when the stored text does not parse
INT_NOT_PARSED = -(2**31)
FLOAT_NOT_PARSED = sys.float_info.max

NO_PAIRS = "[No key-value pairs found]"


def _kv(key: str, value: str) -> str:
    return f"[key:<{key}>, value:<{value}>]"


def _not_found(key: str) -> str:
    return f"[key:<{key}>, not found]"


async def add_or_update_key(store: Any, key: str, value: str) -> str:
    await store.set(key, value)
    logger.info("setting stored", extra={"function": "add_or_update_key"})
    return _kv(key, value)


async def clear_all_keys(store: Any) -> str:
    if await store.clear():
        return "[all key-value pairs cleared]"
    return "[no key-value pairs present]"


async def get_key_value(store: Any, key: str, default: Optional[str] = None) -> str:
    value = await store.get(key)
    if value is not None:
        return value
    if default is None:
        return _not_found(key)
    return default


async def get_int(store: Any, key: str, default: int = 0) -> int:
    n = parse_int_text(await get_key_value(store, key, str(default)))
    return INT_NOT_PARSED if n is None else n


async def get_float(store: Any, key: str, default: float = 0.0) -> float:
    try:
        return float(await get_key_value(store, key, repr(float(default))))
    except ValueError:
        return FLOAT_NOT_PARSED


async def read_all_keys(store: Any, mode: int = 3) -> Any:
    """0 = pair count, 1 = key column, 2 = value column, 3 = key/value rows."""
    if mode not in (0, 1, 2, 3):
        return CellError.value(f"mode must be 0-3, got {mode}")
    pairs = await store.items()
    if not pairs:
        return 0 if mode == 0 else NO_PAIRS
    if mode == 0:
        return len(pairs)
    if mode == 1:
        return [[k] for k, _ in pairs]
    if mode == 2:
        return [[v] for _, v in pairs]
    return [[k, v] for k, v in pairs]


async def read_key(store: Any, key: str) -> str:
    value = await store.get(key)
    return _not_found(key) if value is None else _kv(key, value)


async def remove_key(store: Any, key: str) -> str:
    if await store.delete(key):
        return f"[key:<{key}>, removed]"
    return _not_found(key)


# -----------------------------
# HTTP
# -----------------------------

router = APIRouter(prefix="/cfg")


def _store(request: Request) -> Any:
    return request.app.state.settings


@router.get("/keys", response_model=CellResult)
async def http_read_all_keys(request: Request, mode: int = Query(3)) -> CellResult:
    return to_cell_result(await read_all_keys(_store(request), mode))


@router.post("/keys", response_model=CellResult)
async def http_add_or_update_key(request: Request, body: KeyValueRequest) -> CellResult:
    store = _store(request)
    msg = await add_or_update_key(store, body.key, body.value)
    if body.key in (LOG_LEVEL_KEY, NETWORK_KEY):
        await apply_store_options(store)
    return to_cell_result(msg)


@router.delete("/keys", response_model=CellResult)
async def http_clear_all_keys(request: Request) -> CellResult:
    return to_cell_result(await clear_all_keys(_store(request)))


@router.get("/keys/{key}", response_model=CellResult)
async def http_read_key(request: Request, key: str) -> CellResult:
    return to_cell_result(await read_key(_store(request), key))


@router.get("/keys/{key}/value", response_model=CellResult)
async def http_get_key_value(request: Request, key: str, default: Optional[str] = Query(None)) -> CellResult:
    return to_cell_result(await get_key_value(_store(request), key, default))


@router.delete("/keys/{key}", response_model=CellResult)
async def http_remove_key(request: Request, key: str) -> CellResult:
    return to_cell_result(await remove_key(_store(request), key))


__all__ = [
    "INT_NOT_PARSED",
    "FLOAT_NOT_PARSED",
    "add_or_update_key",
    "clear_all_keys",
    "get_key_value",
    "get_int",
    "get_float",
    "read_all_keys",
    "read_key",
    "remove_key",
    "router",
]
