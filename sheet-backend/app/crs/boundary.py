"""Error and log translation at the edge between the core and the host.

Every public cell function is wrapped with ``cell_function`` so a failure
stays local to one cell: known CRS errors become ``#VALUE!`` with their
message, anything unexpected is logged with its traceback and becomes
``#VALUE!`` too. Engine diagnostics forwarded by a context land in
``process_engine_record``.
"""
from __future__ import annotations

import functools
import logging
from typing import Any, Callable

from .errors import CellError, CrsError

logger = logging.getLogger(__name__)
engine_logger = logging.getLogger("app.crs.engine.proj")


def cell_function(fn: Callable[..., Any]) -> Callable[..., Any]:
    @functools.wraps(fn)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return fn(*args, **kwargs)
        except CrsError as e:
            logger.info("%s -> #VALUE!: %s", fn.__name__, e, extra={"function": fn.__name__, "cell_error": CellError.VALUE})
            return CellError.value(str(e))
        except Exception as e:  # broad catch: the host must never see a raised error
            logger.exception("%s crashed", fn.__name__, extra={"function": fn.__name__, "cell_error": CellError.VALUE})
            return CellError.value(f"{type(e).__name__}: {e}")

    wrapper.cell_function = True  # type: ignore[attr-defined]
    return wrapper


def process_engine_record(record: logging.LogRecord) -> None:
    """Re-emit a PROJ diagnostic under our own logger.

    pyproj reports everything at DEBUG and prefixes engine errors with
    ``PROJ_ERROR``; those are raised to WARNING here.
    """
    msg = record.getMessage()
    level = logging.WARNING if msg.startswith("PROJ_ERROR") else logging.DEBUG
    engine_logger.log(level, "%s", msg)


__all__ = ["cell_function", "process_engine_record"]
