"""Process-wide engine options (PROJ log level, network access).

Env vars:
  CRS_LOG_LEVEL       0 = none, 1 = PROJ errors, 2 and 3 = every PROJ message (default 0);
                      levels above 1 only widen what is forwarded, not PROJ verbosity
  CRS_ALLOW_NETWORK   1/true/yes to allow remote grid and registry lookups

The settings store may override both at startup (see ``apply_store_options``).
Nothing under ``app.crs`` writes these; contexts only read them when created.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any, Optional

logger = logging.getLogger(__name__)

LOG_LEVEL_KEY = "LogLevel"
NETWORK_KEY = "EnableNetworkConnections"

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class ProjOptions:
    log_level: int = 0
    allow_network: bool = False


def _parse_level(raw: Optional[str], default: int) -> int:
    if raw is None:
        return default
    try:
        return max(0, min(3, int(raw)))
    except ValueError:
        logger.warning("ignoring invalid log level %r", raw)
        return default


def _parse_flag(raw: Optional[str], default: bool) -> bool:
    if raw is None:
        return default
    return raw.strip().lower() in _TRUTHY


def load_options() -> ProjOptions:
    return ProjOptions(
        log_level=_parse_level(os.getenv("CRS_LOG_LEVEL"), 0),
        allow_network=_parse_flag(os.getenv("CRS_ALLOW_NETWORK"), False),
    )


_current: ProjOptions = load_options()


def get_options() -> ProjOptions:
    return _current


def set_options(options: ProjOptions) -> None:
    global _current
    _current = options


async def apply_store_options(store: Any) -> ProjOptions:
    """Override the environment options with values kept in the settings store."""
    base = get_options()
    level = await store.get(LOG_LEVEL_KEY)
    network = await store.get(NETWORK_KEY)
    opts = ProjOptions(
        log_level=_parse_level(level, base.log_level),
        allow_network=_parse_flag(network, base.allow_network),
    )
    set_options(opts)
    return opts


__all__ = [
    "ProjOptions",
    "load_options",
    "get_options",
    "set_options",
    "apply_store_options",
    "LOG_LEVEL_KEY",
    "NETWORK_KEY",
]
