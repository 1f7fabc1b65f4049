"""Persisted key-value settings with an in-memory fallback.

Usage:
    from app.settings_store import build_store_from_env
    store = await build_store_from_env()
    await store.set("LogLevel", "1")
    level = await store.get("LogLevel")

Values are kept as strings in one Redis hash. When Redis is not configured
or not reachable at startup the process keeps its settings in memory, so the
service still runs in tests, CI and local runs without the container.
"""
from __future__ import annotations

import asyncio
import logging
import os
from typing import Any, Dict, List, Optional, Tuple

import redis.asyncio as redis

logger = logging.getLogger(__name__)


class MemorySettingsStore:
    persistent = False

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        self._data[key] = str(value)

    async def delete(self, key: str) -> bool:
        return self._data.pop(key, None) is not None

    async def items(self) -> List[Tuple[str, str]]:
        return list(self._data.items())

    async def clear(self) -> int:
        n = len(self._data)
        self._data.clear()
        return n

    async def close(self) -> None:  # pragma: no cover - trivial
        return None


class RedisSettingsStore:
    persistent = True

    def __init__(self, client: Any, prefix: str = "sheet"):
        self.client = client
        self.prefix = prefix.rstrip(":")

    @property
    def hash_key(self) -> str:
        return f"{self.prefix}:settings" if self.prefix else "settings"

    async def get(self, key: str) -> Optional[str]:
        return await self.client.hget(self.hash_key, key)

    async def set(self, key: str, value: str) -> None:
        await self.client.hset(self.hash_key, key, str(value))

    async def delete(self, key: str) -> bool:
        return bool(await self.client.hdel(self.hash_key, key))

    async def items(self) -> List[Tuple[str, str]]:
        data = await self.client.hgetall(self.hash_key)
        return sorted(data.items())

    async def clear(self) -> int:
        n = await self.client.hlen(self.hash_key)
        if n:
            await self.client.delete(self.hash_key)
        return int(n)

    async def close(self) -> None:  # pragma: no cover - rarely used
        try:
            await self.client.aclose()
        except redis.RedisError as e:
            logger.debug("Redis close failed: %s", e)


SettingsStore = MemorySettingsStore | RedisSettingsStore


async def build_store_from_env() -> SettingsStore:
    """Instantiate a RedisSettingsStore if REDIS_URL is set and reachable; else memory.

    Env vars:
      REDIS_URL                e.g. redis://redis:6379/0
      SETTINGS_DISABLE_REDIS=1 force the in-memory store
      SETTINGS_PREFIX          (optional) namespace prefix (default 'sheet')
    """
    if os.getenv("SETTINGS_DISABLE_REDIS") == "1":
        return MemorySettingsStore()
    url = os.getenv("REDIS_URL")
    if not url:
        return MemorySettingsStore()
    try:
        client = redis.from_url(url, encoding="utf-8", decode_responses=True)
        # Ping with short timeout so startup isn't delayed badly
        await asyncio.wait_for(client.ping(), timeout=0.75)
        return RedisSettingsStore(client, prefix=os.getenv("SETTINGS_PREFIX", "sheet"))
    except (redis.RedisError, OSError, asyncio.TimeoutError) as e:
        logger.info("Redis unavailable (%s); keeping settings in memory", e)
        return MemorySettingsStore()


__all__ = ["MemorySettingsStore", "RedisSettingsStore", "SettingsStore", "build_store_from_env"]
