"""String/JSON key-value store backed by CachePort (diskcache/redis/memory)."""

from __future__ import annotations

import json
from typing import Any

import structlog

from vegacore.domain.ports.cache import CachePort

log = structlog.get_logger(__name__)

# Entries written through this store never expire on the backend side.
_NO_EXPIRY = 0


class CacheKeyValueStore:
    """Stores strings as-is and objects as JSON via CachePort."""

    def __init__(self, cache: CachePort) -> None:
        self.cache = cache

    async def get_string(self, key: str) -> str | None:
        value = await self.cache.get(key)
        if value is None or isinstance(value, str):
            return value
        log.warning("kv_unexpected_type", key=key, type=type(value).__name__)
        return None

    async def set_string(self, key: str, value: str) -> None:
        await self.cache.set(key, value, ttl=_NO_EXPIRY)

    async def get_object(self, key: str) -> Any | None:
        raw = await self.cache.get(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except (json.JSONDecodeError, TypeError) as e:
            log.error("kv_deserialize_error", key=key, error=str(e))
            return None

    async def set_object(self, key: str, value: Any) -> None:
        await self.cache.set(key, json.dumps(value), ttl=_NO_EXPIRY)

    async def delete(self, key: str) -> bool:
        return await self.cache.delete(key)
