"""In-process cache adapter with TTL and a max-size bound."""

from __future__ import annotations

import time
from typing import Any

import structlog

log = structlog.get_logger(__name__)


class _Entry:
    __slots__ = ("value", "expires_at")

    def __init__(self, value: Any, ttl: int) -> None:
        self.value = value
        self.expires_at = time.monotonic() + ttl if ttl > 0 else None

    @property
    def is_expired(self) -> bool:
        return self.expires_at is not None and time.monotonic() >= self.expires_at


class MemoryCacheAdapter:
    """CachePort implementation backed by a dict.

    Used by one-shot CLI runs and tests. When more than *max_entries*
    keys are stored, the oldest (by insertion order) are evicted.
    """

    def __init__(self, ttl_seconds: int = 3600, max_entries: int = 10_000) -> None:
        self.default_ttl = ttl_seconds
        self._max_entries = max_entries
        self._data: dict[str, _Entry] = {}

    async def __aenter__(self) -> MemoryCacheAdapter:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        self._data.clear()

    async def get(self, key: str) -> Any | None:
        entry = self._data.get(key)
        if entry is None:
            return None
        if entry.is_expired:
            del self._data[key]
            return None
        return entry.value

    async def set(self, key: str, value: Any, *, ttl: int | None = None) -> None:
        self._data.pop(key, None)
        self._data[key] = _Entry(value, self.default_ttl if ttl is None else ttl)
        if len(self._data) > self._max_entries:
            excess = len(self._data) - self._max_entries
            for k in list(self._data.keys())[:excess]:
                del self._data[k]

    async def delete(self, key: str) -> bool:
        return self._data.pop(key, None) is not None

    async def exists(self, key: str) -> bool:
        return await self.get(key) is not None

    async def clear(self) -> None:
        self._data.clear()
        log.debug("memory_cache_cleared")
