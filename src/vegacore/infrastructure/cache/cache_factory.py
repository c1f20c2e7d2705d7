"""Cache factory - builds the adapter selected in the config."""

from __future__ import annotations

from typing import Literal

import structlog

from vegacore.domain.ports.cache import CachePort
from vegacore.infrastructure.cache.diskcache_adapter import DiskcacheAdapter
from vegacore.infrastructure.cache.memory_adapter import MemoryCacheAdapter
from vegacore.infrastructure.cache.redis_adapter import RedisAdapter

log = structlog.get_logger(__name__)

CacheBackend = Literal["diskcache", "redis", "memory"]


def create_cache(
    backend: CacheBackend = "diskcache",
    *,
    directory: str = "./.cache/vegacore",
    redis_url: str = "redis://localhost:6379/0",
    ttl_seconds: int = 3600,
    max_concurrent: int = 10,
) -> CachePort:
    """Create a cache adapter for *backend*.

    Raises:
        ValueError: If `backend` is unknown.
    """
    log.info("cache_factory_create", backend=backend, ttl=ttl_seconds)
    if backend == "diskcache":
        return DiskcacheAdapter(
            directory=directory,
            ttl_seconds=ttl_seconds,
            max_concurrent=max_concurrent,
        )
    elif backend == "redis":
        return RedisAdapter(url=redis_url, ttl_seconds=ttl_seconds)
    elif backend == "memory":
        return MemoryCacheAdapter(ttl_seconds=ttl_seconds)
    else:
        raise ValueError(
            f"Unknown cache backend: {backend!r}. "
            "Must be 'diskcache', 'redis' or 'memory'."
        )
