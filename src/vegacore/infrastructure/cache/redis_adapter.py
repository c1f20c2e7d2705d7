"""Redis-Adapter - Async Redis via redis.asyncio."""

from __future__ import annotations

import asyncio
from typing import Any

import structlog
from redis.asyncio import Redis
from redis.exceptions import RedisError

log = structlog.get_logger(__name__)


class RedisAdapter:
    """Async Redis cache, for sharing resolved base URLs between processes.

    - Uses `redis.asyncio.Redis` (async-native, no to_thread needed).
    - Values are stored as text; callers (KeyValueStore) serialize to JSON.
    - ``ttl=0`` stores the key without expiry.
    - Keys are prefixed with *namespace* so one Redis DB can be shared.

    Args:
        url: Redis URL (e.g. `redis://localhost:6379/0`).
        ttl_seconds: Default TTL.
        max_concurrent: Max parallel Redis ops (default: 50, tunable).
    """

    def __init__(
        self,
        url: str = "redis://localhost:6379/0",
        ttl_seconds: int = 3600,
        max_concurrent: int = 50,
        namespace: str = "vegacore:",
    ) -> None:
        self.url = url
        self.default_ttl = ttl_seconds
        self.namespace = namespace
        self._client: Redis | None = None
        self._semaphore = asyncio.Semaphore(max_concurrent)

    def _key(self, key: str) -> str:
        return f"{self.namespace}{key}"

    # --- Context Manager ---
    async def __aenter__(self) -> RedisAdapter:
        """Initialize Redis client and check connectivity with PING."""
        if self._client is None:
            self._client = Redis.from_url(self.url, decode_responses=True)
            try:
                await self._client.ping()
                log.info("redis_connected", url=self.url)
            except RedisError as e:
                log.error("redis_connection_failed", url=self.url, error=str(e))
                raise
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            log.info("redis_closed")

    # --- CachePort implementation ---
    async def get(self, key: str) -> Any | None:
        if self._client is None:
            raise RuntimeError("Redis not initialized. Use 'async with cache:'")

        async with self._semaphore:
            try:
                value = await self._client.get(self._key(key))
            except RedisError as e:
                log.error("redis_get_error", key=key, error=str(e))
                return None
        log.debug("cache_get", key=key, hit=value is not None)
        return value

    async def set(self, key: str, value: Any, *, ttl: int | None = None) -> None:
        if self._client is None:
            raise RuntimeError("Redis not initialized.")

        expire_time = ttl if ttl is not None else self.default_ttl
        async with self._semaphore:
            try:
                await self._client.set(self._key(key), value, ex=expire_time or None)
                log.debug("cache_set", key=key, ttl=expire_time)
            except RedisError as e:
                log.error("redis_set_error", key=key, error=str(e))

    async def delete(self, key: str) -> bool:
        if self._client is None:
            return False

        async with self._semaphore:
            try:
                deleted = await self._client.delete(self._key(key))
            except RedisError as e:
                log.error("redis_delete_error", key=key, error=str(e))
                return False
        return deleted > 0

    async def exists(self, key: str) -> bool:
        if self._client is None:
            return False

        async with self._semaphore:
            try:
                return await self._client.exists(self._key(key)) > 0
            except RedisError as e:
                log.error("redis_exists_error", key=key, error=str(e))
                return False

    async def clear(self) -> None:
        """Delete every key under our namespace (never FLUSHDB a shared DB)."""
        if self._client is None:
            return

        async with self._semaphore:
            try:
                keys = [k async for k in self._client.scan_iter(f"{self.namespace}*")]
                if keys:
                    await self._client.delete(*keys)
                log.warning("redis_namespace_cleared", namespace=self.namespace)
            except RedisError as e:
                log.error("redis_clear_error", error=str(e))
