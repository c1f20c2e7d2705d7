"""Resolve a provider's current base URL despite frequent domain changes.

Lookup order:

1. Cached value younger than the TTL (no network I/O).
2. Providers with a registry rule: first line of the community directory
   whose hostname matches the rule. No match means ``""``; the provider
   module falls back to its own hard-coded default.
3. Providers without a rule: ``url`` field of the fallback JSON directory.

Any failure yields ``""``; ``get_base_url`` never raises.
"""

from __future__ import annotations

import time
from collections.abc import Callable

import httpx
import structlog

from vegacore.domain.entities.streams import BaseUrlRule, ResolvedBaseUrl
from vegacore.domain.ports.key_value_store import KeyValueStore
from vegacore.infrastructure.base_url.registry import (
    DIRECTORY_URL,
    FALLBACK_DIRECTORY_URL,
    BaseUrlRegistry,
)

log = structlog.get_logger(__name__)

# 1 hour
DEFAULT_TTL_SECONDS = 60 * 60

_URL_KEY_PREFIX = "CacheBaseUrl"
_TIME_KEY_PREFIX = "baseUrlTime"


def normalize_base_url(value: str) -> str:
    """Strip trailing slashes."""
    return value.rstrip("/")


def host_of_line(line: str) -> str:
    """Hostname of a directory line: drop the scheme, cut at ``/`` then ``:``."""
    lowered = line.lower()
    for scheme in ("https://", "http://"):
        if lowered.startswith(scheme):
            line = line[len(scheme) :]
            break
    return line.split("/", 1)[0].split(":", 1)[0]


def match_directory(text: str, rule: BaseUrlRule) -> str | None:
    """Return the first directory line whose hostname matches *rule*."""
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line:
            continue
        host = host_of_line(line)
        if not host:
            log.debug("base_url_line_unparseable", provider=rule.provider_id, line=line)
            continue
        if rule.matches(host):
            return normalize_base_url(line)
    return None


class BaseUrlResolver:
    """Resolves and caches provider base URLs.

    Args:
        http_client: Shared AsyncClient.
        store: Key-value store holding ``CacheBaseUrl<id>`` / ``baseUrlTime<id>``.
        registry: Providers resolved through the community directory.
        ttl_seconds: Freshness window of a cached value.
        clock: Returns "now" in epoch seconds (injectable for tests).
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        store: KeyValueStore,
        registry: BaseUrlRegistry,
        *,
        directory_url: str = DIRECTORY_URL,
        fallback_url: str = FALLBACK_DIRECTORY_URL,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        timeout: float = 10.0,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._http = http_client
        self._store = store
        self._registry = registry
        self._directory_url = directory_url
        self._fallback_url = fallback_url
        self._ttl = ttl_seconds
        self._timeout = timeout
        self._clock = clock

    async def get_base_url(self, provider_id: str) -> str:
        """Return the provider's base URL without trailing slash, or ``""``."""
        try:
            return await self._resolve(provider_id)
        except Exception as exc:  # noqa: BLE001
            log.error("base_url_error", provider=provider_id, error=str(exc))
            return ""

    async def get_cached(self, provider_id: str) -> ResolvedBaseUrl | None:
        """Return the cached entry (fresh or stale), if any."""
        url = await self._store.get_string(_URL_KEY_PREFIX + provider_id)
        resolved_at = await self._store.get_object(_TIME_KEY_PREFIX + provider_id)
        if not url or not isinstance(resolved_at, (int, float)):
            return None
        return ResolvedBaseUrl(provider_id=provider_id, url=url, resolved_at=resolved_at)

    async def _resolve(self, provider_id: str) -> str:
        cached = await self.get_cached(provider_id)
        if cached is not None and cached.is_fresh(self._clock(), self._ttl):
            log.debug("base_url_cache_hit", provider=provider_id, url=cached.url)
            return cached.url

        rule = self._registry.lookup(provider_id)
        if rule is not None:
            url = await self._from_directory(rule)
            if not url:
                log.info("base_url_directory_missing", provider=provider_id)
                return ""
            await self._remember(provider_id, url)
            log.info("base_url_from_directory", provider=provider_id, url=url)
            return url

        url = await self._from_fallback(provider_id)
        await self._remember(provider_id, url)
        log.info("base_url_from_fallback", provider=provider_id, url=url)
        return url

    async def _from_directory(self, rule: BaseUrlRule) -> str | None:
        """Scan the community directory; network errors count as "no match".

        The body is scanned whatever the status code.
        """
        try:
            resp = await self._http.get(self._directory_url, timeout=self._timeout)
        except httpx.HTTPError as exc:
            log.warning(
                "base_url_directory_fetch_failed",
                provider=rule.provider_id,
                error=str(exc),
            )
            return None
        return match_directory(resp.text, rule)

    async def _from_fallback(self, provider_id: str) -> str:
        resp = await self._http.get(self._fallback_url, timeout=self._timeout)
        resp.raise_for_status()
        url = resp.json()[provider_id]["url"]
        if not isinstance(url, str) or not url:
            raise ValueError(f"fallback directory has no url for {provider_id!r}")
        return normalize_base_url(url)

    async def _remember(self, provider_id: str, url: str) -> None:
        await self._store.set_string(_URL_KEY_PREFIX + provider_id, url)
        await self._store.set_object(_TIME_KEY_PREFIX + provider_id, self._clock())
