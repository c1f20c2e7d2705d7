"""Capability bundle handed to every provider module.

Provider modules are functions over ``(context, params)``; they never
build HTTP clients, caches or extractors themselves. The context is
assembled once at startup and read-only afterwards.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

import httpx
import structlog
from bs4 import BeautifulSoup

from vegacore.domain.cancellation import AbortSignal
from vegacore.domain.entities.streams import StreamDescriptor
from vegacore.domain.ports.analytics import AnalyticsPort
from vegacore.domain.ports.base_url import BaseUrlResolverPort
from vegacore.domain.ports.cache import CachePort
from vegacore.domain.ports.key_value_store import KeyValueStore
from vegacore.infrastructure.base_url.registry import default_registry
from vegacore.infrastructure.base_url.resolver import BaseUrlResolver
from vegacore.infrastructure.cache.cache_factory import create_cache
from vegacore.infrastructure.common.crypto import CryptoUtil
from vegacore.infrastructure.common.headers import build_common_headers
from vegacore.infrastructure.common.html_selectors import parse_html
from vegacore.infrastructure.config.schema import AppConfig
from vegacore.infrastructure.extractors.registry import (
    ExtractorRegistry,
    default_extractor_registry,
)
from vegacore.infrastructure.http.client import create_http_client
from vegacore.infrastructure.persistence.key_value_store import CacheKeyValueStore

log = structlog.get_logger(__name__)

ExtractFn = Callable[[str, "AbortSignal | None"], Awaitable[list[StreamDescriptor]]]


@dataclass(frozen=True)
class ProviderContext:
    http_client: httpx.AsyncClient
    headers: Mapping[str, str]
    html_parser: Callable[[str], BeautifulSoup]
    get_base_url: Callable[[str], Awaitable[str]]
    extractors: Mapping[str, ExtractFn]
    extractor_registry: ExtractorRegistry
    crypto: CryptoUtil
    cache: KeyValueStore
    analytics: AnalyticsPort | None = None
    # Backend behind ``cache``.
    cache_backend: CachePort | None = None
    owns_http_client: bool = False
    owns_cache: bool = False

    async def __aenter__(self) -> ProviderContext:
        if self.owns_cache and self.cache_backend is not None:
            await self.cache_backend.__aenter__()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the HTTP client and cache this context created itself."""
        if self.owns_http_client:
            await self.http_client.aclose()
        if self.owns_cache and self.cache_backend is not None:
            await self.cache_backend.aclose()


def build_provider_context(
    config: AppConfig,
    *,
    http_client: httpx.AsyncClient | None = None,
    cache: CachePort | None = None,
    analytics: AnalyticsPort | None = None,
) -> ProviderContext:
    """Assemble the shared ``ProviderContext`` from *config*.

    Missing *http_client* / *cache* are created from the configuration;
    the returned context then owns them. Use it as ``async with`` to open
    and close owned resources. A passed-in *cache* must already be open.
    """
    headers = build_common_headers(config.http_user_agent)
    owns_http_client = http_client is None
    owns_cache = cache is None

    if http_client is None:
        http_client = create_http_client(
            headers=headers,
            timeout=config.http_timeout_seconds,
            debug_url_patterns=config.providers.debug_url_patterns,
        )
    if cache is None:
        cache = create_cache(
            config.cache.backend,
            directory=str(config.cache.directory),
            redis_url=config.cache.redis_url,
            ttl_seconds=config.cache.ttl_seconds,
            max_concurrent=config.cache.max_concurrent,
        )

    store = CacheKeyValueStore(cache)
    resolver: BaseUrlResolverPort = BaseUrlResolver(
        http_client,
        store,
        default_registry(),
        directory_url=config.base_url.directory_url,
        fallback_url=config.base_url.fallback_url,
        ttl_seconds=config.base_url.ttl_seconds,
        timeout=config.base_url.timeout_seconds,
    )
    registry = default_extractor_registry(
        http_client,
        max_redirect_hops=config.extractors.max_redirect_hops,
        timeout=config.extractors.timeout_seconds,
    )
    extractors: dict[str, Any] = {}
    for name in registry.supported_extractors:
        extractor = registry.get(name)
        if extractor is not None:
            extractors[name] = extractor.extract

    log.info(
        "provider_context_built",
        extractors=sorted(extractors),
        analytics=analytics is not None,
        debug_patterns=len(config.providers.debug_url_patterns),
    )
    return ProviderContext(
        http_client=http_client,
        headers=headers,
        html_parser=parse_html,
        get_base_url=resolver.get_base_url,
        extractors=MappingProxyType(extractors),
        extractor_registry=registry,
        crypto=CryptoUtil(),
        cache=store,
        analytics=analytics,
        cache_backend=cache,
        owns_http_client=owns_http_client,
        owns_cache=owns_cache,
    )
