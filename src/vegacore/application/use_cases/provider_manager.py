"""Provider manager - uniform async facade over installed provider modules."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import structlog

from vegacore.domain.cancellation import AbortSignal
from vegacore.domain.entities import (
    ContentInfo,
    EpisodeLink,
    Post,
    StreamDescriptor,
    SubtitleTrack,
)
from vegacore.domain.providers import OperationAborted, ProviderModule
from vegacore.infrastructure.common.lru_cache import BoundedLRUCache
from vegacore.infrastructure.providers.context import ProviderContext
from vegacore.infrastructure.providers.registry import ProviderRegistry

log = structlog.get_logger(__name__)


def _coerce_stream(item: Any, provider: str) -> StreamDescriptor | None:
    """Accept descriptors or plain dicts; drop entries that are not playable."""
    if isinstance(item, StreamDescriptor):
        return item
    if not isinstance(item, Mapping):
        log.warning("provider_stream_invalid", provider=provider, type=type(item).__name__)
        return None
    try:
        return StreamDescriptor(
            server=str(item.get("server") or ""),
            link=str(item.get("link") or ""),
            type=str(item.get("type") or "mkv"),
            headers=dict(item.get("headers") or {}),
            subtitles=tuple(
                SubtitleTrack(
                    uri=str(t.get("uri") or ""),
                    title=str(t.get("title") or ""),
                    language=str(t.get("language") or ""),
                    type=str(t.get("type") or ""),
                )
                for t in item.get("subtitles") or []
                if isinstance(t, Mapping)
            ),
            quality=str(item["quality"]) if item.get("quality") else None,
        )
    except ValueError as exc:
        log.warning("provider_stream_invalid", provider=provider, error=str(exc))
        return None


class ProviderManager:
    """Dispatches catalog, meta and stream calls to provider modules.

    Every call passes the shared ``ProviderContext``. Unknown provider ids
    raise ``ProviderNotFoundError``. Search results are kept in an
    explicitly sized LRU cache owned by the manager.
    """

    def __init__(
        self,
        registry: ProviderRegistry,
        context: ProviderContext,
        *,
        search_cache_size: int = 10,
    ) -> None:
        self._registry = registry
        self._context = context
        self._search_cache: BoundedLRUCache[tuple[str, str, int], list[Post]] = (
            BoundedLRUCache(max_entries=search_cache_size)
        )

    @property
    def context(self) -> ProviderContext:
        return self._context

    def list_providers(self) -> list[str]:
        return self._registry.list_names()

    def provider(self, provider_id: str) -> ProviderModule:
        return self._registry.get(provider_id)

    async def get_posts(
        self,
        provider_id: str,
        filter: str,
        page: int = 1,
        signal: AbortSignal | None = None,
    ) -> list[Post]:
        provider = self.provider(provider_id)
        if signal is not None and signal.aborted:
            return []
        try:
            return list(await provider.get_posts(self._context, filter, page, signal))
        except OperationAborted:
            log.debug("provider_call_cancelled", provider=provider_id, call="get_posts")
            return []
        except Exception:
            log.warning(
                "provider_call_failed",
                provider=provider_id,
                call="get_posts",
                filter=filter,
                page=page,
                exc_info=True,
            )
            return []

    async def get_search_posts(
        self,
        provider_id: str,
        query: str,
        page: int = 1,
        signal: AbortSignal | None = None,
    ) -> list[Post]:
        """Search one provider; repeated queries are served from the LRU cache."""
        query = query.strip()
        if not query:
            return []

        key = (provider_id, query.lower(), page)
        cached = self._search_cache.get(key)
        if cached is not None:
            log.debug("search_cache_hit", provider=provider_id, query=query, page=page)
            return list(cached)

        provider = self.provider(provider_id)
        search = getattr(provider, "get_search_posts", None)
        if search is None or (signal is not None and signal.aborted):
            return []

        try:
            posts = list(await search(self._context, query, page, signal))
        except OperationAborted:
            log.debug("provider_call_cancelled", provider=provider_id, call="search")
            return []
        except Exception:
            log.warning(
                "provider_call_failed",
                provider=provider_id,
                call="search",
                query=query,
                exc_info=True,
            )
            return []

        if posts:
            self._search_cache.set(key, posts)
        return list(posts)

    async def get_meta(self, provider_id: str, link: str) -> ContentInfo | None:
        provider = self.provider(provider_id)
        try:
            return await provider.get_meta(self._context, link)
        except Exception:
            log.warning(
                "provider_call_failed",
                provider=provider_id,
                call="get_meta",
                link=link,
                exc_info=True,
            )
            return None

    async def get_episodes(self, provider_id: str, url: str) -> list[EpisodeLink]:
        provider = self.provider(provider_id)
        episodes = getattr(provider, "get_episodes", None)
        if episodes is None:
            return []
        try:
            return list(await episodes(self._context, url))
        except Exception:
            log.warning(
                "provider_call_failed",
                provider=provider_id,
                call="get_episodes",
                url=url,
                exc_info=True,
            )
            return []

    async def get_stream(
        self,
        provider_id: str,
        link: str,
        type: str,
        signal: AbortSignal | None = None,
    ) -> list[StreamDescriptor]:
        """Streams for one episode/movie link; failures and cancellation give ``[]``."""
        provider = self.provider(provider_id)
        if signal is not None and signal.aborted:
            return []
        try:
            raw = await provider.get_stream(self._context, link, type, signal)
        except OperationAborted:
            log.debug("provider_call_cancelled", provider=provider_id, call="get_stream")
            return []
        except Exception:
            log.warning(
                "provider_call_failed",
                provider=provider_id,
                call="get_stream",
                link=link,
                exc_info=True,
            )
            return []

        streams: list[StreamDescriptor] = []
        for item in raw or []:
            descriptor = _coerce_stream(item, provider_id)
            if descriptor is not None:
                streams.append(descriptor)
        log.info("provider_streams", provider=provider_id, link=link, count=len(streams))
        return streams

    def clear_search_cache(self) -> None:
        self._search_cache.clear()
