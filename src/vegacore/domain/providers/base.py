"""Protocol for installed provider modules."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from vegacore.domain.cancellation import AbortSignal
    from vegacore.domain.entities import (
        ContentInfo,
        EpisodeLink,
        Post,
        StreamDescriptor,
    )


class ProviderModule(Protocol):
    """
    Protocol for Python provider modules.

    A provider module must export a module-level variable named `provider` that:
    - has a `name: str` attribute (the provider id)
    - implements the async methods below; each receives the shared
      ProviderContext as first argument and holds no infrastructure of its own

    `get_search_posts` and `get_episodes` are optional.
    """

    name: str

    async def get_posts(
        self,
        context: Any,
        filter: str,
        page: int,
        signal: AbortSignal | None = None,
    ) -> list[Post]: ...

    async def get_meta(self, context: Any, link: str) -> ContentInfo: ...

    async def get_stream(
        self,
        context: Any,
        link: str,
        type: str,
        signal: AbortSignal | None = None,
    ) -> list[StreamDescriptor]: ...


class SearchableProvider(Protocol):
    async def get_search_posts(
        self,
        context: Any,
        query: str,
        page: int,
        signal: AbortSignal | None = None,
    ) -> list[Post]: ...


class EpisodeProvider(Protocol):
    async def get_episodes(self, context: Any, url: str) -> list[EpisodeLink]: ...
