"""Tests for ProviderManager."""

from __future__ import annotations

from typing import Any

import pytest

from vegacore.application.use_cases.provider_manager import ProviderManager
from vegacore.domain.cancellation import AbortController, aborted_signal
from vegacore.domain.entities import ContentInfo, EpisodeLink, Post, StreamDescriptor
from vegacore.domain.providers import OperationAborted, ProviderNotFoundError
from vegacore.infrastructure.providers.context import ProviderContext


class _StubRegistry:
    def __init__(self, *providers: object) -> None:
        self._providers = {p.name: p for p in providers}  # type: ignore[attr-defined]

    def list_names(self) -> list[str]:
        return sorted(self._providers)

    def get(self, name: str) -> object:
        try:
            return self._providers[name]
        except KeyError:
            raise ProviderNotFoundError(f"Provider '{name}' not found") from None


def _manager(provider_context: ProviderContext, *providers: object, size: int = 10):
    return ProviderManager(
        _StubRegistry(*providers),  # type: ignore[arg-type]
        provider_context,
        search_cache_size=size,
    )


class TestLookup:
    def test_list_providers(
        self, provider_context: ProviderContext, provider_factory: Any
    ) -> None:
        manager = _manager(
            provider_context, provider_factory("vega"), provider_factory("mod")
        )
        assert manager.list_providers() == ["mod", "vega"]

    async def test_unknown_provider_raises(self, provider_context: ProviderContext) -> None:
        manager = _manager(provider_context)
        with pytest.raises(ProviderNotFoundError):
            await manager.get_stream("nope", "https://x/1", "movie")


class TestGetStream:
    async def test_returns_descriptors(
        self, provider_context: ProviderContext, fake_provider: Any
    ) -> None:
        manager = _manager(provider_context, fake_provider)
        streams = await manager.get_stream("vega", "https://vega.example/ep1", "movie")
        assert [s.server for s in streams] == ["Pixeldrain", "FastDl"]

    async def test_context_is_passed(
        self, provider_context: ProviderContext, provider_factory: Any
    ) -> None:
        seen: list[object] = []

        class _Provider(provider_factory):
            async def get_stream(self, context, link, type, signal=None):
                seen.append(context)
                return []

        manager = _manager(provider_context, _Provider())
        await manager.get_stream("vega", "https://vega.example/ep1", "movie")
        assert seen == [provider_context]

    async def test_dict_streams_coerced(
        self, provider_context: ProviderContext, provider_factory: Any
    ) -> None:
        provider = provider_factory(
            streams=[
                {
                    "server": "HubCloud",
                    "link": "https://cdn.example/a.mkv",
                    "quality": 1080,
                    "subtitles": [{"uri": "https://subs.example/en.vtt", "language": "en"}],
                },
                {"server": "", "link": "https://cdn.example/b.mkv"},
                {"server": "Relative", "link": "/b.mkv"},
                "garbage",
            ]
        )
        manager = _manager(provider_context, provider)

        streams = await manager.get_stream("vega", "https://vega.example/ep1", "movie")

        assert len(streams) == 1
        assert streams[0].quality == "1080"
        assert streams[0].type == "mkv"
        assert streams[0].subtitles[0].language == "en"

    async def test_provider_error_yields_empty(
        self, provider_context: ProviderContext, fake_provider: Any
    ) -> None:
        fake_provider.error = RuntimeError("site changed")
        manager = _manager(provider_context, fake_provider)
        assert await manager.get_stream("vega", "https://vega.example/ep1", "movie") == []

    async def test_abort_yields_empty(
        self, provider_context: ProviderContext, fake_provider: Any
    ) -> None:
        fake_provider.error = OperationAborted("closed")
        manager = _manager(provider_context, fake_provider)
        assert await manager.get_stream("vega", "https://vega.example/ep1", "movie") == []

    async def test_pre_aborted_skips_provider(
        self, provider_context: ProviderContext, fake_provider: Any
    ) -> None:
        manager = _manager(provider_context, fake_provider)
        streams = await manager.get_stream(
            "vega", "https://vega.example/ep1", "movie", aborted_signal()
        )
        assert streams == []
        assert fake_provider.stream_calls == 0


class TestSearch:
    async def test_results_cached_case_insensitively(
        self, provider_context: ProviderContext, provider_factory: Any
    ) -> None:
        provider = provider_factory()
        provider.posts = [Post(title="Dune", link="https://vega.example/dune")]
        manager = _manager(provider_context, provider)

        first = await manager.get_search_posts("vega", "Dune")
        second = await manager.get_search_posts("vega", "  dune ")

        assert first == second == provider.posts
        assert provider.search_calls == 1

    async def test_empty_results_not_cached(
        self, provider_context: ProviderContext, provider_factory: Any
    ) -> None:
        provider = provider_factory()
        manager = _manager(provider_context, provider)

        await manager.get_search_posts("vega", "nothing")
        await manager.get_search_posts("vega", "nothing")

        assert provider.search_calls == 2

    async def test_cache_is_bounded(
        self, provider_context: ProviderContext, provider_factory: Any
    ) -> None:
        provider = provider_factory()
        provider.posts = [Post(title="x", link="https://vega.example/x")]
        manager = _manager(provider_context, provider, size=1)

        await manager.get_search_posts("vega", "a")
        await manager.get_search_posts("vega", "b")
        await manager.get_search_posts("vega", "a")

        assert provider.search_calls == 3

    async def test_clear_search_cache(
        self, provider_context: ProviderContext, provider_factory: Any
    ) -> None:
        provider = provider_factory()
        provider.posts = [Post(title="x", link="https://vega.example/x")]
        manager = _manager(provider_context, provider)

        await manager.get_search_posts("vega", "a")
        manager.clear_search_cache()
        await manager.get_search_posts("vega", "a")

        assert provider.search_calls == 2

    async def test_blank_query(
        self, provider_context: ProviderContext, provider_factory: Any
    ) -> None:
        provider = provider_factory()
        manager = _manager(provider_context, provider)
        assert await manager.get_search_posts("vega", "   ") == []
        assert provider.search_calls == 0


class TestCatalogAndMeta:
    async def test_get_posts(
        self, provider_context: ProviderContext, provider_factory: Any
    ) -> None:
        provider = provider_factory()
        provider.posts = [Post(title="x", link="https://vega.example/x")]
        manager = _manager(provider_context, provider)

        assert await manager.get_posts("vega", "/latest", 2) == provider.posts
        assert await manager.get_posts("vega", "/latest", 2, AbortController().signal)

    async def test_meta_error_gives_none(
        self, provider_context: ProviderContext, provider_factory: Any
    ) -> None:
        manager = _manager(provider_context, provider_factory())
        assert await manager.get_meta("vega", "https://vega.example/x") is None

    async def test_meta(
        self, provider_context: ProviderContext, provider_factory: Any
    ) -> None:
        info = ContentInfo(title="Dune", link="https://vega.example/dune")

        class _Provider(provider_factory):
            async def get_meta(self, context, link):
                return info

        manager = _manager(provider_context, _Provider())
        assert await manager.get_meta("vega", info.link) is info

    async def test_episodes_optional(
        self, provider_context: ProviderContext, provider_factory: Any
    ) -> None:
        manager = _manager(provider_context, provider_factory())
        assert await manager.get_episodes("vega", "https://vega.example/s1") == []

    async def test_episodes(
        self, provider_context: ProviderContext, provider_factory: Any
    ) -> None:
        class _Provider(provider_factory):
            async def get_episodes(self, context, url):
                return [EpisodeLink(title="E1", link=f"{url}/e1")]

        manager = _manager(provider_context, _Provider())
        episodes = await manager.get_episodes("vega", "https://vega.example/s1")
        assert episodes == [EpisodeLink(title="E1", link="https://vega.example/s1/e1")]


def test_descriptor_passthrough_identity() -> None:
    from vegacore.application.use_cases.provider_manager import _coerce_stream

    stream = StreamDescriptor(server="GoFile", link="https://store.gofile.io/a.mkv")
    assert _coerce_stream(stream, "vega") is stream
