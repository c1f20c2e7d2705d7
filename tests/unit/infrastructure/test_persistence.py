"""Tests for the cache-backed key-value store and stream list repository."""

from __future__ import annotations

from unittest.mock import AsyncMock

from vegacore.domain.entities.streams import StreamDescriptor, SubtitleTrack
from vegacore.infrastructure.cache.memory_adapter import MemoryCacheAdapter
from vegacore.infrastructure.persistence.key_value_store import CacheKeyValueStore
from vegacore.infrastructure.persistence.stream_list_cache import (
    CacheStreamListRepository,
)


class TestCacheKeyValueStore:
    async def test_strings(self, kv_store: CacheKeyValueStore) -> None:
        await kv_store.set_string("CacheBaseUrlvega", "https://vegamovies.example")
        assert await kv_store.get_string("CacheBaseUrlvega") == "https://vegamovies.example"
        assert await kv_store.get_string("missing") is None

    async def test_objects(self, kv_store: CacheKeyValueStore) -> None:
        await kv_store.set_object("baseUrlTimevega", 1700000000.5)
        await kv_store.set_object("prefs", {"excluded": ["480p"]})

        assert await kv_store.get_object("baseUrlTimevega") == 1700000000.5
        assert await kv_store.get_object("prefs") == {"excluded": ["480p"]}

    async def test_entries_written_without_expiry(self, mock_cache: AsyncMock) -> None:
        store = CacheKeyValueStore(mock_cache)
        await store.set_string("k", "v")
        mock_cache.set.assert_awaited_once_with("k", "v", ttl=0)

    async def test_non_string_value_reads_as_none(
        self, memory_cache: MemoryCacheAdapter
    ) -> None:
        await memory_cache.set("k", 42)
        assert await CacheKeyValueStore(memory_cache).get_string("k") is None

    async def test_corrupt_json_reads_as_none(
        self, memory_cache: MemoryCacheAdapter
    ) -> None:
        await memory_cache.set("k", "{not json")
        assert await CacheKeyValueStore(memory_cache).get_object("k") is None

    async def test_delete(self, kv_store: CacheKeyValueStore) -> None:
        await kv_store.set_string("k", "v")
        assert await kv_store.delete("k") is True
        assert await kv_store.get_string("k") is None


class TestCacheStreamListRepository:
    async def test_save_and_get(self, memory_cache: MemoryCacheAdapter) -> None:
        repo = CacheStreamListRepository(memory_cache, ttl_seconds=60)
        streams = [
            StreamDescriptor(
                server="SuperVideo",
                link="https://cdn.example/master.m3u8",
                type="m3u8",
                quality="1080",
                headers={"Referer": "https://supervideo.cc/"},
                subtitles=(
                    SubtitleTrack(uri="https://subs.example/en.vtt", title="English", language="en"),
                ),
            ),
            StreamDescriptor(server="GoFile", link="https://store.gofile.io/a.mkv"),
        ]

        await repo.save("vega:abc", streams)
        loaded = await repo.get("vega:abc")

        assert loaded == streams
        assert await memory_cache.exists("streams:vega:abc")

    async def test_miss(self, memory_cache: MemoryCacheAdapter) -> None:
        assert await CacheStreamListRepository(memory_cache).get("nope") is None

    async def test_corrupt_entry(self, memory_cache: MemoryCacheAdapter) -> None:
        await memory_cache.set("streams:bad", '[{"link": "x"}]')
        assert await CacheStreamListRepository(memory_cache).get("bad") is None

    async def test_ttl_forwarded(self, mock_cache: AsyncMock) -> None:
        repo = CacheStreamListRepository(mock_cache, ttl_seconds=300)
        await repo.save("k", [])
        mock_cache.set.assert_awaited_once_with("streams:k", "[]", ttl=300)

    async def test_invalidate(self, memory_cache: MemoryCacheAdapter) -> None:
        repo = CacheStreamListRepository(memory_cache)
        await repo.save("k", [StreamDescriptor(server="s", link="https://cdn.example/l.mkv")])
        await repo.invalidate("k")
        assert await repo.get("k") is None
