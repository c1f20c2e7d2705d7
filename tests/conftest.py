"""Shared test fixtures for the vegacore test suite."""

from __future__ import annotations

from collections.abc import AsyncIterator
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock

import httpx
import pytest

from vegacore.domain.entities import StreamDescriptor
from vegacore.infrastructure.cache.memory_adapter import MemoryCacheAdapter
from vegacore.infrastructure.config.schema import AppConfig
from vegacore.infrastructure.persistence.key_value_store import CacheKeyValueStore
from vegacore.infrastructure.providers.context import (
    ProviderContext,
    build_provider_context,
)

# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def app_config(tmp_path: Path) -> AppConfig:
    """AppConfig using the in-memory cache and a temp provider dir."""
    return AppConfig.model_validate(
        {
            "environment": "test",
            "cache": {"backend": "memory"},
            "providers": {"provider_dir": str(tmp_path / "providers")},
            "subtitles": {"directory": str(tmp_path / "subtitles")},
        }
    )


# ---------------------------------------------------------------------------
# Cache fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def mock_cache() -> AsyncMock:
    """Mock CachePort."""
    cache = AsyncMock()
    cache.get = AsyncMock(return_value=None)
    cache.set = AsyncMock()
    cache.delete = AsyncMock(return_value=True)
    cache.exists = AsyncMock(return_value=False)
    cache.clear = AsyncMock()
    cache.aclose = AsyncMock()
    return cache


@pytest.fixture()
def memory_cache() -> MemoryCacheAdapter:
    return MemoryCacheAdapter(ttl_seconds=3600)


@pytest.fixture()
def kv_store(memory_cache: MemoryCacheAdapter) -> CacheKeyValueStore:
    return CacheKeyValueStore(memory_cache)


# ---------------------------------------------------------------------------
# HTTP / context fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
async def http_client() -> AsyncIterator[httpx.AsyncClient]:
    """Plain AsyncClient; tests mock traffic with respx."""
    async with httpx.AsyncClient() as client:
        yield client


@pytest.fixture()
def provider_context(
    app_config: AppConfig,
    http_client: httpx.AsyncClient,
    memory_cache: MemoryCacheAdapter,
) -> ProviderContext:
    return build_provider_context(app_config, http_client=http_client, cache=memory_cache)


# ---------------------------------------------------------------------------
# Provider fakes
# ---------------------------------------------------------------------------


class FakeProvider:
    """Provider module double with canned results and call counters."""

    def __init__(
        self,
        name: str = "vega",
        streams: list[Any] | None = None,
    ) -> None:
        self.name = name
        self.streams: list[Any] = streams if streams is not None else []
        self.posts: list[Any] = []
        self.stream_calls = 0
        self.search_calls = 0
        self.error: Exception | None = None

    async def get_posts(self, context, filter, page, signal=None):
        return self.posts

    async def get_search_posts(self, context, query, page, signal=None):
        self.search_calls += 1
        return self.posts

    async def get_meta(self, context, link):
        raise NotImplementedError

    async def get_stream(self, context, link, type, signal=None):
        self.stream_calls += 1
        if self.error is not None:
            raise self.error
        return self.streams


@pytest.fixture()
def fake_provider() -> FakeProvider:
    return FakeProvider(
        streams=[
            StreamDescriptor(server="Pixeldrain", link="https://pixeldrain.com/api/file/a?download"),
            StreamDescriptor(server="FastDl", link="https://fastdl.example/b.mkv", quality="720"),
        ]
    )


@pytest.fixture()
def provider_factory() -> type[FakeProvider]:
    """The FakeProvider class, for tests that need several or a subclass."""
    return FakeProvider
