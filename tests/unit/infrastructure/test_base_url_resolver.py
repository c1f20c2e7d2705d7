"""Tests for BaseUrlResolver (cache -> directory -> fallback JSON)."""

from __future__ import annotations

import httpx
import pytest
import respx

from vegacore.infrastructure.base_url.registry import (
    DIRECTORY_URL,
    FALLBACK_DIRECTORY_URL,
    default_registry,
)
from vegacore.infrastructure.base_url.resolver import (
    BaseUrlResolver,
    host_of_line,
    match_directory,
)
from vegacore.infrastructure.persistence.key_value_store import CacheKeyValueStore

_DIRECTORY_TEXT = (
    "https://example.com/\n"
    "\n"
    "   https://www.animeunity.so///   \r\n"
    "https://streamingunity.prof:8443/path\n"
)


class _Clock:
    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def _resolver(
    client: httpx.AsyncClient, store: CacheKeyValueStore, clock: _Clock
) -> BaseUrlResolver:
    return BaseUrlResolver(client, store, default_registry(), clock=clock)


class TestHostOfLine:
    def test_strips_scheme_path_and_port(self) -> None:
        assert host_of_line("https://a.example.org:8080/x/y") == "a.example.org"

    def test_scheme_is_case_insensitive(self) -> None:
        assert host_of_line("HTTP://Host.example/") == "Host.example"

    def test_without_scheme(self) -> None:
        assert host_of_line("host.example/path") == "host.example"


class TestMatchDirectory:
    def test_first_match_with_trailing_slashes_stripped(self) -> None:
        rule = default_registry().lookup("animeunity")
        assert rule is not None
        assert match_directory(_DIRECTORY_TEXT, rule) == "https://www.animeunity.so"

    def test_no_match(self) -> None:
        rule = default_registry().lookup("guardaserietv")
        assert rule is not None
        assert match_directory(_DIRECTORY_TEXT, rule) is None


class TestDirectoryLookup:
    @respx.mock
    async def test_matching_line_returned(self, kv_store: CacheKeyValueStore) -> None:
        respx.get(DIRECTORY_URL).respond(200, text=_DIRECTORY_TEXT)

        async with httpx.AsyncClient() as client:
            url = await _resolver(client, kv_store, _Clock()).get_base_url("animeunity")

        assert url == "https://www.animeunity.so"

    @pytest.mark.respx(assert_all_called=False)
    async def test_no_match_returns_empty_without_fallback(
        self,
        kv_store: CacheKeyValueStore,
        respx_mock: respx.MockRouter,
    ) -> None:
        respx_mock.get(DIRECTORY_URL).respond(200, text="https://example.com\n")
        fallback = respx_mock.get(FALLBACK_DIRECTORY_URL).respond(
            200, json={"animeunity": {"url": "https://wrong.example"}}
        )

        async with httpx.AsyncClient() as client:
            url = await _resolver(client, kv_store, _Clock()).get_base_url("animeunity")

        assert url == ""
        assert fallback.call_count == 0

    @respx.mock
    async def test_no_match_is_not_cached(self, kv_store: CacheKeyValueStore) -> None:
        route = respx.get(DIRECTORY_URL).respond(200, text="https://example.com\n")

        async with httpx.AsyncClient() as client:
            resolver = _resolver(client, kv_store, _Clock())
            await resolver.get_base_url("animeunity")
            await resolver.get_base_url("animeunity")

        assert route.call_count == 2
        assert await kv_store.get_string("CacheBaseUrlanimeunity") is None

    @respx.mock
    async def test_directory_failure_returns_empty(
        self, kv_store: CacheKeyValueStore
    ) -> None:
        respx.get(DIRECTORY_URL).mock(side_effect=httpx.ConnectError("down"))

        async with httpx.AsyncClient() as client:
            url = await _resolver(client, kv_store, _Clock()).get_base_url("animeunity")

        assert url == ""

    @respx.mock
    async def test_body_scanned_whatever_the_status(
        self, kv_store: CacheKeyValueStore
    ) -> None:
        respx.get(DIRECTORY_URL).respond(503, text=_DIRECTORY_TEXT)

        async with httpx.AsyncClient() as client:
            url = await _resolver(client, kv_store, _Clock()).get_base_url("animeunity")

        assert url == "https://www.animeunity.so"


class TestFallbackLookup:
    @pytest.mark.respx(assert_all_called=False)
    async def test_provider_without_rule_uses_fallback_json(
        self,
        kv_store: CacheKeyValueStore,
        respx_mock: respx.MockRouter,
    ) -> None:
        directory = respx_mock.get(DIRECTORY_URL).respond(200, text=_DIRECTORY_TEXT)
        respx_mock.get(FALLBACK_DIRECTORY_URL).respond(
            200, json={"vega": {"url": "https://vegamovies.example"}}
        )

        async with httpx.AsyncClient() as client:
            url = await _resolver(client, kv_store, _Clock()).get_base_url("vega")

        assert url == "https://vegamovies.example"
        assert directory.call_count == 0

    @respx.mock
    async def test_missing_key_returns_empty(self, kv_store: CacheKeyValueStore) -> None:
        respx.get(FALLBACK_DIRECTORY_URL).respond(200, json={"other": {"url": "x"}})

        async with httpx.AsyncClient() as client:
            url = await _resolver(client, kv_store, _Clock()).get_base_url("vega")

        assert url == ""

    @respx.mock
    async def test_invalid_json_returns_empty(self, kv_store: CacheKeyValueStore) -> None:
        respx.get(FALLBACK_DIRECTORY_URL).respond(200, text="<html>")

        async with httpx.AsyncClient() as client:
            url = await _resolver(client, kv_store, _Clock()).get_base_url("vega")

        assert url == ""

    @respx.mock
    async def test_http_error_returns_empty(self, kv_store: CacheKeyValueStore) -> None:
        respx.get(FALLBACK_DIRECTORY_URL).respond(500)

        async with httpx.AsyncClient() as client:
            url = await _resolver(client, kv_store, _Clock()).get_base_url("vega")

        assert url == ""


class TestCaching:
    @respx.mock
    async def test_two_calls_within_ttl_fetch_once(
        self, kv_store: CacheKeyValueStore
    ) -> None:
        route = respx.get(DIRECTORY_URL).respond(200, text=_DIRECTORY_TEXT)
        clock = _Clock()

        async with httpx.AsyncClient() as client:
            resolver = _resolver(client, kv_store, clock)
            first = await resolver.get_base_url("animeunity")
            clock.now += 60
            second = await resolver.get_base_url("animeunity")

        assert first == second == "https://www.animeunity.so"
        assert route.call_count == 1

    @respx.mock
    async def test_expired_entry_refetched(self, kv_store: CacheKeyValueStore) -> None:
        route = respx.get(DIRECTORY_URL)
        route.side_effect = [
            httpx.Response(200, text="https://animeunity.so\n"),
            httpx.Response(200, text="https://animeunity.to\n"),
        ]
        clock = _Clock()

        async with httpx.AsyncClient() as client:
            resolver = _resolver(client, kv_store, clock)
            first = await resolver.get_base_url("animeunity")
            clock.now += 3600 + 1
            second = await resolver.get_base_url("animeunity")

        assert first == "https://animeunity.so"
        assert second == "https://animeunity.to"
        assert route.call_count == 2

    @respx.mock
    async def test_stores_url_and_timestamp(self, kv_store: CacheKeyValueStore) -> None:
        respx.get(FALLBACK_DIRECTORY_URL).respond(
            200, json={"vega": {"url": "https://vegamovies.example"}}
        )
        clock = _Clock(now=1234.0)

        async with httpx.AsyncClient() as client:
            await _resolver(client, kv_store, clock).get_base_url("vega")

        assert await kv_store.get_string("CacheBaseUrlvega") == "https://vegamovies.example"
        assert await kv_store.get_object("baseUrlTimevega") == 1234.0

    async def test_fresh_cache_needs_no_network(self, kv_store: CacheKeyValueStore) -> None:
        clock = _Clock(now=5000.0)
        await kv_store.set_string("CacheBaseUrlvega", "https://cached.example")
        await kv_store.set_object("baseUrlTimevega", 4000.0)

        async with httpx.AsyncClient() as client:
            with respx.mock(assert_all_called=False) as router:
                url = await _resolver(client, kv_store, clock).get_base_url("vega")

        assert url == "https://cached.example"
        assert len(router.calls) == 0
