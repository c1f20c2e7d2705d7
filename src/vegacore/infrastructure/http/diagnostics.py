"""httpx transport that logs traffic for debug-worthy URL patterns.

Only request/response metadata is read (URL, params, status, declared
size). Bodies are never read, and requests, responses and errors pass
through unchanged.
"""

from __future__ import annotations

from collections.abc import Iterable

import httpx
import structlog

log = structlog.get_logger(__name__)


class DiagnosticTransport(httpx.AsyncBaseTransport):
    """Wraps an httpx transport and logs matching requests.

    A URL matches when it contains one of *patterns* as a substring.
    """

    def __init__(
        self,
        wrapped: httpx.AsyncBaseTransport,
        patterns: Iterable[str],
    ) -> None:
        self._wrapped = wrapped
        self._patterns = tuple(p for p in patterns if p)

    def matches(self, url: str) -> bool:
        return any(p in url for p in self._patterns)

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        if not self.matches(url):
            return await self._wrapped.handle_async_request(request)

        log.info(
            "http_debug_request",
            method=request.method,
            url=url,
            params=dict(request.url.params),
        )
        try:
            response = await self._wrapped.handle_async_request(request)
        except httpx.HTTPError as exc:
            log.info("http_debug_error", url=url, error=str(exc))
            raise

        log.info(
            "http_debug_response",
            url=url,
            status=response.status_code,
            size=response.headers.get("content-length"),
        )
        return response

    async def aclose(self) -> None:
        """Close the wrapped transport."""
        await self._wrapped.aclose()
