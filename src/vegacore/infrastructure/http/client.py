"""httpx client construction and signal-aware request helper."""

from __future__ import annotations

import asyncio
from collections.abc import Iterable, Mapping
from contextlib import suppress

import httpx
import structlog

from vegacore.domain.cancellation import AbortSignal
from vegacore.domain.providers.exceptions import OperationAborted
from vegacore.infrastructure.http.diagnostics import DiagnosticTransport

log = structlog.get_logger(__name__)


def create_http_client(
    *,
    headers: Mapping[str, str],
    timeout: float = 20.0,
    debug_url_patterns: Iterable[str] = (),
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Shared AsyncClient used by the resolver, extractors and providers.

    Requests to URLs containing one of *debug_url_patterns* are logged
    by a ``DiagnosticTransport``.
    """
    return httpx.AsyncClient(
        headers=dict(headers),
        timeout=timeout,
        follow_redirects=True,
        transport=DiagnosticTransport(
            transport or httpx.AsyncHTTPTransport(),
            debug_url_patterns,
        ),
    )


async def request_with_signal(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    *,
    signal: AbortSignal | None = None,
    **kwargs: object,
) -> httpx.Response:
    """Send a request that stops as soon as *signal* fires.

    Raises ``OperationAborted`` when the signal is (or becomes) aborted;
    in the former case no request is issued at all. Other errors are
    httpx's own.
    """
    if signal is None:
        return await client.request(method, url, **kwargs)  # type: ignore[arg-type]

    signal.raise_if_aborted()
    request_task = asyncio.ensure_future(
        client.request(method, url, **kwargs)  # type: ignore[arg-type]
    )
    abort_task = asyncio.ensure_future(signal.wait())
    try:
        done, _ = await asyncio.wait(
            {request_task, abort_task},
            return_when=asyncio.FIRST_COMPLETED,
        )
    finally:
        abort_task.cancel()
        if not request_task.done():
            request_task.cancel()
            with suppress(asyncio.CancelledError):
                await request_task

    if request_task in done:
        return request_task.result()

    log.debug("http_request_aborted", method=method, url=url, reason=signal.reason)
    raise OperationAborted(signal.reason or "aborted")
