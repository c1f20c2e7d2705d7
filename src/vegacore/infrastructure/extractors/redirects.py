"""Bounded HEAD redirect chain used by the multi-hop extractors.

Hosting intermediaries bounce a download button through one or two
short-lived redirects (sometimes via a ``googleusercontent`` wrapper
carrying the real target in ``?link=``). Each hop is a single HEAD
request with redirects disabled so every ``Location`` is observed.
"""

from __future__ import annotations

from collections.abc import Mapping
from urllib.parse import urljoin

import httpx
import structlog

from vegacore.domain.cancellation import AbortSignal
from vegacore.domain.entities.streams import RedirectHop
from vegacore.infrastructure.http.client import request_with_signal

log = structlog.get_logger(__name__)

DEFAULT_MAX_REDIRECT_HOPS = 2

_WRAPPER_HOST_MARKER = "googleusercontent"


def unwrap_link_param(url: str) -> str | None:
    """Return the raw value after ``?link=``, or ``None`` when absent."""
    _, sep, wrapped = url.partition("?link=")
    if not sep or not wrapped:
        return None
    return wrapped


def next_location(response: httpx.Response, hop_url: str) -> str:
    """Pick the next URL from a manual-redirect HEAD response.

    3xx: the ``Location`` header (resolved against *hop_url*).
    Otherwise the response URL when it differs from *hop_url*, else
    ``Location`` if present, else *hop_url* unchanged.
    """
    location = response.headers.get("location")
    if 300 <= response.status_code < 400:
        return urljoin(hop_url, location) if location else hop_url
    response_url = str(response.url)
    if response_url and response_url != hop_url:
        return response_url
    return urljoin(hop_url, location) if location else hop_url


async def resolve_redirect_chain(
    client: httpx.AsyncClient,
    url: str,
    *,
    headers: Mapping[str, str] | None = None,
    signal: AbortSignal | None = None,
    max_hops: int = DEFAULT_MAX_REDIRECT_HOPS,
) -> tuple[str, list[RedirectHop]]:
    """Follow at most *max_hops* HEAD redirects starting at *url*.

    Returns the final URL and the hops taken. Raises ``OperationAborted``
    when *signal* fires and ``httpx.HTTPError`` on transport failures.
    """
    current = url
    hops: list[RedirectHop] = []

    for index in range(max_hops):
        response = await request_with_signal(
            client,
            "HEAD",
            current,
            signal=signal,
            headers=dict(headers) if headers else None,
            follow_redirects=False,
        )
        target = next_location(response, current)
        hops.append(
            RedirectHop(
                url=current,
                method="HEAD",
                status=response.status_code,
                location=response.headers.get("location"),
            )
        )

        if _WRAPPER_HOST_MARKER in target:
            unwrapped = unwrap_link_param(target)
            log.debug("redirect_wrapper_unwrapped", hop=index, url=target)
            return (unwrapped or target), hops

        is_last = index == max_hops - 1
        if is_last:
            current = unwrap_link_param(target) or target
        else:
            current = target

    log.debug("redirect_chain_resolved", start=url, final=current, hops=len(hops))
    return current, hops
