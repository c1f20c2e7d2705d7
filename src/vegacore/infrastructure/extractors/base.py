"""Shared machinery for landing-page extractors.

A landing page (HubCloud, GDFlix, ...) lists several download buttons,
each pointing at a different hosting intermediary. The extractor fetches
the page, selects the buttons in document order and classifies every
``href`` with an ordered rule table: the first rule whose predicate
matches handles the anchor. Handlers may rewrite the URL or follow a
bounded redirect chain before emitting a ``StreamDescriptor``.
"""

from __future__ import annotations

import re
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import ClassVar

import httpx
import structlog

from vegacore.domain.cancellation import AbortSignal
from vegacore.domain.entities.outcome import Cancelled, Empty, Ok, Outcome
from vegacore.domain.entities.streams import StreamDescriptor
from vegacore.domain.providers.exceptions import OperationAborted
from vegacore.infrastructure.common.html_selectors import parse_html, select_items
from vegacore.infrastructure.extractors.redirects import (
    DEFAULT_MAX_REDIRECT_HOPS,
    resolve_redirect_chain,
)
from vegacore.infrastructure.http.client import request_with_signal

log = structlog.get_logger(__name__)

Handler = Callable[
    ["MultiHopExtractor", str, "AbortSignal | None"],
    Awaitable["StreamDescriptor | None"],
]

_HOST_LABEL_RE = re.compile(r"^(?:https?://)?(?:www\.)?([^/]+)", re.IGNORECASE)


@dataclass(frozen=True)
class AnchorRule:
    """One row of a classification table."""

    name: str
    predicate: Callable[[str], bool]
    handler: Handler


def contains(*needles: str, unless: str = "") -> Callable[[str], bool]:
    """Predicate: any of *needles* occurs in the href (and *unless* does not)."""

    def _predicate(href: str) -> bool:
        if unless and unless in href:
            return False
        return any(needle in href for needle in needles)

    return _predicate


def emit(server: str) -> Handler:
    """Handler emitting the href unchanged under a fixed *server* label."""

    async def _handler(
        extractor: MultiHopExtractor, href: str, signal: AbortSignal | None
    ) -> StreamDescriptor | None:
        return StreamDescriptor(server=server, link=href, type="mkv")

    return _handler


def host_label(href: str) -> str:
    """``https://www.cdn.example.net/x.mkv`` -> ``"cdn example net"``."""
    match = _HOST_LABEL_RE.match(href)
    if not match or not match.group(1):
        return "Unknown"
    return match.group(1).replace(".", " ")


def pixeldrain_api_url(href: str) -> str:
    """Rewrite a file-drop viewer URL to its direct download API URL."""
    if "api" in href:
        return href
    segments = href.split("/")
    token = segments[-1]
    prefix = "/".join(segments[:-2])
    return f"{prefix}/api/file/{token}?download"


async def pixeldrain(
    extractor: MultiHopExtractor, href: str, signal: AbortSignal | None
) -> StreamDescriptor | None:
    return StreamDescriptor(server="Pixeldrain", link=pixeldrain_api_url(href))


async def generic_media(
    extractor: MultiHopExtractor, href: str, signal: AbortSignal | None
) -> StreamDescriptor | None:
    """Direct media file or tokenized URL; anything else is skipped."""
    if ".mkv" not in href and "?token=" not in href:
        return None
    return StreamDescriptor(server=host_label(href), link=href)


def match_everything(href: str) -> bool:
    return True


class MultiHopExtractor:
    """Base class for landing-page extractors driven by an ``AnchorRule`` table.

    Subclasses set ``extractor_name``, ``anchor_selector`` and ``rules``
    and may override ``discover_target`` when the landing page redirects
    to the actual download page.
    """

    extractor_name: ClassVar[str] = ""
    domains: ClassVar[frozenset[str]] = frozenset()
    anchor_selector: ClassVar[str] = "a[href]"
    rules: ClassVar[Sequence[AnchorRule]] = ()

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        *,
        max_redirect_hops: int = DEFAULT_MAX_REDIRECT_HOPS,
        timeout: float = 15.0,
    ) -> None:
        self._http = http_client
        self._max_redirect_hops = max_redirect_hops
        self._timeout = timeout

    @property
    def name(self) -> str:
        return self.extractor_name

    @property
    def supported_domains(self) -> frozenset[str]:
        return self.domains

    async def extract(
        self,
        link: str,
        signal: AbortSignal | None = None,
    ) -> list[StreamDescriptor]:
        outcome = await self.extract_outcome(link, signal)
        if isinstance(outcome, Ok):
            return outcome.value
        if isinstance(outcome, Cancelled):
            log.debug("extract_cancelled", extractor=self.name, link=link)
        return []

    async def extract_outcome(
        self,
        link: str,
        signal: AbortSignal | None = None,
    ) -> Outcome[list[StreamDescriptor]]:
        """Run the full extraction, mapping abort to ``Cancelled``.

        Transport failures and unusable URLs before any anchor was read
        give ``Empty``; failures of single anchors are skipped.
        """
        try:
            if signal is not None:
                signal.raise_if_aborted()
            target = await self.discover_target(link, signal)
            html = await self.fetch_text(target, signal)
            hrefs = [
                str(tag.get("href") or "")
                for tag in select_items(parse_html(html), self.anchor_selector)
            ]
            streams: list[StreamDescriptor] = []
            for href in hrefs:
                descriptor = await self.classify_and_handle(href, signal)
                if descriptor is not None:
                    streams.append(descriptor)
        except OperationAborted:
            return Cancelled()
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            log.warning(
                "extract_request_failed",
                extractor=self.name,
                link=link,
                error=str(exc),
            )
            return Empty(str(exc))

        log.info("extract_completed", extractor=self.name, link=link, count=len(streams))
        return Ok(streams)

    def classify(self, href: str) -> AnchorRule | None:
        """First rule whose predicate accepts *href*."""
        for rule in self.rules:
            if rule.predicate(href):
                return rule
        return None

    async def classify_and_handle(
        self,
        href: str,
        signal: AbortSignal | None,
    ) -> StreamDescriptor | None:
        if not href:
            return None
        rule = self.classify(href)
        if rule is None:
            return None
        try:
            return await rule.handler(self, href, signal)
        except OperationAborted:
            raise
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as exc:
            log.warning(
                "extract_anchor_failed",
                extractor=self.name,
                rule=rule.name,
                href=href,
                error=str(exc),
            )
            return None

    async def discover_target(self, link: str, signal: AbortSignal | None) -> str:
        """URL of the page holding the download buttons (default: *link*)."""
        return link

    async def fetch_text(self, url: str, signal: AbortSignal | None) -> str:
        resp = await request_with_signal(
            self._http, "GET", url, signal=signal, timeout=self._timeout
        )
        resp.raise_for_status()
        return resp.text

    async def follow_redirects(self, href: str, signal: AbortSignal | None) -> str:
        final_url, hops = await resolve_redirect_chain(
            self._http,
            href,
            signal=signal,
            max_hops=self._max_redirect_hops,
        )
        log.debug(
            "extract_redirect_followed",
            extractor=self.name,
            href=href,
            final=final_url,
            hops=len(hops),
        )
        return final_url
