"""Registry that dispatches landing-page links to per-host extractors."""

from __future__ import annotations

from collections.abc import Iterable

import httpx
import structlog

from vegacore.domain.cancellation import AbortSignal
from vegacore.domain.entities.streams import StreamDescriptor
from vegacore.domain.ports.link_extractor import LinkExtractorPort
from vegacore.infrastructure.extractors.gdflix import GdFlixExtractor
from vegacore.infrastructure.extractors.gofile import GoFileExtractor
from vegacore.infrastructure.extractors.hubcloud import HubCloudExtractor
from vegacore.infrastructure.extractors.redirects import DEFAULT_MAX_REDIRECT_HOPS
from vegacore.infrastructure.extractors.supervideo import SuperVideoExtractor

log = structlog.get_logger(__name__)


def extract_domain(url: str) -> str:
    """Second-level domain of *url* (``"hubcloud"`` for ``https://hubcloud.one/x``).

    Returns ``""`` when the URL has fewer than two hostname segments.
    """
    try:
        hostname = httpx.URL(url).host
    except (httpx.InvalidURL, TypeError):
        return ""
    parts = hostname.split(".")
    return parts[-2] if len(parts) >= 2 else ""


class ExtractorRegistry:
    """Picks the extractor for a link.

    Dispatch order: URL second-level domain (extractor name, then
    ``supported_domains`` alias), then the caller's *extractor* hint.
    Unknown hosts yield ``[]``.
    """

    def __init__(self, extractors: Iterable[LinkExtractorPort] = ()) -> None:
        self._extractors: dict[str, LinkExtractorPort] = {}
        self._domain_map: dict[str, LinkExtractorPort] = {}
        for extractor in extractors:
            self.register(extractor)

    def register(self, extractor: LinkExtractorPort) -> None:
        self._extractors[extractor.name] = extractor
        domains: frozenset[str] | None = getattr(extractor, "supported_domains", None)
        for domain in domains or ():
            self._domain_map[domain] = extractor
        log.debug("extractor_registered", extractor=extractor.name)

    def get(self, name: str) -> LinkExtractorPort | None:
        return self._extractors.get(name) or self._domain_map.get(name)

    @property
    def supported_extractors(self) -> list[str]:
        return list(self._extractors.keys())

    def for_link(self, link: str, extractor: str = "") -> LinkExtractorPort | None:
        found = self.get(extract_domain(link))
        if found is None and extractor:
            found = self.get(extractor)
        return found

    async def extract(
        self,
        link: str,
        signal: AbortSignal | None = None,
        extractor: str = "",
    ) -> list[StreamDescriptor]:
        """Extract *link* with the matching extractor; never raises."""
        found = self.for_link(link, extractor)
        if found is None:
            log.info("extractor_not_found", link=link, hint=extractor)
            return []
        try:
            return await found.extract(link, signal)
        except httpx.HTTPError as exc:
            log.warning("extractor_failed", extractor=found.name, link=link, error=str(exc))
        except Exception:
            log.exception("extractor_unexpected_error", extractor=found.name, link=link)
        return []


def default_extractor_registry(
    http_client: httpx.AsyncClient,
    *,
    max_redirect_hops: int = DEFAULT_MAX_REDIRECT_HOPS,
    timeout: float = 15.0,
) -> ExtractorRegistry:
    """Registry with every built-in extractor sharing *http_client*."""
    return ExtractorRegistry(
        [
            HubCloudExtractor(http_client, max_redirect_hops=max_redirect_hops, timeout=timeout),
            GdFlixExtractor(http_client, max_redirect_hops=max_redirect_hops, timeout=timeout),
            GoFileExtractor(http_client, timeout=timeout),
            SuperVideoExtractor(http_client, timeout=timeout),
        ]
    )
