"""GDFlix landing-page extractor.

The file page lists buttons for a file-drop mirror, an "instant" CDN
link that redirects to a URL carrying the real target in ``url=``, and
plain storage/fast-download mirrors.
"""

from __future__ import annotations

from urllib.parse import parse_qs, urlparse

from vegacore.domain.cancellation import AbortSignal
from vegacore.domain.entities.streams import StreamDescriptor
from vegacore.infrastructure.extractors.base import (
    AnchorRule,
    MultiHopExtractor,
    contains,
    emit,
    generic_media,
    match_everything,
    pixeldrain,
)


def url_param(url: str) -> str | None:
    """Value of the ``url=`` query parameter, if any."""
    values = parse_qs(urlparse(url).query).get("url")
    return values[0] if values else None


async def _instant(
    extractor: MultiHopExtractor, href: str, signal: AbortSignal | None
) -> StreamDescriptor | None:
    direct = url_param(href)
    if direct is None:
        final_url = await extractor.follow_redirects(href, signal)
        direct = url_param(final_url) or final_url
    return StreamDescriptor(server="Gdflix Instant", link=direct)


class GdFlixExtractor(MultiHopExtractor):
    """Resolves gdflix file pages to direct download descriptors."""

    extractor_name = "gdflix"
    domains = frozenset({"gdflix", "gdlink"})
    anchor_selector = "a.btn[href]"
    rules = (
        AnchorRule("file-drop", contains("pixeld"), pixeldrain),
        AnchorRule("instant", contains("instant", "busycdn"), _instant),
        AnchorRule("storage-bucket", contains("cloudflarestorage"), emit("CfStorage")),
        AnchorRule("fast-download", contains("fastdl", "fsl."), emit("FastDl")),
        AnchorRule("generic-media", match_everything, generic_media),
    )
