"""HubCloud / VCloud landing-page extractor.

The landing page carries its real download page in a JS variable::

    var url = 'https://gamerxyt.com/hubcloud.php?host=hubcloud&id=..&r=<base64>';

The ``r=`` parameter, when present, is the base64 of the final target.
The download page lists one button per hosting intermediary.
"""

from __future__ import annotations

import base64
import binascii
import re

import structlog

from vegacore.domain.cancellation import AbortSignal
from vegacore.domain.entities.streams import StreamDescriptor, is_absolute_url
from vegacore.infrastructure.common.html_selectors import parent_attr, parse_html
from vegacore.infrastructure.extractors.base import (
    AnchorRule,
    MultiHopExtractor,
    contains,
    emit,
    generic_media,
    match_everything,
    pixeldrain,
)

log = structlog.get_logger(__name__)

_VAR_URL_RE = re.compile(r"var\s+url\s*=\s*'([^']+)';")

_DOWNLOAD_ICON = ".fa-file-download.fa-lg"


def decode_redirect_param(value: str) -> str:
    """Base64-decode the ``r=`` part of *value*.

    Returns ``""`` when there is no ``r=`` part or the decoded text is
    neither an absolute http(s) URL nor a root-relative path.
    """
    parts = value.split("r=")
    if len(parts) < 2 or not parts[1]:
        return ""
    encoded = parts[1]
    try:
        decoded = base64.b64decode(
            encoded + "=" * (-len(encoded) % 4), validate=False
        ).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return ""
    if is_absolute_url(decoded) or decoded.startswith("/"):
        return decoded
    return ""


def scheme_and_host(link: str) -> str:
    """``https://host/a/b`` -> ``https://host``."""
    return "/".join(link.split("/")[:3])


async def _cloud_redirect(
    extractor: MultiHopExtractor, href: str, signal: AbortSignal | None
) -> StreamDescriptor | None:
    final_url = await extractor.follow_redirects(href, signal)
    return StreamDescriptor(server="hubcloud", link=final_url)


class HubCloudExtractor(MultiHopExtractor):
    """Resolves hubcloud/vcloud links to direct download descriptors."""

    extractor_name = "hubcloud"
    domains = frozenset({"hubcloud", "vcloud"})
    anchor_selector = ".btn-success.btn-lg.h6,.btn-danger,.btn-secondary"
    rules = (
        AnchorRule("file-drop", contains("pixeld"), pixeldrain),
        AnchorRule("worker", contains(".dev", unless="/?id="), emit("Cf Worker")),
        AnchorRule("cloud-redirect", contains("hubcloud", "/?id="), _cloud_redirect),
        AnchorRule("storage-bucket", contains("cloudflarestorage"), emit("CfStorage")),
        AnchorRule("fast-download", contains("fastdl", "fsl."), emit("FastDl")),
        AnchorRule("cdn", contains("hubcdn", unless="/?id="), emit("HubCdn")),
        AnchorRule("generic-media", match_everything, generic_media),
    )

    async def discover_target(self, link: str, signal: AbortSignal | None) -> str:
        html = await self.fetch_text(link, signal)
        match = _VAR_URL_RE.search(html)
        raw = match.group(1) if match else ""

        target = (
            (decode_redirect_param(raw) if raw else "")
            or raw
            or parent_attr(parse_html(html), _DOWNLOAD_ICON, "href")
            or link
        )
        if target.startswith("/"):
            target = scheme_and_host(link) + target
        log.debug("hubcloud_target_discovered", link=link, target=target)
        return target
