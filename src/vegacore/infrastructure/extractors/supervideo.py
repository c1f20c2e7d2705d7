"""SuperVideo embed extractor.

SuperVideo runs on XFileSharingPro: the embed page configures JWPlayer
either in plain JS, through an HTML5 ``<source>`` tag or inside a packed
``eval(function(p,a,c,k,e,d)...)`` block.
"""

from __future__ import annotations

import re

import httpx
import structlog

from vegacore.domain.cancellation import AbortSignal
from vegacore.domain.entities.streams import StreamDescriptor
from vegacore.domain.providers.exceptions import OperationAborted
from vegacore.infrastructure.common.headers import origin_of
from vegacore.infrastructure.extractors.packed_js import (
    find_html5_source,
    find_player_source,
    iter_unpacked,
)
from vegacore.infrastructure.http.client import request_with_signal

log = structlog.get_logger(__name__)

_FILE_ID_RE = re.compile(r"(?:/(?:d|v|embed-)?)?([a-z0-9]{12})")

_OFFLINE_MARKERS = ('class="fake-signup"', "File is no longer available")


def embed_url(url: str) -> str:
    """Rewrite ``/<fileid>`` or ``/d/<fileid>`` to the ``/e/<fileid>`` embed form."""
    if "/e/" in url:
        return url
    path = url.split("//", 1)[-1].split("/", 1)[-1]
    match = _FILE_ID_RE.search(path)
    if not match:
        return url
    origin = origin_of(url) or "https://supervideo.cc"
    return f"{origin}/e/{match.group(1)}"


def find_video_url(html: str) -> str | None:
    """Player sources, then HTML5 tags, then packed JS."""
    video_url = find_player_source(html) or find_html5_source(html)
    if video_url:
        return video_url
    for body in iter_unpacked(html):
        video_url = find_player_source(body)
        if video_url:
            return video_url
    return None


class SuperVideoExtractor:
    """Resolves SuperVideo pages to a single HLS or MP4 descriptor."""

    def __init__(self, http_client: httpx.AsyncClient, *, timeout: float = 15.0) -> None:
        self._http = http_client
        self._timeout = timeout

    @property
    def name(self) -> str:
        return "supervideo"

    @property
    def supported_domains(self) -> frozenset[str]:
        return frozenset({"supervideo"})

    async def extract(
        self,
        link: str,
        signal: AbortSignal | None = None,
    ) -> list[StreamDescriptor]:
        url = embed_url(link)
        try:
            resp = await request_with_signal(
                self._http,
                "GET",
                url,
                signal=signal,
                headers={"Referer": url},
                timeout=self._timeout,
            )
        except OperationAborted:
            log.debug("extract_cancelled", extractor=self.name, link=link)
            return []
        except (httpx.HTTPError, httpx.InvalidURL):
            log.warning("supervideo_request_failed", url=url)
            return []

        if resp.status_code != 200:
            log.warning("supervideo_http_error", status=resp.status_code, url=url)
            return []

        html = resp.text
        if any(marker in html for marker in _OFFLINE_MARKERS):
            log.info("supervideo_offline", url=url)
            return []

        video_url = find_video_url(html)
        if not video_url:
            log.warning("supervideo_extraction_failed", url=url)
            return []

        return [
            StreamDescriptor(
                server="SuperVideo",
                link=video_url,
                type="m3u8" if ".m3u8" in video_url else "mp4",
                headers={"Referer": f"{origin_of(url)}/"},
            )
        ]
