"""Local copies of remote subtitle files.

Players often cannot send custom headers for side-loaded subtitle
tracks, so protected ``http(s)`` subtitles are downloaded once (with the
stream's headers) and handed over as local ``file://`` URIs.
"""

from __future__ import annotations

import asyncio
import re
from collections.abc import Mapping, Sequence
from dataclasses import replace
from pathlib import Path

import httpx
import structlog

from vegacore.domain.cancellation import AbortSignal
from vegacore.domain.entities.streams import SubtitleTrack
from vegacore.domain.providers.exceptions import OperationAborted
from vegacore.infrastructure.common.crypto import CryptoUtil
from vegacore.infrastructure.common.headers import normalize_headers
from vegacore.infrastructure.http.client import request_with_signal

log = structlog.get_logger(__name__)

_REMOTE_RE = re.compile(r"^https?://", re.IGNORECASE)
_EXTENSION_RE = re.compile(r"\.(vtt|srt|ttml)$", re.IGNORECASE)


def is_remote(uri: str) -> bool:
    return bool(_REMOTE_RE.match(uri))


def subtitle_extension(uri: str) -> str:
    """``vtt``, ``srt`` or ``ttml`` from the URI path; ``vtt`` otherwise."""
    clean = uri.split("?", 1)[0].split("#", 1)[0]
    match = _EXTENSION_RE.search(clean)
    return match.group(1).lower() if match else "vtt"


class SubtitleCache:
    """Downloads remote subtitle tracks into *directory*.

    ``directory=None`` disables downloading; tracks are then returned
    unchanged apart from their headers.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        directory: Path | None,
        *,
        crypto: CryptoUtil | None = None,
        timeout: float = 20.0,
    ) -> None:
        self._http = http_client
        self._directory = directory
        self._crypto = crypto or CryptoUtil()
        self._timeout = timeout

    def target_path(self, uri: str) -> Path | None:
        if self._directory is None:
            return None
        name = f"{self._crypto.hash_string(uri)}.{subtitle_extension(uri)}"
        return self._directory / name

    async def resolve(
        self,
        tracks: Sequence[SubtitleTrack],
        signal: AbortSignal | None = None,
    ) -> list[SubtitleTrack]:
        """Return *tracks* in order, remote ones pointing at local copies.

        Identical URIs are downloaded once per call. Failed downloads keep
        the remote URI, and so do downloads stopped by *signal*. Returned
        tracks carry no headers.
        """
        if not tracks:
            return []

        pending: dict[str, asyncio.Task[str]] = {}
        for track in tracks:
            uri = track.uri.strip()
            if uri and is_remote(uri) and uri not in pending:
                pending[uri] = asyncio.ensure_future(
                    self._localize(uri, track.headers, signal)
                )

        if pending:
            await asyncio.gather(*pending.values())

        resolved: list[SubtitleTrack] = []
        for track in tracks:
            uri = track.uri.strip()
            task = pending.get(uri)
            local_uri = task.result() if task is not None else track.uri
            resolved.append(replace(track, uri=local_uri, headers={}))

        log.debug("subtitles_resolved", count=len(resolved), downloads=len(pending))
        return resolved

    async def _localize(
        self,
        uri: str,
        headers: Mapping[str, str],
        signal: AbortSignal | None,
    ) -> str:
        target = self.target_path(uri)
        if target is None:
            return uri

        try:
            if await asyncio.to_thread(_has_content, target):
                log.debug("subtitle_cache_hit", uri=uri, path=str(target))
                return target.resolve().as_uri()

            resp = await request_with_signal(
                self._http,
                "GET",
                uri,
                signal=signal,
                headers=normalize_headers(headers),
                timeout=self._timeout,
            )
            resp.raise_for_status()
            await asyncio.to_thread(_write_file, target, resp.content)
        except OperationAborted:
            log.debug("subtitle_download_cancelled", uri=uri)
            return uri
        except (httpx.HTTPError, httpx.InvalidURL, OSError) as exc:
            log.warning("subtitle_download_failed", uri=uri, error=str(exc))
            return uri

        log.info("subtitle_downloaded", uri=uri, path=str(target), size=len(resp.content))
        return target.resolve().as_uri()


def _has_content(path: Path) -> bool:
    return path.is_file() and path.stat().st_size > 0


def _write_file(path: Path, data: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
