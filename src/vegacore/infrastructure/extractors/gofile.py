"""GoFile extractor - lists the files of a GoFile folder via its API.

URLs follow the pattern ``https://gofile.io/d/{contentId}``.

Listing requires an ephemeral guest token::

    POST https://api.gofile.io/accounts -> {"status": "ok", "data": {"token": "..."}}

Folder contents come from ``GET https://api.gofile.io/contents/{contentId}``
(Bearer token). Download links only work with the token as
``accountToken`` cookie, so every descriptor carries that header.
"""

from __future__ import annotations

import re
import time
from pathlib import PurePosixPath
from typing import Any
from urllib.parse import urlparse

import httpx
import structlog

from vegacore.domain.cancellation import AbortSignal
from vegacore.domain.entities.streams import StreamDescriptor
from vegacore.domain.providers.exceptions import OperationAborted
from vegacore.infrastructure.http.client import request_with_signal

log = structlog.get_logger(__name__)

_CONTENT_ID_RE = re.compile(r"^/d/([A-Za-z0-9]+)/?$")

_API_BASE = "https://api.gofile.io"

_API_HEADERS = {
    "Origin": "https://gofile.io",
    "Referer": "https://gofile.io/",
}

# Token TTL: 25 minutes (GoFile tokens last ~30 min)
_TOKEN_TTL = 25 * 60

_KNOWN_TYPES = {"mkv", "mp4", "m3u8", "webm", "avi"}


def extract_content_id(url: str) -> str | None:
    """Extract the content ID from a GoFile URL."""
    try:
        parsed = urlparse(url)
    except ValueError:
        return None
    if "gofile" not in (parsed.hostname or ""):
        return None
    match = _CONTENT_ID_RE.search(parsed.path)
    return match.group(1) if match else None


def file_type(name: str) -> str:
    suffix = PurePosixPath(name).suffix.lstrip(".").lower()
    return suffix if suffix in _KNOWN_TYPES else "mkv"


class GoFileExtractor:
    """Resolves GoFile folder links to one descriptor per contained file."""

    def __init__(self, http_client: httpx.AsyncClient, *, timeout: float = 15.0) -> None:
        self._http = http_client
        self._timeout = timeout
        self._token: str | None = None
        self._token_ts = 0.0

    @property
    def name(self) -> str:
        return "gofile"

    @property
    def supported_domains(self) -> frozenset[str]:
        return frozenset({"gofile"})

    async def _get_guest_token(self, signal: AbortSignal | None) -> str | None:
        """Obtain or reuse the cached guest token."""
        now = time.monotonic()
        if self._token and (now - self._token_ts) < _TOKEN_TTL:
            return self._token

        try:
            resp = await request_with_signal(
                self._http,
                "POST",
                f"{_API_BASE}/accounts",
                signal=signal,
                json={},
                headers=_API_HEADERS,
                timeout=self._timeout,
            )
        except httpx.HTTPError:
            log.warning("gofile_token_request_failed")
            return None

        if resp.status_code != 200:
            log.warning("gofile_token_http_error", status=resp.status_code)
            return None

        try:
            data = resp.json()
        except ValueError:
            log.warning("gofile_token_invalid_json")
            return None

        if not isinstance(data, dict):
            log.warning("gofile_token_unexpected_payload", kind=type(data).__name__)
            return None

        payload = data.get("data") if data.get("status") == "ok" else None
        token = payload.get("token") if isinstance(payload, dict) else None
        if not token or not isinstance(token, str):
            log.warning("gofile_token_missing", status=data.get("status"))
            return None

        self._token = token
        self._token_ts = now
        log.debug("gofile_token_acquired")
        return token

    async def extract(
        self,
        link: str,
        signal: AbortSignal | None = None,
    ) -> list[StreamDescriptor]:
        content_id = extract_content_id(link)
        if not content_id:
            log.warning("gofile_invalid_url", url=link)
            return []

        try:
            return await self._list_files(content_id, signal)
        except OperationAborted:
            log.debug("extract_cancelled", extractor=self.name, link=link)
            return []

    async def _list_files(
        self, content_id: str, signal: AbortSignal | None
    ) -> list[StreamDescriptor]:
        token = await self._get_guest_token(signal)
        if not token:
            log.warning("gofile_no_token", content_id=content_id)
            return []

        try:
            resp = await request_with_signal(
                self._http,
                "GET",
                f"{_API_BASE}/contents/{content_id}",
                signal=signal,
                headers={"Authorization": f"Bearer {token}", **_API_HEADERS},
                timeout=self._timeout,
            )
        except httpx.HTTPError:
            log.warning("gofile_request_failed", content_id=content_id)
            return []

        if resp.status_code == 404:
            log.info("gofile_content_not_found", content_id=content_id)
            return []
        if resp.status_code != 200:
            log.warning("gofile_http_error", status=resp.status_code, content_id=content_id)
            return []

        try:
            data = resp.json()
        except ValueError:
            log.warning("gofile_invalid_json", content_id=content_id)
            return []

        if not isinstance(data, dict):
            log.warning("gofile_unexpected_payload", content_id=content_id)
            return []

        if data.get("status") != "ok":
            log.info("gofile_content_offline", content_id=content_id, status=data.get("status"))
            return []

        streams: list[StreamDescriptor] = []
        for child in _children(data):
            descriptor = self._to_descriptor(child, token)
            if descriptor is not None:
                streams.append(descriptor)
        log.debug("gofile_resolved", content_id=content_id, count=len(streams))
        return streams

    @staticmethod
    def _to_descriptor(child: dict[str, Any], token: str) -> StreamDescriptor | None:
        if child.get("type") != "file" or not child.get("link"):
            return None
        try:
            return StreamDescriptor(
                server="GoFile",
                link=str(child["link"]),
                type=file_type(str(child.get("name", ""))),
                headers={"Cookie": f"accountToken={token}"},
            )
        except ValueError:
            return None


def _children(data: dict[str, Any]) -> list[dict[str, Any]]:
    payload = data.get("data")
    if not isinstance(payload, dict):
        return []
    children = payload.get("children") or {}
    if isinstance(children, dict):
        return [c for c in children.values() if isinstance(c, dict)]
    return []
