"""Common request headers and header/URL normalization helpers."""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import Any
from urllib.parse import urlparse

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/131.0.0.0 Safari/537.36"
)


def build_common_headers(user_agent: str = DEFAULT_USER_AGENT) -> Mapping[str, str]:
    """Browser-like headers sent with every provider and extractor request."""
    return MappingProxyType(
        {
            "User-Agent": user_agent,
            "Accept": (
                "text/html,application/xhtml+xml,application/xml;q=0.9,"
                "image/avif,image/webp,*/*;q=0.8"
            ),
            "Accept-Language": "en-US,en;q=0.9",
            "Cache-Control": "no-cache",
            "Pragma": "no-cache",
            "Sec-Fetch-Dest": "document",
            "Sec-Fetch-Mode": "navigate",
            "Sec-Fetch-Site": "none",
            "Upgrade-Insecure-Requests": "1",
        }
    )


COMMON_HEADERS = build_common_headers()


def normalize_headers(headers: Mapping[str, Any] | None) -> dict[str, str] | None:
    """Drop empty keys/values and stringify the rest.

    Returns ``None`` when nothing is left, so callers can pass the
    result straight to httpx.
    """
    if not headers or not isinstance(headers, Mapping):
        return None
    cleaned = {
        str(key): str(value)
        for key, value in headers.items()
        if key and value is not None and value != ""
    }
    return cleaned or None


def origin_of(url: str) -> str:
    """Return ``scheme://host[:port]`` of *url* (``""`` if unparseable)."""
    try:
        parsed = urlparse(url)
    except ValueError:
        return ""
    if not parsed.scheme or not parsed.netloc:
        return ""
    return f"{parsed.scheme}://{parsed.netloc}"


def hostname_of(url: str) -> str:
    """Return the lower-cased hostname of *url* (``""`` if unparseable)."""
    try:
        return (urlparse(url).hostname or "").lower()
    except ValueError:
        return ""
