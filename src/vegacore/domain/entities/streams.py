"""Domain entities for stream extraction.

Pure value objects; no framework dependencies, no I/O.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Literal
from urllib.parse import urlparse

HttpMethod = Literal["GET", "HEAD", "POST"]


def is_absolute_url(url: str) -> bool:
    """Return ``True`` for ``http(s)://host/...`` URLs and ``file:///`` paths."""
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    if parsed.scheme == "file":
        return parsed.path.startswith("/")
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


@dataclass(frozen=True)
class BaseUrlRule:
    """Hostname rule used to pick a provider's line out of the directory."""

    provider_id: str
    host_match: re.Pattern[str]

    def matches(self, host: str) -> bool:
        return bool(self.host_match.search(host))


@dataclass(frozen=True)
class ResolvedBaseUrl:
    """A provider base URL together with the time it was resolved."""

    provider_id: str
    url: str  # no trailing slash
    resolved_at: float  # epoch seconds

    def is_fresh(self, now: float, ttl_seconds: float) -> bool:
        return now - self.resolved_at < ttl_seconds


@dataclass(frozen=True)
class SubtitleTrack:
    """External subtitle track attached to a stream."""

    uri: str
    title: str = ""
    language: str = ""
    type: str = ""  # "text/vtt", "application/x-subrip", ...
    headers: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class StreamDescriptor:
    """A playable URL with metadata, handed to the playback layer.

    ``server`` doubles as display label and de-duplication key, so it
    must be non-empty. ``link`` must be absolute.
    """

    server: str
    link: str
    type: str = "mkv"  # container hint
    subtitles: tuple[SubtitleTrack, ...] = ()
    headers: dict[str, str] = field(default_factory=dict)
    quality: str | None = None  # "1080", "720", ...

    def __post_init__(self) -> None:
        if not self.server:
            raise ValueError("StreamDescriptor.server must not be empty")
        if not is_absolute_url(self.link):
            raise ValueError(f"StreamDescriptor.link must be absolute: {self.link!r}")


@dataclass(frozen=True)
class RedirectHop:
    """One HEAD hop observed while resolving a hosting intermediary."""

    url: str
    method: HttpMethod
    status: int
    location: str | None = None


@dataclass(frozen=True)
class StreamRequest:
    """Parameters of a "get streams for this episode" call."""

    provider: str
    link: str
    type: str = "movie"  # "movie" | "series"
    direct_url: str | None = None
    title: str = ""
