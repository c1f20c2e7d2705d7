"""Stream list repository backed by CachePort (diskcache/redis/memory)."""

from __future__ import annotations

import json
from typing import Any

import structlog

from vegacore.domain.entities.streams import StreamDescriptor, SubtitleTrack
from vegacore.domain.ports.cache import CachePort

log = structlog.get_logger(__name__)


def _serialize_streams(streams: list[StreamDescriptor]) -> str:
    """Serialize a list of StreamDescriptor to a JSON string."""
    return json.dumps(
        [
            {
                "server": s.server,
                "link": s.link,
                "type": s.type,
                "quality": s.quality,
                "headers": s.headers,
                "subtitles": [
                    {
                        "uri": t.uri,
                        "title": t.title,
                        "language": t.language,
                        "type": t.type,
                    }
                    for t in s.subtitles
                ],
            }
            for s in streams
        ]
    )


def _deserialize_stream(d: dict[str, Any]) -> StreamDescriptor:
    return StreamDescriptor(
        server=d["server"],
        link=d["link"],
        type=d.get("type", "mkv"),
        quality=d.get("quality"),
        headers=d.get("headers") or {},
        subtitles=tuple(
            SubtitleTrack(
                uri=t["uri"],
                title=t.get("title", ""),
                language=t.get("language", ""),
                type=t.get("type", ""),
            )
            for t in d.get("subtitles", [])
        ),
    )


def _deserialize_streams(data: str) -> list[StreamDescriptor]:
    return [_deserialize_stream(d) for d in json.loads(data)]


class CacheStreamListRepository:
    """Stores resolved stream lists per episode via CachePort."""

    def __init__(self, cache: CachePort, ttl_seconds: int = 300) -> None:
        self.cache = cache
        self.ttl = ttl_seconds

    async def save(self, key: str, streams: list[StreamDescriptor]) -> None:
        await self.cache.set(
            f"streams:{key}", _serialize_streams(streams), ttl=self.ttl
        )
        log.debug("stream_list_saved", key=key, count=len(streams), ttl=self.ttl)

    async def get(self, key: str) -> list[StreamDescriptor] | None:
        data = await self.cache.get(f"streams:{key}")
        if data is None:
            return None

        try:
            return _deserialize_streams(data)
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            log.error("stream_list_deserialize_error", key=key, error=str(e))
            return None

    async def invalidate(self, key: str) -> None:
        await self.cache.delete(f"streams:{key}")
