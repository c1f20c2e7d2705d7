"""Stream resolution use case - episode link to playable stream list."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import replace

import structlog

from vegacore.application.use_cases.provider_manager import ProviderManager
from vegacore.domain.cancellation import AbortSignal
from vegacore.domain.entities import StreamDescriptor, StreamRequest, SubtitleTrack
from vegacore.infrastructure.common.crypto import CryptoUtil
from vegacore.infrastructure.persistence.stream_list_cache import (
    CacheStreamListRepository,
)
from vegacore.infrastructure.stream_retry import StreamRetryGate, is_refetchable_error
from vegacore.infrastructure.subtitles.subtitle_cache import SubtitleCache

log = structlog.get_logger(__name__)

DOWNLOADED_SERVER = "Downloaded"


def filter_qualities(
    streams: list[StreamDescriptor], excluded: Iterable[str]
) -> list[StreamDescriptor]:
    """Drop streams whose ``quality + "p"`` is excluded.

    If that would leave nothing, the unfiltered list is returned.
    """
    excluded_set = set(excluded)
    if not excluded_set:
        return streams
    kept = [s for s in streams if f"{s.quality}p" not in excluded_set]
    return kept or streams


def next_stream(
    streams: Sequence[StreamDescriptor], current: StreamDescriptor | None
) -> StreamDescriptor | None:
    """Stream after *current*, the first one if *current* is unknown, else ``None``."""
    if not streams:
        return None
    try:
        index = list(streams).index(current) if current is not None else -1
    except ValueError:
        index = -1
    if index < len(streams) - 1:
        return streams[index + 1]
    return None


class StreamResolutionUseCase:
    """Resolves a ``StreamRequest`` to playable streams.

    Order: direct (already downloaded) URL, cached list, provider call.
    Fresh lists are quality-filtered, get their subtitles localized and
    are cached for ``streams.cache_ttl_seconds``.
    """

    def __init__(
        self,
        manager: ProviderManager,
        stream_cache: CacheStreamListRepository,
        *,
        subtitles: SubtitleCache | None = None,
        retry_gate: StreamRetryGate | None = None,
        excluded_qualities: Iterable[str] = (),
        crypto: CryptoUtil | None = None,
    ) -> None:
        self._manager = manager
        self._stream_cache = stream_cache
        self._subtitles = subtitles
        self._retry_gate = retry_gate or StreamRetryGate()
        self._excluded = tuple(excluded_qualities)
        self._crypto = crypto or CryptoUtil()

    def cache_key(self, request: StreamRequest) -> str:
        return self._crypto.cache_key(request.provider, request.link, request.type)

    async def get_streams(
        self,
        request: StreamRequest,
        signal: AbortSignal | None = None,
    ) -> list[StreamDescriptor]:
        if not request.link:
            return []

        if request.direct_url:
            return [
                StreamDescriptor(
                    server=DOWNLOADED_SERVER, link=request.direct_url, type="mp4"
                )
            ]

        key = self.cache_key(request)
        cached = await self._stream_cache.get(key)
        if cached:
            log.debug("stream_list_cache_hit", provider=request.provider, link=request.link)
            return cached

        streams = await self._manager.get_stream(
            request.provider, request.link, request.type, signal
        )
        if signal is not None and signal.aborted:
            log.debug("stream_resolution_cancelled", provider=request.provider)
            return []
        if not streams:
            log.info("no_streams_available", provider=request.provider, link=request.link)
            return []

        streams = filter_qualities(streams, self._excluded)
        streams = await self._localize_subtitles(streams, signal)
        if signal is not None and signal.aborted:
            log.debug("stream_resolution_cancelled", provider=request.provider)
            return []
        await self._stream_cache.save(key, streams)
        return streams

    async def refresh(
        self,
        request: StreamRequest,
        signal: AbortSignal | None = None,
    ) -> list[StreamDescriptor]:
        """Drop the cached list and resolve again."""
        await self._stream_cache.invalidate(self.cache_key(request))
        return await self.get_streams(request, signal)

    async def recover(
        self,
        request: StreamRequest,
        streams: Sequence[StreamDescriptor],
        current: StreamDescriptor | None,
        *,
        trace: str = "",
        error_text: str = "",
        signal: AbortSignal | None = None,
    ) -> StreamDescriptor | None:
        """Pick what to play after a playback error.

        Token-expiry errors refetch the list once per (episode, server)
        and prefer the same server. Otherwise, or when the refetch gives
        nothing, the next server in order is returned (``None`` when the
        list is exhausted).
        """
        server = current.server if current is not None else ""
        if (
            request.link
            and is_refetchable_error(trace, error_text)
            and self._retry_gate.should_retry(request.link, server)
        ):
            log.info("stream_retry_refetch", provider=request.provider, server=server)
            refreshed = await self.refresh(request, signal)
            if refreshed:
                for stream in refreshed:
                    if stream.server == server:
                        return stream
                return refreshed[0]

        return next_stream(streams, current)

    @staticmethod
    def external_subtitles(streams: Sequence[StreamDescriptor]) -> list[SubtitleTrack]:
        """Every subtitle track of *streams*, flattened in order."""
        return [track for stream in streams for track in stream.subtitles]

    async def _localize_subtitles(
        self, streams: list[StreamDescriptor], signal: AbortSignal | None
    ) -> list[StreamDescriptor]:
        if self._subtitles is None or not any(s.subtitles for s in streams):
            return streams

        # Tracks inherit their stream's headers for the download.
        flat = [
            replace(track, headers=dict(stream.headers))
            for stream in streams
            for track in stream.subtitles
        ]
        resolved = iter(await self._subtitles.resolve(flat, signal))
        out: list[StreamDescriptor] = []
        for stream in streams:
            tracks = tuple(next(resolved) for _ in stream.subtitles)
            out.append(replace(stream, subtitles=tracks))
        return out
