"""Per-(episode, server) retry gate for playback errors.

Stream links often carry short-lived tokens: a 403/503 during playback
usually means "refetch the stream list", not "the server is dead". The
gate allows ``max_retries`` refetches per ``(episode_link, server)`` key,
spaced at least ``cooldown_seconds`` apart. Once exhausted the caller
moves on to the next server.
"""

from __future__ import annotations

import re
import time
from collections.abc import Callable

_RESPONSE_CODE_RE = re.compile(r"Response code:\s*(\d{3})", re.IGNORECASE)
_BAD_STATUS_RE = re.compile(r"ERROR_CODE_IO_BAD_HTTP_STATUS", re.IGNORECASE)

_REFETCH_STATUSES = frozenset({403, 503})


def status_from_trace(trace: str) -> int | None:
    """HTTP status mentioned in a player error trace (``Response code: 403``)."""
    match = _RESPONSE_CODE_RE.search(trace or "")
    return int(match.group(1)) if match else None


def is_refetchable_error(trace: str = "", error_text: str = "") -> bool:
    """``True`` when a playback error looks like an expired stream token."""
    if status_from_trace(trace) in _REFETCH_STATUSES:
        return True
    return bool(_BAD_STATUS_RE.search(error_text or ""))


class StreamRetryGate:
    """Track retry attempts per ``episode_link|server`` key.

    Not thread-safe; safe for single-threaded asyncio.
    """

    def __init__(
        self,
        *,
        max_retries: int = 1,
        cooldown_seconds: float = 3.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._max_retries = max_retries
        self._cooldown = cooldown_seconds
        self._clock = clock
        self._counts: dict[str, int] = {}
        self._last_attempt: dict[str, float] = {}

    @staticmethod
    def key(episode_link: str, server: str) -> str:
        return f"{episode_link}|{server}"

    def should_retry(self, episode_link: str, server: str) -> bool:
        """Return ``True`` and record the attempt if a retry is allowed."""
        key = self.key(episode_link, server)
        now = self._clock()
        count = self._counts.get(key, 0)
        last = self._last_attempt.get(key)

        if count >= self._max_retries:
            return False
        if last is not None and now - last <= self._cooldown:
            return False

        self._counts[key] = count + 1
        self._last_attempt[key] = now
        return True

    def attempts(self, episode_link: str, server: str) -> int:
        return self._counts.get(self.key(episode_link, server), 0)

    def reset(self, episode_link: str, server: str = "") -> None:
        """Forget attempts for one key, or for every server of *episode_link*."""
        if server:
            keys = [self.key(episode_link, server)]
        else:
            prefix = f"{episode_link}|"
            keys = [k for k in self._counts if k.startswith(prefix)]
        for k in keys:
            self._counts.pop(k, None)
            self._last_attempt.pop(k, None)
