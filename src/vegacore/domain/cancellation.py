"""Cooperative cancellation signal threaded through extraction calls.

The caller owns an ``AbortController`` (typically one per screen or
request) and hands its ``signal`` down. Any pending request observes
the signal and stops promptly.
"""

from __future__ import annotations

import asyncio

from vegacore.domain.providers.exceptions import OperationAborted


class AbortSignal:
    """Read side of a cancellation token."""

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self._reason = ""

    @property
    def aborted(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> str:
        return self._reason

    def raise_if_aborted(self) -> None:
        if self._event.is_set():
            raise OperationAborted(self._reason or "aborted")

    async def wait(self) -> None:
        """Suspend until the signal fires."""
        await self._event.wait()

    def _fire(self, reason: str) -> None:
        if not self._event.is_set():
            self._reason = reason
            self._event.set()


class AbortController:
    """Write side of a cancellation token."""

    def __init__(self) -> None:
        self.signal = AbortSignal()

    def abort(self, reason: str = "aborted") -> None:
        self.signal._fire(reason)  # noqa: SLF001


def aborted_signal(reason: str = "aborted") -> AbortSignal:
    """Return a signal that has already fired."""
    controller = AbortController()
    controller.abort(reason)
    return controller.signal
