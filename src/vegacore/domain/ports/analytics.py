"""Optional analytics / crash reporting capability."""

from __future__ import annotations

from typing import Any, Protocol


class AnalyticsPort(Protocol):
    """Injected at startup when available; ``None`` otherwise.

    Provider and extractor code never imports an analytics backend itself.
    """

    def record_event(self, name: str, **attributes: Any) -> None: ...

    def record_error(self, error: BaseException, **attributes: Any) -> None: ...
