"""Port for resolving landing-page links to playable stream descriptors."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from vegacore.domain.entities.streams import StreamDescriptor

if TYPE_CHECKING:
    from vegacore.domain.cancellation import AbortSignal


@runtime_checkable
class LinkExtractorPort(Protocol):
    """Resolves an intermediate landing page to concrete stream descriptors.

    Implementations follow host-specific redirect and HTML structure
    (JS redirect variables, download buttons, HEAD redirect chains, APIs).
    """

    @property
    def name(self) -> str:
        """Extractor name (e.g. 'hubcloud', 'gofile')."""
        ...

    async def extract(
        self,
        link: str,
        signal: AbortSignal | None = None,
    ) -> list[StreamDescriptor]:
        """Return every descriptor reachable from *link*.

        Never raises: failures yield the descriptors collected so far,
        cancellation yields ``[]``.
        """
        ...
