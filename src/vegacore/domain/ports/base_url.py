"""Port for provider base URL resolution."""

from __future__ import annotations

from typing import Protocol


class BaseUrlResolverPort(Protocol):
    """Produces a currently valid base URL for a provider.

    ``""`` means "use the provider module's hard-coded default"; the call
    never raises.
    """

    async def get_base_url(self, provider_id: str) -> str: ...
