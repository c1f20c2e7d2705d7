"""Port for the string/JSON key-value store used by the resolver caches."""

from __future__ import annotations

from typing import Any, Protocol


class KeyValueStore(Protocol):
    """String and JSON-object blobs under deterministic string keys.

    Entries never expire on their own; freshness is the caller's business
    (e.g. the base URL resolver stores its own timestamp).
    """

    async def get_string(self, key: str) -> str | None: ...

    async def set_string(self, key: str, value: str) -> None: ...

    async def get_object(self, key: str) -> Any | None: ...

    async def set_object(self, key: str, value: Any) -> None: ...

    async def delete(self, key: str) -> bool: ...
