"""Deterministic hashing for cache keys and cached file names."""

from __future__ import annotations

import hashlib


class CryptoUtil:
    """Hashing capability shared with provider modules.

    Digests are stable across processes and platforms, so keys derived
    from remote URLs can name files and cache entries.
    """

    def digest(self, value: str, algorithm: str = "sha256") -> str:
        """Hex digest of *value* (UTF-8) with the given hashlib algorithm."""
        return hashlib.new(algorithm, value.encode("utf-8")).hexdigest()

    def hash_string(self, value: str) -> str:
        """Short stable hash, used for cached subtitle file names."""
        return hashlib.sha1(value.encode("utf-8")).hexdigest()[:16]  # noqa: S324

    def cache_key(self, namespace: str, *parts: str) -> str:
        """Build ``namespace:<digest>`` from the joined *parts*."""
        return f"{namespace}:{self.digest('|'.join(parts))[:32]}"
