"""Provider registry with lazy loading and in-memory caching."""

from __future__ import annotations

from pathlib import Path

import structlog

from vegacore.domain.providers import (
    DuplicateProviderError,
    ProviderError,
    ProviderModule,
    ProviderNotFoundError,
)

from .loader import load_provider

log = structlog.get_logger(__name__)


class ProviderRegistry:
    """
    Lazy-loading registry of Python provider modules.

    discover():
      - indexes ``*.py`` files only (no code execution)

    get()/list_names()/load_all():
      - import modules on demand and cache them by provider name
    """

    def __init__(self, provider_dir: Path) -> None:
        self._provider_dir = provider_dir
        self._discovered = False
        self._paths: list[Path] = []
        self._cache: dict[str, ProviderModule] = {}
        self._names_by_path: dict[Path, str] = {}

    @property
    def provider_dir(self) -> Path:
        return self._provider_dir

    def discover(self) -> None:
        if self._discovered:
            return

        self._discovered = True
        self._paths = []

        if not self._provider_dir.is_dir():
            log.warning("provider_directory_not_found", directory=str(self._provider_dir))
            return

        self._paths = [
            path
            for path in sorted(self._provider_dir.iterdir(), key=lambda p: p.name)
            if path.is_file() and path.suffix == ".py" and not path.name.startswith("_")
        ]

        log.info(
            "providers_discovered",
            count=len(self._paths),
            directory=str(self._provider_dir),
        )

    def list_names(self) -> list[str]:
        """Names of all loadable providers; broken files are skipped."""
        self.discover()

        names: set[str] = set()
        for path in self._paths:
            try:
                names.add(self._load(path).name)
            except ProviderError:
                continue
        return sorted(names)

    def get(self, name: str) -> ProviderModule:
        self.discover()

        cached = self._cache.get(name)
        if cached is not None:
            return cached

        for path in self._paths:
            if path in self._names_by_path:
                continue
            try:
                provider = self._load(path)
            except ProviderError:
                continue
            if provider.name == name:
                return provider

        raise ProviderNotFoundError(f"Provider '{name}' not found")

    def load_all(self) -> None:
        """
        Force-load all discovered providers.

        Raises DuplicateProviderError or ProviderLoadError.
        """
        self.discover()

        seen: dict[str, Path] = {}
        for path in self._paths:
            provider = self._load(path)
            if provider.name in seen and seen[provider.name] != path:
                raise DuplicateProviderError(
                    f"Provider name '{provider.name}' already exists"
                )
            seen[provider.name] = path

    def _load(self, path: Path) -> ProviderModule:
        known = self._names_by_path.get(path)
        if known is not None and known in self._cache:
            return self._cache[known]

        provider = load_provider(path)
        self._names_by_path[path] = provider.name
        self._cache.setdefault(provider.name, provider)
        log.info("provider_loaded", provider=provider.name, provider_file=str(path))
        return provider
