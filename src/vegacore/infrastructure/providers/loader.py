from __future__ import annotations

import importlib.util
import inspect
import traceback
from pathlib import Path
from types import ModuleType
from typing import Any

import structlog

from vegacore.domain.providers import ProviderLoadError, ProviderModule

log = structlog.get_logger(__name__)

_REQUIRED_METHODS = ("get_posts", "get_meta", "get_stream")


def _import_module_from_path(path: Path) -> ModuleType:
    module_name = f"vegacore_provider_{path.stem}"
    spec = importlib.util.spec_from_file_location(module_name, str(path))
    if spec is None or spec.loader is None:
        raise ProviderLoadError(f"Could not create import spec for {path}")

    module = importlib.util.module_from_spec(spec)
    try:
        spec.loader.exec_module(module)
    except SyntaxError as e:
        tb = traceback.format_exc()
        raise ProviderLoadError(f"SyntaxError while importing {path}:\n{tb}") from e
    except Exception as e:
        tb = traceback.format_exc()
        raise ProviderLoadError(f"Error while importing {path}:\n{tb}") from e

    return module


def _validate_provider(provider: Any) -> None:
    name = getattr(provider, "name", None)
    if not isinstance(name, str) or not name:
        raise ProviderLoadError("Provider must have non-empty 'name' attribute")

    for method in _REQUIRED_METHODS:
        fn = getattr(provider, method, None)
        if fn is None:
            raise ProviderLoadError(f"Provider '{name}' must have '{method}' method")
        if not inspect.iscoroutinefunction(fn):
            raise ProviderLoadError(f"Provider '{name}'.{method} must be async")


def load_provider(path: Path) -> ProviderModule:
    """Import *path* and return its module-level ``provider`` object."""
    try:
        module = _import_module_from_path(path)
        if not hasattr(module, "provider"):
            raise ProviderLoadError("Provider module must export 'provider' variable")

        provider: Any = getattr(module, "provider")
        _validate_provider(provider)
        return provider
    except ProviderLoadError as e:
        log.error(
            "provider_load_failed",
            provider_file=str(path),
            error_type=type(e).__name__,
            error_message=str(e),
        )
        raise
