from .context import ProviderContext, build_provider_context
from .loader import load_provider
from .registry import ProviderRegistry

__all__ = [
    "ProviderContext",
    "ProviderRegistry",
    "build_provider_context",
    "load_provider",
]
