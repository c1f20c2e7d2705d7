from .provider_manager import ProviderManager
from .stream_resolution import StreamResolutionUseCase, filter_qualities, next_stream

__all__ = [
    "ProviderManager",
    "StreamResolutionUseCase",
    "filter_qualities",
    "next_stream",
]
