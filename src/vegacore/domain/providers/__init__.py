from .base import ProviderModule
from .exceptions import (
    DuplicateProviderError,
    OperationAborted,
    ProviderError,
    ProviderLoadError,
    ProviderNotFoundError,
)

__all__ = [
    "DuplicateProviderError",
    "OperationAborted",
    "ProviderError",
    "ProviderLoadError",
    "ProviderModule",
    "ProviderNotFoundError",
]
