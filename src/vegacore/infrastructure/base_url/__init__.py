from .registry import BaseUrlRegistry, default_registry
from .resolver import BaseUrlResolver

__all__ = ["BaseUrlRegistry", "BaseUrlResolver", "default_registry"]
