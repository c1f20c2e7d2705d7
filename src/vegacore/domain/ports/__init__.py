from .analytics import AnalyticsPort
from .base_url import BaseUrlResolverPort
from .cache import CachePort
from .key_value_store import KeyValueStore
from .link_extractor import LinkExtractorPort

__all__ = [
    "AnalyticsPort",
    "BaseUrlResolverPort",
    "CachePort",
    "KeyValueStore",
    "LinkExtractorPort",
]
