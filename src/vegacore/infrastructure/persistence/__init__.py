from .key_value_store import CacheKeyValueStore
from .stream_list_cache import CacheStreamListRepository

__all__ = ["CacheKeyValueStore", "CacheStreamListRepository"]
