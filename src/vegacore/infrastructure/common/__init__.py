from .crypto import CryptoUtil
from .headers import COMMON_HEADERS, build_common_headers, normalize_headers
from .html_selectors import parse_html
from .lru_cache import BoundedLRUCache

__all__ = [
    "COMMON_HEADERS",
    "BoundedLRUCache",
    "CryptoUtil",
    "build_common_headers",
    "normalize_headers",
    "parse_html",
]
