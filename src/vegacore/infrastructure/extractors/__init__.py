from .gdflix import GdFlixExtractor
from .gofile import GoFileExtractor
from .hubcloud import HubCloudExtractor
from .redirects import DEFAULT_MAX_REDIRECT_HOPS, resolve_redirect_chain
from .registry import ExtractorRegistry, default_extractor_registry, extract_domain
from .supervideo import SuperVideoExtractor

__all__ = [
    "DEFAULT_MAX_REDIRECT_HOPS",
    "ExtractorRegistry",
    "GdFlixExtractor",
    "GoFileExtractor",
    "HubCloudExtractor",
    "SuperVideoExtractor",
    "default_extractor_registry",
    "extract_domain",
    "resolve_redirect_chain",
]
