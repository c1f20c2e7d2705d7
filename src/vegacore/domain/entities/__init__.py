from .content import ContentInfo, EpisodeLink, LinkGroup, Post
from .outcome import Cancelled, Empty, Ok, Outcome, unwrap_or
from .streams import (
    BaseUrlRule,
    RedirectHop,
    ResolvedBaseUrl,
    StreamDescriptor,
    StreamRequest,
    SubtitleTrack,
    is_absolute_url,
)

__all__ = [
    "BaseUrlRule",
    "Cancelled",
    "ContentInfo",
    "Empty",
    "EpisodeLink",
    "LinkGroup",
    "Ok",
    "Outcome",
    "Post",
    "RedirectHop",
    "ResolvedBaseUrl",
    "StreamDescriptor",
    "StreamRequest",
    "SubtitleTrack",
    "is_absolute_url",
    "unwrap_or",
]
