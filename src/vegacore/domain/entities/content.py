"""Domain entities returned by provider modules."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Post:
    """A catalog entry on a provider listing or search page."""

    title: str
    link: str
    image: str = ""
    provider: str = ""


@dataclass(frozen=True)
class EpisodeLink:
    """An episode entry whose ``link`` is passed to ``get_stream``."""

    title: str
    link: str


@dataclass(frozen=True)
class LinkGroup:
    """A season / quality group on a content info page."""

    title: str
    quality: str = ""
    episodes_link: str = ""
    direct_links: list[EpisodeLink] = field(default_factory=list)


@dataclass(frozen=True)
class ContentInfo:
    """Metadata of a title as scraped from the provider."""

    title: str
    link: str
    synopsis: str = ""
    image: str = ""
    type: str = "movie"
    imdb_id: str = ""
    link_list: list[LinkGroup] = field(default_factory=list)
    extra: dict[str, Any] = field(default_factory=dict)
