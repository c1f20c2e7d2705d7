"""CSS-selector-based HTML extraction with fallback chains.

Every extraction function accepts a primary selector and optional
*fallback_selectors*. The first selector that yields at least one
match wins.
"""

from __future__ import annotations

from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag


def parse_html(html: str) -> BeautifulSoup:
    """Parse an HTML string into a BeautifulSoup tree (``lxml`` parser)."""
    return BeautifulSoup(html, "lxml")


def select_items(
    root: BeautifulSoup | Tag,
    selector: str,
    *fallback_selectors: str,
) -> list[Tag]:
    """Select elements via CSS with a fallback chain.

    Results keep document order, also for comma-separated selector groups.
    """
    for sel in (selector, *fallback_selectors):
        items = root.select(sel)
        if items:
            return items
    return []


def extract_text(
    element: BeautifulSoup | Tag,
    selector: str,
    *fallback_selectors: str,
    default: str = "",
    strip: bool = True,
) -> str:
    """Extract text from the first matching child element.

    With ``selector=""`` the element's own text is returned.
    """
    if selector == "":
        text = element.get_text(strip=strip)
        return text if text else default

    for sel in (selector, *fallback_selectors):
        match = element.select_one(sel)
        if match:
            text = match.get_text(strip=strip)
            if text:
                return text
    return default


def extract_attr(
    element: BeautifulSoup | Tag,
    selector: str,
    attr: str,
    *fallback_selectors: str,
    default: str = "",
) -> str:
    """Extract an HTML attribute from the first matching child element.

    With ``selector=""`` the attribute is read from *element* itself.
    """
    if selector == "":
        val = element.get(attr)
        return str(val) if val else default

    for sel in (selector, *fallback_selectors):
        match = element.select_one(sel)
        if match:
            val = match.get(attr)
            if val:
                return str(val)
    return default


def parent_attr(element: BeautifulSoup | Tag, selector: str, attr: str) -> str:
    """Read *attr* from the parent of the first element matching *selector*.

    Used for icon-in-anchor markup (``<a href=..><i class="fa-..."></i></a>``).
    """
    match = element.select_one(selector)
    if match is None or match.parent is None:
        return ""
    val = match.parent.get(attr)
    return str(val) if val else ""


def extract_links(
    element: BeautifulSoup | Tag,
    selector: str = "a[href]",
    *fallback_selectors: str,
    base_url: str = "",
) -> list[dict[str, str]]:
    """Extract all links matching *selector*.

    Returns a list of ``{"text": ..., "href": ...}`` dicts.
    """
    tags = select_items(element, selector, *fallback_selectors)
    results: list[dict[str, str]] = []
    for tag in tags:
        href = tag.get("href")
        if not href:
            continue
        href_str = str(href)
        if base_url:
            href_str = urljoin(base_url, href_str)
        results.append(
            {
                "text": tag.get_text(strip=True),
                "href": href_str,
            }
        )
    return results
