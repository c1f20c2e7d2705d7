"""Helpers for embed pages that hide their player config in packed JS.

Handles Dean Edwards' packer::

    eval(function(p,a,c,k,e,d){...}('payload',base,count,'w0|w1|...'.split('|')))

Every base-N token in the payload indexes the word list.
"""

from __future__ import annotations

import re

_PACKED_START_RE = re.compile(
    r"eval\s*\(\s*function\s*\(\s*p\s*,\s*a\s*,\s*c\s*,\s*k\s*,\s*e\s*,\s*d\s*\)"
)
_PACKED_ARGS_RE = re.compile(
    r"}\('(.*?)',\s*(\d+),\s*(\d+),\s*'([^']*)'\s*\.split\('\|'\)",
    re.DOTALL,
)

# Max characters scanned after each eval( start.
_PACKED_WINDOW = 65536

_SOURCES_RE = re.compile(
    r"""sources\s*:\s*\[\s*\{[^}]*file\s*:\s*["'](https?://[^"']+)"""
)
_FILE_RE = re.compile(
    r"""(?:file|source|src)\s*[:=]\s*["'](https?://[^"']+\.(?:m3u8|mp4)[^"']*)"""
)
_HTML5_SOURCE_RE = re.compile(r"""<(?:source|video)[^>]+src\s*=\s*["'](https?://[^"']+)""")


def unpack(packed: str) -> str | None:
    """Decode one packed block; ``None`` when *packed* is not packer output."""
    match = _PACKED_ARGS_RE.search(packed)
    if not match:
        return None

    payload, base_raw, count_raw, words_raw = match.groups()
    base = int(base_raw)
    if not 2 <= base <= 36:
        return None
    words = words_raw.split("|")
    words.extend([""] * (int(count_raw) - len(words)))

    def _lookup(token: re.Match[str]) -> str:
        word = token.group(0)
        try:
            index = int(word, base)
        except ValueError:
            return word
        if index < len(words) and words[index]:
            return words[index]
        return word

    return re.sub(r"\b\w+\b", _lookup, payload)


def iter_unpacked(html: str) -> list[str]:
    """Unpacked bodies of all packed blocks in *html*."""
    bodies: list[str] = []
    for start in _PACKED_START_RE.finditer(html):
        body = unpack(html[start.start() : start.start() + _PACKED_WINDOW])
        if body:
            bodies.append(body.replace("\\'", "'").replace('\\"', '"'))
    return bodies


def find_player_source(js_or_html: str) -> str | None:
    """JWPlayer ``sources:[{file:..}]`` or a ``file:``-style media URL."""
    match = _SOURCES_RE.search(js_or_html) or _FILE_RE.search(js_or_html)
    return match.group(1) if match else None


def find_html5_source(html: str) -> str | None:
    match = _HTML5_SOURCE_RE.search(html)
    return match.group(1) if match else None
