from .subtitle_cache import SubtitleCache

__all__ = ["SubtitleCache"]
