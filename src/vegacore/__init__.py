"""Provider extraction and stream resolution core."""

__version__ = "0.1.0"
