"""Hardcoded default configuration values."""

from __future__ import annotations

from typing import Any

DEFAULT_CONFIG: dict[str, Any] = {
    "app_name": "vegacore",
    "environment": "dev",
    "http": {
        "timeout_seconds": 20.0,
    },
    "logging": {
        "level": "INFO",
        "format": None,  # Derived from environment in schema.py
    },
    "cache": {
        "backend": "diskcache",
        "dir": "./.cache/vegacore",
        "ttl_seconds": 3600,
    },
    "base_url": {
        "directory_url": "https://pastebin.com/raw/KgQ4jTy6",
        "fallback_url": "https://himanshu8443.github.io/providers/modflix.json",
        "ttl_seconds": 3600,
    },
    "extractors": {
        "max_redirect_hops": 2,
    },
    "streams": {
        "cache_ttl_seconds": 300,
        "retry_cooldown_seconds": 3.0,
        "max_retries": 1,
    },
    "providers": {
        "provider_dir": "./providers",
    },
}
