"""Pydantic configuration models with validation."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal, Optional

from pydantic import (
    AliasChoices,
    AliasPath,
    BaseModel,
    Field,
    field_validator,
    model_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

Environment = Literal["dev", "test", "prod"]
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]
LogFormat = Literal["json", "console"]


def _normalize_path(value: Any) -> Path:
    """
    Normalize a path-like value without causing filesystem side-effects.

    This function MUST NOT create directories or files.
    """
    if isinstance(value, Path):
        return value.expanduser()
    if isinstance(value, str):
        return Path(value).expanduser()
    raise TypeError(f"Expected path-like value, got: {type(value)!r}")


class CacheConfig(BaseSettings):
    """Cache configuration (backend-agnostic)."""

    backend: Literal["diskcache", "redis", "memory"] = Field(
        default="diskcache",
        description="Cache backend: 'diskcache' (SQLite), 'redis' or 'memory'",
    )

    # Diskcache settings
    directory: Path = Field(
        default=Path("./.cache/vegacore"),
        alias="dir",
        description="Diskcache SQLite DB path",
    )

    # Redis settings
    redis_url: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL (only when backend=redis)",
    )

    # Shared settings
    ttl_seconds: int = Field(
        default=3600,
        description="Default TTL for cache entries (seconds)",
    )
    max_concurrent: int = Field(
        default=10,
        description="Max parallel cache ops (semaphore limit)",
    )

    model_config = SettingsConfigDict(
        env_prefix="CACHE_",
        case_sensitive=False,
        populate_by_name=True,
    )


class BaseUrlConfig(BaseModel):
    """Where provider base URLs are looked up and how long they stay fresh."""

    directory_url: str = Field(
        default="https://pastebin.com/raw/KgQ4jTy6",
        description="Community directory (plain text, one base URL per line).",
    )
    fallback_url: str = Field(
        default="https://himanshu8443.github.io/providers/modflix.json",
        description="Fallback JSON directory keyed by provider id.",
    )
    ttl_seconds: int = Field(
        default=3600,
        description="How long a resolved base URL is served from cache.",
    )
    timeout_seconds: float = Field(
        default=10.0,
        description="Timeout for directory fetches.",
    )

    @field_validator("ttl_seconds")
    @classmethod
    def _validate_ttl(cls, v: int) -> int:
        if v < 0:
            raise ValueError("base_url.ttl_seconds must be >= 0")
        return v


class ExtractorConfig(BaseModel):
    """Link extractor tuning."""

    max_redirect_hops: int = Field(
        default=2,
        description="HEAD hops followed when resolving a cloud redirect link.",
    )
    timeout_seconds: float = Field(
        default=15.0,
        description="Per-request timeout used by extractors.",
    )

    @field_validator("max_redirect_hops")
    @classmethod
    def _validate_hops(cls, v: int) -> int:
        if v < 1:
            raise ValueError("extractors.max_redirect_hops must be >= 1")
        return v


class StreamConfig(BaseModel):
    """Stream orchestration settings."""

    cache_ttl_seconds: int = Field(
        default=300,
        description="TTL for cached stream lists (seconds). Default 5 min.",
    )
    retry_cooldown_seconds: float = Field(
        default=3.0,
        description="Minimum interval between retries of the same (link, server).",
    )
    max_retries: int = Field(
        default=1,
        description="Retries allowed per (link, server) after a playback error.",
    )
    excluded_qualities: list[str] = Field(
        default_factory=list,
        description="Qualities hidden from stream lists, e.g. ['480p'].",
    )


class ProviderConfig(BaseModel):
    """Installed provider modules."""

    provider_dir: Path = Field(
        default=Path("./providers"),
        description="Directory containing Python provider modules.",
    )
    debug_url_patterns: list[str] = Field(
        default_factory=lambda: ["animeunity.so/top-anime"],
        description="URL substrings whose requests/responses are logged.",
    )
    search_cache_size: int = Field(
        default=10,
        description="Max search result sets kept in memory.",
    )

    @field_validator("provider_dir", mode="before")
    @classmethod
    def _validate_dir(cls, v: Any) -> Path:
        return _normalize_path(v)


class SubtitleConfig(BaseModel):
    """Downloaded subtitle files."""

    directory: Optional[Path] = Field(
        default=Path("./.cache/vegacore/subtitles"),
        description="Where remote subtitle files are cached. None disables caching.",
    )

    @field_validator("directory", mode="before")
    @classmethod
    def _validate_dir(cls, v: Any) -> Optional[Path]:
        if v is None:
            return None
        return _normalize_path(v)


class AppConfig(BaseModel):
    """
    Canonical application configuration (validated, final).

    Note:
    - YAML is expected to be sectioned (http/logging/cache/base_url/...).
    - Environment variables are handled by EnvOverrides(BaseSettings) to allow strict
      precedence control (defaults < YAML < ENV < CLI) in load.py.
    """

    # General
    app_name: str = Field(default="vegacore", description="Application name.")
    environment: Environment = Field(
        default="dev",
        description="Runtime environment (affects defaults like log format).",
    )

    # HTTP (YAML section: http.*)
    http_timeout_seconds: float = Field(
        default=20.0,
        validation_alias=AliasChoices(
            "http_timeout_seconds",
            AliasPath("http", "timeout_seconds"),
        ),
        description="Default HTTP timeout in seconds.",
    )
    http_user_agent: str = Field(
        default=(
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
            "AppleWebKit/537.36 (KHTML, like Gecko) "
            "Chrome/131.0.0.0 Safari/537.36"
        ),
        validation_alias=AliasChoices(
            "http_user_agent",
            AliasPath("http", "user_agent"),
        ),
        description="User-Agent for outgoing HTTP requests.",
    )

    # Logging (YAML section: logging.*)
    log_level: LogLevel = Field(
        default="INFO",
        validation_alias=AliasChoices(
            "log_level",
            AliasPath("logging", "level"),
        ),
        description="Log level.",
    )
    log_format: Optional[LogFormat] = Field(
        default=None,
        validation_alias=AliasChoices(
            "log_format",
            AliasPath("logging", "format"),
        ),
        description=(
            "Log renderer format (console/json). If unset, derived from environment."
        ),
    )

    cache: CacheConfig = Field(default_factory=CacheConfig)
    base_url: BaseUrlConfig = Field(default_factory=BaseUrlConfig)
    extractors: ExtractorConfig = Field(default_factory=ExtractorConfig)
    streams: StreamConfig = Field(default_factory=StreamConfig)
    providers: ProviderConfig = Field(default_factory=ProviderConfig)
    subtitles: SubtitleConfig = Field(default_factory=SubtitleConfig)

    @field_validator("http_timeout_seconds")
    @classmethod
    def _validate_http_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("http_timeout_seconds must be > 0")
        return v

    @model_validator(mode="after")
    def _derive_defaults(self) -> "AppConfig":
        # Default log format: console in dev/test, json in prod.
        if self.log_format is None:
            self.log_format = "json" if self.environment == "prod" else "console"
        return self

    def to_sectioned_dict(self) -> dict[str, Any]:
        """
        Dump configuration in the sectioned shape used by config.yaml/docs.
        """
        return {
            "app_name": self.app_name,
            "environment": self.environment,
            "http": {
                "timeout_seconds": self.http_timeout_seconds,
                "user_agent": self.http_user_agent,
            },
            "logging": {"level": self.log_level, "format": self.log_format},
            "cache": {
                "backend": self.cache.backend,
                "dir": str(self.cache.directory),
                "redis_url": self.cache.redis_url,
                "ttl_seconds": self.cache.ttl_seconds,
            },
            "base_url": self.base_url.model_dump(),
            "extractors": self.extractors.model_dump(),
            "streams": self.streams.model_dump(),
            "providers": self.providers.model_dump(mode="json"),
            "subtitles": self.subtitles.model_dump(mode="json"),
        }


class EnvOverrides(BaseSettings):
    """
    Environment-variable overrides (all optional).

    Intended usage:
    - load.py creates EnvOverrides() to read VEGACORE_* variables,
      converts to dict of set values, merges into YAML/defaults,
      then validates AppConfig.

    Supported env var examples (flat, explicit):
    - VEGACORE_LOG_LEVEL
    - VEGACORE_HTTP_TIMEOUT_SECONDS
    - VEGACORE_PROVIDER_DIR
    - VEGACORE_BASE_URL_TTL_SECONDS
    """

    model_config = SettingsConfigDict(
        env_prefix="VEGACORE_",
        extra="ignore",
        case_sensitive=False,
    )

    app_name: Optional[str] = None
    environment: Optional[Environment] = None

    http_timeout_seconds: Optional[float] = None
    http_user_agent: Optional[str] = None

    log_level: Optional[LogLevel] = None
    log_format: Optional[LogFormat] = None

    cache_backend: Optional[Literal["diskcache", "redis", "memory"]] = None
    cache_dir: Optional[Path] = None

    base_url_directory_url: Optional[str] = None
    base_url_ttl_seconds: Optional[int] = None

    max_redirect_hops: Optional[int] = None

    provider_dir: Optional[Path] = None

    @field_validator("provider_dir", "cache_dir", mode="before")
    @classmethod
    def _validate_paths(cls, v: Any) -> Any:
        if v is None:
            return None
        return _normalize_path(v)

    def to_update_dict(self) -> dict[str, Any]:
        """
        Return only values that were actually provided (non-None), for merging.
        """
        return self.model_dump(exclude_none=True)
