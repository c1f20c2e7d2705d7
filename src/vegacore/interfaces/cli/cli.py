from __future__ import annotations

import argparse
import asyncio
import json
import sys
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import structlog

from vegacore.domain.cancellation import AbortController
from vegacore.domain.entities import StreamDescriptor
from vegacore.infrastructure.config import AppConfig, load_config
from vegacore.infrastructure.logging.setup import configure_logging
from vegacore.infrastructure.providers.context import build_provider_context

log = structlog.get_logger(__name__)


def _parse_args(argv: Iterable[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="vegacore")

    # Config wiring flags (no business logic)
    parser.add_argument(
        "--config",
        default=None,
        help="Path to YAML config file.",
    )
    parser.add_argument(
        "--dotenv",
        default=None,
        help="Path to .env file.",
    )
    parser.add_argument(
        "--cache-backend",
        default=None,
        choices=["diskcache", "redis", "memory"],
        help="Override cache backend.",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Override log level.",
    )
    parser.add_argument(
        "--log-format",
        default=None,
        choices=["json", "console"],
        help="Override log format.",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    base_url = sub.add_parser("base-url", help="Resolve a provider's current base URL.")
    base_url.add_argument("provider", help="Provider id, e.g. 'animeunity'.")

    extract = sub.add_parser("extract", help="Extract stream links from a landing page.")
    extract.add_argument("link", help="Landing page URL.")
    extract.add_argument(
        "--extractor",
        default="",
        help="Extractor to use when the URL domain is not recognised.",
    )
    extract.add_argument(
        "--max-hops",
        default=None,
        type=int,
        help="Override extractors.max_redirect_hops.",
    )

    return parser.parse_args(argv)


def _stream_to_dict(stream: StreamDescriptor) -> dict[str, Any]:
    out: dict[str, Any] = {"server": stream.server, "link": stream.link, "type": stream.type}
    if stream.headers:
        out["headers"] = stream.headers
    if stream.quality:
        out["quality"] = stream.quality
    return out


async def _run_base_url(config: AppConfig, provider_id: str) -> int:
    async with build_provider_context(config) as context:
        url = await context.get_base_url(provider_id)
    print(json.dumps({"provider": provider_id, "base_url": url}))
    return 0 if url else 1


async def _run_extract(config: AppConfig, link: str, extractor: str) -> int:
    controller = AbortController()
    async with build_provider_context(config) as context:
        streams = await context.extractor_registry.extract(
            link, controller.signal, extractor=extractor
        )
    print(json.dumps([_stream_to_dict(s) for s in streams], indent=2))
    return 0 if streams else 1


def start(argv: Iterable[str] | None = None) -> int:
    """
    Process entrypoint.

    Loads config exactly once, configures logging, then runs the subcommand.
    """

    if argv is None:
        argv = sys.argv[1:]

    args = _parse_args(argv)

    config_path = Path(args.config) if args.config else None
    dotenv_path = Path(args.dotenv) if args.dotenv else None

    cli_overrides: dict[str, Any] = {}
    if args.cache_backend:
        cli_overrides["cache_backend"] = args.cache_backend
    if args.log_level:
        cli_overrides["log_level"] = args.log_level
    if args.log_format:
        cli_overrides["log_format"] = args.log_format
    if getattr(args, "max_hops", None) is not None:
        cli_overrides["max_redirect_hops"] = args.max_hops

    config = load_config(
        config_path=config_path,
        dotenv_path=dotenv_path,
        cli_overrides=cli_overrides,
    )

    configure_logging(config)

    if args.command == "base-url":
        return asyncio.run(_run_base_url(config, args.provider))
    return asyncio.run(_run_extract(config, args.link, args.extractor))


if __name__ == "__main__":
    raise SystemExit(start())
