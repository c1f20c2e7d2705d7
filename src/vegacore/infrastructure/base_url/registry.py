"""Static table of providers whose base URL comes from the community directory."""

from __future__ import annotations

import re
from collections.abc import Iterable
from types import MappingProxyType

import structlog

from vegacore.domain.entities.streams import BaseUrlRule
from vegacore.domain.providers.exceptions import DuplicateProviderError

log = structlog.get_logger(__name__)

# Community-maintained paste: one base URL per line.
DIRECTORY_URL = "https://pastebin.com/raw/KgQ4jTy6"

# JSON object keyed by provider id: {"<id>": {"url": "..."}}
FALLBACK_DIRECTORY_URL = "https://himanshu8443.github.io/providers/modflix.json"


def _host_rule(provider_id: str) -> BaseUrlRule:
    """Rule matching ``<provider_id>.<tld>`` and any subdomain of it."""
    return BaseUrlRule(
        provider_id=provider_id,
        host_match=re.compile(rf"(?:^|\.){re.escape(provider_id)}\.", re.IGNORECASE),
    )


class BaseUrlRegistry:
    """Pure lookup ``provider_id -> BaseUrlRule``.

    A missing rule means the provider does not use the shared directory.
    """

    def __init__(self, rules: Iterable[BaseUrlRule]) -> None:
        table: dict[str, BaseUrlRule] = {}
        for rule in rules:
            if rule.provider_id in table:
                raise DuplicateProviderError(
                    f"Base URL rule for '{rule.provider_id}' defined twice"
                )
            table[rule.provider_id] = rule
        self._rules = MappingProxyType(table)

    def lookup(self, provider_id: str) -> BaseUrlRule | None:
        return self._rules.get(provider_id)

    @property
    def provider_ids(self) -> list[str]:
        return sorted(self._rules)

    def __contains__(self, provider_id: object) -> bool:
        return provider_id in self._rules


DEFAULT_RULES: tuple[BaseUrlRule, ...] = (
    _host_rule("animeunity"),
    _host_rule("streamingunity"),
    _host_rule("guardaserietv"),
)


def default_registry() -> BaseUrlRegistry:
    return BaseUrlRegistry(DEFAULT_RULES)
