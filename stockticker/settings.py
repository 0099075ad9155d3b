"""Per-request settings resolved from overrides, env constants and stored options.

Precedence for every field, first non-empty value wins:

    per-call override > process-wide constant > persisted option > built-in default

Invalid provider or theme values are skipped so the next source can win.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Mapping

from stockticker import config
from stockticker.db import get_options
from stockticker.models import Provider

logger = logging.getLogger(__name__)

OPTION_NAMES: tuple[str, ...] = tuple(config.BUILTIN_DEFAULTS)


@dataclass(frozen=True)
class TickerSettings:
    provider: Provider
    twelve_api_key: str
    fmp_api_key: str
    default_symbol: str
    default_theme: str

    def api_key_for(self, provider: Provider | None = None) -> str:
        """API key for *provider* (the configured one when omitted)."""
        tag = provider or self.provider
        return self.twelve_api_key if tag is Provider.TWELVE else self.fmp_api_key


def process_constants() -> dict[str, str]:
    """Option values pinned by environment variables."""
    return {
        "provider": config.PROVIDER,
        "twelve_api_key": config.TWELVE_DATA_API_KEY,
        "fmp_api_key": config.FMP_API_KEY,
        "default_symbol": config.DEFAULT_SYMBOL,
        "default_theme": config.DEFAULT_THEME,
    }


def _is_acceptable(name: str, value: str) -> bool:
    if name == "provider":
        return Provider.parse(value) is not None
    if name == "default_theme":
        return value.strip().lower() in config.VALID_THEMES
    return True


def resolve_option(name: str, *sources: Mapping[str, str | None] | None) -> str:
    """Return the first usable value for *name* across *sources*, else the default."""
    for source in sources:
        if not source:
            continue
        value = source.get(name)
        if value is None:
            continue
        value = str(value).strip()
        if value and _is_acceptable(name, value):
            return value
    return config.BUILTIN_DEFAULTS[name]


def resolve_settings(
    overrides: Mapping[str, str | None] | None = None,
    constants: Mapping[str, str | None] | None = None,
    options: Mapping[str, str | None] | None = None,
) -> TickerSettings:
    """Pure precedence resolver; see module docstring."""
    values = {
        name: resolve_option(name, overrides, constants, options)
        for name in OPTION_NAMES
    }
    return TickerSettings(
        provider=Provider.parse(values["provider"]) or Provider.TWELVE,
        twelve_api_key=values["twelve_api_key"],
        fmp_api_key=values["fmp_api_key"],
        default_symbol=values["default_symbol"],
        default_theme=values["default_theme"].lower(),
    )


async def load_settings(overrides: Mapping[str, str | None] | None = None) -> TickerSettings:
    """Read persisted options once and resolve settings for this request."""
    options = await get_options()
    return resolve_settings(overrides, process_constants(), options)
