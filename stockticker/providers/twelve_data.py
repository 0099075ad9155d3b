"""Twelve Data quote provider (exchange-suffix symbols, e.g. ``MUR:TSXV``)."""

from __future__ import annotations

import logging

import httpx

from stockticker.config import REQUEST_TIMEOUT_SECONDS, TWELVE_DATA_BASE_URL
from stockticker.errors import (
    MissingApiKey,
    NoValidQuote,
    QuoteError,
    UpstreamUnavailable,
)
from stockticker.models import Provider, Quote, QuoteFailure
from stockticker.providers.base import QuoteProvider, to_float
from stockticker.symbols import twelve_symbol

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Pure helper functions
# ---------------------------------------------------------------------------


def _parse_quote(raw: object, symbol: str) -> Quote:
    """Normalize a ``/quote`` response body into a Quote.

    Raises NoValidQuote for an error payload or a missing/non-numeric
    price, and UpstreamUnavailable when the body isn't a JSON object.
    """
    if not isinstance(raw, dict):
        raise UpstreamUnavailable(f"unexpected body type {type(raw).__name__}")
    if "code" in raw:
        raise NoValidQuote(f"{raw.get('code')}: {raw.get('message')}")

    price = to_float(raw.get("price"))
    if price is None:
        raise NoValidQuote(f"no usable price in response: {raw.get('price')!r}")

    change = to_float(raw.get("change"))
    change_pct = to_float(raw.get("percent_change"))
    return Quote(
        symbol=symbol,
        name=str(raw.get("name") or symbol),
        price=price,
        change=change if change is not None else 0.0,
        change_pct=change_pct if change_pct is not None else 0.0,
        currency=str(raw.get("currency") or "CAD"),
    )


# ---------------------------------------------------------------------------
# Provider class
# ---------------------------------------------------------------------------


class TwelveDataProvider(QuoteProvider):
    """Single-request quote lookup against Twelve Data."""

    tag = Provider.TWELVE

    def __init__(self, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self._client = httpx.AsyncClient(
            base_url=TWELVE_DATA_BASE_URL,
            timeout=REQUEST_TIMEOUT_SECONDS,
            transport=transport,
        )

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    def normalize(self, symbol: str) -> str:
        return twelve_symbol(symbol)

    async def _request(self, symbol: str, api_key: str) -> object:
        """GET /quote; raises UpstreamUnavailable on transport or body errors."""
        try:
            resp = await self._client.get(
                "/quote", params={"symbol": symbol, "apikey": api_key}
            )
            resp.raise_for_status()
            return resp.json()
        except httpx.HTTPError as exc:
            raise UpstreamUnavailable(f"{type(exc).__name__}: {exc}") from exc
        except ValueError as exc:
            raise UpstreamUnavailable(f"malformed JSON: {exc}") from exc

    # -- Public interface ----------------------------------------------------

    async def fetch(self, symbol: str, api_key: str) -> Quote | QuoteFailure:
        """Fetch one quote; exactly one upstream call, no retry."""
        if not api_key:
            return QuoteFailure(MissingApiKey.code, "Twelve Data API key not configured")

        sym = self.normalize(symbol)
        try:
            raw = await self._request(sym, api_key)
            return _parse_quote(raw, sym)
        except QuoteError as exc:
            logger.warning("Twelve Data quote for %s failed: %s", sym, exc)
            return QuoteFailure(exc.code, str(exc))
