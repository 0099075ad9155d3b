"""Financial Modeling Prep quote provider (multi-candidate lookup)."""

from __future__ import annotations

import logging
from urllib.parse import quote as url_quote

import httpx

from stockticker.config import FMP_BASE_URL, REQUEST_TIMEOUT_SECONDS
from stockticker.errors import (
    MissingApiKey,
    NoValidQuote,
    QuoteError,
    UpstreamUnavailable,
)
from stockticker.models import Provider, Quote, QuoteFailure
from stockticker.providers.base import QuoteProvider, to_float
from stockticker.symbols import fmp_candidates, normalize

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Pure helper functions
# ---------------------------------------------------------------------------


def _parse_quote(raw: object, candidate: str) -> Quote:
    """Normalize a ``/quote/<symbol>`` response body into a Quote.

    FMP answers with a JSON array; only the first row is read.  Raises
    NoValidQuote for an empty array or a row without a numeric price.
    """
    if not isinstance(raw, list):
        raise UpstreamUnavailable(f"unexpected body type {type(raw).__name__}")
    if not raw or not isinstance(raw[0], dict):
        raise NoValidQuote("empty result")

    row = raw[0]
    price = to_float(row.get("price"))
    if price is None:
        raise NoValidQuote(f"no usable price in response: {row.get('price')!r}")

    symbol = str(row.get("symbol") or candidate)
    change = to_float(row.get("change"))
    change_pct = to_float(row.get("changesPercentage"))
    return Quote(
        symbol=symbol,
        name=str(row.get("name") or symbol),
        price=price,
        change=change if change is not None else 0.0,
        change_pct=change_pct if change_pct is not None else 0.0,
        currency=str(row.get("currency") or "CAD"),
    )


# ---------------------------------------------------------------------------
# Provider class
# ---------------------------------------------------------------------------


class FmpProvider(QuoteProvider):
    """Tries each candidate spelling in order until one yields a price."""

    tag = Provider.FMP

    def __init__(self, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self._client = httpx.AsyncClient(
            base_url=FMP_BASE_URL,
            timeout=REQUEST_TIMEOUT_SECONDS,
            transport=transport,
        )

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    def normalize(self, symbol: str) -> str:
        return normalize(symbol, Provider.FMP)

    async def _request(self, candidate: str, api_key: str) -> object:
        """GET /quote/<candidate>; raises UpstreamUnavailable on failure."""
        try:
            resp = await self._client.get(
                f"/quote/{url_quote(candidate, safe='')}",
                params={"apikey": api_key},
            )
            resp.raise_for_status()
            return resp.json()
        except httpx.HTTPError as exc:
            raise UpstreamUnavailable(f"{type(exc).__name__}: {exc}") from exc
        except ValueError as exc:
            raise UpstreamUnavailable(f"malformed JSON: {exc}") from exc

    # -- Public interface ----------------------------------------------------

    async def fetch(self, symbol: str, api_key: str) -> Quote | QuoteFailure:
        """Return the first candidate that resolves to a priced quote.

        Candidates are tried sequentially and nothing is requested after
        the first success.  When all of them fail the reason is
        ``no_valid_quote`` if FMP answered at least once, otherwise
        ``upstream_unavailable``.
        """
        if not api_key:
            return QuoteFailure(MissingApiKey.code, "FMP API key not configured")

        candidates = fmp_candidates(symbol)
        if not candidates:
            return QuoteFailure(NoValidQuote.code, "empty symbol")

        reason = UpstreamUnavailable.code
        for cand in candidates:
            try:
                raw = await self._request(cand, api_key)
                return _parse_quote(raw, cand)
            except QuoteError as exc:
                logger.warning("FMP candidate %s for %s skipped: %s", cand, symbol, exc)
                if isinstance(exc, NoValidQuote):
                    reason = NoValidQuote.code

        return QuoteFailure(reason, f"no candidate resolved: {', '.join(candidates)}")
