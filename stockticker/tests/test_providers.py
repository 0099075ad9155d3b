"""Tests for the Twelve Data and FMP quote clients.

Upstream HTTP is replaced with ``httpx.MockTransport`` handlers.

Covers:
- Field mapping, defaults and numeric coercion
- Twelve Data: single request, error payloads, missing price, bad JSON
- FMP: candidate try-order, stop at first success, exhaustion reasons
- Missing API key short-circuits without a request
- Timeouts/transport errors become failures, never exceptions
"""

from __future__ import annotations

import httpx
import pytest

from stockticker.models import Quote, QuoteFailure
from stockticker.providers import FmpProvider, TwelveDataProvider

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class Recorder:
    """MockTransport handler that records requests and replays responses."""

    def __init__(self, responder):
        self.responder = responder
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.responder(request)

    @property
    def fmp_symbols(self) -> list[str]:
        return [r.url.path.rsplit("/", 1)[-1] for r in self.requests]


def _twelve(responder) -> tuple[TwelveDataProvider, Recorder]:
    rec = Recorder(responder)
    return TwelveDataProvider(transport=httpx.MockTransport(rec)), rec


def _fmp(responder) -> tuple[FmpProvider, Recorder]:
    rec = Recorder(responder)
    return FmpProvider(transport=httpx.MockTransport(rec)), rec


_TWELVE_OK = {
    "symbol": "MUR",
    "name": "Murchison Minerals Ltd",
    "exchange": "TSXV",
    "currency": "CAD",
    "price": "0.065",
    "change": "0.005",
    "percent_change": "8.33333",
}

_FMP_ROW = {
    "symbol": "MUR.V",
    "name": "Murchison Minerals Ltd.",
    "price": 0.065,
    "changesPercentage": 8.3333,
    "change": 0.005,
    "currency": "CAD",
}


# ---------------------------------------------------------------------------
# Twelve Data
# ---------------------------------------------------------------------------


class TestTwelveData:
    @pytest.mark.asyncio
    async def test_success_maps_fields(self):
        provider, rec = _twelve(lambda req: httpx.Response(200, json=_TWELVE_OK))
        try:
            quote = await provider.fetch("MUR.V", "k123")
        finally:
            await provider.close()

        assert quote == Quote(
            symbol="MUR:TSXV",
            name="Murchison Minerals Ltd",
            price=0.065,
            change=0.005,
            change_pct=8.33333,
            currency="CAD",
        )
        assert len(rec.requests) == 1
        params = rec.requests[0].url.params
        assert params["symbol"] == "MUR:TSXV"
        assert params["apikey"] == "k123"
        assert rec.requests[0].url.path == "/quote"

    @pytest.mark.asyncio
    async def test_defaults_for_missing_optional_fields(self):
        provider, _ = _twelve(lambda req: httpx.Response(200, json={"price": "1.5"}))
        try:
            quote = await provider.fetch("MUR", "k")
        finally:
            await provider.close()

        assert quote.name == "MUR:TSXV"
        assert quote.change == 0.0
        assert quote.change_pct == 0.0
        assert quote.currency == "CAD"

    @pytest.mark.asyncio
    async def test_error_payload_is_failure(self):
        body = {"code": 404, "message": "symbol not found", "status": "error"}
        provider, _ = _twelve(lambda req: httpx.Response(200, json=body))
        try:
            result = await provider.fetch("NOPE", "k")
        finally:
            await provider.close()

        assert isinstance(result, QuoteFailure)
        assert result.reason == "no_valid_quote"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("price", [None, "", "n/a"])
    async def test_unusable_price_is_failure_not_zero(self, price):
        body = dict(_TWELVE_OK, price=price)
        provider, _ = _twelve(lambda req: httpx.Response(200, json=body))
        try:
            result = await provider.fetch("MUR", "k")
        finally:
            await provider.close()

        assert isinstance(result, QuoteFailure)
        assert result.reason == "no_valid_quote"

    @pytest.mark.asyncio
    async def test_missing_price_field_is_failure(self):
        body = {k: v for k, v in _TWELVE_OK.items() if k != "price"}
        provider, _ = _twelve(lambda req: httpx.Response(200, json=body))
        try:
            result = await provider.fetch("MUR", "k")
        finally:
            await provider.close()

        assert isinstance(result, QuoteFailure)

    @pytest.mark.asyncio
    async def test_malformed_json(self):
        provider, _ = _twelve(lambda req: httpx.Response(200, text="<html>oops"))
        try:
            result = await provider.fetch("MUR", "k")
        finally:
            await provider.close()

        assert result.reason == "upstream_unavailable"

    @pytest.mark.asyncio
    async def test_array_body_rejected(self):
        provider, _ = _twelve(lambda req: httpx.Response(200, json=[_TWELVE_OK]))
        try:
            result = await provider.fetch("MUR", "k")
        finally:
            await provider.close()

        assert result.reason == "upstream_unavailable"

    @pytest.mark.asyncio
    async def test_http_error_no_retry(self):
        provider, rec = _twelve(lambda req: httpx.Response(503))
        try:
            result = await provider.fetch("MUR", "k")
        finally:
            await provider.close()

        assert result.reason == "upstream_unavailable"
        assert len(rec.requests) == 1

    @pytest.mark.asyncio
    async def test_timeout_becomes_failure(self):
        def boom(request):
            raise httpx.ReadTimeout("timed out", request=request)

        provider, _ = _twelve(boom)
        try:
            result = await provider.fetch("MUR", "k")
        finally:
            await provider.close()

        assert result.reason == "upstream_unavailable"

    @pytest.mark.asyncio
    async def test_missing_key_makes_no_request(self):
        provider, rec = _twelve(lambda req: httpx.Response(200, json=_TWELVE_OK))
        try:
            result = await provider.fetch("MUR", "")
        finally:
            await provider.close()

        assert result.reason == "no_key"
        assert rec.requests == []


# ---------------------------------------------------------------------------
# FMP
# ---------------------------------------------------------------------------


class TestFmp:
    @pytest.mark.asyncio
    async def test_first_candidate_success(self):
        provider, rec = _fmp(lambda req: httpx.Response(200, json=[_FMP_ROW]))
        try:
            quote = await provider.fetch("MUR.V", "k")
        finally:
            await provider.close()

        assert quote == Quote(
            symbol="MUR.V",
            name="Murchison Minerals Ltd.",
            price=0.065,
            change=0.005,
            change_pct=8.3333,
            currency="CAD",
        )
        assert rec.fmp_symbols == ["MUR.V"]
        assert rec.requests[0].url.params["apikey"] == "k"

    @pytest.mark.asyncio
    async def test_falls_back_to_third_candidate_and_stops(self):
        # TSXV:MUR -> [TSXV:MUR, MUR, MUR.V]; only MUR.V resolves.
        def responder(request):
            sym = request.url.path.rsplit("/", 1)[-1]
            if sym == "TSXV:MUR":
                return httpx.Response(500)
            if sym == "MUR":
                return httpx.Response(200, json=[])
            return httpx.Response(200, json=[_FMP_ROW])

        provider, rec = _fmp(responder)
        try:
            quote = await provider.fetch("TSXV:MUR", "k")
        finally:
            await provider.close()

        assert quote.symbol == "MUR.V"
        assert rec.fmp_symbols == ["TSXV:MUR", "MUR", "MUR.V"]

    @pytest.mark.asyncio
    async def test_no_calls_after_success(self):
        # MUR -> [MUR, MUR.V, TSXV:MUR]; MUR.V resolves, TSXV:MUR never tried.
        def responder(request):
            sym = request.url.path.rsplit("/", 1)[-1]
            if sym == "MUR.V":
                return httpx.Response(200, json=[_FMP_ROW])
            return httpx.Response(200, json=[{"symbol": sym, "price": None}])

        provider, rec = _fmp(responder)
        try:
            quote = await provider.fetch("MUR", "k")
        finally:
            await provider.close()

        assert quote.price == 0.065
        assert rec.fmp_symbols == ["MUR", "MUR.V"]

    @pytest.mark.asyncio
    async def test_all_candidates_without_price(self):
        provider, rec = _fmp(
            lambda req: httpx.Response(200, json=[{"symbol": "MUR", "price": "abc"}])
        )
        try:
            result = await provider.fetch("MUR", "k")
        finally:
            await provider.close()

        assert isinstance(result, QuoteFailure)
        assert result.reason == "no_valid_quote"
        assert rec.fmp_symbols == ["MUR", "MUR.V", "TSXV:MUR"]

    @pytest.mark.asyncio
    async def test_all_candidates_unreachable(self):
        def boom(request):
            raise httpx.ConnectError("refused", request=request)

        provider, rec = _fmp(boom)
        try:
            result = await provider.fetch("MUR", "k")
        finally:
            await provider.close()

        assert result.reason == "upstream_unavailable"
        assert len(rec.requests) == 3

    @pytest.mark.asyncio
    async def test_malformed_then_valid(self):
        def responder(request):
            sym = request.url.path.rsplit("/", 1)[-1]
            if sym == "MUR":
                return httpx.Response(200, text="not json")
            return httpx.Response(200, json=[_FMP_ROW])

        provider, rec = _fmp(responder)
        try:
            quote = await provider.fetch("MUR", "k")
        finally:
            await provider.close()

        assert isinstance(quote, Quote)
        assert rec.fmp_symbols == ["MUR", "MUR.V"]

    @pytest.mark.asyncio
    async def test_name_and_symbol_fallbacks(self):
        provider, _ = _fmp(lambda req: httpx.Response(200, json=[{"price": "2"}]))
        try:
            quote = await provider.fetch("MUR", "k")
        finally:
            await provider.close()

        assert quote.symbol == "MUR"
        assert quote.name == "MUR"
        assert quote.price == 2.0
        assert quote.change == 0.0
        assert quote.currency == "CAD"

    @pytest.mark.asyncio
    async def test_missing_key_makes_no_request(self):
        provider, rec = _fmp(lambda req: httpx.Response(200, json=[_FMP_ROW]))
        try:
            result = await provider.fetch("MUR", "")
        finally:
            await provider.close()

        assert result.reason == "no_key"
        assert rec.requests == []
