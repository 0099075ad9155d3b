"""Tests for the in-memory quote cache and its sweep job.

Covers:
- get/set round-trip and lazy expiry
- overwrite replaces the previous entry and its expiry
- quotes without a price are refused
- cache_key is stable per (provider, symbol) and distinct across providers
- sweep() and the scheduled sweep job drop only expired entries
"""

from __future__ import annotations

import pytest

from stockticker.jobs.scheduler import create_scheduler, sweep_quote_cache
from stockticker.models import Provider, Quote
from stockticker.services.quote_cache import QuoteCache, cache_key


class FakeClock:
    def __init__(self, now: float = 1_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def _quote(symbol: str = "MUR:TSXV", price: float | None = 1.25) -> Quote:
    return Quote(symbol=symbol, name="Murchison Minerals", price=price)


# ---------------------------------------------------------------------------
# cache_key
# ---------------------------------------------------------------------------


class TestCacheKey:
    def test_stable(self):
        assert cache_key(Provider.TWELVE, "MUR:TSXV") == cache_key(Provider.TWELVE, "MUR:TSXV")

    def test_provider_is_part_of_key(self):
        assert cache_key(Provider.TWELVE, "MUR") != cache_key(Provider.FMP, "MUR")

    def test_symbol_is_part_of_key(self):
        assert cache_key(Provider.FMP, "MUR") != cache_key(Provider.FMP, "MUR.V")

    def test_prefix(self):
        assert cache_key(Provider.FMP, "MUR").startswith("quote_")


# ---------------------------------------------------------------------------
# QuoteCache
# ---------------------------------------------------------------------------


class TestQuoteCache:
    def test_missing_key(self):
        assert QuoteCache().get("nope") is None

    def test_round_trip(self):
        cache = QuoteCache(clock=FakeClock())
        q = _quote()
        cache.set("k", q, ttl_seconds=60)
        assert cache.get("k") == q

    def test_entry_expires(self):
        clock = FakeClock()
        cache = QuoteCache(clock=clock)
        cache.set("k", _quote(), ttl_seconds=60)
        clock.advance(59)
        assert cache.get("k") is not None
        clock.advance(1)
        assert cache.get("k") is None
        assert len(cache) == 0

    def test_overwrite_resets_expiry(self):
        clock = FakeClock()
        cache = QuoteCache(clock=clock)
        cache.set("k", _quote(price=1.0), ttl_seconds=60)
        clock.advance(50)
        cache.set("k", _quote(price=2.0), ttl_seconds=60)
        clock.advance(50)
        assert cache.get("k").price == 2.0

    def test_default_ttl_is_one_hour(self):
        clock = FakeClock()
        cache = QuoteCache(clock=clock)
        cache.set("k", _quote())
        clock.advance(3599)
        assert cache.get("k") is not None
        clock.advance(1)
        assert cache.get("k") is None

    def test_refuses_quote_without_price(self):
        cache = QuoteCache()
        with pytest.raises(ValueError):
            cache.set("k", _quote(price=None))
        assert cache.get("k") is None

    def test_sweep(self):
        clock = FakeClock()
        cache = QuoteCache(clock=clock)
        cache.set("short", _quote(), ttl_seconds=10)
        cache.set("long", _quote(), ttl_seconds=100)
        clock.advance(10)
        assert cache.sweep() == 1
        assert len(cache) == 1
        assert cache.get("long") is not None

    def test_clear(self):
        cache = QuoteCache()
        cache.set("k", _quote())
        cache.clear()
        assert len(cache) == 0


# ---------------------------------------------------------------------------
# Scheduled sweep
# ---------------------------------------------------------------------------


class TestSweepJob:
    @pytest.mark.asyncio
    async def test_sweep_job_removes_expired(self):
        clock = FakeClock()
        cache = QuoteCache(clock=clock)
        cache.set("a", _quote(), ttl_seconds=5)
        cache.set("b", _quote(), ttl_seconds=5)
        clock.advance(5)
        assert await sweep_quote_cache(cache) == 2
        assert len(cache) == 0

    @pytest.mark.asyncio
    async def test_scheduler_registers_sweep_job(self):
        scheduler = create_scheduler(QuoteCache())
        job = scheduler.get_job("quote_cache_sweep")
        assert job is not None
        assert job.max_instances == 1
