"""Quote resolution: cache lookup, provider fetch, cache write-back.

Failed lookups are never cached, so the next call for the same symbol goes
upstream again.  Concurrent misses for one key may each hit the provider;
there is no single-flight de-duplication.
"""

from __future__ import annotations

import logging

from stockticker.config import CACHE_TTL_SECONDS
from stockticker.errors import NoValidQuote, UpstreamUnavailable
from stockticker.models import Provider, Quote, QuoteFailure
from stockticker.providers import ProviderRegistry
from stockticker.services.quote_cache import QuoteCache, cache_key

logger = logging.getLogger(__name__)


class QuoteResolver:
    """Resolves a symbol through the cache, falling back to its provider."""

    def __init__(
        self,
        *,
        registry: ProviderRegistry,
        cache: QuoteCache,
        ttl_seconds: int = CACHE_TTL_SECONDS,
    ) -> None:
        self.registry = registry
        self.cache = cache
        self.ttl_seconds = ttl_seconds

    async def resolve(
        self,
        symbol: str,
        provider: Provider,
        api_key: str,
        use_cache: bool = True,
    ) -> Quote | QuoteFailure:
        """Return a priced Quote for *symbol*, or a QuoteFailure.

        With ``use_cache=False`` the cache is not read but a successful
        fetch still overwrites the entry.
        """
        client = self.registry.get(provider)
        # Same spelling the provider uses internally, so every alias of a
        # symbol lands on one key.
        key = cache_key(provider, client.normalize(symbol))

        if use_cache:
            cached = self.cache.get(key)
            if cached is not None:
                logger.debug("Cache hit for %s (%s)", symbol, provider.value)
                return cached

        try:
            result = await client.fetch(symbol, api_key)
        except Exception as exc:
            logger.exception("Provider %s raised for %s", provider.value, symbol)
            return QuoteFailure(UpstreamUnavailable.code, str(exc))

        if isinstance(result, QuoteFailure):
            logger.info(
                "Quote for %s via %s unavailable: %s", symbol, provider.value, result.reason
            )
            return result
        if not result.is_valid:
            return QuoteFailure(NoValidQuote.code, "provider returned a quote without a price")

        self.cache.set(key, result, self.ttl_seconds)
        return result
