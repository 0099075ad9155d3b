"""In-memory quote cache with per-entry expiry.

Entries are ``key -> (expiry_epoch, Quote)``.  Expiry is checked lazily on
read; ``sweep()`` is run periodically by the scheduler to drop entries
nobody reads again.  There is no capacity bound.
"""

from __future__ import annotations

import hashlib
import time
from typing import Callable

from stockticker.config import CACHE_TTL_SECONDS
from stockticker.models import Provider, Quote


def cache_key(provider: Provider, normalized_symbol: str) -> str:
    """Derive the cache key for a provider + normalized symbol pair."""
    digest = hashlib.md5(f"{provider.value}|{normalized_symbol}".encode()).hexdigest()
    return f"quote_{digest}"


class QuoteCache:
    """In-process TTL cache of priced quotes keyed by ``cache_key``."""

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._entries: dict[str, tuple[float, Quote]] = {}
        self._clock = clock

    def get(self, key: str) -> Quote | None:
        """Return the cached quote, or ``None`` if absent or expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        expiry, quote = entry
        if self._clock() >= expiry:
            self._entries.pop(key, None)
            return None
        return quote

    def set(self, key: str, quote: Quote, ttl_seconds: int = CACHE_TTL_SECONDS) -> None:
        """Store *quote* for *ttl_seconds*, replacing any previous entry."""
        if not quote.is_valid:
            raise ValueError(f"Refusing to cache quote without a price: {quote.symbol!r}")
        self._entries[key] = (self._clock() + ttl_seconds, quote)

    def sweep(self) -> int:
        """Drop every expired entry; return how many were removed."""
        now = self._clock()
        expired = [k for k, (expiry, _) in self._entries.items() if expiry <= now]
        for k in expired:
            self._entries.pop(k, None)
        return len(expired)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


quote_cache = QuoteCache()
