"""Abstract base class for all quote providers."""

from __future__ import annotations

import math
from abc import ABC, abstractmethod

from stockticker.models import Provider, Quote, QuoteFailure


def to_float(value: object) -> float | None:
    """Coerce a numeric-looking value to float; ``None`` if it isn't one."""
    if value is None or isinstance(value, bool):
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    return result if math.isfinite(result) else None


class QuoteProvider(ABC):
    """Interface that every upstream quote service must implement."""

    tag: Provider

    @abstractmethod
    def normalize(self, symbol: str) -> str:
        """Return the spelling of *symbol* this provider caches under."""

    @abstractmethod
    async def fetch(self, symbol: str, api_key: str) -> Quote | QuoteFailure:
        """Fetch the latest quote for *symbol*.

        Never raises for upstream problems; returns a ``QuoteFailure``
        whose ``reason`` is an error code instead.
        """

    @abstractmethod
    async def close(self) -> None:
        """Release the underlying HTTP client."""
