"""Quote providers package and the tag -> client registry."""

from __future__ import annotations

from stockticker.models import Provider
from stockticker.providers.base import QuoteProvider
from stockticker.providers.fmp import FmpProvider
from stockticker.providers.twelve_data import TwelveDataProvider


class ProviderRegistry:
    """Maps each ``Provider`` tag to the client that serves it."""

    def __init__(self, providers: list[QuoteProvider]) -> None:
        self._providers: dict[Provider, QuoteProvider] = {p.tag: p for p in providers}

    def get(self, tag: Provider) -> QuoteProvider:
        try:
            return self._providers[tag]
        except KeyError:
            raise LookupError(f"No provider registered for {tag.value!r}") from None

    def __contains__(self, tag: Provider) -> bool:
        return tag in self._providers

    async def close(self) -> None:
        """Close every registered client."""
        for provider in self._providers.values():
            await provider.close()


def build_registry() -> ProviderRegistry:
    """Registry with one client per supported provider."""
    return ProviderRegistry([TwelveDataProvider(), FmpProvider()])


__all__ = [
    "FmpProvider",
    "ProviderRegistry",
    "QuoteProvider",
    "TwelveDataProvider",
    "build_registry",
]
