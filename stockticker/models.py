"""Quote record, failure record and provider tags."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, ConfigDict


class Provider(str, Enum):
    """Upstream quote services, tagged the way the settings store them."""

    TWELVE = "twelve"
    FMP = "fmp"

    @classmethod
    def parse(cls, value: str | None) -> Provider | None:
        """Return the matching tag, or ``None`` for unknown/empty values."""
        if not value:
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


class Quote(BaseModel):
    """Normalized quote shared by every provider.

    ``change_pct`` keeps the provider's own units (``1.23`` meaning 1.23%
    for both services); no conversion is applied.
    """

    model_config = ConfigDict(frozen=True)

    symbol: str
    name: str
    price: float | None
    change: float = 0.0
    change_pct: float = 0.0
    currency: str = "CAD"

    @property
    def is_valid(self) -> bool:
        return self.price is not None


@dataclass(frozen=True)
class QuoteFailure:
    """Why a resolution produced no quote; ``reason`` is an error code."""

    reason: str
    detail: str = ""
