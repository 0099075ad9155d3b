"""Ticker normalization for each upstream provider.

Twelve Data wants ``SYMBOL:EXCHANGE`` (``MUR:TSXV``).  FMP is inconsistent
about which spelling resolves venture-exchange and OTC tickers, so it gets a
list of candidate spellings tried in order.
"""

from __future__ import annotations

from stockticker.config import EXCHANGE_SUFFIX, EXCHANGE_TAG
from stockticker.models import Provider

_PREFIX = f"{EXCHANGE_TAG}:"
_SUFFIX_TAG = f":{EXCHANGE_TAG}"


# ---------------------------------------------------------------------------
# Pure helpers
# ---------------------------------------------------------------------------


def _strip_prefix(symbol: str) -> str:
    """Drop a leading ``TSXV:`` (any case)."""
    if symbol.upper().startswith(_PREFIX):
        return symbol[len(_PREFIX):]
    return symbol


def _strip_suffix(symbol: str) -> str:
    """Drop a trailing ``.V`` or ``:TSXV`` (any case)."""
    upper = symbol.upper()
    if upper.endswith(EXCHANGE_SUFFIX):
        return symbol[: -len(EXCHANGE_SUFFIX)]
    if upper.endswith(_SUFFIX_TAG):
        return symbol[: -len(_SUFFIX_TAG)]
    return symbol


def _bare_ticker(symbol: str) -> str:
    return _strip_suffix(_strip_prefix(symbol))


# ---------------------------------------------------------------------------
# Provider formats
# ---------------------------------------------------------------------------


def twelve_symbol(raw: str) -> str:
    """Rewrite *raw* into Twelve Data's ``SYMBOL:EXCHANGE`` form.

    ``TSXV:MUR``, ``MUR.V`` and ``MUR`` all become ``MUR:TSXV``; anything
    already carrying an exchange delimiter is left alone, so the function
    is idempotent.
    """
    s = raw.strip()
    if ":" in s and s.upper().endswith(_SUFFIX_TAG):
        return s
    if s.upper().startswith(_PREFIX):
        while s.upper().startswith(_PREFIX):
            s = s[len(_PREFIX):].strip()
        return s + _SUFFIX_TAG
    if ":" in s:
        return s
    if s.upper().endswith(EXCHANGE_SUFFIX):
        return s[: -len(EXCHANGE_SUFFIX)] + _SUFFIX_TAG
    return s + _SUFFIX_TAG


def fmp_candidates(raw: str) -> list[str]:
    """Return FMP spellings to try for *raw*, deduplicated, in try order.

    1. the symbol as given
    2. without the ``TSXV:`` prefix
    3. the bare ticker with the ``.V`` suffix
    4. the bare ticker with the ``TSXV:`` prefix
    """
    s = raw.strip()
    if not s:
        return []
    bare = _bare_ticker(s)
    ordered = [s, _strip_prefix(s), bare + EXCHANGE_SUFFIX, _PREFIX + bare]

    candidates: list[str] = []
    seen: set[str] = set()
    for cand in ordered:
        if not cand or cand in seen:
            continue
        seen.add(cand)
        candidates.append(cand)
    return candidates


def normalize(raw: str, provider: Provider) -> str:
    """Return the canonical spelling of *raw* for *provider*.

    This is the form used in cache keys.  For FMP it is the first
    candidate, i.e. the trimmed symbol as given.
    """
    if provider is Provider.TWELVE:
        return twelve_symbol(raw)
    return fmp_candidates(raw)[0] if raw.strip() else ""
