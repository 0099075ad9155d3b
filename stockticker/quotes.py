"""Quote routes: client refresh polling and the page-render widget payload."""

from __future__ import annotations

import logging
from typing import Callable

from fastapi import APIRouter, Query, Request

from stockticker.config import QUOTE_REFRESH_ACTION, REFRESH_INTERVAL_SECONDS
from stockticker.errors import InvalidToken, MissingApiKey, MissingSymbol, QuoteError
from stockticker.models import Provider, QuoteFailure
from stockticker.nonce import create_nonce, verify_nonce
from stockticker.services.resolver import QuoteResolver
from stockticker.settings import load_settings

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Handler
# ---------------------------------------------------------------------------


async def refresh_quote(
    symbol: str | None,
    token: str | None,
    *,
    verify_token: Callable[[str | None], bool],
    resolve_api_key: Callable[[Provider], str | None],
    resolver: QuoteResolver,
    provider: Provider,
) -> dict:
    """Fetch a fresh quote for a polling client.

    Skips the cache read but refreshes the cache entry on success.  Never
    raises: every outcome is ``{"ok": True, "data": ...}`` or
    ``{"ok": False, "err": code}``.
    """
    try:
        if not verify_token(token):
            raise InvalidToken("request token rejected")

        symbol = (symbol or "").strip()
        if not symbol:
            raise MissingSymbol("symbol is required")

        api_key = resolve_api_key(provider)
        if not api_key:
            raise MissingApiKey(f"no API key for {provider.value}")

        result = await resolver.resolve(symbol, provider, api_key, use_cache=False)
    except QuoteError as exc:
        return {"ok": False, "err": exc.code}
    except Exception:
        logger.exception("Quote refresh for %r failed", symbol)
        return {"ok": False, "err": "error"}

    if isinstance(result, QuoteFailure):
        return {"ok": False, "err": result.reason}
    return {"ok": True, "data": result.model_dump()}


# ---------------------------------------------------------------------------
# Router
# ---------------------------------------------------------------------------

router = APIRouter(prefix="/api", tags=["quotes"])


@router.get("/quote")
async def quote(
    request: Request,
    symbol: str = Query(""),
    nonce: str = Query(""),
    provider: str = Query(""),
) -> dict:
    """Refresh endpoint polled by the widget script.

    ``provider`` echoes the one the widget was rendered with; unknown values
    fall back to the configured provider.
    """
    try:
        settings = await load_settings({"provider": provider})
    except Exception:
        logger.exception("Could not load settings")
        return {"ok": False, "err": "error"}

    return await refresh_quote(
        symbol,
        nonce,
        verify_token=lambda token: verify_nonce(token, QUOTE_REFRESH_ACTION),
        resolve_api_key=settings.api_key_for,
        resolver=request.app.state.resolver,
        provider=settings.provider,
    )


@router.get("/widget")
async def widget(
    request: Request,
    symbol: str = Query(""),
    provider: str = Query(""),
    theme: str = Query(""),
    twelve_api_key: str = Query(""),
    fmp_api_key: str = Query(""),
) -> dict:
    """Everything a rendered ticker widget needs on first paint.

    The quote comes from the cache when possible.  ``ok: false`` means the
    page should show its "data unavailable" fallback; the nonce is issued
    either way so the client can keep polling ``/api/quote``.
    """
    settings = await load_settings(
        {
            "provider": provider,
            "default_theme": theme,
            "twelve_api_key": twelve_api_key,
            "fmp_api_key": fmp_api_key,
        }
    )
    symbol = symbol.strip() or settings.default_symbol

    payload: dict = {
        "symbol": symbol,
        "provider": settings.provider.value,
        "theme": settings.default_theme,
        "nonce": create_nonce(QUOTE_REFRESH_ACTION),
        "refresh_seconds": REFRESH_INTERVAL_SECONDS,
    }

    api_key = settings.api_key_for()
    if not api_key:
        payload.update(ok=False, err=MissingApiKey.code)
        return payload

    resolver: QuoteResolver = request.app.state.resolver
    result = await resolver.resolve(symbol, settings.provider, api_key, use_cache=True)
    if isinstance(result, QuoteFailure):
        payload.update(ok=False, err=result.reason)
    else:
        payload.update(ok=True, data=result.model_dump())
    return payload
