"""Admin settings routes: read and update the persisted options."""

from __future__ import annotations

import logging
from typing import Literal, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from stockticker.config import SETTINGS_UPDATE_ACTION
from stockticker.db import set_options
from stockticker.nonce import create_nonce, verify_nonce
from stockticker.settings import TickerSettings, load_settings

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Pydantic models
# ---------------------------------------------------------------------------


class SettingsUpdate(BaseModel):
    nonce: str
    provider: Optional[Literal["twelve", "fmp"]] = None
    twelve_api_key: Optional[str] = None
    fmp_api_key: Optional[str] = None
    default_symbol: Optional[str] = None
    default_theme: Optional[Literal["light", "dark"]] = None


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _mask(key: str) -> str:
    """Show only the last four characters of an API key."""
    if not key:
        return ""
    if len(key) <= 4:
        return "*" * len(key)
    return "*" * (len(key) - 4) + key[-4:]


def _public_view(settings: TickerSettings) -> dict:
    return {
        "provider": settings.provider.value,
        "twelve_api_key": _mask(settings.twelve_api_key),
        "fmp_api_key": _mask(settings.fmp_api_key),
        "default_symbol": settings.default_symbol,
        "default_theme": settings.default_theme,
    }


# ---------------------------------------------------------------------------
# Router
# ---------------------------------------------------------------------------

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.get("/settings")
async def read_settings() -> dict:
    """Return effective settings (keys masked) plus a nonce for updating them."""
    settings = await load_settings()
    return {
        "settings": _public_view(settings),
        "nonce": create_nonce(SETTINGS_UPDATE_ACTION),
    }


@router.put("/settings")
async def update_settings(body: SettingsUpdate) -> dict:
    """Persist every field present in the body."""
    if not verify_nonce(body.nonce, SETTINGS_UPDATE_ACTION):
        raise HTTPException(status_code=403, detail="Invalid or expired nonce")

    values = {
        name: value.strip()
        for name, value in body.model_dump(exclude={"nonce"}).items()
        if value is not None
    }
    try:
        await set_options(values)
    except Exception:
        logger.exception("Settings update failed")
        raise HTTPException(status_code=500, detail="Settings update failed")

    logger.info("Settings updated: %s", ", ".join(sorted(values)) or "nothing")
    settings = await load_settings()
    return {"status": "ok", "settings": _public_view(settings)}
