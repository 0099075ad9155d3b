"""FastAPI application entry point."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from stockticker.admin import router as admin_router
from stockticker.db import close_db, init_db
from stockticker.jobs.scheduler import start_scheduler, stop_scheduler
from stockticker.providers import build_registry
from stockticker.quotes import router as quotes_router
from stockticker.services.quote_cache import quote_cache
from stockticker.services.resolver import QuoteResolver

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize resources on startup, clean up on shutdown."""
    await init_db()
    app.state.registry = build_registry()
    app.state.resolver = QuoteResolver(registry=app.state.registry, cache=quote_cache)
    app.state.scheduler = start_scheduler(quote_cache)

    logger.info("Stock ticker service started")
    yield

    stop_scheduler()
    await app.state.registry.close()
    await close_db()
    logger.info("Stock ticker service stopped")


app = FastAPI(title="Stock Ticker", lifespan=lifespan)
app.include_router(quotes_router)
app.include_router(admin_router)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "PUT"],
    allow_headers=["*"],
)


@app.get("/api/health")
async def health() -> dict:
    """Return service health status."""
    return {
        "status": "ok",
        "cached_quotes": len(quote_cache),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
