"""APScheduler configuration and lifecycle management."""

from __future__ import annotations

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from stockticker.config import CACHE_SWEEP_MINUTES
from stockticker.services.quote_cache import QuoteCache

logger = logging.getLogger(__name__)

_scheduler: AsyncIOScheduler | None = None


async def sweep_quote_cache(cache: QuoteCache) -> int:
    """Drop expired quotes so entries nobody reads again don't pile up."""
    removed = cache.sweep()
    if removed:
        logger.info("Quote cache sweep removed %d expired entries", removed)
    return removed


def create_scheduler(cache: QuoteCache) -> AsyncIOScheduler:
    """Create and configure the scheduler.

    The cache is passed as a job kwarg so the job stays testable without
    global state.
    """
    scheduler = AsyncIOScheduler()

    scheduler.add_job(
        sweep_quote_cache,
        trigger="interval",
        minutes=CACHE_SWEEP_MINUTES,
        id="quote_cache_sweep",
        name="Sweep expired quote cache entries",
        kwargs={"cache": cache},
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )

    return scheduler


def start_scheduler(cache: QuoteCache) -> AsyncIOScheduler:
    """Create, start, and return the global scheduler."""
    global _scheduler
    _scheduler = create_scheduler(cache)
    _scheduler.start()
    logger.info("Scheduler started with %d jobs", len(_scheduler.get_jobs()))
    return _scheduler


def stop_scheduler() -> None:
    """Shut down the global scheduler if running."""
    global _scheduler
    if _scheduler is not None:
        _scheduler.shutdown(wait=False)
        logger.info("Scheduler stopped")
        _scheduler = None
