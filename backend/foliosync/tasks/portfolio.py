"""
Portfolio synchronization tasks.

Each task runs its coroutine in a fresh event loop with its own Redis
client, closed when the job finishes.
"""
import asyncio
import logging
from typing import Any, Awaitable, Callable

from foliosync.core.redis import create_async_redis
from foliosync.scheduler.celery_app import app
from foliosync.scheduler.refresh_scheduler import RefreshScheduler
from foliosync.services.portfolio_sync_service import PortfolioSyncService
from foliosync.services.state_store import StateStore

logger = logging.getLogger(__name__)


async def _with_scheduler(
    action: Callable[[RefreshScheduler], Awaitable[dict[str, Any]]]
) -> dict[str, Any]:
    redis = create_async_redis()
    try:
        store = StateStore(redis)
        scheduler = RefreshScheduler(store, PortfolioSyncService(store))
        return await action(scheduler)
    finally:
        await redis.aclose()


@app.task(name="foliosync.tasks.portfolio.sync_portfolio")
def sync_portfolio() -> dict[str, Any]:
    """Unconditional synchronization (manual trigger)."""

    async def _sync(scheduler: RefreshScheduler) -> dict[str, Any]:
        table = await scheduler.sync_service.synchronize()
        return {"status": "synced", "holdings": len(table)}

    result = asyncio.run(_with_scheduler(_sync))
    logger.info(f"Portfolio sync task finished: {result}")
    return result


@app.task(name="foliosync.tasks.portfolio.refresh_portfolio_if_due")
def refresh_portfolio_if_due() -> dict[str, Any]:
    """Beat tick: synchronize only when the cache is stale."""
    return asyncio.run(_with_scheduler(lambda scheduler: scheduler.tick()))


@app.task(name="foliosync.tasks.portfolio.cold_start_refresh")
def cold_start_refresh() -> dict[str, Any]:
    """Run once when beat starts and no refresh timer is registered."""
    return asyncio.run(_with_scheduler(lambda scheduler: scheduler.cold_start()))
