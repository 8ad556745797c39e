"""
Periodic and cold-start refresh decisions.

Beat ticks at a fixed short interval; a tick only synchronizes when the
cache has outlived the user's configured duration, so the effective refresh
period tracks ``cache_duration_minutes``.
"""
import logging
from datetime import datetime
from typing import Any, Optional

from foliosync.services.portfolio_sync_service import PortfolioSyncService
from foliosync.services.state_store import StateStore, is_stale

logger = logging.getLogger(__name__)


class RefreshScheduler:
    def __init__(self, store: StateStore, sync_service: PortfolioSyncService) -> None:
        self.store = store
        self.sync_service = sync_service

    async def tick(self, now: Optional[datetime] = None) -> dict[str, Any]:
        await self.store.touch_scheduler_heartbeat()
        user_settings = await self.store.read_settings()
        state = await self.store.read()

        if not is_stale(state.last_sync_timestamp, user_settings.cache_duration_minutes, now):
            return {"status": "fresh", "holdings": state.holdings_count}

        table = await self.sync_service.synchronize()
        return {"status": "synced", "holdings": len(table)}

    async def cold_start(self) -> dict[str, Any]:
        await self.store.initialize_defaults()
        if not await self.store.claim_scheduler_registration():
            logger.info("Refresh timer already registered; skipping cold-start sync")
            return {"status": "registered"}

        logger.info("No refresh timer registered; running cold-start sync")
        table = await self.sync_service.synchronize()
        return {"status": "synced", "holdings": len(table)}
