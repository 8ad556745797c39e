"""
Answers display-layer requests against the cached holdings table.

A stale cache triggers a refresh before matching; if that refresh fails the
query is answered from whatever table is currently stored.
"""
import logging
from datetime import datetime
from typing import Any, Optional

from pydantic import ValidationError

from foliosync.core.exceptions import FolioSyncError, SettingsValidationError
from foliosync.models.holding import Holding
from foliosync.models.user_settings import UserSettings
from foliosync.services.holdings_matcher import match_holding
from foliosync.services.portfolio_sync_service import PortfolioSyncService
from foliosync.services.state_store import StateStore, is_stale

logger = logging.getLogger(__name__)


class PortfolioQueryService:
    def __init__(self, store: StateStore, sync_service: PortfolioSyncService) -> None:
        self.store = store
        self.sync_service = sync_service

    async def get_portfolio_match(
        self,
        symbol: Optional[str] = None,
        exchange: Optional[str] = None,
        isin: Optional[str] = None,
        pair_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> dict[str, Any]:
        user_settings = await self.store.read_settings()
        state = await self.store.read()

        if is_stale(state.last_sync_timestamp, user_settings.cache_duration_minutes, now):
            try:
                await self.sync_service.synchronize()
            except FolioSyncError as exc:
                logger.error("Failed to refresh portfolio, serving cached data: %s", exc)
            state = await self.store.read()

        match: Optional[Holding] = match_holding(
            state.holdings_table,
            symbol=symbol,
            exchange=exchange,
            isin=isin,
            pair_id=pair_id,
        )
        return {"match": match, "last_sync_timestamp": state.last_sync_timestamp}

    async def force_refresh(self) -> int:
        """Synchronize now; returns the number of holdings in the new table."""
        table = await self.sync_service.synchronize()
        return len(table)

    async def get_status(self) -> dict[str, Any]:
        user_settings = await self.store.read_settings()
        state = await self.store.read()
        return {
            "settings": user_settings,
            "last_sync_timestamp": state.last_sync_timestamp,
            "holdings_count": state.holdings_count,
        }

    async def save_settings(self, payload: dict[str, Any]) -> UserSettings:
        try:
            user_settings = UserSettings.model_validate(payload)
        except ValidationError as exc:
            raise SettingsValidationError(
                "; ".join(error["msg"] for error in exc.errors())
            ) from exc
        await self.store.save_settings(user_settings)
        logger.info(
            "Saved settings: cache %d min, %d monitored paths",
            user_settings.cache_duration_minutes,
            len(user_settings.monitored_paths),
        )
        return user_settings

    async def debug_storage(self) -> dict[str, Any]:
        return await self.store.dump()
