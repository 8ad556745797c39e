"""
Durable cache of the aggregated holdings table.

Each document lives under a single Redis key and is written with one SET, so
readers see either the previous state or the new one, never a mix.
"""
import json
import logging
from datetime import UTC, datetime, timedelta
from typing import Any, Optional

from redis.asyncio import Redis

from foliosync.core.config import settings
from foliosync.core.redis import StateKeys
from foliosync.models.sync_state import SyncState
from foliosync.models.user_settings import UserSettings

logger = logging.getLogger(__name__)


def is_stale(
    last_sync_timestamp: Optional[datetime],
    cache_duration_minutes: int,
    now: Optional[datetime] = None,
) -> bool:
    """
    True when the cache is older than ``cache_duration_minutes``.

    A missing timestamp counts as infinitely old; an age exactly equal to
    the duration is still fresh.
    """
    if last_sync_timestamp is None:
        return True
    now = now or datetime.now(UTC)
    return now - last_sync_timestamp > timedelta(minutes=cache_duration_minutes)


def _dumps(payload: dict[str, Any]) -> str:
    return json.dumps(payload, sort_keys=True, separators=(",", ":"))


class StateStore:
    def __init__(self, redis: Redis, keys: Optional[StateKeys] = None) -> None:
        self.redis = redis
        self.keys = keys or StateKeys()

    async def read(self) -> SyncState:
        raw = await self.redis.get(self.keys.sync_state)
        if not raw:
            return SyncState()
        return SyncState.from_dict(json.loads(raw))

    async def replace(self, state: SyncState) -> None:
        await self.redis.set(self.keys.sync_state, _dumps(state.to_dict()))
        logger.debug(
            "Stored sync state: %d holdings as of %s",
            state.holdings_count,
            state.last_sync_timestamp,
        )

    async def read_settings(self) -> UserSettings:
        raw = await self.redis.get(self.keys.settings)
        if not raw:
            return UserSettings()
        return UserSettings.model_validate_json(raw)

    async def save_settings(self, user_settings: UserSettings) -> None:
        await self.redis.set(self.keys.settings, _dumps(user_settings.model_dump()))

    async def initialize_defaults(self) -> bool:
        """Seed default settings and an empty state on first run."""
        created = await self.redis.set(
            self.keys.settings, _dumps(UserSettings().model_dump()), nx=True
        )
        if not created:
            return False
        await self.redis.set(self.keys.sync_state, _dumps(SyncState().to_dict()), nx=True)
        logger.info("Initialized default settings and empty sync state")
        return True

    async def dump(self) -> dict[str, Any]:
        state = await self.read()
        user_settings = await self.read_settings()
        return {"settings": user_settings.model_dump(), **state.to_dict()}

    async def claim_scheduler_registration(self, ttl_seconds: Optional[int] = None) -> bool:
        """Set the scheduler heartbeat if absent; True when no timer was registered."""
        ttl = ttl_seconds or settings.SCHEDULER_HEARTBEAT_TTL_SECONDS
        claimed = await self.redis.set(self.keys.scheduler_heartbeat, "1", nx=True, ex=ttl)
        return bool(claimed)

    async def touch_scheduler_heartbeat(self, ttl_seconds: Optional[int] = None) -> None:
        ttl = ttl_seconds or settings.SCHEDULER_HEARTBEAT_TTL_SECONDS
        await self.redis.set(self.keys.scheduler_heartbeat, "1", ex=ttl)
