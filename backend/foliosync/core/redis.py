"""
Redis connection management.

The API process shares one async client; Celery tasks run each job in a
fresh event loop and therefore open (and close) their own client.
"""

from typing import Optional
from redis.asyncio import Redis as AsyncRedis
from foliosync.core.config import settings

# Async Redis client (for the API process)
async_redis_client: Optional[AsyncRedis] = None


def create_async_redis() -> AsyncRedis:
    """Create a new async Redis client bound to the current event loop."""
    return AsyncRedis.from_url(
        settings.REDIS_URL,
        decode_responses=True,
        max_connections=settings.REDIS_MAX_CONNECTIONS,
    )


async def get_async_redis() -> AsyncRedis:
    """Get the shared async Redis client."""
    global async_redis_client
    if async_redis_client is None:
        async_redis_client = create_async_redis()
    return async_redis_client


async def close_redis() -> None:
    """Close Redis connections."""
    global async_redis_client

    if async_redis_client is not None:
        await async_redis_client.aclose()
        async_redis_client = None


class StateKeys:
    """Redis key names for persisted state."""

    def __init__(self, prefix: Optional[str] = None) -> None:
        self.prefix = prefix or settings.STATE_KEY_PREFIX

    @property
    def sync_state(self) -> str:
        return f"{self.prefix}:sync_state"

    @property
    def settings(self) -> str:
        return f"{self.prefix}:settings"

    @property
    def scheduler_heartbeat(self) -> str:
        return f"{self.prefix}:scheduler:heartbeat"
