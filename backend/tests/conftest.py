"""
Pytest configuration and fixtures for portfolio sync tests.

This module provides:
- An isolated fakeredis server per test
- A StateStore bound to it
- A fixed clock and a recording sleeper
- A factory for PortfolioSyncService wired to a FakeUpstream
"""

from datetime import UTC, datetime, timedelta

import fakeredis
import pytest

from foliosync.core.redis import StateKeys
from foliosync.services.portfolio_sync_service import PortfolioSyncService
from foliosync.services.state_store import StateStore


# =============================================================================
# TIME HELPERS
# =============================================================================


class FixedClock:
    """Deterministic clock; ``advance`` moves it forward."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2024, 6, 15, 14, 30, 0, tzinfo=UTC)


@pytest.fixture
def clock(fixed_now) -> FixedClock:
    return FixedClock(fixed_now)


@pytest.fixture
def sleeps() -> list[float]:
    return []


@pytest.fixture
def record_sleep(sleeps):
    async def _sleep(seconds: float) -> None:
        sleeps.append(seconds)

    return _sleep


# =============================================================================
# STORAGE FIXTURES
# =============================================================================


@pytest.fixture
async def fake_redis():
    client = fakeredis.FakeAsyncRedis(server=fakeredis.FakeServer(), decode_responses=True)
    yield client
    await client.aclose()


@pytest.fixture
def store(fake_redis) -> StateStore:
    return StateStore(fake_redis, StateKeys("test"))


@pytest.fixture
def checkpoints(store, monkeypatch) -> list:
    """Records every state written through ``store.replace``."""
    written = []
    original = store.replace

    async def _replace(state):
        written.append(state)
        await original(state)

    monkeypatch.setattr(store, "replace", _replace)
    return written


# =============================================================================
# SERVICE FIXTURES
# =============================================================================


@pytest.fixture
def make_sync_service(store, clock, record_sleep):
    def _make(upstream, retry_backoff_sec: float = 10.0, **kwargs) -> PortfolioSyncService:
        return PortfolioSyncService(
            store,
            client_factory=upstream.client_factory(**kwargs),
            retry_backoff_sec=retry_backoff_sec,
            sleep=record_sleep,
            clock=clock,
        )

    return _make
