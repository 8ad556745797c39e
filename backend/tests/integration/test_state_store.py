"""
Integration tests for the Redis-backed state store.
"""

import json
from datetime import UTC, datetime

from foliosync.models.holding import Holding
from foliosync.models.sync_state import DebugInfo, SyncState, TabDiagnostic, TabStatus
from foliosync.models.user_settings import UserSettings


def _state() -> SyncState:
    holding = Holding(
        symbol="AAPL", quantity=10, avg_price=100, total_value=1500, portfolios=["Growth"]
    )
    return SyncState(
        holdings_table={"AAPL": holding},
        last_sync_timestamp=datetime(2024, 6, 15, 14, 30, tzinfo=UTC),
        debug_info=DebugInfo(
            portfolios_found=[{"numeric_id": "101", "public_id": "pubA", "name": "Growth"}],
            holdings_per_portfolio={
                "101": TabDiagnostic(numeric_id="101", name="Growth", row_count=1)
            },
        ),
    )


class TestSyncState:
    async def test_empty_store_reads_default_state(self, store):
        state = await store.read()

        assert state.holdings_table == {}
        assert state.last_sync_timestamp is None

    async def test_replace_then_read(self, store):
        await store.replace(_state())

        state = await store.read()

        assert state.holdings_table["AAPL"].portfolios == ["Growth"]
        assert state.last_sync_timestamp == datetime(2024, 6, 15, 14, 30, tzinfo=UTC)
        assert state.debug_info.holdings_per_portfolio["101"].status == TabStatus.OK

    async def test_replace_is_whole_document(self, store, fake_redis):
        await store.replace(_state())
        await store.replace(SyncState())

        raw = json.loads(await fake_redis.get(store.keys.sync_state))

        assert raw["holdings_table"] == {}
        assert raw["last_sync_timestamp"] is None

    async def test_serialization_is_stable(self, store, fake_redis):
        await store.replace(_state())
        first = await fake_redis.get(store.keys.sync_state)
        await store.replace(await store.read())

        assert await fake_redis.get(store.keys.sync_state) == first


class TestSettings:
    async def test_defaults_when_absent(self, store):
        assert await store.read_settings() == UserSettings()

    async def test_save_and_read(self, store):
        await store.save_settings(UserSettings(cache_duration_minutes=5, monitored_paths=["/x/"]))

        user_settings = await store.read_settings()

        assert user_settings.cache_duration_minutes == 5
        assert user_settings.monitored_paths == ["/x/"]

    async def test_initialize_defaults_runs_once(self, store):
        assert await store.initialize_defaults() is True
        await store.save_settings(UserSettings(cache_duration_minutes=30))

        assert await store.initialize_defaults() is False
        assert (await store.read_settings()).cache_duration_minutes == 30

    async def test_initialize_keeps_existing_state(self, store):
        await store.replace(_state())

        await store.initialize_defaults()

        assert "AAPL" in (await store.read()).holdings_table


class TestDumpAndScheduler:
    async def test_dump_layout(self, store):
        await store.replace(_state())

        dump = await store.dump()

        assert set(dump) == {"settings", "holdings_table", "last_sync_timestamp", "debug_info"}
        assert dump["settings"]["cache_duration_minutes"] == UserSettings().cache_duration_minutes
        assert set(dump["debug_info"]) == {"portfolios_found", "holdings_per_portfolio"}

    async def test_scheduler_registration_claimed_once(self, store, fake_redis):
        assert await store.claim_scheduler_registration(ttl_seconds=60) is True
        assert await store.claim_scheduler_registration(ttl_seconds=60) is False
        assert 0 < await fake_redis.ttl(store.keys.scheduler_heartbeat) <= 60

    async def test_heartbeat_blocks_claim(self, store):
        await store.touch_scheduler_heartbeat(ttl_seconds=60)

        assert await store.claim_scheduler_registration() is False
