"""
Unit tests for the cache staleness policy.
"""

from datetime import UTC, datetime, timedelta

from foliosync.services.state_store import is_stale

NOW = datetime(2024, 6, 15, 14, 30, tzinfo=UTC)


class TestIsStale:
    def test_missing_timestamp_is_stale(self):
        assert is_stale(None, 10, NOW) is True
        assert is_stale(None, 60, NOW) is True

    def test_younger_than_duration_is_fresh(self):
        assert is_stale(NOW - timedelta(minutes=9, seconds=59), 10, NOW) is False

    def test_exact_duration_is_fresh(self):
        assert is_stale(NOW - timedelta(minutes=10), 10, NOW) is False

    def test_older_than_duration_is_stale(self):
        assert is_stale(NOW - timedelta(minutes=10, microseconds=1), 10, NOW) is True

    def test_defaults_to_current_time(self):
        assert is_stale(datetime.now(UTC), 1) is False
        assert is_stale(datetime.now(UTC) - timedelta(hours=2), 1) is True
