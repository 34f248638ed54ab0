"""
Unit Tests for StatsTracker

Tests rate derivation and statistics snapshots.
"""

import pytest

from creo_cache.infrastructure.cache.models import StoreStats
from creo_cache.infrastructure.cache.stats_tracker import StatsTracker


@pytest.mark.unit
class TestComputeRates:
    """Test hit/miss rate arithmetic."""

    def test_no_requests_gives_zero_rates(self):
        """Test that both rates are 0 before any lookup, not NaN."""
        assert StatsTracker.compute_rates(0, 0) == (0.0, 0.0)

    def test_rates_are_complementary(self):
        """Test that hitRate + missRate == 1 with at least one request."""
        hit_rate, miss_rate = StatsTracker.compute_rates(3, 1)

        assert hit_rate == 0.75
        assert miss_rate == 0.25

    def test_all_misses(self):
        """Test that only misses gives hitRate 0 and missRate 1."""
        assert StatsTracker.compute_rates(0, 4) == (0.0, 1.0)


@pytest.mark.unit
class TestSnapshot:
    """Test the combined snapshot."""

    @pytest.mark.asyncio
    async def test_snapshot_totals_match_counters(self, memory_store):
        """Test that totalRequests equals hits + misses in a snapshot."""
        tracker = memory_store.tracker
        await tracker.record_hit()
        await tracker.record_hit()
        await tracker.record_miss()

        stats = await tracker.snapshot(StoreStats(total_keys=5, memory_usage_bytes=512))

        assert stats.hits == 2
        assert stats.misses == 1
        assert stats.total_requests == 3
        assert stats.total_keys == 5
        assert stats.to_dict()["hitRate"] == pytest.approx(2 / 3)
        assert stats.to_dict()["totalRequests"] == 3

    @pytest.mark.asyncio
    async def test_snapshot_reads_store_stats_when_not_given(self, memory_store):
        """Test that snapshot queries the store for size figures by default."""
        await memory_store.set("a", 1)

        stats = await memory_store.tracker.snapshot()

        assert stats.total_keys == 1
        assert stats.hit_rate == 0.0
        assert stats.miss_rate == 0.0
