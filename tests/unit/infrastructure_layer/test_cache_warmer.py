"""
Unit Tests for CacheWarmer and WarmScheduler

Tests job isolation, bounded concurrency, timeouts, the run deadline,
cancellation, registry rules and the periodic scheduler.
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from creo_cache.core.exceptions import (
    DuplicateJobError,
    EmptyRegistryError,
    JobFailedError,
    RegistryFrozenError,
    WarmCancelledError,
)
from creo_cache.infrastructure.cache.cache_store import CacheStore
from creo_cache.infrastructure.cache.cache_warmer import (
    CANCELLED_REASON,
    DEADLINE_REASON,
    CacheWarmer,
    WarmJob,
    WarmReport,
    WarmScheduler,
)
from creo_cache.infrastructure.cache.memory_backend import InMemoryBackend
from tests.test_fixtures.cache_factory import CacheTestFactory, FakeClock


@pytest.fixture
def store(test_settings):
    """Unconnected store for tests that never reach the backend."""
    return CacheStore(InMemoryBackend(), test_settings)


def _failed(report: WarmReport) -> dict[str, str]:
    return {job.name: job.reason for job in report.failed}


@pytest.mark.unit
class TestWarmRun:
    """Test warm_all outcomes."""

    @pytest.mark.asyncio
    async def test_one_failing_job_does_not_affect_others(self, memory_store):
        """Test that a failing job is reported while the other jobs still populate their keys."""
        warmer = CacheWarmer(memory_store, max_concurrency=2)
        warmer.register(CacheTestFactory.static_job("providers", ["unsplash"]))
        warmer.register(CacheTestFactory.failing_job("styles", "catalog returned 502"))
        warmer.register(CacheTestFactory.static_job("presets", ["square"]))

        report = await warmer.warm_all()

        assert report.succeeded == ["providers", "presets"]
        assert _failed(report) == {"styles": "catalog returned 502"}
        assert report.ok is False
        assert await memory_store.get("warm:providers") == ["unsplash"]
        assert await memory_store.get("warm:presets") == ["square"]
        assert await memory_store.get("warm:styles") is None

    @pytest.mark.asyncio
    async def test_every_job_is_reported_exactly_once(self, memory_store):
        """Test that succeeded and failed partition the registry."""
        warmer = CacheWarmer(memory_store, max_concurrency=3)
        for i in range(6):
            job = (
                CacheTestFactory.failing_job(f"job-{i}")
                if i % 3 == 0
                else CacheTestFactory.static_job(f"job-{i}")
            )
            warmer.register(job)

        report = await warmer.warm_all()

        names = report.succeeded + [job.name for job in report.failed]
        assert sorted(names) == sorted(f"job-{i}" for i in range(6))
        assert len(report.failed) == 2

    @pytest.mark.asyncio
    async def test_concurrency_is_bounded(self, memory_store):
        """Test that no more than max_concurrency jobs run at once."""
        running = 0
        peak = 0

        def make_job(name):
            async def fetch():
                nonlocal running, peak
                running += 1
                peak = max(peak, running)
                await asyncio.sleep(0.01)
                running -= 1
                return name

            return WarmJob(name, f"warm:{name}", fetch)

        warmer = CacheWarmer(memory_store, max_concurrency=3)
        for i in range(10):
            warmer.register(make_job(f"job-{i}"))

        report = await warmer.warm_all()

        assert len(report.succeeded) == 10
        assert peak == 3

    @pytest.mark.asyncio
    async def test_job_timeout_fails_that_job(self, memory_store):
        """Test that a job exceeding job_timeout is failed with a timeout reason."""
        warmer = CacheWarmer(memory_store, max_concurrency=2, job_timeout=0.05)
        warmer.register(CacheTestFactory.sleeping_job("slow", 1.0))
        warmer.register(CacheTestFactory.static_job("fast"))

        report = await warmer.warm_all()

        assert report.succeeded == ["fast"]
        assert _failed(report)["slow"].startswith("Timed out")

    @pytest.mark.asyncio
    async def test_jobs_after_deadline_are_not_started(self, memory_store):
        """Test that queued jobs fail without running once the run deadline passes."""
        clock = FakeClock()
        started = []

        async def expensive():
            started.append("first")
            clock.advance(20)
            return 1

        async def never():
            started.append("second")
            return 2

        warmer = CacheWarmer(memory_store, max_concurrency=1, deadline=10, clock=clock)
        warmer.register(WarmJob("first", "warm:first", expensive))
        warmer.register(WarmJob("second", "warm:second", never))

        report = await warmer.warm_all()

        assert report.succeeded == ["first"]
        assert _failed(report) == {"second": DEADLINE_REASON}
        assert started == ["first"]

    @pytest.mark.asyncio
    async def test_job_store_failure_is_reported(self, test_settings):
        """Test that a job whose write hits a dead backend is failed, not raised."""
        store = CacheStore(CacheTestFactory.failing_backend(), test_settings)
        warmer = CacheWarmer(store)
        warmer.register(CacheTestFactory.static_job("providers"))

        report = await warmer.warm_all()

        assert _failed(report) == {"providers": "Connection refused"}

    @pytest.mark.asyncio
    async def test_job_fetch_failure_is_wrapped(self, memory_store):
        """Test that WarmJob.run wraps a fetch error in JobFailedError with the job name."""
        job = CacheTestFactory.failing_job("styles", "catalog returned 502")

        with pytest.raises(JobFailedError) as exc_info:
            await job.run(memory_store)

        assert exc_info.value.message == "catalog returned 502"
        assert exc_info.value.details["job"] == "styles"
        assert exc_info.value.details["original_error"] == "RuntimeError"

    @pytest.mark.asyncio
    async def test_warming_twice_is_idempotent(self, memory_store):
        """Test that a second run leaves the same keys and values."""
        warmer = CacheWarmer(memory_store)
        warmer.register(CacheTestFactory.static_job("a", {"v": 1}))

        await warmer.warm_all()
        first = await memory_store.get_many(["warm:a"])
        await warmer.warm_all()

        assert await memory_store.get_many(["warm:a"]) == first

    @pytest.mark.asyncio
    async def test_job_ttl_is_applied(self, memory_store, fake_clock):
        """Test that a job's TTL is used for its key."""
        warmer = CacheWarmer(memory_store)
        warmer.register(CacheTestFactory.static_job("short", "v", ttl=30))

        await warmer.warm_all()
        fake_clock.advance(31)

        assert await memory_store.get("warm:short") is None


@pytest.mark.unit
class TestWarmCancellation:
    """Test cooperative and task-level cancellation."""

    @pytest.mark.asyncio
    async def test_cancel_reports_unstarted_jobs_as_cancelled(self, memory_store):
        """Test that cancel lets the running job finish and cancels queued ones."""
        started = []
        warmer = CacheWarmer(memory_store, max_concurrency=1)
        warmer.register(CacheTestFactory.sleeping_job("a", 0.05, started))
        warmer.register(CacheTestFactory.static_job("b"))
        warmer.register(CacheTestFactory.static_job("c"))

        task = asyncio.create_task(warmer.warm_all())
        while not started:
            await asyncio.sleep(0)
        warmer.cancel()
        report = await task

        assert report.succeeded == ["a"]
        assert _failed(report) == {"b": CANCELLED_REASON, "c": CANCELLED_REASON}

    @pytest.mark.asyncio
    async def test_cancelling_the_caller_stops_workers(self, memory_store):
        """Test that cancelling the awaiting task propagates and ends the run."""
        warmer = CacheWarmer(memory_store, max_concurrency=2)
        warmer.register(CacheTestFactory.sleeping_job("a", 5.0))
        warmer.register(CacheTestFactory.sleeping_job("b", 5.0))

        task = asyncio.create_task(warmer.warm_all())
        await asyncio.sleep(0.01)
        assert warmer.is_running is True

        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert warmer.is_running is False

    @pytest.mark.asyncio
    async def test_closed_warmer_refuses_runs(self, memory_store):
        """Test that warm_all raises WarmCancelledError after close."""
        warmer = CacheWarmer(memory_store)
        warmer.register(CacheTestFactory.static_job("a"))
        warmer.close()

        with pytest.raises(WarmCancelledError):
            await warmer.warm_all()

    def test_cancel_without_run_is_noop(self, store):
        """Test that cancel with nothing running does nothing."""
        warmer = CacheWarmer(store)
        warmer.cancel()

        assert warmer.is_running is False


@pytest.mark.unit
class TestWarmRegistry:
    """Test job registration rules."""

    @pytest.mark.asyncio
    async def test_empty_registry_returns_empty_report(self, memory_store):
        """Test that warming nothing is a successful empty run by default."""
        report = await CacheWarmer(memory_store).warm_all()

        assert report.succeeded == []
        assert report.failed == []
        assert report.ok is True

    @pytest.mark.asyncio
    async def test_empty_registry_raises_when_jobs_required(self, memory_store):
        """Test that require_jobs turns an empty registry into EmptyRegistryError."""
        with pytest.raises(EmptyRegistryError):
            await CacheWarmer(memory_store).warm_all(require_jobs=True)

    def test_register_after_freeze_raises(self, store):
        """Test that the registry rejects jobs once frozen."""
        warmer = CacheWarmer(store)
        warmer.freeze()

        with pytest.raises(RegistryFrozenError):
            warmer.register(CacheTestFactory.static_job("late"))
        assert warmer.is_frozen is True

    def test_duplicate_name_raises(self, store):
        """Test that job names are unique."""
        warmer = CacheWarmer(store)
        warmer.register(CacheTestFactory.static_job("a"))

        with pytest.raises(DuplicateJobError):
            warmer.register(CacheTestFactory.static_job("a"))

    def test_invalid_concurrency_rejected(self, store):
        """Test that max_concurrency must be positive."""
        with pytest.raises(ValueError):
            CacheWarmer(store, max_concurrency=0)

    def test_from_settings_uses_warming_section(self, store, test_settings):
        """Test that from_settings reads the warming configuration."""
        warmer = CacheWarmer.from_settings(store, test_settings)

        assert warmer._max_concurrency == test_settings.WARM_MAX_CONCURRENCY
        assert warmer._job_timeout == test_settings.WARM_JOB_TIMEOUT
        assert warmer._deadline == test_settings.WARM_DEADLINE


@pytest.mark.unit
class TestWarmScheduler:
    """Test the periodic background runner."""

    @pytest.mark.asyncio
    async def test_scheduler_runs_periodically(self, memory_store):
        """Test that the scheduler warms keys on its interval and stops cleanly."""
        warmer = CacheWarmer(memory_store)
        warmer.register(CacheTestFactory.static_job("a", "warm"))
        scheduler = WarmScheduler(warmer, interval=0.01)

        scheduler.start()
        await asyncio.sleep(0.1)
        await scheduler.stop()

        assert scheduler.is_running is False
        assert await memory_store.get("warm:a") == "warm"

    @pytest.mark.asyncio
    async def test_scheduler_survives_failing_runs(self):
        """Test that an exception from a run is logged and the loop continues."""
        warmer = MagicMock()
        warmer.warm_all = AsyncMock(side_effect=RuntimeError("boom"))
        scheduler = WarmScheduler(warmer, interval=0.01)

        scheduler.start()
        await asyncio.sleep(0.1)
        await scheduler.stop()

        assert warmer.warm_all.await_count >= 2
        warmer.cancel.assert_called_once()

    @pytest.mark.asyncio
    async def test_stop_cancels_a_stuck_run(self):
        """Test that stop falls back to task cancellation after the shutdown timeout."""
        warmer = MagicMock()

        async def hang():
            await asyncio.sleep(10)

        warmer.warm_all = hang
        scheduler = WarmScheduler(warmer, interval=0.01, shutdown_timeout=0.05)

        scheduler.start()
        await asyncio.sleep(0.03)
        await scheduler.stop()

        assert scheduler.is_running is False

    @pytest.mark.asyncio
    async def test_stop_without_start_is_noop(self, memory_store):
        """Test that stop before start does nothing."""
        scheduler = WarmScheduler(CacheWarmer(memory_store), interval=60)

        await scheduler.stop()

        assert scheduler.is_running is False
