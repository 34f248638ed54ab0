"""
Cache Warmer

Pre-populates hot keys (provider catalogs, popular searches, system stats)
before users ask for them.

Architecture:
    CacheWarmer
        ├── registry of WarmJob (assembled at startup, frozen afterwards)
        ├── fixed pool of workers draining an asyncio.Queue
        └── WarmReport (succeeded / failed per run)
    WarmScheduler
        └── background task calling warm_all() on an interval

Run semantics:
    - At most max_concurrency jobs run at once; the rest wait in the queue
    - Each job: PENDING -> RUNNING -> SUCCEEDED | FAILED, no retries in a run
    - A job's exception or timeout fails that job only
    - Each job is bounded by min(job_timeout, time left before the run deadline)
    - cancel(): running jobs finish, queued jobs are reported as "Cancelled"

Author: Creo Platform Team
Date: 2026-01-14
"""

import asyncio
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

from creo_cache.config.constants import JobState
from creo_cache.config.settings import Settings
from creo_cache.core.exceptions import (
    DuplicateJobError,
    EmptyRegistryError,
    JobFailedError,
    RegistryFrozenError,
    WarmCancelledError,
    WarmerError,
)
from creo_cache.core.logging.logger import get_logger, log_stage
from creo_cache.infrastructure.cache.cache_store import CacheStore
from creo_cache.infrastructure.monitoring.metrics_collector import (
    MetricsCollector,
    get_metrics_collector,
)

logger = get_logger(__name__)

CANCELLED_REASON = "Cancelled"
DEADLINE_REASON = "Deadline exceeded before start"


# =============================================================================
# LAYER 1: JOBS AND REPORTS
# =============================================================================


@dataclass(frozen=True)
class WarmJob:
    """
    Computes one value and stores it under a known key.

    Running a job twice leaves the same cache state: the store write
    overwrites whatever was there.
    """

    name: str
    key: str
    fetch: Callable[[], Awaitable[Any]]
    ttl: int | None = None

    async def run(self, store: CacheStore) -> None:
        try:
            value = await self.fetch()
        except Exception as e:
            raise JobFailedError.from_exception(e, job=self.name) from e
        await store.set(self.key, value, self.ttl)


@dataclass(frozen=True)
class FailedJob:
    name: str
    reason: str


@dataclass
class WarmReport:
    succeeded: list[str] = field(default_factory=list)
    failed: list[FailedJob] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed

    def to_dict(self) -> dict[str, Any]:
        return {
            "succeeded": list(self.succeeded),
            "failed": [{"name": job.name, "reason": job.reason} for job in self.failed],
        }


class _WarmRun:
    """Mutable bookkeeping for one warm_all invocation."""

    def __init__(self, jobs: list[WarmJob], deadline_at: float):
        self.jobs = jobs
        self.deadline_at = deadline_at
        self.cancel_event = asyncio.Event()
        self.states: dict[str, JobState] = {job.name: JobState.PENDING for job in jobs}
        self.reasons: dict[str, str] = {}
        self.queue: asyncio.Queue[WarmJob] = asyncio.Queue()
        for job in jobs:
            self.queue.put_nowait(job)

    def settle(self, job: WarmJob, state: JobState, reason: str | None = None) -> None:
        self.states[job.name] = state
        if reason is not None:
            self.reasons[job.name] = reason

    def report(self) -> WarmReport:
        report = WarmReport()
        for job in self.jobs:
            state = self.states[job.name]
            if state == JobState.SUCCEEDED:
                report.succeeded.append(job.name)
            elif state.is_terminal:
                report.failed.append(FailedJob(job.name, self.reasons.get(job.name, "Failed")))
            else:
                report.failed.append(FailedJob(job.name, CANCELLED_REASON))
        return report


# =============================================================================
# LAYER 2: WARMER
# =============================================================================


class CacheWarmer:
    """
    Runs registered warm jobs with bounded concurrency.

    Usage:
        warmer = CacheWarmer.from_settings(store, settings)
        warmer.register(WarmJob("ai-styles", CacheKeys.AI_STYLES, catalog.fetch_ai_styles))
        warmer.freeze()
        report = await warmer.warm_all()
    """

    def __init__(
        self,
        store: CacheStore,
        max_concurrency: int = 4,
        job_timeout: float = 30.0,
        deadline: float = 120.0,
        metrics: MetricsCollector | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        self._store = store
        self._max_concurrency = max_concurrency
        self._job_timeout = job_timeout
        self._deadline = deadline
        self._metrics = metrics or get_metrics_collector()
        self._clock = clock
        self._jobs: dict[str, WarmJob] = {}
        self._frozen = False
        self._closed = False
        self._run_lock = asyncio.Lock()
        self._current_run: _WarmRun | None = None

    @classmethod
    def from_settings(
        cls, store: CacheStore, settings: Settings, metrics: MetricsCollector | None = None
    ) -> "CacheWarmer":
        warming = settings.warming
        return cls(
            store,
            max_concurrency=warming.WARM_MAX_CONCURRENCY,
            job_timeout=warming.WARM_JOB_TIMEOUT,
            deadline=warming.WARM_DEADLINE,
            metrics=metrics,
        )

    # -------------------------------------------------------------------------
    # Registry
    # -------------------------------------------------------------------------

    def register(self, job: WarmJob) -> None:
        """
        Add a job to the registry.

        Raises:
            RegistryFrozenError: After freeze()
            DuplicateJobError: If the name is already registered
        """
        if self._frozen:
            raise RegistryFrozenError(
                "Warm job registry is frozen", details={"job": job.name}
            )
        if job.name in self._jobs:
            raise DuplicateJobError(
                f"Warm job '{job.name}' is already registered", details={"job": job.name}
            )
        self._jobs[job.name] = job
        logger.debug("Warm job registered", stage="WARM.0", job=job.name, key=job.key)

    def freeze(self) -> None:
        self._frozen = True
        logger.info("Warm job registry frozen", stage="WARM.0", jobs=len(self._jobs))

    @property
    def is_frozen(self) -> bool:
        return self._frozen

    @property
    def jobs(self) -> list[WarmJob]:
        return list(self._jobs.values())

    @property
    def is_running(self) -> bool:
        return self._current_run is not None

    # -------------------------------------------------------------------------
    # Running
    # -------------------------------------------------------------------------

    def cancel(self) -> None:
        """
        Ask the current run to stop taking new jobs. Jobs already running
        finish; queued ones are reported as Cancelled.
        """
        if self._current_run is None:
            return
        self._current_run.cancel_event.set()
        logger.info("Warm run cancellation requested", stage="WARM.C")

    def close(self) -> None:
        """Cancel any run in progress and refuse new ones."""
        self._closed = True
        self.cancel()

    async def warm_all(self, require_jobs: bool = False) -> WarmReport:
        """
        Run every registered job and wait for all of them to settle.

        STAGE-WARM: Warm run

        Args:
            require_jobs: Raise instead of returning an empty report when the
                          registry is empty

        Returns:
            WarmReport listing succeeded names and failed names with reasons

        Raises:
            EmptyRegistryError: require_jobs and nothing registered
            WarmCancelledError: The warmer has been shut down
        """
        if self._closed:
            raise WarmCancelledError("Cache warmer is shut down")

        jobs = self.jobs
        if not jobs:
            if require_jobs:
                raise EmptyRegistryError("No warm jobs are registered")
            logger.info("No warm jobs registered", stage="WARM.1")
            return WarmReport()

        async with self._run_lock:
            return await self._run(jobs)

    async def _run(self, jobs: list[WarmJob]) -> WarmReport:
        started = self._clock()
        run = _WarmRun(jobs, deadline_at=started + self._deadline)
        self._current_run = run
        worker_count = min(self._max_concurrency, len(jobs))

        log_stage(logger, "WARM.1", "Warm run started", jobs=len(jobs), workers=worker_count)

        workers = [
            asyncio.create_task(self._worker(run), name=f"cache-warm-worker-{index}")
            for index in range(worker_count)
        ]
        try:
            await asyncio.gather(*workers)
        except asyncio.CancelledError:
            for worker in workers:
                worker.cancel()
            await asyncio.gather(*workers, return_exceptions=True)
            logger.warning("Warm run interrupted", stage="WARM.C")
            raise
        finally:
            self._current_run = None

        report = run.report()
        duration = self._clock() - started
        self._metrics.record_warm_run(duration)
        log_stage(
            logger,
            "WARM.3",
            "Warm run completed",
            succeeded=len(report.succeeded),
            failed=len(report.failed),
            duration_seconds=round(duration, 3),
        )
        return report

    async def _worker(self, run: _WarmRun) -> None:
        while not run.cancel_event.is_set():
            try:
                job = run.queue.get_nowait()
            except asyncio.QueueEmpty:
                return

            remaining = run.deadline_at - self._clock()
            if remaining <= 0:
                self._fail(run, job, DEADLINE_REASON)
                continue

            await self._execute(run, job, min(self._job_timeout, remaining))

    async def _execute(self, run: _WarmRun, job: WarmJob, timeout: float) -> None:
        run.settle(job, JobState.RUNNING)
        log_stage(logger, "WARM.2", "Warm job running", level="debug", job=job.name)

        try:
            await asyncio.wait_for(job.run(self._store), timeout=timeout)
        except asyncio.TimeoutError:
            self._fail(run, job, f"Timed out after {timeout:.1f}s")
        except Exception as e:
            self._fail(run, job, str(e) or e.__class__.__name__, error_type=type(e).__name__)
        else:
            run.settle(job, JobState.SUCCEEDED)
            self._metrics.record_warm_job(succeeded=True)
            log_stage(logger, "WARM.2", "Warm job succeeded", job=job.name, key=job.key)

    def _fail(self, run: _WarmRun, job: WarmJob, reason: str, **context) -> None:
        run.settle(job, JobState.FAILED, reason)
        self._metrics.record_warm_job(succeeded=False)
        log_stage(
            logger, "WARM.2", "Warm job failed", level="warning", job=job.name, reason=reason, **context
        )


# =============================================================================
# LAYER 3: SCHEDULER
# =============================================================================


class WarmScheduler:
    """
    Periodically runs warm_all() in a background task.

    A failing run is logged and the loop keeps going; stop() cancels the
    run in progress cooperatively and then the task itself.
    """

    def __init__(self, warmer: CacheWarmer, interval: float, shutdown_timeout: float = 5.0):
        self._warmer = warmer
        self._interval = interval
        self._shutdown_timeout = shutdown_timeout
        self._shutdown_event = asyncio.Event()
        self._task: asyncio.Task | None = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.is_running:
            return
        self._shutdown_event.clear()
        self._task = asyncio.create_task(self._loop(), name="cache-warm-scheduler")
        logger.info("Warm scheduler started", stage="WARM.S", interval_seconds=self._interval)

    async def _loop(self) -> None:
        while not self._shutdown_event.is_set():
            try:
                await asyncio.wait_for(self._shutdown_event.wait(), timeout=self._interval)
                break
            except asyncio.TimeoutError:
                pass

            try:
                report = await self._warmer.warm_all()
            except WarmerError as e:
                logger.error("Scheduled warm run failed", stage="WARM.S", error=str(e))
                continue
            except Exception as e:
                logger.error(
                    "Scheduled warm run crashed",
                    stage="WARM.S",
                    error=str(e),
                    error_type=type(e).__name__,
                    exc_info=True,
                )
                continue

            logger.info(
                "Scheduled warm run finished",
                stage="WARM.S",
                succeeded=len(report.succeeded),
                failed=len(report.failed),
            )

    async def stop(self) -> None:
        if self._task is None:
            return

        self._shutdown_event.set()
        self._warmer.cancel()
        try:
            await asyncio.wait_for(self._task, timeout=self._shutdown_timeout)
        except asyncio.TimeoutError:
            logger.warning("Warm scheduler shutdown timed out, cancelling", stage="WARM.S")
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        self._task = None
        logger.info("Warm scheduler stopped", stage="WARM.S")
