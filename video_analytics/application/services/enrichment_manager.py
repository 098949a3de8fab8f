"""Location enrichment job manager.

Runs at most one geolocation enrichment job per (date_from, date_to, language,
include_production) key. Repeated requests inside the debounce window get the
existing job back, lookups are throttled in small staggered batches, and
repeated job failures open a circuit breaker that answers "degraded" without
doing any work.
"""

import asyncio
from datetime import timedelta
from typing import Awaitable, Callable
from uuid import uuid4

import structlog

from video_analytics.application.services.circuit_breaker import CircuitBreaker
from video_analytics.application.services.reconciliation import round_half_up
from video_analytics.domain.entities import AnalyticsSession, EnrichmentJob, EnrichmentJobKey
from video_analytics.domain.enums import JobState
from video_analytics.domain.errors import EnrichmentError
from video_analytics.domain.ports import ClockPort, LocationLookupPort, SessionStoragePort
from video_analytics.domain.types import EnrichmentStatsDict, Timestamp
from video_analytics.infrastructure.observability.metrics import (
    enrichment_degraded,
    enrichment_ips_processed,
    enrichment_jobs_failed,
    enrichment_jobs_started,
    enrichment_jobs_succeeded,
)

logger = structlog.get_logger()

CIRCUIT_OPEN_JOB_ID = "circuit_open"
CIRCUIT_OPEN_MESSAGE = "Service temporarily unavailable due to repeated failures"
_UNROUTABLE_IPS = {"", "0.0.0.0"}


def unique_ip_addresses(sessions: list[AnalyticsSession]) -> list[str]:
    """Distinct usable IP addresses in first-seen order."""
    ips = (s.ip_address for s in sessions if s.ip_address and s.ip_address not in _UNROUTABLE_IPS)
    return list(dict.fromkeys(ips))


class EnrichmentJobManager:
    """Deduplicating, throttled, circuit-broken enrichment job coordinator.

    All job map and breaker state is owned here. Check-and-create in
    start_enrichment contains no await, so it is atomic on the event loop.
    """

    def __init__(
        self,
        storage: SessionStoragePort,
        location_lookup: LocationLookupPort,
        clock: ClockPort,
        debounce: timedelta = timedelta(seconds=60),
        job_ttl: timedelta = timedelta(minutes=5),
        max_failures: int = 3,
        circuit_open_duration: timedelta = timedelta(minutes=5),
        concurrency_limit: int = 2,
        stagger_seconds: float = 1.0,
        batch_pause_seconds: float = 2.0,
        sweep_interval_seconds: float = 60.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """Initialize enrichment manager."""
        self.storage = storage
        self.location_lookup = location_lookup
        self.clock = clock
        self.debounce = debounce
        self.job_ttl = job_ttl
        self.concurrency_limit = max(1, concurrency_limit)
        self.stagger_seconds = stagger_seconds
        self.batch_pause_seconds = batch_pause_seconds
        self.sweep_interval_seconds = sweep_interval_seconds
        self.circuit_breaker = CircuitBreaker(max_failures, circuit_open_duration)
        self._sleep = sleep
        self._jobs: dict[str, EnrichmentJob] = {}
        self._tasks: set[asyncio.Task] = set()
        self._sweeper: asyncio.Task | None = None

    # ========================================================================
    # Public operations
    # ========================================================================

    async def start_enrichment(self, key: EnrichmentJobKey) -> EnrichmentJob:
        """Return the active job for key, or create and schedule a new one."""
        now = self.clock.now()

        if not self.circuit_breaker.allow(now):
            enrichment_degraded.inc()
            logger.warning("enrichment_degraded", key=key.cache_key)
            return EnrichmentJob(
                job_id=CIRCUIT_OPEN_JOB_ID,
                state=JobState.DEGRADED,
                progress=0,
                started_at=now,
                ttl=now + self.job_ttl,
                error=CIRCUIT_OPEN_MESSAGE,
            )

        cache_key = key.cache_key
        existing = self._jobs.get(cache_key)
        if existing is not None:
            age = now - existing.started_at
            if age < self.debounce and existing.state != JobState.ERROR:
                logger.info(
                    "enrichment_job_reused",
                    job_id=existing.job_id,
                    age_ms=int(age.total_seconds() * 1000),
                )
                return existing
            if existing.state == JobState.RUNNING:
                logger.info("enrichment_job_still_running", job_id=existing.job_id)
                return existing

        job = EnrichmentJob(
            job_id=self._new_job_id(now),
            state=JobState.QUEUED,
            progress=0,
            started_at=now,
            ttl=now + self.job_ttl,
        )
        self._jobs[cache_key] = job
        logger.info("enrichment_job_created", job_id=job.job_id, key=cache_key)

        task = asyncio.create_task(self._process_job(job, key))
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)
        return job

    def get_job_status(self, key: EnrichmentJobKey) -> EnrichmentJob | None:
        """Look up the job for key without side effects."""
        return self._jobs.get(key.cache_key)

    def get_stats(self) -> EnrichmentStatsDict:
        """Snapshot of jobs and breaker state."""
        now = self.clock.now()
        return {
            "activeJobs": len(self._jobs),
            "circuitBreakerOpen": self.circuit_breaker.is_open,
            "circuitBreakerFailures": self.circuit_breaker.failure_count,
            "jobs": [
                {
                    "key": cache_key,
                    "jobId": job.job_id,
                    "state": job.state.value,
                    "progress": job.progress,
                    "ageMs": int((now - job.started_at).total_seconds() * 1000),
                }
                for cache_key, job in self._jobs.items()
            ],
        }

    def sweep_expired(self) -> int:
        """Forget jobs whose ttl has passed, whatever their state."""
        now = self.clock.now()
        expired = [cache_key for cache_key, job in self._jobs.items() if now > job.ttl]
        for cache_key in expired:
            job = self._jobs.pop(cache_key)
            logger.info("enrichment_job_expired", job_id=job.job_id, state=job.state.value)
        return len(expired)

    # ========================================================================
    # Lifecycle
    # ========================================================================

    def start(self) -> None:
        """Start the periodic ttl sweep."""
        if self._sweeper is None or self._sweeper.done():
            self._sweeper = asyncio.create_task(self._sweep_loop())

    async def stop(self) -> None:
        """Stop the sweep and cancel jobs still in flight (process shutdown)."""
        pending = [t for t in (self._sweeper, *self._tasks) if t is not None and not t.done()]
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
        self._sweeper = None

    async def _sweep_loop(self) -> None:
        while True:
            await asyncio.sleep(self.sweep_interval_seconds)
            self.sweep_expired()

    # ========================================================================
    # Job processing
    # ========================================================================

    async def _process_job(self, job: EnrichmentJob, key: EnrichmentJobKey) -> None:
        """Enrich every session IP of the key's window, in throttled batches."""
        job.state = JobState.RUNNING
        enrichment_jobs_started.inc()
        logger.info("enrichment_job_running", job_id=job.job_id, key=key.cache_key)

        try:
            ips = await self._load_ips(key)
            job.total_ips = len(ips)
            job.processed_ips = 0
            logger.info("enrichment_ips_collected", job_id=job.job_id, unique_ips=len(ips))

            for offset in range(0, len(ips), self.concurrency_limit):
                batch = ips[offset : offset + self.concurrency_limit]
                await asyncio.gather(
                    *(self._enrich_ip(job, ip, index) for index, ip in enumerate(batch))
                )
                if offset + self.concurrency_limit < len(ips):
                    await self._sleep(self.batch_pause_seconds)

        except Exception as e:
            job.state = JobState.ERROR
            job.error = str(e) or type(e).__name__
            enrichment_jobs_failed.inc()
            self.circuit_breaker.record_failure(self.clock.now())
            logger.error(
                "enrichment_job_failed",
                job_id=job.job_id,
                error=job.error,
                failure_count=self.circuit_breaker.failure_count,
                exc_info=True,
            )
            return

        job.state = JobState.SUCCESS
        job.progress = 100
        enrichment_jobs_succeeded.inc()
        logger.info(
            "enrichment_job_completed",
            job_id=job.job_id,
            processed_ips=job.processed_ips,
            total_ips=job.total_ips,
        )

    async def _load_ips(self, key: EnrichmentJobKey) -> list[str]:
        try:
            sessions = await self.storage.get_analytics_sessions(
                key.date_from,
                key.date_to,
                key.language,
                key.include_production,
            )
        except Exception as e:
            raise EnrichmentError(f"Failed to load sessions: {e}") from e
        return unique_ip_addresses(sessions)

    async def _enrich_ip(self, job: EnrichmentJob, ip: str, index: int) -> None:
        """Look up one IP and write its location back. Never raises."""
        outcome = "error"
        try:
            if index > 0:
                await self._sleep(index * self.stagger_seconds)

            location = await self.location_lookup.get_location_data(ip)
            if location is None:
                outcome = "not_found"
            else:
                await self.storage.update_session_location(ip, location.to_session_location())
                outcome = "enriched"
        except Exception as e:
            logger.warning("enrichment_ip_failed", job_id=job.job_id, ip=ip, error=str(e))

        job.processed_ips = (job.processed_ips or 0) + 1
        if job.total_ips:
            job.progress = round_half_up(job.processed_ips / job.total_ips * 100)
        enrichment_ips_processed.labels(outcome=outcome).inc()

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error("enrichment_task_crashed", error=str(error), exc_info=error)

    @staticmethod
    def _new_job_id(now: Timestamp) -> str:
        return f"enrich_{int(now.timestamp() * 1000)}_{uuid4().hex[:9]}"
