"""Periodic location enrichment runner."""

import asyncio

import structlog

from video_analytics.application.services.enrichment_manager import EnrichmentJobManager
from video_analytics.application.services.reconciliation import shift_days
from video_analytics.domain.entities import EnrichmentJob, EnrichmentJobKey
from video_analytics.domain.ports import ClockPort

logger = structlog.get_logger()


class EnrichmentScheduler:
    """Requests enrichment of the trailing lookback window on an interval."""

    def __init__(
        self,
        manager: EnrichmentJobManager,
        clock: ClockPort,
        interval_seconds: float,
        lookback_days: int = 1,
        include_production: bool = True,
    ) -> None:
        """Initialize enrichment scheduler."""
        self.manager = manager
        self.clock = clock
        self.interval_seconds = interval_seconds
        self.lookback_days = lookback_days
        self.include_production = include_production

    def current_key(self) -> EnrichmentJobKey:
        """Window of the last lookback_days days, today included."""
        today = self.clock.today()
        return EnrichmentJobKey(
            date_from=shift_days(today, -(self.lookback_days - 1)),
            date_to=today,
            language=None,
            include_production=self.include_production,
        )

    async def run_once(self) -> EnrichmentJob:
        key = self.current_key()
        job = await self.manager.start_enrichment(key)
        logger.info("scheduled_enrichment_requested", key=key.cache_key, job_id=job.job_id, state=job.state.value)
        return job

    async def run(self, shutdown_event: asyncio.Event) -> None:
        """Run until shutdown_event is set."""
        logger.info("enrichment_scheduler_started", interval_seconds=self.interval_seconds)
        while not shutdown_event.is_set():
            try:
                await self.run_once()
            except Exception as e:
                logger.error("scheduled_enrichment_failed", exc_info=True, error=str(e))

            try:
                await asyncio.wait_for(shutdown_event.wait(), timeout=self.interval_seconds)
            except asyncio.TimeoutError:
                pass
        logger.info("enrichment_scheduler_stopped")
