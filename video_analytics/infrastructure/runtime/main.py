"""Main entrypoint."""

import asyncio
import os
import signal
from dataclasses import dataclass
from datetime import timedelta

import structlog
from prometheus_client import start_http_server

from video_analytics.application.services.enrichment_manager import EnrichmentJobManager
from video_analytics.application.services.metrics_query_engine import MetricsQueryEngine
from video_analytics.infrastructure.aws.s3_io import S3IO
from video_analytics.infrastructure.config.settings import Settings
from video_analytics.infrastructure.ga4.data_client import GA4DataClient
from video_analytics.infrastructure.location.ip_geolocation import IpGeolocationClient
from video_analytics.infrastructure.observability.logging import configure_logging
from video_analytics.infrastructure.runtime.clock import SystemClock
from video_analytics.infrastructure.storage.s3_session_store import S3SessionStore
from video_analytics.interfaces.dashboard.handlers import DashboardHandlers
from video_analytics.interfaces.runners.enrichment_scheduler import EnrichmentScheduler

logger = structlog.get_logger()

shutdown_event = asyncio.Event()


def signal_handler() -> None:
    """Handle shutdown signal."""
    logger.info("shutdown_signal_received")
    shutdown_event.set()


@dataclass
class Application:
    """Wired services, for embedding in an HTTP layer or running standalone."""

    engine: MetricsQueryEngine
    manager: EnrichmentJobManager
    handlers: DashboardHandlers
    location_client: IpGeolocationClient
    scheduler: EnrichmentScheduler | None = None

    async def aclose(self) -> None:
        await self.manager.stop()
        await self.location_client.aclose()


def _export_aws_credentials(settings: Settings) -> None:
    # boto3 reads credentials from the environment
    if settings.aws_access_key_id:
        os.environ["AWS_ACCESS_KEY_ID"] = settings.aws_access_key_id
    if settings.aws_secret_access_key:
        os.environ["AWS_SECRET_ACCESS_KEY"] = settings.aws_secret_access_key
    if settings.aws_session_token:
        os.environ["AWS_SESSION_TOKEN"] = settings.aws_session_token


def build_application(settings: Settings) -> Application:
    """Build adapters, engine, manager and handlers from settings."""
    clock = SystemClock()

    engine = MetricsQueryEngine(
        GA4DataClient(settings),
        query_timeout_seconds=settings.ga4_query_timeout_seconds,
        report_timeout_seconds=settings.ga4_report_timeout_seconds,
    )

    store = S3SessionStore(S3IO(settings), settings.sessions_object_key)
    location_client = IpGeolocationClient(settings, clock)
    manager = EnrichmentJobManager(
        store,
        location_client,
        clock,
        debounce=timedelta(seconds=settings.enrichment_debounce_seconds),
        job_ttl=timedelta(seconds=settings.enrichment_job_ttl_seconds),
        max_failures=settings.enrichment_max_failures,
        circuit_open_duration=timedelta(seconds=settings.enrichment_circuit_open_seconds),
        concurrency_limit=settings.enrichment_concurrency_limit,
        stagger_seconds=settings.enrichment_stagger_seconds,
        batch_pause_seconds=settings.enrichment_batch_pause_seconds,
        sweep_interval_seconds=settings.enrichment_sweep_interval_seconds,
    )

    scheduler = None
    if settings.enrichment_schedule_interval_seconds > 0:
        scheduler = EnrichmentScheduler(
            manager,
            clock,
            interval_seconds=settings.enrichment_schedule_interval_seconds,
            lookback_days=settings.enrichment_schedule_lookback_days,
            include_production=settings.enrichment_include_production,
        )

    return Application(
        engine=engine,
        manager=manager,
        handlers=DashboardHandlers(engine, manager, clock),
        location_client=location_client,
        scheduler=scheduler,
    )


async def main_loop() -> None:
    """Main event loop."""
    settings = Settings()
    configure_logging(settings.log_level, settings.log_json)
    logger.info("service_starting")

    _export_aws_credentials(settings)
    logger.info(
        "settings_loaded",
        ga4_property_id=settings.ga4_property_id,
        region=settings.aws_region,
        bucket=settings.aws_s3_bucket,
        sessions_object_key=settings.sessions_object_key,
        schedule_interval_seconds=settings.enrichment_schedule_interval_seconds,
    )

    start_http_server(settings.prometheus_port)

    app = build_application(settings)
    app.manager.start()
    logger.info("service_ready")

    try:
        if app.scheduler is not None:
            await app.scheduler.run(shutdown_event)
        else:
            logger.warning("enrichment_schedule_disabled")
            await shutdown_event.wait()
    finally:
        logger.info("service_shutting_down")
        await app.aclose()


def main() -> None:
    """Entrypoint."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)

    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, signal_handler)

    try:
        loop.run_until_complete(main_loop())
    except KeyboardInterrupt:
        pass
    finally:
        loop.close()


if __name__ == "__main__":
    main()
