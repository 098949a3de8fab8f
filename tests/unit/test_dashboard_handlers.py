"""Unit tests for dashboard handlers and the report use case."""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from video_analytics.application.dto.serialization import camel_case, to_json
from video_analytics.domain.entities import (
    CountryVisitors,
    EnrichmentJob,
    FunnelStep,
    OverviewKpis,
    VideoMetricRow,
)
from video_analytics.domain.enums import JobState
from video_analytics.domain.errors import InvalidQueryError
from video_analytics.interfaces.dashboard.handlers import DashboardHandlers

NOW = datetime(2025, 1, 31, 9, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def clock():
    clock = MagicMock()
    clock.now.return_value = NOW
    clock.today.return_value = "2025-01-31"
    return clock


@pytest.fixture
def engine():
    engine = MagicMock()
    engine.overview_kpis = AsyncMock(
        return_value=OverviewKpis(
            sessions=120,
            total_users=90,
            active_users=85,
            returning_users=12,
            page_views=300,
            plays=40,
            completes=10,
            watch_time_seconds=3600,
            average_session_duration=75,
            completion_rate=25,
        )
    )
    engine.top_videos_table = AsyncMock(return_value=[VideoMetricRow.unavailable()])
    engine.video_funnel = AsyncMock(return_value=[FunnelStep(bucket=10, count=5)])
    engine.top_countries = AsyncMock(return_value=[CountryVisitors("US", 13), CountryVisitors("FR", 7)])
    return engine


@pytest.fixture
def manager():
    manager = MagicMock()
    job = EnrichmentJob(
        job_id="enrich_1_abc",
        state=JobState.QUEUED,
        progress=0,
        started_at=NOW,
        ttl=NOW + timedelta(minutes=5),
    )
    manager.start_enrichment = AsyncMock(return_value=job)
    manager.get_job_status = MagicMock(return_value=None)
    manager.get_stats = MagicMock(
        return_value={"activeJobs": 0, "circuitBreakerOpen": False, "circuitBreakerFailures": 0, "jobs": []}
    )
    return manager


@pytest.fixture
def handlers(engine, manager, clock):
    return DashboardHandlers(engine, manager, clock)


def test_camel_case():
    """Test snake_case to camelCase conversion."""
    assert camel_case("avg_watch_seconds") == "avgWatchSeconds"
    assert camel_case("sessions") == "sessions"


def test_to_json_nested():
    """Test dataclass lists serialize with camelCase keys."""
    assert to_json([CountryVisitors("US", 3)]) == [{"country": "US", "visitors": 3}]
    assert to_json(FunnelStep(bucket=50, count=2)) == {"bucket": 50, "count": 2}


@pytest.mark.asyncio
async def test_kpis_report(handlers, engine):
    """Test the kpis report resolves dates and filters."""
    response = await handlers.kpis({"preset": "7d", "lang": "en-us", "country": "fr"})

    engine.overview_kpis.assert_awaited_once_with("2025-01-25", "2025-01-31", "en", "FR")
    assert response["report"] == "kpis"
    assert response["dateRange"] == {"startDate": "2025-01-25", "endDate": "2025-01-31"}
    assert response["lang"] == "en-US"
    assert response["data"]["totalUsers"] == 90
    assert response["data"]["activeUsers"] == 85
    assert response["data"]["pageViews"] == 300
    assert response["data"]["completionRate"] == 25


@pytest.mark.asyncio
async def test_top_videos_report_unavailable_row(handlers):
    """Test the unavailable row is passed through."""
    response = await handlers.top_videos({"startDate": "2025-01-01", "endDate": "2025-01-31"})

    assert response["data"][0]["videoId"] == "error"
    assert response["data"][0]["title"] == "Analytics temporarily unavailable"


@pytest.mark.asyncio
async def test_video_funnel_report(handlers, engine):
    """Test the funnel report passes the video id."""
    response = await handlers.video_funnel({"videoId": "intro", "preset": "today"})

    engine.video_funnel.assert_awaited_once_with("2025-01-31", "2025-01-31", "intro", None, None)
    assert response["data"] == [{"bucket": 10, "count": 5}]


@pytest.mark.asyncio
async def test_video_funnel_without_video_id(handlers):
    """Test a funnel request without a video id is rejected."""
    with pytest.raises(InvalidQueryError, match="videoId"):
        await handlers.video_funnel({})


@pytest.mark.asyncio
async def test_report_dispatch(handlers, engine):
    """Test the generic report entry point."""
    await handlers.report({"report": "topVideos"})

    engine.top_videos_table.assert_awaited_once()


@pytest.mark.asyncio
async def test_top_countries(handlers, engine):
    """Test top countries handler."""
    response = await handlers.top_countries({"preset": "30d"})

    engine.top_countries.assert_awaited_once_with("2025-01-02", "2025-01-31")
    assert response == [{"country": "US", "visitors": 13}, {"country": "FR", "visitors": 7}]


@pytest.mark.asyncio
async def test_start_enrichment(handlers, manager):
    """Test starting enrichment returns the job status."""
    response = await handlers.start_enrichment(
        {"dateFrom": "2025-01-01", "dateTo": "2025-01-31", "includeProduction": True}
    )

    key = manager.start_enrichment.call_args[0][0]
    assert key.cache_key == "2025-01-01_2025-01-31_all_true"
    assert response["jobId"] == "enrich_1_abc"
    assert response["state"] == "queued"
    assert response["startedAt"] == int(NOW.timestamp() * 1000)


@pytest.mark.asyncio
async def test_start_enrichment_invalid(handlers):
    """Test bad enrichment input raises InvalidQueryError."""
    with pytest.raises(InvalidQueryError):
        await handlers.start_enrichment({"dateFrom": "2025-01-01"})


def test_enrichment_status_not_found(handlers):
    """Test status of an unknown job."""
    assert handlers.enrichment_status({"dateFrom": "2025-01-01", "dateTo": "2025-01-31"}) is None


def test_enrichment_stats(handlers):
    """Test stats pass-through."""
    assert handlers.enrichment_stats()["activeJobs"] == 0
