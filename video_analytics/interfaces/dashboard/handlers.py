"""Dashboard request handlers (framework-agnostic)."""

from typing import Any

import structlog
from pydantic import ValidationError

from video_analytics.application.dto.dashboard import parse_dashboard_query
from video_analytics.application.dto.enrichment import EnrichmentJobStatus, EnrichmentRequest
from video_analytics.application.dto.serialization import to_json
from video_analytics.application.services.enrichment_manager import EnrichmentJobManager
from video_analytics.application.services.metrics_query_engine import MetricsQueryEngine
from video_analytics.application.use_cases.run_dashboard_report import run as run_report
from video_analytics.domain.entities import MetricQuery
from video_analytics.domain.errors import InvalidQueryError
from video_analytics.domain.ports import ClockPort
from video_analytics.domain.types import EnrichmentStatsDict, JsonDict, JsonValue

logger = structlog.get_logger()


def _parse_enrichment_request(body: dict[str, Any]) -> EnrichmentRequest:
    try:
        return EnrichmentRequest.model_validate(body)
    except ValidationError as e:
        raise InvalidQueryError("; ".join(error["msg"] for error in e.errors())) from e


class DashboardHandlers:
    """Entry points for an HTTP layer.

    Query dicts are raw query-string parameters. Handlers return JSON-ready
    data and raise InvalidQueryError for bad input.
    """

    def __init__(self, engine: MetricsQueryEngine, manager: EnrichmentJobManager, clock: ClockPort) -> None:
        """Initialize dashboard handlers."""
        self.engine = engine
        self.manager = manager
        self.clock = clock

    def _query(self, query: dict[str, Any]) -> MetricQuery:
        params = parse_dashboard_query({**query, "report": "kpis"})
        return params.to_metric_query(self.clock.today())

    # ========================================================================
    # Reports
    # ========================================================================

    async def report(self, query: dict[str, Any]) -> JsonDict:
        """Run the report named by the report parameter."""
        return await run_report(parse_dashboard_query(query), self.engine, self.clock)

    async def kpis(self, query: dict[str, Any]) -> JsonDict:
        return await self.report({**query, "report": "kpis"})

    async def top_videos(self, query: dict[str, Any]) -> JsonDict:
        return await self.report({**query, "report": "topVideos"})

    async def video_funnel(self, query: dict[str, Any]) -> JsonDict:
        return await self.report({**query, "report": "videoFunnel"})

    # ========================================================================
    # Breakdowns and trends
    # ========================================================================

    async def top_countries(self, query: dict[str, Any]) -> JsonValue:
        q = self._query(query)
        return to_json(await self.engine.top_countries(q.date_start, q.date_end))

    async def top_languages(self, query: dict[str, Any]) -> JsonValue:
        q = self._query(query)
        return to_json(await self.engine.top_languages(q.date_start, q.date_end))

    async def top_referrers(self, query: dict[str, Any]) -> JsonValue:
        q = self._query(query)
        return to_json(await self.engine.top_referrers(q.date_start, q.date_end))

    async def site_language_choice(self, query: dict[str, Any]) -> JsonValue:
        q = self._query(query)
        return to_json(await self.engine.site_language_choice(q.date_start, q.date_end))

    async def sessions_trend(self, query: dict[str, Any]) -> JsonValue:
        """Daily sessions with the preceding period for comparison."""
        q = self._query(query)
        trend = await self.engine.sessions_trend_with_comparison(q.date_start, q.date_end, q.locale, q.country)
        return to_json(trend)

    async def video_trend(self, query: dict[str, Any]) -> JsonValue:
        q = self._query(query)
        return to_json(await self.engine.video_trend_daily(q.date_start, q.date_end, q.locale, q.country))

    # ========================================================================
    # Location enrichment
    # ========================================================================

    async def start_enrichment(self, body: dict[str, Any]) -> JsonDict:
        """Start (or join) the enrichment job for a window."""
        request = _parse_enrichment_request(body)
        job = await self.manager.start_enrichment(request.to_key())
        return EnrichmentJobStatus.from_job(job).model_dump(by_alias=True, mode="json")

    def enrichment_status(self, query: dict[str, Any]) -> JsonDict | None:
        """Status of the job for a window, or None if there is none."""
        request = _parse_enrichment_request(query)
        job = self.manager.get_job_status(request.to_key())
        if job is None:
            logger.debug("enrichment_job_not_found", key=request.to_key().cache_key)
            return None
        return EnrichmentJobStatus.from_job(job).model_dump(by_alias=True, mode="json")

    def enrichment_stats(self) -> EnrichmentStatsDict:
        return self.manager.get_stats()
