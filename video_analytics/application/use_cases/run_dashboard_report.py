"""Run a dashboard report (kpis, topVideos, videoFunnel)."""

from typing import Awaitable, Callable

import structlog

from video_analytics.application.dto.dashboard import DashboardQueryParams
from video_analytics.application.dto.serialization import to_json
from video_analytics.application.services.metrics_query_engine import MetricsQueryEngine
from video_analytics.domain.entities import MetricQuery
from video_analytics.domain.errors import InvalidQueryError
from video_analytics.domain.ports import ClockPort
from video_analytics.domain.types import JsonDict, JsonValue

logger = structlog.get_logger()

ReportRunner = Callable[[MetricsQueryEngine, MetricQuery, DashboardQueryParams], Awaitable[JsonValue]]

_REPORTS: dict[str, ReportRunner] = {}


def _register_report(kind: str, runner: ReportRunner) -> None:
    """Register a report runner."""
    _REPORTS[kind] = runner


async def _kpis(engine: MetricsQueryEngine, query: MetricQuery, params: DashboardQueryParams) -> JsonValue:
    kpis = await engine.overview_kpis(query.date_start, query.date_end, query.locale, query.country)
    return to_json(kpis)


async def _top_videos(engine: MetricsQueryEngine, query: MetricQuery, params: DashboardQueryParams) -> JsonValue:
    table = await engine.top_videos_table(query.date_start, query.date_end, query.locale, query.country)
    return to_json(table)


async def _video_funnel(engine: MetricsQueryEngine, query: MetricQuery, params: DashboardQueryParams) -> JsonValue:
    steps = await engine.video_funnel(
        query.date_start, query.date_end, params.video_id, query.locale, query.country
    )
    return to_json(steps)


_register_report("kpis", _kpis)
_register_report("topVideos", _top_videos)
_register_report("videoFunnel", _video_funnel)


async def run(params: DashboardQueryParams, engine: MetricsQueryEngine, clock: ClockPort) -> JsonDict:
    """Resolve the window and run the requested report."""
    runner = _REPORTS.get(params.report)
    if runner is None:
        raise InvalidQueryError(f"Unknown report: {params.report}")

    query = params.to_metric_query(clock.today())
    logger.info(
        "dashboard_report_requested",
        report=params.report,
        date_start=query.date_start,
        date_end=query.date_end,
        locale=query.locale or "all",
        country=query.country or "all",
        video_id=params.video_id,
    )

    data = await runner(engine, query, params)
    return {
        "report": params.report,
        "dateRange": {"startDate": query.date_start, "endDate": query.date_end},
        "lang": params.lang,
        "country": params.country,
        "data": data,
    }
