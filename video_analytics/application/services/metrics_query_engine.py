"""Metrics query engine - filtered GA4 queries and reconciled dashboard metrics."""

import asyncio
import time
from typing import Awaitable, TypeVar

import structlog

from video_analytics.application.services.filter_builder import (
    PROGRESS_BUCKET_FIELD,
    VIDEO_ID_FIELD,
    combine_filters,
    country_filter,
    describe_filter,
    event_filter,
    with_query_filters,
)
from video_analytics.application.services.reconciliation import (
    previous_period,
    rescale_to_total,
    round_half_up,
)
from video_analytics.application.services.trend_ops import (
    align_with_previous,
    fill_missing_days,
    ga4_date_to_iso,
    total_engagement,
)
from video_analytics.domain.entities import (
    CountryVisitors,
    DailySessions,
    DailyVideoTrend,
    FunnelStep,
    LanguageVisitors,
    OverviewKpis,
    PeriodAggregates,
    ReferrerVisitors,
    ReportRequest,
    ReportResult,
    SessionsTrend,
    SiteLanguageShare,
    VideoCount,
    VideoMetricRow,
    VideoWatchTime,
)
from video_analytics.domain.enums import Locale, VideoEvent
from video_analytics.domain.errors import AnalyticsQueryError, AnalyticsTimeoutError
from video_analytics.domain.filters import AndGroup, BasicFilter, FilterExpression, OrGroup
from video_analytics.domain.ports import AnalyticsDataPort
from video_analytics.domain.types import IsoDate
from video_analytics.infrastructure.observability.metrics import (
    ga4_queries_total,
    ga4_query_duration_seconds,
)

logger = structlog.get_logger()

T = TypeVar("T")

PROGRESS_BUCKETS = (10, 25, 50, 75, 90)
COMPLETION_BUCKET = "100"
# Share of completions used as a proxy for 50% reach (not measured data)
REACH50_FACTOR = 0.7
NOT_SET = "(not set)"

VIDEO_TITLE_FIELD = "customEvent:video_title"
WATCH_TIME_METRIC = "customEvent:watch_time_seconds"
VIDEO_TABLE_LIMIT = 100
COUNTRY_LIMIT = 50
BREAKDOWN_LIMIT = 10
PAGE_PATH_LIMIT = 1000


def completion_filter() -> FilterExpression:
    """video_complete, or video_progress at the 100% bucket."""
    return OrGroup(
        (
            event_filter(VideoEvent.COMPLETE.value),
            AndGroup(
                (
                    event_filter(VideoEvent.PROGRESS.value),
                    BasicFilter(PROGRESS_BUCKET_FIELD, COMPLETION_BUCKET),
                )
            ),
        )
    )


def build_video_rows(
    plays: list[VideoCount],
    completes: list[VideoCount],
    watch_times: list[VideoWatchTime],
) -> list[VideoMetricRow]:
    """Left-join completes and watch time onto plays by video id.

    Average watch time comes only from measured watch time: a video with no
    measured watch time reports 0, whatever its play count.
    """
    completes_by_id = {c.video_id: c.count for c in completes}
    watch_by_id = {w.video_id: w.watch_time_seconds for w in watch_times}

    rows = []
    for play in plays:
        completes_count = completes_by_id.get(play.video_id, 0)
        watch_seconds = watch_by_id.get(play.video_id, 0)

        complete_pct = round_half_up(completes_count / play.count * 100) if play.count > 0 else 0
        complete_pct = min(complete_pct, 100)
        reach50_pct = min(round_half_up(complete_pct * REACH50_FACTOR), 100)

        if play.count > 0 and watch_seconds > 0:
            avg_watch_seconds = round_half_up(watch_seconds / play.count)
        else:
            avg_watch_seconds = 0

        rows.append(
            VideoMetricRow(
                video_id=play.video_id,
                title=play.title,
                plays=play.count,
                completes=completes_count,
                watch_time_seconds=watch_seconds,
                avg_watch_seconds=avg_watch_seconds,
                reach50_pct=reach50_pct,
                complete_pct=complete_pct,
            )
        )
    return rows


def reconcile_countries(raw: list[CountryVisitors], total_users: int) -> list[CountryVisitors]:
    """Rescale a country breakdown so it sums exactly to total_users.

    The breakdown and the total come from different GA4 queries that are known
    to disagree; the total wins. Visitors without any country row are reported
    as "(not set)".
    """
    if sum(c.visitors for c in raw) <= 0:
        return [CountryVisitors(NOT_SET, total_users)] if total_users > 0 else []

    adjusted = rescale_to_total([c.visitors for c in raw], total_users)
    return [
        CountryVisitors(country=c.country, visitors=visitors)
        for c, visitors in zip(raw, adjusted)
        if visitors > 0
    ]


def categorize_site_languages(page_views: list[tuple[str, int]]) -> list[SiteLanguageShare]:
    """Split page views into French and English site variants by URL path."""
    french_views = 0
    english_views = 0
    for path, views in page_views:
        if "/fr-FR" in path or "/fr/" in path:
            french_views += views
        elif "/en-US/" in path:
            english_views += views

    total_views = french_views + english_views
    shares = [
        SiteLanguageShare(
            language="French",
            visitors=french_views,
            percentage=round_half_up(french_views / total_views * 100) if total_views else 0,
        ),
        SiteLanguageShare(
            language="English",
            visitors=english_views,
            percentage=round_half_up(english_views / total_views * 100) if total_views else 0,
        ),
    ]
    return [share for share in shares if share.visitors > 0]


class MetricsQueryEngine:
    """Composes filtered analytics queries and shapes dashboard metrics.

    Low-level counters (sessions, users, plays, completes, ...) raise
    AnalyticsQueryError or AnalyticsTimeoutError. Breakdown and table
    operations catch those and degrade to empty or sentinel results.
    """

    def __init__(
        self,
        data_api: AnalyticsDataPort,
        query_timeout_seconds: float = 2.0,
        report_timeout_seconds: float = 10.0,
    ) -> None:
        """Initialize query engine."""
        self.data_api = data_api
        self.query_timeout_seconds = query_timeout_seconds
        self.report_timeout_seconds = report_timeout_seconds

    # ========================================================================
    # Query execution
    # ========================================================================

    async def _run(self, name: str, request: ReportRequest, timeout: float) -> ReportResult:
        """Run a report within a time budget."""
        logger.debug(
            "ga4_query",
            query=name,
            date_start=request.date_start,
            date_end=request.date_end,
            metrics=list(request.metrics),
            dimensions=list(request.dimensions),
            dimension_filter=describe_filter(request.dimension_filter),
        )
        started = time.perf_counter()
        try:
            result = await asyncio.wait_for(self.data_api.run_report(request), timeout=timeout)
        except asyncio.TimeoutError as e:
            ga4_queries_total.labels(query=name, outcome="timeout").inc()
            logger.error("ga4_query_timeout", query=name, timeout_seconds=timeout)
            raise AnalyticsTimeoutError(f"Analytics query '{name}' exceeded {timeout}s") from e
        except AnalyticsQueryError:
            ga4_queries_total.labels(query=name, outcome="error").inc()
            raise
        except Exception as e:
            ga4_queries_total.labels(query=name, outcome="error").inc()
            raise AnalyticsQueryError(f"Analytics query '{name}' failed: {e}") from e
        finally:
            ga4_query_duration_seconds.labels(query=name).observe(time.perf_counter() - started)

        ga4_queries_total.labels(query=name, outcome="ok").inc()
        return result

    async def _count(
        self,
        name: str,
        start: IsoDate,
        end: IsoDate,
        metric: str,
        dimension_filter: FilterExpression | None,
    ) -> int:
        """Single-metric count."""
        request = ReportRequest(
            date_start=start,
            date_end=end,
            metrics=(metric,),
            dimension_filter=dimension_filter,
        )
        result = await self._run(name, request, self.query_timeout_seconds)
        return result.first_metric_int()

    async def _or_default(self, name: str, operation: Awaitable[T], default: T) -> T:
        """Await an operation, degrading to default on analytics failures."""
        try:
            return await operation
        except AnalyticsQueryError as e:
            logger.warning("ga4_query_degraded", query=name, error=str(e))
            return default

    # ========================================================================
    # Counters
    # ========================================================================

    async def sessions(
        self,
        start: IsoDate,
        end: IsoDate,
        locale: str | None = None,
        country: str | None = None,
    ) -> int:
        """Count sessions for the locale and country filters.

        English sessions are computed as all sessions minus French sessions for
        the same country, so EN + FR == ALL for every country filter.
        """
        if locale == Locale.EN.value:
            all_sessions, fr_sessions = await asyncio.gather(
                self._count("sessions", start, end, "sessions", country_filter(country)),
                self._count(
                    "sessions",
                    start,
                    end,
                    "sessions",
                    combine_filters(Locale.FR.value, country),
                ),
            )
            en_sessions = max(0, all_sessions - fr_sessions)
            logger.info(
                "sessions_en_computed",
                country=country or "all",
                all_sessions=all_sessions,
                fr_sessions=fr_sessions,
                en_sessions=en_sessions,
            )
            return en_sessions

        return await self._count("sessions", start, end, "sessions", combine_filters(locale, country))

    async def total_users(
        self,
        start: IsoDate,
        end: IsoDate,
        locale: str | None = None,
        country: str | None = None,
    ) -> int:
        """Count unique visitors (authoritative user total)."""
        return await self._count("total_users", start, end, "totalUsers", combine_filters(locale, country))

    async def active_users(
        self,
        start: IsoDate,
        end: IsoDate,
        locale: str | None = None,
        country: str | None = None,
    ) -> int:
        return await self._count("active_users", start, end, "activeUsers", combine_filters(locale, country))

    async def page_views(
        self,
        start: IsoDate,
        end: IsoDate,
        locale: str | None = None,
        country: str | None = None,
    ) -> int:
        return await self._count("page_views", start, end, "screenPageViews", combine_filters(locale, country))

    async def average_session_duration(
        self,
        start: IsoDate,
        end: IsoDate,
        locale: str | None = None,
        country: str | None = None,
    ) -> int:
        """Average session duration in whole seconds."""
        request = ReportRequest(
            date_start=start,
            date_end=end,
            metrics=("averageSessionDuration",),
            dimension_filter=combine_filters(locale, country),
        )
        result = await self._run("average_session_duration", request, self.query_timeout_seconds)
        return round_half_up(result.first_metric())

    async def returning_users(
        self,
        start: IsoDate,
        end: IsoDate,
        locale: str | None = None,
        country: str | None = None,
    ) -> int:
        request = ReportRequest(
            date_start=start,
            date_end=end,
            metrics=("activeUsers",),
            dimensions=("newVsReturning",),
            dimension_filter=combine_filters(locale, country),
        )
        result = await self._run("returning_users", request, self.query_timeout_seconds)
        for row in result.rows:
            if row.dimension(0) == "returning":
                return row.metric_int(0)
        return 0

    async def plays(
        self,
        start: IsoDate,
        end: IsoDate,
        locale: str | None = None,
        country: str | None = None,
    ) -> int:
        """Count video_start events."""
        return await self._count(
            "plays",
            start,
            end,
            "eventCount",
            with_query_filters(event_filter(VideoEvent.START.value), locale, country),
        )

    async def completes(
        self,
        start: IsoDate,
        end: IsoDate,
        locale: str | None = None,
        country: str | None = None,
    ) -> int:
        """Count video completions."""
        return await self._count(
            "completes",
            start,
            end,
            "eventCount",
            with_query_filters(completion_filter(), locale, country),
        )

    # ========================================================================
    # Per-video metrics
    # ========================================================================

    async def _fetch_video_counts(
        self,
        name: str,
        event_expr: FilterExpression,
        start: IsoDate,
        end: IsoDate,
        locale: str | None,
        country: str | None,
    ) -> list[VideoCount]:
        request = ReportRequest(
            date_start=start,
            date_end=end,
            metrics=("eventCount",),
            dimensions=(VIDEO_ID_FIELD, VIDEO_TITLE_FIELD),
            dimension_filter=with_query_filters(event_expr, locale, country),
            order_by_metric="eventCount",
            limit=VIDEO_TABLE_LIMIT,
        )
        result = await self._run(name, request, self.report_timeout_seconds)
        counts = [
            VideoCount(
                video_id=row.dimension(0, "unknown"),
                title=row.dimension(1, "Unknown Video"),
                count=row.metric_int(0),
            )
            for row in result.rows
        ]
        return [c for c in counts if c.count > 0]

    async def _fetch_watch_time_by_video(
        self,
        start: IsoDate,
        end: IsoDate,
        locale: str | None,
        country: str | None,
    ) -> list[VideoWatchTime]:
        request = ReportRequest(
            date_start=start,
            date_end=end,
            metrics=("eventCount", WATCH_TIME_METRIC),
            dimensions=(VIDEO_ID_FIELD, VIDEO_TITLE_FIELD),
            dimension_filter=with_query_filters(event_filter(VideoEvent.START.value), locale, country),
            order_by_metric="eventCount",
            limit=VIDEO_TABLE_LIMIT,
        )
        result = await self._run("watch_time_by_video", request, self.report_timeout_seconds)
        videos = [
            VideoWatchTime(
                video_id=row.dimension(0, "unknown"),
                title=row.dimension(1, "Unknown Video"),
                plays=row.metric_int(0),
                watch_time_seconds=row.metric(1),
            )
            for row in result.rows
        ]
        return [v for v in videos if v.plays > 0]

    async def plays_by_video(
        self,
        start: IsoDate,
        end: IsoDate,
        locale: str | None = None,
        country: str | None = None,
    ) -> list[VideoCount]:
        return await self._or_default(
            "plays_by_video",
            self._fetch_video_counts(
                "plays_by_video", event_filter(VideoEvent.START.value), start, end, locale, country
            ),
            [],
        )

    async def completes_by_video(
        self,
        start: IsoDate,
        end: IsoDate,
        locale: str | None = None,
        country: str | None = None,
    ) -> list[VideoCount]:
        return await self._or_default(
            "completes_by_video",
            self._fetch_video_counts("completes_by_video", completion_filter(), start, end, locale, country),
            [],
        )

    async def watch_time_by_video(
        self,
        start: IsoDate,
        end: IsoDate,
        locale: str | None = None,
        country: str | None = None,
    ) -> list[VideoWatchTime]:
        """Measured watch time per video, ordered by plays.

        This is the only source of watch time. Missing values are 0 and are
        never estimated from plays or durations.
        """
        return await self._or_default(
            "watch_time_by_video",
            self._fetch_watch_time_by_video(start, end, locale, country),
            [],
        )

    async def watch_time_total(
        self,
        start: IsoDate,
        end: IsoDate,
        locale: str | None = None,
        country: str | None = None,
    ) -> int:
        """Total measured watch time in seconds."""
        videos = await self.watch_time_by_video(start, end, locale, country)
        return round_half_up(sum(v.watch_time_seconds for v in videos))

    async def top_videos_table(
        self,
        start: IsoDate,
        end: IsoDate,
        locale: str | None = None,
        country: str | None = None,
    ) -> list[VideoMetricRow]:
        """Top videos with completion, reach and average watch time.

        Returns a single unavailable row when the table cannot be built.
        """
        try:
            plays, completes, watch_times = await asyncio.gather(
                self._fetch_video_counts(
                    "plays_by_video", event_filter(VideoEvent.START.value), start, end, locale, country
                ),
                self.completes_by_video(start, end, locale, country),
                self.watch_time_by_video(start, end, locale, country),
            )
        except Exception as e:
            logger.error("top_videos_table_failed", error=str(e), exc_info=True)
            return [VideoMetricRow.unavailable()]

        rows = build_video_rows(plays, completes, watch_times)
        logger.info(
            "top_videos_table_built",
            video_count=len(rows),
            completes_count=len(completes),
            watch_time_count=len(watch_times),
        )
        return rows

    # ========================================================================
    # Breakdowns
    # ========================================================================

    async def top_countries(self, start: IsoDate, end: IsoDate) -> list[CountryVisitors]:
        """Visitors per country, reconciled to the authoritative user total."""
        breakdown_request = ReportRequest(
            date_start=start,
            date_end=end,
            metrics=("activeUsers",),
            dimensions=("country",),
            order_by_metric="activeUsers",
            limit=COUNTRY_LIMIT,
        )
        try:
            total_users, breakdown = await asyncio.gather(
                self.total_users(start, end),
                self._run("country_breakdown", breakdown_request, self.report_timeout_seconds),
            )
        except AnalyticsQueryError as e:
            logger.warning("top_countries_degraded", error=str(e))
            return []

        raw = [
            CountryVisitors(country=row.dimension(0, "Unknown"), visitors=row.metric_int(0))
            for row in breakdown.rows
        ]
        countries = reconcile_countries(raw, total_users)
        logger.info(
            "top_countries_reconciled",
            raw_sum=sum(c.visitors for c in raw),
            total_users=total_users,
            country_count=len(countries),
        )
        return countries

    async def top_languages(self, start: IsoDate, end: IsoDate) -> list[LanguageVisitors]:
        """Visitors per browser language, top 10."""
        request = ReportRequest(
            date_start=start,
            date_end=end,
            metrics=("activeUsers",),
            dimensions=("language",),
            order_by_metric="activeUsers",
            limit=BREAKDOWN_LIMIT,
        )
        result = await self._or_default(
            "top_languages",
            self._run("top_languages", request, self.report_timeout_seconds),
            ReportResult(),
        )
        return [
            LanguageVisitors(language=row.dimension(0, "unknown"), visitors=row.metric_int(0))
            for row in result.rows
        ]

    async def top_referrers(self, start: IsoDate, end: IsoDate) -> list[ReferrerVisitors]:
        """Sessions per traffic source, top 10."""
        request = ReportRequest(
            date_start=start,
            date_end=end,
            metrics=("sessions",),
            dimensions=("sessionSource",),
            order_by_metric="sessions",
            limit=BREAKDOWN_LIMIT,
        )
        result = await self._or_default(
            "top_referrers",
            self._run("top_referrers", request, self.report_timeout_seconds),
            ReportResult(),
        )
        referrers = [
            ReferrerVisitors(referrer=row.dimension(0, "Unknown"), visitors=row.metric_int(0))
            for row in result.rows
        ]
        return [r for r in referrers if r.visitors > 0]

    async def site_language_choice(self, start: IsoDate, end: IsoDate) -> list[SiteLanguageShare]:
        """Page views per site language variant, from URL paths."""
        request = ReportRequest(
            date_start=start,
            date_end=end,
            metrics=("screenPageViews",),
            dimensions=("pagePath",),
            order_by_metric="screenPageViews",
            limit=PAGE_PATH_LIMIT,
        )
        result = await self._or_default(
            "site_language_choice",
            self._run("site_language_choice", request, self.report_timeout_seconds),
            ReportResult(),
        )
        page_views = [(row.dimension(0), row.metric_int(0)) for row in result.rows if row.metric_int(0) > 0]
        return categorize_site_languages(page_views)

    # ========================================================================
    # Trends and funnel
    # ========================================================================

    async def sessions_trend(
        self,
        start: IsoDate,
        end: IsoDate,
        locale: str | None = None,
        country: str | None = None,
    ) -> list[DailySessions]:
        """Daily website sessions, one row per day of the period."""
        request = ReportRequest(
            date_start=start,
            date_end=end,
            metrics=(
                "sessions",
                "totalUsers",
                "bounceRate",
                "averageSessionDuration",
                "userEngagementDuration",
            ),
            dimensions=("date",),
            dimension_filter=combine_filters(locale, country),
        )
        result = await self._run("sessions_trend", request, self.report_timeout_seconds)
        rows = [
            DailySessions(
                date=ga4_date_to_iso(row.dimension(0)),
                sessions=row.metric_int(0),
                users=row.metric_int(1),
                bounce_rate=row.metric(2) * 100,
                avg_session_duration=round_half_up(row.metric(3)),
                total_engagement_seconds=round_half_up(row.metric(4)),
            )
            for row in result.rows
        ]
        return fill_missing_days(rows, start, end)

    async def sessions_trend_with_comparison(
        self,
        start: IsoDate,
        end: IsoDate,
        locale: str | None = None,
        country: str | None = None,
    ) -> SessionsTrend:
        """Daily sessions for the period and the preceding period of equal length.

        Period totals come from sessions() and total_users(), the same counters
        the overview uses, not from summing the daily rows.
        """
        prev_start, prev_end = previous_period(start, end)
        logger.info(
            "sessions_trend_with_comparison",
            period=f"{start}..{end}",
            previous_period=f"{prev_start}..{prev_end}",
            locale=locale or "all",
            country=country or "all",
        )

        (
            current,
            previous,
            period_sessions,
            period_users,
            prev_period_sessions,
            prev_period_users,
        ) = await asyncio.gather(
            self.sessions_trend(start, end, locale, country),
            self.sessions_trend(prev_start, prev_end, locale, country),
            self.sessions(start, end, locale, country),
            self.total_users(start, end, locale, country),
            self.sessions(prev_start, prev_end, locale, country),
            self.total_users(prev_start, prev_end, locale, country),
        )

        current_engagement = total_engagement(current)
        previous_engagement = total_engagement(previous)

        aggregates = PeriodAggregates(
            period_sessions=period_sessions,
            period_users=period_users,
            period_average_watch_time=(
                round_half_up(current_engagement / period_sessions) if period_sessions > 0 else 0
            ),
            period_total_engagement=current_engagement,
            prev_period_sessions=prev_period_sessions,
            prev_period_users=prev_period_users,
            prev_period_average_watch_time=(
                round_half_up(previous_engagement / prev_period_sessions) if prev_period_sessions > 0 else 0
            ),
            prev_period_total_engagement=previous_engagement,
        )
        return SessionsTrend(
            daily_data=align_with_previous(current, previous),
            period_aggregates=aggregates,
        )

    async def video_trend_daily(
        self,
        start: IsoDate,
        end: IsoDate,
        locale: str | None = None,
        country: str | None = None,
    ) -> list[DailyVideoTrend]:
        """Daily plays with measured average watch time per play."""
        request = ReportRequest(
            date_start=start,
            date_end=end,
            metrics=("eventCount", WATCH_TIME_METRIC),
            dimensions=("date",),
            dimension_filter=with_query_filters(event_filter(VideoEvent.START.value), locale, country),
        )
        result = await self._run("video_trend_daily", request, self.report_timeout_seconds)

        trend = []
        for row in result.rows:
            plays = row.metric_int(0)
            watch_seconds = row.metric(1)
            trend.append(
                DailyVideoTrend(
                    date=ga4_date_to_iso(row.dimension(0)),
                    plays=plays,
                    avg_watch_seconds=(
                        round_half_up(watch_seconds / plays) if plays > 0 and watch_seconds > 0 else 0
                    ),
                )
            )
        return sorted(trend, key=lambda day: day.date)

    async def video_funnel(
        self,
        start: IsoDate,
        end: IsoDate,
        video_id: str | None = None,
        locale: str | None = None,
        country: str | None = None,
    ) -> list[FunnelStep]:
        """Progress events per bucket, one independent query per bucket.

        Counts are not cumulative and need not be monotonic since viewers seek.
        """
        video_expr = BasicFilter(VIDEO_ID_FIELD, video_id) if video_id else None

        async def count_bucket(bucket: int) -> FunnelStep:
            count = await self._count(
                f"funnel_{bucket}",
                start,
                end,
                "eventCount",
                with_query_filters(
                    event_filter(VideoEvent.PROGRESS.value),
                    locale,
                    country,
                    BasicFilter(PROGRESS_BUCKET_FIELD, str(bucket)),
                    video_expr,
                ),
            )
            return FunnelStep(bucket=bucket, count=count)

        try:
            return list(await asyncio.gather(*(count_bucket(bucket) for bucket in PROGRESS_BUCKETS)))
        except AnalyticsQueryError as e:
            logger.warning("video_funnel_degraded", video_id=video_id, error=str(e))
            return [FunnelStep(bucket=bucket, count=0) for bucket in PROGRESS_BUCKETS]

    # ========================================================================
    # Overview
    # ========================================================================

    async def overview_kpis(
        self,
        start: IsoDate,
        end: IsoDate,
        locale: str | None = None,
        country: str | None = None,
    ) -> OverviewKpis:
        """Overview dashboard cards. Counter failures propagate."""
        (
            sessions,
            total_users,
            active_users,
            returning_users,
            page_views,
            plays,
            completes,
            watch_time_seconds,
            average_session_duration,
        ) = await asyncio.gather(
            self.sessions(start, end, locale, country),
            self.total_users(start, end, locale, country),
            self.active_users(start, end, locale, country),
            self.returning_users(start, end, locale, country),
            self.page_views(start, end, locale, country),
            self.plays(start, end, locale, country),
            self.completes(start, end, locale, country),
            self.watch_time_total(start, end, locale, country),
            self.average_session_duration(start, end, locale, country),
        )
        completion_rate = min(round_half_up(completes / plays * 100), 100) if plays > 0 else 0

        return OverviewKpis(
            sessions=sessions,
            total_users=total_users,
            active_users=active_users,
            returning_users=returning_users,
            page_views=page_views,
            plays=plays,
            completes=completes,
            watch_time_seconds=watch_time_seconds,
            average_session_duration=average_session_duration,
            completion_rate=completion_rate,
        )
