"""Domain entities."""

from dataclasses import dataclass, field
from datetime import timedelta

from video_analytics.domain.enums import JobState
from video_analytics.domain.filters import FilterExpression
from video_analytics.domain.types import IsoDate, Timestamp


# ============================================================================
# Queries and reports
# ============================================================================


@dataclass(frozen=True)
class MetricQuery:
    """Dashboard metric request."""

    date_start: IsoDate
    date_end: IsoDate
    locale: str | None = None
    country: str | None = None


@dataclass(frozen=True)
class ReportRequest:
    """Analytics data API report request."""

    date_start: IsoDate
    date_end: IsoDate
    metrics: tuple[str, ...]
    dimensions: tuple[str, ...] = ()
    dimension_filter: FilterExpression | None = None
    order_by_metric: str | None = None
    limit: int | None = None


@dataclass(frozen=True)
class ReportRow:
    """Single report row of dimension and metric values."""

    dimension_values: tuple[str, ...]
    metric_values: tuple[str, ...]

    def dimension(self, index: int, default: str = "") -> str:
        """Get dimension value at index, or default when absent or empty."""
        if index >= len(self.dimension_values) or not self.dimension_values[index]:
            return default
        return self.dimension_values[index]

    def metric(self, index: int) -> float:
        """Get metric value at index as a number (0 when absent or not numeric)."""
        if index >= len(self.metric_values):
            return 0.0
        try:
            return float(self.metric_values[index])
        except (TypeError, ValueError):
            return 0.0

    def metric_int(self, index: int) -> int:
        """Get metric value at index as an integer."""
        return int(self.metric(index))


@dataclass(frozen=True)
class ReportResult:
    """Analytics data API report result."""

    rows: tuple[ReportRow, ...] = ()

    def first_metric_int(self, index: int = 0) -> int:
        """Get an integer metric from the first row (0 for an empty report)."""
        if not self.rows:
            return 0
        return self.rows[0].metric_int(index)

    def first_metric(self, index: int = 0) -> float:
        """Get a metric from the first row (0 for an empty report)."""
        if not self.rows:
            return 0.0
        return self.rows[0].metric(index)


# ============================================================================
# Dashboard results
# ============================================================================


@dataclass(frozen=True)
class VideoCount:
    """Event count for one video."""

    video_id: str
    title: str
    count: int


@dataclass(frozen=True)
class VideoWatchTime:
    """Authentic watch time for one video."""

    video_id: str
    title: str
    plays: int
    watch_time_seconds: float


@dataclass(frozen=True)
class VideoMetricRow:
    """Row of the top videos table."""

    video_id: str
    title: str
    plays: int
    completes: int
    watch_time_seconds: float
    avg_watch_seconds: int
    reach50_pct: int
    complete_pct: int

    @classmethod
    def unavailable(cls) -> "VideoMetricRow":
        """Sentinel row returned when the table cannot be built."""
        return cls(
            video_id="error",
            title="Analytics temporarily unavailable",
            plays=0,
            completes=0,
            watch_time_seconds=0,
            avg_watch_seconds=0,
            reach50_pct=0,
            complete_pct=0,
        )

    @property
    def is_unavailable(self) -> bool:
        return self.video_id == "error"


@dataclass(frozen=True)
class CountryVisitors:
    """Visitors for one country."""

    country: str
    visitors: int


@dataclass(frozen=True)
class LanguageVisitors:
    """Visitors for one browser language."""

    language: str
    visitors: int


@dataclass(frozen=True)
class ReferrerVisitors:
    """Sessions for one traffic source."""

    referrer: str
    visitors: int


@dataclass(frozen=True)
class SiteLanguageShare:
    """Page views for one site language variant."""

    language: str
    visitors: int
    percentage: int


@dataclass(frozen=True)
class FunnelStep:
    """Progress events for one funnel bucket."""

    bucket: int
    count: int


@dataclass(frozen=True)
class DailyVideoTrend:
    """Video plays for one day."""

    date: IsoDate
    plays: int
    avg_watch_seconds: int


@dataclass(frozen=True)
class DailySessions:
    """Website sessions for one day."""

    date: IsoDate
    sessions: int = 0
    users: int = 0
    bounce_rate: float = 0.0
    avg_session_duration: int = 0
    total_engagement_seconds: int = 0


@dataclass(frozen=True)
class DailySessionsComparison:
    """Daily sessions with the same relative day of the previous period."""

    date: IsoDate
    sessions: int
    users: int
    bounce_rate: float
    avg_session_duration: int
    total_engagement_seconds: int
    previous_sessions: int
    previous_users: int
    previous_bounce_rate: float
    previous_avg_duration: int
    previous_total_engagement_seconds: int


@dataclass(frozen=True)
class PeriodAggregates:
    """Period-level totals for the current and previous periods."""

    period_sessions: int
    period_users: int
    period_average_watch_time: int
    period_total_engagement: int
    prev_period_sessions: int
    prev_period_users: int
    prev_period_average_watch_time: int
    prev_period_total_engagement: int


@dataclass(frozen=True)
class SessionsTrend:
    """Daily sessions trend with comparison and period aggregates."""

    daily_data: list[DailySessionsComparison]
    period_aggregates: PeriodAggregates


@dataclass(frozen=True)
class OverviewKpis:
    """Overview dashboard cards."""

    sessions: int
    total_users: int
    active_users: int
    returning_users: int
    page_views: int
    plays: int
    completes: int
    watch_time_seconds: int
    average_session_duration: int
    completion_rate: int


# ============================================================================
# Sessions and geolocation
# ============================================================================


@dataclass(frozen=True)
class AnalyticsSession:
    """Stored analytics session."""

    session_id: str
    ip_address: str | None
    created_at: str
    language: str | None = None
    is_test_data: bool = False
    country: str | None = None
    region: str | None = None
    city: str | None = None


@dataclass(frozen=True)
class SessionLocation:
    """Location fields written back to sessions."""

    country: str
    region: str
    city: str


@dataclass(frozen=True)
class LocationData:
    """Geolocation lookup result for an IP address."""

    country: str
    region: str
    city: str
    country_code: str | None = None
    region_code: str | None = None
    postal: str = ""
    latitude: float = 0.0
    longitude: float = 0.0
    timezone: str = ""
    org: str = ""

    def to_session_location(self) -> SessionLocation:
        return SessionLocation(country=self.country, region=self.region, city=self.city)


# ============================================================================
# Enrichment jobs
# ============================================================================


@dataclass(frozen=True)
class EnrichmentJobKey:
    """Deduplication unit for enrichment jobs."""

    date_from: IsoDate
    date_to: IsoDate
    language: str | None = None
    include_production: bool = False

    @property
    def cache_key(self) -> str:
        production = "true" if self.include_production else "false"
        return f"{self.date_from}_{self.date_to}_{self.language or 'all'}_{production}"


@dataclass
class EnrichmentJob:
    """Location enrichment job state."""

    job_id: str
    state: JobState
    progress: int
    started_at: Timestamp
    ttl: Timestamp
    total_ips: int | None = None
    processed_ips: int | None = None
    error: str | None = None


@dataclass
class CircuitBreakerState:
    """Admission control state for enrichment jobs."""

    is_open: bool = False
    opened_at: Timestamp | None = None
    failure_count: int = 0
    open_duration: timedelta = field(default_factory=lambda: timedelta(minutes=5))
