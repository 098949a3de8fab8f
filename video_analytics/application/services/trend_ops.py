"""Daily trend operations for dashboard time series."""

from dataclasses import asdict, fields
from datetime import datetime

import pandas as pd

from video_analytics.domain.entities import DailySessions, DailySessionsComparison
from video_analytics.domain.types import IsoDate

_DAILY_COLUMNS = [f.name for f in fields(DailySessions)]

# Previous-period columns whose names differ from the daily row fields
_PREVIOUS_RENAMES = {"previous_avg_session_duration": "previous_avg_duration"}


def ga4_date_to_iso(value: str) -> IsoDate:
    """Convert a GA4 date dimension value (YYYYMMDD) to YYYY-MM-DD."""
    if len(value) == 8 and value.isdigit():
        return datetime.strptime(value, "%Y%m%d").date().isoformat()
    return value


def _daily_frame(rows: list[DailySessions]) -> pd.DataFrame:
    """Build a frame of daily rows with fixed columns."""
    return pd.DataFrame([asdict(row) for row in rows], columns=_DAILY_COLUMNS)


def fill_missing_days(rows: list[DailySessions], start: IsoDate, end: IsoDate) -> list[DailySessions]:
    """Return one row per calendar day in [start, end], zero-filled.

    GA4 omits days without data, which would shift the relative-day alignment
    of a comparison period. Rows outside the window are dropped.
    """
    index = pd.date_range(start, end, freq="D").strftime("%Y-%m-%d")
    frame = _daily_frame(rows).drop_duplicates(subset="date", keep="first").set_index("date")
    frame = frame.reindex(index, fill_value=0)

    return [
        DailySessions(
            date=str(day),
            sessions=int(row["sessions"]),
            users=int(row["users"]),
            bounce_rate=float(row["bounce_rate"]),
            avg_session_duration=int(row["avg_session_duration"]),
            total_engagement_seconds=int(row["total_engagement_seconds"]),
        )
        for day, row in frame.iterrows()
    ]


def align_with_previous(
    current: list[DailySessions],
    previous: list[DailySessions],
) -> list[DailySessionsComparison]:
    """Pair each current day with the previous period's day at the same offset.

    Alignment is by position (day 1 with day 1, ...), not by calendar date.
    Missing previous days count as zero.
    """
    current_frame = _daily_frame(current)
    previous_frame = (
        _daily_frame(previous)
        .drop(columns="date")
        .add_prefix("previous_")
        .rename(columns=_PREVIOUS_RENAMES)
    )
    merged = current_frame.join(previous_frame).fillna(0)

    return [
        DailySessionsComparison(
            date=str(row["date"]),
            sessions=int(row["sessions"]),
            users=int(row["users"]),
            bounce_rate=float(row["bounce_rate"]),
            avg_session_duration=int(row["avg_session_duration"]),
            total_engagement_seconds=int(row["total_engagement_seconds"]),
            previous_sessions=int(row["previous_sessions"]),
            previous_users=int(row["previous_users"]),
            previous_bounce_rate=float(row["previous_bounce_rate"]),
            previous_avg_duration=int(row["previous_avg_duration"]),
            previous_total_engagement_seconds=int(row["previous_total_engagement_seconds"]),
        )
        for _, row in merged.iterrows()
    ]


def total_engagement(rows: list[DailySessions]) -> int:
    """Sum engagement seconds over daily rows."""
    if not rows:
        return 0
    return int(_daily_frame(rows)["total_engagement_seconds"].sum())
