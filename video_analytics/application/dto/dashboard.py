"""Dashboard query DTOs."""

import re
from datetime import date, timedelta
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from video_analytics.domain.entities import MetricQuery
from video_analytics.domain.enums import Locale
from video_analytics.domain.errors import InvalidQueryError
from video_analytics.domain.types import IsoDate

ReportKind = Literal["kpis", "topVideos", "videoFunnel"]
Preset = Literal["7d", "30d", "90d", "today", "yesterday"]

ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

_PRESET_DAYS = {"7d": 7, "30d": 30, "90d": 90}
DEFAULT_PRESET = "7d"


def validate_iso_date(value: str | None) -> str | None:
    if value is None:
        return None
    if not ISO_DATE_RE.match(value):
        raise ValueError("Dates must be valid ISO strings YYYY-MM-DD.")
    date.fromisoformat(value)
    return value


def normalize_lang(lang: str | None) -> str | None:
    """BCP-47 casing: language lower-case, region upper-case."""
    if not lang:
        return None
    parts = lang.split("-")
    if len(parts) == 2:
        return f"{parts[0].lower()}-{parts[1].upper()}"
    return lang.lower()


def preset_range(preset: str, today: IsoDate) -> tuple[IsoDate, IsoDate]:
    """Resolve a preset to an inclusive window ending today (or yesterday)."""
    end = date.fromisoformat(today)
    if preset == "today":
        return today, today
    if preset == "yesterday":
        day = (end - timedelta(days=1)).isoformat()
        return day, day
    start = end - timedelta(days=_PRESET_DAYS[preset] - 1)
    return start.isoformat(), end.isoformat()


class DashboardQueryParams(BaseModel):
    """Query string of a dashboard report request."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    report: ReportKind
    preset: Preset | None = None
    start_date: IsoDate | None = Field(default=None, alias="startDate")
    end_date: IsoDate | None = Field(default=None, alias="endDate")
    since_date: IsoDate | None = Field(default=None, alias="sinceDate")
    lang: str | None = None
    country: str | None = None
    video_id: str | None = Field(default=None, alias="videoId")

    @field_validator("*", mode="before")
    @classmethod
    def blank_as_missing(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("start_date", "end_date", "since_date")
    @classmethod
    def check_iso_date(cls, value: str | None) -> str | None:
        return validate_iso_date(value)

    @field_validator("lang")
    @classmethod
    def check_lang(cls, value: str | None) -> str | None:
        return normalize_lang(value)

    @field_validator("country")
    @classmethod
    def check_country(cls, value: str | None) -> str | None:
        return value.strip().upper() if value else None

    @model_validator(mode="after")
    def check_consistency(self) -> "DashboardQueryParams":
        if (self.start_date is None) != (self.end_date is None):
            raise ValueError('When using explicit dates, provide both "startDate" and "endDate" (YYYY-MM-DD).')
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise ValueError('"startDate" cannot be after "endDate".')
        if self.report == "videoFunnel" and not self.video_id:
            raise ValueError('Missing "videoId" for report=videoFunnel.')
        return self

    def date_range(self, today: IsoDate) -> tuple[IsoDate, IsoDate]:
        """Resolve the reporting window.

        A preset wins over explicit dates; with neither the last 7 days are
        used. sinceDate raises the start date when it is later.
        """
        if self.preset:
            start, end = preset_range(self.preset, today)
        elif self.start_date and self.end_date:
            start, end = self.start_date, self.end_date
        else:
            start, end = preset_range(DEFAULT_PRESET, today)

        if self.since_date and self.since_date > start:
            start = self.since_date
        return start, end

    def to_metric_query(self, today: IsoDate) -> MetricQuery:
        """Resolved window with locale and country filters."""
        start, end = self.date_range(today)
        return MetricQuery(date_start=start, date_end=end, locale=self.locale, country=self.country)

    @property
    def locale(self) -> str | None:
        """Locale filter value for the query engine (primary language subtag)."""
        if not self.lang:
            return None
        primary = self.lang.split("-")[0]
        if primary in (Locale.ALL.value, Locale.FR.value, Locale.EN.value):
            return primary
        return self.lang


def parse_dashboard_query(raw: dict[str, Any]) -> DashboardQueryParams:
    """Validate raw query parameters, raising InvalidQueryError on bad input."""
    try:
        return DashboardQueryParams.model_validate(raw)
    except ValidationError as e:
        messages = "; ".join(error["msg"] for error in e.errors())
        raise InvalidQueryError(messages) from e
