"""Ports (interfaces) for infrastructure adapters."""

from abc import ABC, abstractmethod

from video_analytics.domain.entities import (
    AnalyticsSession,
    LocationData,
    ReportRequest,
    ReportResult,
    SessionLocation,
)
from video_analytics.domain.types import IsoDate, Timestamp


class AnalyticsDataPort(ABC):
    """Port for running reports against the analytics data API."""

    @abstractmethod
    async def run_report(self, request: ReportRequest) -> ReportResult:
        """Run a report and return its rows."""


class SessionStoragePort(ABC):
    """Port for reading and updating stored analytics sessions."""

    @abstractmethod
    async def get_analytics_sessions(
        self,
        date_from: IsoDate,
        date_to: IsoDate,
        language: str | None = None,
        include_production: bool = False,
    ) -> list[AnalyticsSession]:
        """Get sessions created within the date window."""

    @abstractmethod
    async def update_session_location(self, ip_address: str, location: SessionLocation) -> int:
        """Set location on every session with this IP. Returns updated count."""


class LocationLookupPort(ABC):
    """Port for IP geolocation lookups."""

    @abstractmethod
    async def get_location_data(self, ip_address: str) -> LocationData | None:
        """Look up location for an IP address, or None when unknown."""


class ClockPort(ABC):
    """Port for time operations."""

    @abstractmethod
    def now(self) -> Timestamp:
        """Get current timestamp."""

    @abstractmethod
    def today(self) -> IsoDate:
        """Get current calendar date as YYYY-MM-DD."""
