"""Clock implementation."""

from datetime import datetime, timezone

from video_analytics.domain.ports import ClockPort
from video_analytics.domain.types import IsoDate, Timestamp


class SystemClock(ClockPort):
    """System clock implementation (UTC)."""

    def now(self) -> Timestamp:
        """Get current timestamp."""
        return datetime.now(timezone.utc)

    def today(self) -> IsoDate:
        """Get current calendar date as YYYY-MM-DD."""
        return self.now().date().isoformat()
