"""Circuit breaker for enrichment job admission."""

from datetime import timedelta

import structlog

from video_analytics.domain.entities import CircuitBreakerState
from video_analytics.domain.types import Timestamp
from video_analytics.infrastructure.observability.metrics import enrichment_circuit_open

logger = structlog.get_logger()


class CircuitBreaker:
    """Time-based circuit breaker.

    Opens after max_failures cumulative failures and stays open for
    open_duration. The first admission check after the window elapses closes
    it again and resets the failure count (half-open by time, not by trial).
    """

    def __init__(self, max_failures: int = 3, open_duration: timedelta = timedelta(minutes=5)) -> None:
        """Initialize circuit breaker."""
        self.max_failures = max_failures
        self._state = CircuitBreakerState(open_duration=open_duration)

    @property
    def is_open(self) -> bool:
        return self._state.is_open

    @property
    def failure_count(self) -> int:
        return self._state.failure_count

    def snapshot(self) -> CircuitBreakerState:
        """Copy of the current state."""
        return CircuitBreakerState(
            is_open=self._state.is_open,
            opened_at=self._state.opened_at,
            failure_count=self._state.failure_count,
            open_duration=self._state.open_duration,
        )

    def allow(self, now: Timestamp) -> bool:
        """Check admission, closing the breaker once its window has elapsed."""
        if not self._state.is_open:
            return True

        if self._state.opened_at is not None and now - self._state.opened_at > self._state.open_duration:
            logger.info("circuit_breaker_closed", failure_count=self._state.failure_count)
            self._state.is_open = False
            self._state.opened_at = None
            self._state.failure_count = 0
            enrichment_circuit_open.set(0)
            return True

        return False

    def record_failure(self, now: Timestamp) -> None:
        """Count a job-level failure, opening the breaker at the threshold."""
        self._state.failure_count += 1

        if self._state.failure_count >= self.max_failures and not self._state.is_open:
            logger.warning(
                "circuit_breaker_opened",
                failure_count=self._state.failure_count,
                open_seconds=self._state.open_duration.total_seconds(),
            )
            self._state.is_open = True
            self._state.opened_at = now
            enrichment_circuit_open.set(1)
