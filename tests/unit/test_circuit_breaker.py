"""Unit tests for the enrichment circuit breaker."""

from datetime import datetime, timedelta, timezone

from video_analytics.application.services.circuit_breaker import CircuitBreaker

T0 = datetime(2025, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


def test_closed_breaker_allows():
    """Test a fresh breaker admits requests."""
    breaker = CircuitBreaker()

    assert breaker.allow(T0)
    assert not breaker.is_open
    assert breaker.failure_count == 0


def test_opens_at_threshold():
    """Test the breaker opens on the third failure."""
    breaker = CircuitBreaker(max_failures=3)

    breaker.record_failure(T0)
    breaker.record_failure(T0)
    assert breaker.allow(T0)

    breaker.record_failure(T0)

    assert breaker.is_open
    assert not breaker.allow(T0 + timedelta(minutes=1))
    snapshot = breaker.snapshot()
    assert snapshot.opened_at == T0
    assert snapshot.failure_count == 3


def test_stays_open_until_window_elapsed():
    """Test the breaker only closes strictly after the open duration."""
    breaker = CircuitBreaker(max_failures=1, open_duration=timedelta(minutes=5))
    breaker.record_failure(T0)

    assert not breaker.allow(T0 + timedelta(minutes=5))
    assert breaker.allow(T0 + timedelta(minutes=5, milliseconds=1))
    assert not breaker.is_open
    assert breaker.failure_count == 0


def test_failures_while_open_do_not_move_window():
    """Test further failures while open keep the original open time."""
    breaker = CircuitBreaker(max_failures=2)
    breaker.record_failure(T0)
    breaker.record_failure(T0)

    breaker.record_failure(T0 + timedelta(minutes=3))

    assert breaker.snapshot().opened_at == T0
    assert breaker.failure_count == 3
