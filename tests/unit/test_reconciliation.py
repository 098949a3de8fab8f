"""Unit tests for reconciliation helpers."""

from video_analytics.application.services.reconciliation import (
    period_days,
    previous_period,
    rescale_to_total,
    round_half_up,
    shift_days,
)


def test_round_half_up():
    """Test rounding halves up."""
    assert round_half_up(2.5) == 3
    assert round_half_up(2.49) == 2
    assert round_half_up(0.5) == 1
    assert round_half_up(0) == 0


def test_rescale_to_total_remainder_on_last():
    """Test proportional rescale with remainder on the last entry."""
    assert rescale_to_total([10, 5], 20) == [13, 7]


def test_rescale_to_total_scales_down():
    """Test rescale when the raw breakdown overcounts."""
    result = rescale_to_total([60, 30, 10], 50)

    assert result == [30, 15, 5]
    assert sum(result) == 50


def test_rescale_to_total_unchanged_when_sum_matches():
    """Test counts already summing to total are left alone."""
    assert rescale_to_total([3, 4], 7) == [3, 4]


def test_rescale_to_total_zero_sum_unchanged():
    """Test zero raw sum cannot be scaled."""
    assert rescale_to_total([0, 0], 10) == [0, 0]
    assert rescale_to_total([], 10) == []


def test_rescale_to_total_overshoot_taken_back():
    """Test rounding overshoot never produces a negative last entry."""
    # 1 * 3/4 rounds to 1 for each of the first three entries (sum 3 == total)
    result = rescale_to_total([1, 1, 1, 1], 3)

    assert sum(result) == 3
    assert all(count >= 0 for count in result)


def test_rescale_to_total_single_entry():
    """Test single entry takes the whole total."""
    assert rescale_to_total([4], 9) == [9]


def test_period_days_inclusive():
    """Test inclusive day count."""
    assert period_days("2025-01-01", "2025-01-31") == 31
    assert period_days("2025-01-01", "2025-01-01") == 1


def test_previous_period():
    """Test previous period has the same length and ends the day before."""
    assert previous_period("2025-01-08", "2025-01-14") == ("2025-01-01", "2025-01-07")
    assert previous_period("2025-03-01", "2025-03-01") == ("2025-02-28", "2025-02-28")


def test_shift_days():
    """Test shifting dates across month boundaries."""
    assert shift_days("2025-01-31", 1) == "2025-02-01"
    assert shift_days("2025-01-01", -1) == "2024-12-31"
