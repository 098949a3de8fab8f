"""Reconciliation helpers for dimension breakdowns and period windows."""

import math
from datetime import date, timedelta

from video_analytics.domain.types import IsoDate


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return int(math.floor(value + 0.5))


def rescale_to_total(raw_counts: list[int], total: int) -> list[int]:
    """Rescale counts proportionally so they sum exactly to total.

    Every entry but the last is scaled and rounded; the last entry takes the
    remainder. If rounding overshoots so that the remainder would be negative,
    the overshoot is taken back from the preceding entries, last first.

    Args:
        raw_counts: Raw per-dimension counts, in display order
        total: Authoritative total the result must sum to

    Returns:
        Adjusted counts, same length and order as raw_counts. Counts summing
        to 0 cannot be scaled and are returned unchanged.
    """
    current_sum = sum(raw_counts)
    if current_sum == total or current_sum <= 0 or not raw_counts:
        return list(raw_counts)

    ratio = total / current_sum
    adjusted = [round_half_up(count * ratio) for count in raw_counts[:-1]]
    remainder = total - sum(adjusted)

    if remainder < 0:
        overshoot = -remainder
        remainder = 0
        for index in range(len(adjusted) - 1, -1, -1):
            taken = min(adjusted[index], overshoot)
            adjusted[index] -= taken
            overshoot -= taken
            if overshoot == 0:
                break

    adjusted.append(remainder)
    return adjusted


def parse_iso_date(value: IsoDate) -> date:
    """Parse YYYY-MM-DD."""
    return date.fromisoformat(value)


def period_days(start: IsoDate, end: IsoDate) -> int:
    """Inclusive number of days in the period."""
    return (parse_iso_date(end) - parse_iso_date(start)).days + 1


def previous_period(start: IsoDate, end: IsoDate) -> tuple[IsoDate, IsoDate]:
    """Period of the same length ending the day before start."""
    days = period_days(start, end)
    prev_end = parse_iso_date(start) - timedelta(days=1)
    prev_start = prev_end - timedelta(days=days - 1)
    return prev_start.isoformat(), prev_end.isoformat()


def shift_days(day: IsoDate, days: int) -> IsoDate:
    """Shift an ISO date by a number of days."""
    return (parse_iso_date(day) + timedelta(days=days)).isoformat()
