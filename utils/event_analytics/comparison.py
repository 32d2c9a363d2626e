# utils/event_analytics/comparison.py
"""
Period Comparator for Event Analytics

Percent change of a metric between the current window and the immediately
preceding window of equal length.

Zero-baseline policy: when the previous value is <= 0 the change is None
(no baseline). PeriodComparison.is_new flags growth from an empty baseline.
"""

import logging
from typing import Optional, Tuple
import pandas as pd

from .bucketing import bucket_records, resolve_now
from .coercion import to_number
from .models import AnalyticsParameterError, PeriodComparison
from .ratios import percentage

logger = logging.getLogger(__name__)

Window = Tuple[pd.Timestamp, pd.Timestamp]


def _as_number(value) -> float:
    number = to_number(value)
    return 0.0 if pd.isna(number) else number


def percent_change(current, previous) -> Optional[float]:
    """(current - previous) / previous * 100, or None when previous <= 0."""
    current = _as_number(current)
    previous = _as_number(previous)
    if previous > 0:
        return percentage(current - previous, previous)
    return None


def compare_values(current, previous) -> PeriodComparison:
    current = _as_number(current)
    previous = _as_number(previous)
    return PeriodComparison(
        current=current,
        previous=previous,
        change_pct=percent_change(current, previous),
    )


def _validate_days(days) -> int:
    if isinstance(days, bool) or not isinstance(days, int):
        raise AnalyticsParameterError(f"Window length must be an integer number of days, got {days!r}")
    if days < 1:
        raise AnalyticsParameterError(f"Window length must be >= 1 day, got {days}")
    return days


def window_bounds(now, days: int) -> Tuple[Window, Window]:
    """
    ((previous_start, previous_end), (current_start, current_end)),
    both half-open, current_end == now and previous_end == current_start.
    """
    days = _validate_days(days)
    end = resolve_now(now)
    width = pd.Timedelta(days=days)
    return (end - 2 * width, end - width), (end - width, end)


def compare_windows(
    records: pd.DataFrame,
    date_column: str,
    now,
    days: int,
    value: Optional[str] = None
) -> PeriodComparison:
    """
    Compare record count (or sum of `value`) in the last `days` against the
    `days` before that.
    """
    days = _validate_days(days)
    aggregates = {'value': value} if value else None
    previous, current = bucket_records(
        records,
        date_column,
        now,
        bucket_count=2,
        granularity=pd.Timedelta(days=days),
        aggregates=aggregates,
    )
    if value:
        return compare_values(current.get('value'), previous.get('value'))
    return compare_values(current.count, previous.count)


def format_change(comparison: PeriodComparison, suffix: str = '') -> Optional[str]:
    """Display string for a comparison: '+12.5%', 'New', or None when flat from zero."""
    if comparison.change_pct is not None:
        return f"{comparison.change_pct:+.1f}%{suffix}"
    if comparison.is_new:
        return "New"
    return None
