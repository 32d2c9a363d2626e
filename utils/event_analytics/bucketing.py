# utils/event_analytics/bucketing.py
"""
Period Bucketer for Event Analytics

VERSION: 1.0.0
Partitions time into N contiguous, equal-width, half-open buckets
[start, end) ending at an injected "now", and aggregates records per bucket.

- Boundaries depend only on (now, bucket_count, granularity)
- Undated records fall in no bucket
- Records dated at or after "now" fall in no bucket
- Empty buckets report count 0 and 0.0 for every aggregate
"""

import logging
from typing import Dict, List, Optional, Tuple, Union
import pandas as pd

from .coercion import to_timestamp, coerce_datetime, coerce_numeric
from .constants import GRANULARITY_DAYS, BUCKET_LABEL_FORMATS
from .models import AnalyticsParameterError, TimeSeriesPoint

logger = logging.getLogger(__name__)

Granularity = Union[str, pd.Timedelta]


# =============================================================================
# PARAMETER VALIDATION
# =============================================================================

def utc_now() -> pd.Timestamp:
    """Current instant as a naive UTC Timestamp. Only pages should call this."""
    return pd.Timestamp.now(tz='UTC').tz_convert(None)


def resolve_now(now) -> pd.Timestamp:
    """Reference instant as a naive UTC Timestamp; unparseable input is a caller error."""
    ts = to_timestamp(now)
    if pd.isna(ts):
        raise AnalyticsParameterError(f"Invalid reference time: {now!r}")
    return ts


def resolve_bucket_width(granularity: Granularity) -> pd.Timedelta:
    """'day' | 'week' | 'month' (30 days) or a positive Timedelta."""
    if isinstance(granularity, str):
        days = GRANULARITY_DAYS.get(granularity)
        if days is None:
            raise AnalyticsParameterError(
                f"Unknown granularity '{granularity}'. "
                f"Expected one of: {', '.join(GRANULARITY_DAYS)} or a Timedelta"
            )
        return pd.Timedelta(days=days)
    try:
        width = pd.Timedelta(granularity)
    except (ValueError, TypeError):
        raise AnalyticsParameterError(f"Invalid bucket width: {granularity!r}")
    if pd.isna(width) or width <= pd.Timedelta(0):
        raise AnalyticsParameterError(f"Bucket width must be positive, got {granularity!r}")
    return width


def validate_bucket_count(bucket_count) -> int:
    if isinstance(bucket_count, bool) or not isinstance(bucket_count, int):
        raise AnalyticsParameterError(f"bucket_count must be an integer, got {bucket_count!r}")
    if bucket_count < 1:
        raise AnalyticsParameterError(f"bucket_count must be >= 1, got {bucket_count}")
    return bucket_count


def _label_format(granularity: Granularity, width: pd.Timedelta) -> str:
    if isinstance(granularity, str):
        return BUCKET_LABEL_FORMATS[granularity]
    if width < pd.Timedelta(days=1):
        return '%b %d %H:%M'
    return '%b %d'


# =============================================================================
# BUCKETS
# =============================================================================

def build_buckets(
    now,
    bucket_count: int,
    granularity: Granularity = 'day'
) -> List[Tuple[pd.Timestamp, pd.Timestamp]]:
    """
    Contiguous [start, end) intervals, oldest first; the last one ends at now.

    Example:
        build_buckets('2026-10-19', 7, 'day')
        -> [(Oct 12, Oct 13), ..., (Oct 18, Oct 19)]
    """
    validate_bucket_count(bucket_count)
    width = resolve_bucket_width(granularity)
    end = resolve_now(now)
    origin = end - width * bucket_count
    return [
        (origin + width * i, origin + width * (i + 1))
        for i in range(bucket_count)
    ]


def assign_buckets(
    dates: pd.Series,
    now,
    bucket_count: int,
    granularity: Granularity = 'day'
) -> pd.Series:
    """
    Bucket position (0 = oldest) for each date; -1 for undated or out-of-range.
    """
    buckets = build_buckets(now, bucket_count, granularity)
    width = resolve_bucket_width(granularity)
    origin, end = buckets[0][0], buckets[-1][1]

    dates = coerce_datetime(dates)
    positions = pd.Series(-1, index=dates.index, dtype=int)
    in_range = dates.notna() & (dates >= origin) & (dates < end)
    if in_range.any():
        positions.loc[in_range] = ((dates[in_range] - origin) // width).astype(int)
    return positions


def bucket_records(
    records: pd.DataFrame,
    date_column: str,
    now,
    bucket_count: int,
    granularity: Granularity = 'day',
    aggregates: Optional[Dict[str, str]] = None
) -> List[TimeSeriesPoint]:
    """
    Assign records to time buckets and aggregate each bucket.

    Args:
        records: Normalized records
        date_column: Datetime column used for assignment
        now: Reference instant (end of the last bucket, exclusive)
        bucket_count: Number of buckets (>= 1)
        granularity: 'day' | 'week' | 'month' or a Timedelta width
        aggregates: {output_name: numeric_column} summed per bucket

    Returns:
        One TimeSeriesPoint per bucket, oldest first
    """
    buckets = build_buckets(now, bucket_count, granularity)
    width = resolve_bucket_width(granularity)
    label_format = _label_format(granularity, width)
    aggregates = aggregates or {}

    records = records.reset_index(drop=True) if records is not None else pd.DataFrame()

    missing = [col for col in aggregates.values() if col not in records.columns]
    if missing and not records.empty:
        raise AnalyticsParameterError(f"Unknown aggregate column(s): {', '.join(missing)}")

    if date_column in records.columns:
        positions = assign_buckets(records[date_column], now, bucket_count, granularity)
    else:
        positions = pd.Series(-1, index=records.index, dtype=int)

    assigned = positions >= 0
    bucket_index = range(bucket_count)

    counts = positions[assigned].value_counts().reindex(bucket_index, fill_value=0)

    sums = {}
    for name, column in aggregates.items():
        if records.empty:
            sums[name] = pd.Series(0.0, index=bucket_index)
            continue
        values = coerce_numeric(records.loc[assigned, column])
        sums[name] = values.groupby(positions[assigned]).sum().reindex(bucket_index, fill_value=0.0)

    points = []
    for i, (start, end) in enumerate(buckets):
        points.append(TimeSeriesPoint(
            label=(end - pd.Timedelta(1, unit='ns')).strftime(label_format),
            start=start,
            end=end,
            count=int(counts.iloc[i]),
            values={name: float(series.iloc[i]) for name, series in sums.items()},
        ))

    logger.debug(
        f"Bucketed {int(assigned.sum())}/{len(records)} records into {bucket_count} buckets"
    )
    return points


def points_to_frame(points: List[TimeSeriesPoint]) -> pd.DataFrame:
    """Flatten TimeSeriesPoints into a DataFrame (label, start, end, count, <aggregates>)."""
    rows = []
    for point in points:
        row = {'label': point.label, 'start': point.start, 'end': point.end, 'count': point.count}
        row.update(point.values)
        rows.append(row)
    return pd.DataFrame(rows)
