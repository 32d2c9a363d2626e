# utils/event_analytics/normalizer.py
"""
Record Normalizer for Event Analytics

VERSION: 1.0.0
Single ingestion boundary: turns loosely-typed rows (dicts from the API,
DataFrames from SQL) into canonical frames per entity kind. Everything
downstream operates on these frames only.

Rules:
- Missing / non-numeric numbers -> 0 (never NaN, never an error)
- Unparseable dates -> NaT (excluded from time buckets)
- Missing category -> "General"
- Source rows are never mutated
"""

import logging
from typing import Any, Dict, Iterable, Mapping, Union
import numpy as np
import pandas as pd

from .coercion import (
    to_number,
    to_bool,
    to_timestamp,
    coerce_numeric,
    coerce_bool,
    coerce_datetime,
    coerce_text,
)
from .constants import (
    KIND_EVENT,
    KIND_BOOKING,
    KIND_SUBSCRIBER,
    KIND_TESTIMONIAL,
    KIND_PROFILE,
    ENTITY_KINDS,
    DEFAULT_CATEGORY,
    UNKNOWN_STATUS,
    DEFAULT_RATING,
    MAX_COUNT,
    EVENT_COLUMNS,
    BOOKING_COLUMNS,
    SUBSCRIBER_COLUMNS,
    TESTIMONIAL_COLUMNS,
    PROFILE_COLUMNS,
)
from .models import AnalyticsParameterError
from .ratios import ratio_series

logger = logging.getLogger(__name__)

RawRows = Union[pd.DataFrame, Iterable[Mapping[str, Any]], None]


# =============================================================================
# FRAME HELPERS
# =============================================================================

def _to_frame(rows: RawRows) -> pd.DataFrame:
    """Copy input rows into a fresh DataFrame with a clean RangeIndex."""
    if rows is None:
        return pd.DataFrame()
    if isinstance(rows, pd.DataFrame):
        return rows.reset_index(drop=True).copy()
    records = [dict(row) for row in rows if row is not None]
    return pd.DataFrame(records, index=pd.RangeIndex(len(records)))


def _column(df: pd.DataFrame, name: str, default=np.nan) -> pd.Series:
    if name in df.columns:
        return df[name]
    return pd.Series([default] * len(df), index=df.index, dtype=object)


def _first_column(df: pd.DataFrame, names) -> pd.Series:
    """First present column of `names`, falling back to the next one per row."""
    result = pd.Series([np.nan] * len(df), index=df.index, dtype=object)
    for name in reversed(names):
        if name in df.columns:
            values = df[name].astype(object)
            result = values.where(values.map(lambda v: not pd.isna(to_number(v))), result)
    return result


def _status(df: pd.DataFrame, name: str) -> pd.Series:
    return coerce_text(_column(df, name), default=UNKNOWN_STATUS)


def _counts(series: pd.Series) -> pd.Series:
    """Whole counts in [0, MAX_COUNT]."""
    return coerce_numeric(series).clip(lower=0, upper=MAX_COUNT).round().astype(int)


# =============================================================================
# PER-KIND NORMALIZERS
# =============================================================================

def normalize_events(rows: RawRows) -> pd.DataFrame:
    """
    Canonical events with derived booked / revenue / fill_rate.

    - available_spots missing or unparseable -> equal to capacity (zero booked)
    - booked = clamp(capacity - available_spots, 0, capacity)
    - is_free forces unit_price to 0
    """
    df = _to_frame(rows)

    capacity = _counts(_column(df, 'capacity'))

    available = _column(df, 'available_spots').map(to_number).astype(float)
    available = available.fillna(capacity.astype(float)).clip(lower=0, upper=MAX_COUNT).round().astype(int)

    unit_price = coerce_numeric(_first_column(df, ['unit_price', 'price'])).clip(lower=0)
    is_free = coerce_bool(_column(df, 'is_free'), default=False)
    unit_price = unit_price.where(~is_free, 0.0)

    booked = np.minimum((capacity - available).clip(lower=0), capacity).astype(int)
    revenue = booked.astype(float) * unit_price
    fill_rate = ratio_series(booked, capacity)

    result = pd.DataFrame({
        'id': _column(df, 'id', None),
        'title': coerce_text(_column(df, 'title')),
        'category': coerce_text(_column(df, 'category'), default=DEFAULT_CATEGORY),
        'date': coerce_datetime(_column(df, 'date')),
        'location': coerce_text(_column(df, 'location')),
        'start_time': coerce_text(_column(df, 'start_time')),
        'capacity': capacity,
        'available_spots': available,
        'unit_price': unit_price,
        'is_free': is_free,
        'booked': booked,
        'revenue': revenue,
        'fill_rate': fill_rate,
    }, index=df.index)
    return result[EVENT_COLUMNS]


def normalize_bookings(rows: RawRows) -> pd.DataFrame:
    df = _to_frame(rows)
    result = pd.DataFrame({
        'id': _column(df, 'id', None),
        'event_id': _column(df, 'event_id', None),
        'user_name': coerce_text(_column(df, 'user_name')),
        'user_email': coerce_text(_column(df, 'user_email')),
        'status': _status(df, 'status'),
        'payment_status': _status(df, 'payment_status'),
        'payment_amount': coerce_numeric(_column(df, 'payment_amount')),
        'created_at': coerce_datetime(_column(df, 'created_at')),
    }, index=df.index)
    return result[BOOKING_COLUMNS]


def normalize_subscribers(rows: RawRows) -> pd.DataFrame:
    df = _to_frame(rows)
    result = pd.DataFrame({
        'id': _column(df, 'id', None),
        'email': coerce_text(_column(df, 'email')),
        'name': coerce_text(_column(df, 'name')),
        'status': _status(df, 'status'),
        'subscribed_at': coerce_datetime(_column(df, 'subscribed_at')),
    }, index=df.index)
    return result[SUBSCRIBER_COLUMNS]


def normalize_testimonials(rows: RawRows) -> pd.DataFrame:
    """Rating missing or unparseable -> 5; parsed ratings clamp into 1..5."""
    df = _to_frame(rows)
    rating = coerce_numeric(_column(df, 'rating'), default=DEFAULT_RATING)
    result = pd.DataFrame({
        'id': _column(df, 'id', None),
        'name': coerce_text(_column(df, 'name')),
        'rating': rating.round().clip(lower=1, upper=5).astype(int),
        'is_approved': coerce_bool(_column(df, 'is_approved')),
        'is_featured': coerce_bool(_column(df, 'is_featured')),
        'created_at': coerce_datetime(_column(df, 'created_at')),
    }, index=df.index)
    return result[TESTIMONIAL_COLUMNS]


def normalize_profiles(rows: RawRows) -> pd.DataFrame:
    df = _to_frame(rows)
    result = pd.DataFrame({
        'id': _column(df, 'id', None),
        'full_name': coerce_text(_column(df, 'full_name')),
        'is_admin': coerce_bool(_column(df, 'is_admin')),
        'created_at': coerce_datetime(_column(df, 'created_at')),
    }, index=df.index)
    return result[PROFILE_COLUMNS]


_NORMALIZERS = {
    KIND_EVENT: normalize_events,
    KIND_BOOKING: normalize_bookings,
    KIND_SUBSCRIBER: normalize_subscribers,
    KIND_TESTIMONIAL: normalize_testimonials,
    KIND_PROFILE: normalize_profiles,
}


# =============================================================================
# PUBLIC ENTRY POINTS
# =============================================================================

def normalize_records(rows: RawRows, kind: str) -> pd.DataFrame:
    """
    Normalize raw rows of one entity kind.

    Args:
        rows: DataFrame, list of dicts, or None
        kind: one of 'event', 'booking', 'subscriber', 'testimonial', 'profile'

    Returns:
        New DataFrame with the canonical columns for `kind`
    """
    normalizer = _NORMALIZERS.get(kind)
    if normalizer is None:
        raise AnalyticsParameterError(
            f"Unknown entity kind '{kind}'. Expected one of: {', '.join(ENTITY_KINDS)}"
        )
    return normalizer(rows)


def normalize_record(row: Mapping[str, Any], kind: str) -> Dict[str, Any]:
    """Normalize a single raw row; returns the canonical record as a dict."""
    frame = normalize_records([row if row is not None else {}], kind)
    record = frame.iloc[0].to_dict()
    for key, value in record.items():
        if isinstance(value, np.generic):
            record[key] = value.item()
    return record


def normalize_snapshot(raw: Mapping[str, RawRows]) -> Dict[str, pd.DataFrame]:
    """
    Normalize a whole refresh snapshot.

    Args:
        raw: dict with any of 'events', 'bookings', 'subscribers',
             'testimonials', 'profiles' (missing keys become empty frames)
    """
    snapshot = {
        'events': normalize_events(raw.get('events')),
        'bookings': normalize_bookings(raw.get('bookings')),
        'subscribers': normalize_subscribers(raw.get('subscribers')),
        'testimonials': normalize_testimonials(raw.get('testimonials')),
        'profiles': normalize_profiles(raw.get('profiles')),
    }
    logger.debug(
        "Normalized snapshot: " + ", ".join(f"{k}={len(v)}" for k, v in snapshot.items())
    )
    return snapshot


__all__ = [
    'normalize_records',
    'normalize_record',
    'normalize_snapshot',
    'normalize_events',
    'normalize_bookings',
    'normalize_subscribers',
    'normalize_testimonials',
    'normalize_profiles',
    'to_number',
    'to_bool',
    'to_timestamp',
    'coerce_numeric',
    'coerce_bool',
    'coerce_datetime',
]
