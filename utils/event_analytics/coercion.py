# utils/event_analytics/coercion.py
"""
Total coercion of loosely-typed values.

Every helper here maps bad input to a missing value (NaN / NaT / default),
never to an exception.
"""

import math
from datetime import date, datetime
from decimal import Decimal
from typing import Optional
import numpy as np
import pandas as pd

_TRUE_STRINGS = {'true', 't', 'yes', 'y', '1'}
_FALSE_STRINGS = {'false', 'f', 'no', 'n', '0'}
# Whole-day bounds inside the datetime64[ns] range
_NS_MIN = pd.Timestamp('1677-09-22')
_NS_MAX = pd.Timestamp('2262-04-11')


def to_number(value) -> float:
    """Parse a number; anything unparseable or non-finite returns NaN."""
    if value is None or isinstance(value, (bool, np.bool_)):
        return np.nan
    if isinstance(value, (int, float, Decimal, np.integer, np.floating)):
        try:
            number = float(value)
        except (ValueError, OverflowError):
            return np.nan
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return np.nan
    else:
        return np.nan
    return number if math.isfinite(number) else np.nan


def to_bool(value) -> Optional[bool]:
    """Parse a boolean flag; returns None when the value is missing or unrecognised."""
    if value is None:
        return None
    if isinstance(value, (bool, np.bool_)):
        return bool(value)
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _TRUE_STRINGS:
            return True
        if text in _FALSE_STRINGS:
            return False
        return None
    number = to_number(value)
    if pd.isna(number):
        return None
    return number != 0


def to_timestamp(value):
    """Parse a date/time into a timezone-naive UTC Timestamp, or NaT."""
    if value is None or value is pd.NaT:
        return pd.NaT
    if not isinstance(value, (str, datetime, date, pd.Timestamp, np.datetime64)):
        return pd.NaT
    if isinstance(value, str) and not value.strip():
        return pd.NaT
    try:
        ts = pd.to_datetime(value, errors='coerce', utc=True)
    except (ValueError, TypeError, OverflowError):
        return pd.NaT
    if pd.isna(ts):
        return pd.NaT
    ts = ts.tz_convert(None)
    if not _NS_MIN <= ts <= _NS_MAX:
        return pd.NaT
    return ts


# =============================================================================
# SERIES HELPERS
# =============================================================================

def coerce_numeric(series: pd.Series, default: float = 0.0) -> pd.Series:
    """Element-wise to_number with missing values replaced by `default`."""
    return series.map(to_number).astype(float).fillna(default)


def coerce_bool(series: pd.Series, default: bool = False) -> pd.Series:
    def _flag(value) -> bool:
        parsed = to_bool(value)
        return default if parsed is None else parsed

    return series.map(_flag).astype(bool)


def coerce_datetime(series: pd.Series) -> pd.Series:
    """Element-wise to_timestamp; result dtype is datetime64[ns] (naive UTC)."""
    if pd.api.types.is_datetime64_any_dtype(series):
        if getattr(series.dt, 'tz', None) is not None:
            series = series.dt.tz_convert(None)
        in_range = series.isna() | series.between(_NS_MIN, _NS_MAX)
        return series.where(in_range).astype('datetime64[ns]')
    parsed = [to_timestamp(v) for v in series]
    return pd.Series(pd.to_datetime(parsed), index=series.index, dtype='datetime64[ns]')


def coerce_text(series: pd.Series, default: str = '') -> pd.Series:
    """Keep non-blank strings as-is (case-preserving); everything else becomes `default`."""
    return series.map(lambda v: v if isinstance(v, str) and v.strip() else default).astype(object)
