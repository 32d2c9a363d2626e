# utils/event_analytics/ratios.py
"""
Safe ratio and percentage helpers.

Zero (or negative) denominators resolve to 0, never to an exception or NaN.
"""

import pandas as pd

from .coercion import to_number


def _as_number(value) -> float:
    number = to_number(value)
    return 0.0 if pd.isna(number) else number


def ratio(numerator, denominator) -> float:
    """numerator / denominator when denominator > 0, else 0.0"""
    numerator = _as_number(numerator)
    denominator = _as_number(denominator)
    if denominator > 0:
        return numerator / denominator
    return 0.0


def percentage(numerator, denominator) -> float:
    """ratio(numerator, denominator) * 100"""
    numerator = _as_number(numerator)
    denominator = _as_number(denominator)
    if denominator > 0:
        return numerator * 100.0 / denominator
    return 0.0


def ratio_series(numerator: pd.Series, denominator: pd.Series) -> pd.Series:
    """Element-wise safe ratio for aligned numeric Series."""
    numerator = pd.to_numeric(numerator, errors='coerce').fillna(0.0).astype(float)
    denominator = pd.to_numeric(denominator, errors='coerce').fillna(0.0).astype(float)
    return (numerator / denominator.where(denominator > 0)).fillna(0.0)


def percentage_series(numerator: pd.Series, denominator: pd.Series) -> pd.Series:
    numerator = pd.to_numeric(numerator, errors='coerce').fillna(0.0).astype(float)
    denominator = pd.to_numeric(denominator, errors='coerce').fillna(0.0).astype(float)
    return (numerator * 100.0 / denominator.where(denominator > 0)).fillna(0.0)
