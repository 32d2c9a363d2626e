# utils/event_analytics/ranking.py
"""
Top-N Ranker for Event Analytics

Orders records by a derived value, descending, stable on ties
(equal values keep their input order). Rank is the 1-based output position.
"""

import logging
from typing import Callable, List, Optional, Union
import numpy as np
import pandas as pd

from .coercion import coerce_numeric
from .constants import TOP_EVENTS_LIMIT
from .models import AnalyticsParameterError, TopEventEntry

logger = logging.getLogger(__name__)

ValueAccessor = Union[str, Callable[[pd.DataFrame], pd.Series]]

RANK_BY_OPTIONS = ['revenue', 'booked', 'fill_rate', 'reservations']


def resolve_values(records: pd.DataFrame, accessor: ValueAccessor) -> pd.Series:
    """Column name or callable(DataFrame) -> Series, aligned to records."""
    if callable(accessor):
        values = accessor(records)
        if not isinstance(values, pd.Series):
            values = pd.Series(list(values), index=records.index)
        return values
    if accessor not in records.columns:
        raise AnalyticsParameterError(f"Unknown column '{accessor}'")
    return records[accessor]


def stable_descending_order(values: pd.Series) -> np.ndarray:
    """Positional order by value descending; ties keep first-encountered order."""
    numeric = coerce_numeric(values).to_numpy(dtype=float)
    return np.argsort(-numeric, kind='stable')


def validate_limit(n) -> int:
    if isinstance(n, bool) or not isinstance(n, (int, np.integer)):
        raise AnalyticsParameterError(f"Rank limit must be an integer, got {n!r}")
    if n < 0:
        raise AnalyticsParameterError(f"Rank limit must be >= 0, got {n}")
    return int(n)


def rank_top_n(
    records: pd.DataFrame,
    value: ValueAccessor,
    n: int = TOP_EVENTS_LIMIT
) -> pd.DataFrame:
    """
    Top n records by value, descending.

    Returns:
        Copy of the selected rows with 'rank' (1-based) and 'rank_value'
        columns; at most min(n, len(records)) rows
    """
    n = validate_limit(n)
    if records is None or records.empty or n == 0:
        return pd.DataFrame(columns=['rank', 'rank_value'] + (
            list(records.columns) if records is not None else []
        ))

    records = records.reset_index(drop=True)
    values = coerce_numeric(resolve_values(records, value))
    order = stable_descending_order(values)[:n]

    ranked = records.iloc[order].copy()
    ranked['rank_value'] = values.iloc[order].to_numpy()
    ranked.insert(0, 'rank', range(1, len(ranked) + 1))
    return ranked.reset_index(drop=True)


def _id_key(value) -> Optional[str]:
    """Join key for ids that may arrive as int, float (1.0) or str."""
    if value is None or (isinstance(value, float) and np.isnan(value)):
        return None
    if isinstance(value, (float, np.floating)) and float(value).is_integer():
        return str(int(value))
    return str(value)


def count_reservations(events: pd.DataFrame, bookings: Optional[pd.DataFrame]) -> pd.Series:
    """Bookings per event (by event_id), aligned to events."""
    if bookings is None or bookings.empty or 'event_id' not in bookings.columns:
        return pd.Series(0, index=events.index, dtype=int)
    per_event = bookings['event_id'].map(_id_key).dropna().value_counts()
    return events['id'].map(_id_key).map(per_event).fillna(0).astype(int)


def top_events(
    events: pd.DataFrame,
    n: int = TOP_EVENTS_LIMIT,
    by: str = 'revenue',
    bookings: Optional[pd.DataFrame] = None
) -> List[TopEventEntry]:
    """
    Rank normalized events.

    Args:
        events: Normalized events
        n: Maximum entries
        by: 'revenue' | 'booked' | 'fill_rate' | 'reservations'
        bookings: Normalized bookings (required for by='reservations')
    """
    if by not in RANK_BY_OPTIONS:
        raise AnalyticsParameterError(
            f"Unknown ranking '{by}'. Expected one of: {', '.join(RANK_BY_OPTIONS)}"
        )
    n = validate_limit(n)
    if events is None or events.empty:
        return []

    events = events.reset_index(drop=True)
    if by == 'reservations':
        events = events.assign(reservations=count_reservations(events, bookings))

    ranked = rank_top_n(events, by, n)
    return [
        TopEventEntry(
            rank=int(row['rank']),
            event_id=row['id'],
            title=row['title'],
            category=row['category'],
            value=float(row['rank_value']),
            revenue=float(row['revenue']),
            fill_rate=float(row['fill_rate']),
            booked=int(row['booked']),
            capacity=int(row['capacity']),
        )
        for _, row in ranked.iterrows()
    ]
