# utils/event_analytics/grouping.py
"""
Grouping Aggregator for Event Analytics

Groups records by a categorical key, sums a value per group and computes
each group's share of the grand total.
"""

import logging
from typing import List
import pandas as pd

from .coercion import coerce_numeric
from .models import CategoryBreakdownEntry
from .ranking import ValueAccessor, resolve_values, stable_descending_order
from .ratios import percentage_series

logger = logging.getLogger(__name__)


def group_and_sum(
    records: pd.DataFrame,
    key: ValueAccessor,
    value: ValueAccessor
) -> List[CategoryBreakdownEntry]:
    """
    One entry per distinct key, sorted by total descending.

    Ties keep first-encountered key order. Percentages are against the sum
    across all groups (0 for every group when that sum is not positive).

    Example:
        group_and_sum(events, 'category', 'revenue')
        -> [CategoryBreakdownEntry('Retreats', 700.0, 1, 70.0),
            CategoryBreakdownEntry('Workshops', 300.0, 1, 30.0)]
    """
    if records is None or records.empty:
        return []

    records = records.reset_index(drop=True)
    frame = pd.DataFrame({
        'key': resolve_values(records, key).to_numpy(),
        'value': coerce_numeric(resolve_values(records, value)).to_numpy(),
    })

    grouped = (
        frame.groupby('key', sort=False, dropna=False)
        .agg(total=('value', 'sum'), records=('value', 'size'))
        .reset_index()
    )
    grouped = grouped.iloc[stable_descending_order(grouped['total'])].reset_index(drop=True)

    grand_total = float(grouped['total'].sum())
    grouped['share'] = percentage_series(grouped['total'], pd.Series(grand_total, index=grouped.index))
    return [
        CategoryBreakdownEntry(
            key=row.key,
            total=float(row.total),
            count=int(row.records),
            percentage=float(row.share),
        )
        for row in grouped.itertuples(index=False)
    ]
