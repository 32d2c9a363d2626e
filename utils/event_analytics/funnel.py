# utils/event_analytics/funnel.py
"""
Funnel Composer for Event Analytics

Per-status counts in the enumeration's declared order (e.g. confirmed ->
pending -> cancelled), zero-count stages included.
"""

import logging
from typing import Sequence
import pandas as pd

from .models import AnalyticsParameterError, ConversionFunnel, FunnelStage
from .ratios import percentage

logger = logging.getLogger(__name__)


def compose_funnel(
    records: pd.DataFrame,
    status_column: str,
    statuses: Sequence
) -> ConversionFunnel:
    """
    Args:
        records: Normalized records
        status_column: Categorical column to count
        statuses: Declared enumeration (non-empty, no duplicates)

    Returns:
        ConversionFunnel whose percentages are against the total record count
    """
    statuses = list(statuses or [])
    if not statuses:
        raise AnalyticsParameterError("Funnel needs at least one declared status")
    if len(set(statuses)) != len(statuses):
        raise AnalyticsParameterError(f"Funnel statuses must be unique, got {statuses}")

    total = 0 if records is None else len(records)
    if total and status_column in records.columns:
        counts = records[status_column].value_counts(dropna=True)
    else:
        counts = pd.Series(dtype=int)

    stages = []
    for status in statuses:
        count = int(counts.get(status, 0))
        stages.append(FunnelStage(status=status, count=count, percentage=percentage(count, total)))

    matched = sum(stage.count for stage in stages)
    return ConversionFunnel(stages=stages, total=total, unmatched=total - matched)
