# utils/event_analytics/models.py
"""
Result types produced by the event analytics engine.

All values are plain Python numbers so results compare equal across
re-runs and can be handed to any presentation layer.
"""

from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional
import pandas as pd


class AnalyticsParameterError(ValueError):
    """Raised when a caller passes an invalid bucket, rank or funnel parameter"""
    pass


@dataclass
class TimeSeriesPoint:
    """One time bucket: half-open interval [start, end)."""
    label: str
    start: pd.Timestamp
    end: pd.Timestamp
    count: int
    values: Dict[str, float] = field(default_factory=dict)

    def get(self, name: str) -> float:
        return self.values.get(name, 0.0)


@dataclass
class CategoryBreakdownEntry:
    key: Any
    total: float
    count: int
    percentage: float


@dataclass
class TopEventEntry:
    rank: int
    event_id: Any
    title: str
    category: str
    value: float
    revenue: float
    fill_rate: float
    booked: int
    capacity: int


@dataclass
class FunnelStage:
    status: Any
    count: int
    percentage: float


@dataclass
class ConversionFunnel:
    """Per-status counts in declared order. `unmatched` counts undeclared statuses."""
    stages: List[FunnelStage]
    total: int
    unmatched: int = 0

    def get(self, status) -> Optional[FunnelStage]:
        for stage in self.stages:
            if stage.status == status:
                return stage
        return None

    def count(self, status) -> int:
        stage = self.get(status)
        return stage.count if stage else 0

    def percentage(self, status) -> float:
        stage = self.get(status)
        return stage.percentage if stage else 0.0

    def to_frame(self) -> pd.DataFrame:
        return entries_to_frame(self.stages)


@dataclass
class PeriodComparison:
    """
    Current vs immediately preceding window of equal length.

    change_pct is None when the previous window has no baseline (<= 0).
    """
    current: float
    previous: float
    change_pct: Optional[float]

    @property
    def is_new(self) -> bool:
        return self.change_pct is None and self.current > 0

    @property
    def direction(self) -> str:
        if self.change_pct is None:
            return 'new' if self.is_new else 'flat'
        if self.change_pct > 0:
            return 'up'
        if self.change_pct < 0:
            return 'down'
        return 'flat'


@dataclass
class OverviewMetrics:
    # Revenue (sum of booking payment_amount in the window)
    total_revenue: float = 0.0
    previous_revenue: float = 0.0
    revenue_change: Optional[float] = None
    average_booking_value: float = 0.0

    # Bookings
    total_bookings: int = 0
    previous_bookings: int = 0
    booking_growth: Optional[float] = None
    confirmed_bookings: int = 0
    pending_bookings: int = 0
    cancelled_bookings: int = 0
    conversion_rate: float = 0.0
    payments_completed: int = 0
    payments_pending: int = 0

    # Users & subscribers
    new_users: int = 0
    previous_users: int = 0
    user_growth: Optional[float] = None
    new_subscribers: int = 0
    previous_subscribers: int = 0
    subscriber_growth: Optional[float] = None
    active_subscribers: int = 0

    # Events
    total_events: int = 0
    upcoming_events: int = 0
    past_events: int = 0
    average_capacity: float = 0.0
    overall_fill_rate: float = 0.0

    # Feedback
    average_rating: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def entries_to_frame(entries: List[Any]) -> pd.DataFrame:
    """Convert a list of result dataclasses into a DataFrame (for charts/tables)."""
    if not entries:
        return pd.DataFrame()
    rows = []
    for entry in entries:
        row = asdict(entry)
        values = row.pop('values', None)
        if isinstance(values, dict):
            row.update(values)
        rows.append(row)
    return pd.DataFrame(rows)
