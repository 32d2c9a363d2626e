# utils/event_analytics/__init__.py
"""
Event Analytics Module

VERSION: 1.0.0
- Engine: normalizer, ratios, bucketing, grouping, ranking, comparison, funnel
- EventAnalyticsMetrics composes the engine for every console screen
- EventQueries / EventDataLoader: SQL access and "Load Once, Compute Many" cache
"""

# Core classes
from .metrics import EventAnalyticsMetrics
from .queries import EventQueries
from .data_loader import EventDataLoader

# Engine
from .normalizer import normalize_records, normalize_record, normalize_snapshot
from .ratios import ratio, percentage
from .bucketing import utc_now, build_buckets, bucket_records, points_to_frame
from .grouping import group_and_sum
from .ranking import rank_top_n, top_events
from .comparison import percent_change, compare_values, compare_windows, format_change
from .funnel import compose_funnel

# Result types
from .models import (
    AnalyticsParameterError,
    TimeSeriesPoint,
    CategoryBreakdownEntry,
    TopEventEntry,
    FunnelStage,
    ConversionFunnel,
    PeriodComparison,
    OverviewMetrics,
    entries_to_frame,
)

# Charts
from .charts import empty_chart

# Constants
from .constants import (
    BOOKING_STATUSES,
    PAYMENT_STATUSES,
    SUBSCRIBER_STATUSES,
    TIME_RANGES,
    DEFAULT_TIME_RANGE,
    CACHE_KEY_SNAPSHOT,
    CACHE_KEY_TIME_RANGE,
    COLORS,
    DEBUG_TIMING,
    DEBUG_QUERY_TIMING,
)

__all__ = [
    # Core classes
    'EventAnalyticsMetrics',
    'EventQueries',
    'EventDataLoader',

    # Engine
    'normalize_records', 'normalize_record', 'normalize_snapshot',
    'ratio', 'percentage',
    'utc_now', 'build_buckets', 'bucket_records', 'points_to_frame',
    'group_and_sum',
    'rank_top_n', 'top_events',
    'percent_change', 'compare_values', 'compare_windows', 'format_change',
    'compose_funnel',

    # Result types
    'AnalyticsParameterError',
    'TimeSeriesPoint', 'CategoryBreakdownEntry', 'TopEventEntry',
    'FunnelStage', 'ConversionFunnel', 'PeriodComparison', 'OverviewMetrics',
    'entries_to_frame',

    'empty_chart',

    # Constants
    'BOOKING_STATUSES', 'PAYMENT_STATUSES', 'SUBSCRIBER_STATUSES',
    'TIME_RANGES', 'DEFAULT_TIME_RANGE',
    'CACHE_KEY_SNAPSHOT', 'CACHE_KEY_TIME_RANGE',
    'COLORS',
    'DEBUG_TIMING', 'DEBUG_QUERY_TIMING',
]

__version__ = '1.0.0'
