# utils/event_analytics/metrics.py
"""
Metrics Calculator for Event Analytics

VERSION: 1.0.0
One shared place where every console screen gets its numbers:
- Dashboard home: card counts with real period-over-period growth
- Analytics: overview, trends, category breakdown, top events, funnels
- Records: status funnels for reservations / subscribers / testimonials

All methods are pure functions of (snapshot, now, parameters).
"""

import logging
from typing import Dict, List, Mapping, Optional
import pandas as pd

from .bucketing import bucket_records, resolve_now
from .comparison import compare_windows, window_bounds
from .constants import (
    BOOKING_STATUSES,
    PAYMENT_STATUSES,
    SUBSCRIBER_STATUSES,
    RATING_SCALE,
    TIME_RANGES,
    DEFAULT_TIME_RANGE,
    TOP_EVENTS_LIMIT,
    UPCOMING_EVENTS_LIMIT,
    RECENT_BOOKINGS_LIMIT,
    DASHBOARD_GROWTH_DAYS,
    LOOKBACK_DAYS,
)
from .funnel import compose_funnel
from .grouping import group_and_sum
from .models import (
    AnalyticsParameterError,
    CategoryBreakdownEntry,
    ConversionFunnel,
    OverviewMetrics,
    TimeSeriesPoint,
    TopEventEntry,
)
from .normalizer import normalize_snapshot
from .ranking import top_events, validate_limit
from .ratios import ratio, percentage

logger = logging.getLogger(__name__)


class EventAnalyticsMetrics:
    """
    Calculate dashboard metrics from one normalized snapshot.

    Usage:
        metrics = EventAnalyticsMetrics.from_raw(raw_snapshot, now=utc_now())
        overview = metrics.calculate_overview_metrics(days=30)
        trend = metrics.calculate_booking_trend(bucket_count=30)
    """

    def __init__(self, snapshot: Mapping[str, pd.DataFrame], now):
        self.now = resolve_now(now)
        empty = normalize_snapshot({})
        self.events = snapshot.get('events', empty['events'])
        self.bookings = snapshot.get('bookings', empty['bookings'])
        self.subscribers = snapshot.get('subscribers', empty['subscribers'])
        self.testimonials = snapshot.get('testimonials', empty['testimonials'])
        self.profiles = snapshot.get('profiles', empty['profiles'])

    @classmethod
    def from_raw(cls, raw_snapshot: Mapping, now) -> 'EventAnalyticsMetrics':
        """Normalize raw rows (DataFrames or lists of dicts) then build metrics."""
        return cls(normalize_snapshot(raw_snapshot), now)

    # =========================================================================
    # HELPERS
    # =========================================================================

    def _in_window(self, df: pd.DataFrame, date_col: str, days: Optional[int]) -> pd.DataFrame:
        """Rows dated in [now - days, now); all rows when days is None."""
        if days is None:
            return df
        _, (start, end) = window_bounds(self.now, days)
        dates = df[date_col]
        return df[dates.notna() & (dates >= start) & (dates < end)]

    # =========================================================================
    # OVERVIEW
    # =========================================================================

    def calculate_overview_metrics(self, days: int = 30) -> OverviewMetrics:
        """Top-level scalars for the current window vs the one before it."""
        revenue = compare_windows(self.bookings, 'created_at', self.now, days, value='payment_amount')
        bookings = compare_windows(self.bookings, 'created_at', self.now, days)
        users = compare_windows(self.profiles, 'created_at', self.now, days)
        subscribers = compare_windows(self.subscribers, 'subscribed_at', self.now, days)

        window_bookings = self._in_window(self.bookings, 'created_at', days)
        status_funnel = compose_funnel(window_bookings, 'status', BOOKING_STATUSES)
        payment_funnel = compose_funnel(window_bookings, 'payment_status', PAYMENT_STATUSES)

        events = self.events
        event_dates = events['date']
        today = self.now.normalize()
        total_capacity = float(events['capacity'].sum()) if not events.empty else 0.0
        total_booked = float(events['booked'].sum()) if not events.empty else 0.0

        return OverviewMetrics(
            total_revenue=revenue.current,
            previous_revenue=revenue.previous,
            revenue_change=revenue.change_pct,
            average_booking_value=ratio(revenue.current, bookings.current),

            total_bookings=int(bookings.current),
            previous_bookings=int(bookings.previous),
            booking_growth=bookings.change_pct,
            confirmed_bookings=status_funnel.count('confirmed'),
            pending_bookings=status_funnel.count('pending'),
            cancelled_bookings=status_funnel.count('cancelled'),
            conversion_rate=status_funnel.percentage('confirmed'),
            payments_completed=payment_funnel.count('completed'),
            payments_pending=payment_funnel.count('pending'),

            new_users=int(users.current),
            previous_users=int(users.previous),
            user_growth=users.change_pct,
            new_subscribers=int(subscribers.current),
            previous_subscribers=int(subscribers.previous),
            subscriber_growth=subscribers.change_pct,
            active_subscribers=int((self.subscribers['status'] == 'active').sum()),

            total_events=len(events),
            upcoming_events=int((event_dates.notna() & (event_dates >= today)).sum()),
            past_events=int((event_dates.notna() & (event_dates < today)).sum()),
            average_capacity=ratio(total_capacity, len(events)),
            overall_fill_rate=ratio(total_booked, total_capacity),

            average_rating=ratio(
                float(self.testimonials['rating'].sum()) if not self.testimonials.empty else 0.0,
                len(self.testimonials),
            ),
        )

    # =========================================================================
    # TIME SERIES
    # =========================================================================

    def calculate_booking_trend(
        self,
        bucket_count: int = 30,
        granularity='day'
    ) -> List[TimeSeriesPoint]:
        """Bookings per bucket with 'revenue' (payment_amount) summed."""
        return bucket_records(
            self.bookings, 'created_at', self.now, bucket_count, granularity,
            aggregates={'revenue': 'payment_amount'},
        )

    def calculate_event_trend(
        self,
        bucket_count: int = 12,
        granularity='month'
    ) -> List[TimeSeriesPoint]:
        """Events per bucket (by event date) with revenue, booked and capacity summed."""
        return bucket_records(
            self.events, 'date', self.now, bucket_count, granularity,
            aggregates={'revenue': 'revenue', 'booked': 'booked', 'capacity': 'capacity'},
        )

    def calculate_subscriber_trend(
        self,
        bucket_count: int = 30,
        granularity='day'
    ) -> List[TimeSeriesPoint]:
        return bucket_records(self.subscribers, 'subscribed_at', self.now, bucket_count, granularity)

    # =========================================================================
    # BREAKDOWNS & RANKINGS
    # =========================================================================

    def calculate_category_breakdown(self, value: str = 'revenue') -> List[CategoryBreakdownEntry]:
        """Events grouped by category, summing `value` (revenue, booked, capacity)."""
        return group_and_sum(self.events, 'category', value)

    def calculate_top_events(
        self,
        n: int = TOP_EVENTS_LIMIT,
        by: str = 'revenue',
        days: Optional[int] = None
    ) -> List[TopEventEntry]:
        """Ranked events; by='reservations' counts only bookings created in the last `days`."""
        bookings = self._in_window(self.bookings, 'created_at', days)
        return top_events(self.events, n=n, by=by, bookings=bookings)

    # =========================================================================
    # FUNNELS
    # =========================================================================

    def calculate_conversion_funnel(self, days: Optional[int] = None) -> ConversionFunnel:
        """Booking status funnel (confirmed -> pending -> cancelled)."""
        return compose_funnel(self._in_window(self.bookings, 'created_at', days), 'status', BOOKING_STATUSES)

    def calculate_payment_funnel(self, days: Optional[int] = None) -> ConversionFunnel:
        return compose_funnel(
            self._in_window(self.bookings, 'created_at', days), 'payment_status', PAYMENT_STATUSES
        )

    def calculate_subscriber_funnel(self) -> ConversionFunnel:
        return compose_funnel(self.subscribers, 'status', SUBSCRIBER_STATUSES)

    def calculate_rating_distribution(self) -> ConversionFunnel:
        return compose_funnel(self.testimonials, 'rating', RATING_SCALE)

    def calculate_testimonial_summary(self) -> Dict:
        df = self.testimonials
        total = len(df)
        approved = int(df['is_approved'].sum()) if total else 0
        return {
            'total': total,
            'approved': approved,
            'pending': total - approved,
            'featured': int(df['is_featured'].sum()) if total else 0,
            'approval_rate': percentage(approved, total),
            'average_rating': ratio(float(df['rating'].sum()) if total else 0.0, total),
        }

    # =========================================================================
    # DASHBOARD HOME
    # =========================================================================

    def calculate_dashboard_summary(self, days: int = DASHBOARD_GROWTH_DAYS) -> Dict:
        """
        Card values for the console home page.

        Growth compares the last `days` against the `days` before.
        Events have no creation date, so their card carries no growth.
        Reservations count those created in the last LOOKBACK_DAYS (the load window).
        """
        active_subscribers = self.subscribers[self.subscribers['status'] == 'active']
        return {
            'total_events': {'value': len(self.events), 'growth': None},
            'total_reservations': {
                'value': len(self._in_window(self.bookings, 'created_at', LOOKBACK_DAYS)),
                'growth': compare_windows(self.bookings, 'created_at', self.now, days),
            },
            'total_users': {
                'value': len(self.profiles),
                'growth': compare_windows(self.profiles, 'created_at', self.now, days),
            },
            'active_subscribers': {
                'value': len(active_subscribers),
                'growth': compare_windows(active_subscribers, 'subscribed_at', self.now, days),
            },
        }

    def get_upcoming_events(self, limit: int = UPCOMING_EVENTS_LIMIT) -> pd.DataFrame:
        """Events dated today or later, soonest first."""
        limit = validate_limit(limit)
        today = self.now.normalize()
        dates = self.events['date']
        upcoming = self.events[dates.notna() & (dates >= today)]
        upcoming = upcoming.sort_values('date', kind='stable')
        return upcoming.head(limit).reset_index(drop=True)

    def get_recent_bookings(self, limit: int = RECENT_BOOKINGS_LIMIT) -> pd.DataFrame:
        """Latest bookings first; undated bookings last."""
        limit = validate_limit(limit)
        bookings = self.bookings.reset_index(drop=True)
        if bookings.empty:
            return bookings
        recent = bookings.sort_values('created_at', ascending=False, na_position='last', kind='stable')
        return recent.head(limit).reset_index(drop=True)

    # =========================================================================
    # ANALYTICS SCREEN
    # =========================================================================

    def build_report(self, time_range: str = DEFAULT_TIME_RANGE, top_n: int = TOP_EVENTS_LIMIT) -> Dict:
        """
        Default-selection results for one time range.

        The analytics page renders its overview cards and funnels from this;
        sections with their own widgets recompute from the same metrics.

        Args:
            time_range: Key of TIME_RANGES ('7days', '30days', '90days', '12months')
            top_n: Number of top events
        """
        settings = TIME_RANGES.get(time_range)
        if settings is None:
            raise AnalyticsParameterError(
                f"Unknown time range '{time_range}'. Expected one of: {', '.join(TIME_RANGES)}"
            )
        days = settings['days']

        report = {
            'time_range': time_range,
            'generated_for': self.now,
            'overview': self.calculate_overview_metrics(days),
            'booking_trend': self.calculate_booking_trend(settings['buckets'], settings['granularity']),
            'category_breakdown': self.calculate_category_breakdown('revenue'),
            'top_events': self.calculate_top_events(top_n, by='revenue', days=days),
            'top_events_by_reservations': self.calculate_top_events(top_n, by='reservations', days=days),
            'conversion_funnel': self.calculate_conversion_funnel(days),
            'payment_funnel': self.calculate_payment_funnel(days),
            'subscriber_funnel': self.calculate_subscriber_funnel(),
        }
        logger.info(
            f"Built analytics report ({time_range}): "
            f"{report['overview'].total_bookings} bookings, "
            f"revenue {report['overview'].total_revenue:,.2f}"
        )
        return report
