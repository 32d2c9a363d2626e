"""
Unit Tests for the Period Bucketer

Bucket boundaries, assignment, aggregation and parameter errors.
"""

import pandas as pd
import pytest

from utils.event_analytics.bucketing import build_buckets, assign_buckets, bucket_records, points_to_frame
from utils.event_analytics.models import AnalyticsParameterError
from utils.event_analytics.normalizer import normalize_records


# =============================================================================
# BOUNDARIES
# =============================================================================

class TestBuildBuckets:

    def test_contiguous_and_ending_at_now(self, now):
        buckets = build_buckets(now, 7, 'day')
        assert len(buckets) == 7
        assert buckets[-1][1] == now
        assert buckets[0][0] == now - pd.Timedelta(days=7)
        for (_, end), (start, _) in zip(buckets, buckets[1:]):
            assert end == start

    def test_equal_width(self, now):
        for granularity, days in [('day', 1), ('week', 7), ('month', 30)]:
            for start, end in build_buckets(now, 4, granularity):
                assert end - start == pd.Timedelta(days=days)

    def test_custom_width(self, now):
        buckets = build_buckets(now, 3, pd.Timedelta(hours=6))
        assert buckets[0][0] == now - pd.Timedelta(hours=18)

    def test_depends_only_on_parameters(self, now):
        assert build_buckets(now, 5, 'week') == build_buckets(now, 5, 'week')

    @pytest.mark.parametrize("bucket_count", [0, -1, 2.5, True])
    def test_invalid_bucket_count(self, now, bucket_count):
        with pytest.raises(AnalyticsParameterError):
            build_buckets(now, bucket_count, 'day')

    @pytest.mark.parametrize("granularity", ['year', pd.Timedelta(0), pd.Timedelta(hours=-1), 'abc'])
    def test_invalid_granularity(self, now, granularity):
        with pytest.raises(AnalyticsParameterError):
            build_buckets(now, 3, granularity)

    def test_invalid_now(self):
        with pytest.raises(AnalyticsParameterError):
            build_buckets('not a time', 3, 'day')


# =============================================================================
# ASSIGNMENT
# =============================================================================

class TestAssignBuckets:

    def test_half_open_intervals(self, now):
        dates = pd.Series([
            now - pd.Timedelta(days=3),         # oldest bucket start: included
            now - pd.Timedelta(days=1),         # last bucket start
            now - pd.Timedelta(nanoseconds=1),  # just before now
            now,                                # now itself: excluded
            now - pd.Timedelta(days=3, nanoseconds=1),  # before range
            pd.NaT,
        ])
        positions = assign_buckets(dates, now, 3, 'day')
        assert positions.tolist() == [0, 2, 2, -1, -1, -1]


# =============================================================================
# AGGREGATION
# =============================================================================

class TestBucketRecords:

    def test_counts_and_sums(self, now, raw_bookings):
        bookings = normalize_records(raw_bookings, 'booking')
        points = bucket_records(
            bookings, 'created_at', now, 7, 'day', aggregates={'revenue': 'payment_amount'}
        )
        assert len(points) == 7
        assert points[-1].count == 1
        assert points[-1].get('revenue') == pytest.approx(100.0)
        assert sum(p.count for p in points) == 1

    def test_labels(self, now):
        points = bucket_records(pd.DataFrame(), 'created_at', now, 7, 'day')
        assert points[0].label == 'Oct 12'
        assert points[-1].label == 'Oct 18'

    def test_month_labels(self, now):
        points = bucket_records(pd.DataFrame(), 'created_at', now, 2, 'month')
        assert [p.label for p in points] == ['Sep 2026', 'Oct 2026']

    def test_empty_buckets_report_zero(self, now):
        empty = normalize_records([], 'booking')
        points = bucket_records(empty, 'created_at', now, 3, 'week', aggregates={'revenue': 'payment_amount'})
        assert [p.count for p in points] == [0, 0, 0]
        assert [p.get('revenue') for p in points] == [0.0, 0.0, 0.0]

    def test_undated_and_future_records_excluded(self, now):
        bookings = normalize_records([
            {'created_at': None, 'payment_amount': 10},
            {'created_at': 'garbage', 'payment_amount': 10},
            {'created_at': '2026-12-01', 'payment_amount': 10},
            {'created_at': '2026-10-18', 'payment_amount': 10},
        ], 'booking')
        points = bucket_records(bookings, 'created_at', now, 5, 'day', aggregates={'revenue': 'payment_amount'})
        assert sum(p.count for p in points) == 1
        assert sum(p.get('revenue') for p in points) == pytest.approx(10.0)

    def test_total_matches_records_in_range(self, now, raw_bookings):
        bookings = normalize_records(raw_bookings, 'booking')
        points = bucket_records(bookings, 'created_at', now, 60, 'day')
        start = now - pd.Timedelta(days=60)
        in_range = bookings['created_at'].between(start, now, inclusive='left').sum()
        assert sum(p.count for p in points) == in_range

    def test_unknown_aggregate_column(self, now, raw_bookings):
        bookings = normalize_records(raw_bookings, 'booking')
        with pytest.raises(AnalyticsParameterError):
            bucket_records(bookings, 'created_at', now, 3, 'day', aggregates={'x': 'nope'})

    def test_points_to_frame(self, now, raw_bookings):
        bookings = normalize_records(raw_bookings, 'booking')
        points = bucket_records(bookings, 'created_at', now, 3, 'day', aggregates={'revenue': 'payment_amount'})
        frame = points_to_frame(points)
        assert list(frame.columns) == ['label', 'start', 'end', 'count', 'revenue']
        assert len(frame) == 3
