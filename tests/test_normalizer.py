"""
Unit Tests for the Record Normalizer

Coercion rules, derived event fields and source immutability.
"""

import copy
from datetime import datetime

import numpy as np
import pandas as pd
import pytest

from utils.event_analytics.models import AnalyticsParameterError
from utils.event_analytics.normalizer import (
    normalize_records,
    normalize_record,
    normalize_snapshot,
    normalize_events,
    normalize_testimonials,
)
from utils.event_analytics.coercion import to_number, to_bool, to_timestamp
from utils.event_analytics.constants import EVENT_COLUMNS, BOOKING_COLUMNS, MAX_COUNT


# =============================================================================
# PRIMITIVE COERCION
# =============================================================================

class TestCoercion:

    @pytest.mark.parametrize("value,expected", [
        (5, 5.0),
        ("12.5", 12.5),
        (" 7 ", 7.0),
    ])
    def test_to_number_parses(self, value, expected):
        assert to_number(value) == pytest.approx(expected)

    @pytest.mark.parametrize("value", [None, "", "abc", True, float('inf'), [1]])
    def test_to_number_rejects(self, value):
        assert pd.isna(to_number(value))

    def test_to_bool(self):
        assert to_bool("true") is True
        assert to_bool("No") is False
        assert to_bool(0) is False
        assert to_bool("maybe") is None
        assert to_bool(None) is None

    def test_to_timestamp_is_naive_utc(self):
        ts = to_timestamp("2026-10-18T09:00:00+02:00")
        assert ts == pd.Timestamp("2026-10-18 07:00:00")
        assert ts.tzinfo is None

    def test_to_timestamp_unparseable(self):
        assert to_timestamp("not a date") is pd.NaT
        assert to_timestamp(12345) is pd.NaT

    @pytest.mark.parametrize("value", ["3000-01-01", datetime(3000, 1, 1), "1500-06-01"])
    def test_to_timestamp_outside_representable_range(self, value):
        assert to_timestamp(value) is pd.NaT


# =============================================================================
# EVENTS
# =============================================================================

class TestNormalizeEvents:

    def test_derived_fields(self):
        record = normalize_record(
            {'id': 1, 'capacity': 50, 'available_spots': 0, 'price': 100}, 'event'
        )
        assert record['booked'] == 50
        assert record['revenue'] == pytest.approx(5000.0)
        assert record['fill_rate'] == pytest.approx(1.0)

    def test_missing_category_is_general(self):
        record = normalize_record({'id': 1, 'category': None}, 'event')
        assert record['category'] == 'General'

    def test_zero_capacity_has_zero_fill_rate(self):
        record = normalize_record({'capacity': 0, 'available_spots': 0, 'price': 10}, 'event')
        assert record['booked'] == 0
        assert record['fill_rate'] == 0.0

    def test_missing_available_spots_means_nothing_booked(self):
        record = normalize_record({'capacity': 30, 'price': 10}, 'event')
        assert record['available_spots'] == 30
        assert record['booked'] == 0

    def test_booked_is_clamped(self):
        over = normalize_record({'capacity': 10, 'available_spots': 25}, 'event')
        under = normalize_record({'capacity': 10, 'available_spots': -5}, 'event')
        assert over['booked'] == 0
        assert under['booked'] == 10

    def test_non_numeric_values_become_zero(self):
        record = normalize_record({'capacity': 'lots', 'price': 'free?'}, 'event')
        assert record['capacity'] == 0
        assert record['unit_price'] == 0.0
        assert record['revenue'] == 0.0

    def test_is_free_zeroes_revenue(self):
        record = normalize_record(
            {'capacity': 10, 'available_spots': 2, 'price': 80, 'is_free': True}, 'event'
        )
        assert record['booked'] == 8
        assert record['unit_price'] == 0.0
        assert record['revenue'] == 0.0

    def test_unit_price_preferred_over_price(self):
        record = normalize_record(
            {'capacity': 2, 'available_spots': 0, 'unit_price': 30, 'price': 99}, 'event'
        )
        assert record['revenue'] == pytest.approx(60.0)

    def test_unparseable_date_is_nat(self):
        record = normalize_record({'date': 'someday'}, 'event')
        assert pd.isna(record['date'])

    def test_far_future_dates_become_nat(self):
        df = normalize_records([
            {'date': datetime(3000, 1, 1)},
            {'date': '3000-01-01'},
            {'date': '2026-11-02'},
        ], 'event')
        assert df['date'].isna().tolist() == [True, True, False]
        assert df['date'].iloc[2] == pd.Timestamp('2026-11-02')

    def test_far_future_dates_in_typed_frame_become_nat(self):
        dates = np.array(['3000-01-01', '2026-11-02'], dtype='datetime64[s]')
        df = normalize_events(pd.DataFrame({'date': dates}))
        assert df['date'].dtype == 'datetime64[ns]'
        assert df['date'].isna().tolist() == [True, False]

    def test_huge_counts_are_capped(self):
        record = normalize_record(
            {'capacity': '1e300', 'available_spots': 0, 'unit_price': 1}, 'event'
        )
        assert record['capacity'] == MAX_COUNT
        assert record['booked'] == MAX_COUNT
        assert record['fill_rate'] == pytest.approx(1.0)

    def test_huge_available_spots_means_nothing_booked(self):
        record = normalize_record({'capacity': 10, 'available_spots': 1e300}, 'event')
        assert record['available_spots'] == MAX_COUNT
        assert record['booked'] == 0

    def test_canonical_columns(self, raw_events):
        df = normalize_events(raw_events)
        assert list(df.columns) == EVENT_COLUMNS
        assert len(df) == 3

    def test_source_rows_not_mutated(self, raw_events):
        before = copy.deepcopy(raw_events)
        normalize_events(raw_events)
        assert raw_events == before

    def test_source_frame_not_mutated(self, raw_events):
        source = pd.DataFrame(raw_events)
        before = source.copy()
        normalize_events(source)
        pd.testing.assert_frame_equal(source, before)


# =============================================================================
# OTHER KINDS
# =============================================================================

class TestNormalizeOtherKinds:

    def test_booking_defaults(self):
        record = normalize_record({'id': 1, 'payment_amount': 'n/a'}, 'booking')
        assert record['status'] == 'unknown'
        assert record['payment_status'] == 'unknown'
        assert record['payment_amount'] == 0.0
        assert pd.isna(record['created_at'])

    def test_testimonial_rating_default_and_clamp(self):
        df = normalize_testimonials([
            {'rating': None}, {'rating': 'great'}, {'rating': 9}, {'rating': 0}, {'rating': '3'},
        ])
        assert df['rating'].tolist() == [5, 5, 5, 1, 3]

    def test_empty_input(self):
        df = normalize_records([], 'booking')
        assert df.empty
        assert list(df.columns) == BOOKING_COLUMNS

    def test_none_input(self):
        assert normalize_records(None, 'event').empty

    def test_unknown_kind(self):
        with pytest.raises(AnalyticsParameterError):
            normalize_records([], 'ticket')

    def test_snapshot_fills_missing_kinds(self, raw_events):
        snapshot = normalize_snapshot({'events': raw_events})
        assert set(snapshot) == {'events', 'bookings', 'subscribers', 'testimonials', 'profiles'}
        assert len(snapshot['events']) == 3
        assert snapshot['bookings'].empty
