"""
Unit Tests for the Period Comparator
"""

import pandas as pd
import pytest

from utils.event_analytics.comparison import (
    percent_change,
    compare_values,
    compare_windows,
    window_bounds,
    format_change,
)
from utils.event_analytics.models import AnalyticsParameterError


class TestPercentChange:

    def test_growth(self):
        assert percent_change(150, 100) == pytest.approx(50.0)

    def test_decline(self):
        assert percent_change(50, 100) == pytest.approx(-50.0)

    def test_zero_baseline_has_no_change(self):
        assert percent_change(10, 0) is None
        assert percent_change(0, 0) is None

    def test_is_new_flag(self):
        assert compare_values(10, 0).is_new
        assert compare_values(10, 0).direction == 'new'
        assert not compare_values(0, 0).is_new
        assert compare_values(0, 0).direction == 'flat'
        assert compare_values(5, 10).direction == 'down'


class TestWindows:

    def test_bounds_are_adjacent(self, now):
        (prev_start, prev_end), (cur_start, cur_end) = window_bounds(now, 30)
        assert cur_end == now
        assert prev_end == cur_start
        assert cur_end - cur_start == prev_end - prev_start == pd.Timedelta(days=30)

    @pytest.mark.parametrize("days", [0, -7, 1.5, None])
    def test_invalid_days(self, now, days):
        with pytest.raises(AnalyticsParameterError):
            window_bounds(now, days)

    def test_booking_counts(self, now, snapshot):
        comparison = compare_windows(snapshot['bookings'], 'created_at', now, 30)
        assert comparison.current == 5
        assert comparison.previous == 2
        assert comparison.change_pct == pytest.approx(150.0)

    def test_revenue_sum(self, now, snapshot):
        comparison = compare_windows(snapshot['bookings'], 'created_at', now, 30, value='payment_amount')
        assert comparison.current == pytest.approx(400.0)
        assert comparison.previous == pytest.approx(200.0)
        assert comparison.change_pct == pytest.approx(100.0)

    def test_empty_records(self, now, snapshot):
        comparison = compare_windows(snapshot['bookings'].iloc[0:0], 'created_at', now, 7)
        assert comparison.current == 0
        assert comparison.change_pct is None


class TestFormatChange:

    def test_formats(self):
        assert format_change(compare_values(150, 100)) == "+50.0%"
        assert format_change(compare_values(50, 100), suffix=" MoM") == "-50.0% MoM"
        assert format_change(compare_values(3, 0)) == "New"
        assert format_change(compare_values(0, 0)) is None
