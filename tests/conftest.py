"""
Shared fixtures for the event analytics tests.

All fixtures use a fixed reference instant so results never depend on the
wall clock.
"""

import pandas as pd
import pytest

from utils.event_analytics.normalizer import normalize_snapshot


# =============================================================================
# REFERENCE TIME
# =============================================================================

@pytest.fixture
def now():
    """Midnight UTC, 19 Oct 2026."""
    return pd.Timestamp('2026-10-19 00:00:00')


# =============================================================================
# RAW ROWS (shaped like API / SQL rows)
# =============================================================================

@pytest.fixture
def raw_events():
    return [
        {
            'id': 1, 'title': 'Silent Retreat', 'category': 'Retreats',
            'date': '2026-11-02', 'location': 'Stellenbosch',
            'capacity': 20, 'available_spots': 13, 'price': 100, 'is_free': False,
        },
        {
            'id': 2, 'title': 'Prayer Workshop', 'category': 'Workshops',
            'date': '2026-10-05', 'location': 'Cape Town',
            'capacity': 10, 'available_spots': 7, 'price': 100, 'is_free': False,
        },
        {
            'id': 3, 'title': 'Open Evening', 'category': None,
            'date': '2026-10-25', 'location': 'Online',
            'capacity': 50, 'available_spots': 40, 'price': 80, 'is_free': True,
        },
    ]


@pytest.fixture
def raw_bookings():
    """Five bookings in the last 30 days, two in the 30 days before."""
    return [
        {'id': 11, 'event_id': 1, 'user_name': 'Ann', 'status': 'confirmed',
         'payment_status': 'completed', 'payment_amount': 100, 'created_at': '2026-10-18T09:00:00Z'},
        {'id': 12, 'event_id': 1, 'user_name': 'Ben', 'status': 'confirmed',
         'payment_status': 'completed', 'payment_amount': 100, 'created_at': '2026-10-10T09:00:00Z'},
        {'id': 13, 'event_id': 2, 'user_name': 'Cat', 'status': 'pending',
         'payment_status': 'pending', 'payment_amount': 50, 'created_at': '2026-10-01T12:00:00Z'},
        {'id': 14, 'event_id': 1, 'user_name': 'Dan', 'status': 'cancelled',
         'payment_status': 'failed', 'payment_amount': 0, 'created_at': '2026-09-25T12:00:00Z'},
        {'id': 15, 'event_id': 3, 'user_name': 'Eve', 'status': 'confirmed',
         'payment_status': 'completed', 'payment_amount': '150.00', 'created_at': '2026-09-20T12:00:00Z'},
        {'id': 16, 'event_id': 2, 'user_name': 'Fay', 'status': 'confirmed',
         'payment_status': 'completed', 'payment_amount': 100, 'created_at': '2026-09-10T12:00:00Z'},
        {'id': 17, 'event_id': 2, 'user_name': 'Gus', 'status': 'confirmed',
         'payment_status': 'completed', 'payment_amount': 100, 'created_at': '2026-08-25T12:00:00Z'},
    ]


@pytest.fixture
def raw_subscribers():
    return [
        {'id': 21, 'email': 'a@example.com', 'status': 'active', 'subscribed_at': '2026-10-15'},
        {'id': 22, 'email': 'b@example.com', 'status': 'active', 'subscribed_at': '2026-09-01'},
        {'id': 23, 'email': 'c@example.com', 'status': 'pending', 'subscribed_at': '2026-10-17'},
        {'id': 24, 'email': 'd@example.com', 'status': 'unsubscribed', 'subscribed_at': '2026-06-01'},
    ]


@pytest.fixture
def raw_testimonials():
    return [
        {'id': 31, 'name': 'Ann', 'rating': 5, 'is_approved': True, 'is_featured': True},
        {'id': 32, 'name': 'Ben', 'rating': '4', 'is_approved': False, 'is_featured': False},
        {'id': 33, 'name': 'Cat', 'rating': None, 'is_approved': True, 'is_featured': False},
    ]


@pytest.fixture
def raw_profiles():
    return [
        {'id': 'u1', 'full_name': 'Ann', 'created_at': '2026-10-12'},
        {'id': 'u2', 'full_name': 'Ben', 'created_at': '2026-10-02'},
        {'id': 'u3', 'full_name': 'Cat', 'created_at': '2026-09-05'},
    ]


@pytest.fixture
def raw_snapshot(raw_events, raw_bookings, raw_subscribers, raw_testimonials, raw_profiles):
    return {
        'events': raw_events,
        'bookings': raw_bookings,
        'subscribers': raw_subscribers,
        'testimonials': raw_testimonials,
        'profiles': raw_profiles,
    }


@pytest.fixture
def snapshot(raw_snapshot):
    return normalize_snapshot(raw_snapshot)
