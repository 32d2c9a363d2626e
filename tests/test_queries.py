"""
Unit Tests for EventQueries record edits

The database layer is replaced with a recorder; no connection is opened.
"""

from datetime import date

import pytest

from utils.event_analytics import queries as queries_module
from utils.event_analytics.queries import EventQueries


@pytest.fixture
def executed(monkeypatch):
    calls = []

    def fake_execute_update(query, params=None):
        calls.append((query, params))
        return 1

    monkeypatch.setattr(queries_module, 'execute_update', fake_execute_update)
    return calls


class TestRecordEdits:

    def test_update_reservation_status(self, executed):
        assert EventQueries().update_reservation_status(5, 'confirmed') == 1
        query, params = executed[0]
        assert 'UPDATE reservations' in query
        assert params == {'status': 'confirmed', 'id': 5}

    def test_invalid_reservation_status(self, executed):
        with pytest.raises(ValueError):
            EventQueries().update_reservation_status(5, 'refunded')
        assert executed == []

    def test_invalid_payment_status(self, executed):
        with pytest.raises(ValueError):
            EventQueries().update_payment_status(5, 'paid')

    def test_approve_testimonial(self, executed):
        EventQueries().approve_testimonial(9)
        query, params = executed[0]
        assert 'is_approved = TRUE' in query
        assert params == {'id': 9}

    def test_set_testimonial_featured(self, executed):
        EventQueries().set_testimonial_featured(9, 1)
        assert executed[0][1] == {'featured': True, 'id': 9}

    def test_update_subscriber_status(self, executed):
        EventQueries().update_subscriber_status(3, 'unsubscribed')
        assert 'newsletter_subscribers' in executed[0][0]

    def test_invalid_subscriber_status(self, executed):
        with pytest.raises(ValueError):
            EventQueries().update_subscriber_status(3, 'bounced')

    def test_write_errors_propagate(self, monkeypatch):
        def failing(query, params=None):
            raise RuntimeError("connection lost")

        monkeypatch.setattr(queries_module, 'execute_update', failing)
        with pytest.raises(RuntimeError):
            EventQueries().approve_testimonial(1)


class TestReads:

    def test_failed_read_returns_empty_frame(self, monkeypatch):
        def failing(*args, **kwargs):
            raise RuntimeError("no database")

        monkeypatch.setattr(queries_module.pd, 'read_sql', failing)
        queries = EventQueries()
        queries._engine = object()
        assert queries.load_events().empty


# =============================================================================
# EVENT EDITS
# =============================================================================

def _event_edit(**overrides):
    values = {
        'event_id': 4, 'title': ' Silent Retreat ', 'category': 'Retreats',
        'date': date(2026, 11, 2), 'location': 'Stellenbosch',
        'capacity': 20, 'available_spots': 13, 'price': 100, 'is_free': False,
    }
    values.update(overrides)
    return values


class TestEventEdits:

    def test_update_event(self, executed):
        assert EventQueries().update_event(**_event_edit()) == 1
        query, params = executed[0]
        assert 'UPDATE events' in query
        assert params == {
            'title': 'Silent Retreat', 'category': 'Retreats', 'date': date(2026, 11, 2),
            'location': 'Stellenbosch', 'capacity': 20, 'available_spots': 13,
            'price': 100.0, 'is_free': False, 'id': 4,
        }

    def test_free_event_saves_zero_price(self, executed):
        EventQueries().update_event(**_event_edit(price=80, is_free=True))
        assert executed[0][1]['price'] == 0.0
        assert executed[0][1]['is_free'] is True

    def test_blank_category_and_location_defaults(self, executed):
        EventQueries().update_event(**_event_edit(category='  ', location=''))
        params = executed[0][1]
        assert params['category'] == 'General'
        assert params['location'] is None

    @pytest.mark.parametrize("overrides", [
        {'title': '   '},
        {'capacity': -1, 'available_spots': 0},
        {'available_spots': 21},
        {'available_spots': -1},
        {'price': -5},
        {'price': float('nan')},
    ])
    def test_invalid_event_edit(self, executed, overrides):
        with pytest.raises(ValueError):
            EventQueries().update_event(**_event_edit(**overrides))
        assert executed == []
