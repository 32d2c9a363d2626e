# utils/event_analytics/queries.py
"""
SQL Queries for Event Analytics

Data sources (platform database, PostgreSQL):
  - events
  - reservations
  - newsletter_subscribers
  - testimonials
  - profiles

VERSION: 1.0.0
- Uses sqlalchemy engine + text()
- Lazy engine loading pattern
- Reads log and return an empty DataFrame; writes log and re-raise
"""

import logging
import time
from datetime import datetime
from typing import Optional
import pandas as pd
from sqlalchemy import text

from utils.db import get_db_engine, execute_update
from .constants import (
    DEFAULT_CATEGORY,
    BOOKING_STATUSES,
    PAYMENT_STATUSES,
    SUBSCRIBER_STATUSES,
    DEBUG_QUERY_TIMING,
)

logger = logging.getLogger(__name__)


class EventQueries:
    """
    SQL query helpers for Event Analytics.

    Usage:
        queries = EventQueries()
        events_df = queries.load_events()
        bookings_df = queries.load_reservations(lookback_start)
    """

    def __init__(self):
        self._engine = None

    @property
    def engine(self):
        """Lazy load database engine."""
        if self._engine is None:
            self._engine = get_db_engine()
        return self._engine

    def _read(self, name: str, query: str, params: Optional[dict] = None) -> pd.DataFrame:
        start_time = time.perf_counter()
        try:
            df = pd.read_sql(text(query), self.engine, params=params or {})
            elapsed = time.perf_counter() - start_time
            if DEBUG_QUERY_TIMING:
                print(f"   📊 SQL [{name}]: {elapsed:.3f}s → {len(df):,} rows")
            return df
        except Exception as e:
            logger.error(f"Error loading {name}: {e}")
            return pd.DataFrame()

    # =========================================================================
    # RAW TABLES
    # =========================================================================

    def load_events(self) -> pd.DataFrame:
        """All events, past and upcoming (no date filter)."""
        query = """
            SELECT *
            FROM events
            ORDER BY date ASC
        """
        return self._read('events', query)

    def load_reservations(self, lookback_start: datetime) -> pd.DataFrame:
        """
        Reservations created since lookback_start.

        Args:
            lookback_start: Earliest created_at to load
        """
        query = """
            SELECT *
            FROM reservations
            WHERE created_at >= :lookback_start
            ORDER BY created_at DESC
        """
        return self._read('reservations', query, {'lookback_start': lookback_start})

    def load_subscribers(self) -> pd.DataFrame:
        query = """
            SELECT *
            FROM newsletter_subscribers
            ORDER BY subscribed_at DESC
        """
        return self._read('newsletter_subscribers', query)

    def load_testimonials(self) -> pd.DataFrame:
        query = """
            SELECT *
            FROM testimonials
            ORDER BY created_at DESC
        """
        return self._read('testimonials', query)

    def load_profiles(self) -> pd.DataFrame:
        # Only the columns the console needs; profiles hold personal data
        query = """
            SELECT id, full_name, is_admin, created_at
            FROM profiles
            ORDER BY created_at DESC
        """
        return self._read('profiles', query)

    # =========================================================================
    # RECORD EDITS
    # =========================================================================

    def update_reservation_status(self, reservation_id, status: str) -> int:
        """Set a reservation's booking status; returns affected row count."""
        if status not in BOOKING_STATUSES:
            raise ValueError(
                f"Invalid reservation status '{status}'. Expected one of: {', '.join(BOOKING_STATUSES)}"
            )
        query = """
            UPDATE reservations
            SET status = :status, updated_at = NOW()
            WHERE id = :id
        """
        return self._write('update_reservation_status', query, {'status': status, 'id': reservation_id})

    def update_payment_status(self, reservation_id, payment_status: str) -> int:
        if payment_status not in PAYMENT_STATUSES:
            raise ValueError(
                f"Invalid payment status '{payment_status}'. "
                f"Expected one of: {', '.join(PAYMENT_STATUSES)}"
            )
        query = """
            UPDATE reservations
            SET payment_status = :payment_status, updated_at = NOW()
            WHERE id = :id
        """
        return self._write(
            'update_payment_status', query, {'payment_status': payment_status, 'id': reservation_id}
        )

    def approve_testimonial(self, testimonial_id) -> int:
        query = """
            UPDATE testimonials
            SET is_approved = TRUE, updated_at = NOW()
            WHERE id = :id
        """
        return self._write('approve_testimonial', query, {'id': testimonial_id})

    def set_testimonial_featured(self, testimonial_id, featured: bool) -> int:
        query = """
            UPDATE testimonials
            SET is_featured = :featured, updated_at = NOW()
            WHERE id = :id
        """
        return self._write(
            'set_testimonial_featured', query, {'featured': bool(featured), 'id': testimonial_id}
        )

    def update_subscriber_status(self, subscriber_id, status: str) -> int:
        if status not in SUBSCRIBER_STATUSES:
            raise ValueError(
                f"Invalid subscriber status '{status}'. Expected one of: {', '.join(SUBSCRIBER_STATUSES)}"
            )
        query = """
            UPDATE newsletter_subscribers
            SET status = :status
            WHERE id = :id
        """
        return self._write('update_subscriber_status', query, {'status': status, 'id': subscriber_id})

    def update_event(
        self,
        event_id,
        title: str,
        category: str,
        date,
        location: str,
        capacity: int,
        available_spots: int,
        price: float,
        is_free: bool
    ) -> int:
        """
        Edit an event's listing, seats and price.

        Raises:
            ValueError: blank title, negative capacity or price, or
                available_spots outside [0, capacity]
        """
        title = (title or '').strip()
        if not title:
            raise ValueError("Event title is required")
        capacity = int(capacity)
        available_spots = int(available_spots)
        if capacity < 0:
            raise ValueError(f"Capacity must be >= 0, got {capacity}")
        if not 0 <= available_spots <= capacity:
            raise ValueError(
                f"Available spots must be between 0 and capacity ({capacity}), got {available_spots}"
            )
        price = 0.0 if is_free else float(price)
        if not price >= 0:
            raise ValueError(f"Price must be >= 0, got {price}")

        query = """
            UPDATE events
            SET title = :title,
                category = :category,
                date = :date,
                location = :location,
                capacity = :capacity,
                available_spots = :available_spots,
                price = :price,
                is_free = :is_free
            WHERE id = :id
        """
        params = {
            'title': title,
            'category': (category or '').strip() or DEFAULT_CATEGORY,
            'date': date,
            'location': (location or '').strip() or None,
            'capacity': capacity,
            'available_spots': available_spots,
            'price': price,
            'is_free': bool(is_free),
            'id': event_id,
        }
        return self._write('update_event', query, params)

    def _write(self, name: str, query: str, params: dict) -> int:
        try:
            rowcount = execute_update(query, params)
        except Exception as e:
            logger.error(f"Error in {name} ({params}): {e}")
            raise
        logger.info(f"{name}: {rowcount} row(s) updated ({params})")
        return rowcount
