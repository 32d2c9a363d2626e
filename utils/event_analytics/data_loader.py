# utils/event_analytics/data_loader.py
"""
Snapshot Loader for Event Analytics

VERSION: 1.0.0
"Load Once, Compute Many":
1. Load every raw table in one go (5 SQL queries)
2. Normalize once and cache in session_state for the session
3. Only reload when the TTL expires or the user asks for a refresh
4. Every screen computes from the cached snapshot via EventAnalyticsMetrics
"""

import logging
import time
from datetime import datetime
from typing import Dict, Optional
import pandas as pd
import streamlit as st

from utils.config import config
from .constants import (
    LOOKBACK_DAYS,
    CACHE_KEY_SNAPSHOT,
    DEBUG_TIMING,
)
from .bucketing import utc_now
from .normalizer import normalize_snapshot
from .queries import EventQueries

logger = logging.getLogger(__name__)

SNAPSHOT_KEYS = ['events', 'bookings', 'subscribers', 'testimonials', 'profiles']


class EventDataLoader:
    """
    Load and cache the normalized snapshot every console screen uses.

    Usage:
        loader = EventDataLoader()
        snapshot = loader.get_snapshot()
        metrics = EventAnalyticsMetrics(snapshot, now=utc_now())
    """

    def __init__(self, queries: Optional[EventQueries] = None):
        self.queries = queries or EventQueries()
        self.ttl_seconds = config.get_app_setting('CACHE_TTL_SECONDS', 300)

    # =========================================================================
    # MAIN ENTRY POINT
    # =========================================================================

    def get_snapshot(self, force_reload: bool = False) -> Dict:
        """
        Get the normalized snapshot (cached or fresh).

        Returns:
            Dict with 'events', 'bookings', 'subscribers', 'testimonials',
            'profiles' DataFrames plus '_loaded_at' / '_lookback_start'
        """
        needs_reload, reload_reason = self._needs_reload()

        if not force_reload and not needs_reload:
            if DEBUG_TIMING:
                print("♻️ Using cached event analytics snapshot")
            return st.session_state[CACHE_KEY_SNAPSHOT]

        if DEBUG_TIMING and reload_reason:
            print(f"🔄 Reload reason: {reload_reason}")

        return self._load_snapshot()

    def _needs_reload(self) -> tuple:
        """Returns (needs_reload, reason)."""
        cache = st.session_state.get(CACHE_KEY_SNAPSHOT)

        if cache is None:
            return True, "No cached data"

        missing = [key for key in SNAPSHOT_KEYS if cache.get(key) is None]
        if missing:
            return True, f"Missing {', '.join(missing)}"

        loaded_at = cache.get('_loaded_at')
        if loaded_at:
            elapsed = (datetime.now() - loaded_at).total_seconds()
            if elapsed > self.ttl_seconds:
                return True, f"TTL expired ({elapsed:.0f}s)"

        return False, None

    # =========================================================================
    # DATA LOADING
    # =========================================================================

    def _load_snapshot(self) -> Dict:
        lookback_start = (utc_now() - pd.Timedelta(days=LOOKBACK_DAYS)).floor('D').to_pydatetime()

        raw = {}
        total_start = time.perf_counter()

        progress_bar = st.progress(0, text="🔄 Loading console data...")
        try:
            progress_bar.progress(10, text="📅 Loading events...")
            raw['events'] = self.queries.load_events()

            progress_bar.progress(35, text="🎟️ Loading reservations...")
            raw['bookings'] = self.queries.load_reservations(lookback_start)

            progress_bar.progress(60, text="📧 Loading subscribers...")
            raw['subscribers'] = self.queries.load_subscribers()

            progress_bar.progress(75, text="💬 Loading testimonials...")
            raw['testimonials'] = self.queries.load_testimonials()

            progress_bar.progress(90, text="👥 Loading users...")
            raw['profiles'] = self.queries.load_profiles()

            progress_bar.progress(100, text="✅ Data loaded successfully!")
        finally:
            progress_bar.empty()

        data = normalize_snapshot(raw)
        data['_loaded_at'] = datetime.now()
        data['_lookback_start'] = lookback_start

        total_elapsed = time.perf_counter() - total_start
        if DEBUG_TIMING:
            print(f"✅ SNAPSHOT LOADED: {total_elapsed:.3f}s total")

        st.session_state[CACHE_KEY_SNAPSHOT] = data

        logger.info(
            "Snapshot loaded: " + ", ".join(f"{key}={len(data[key])}" for key in SNAPSHOT_KEYS)
        )
        return data

    # =========================================================================
    # CACHE MANAGEMENT
    # =========================================================================

    def get_loaded_at(self) -> Optional[datetime]:
        cache = st.session_state.get(CACHE_KEY_SNAPSHOT)
        return cache.get('_loaded_at') if cache else None

    def clear_cache(self):
        """Drop the cached snapshot; the next get_snapshot() reloads."""
        if CACHE_KEY_SNAPSHOT in st.session_state:
            del st.session_state[CACHE_KEY_SNAPSHOT]
