# app.py
"""
Community Admin Console - Main Entry Point (Dashboard)

Version: 1.0.0
"""

import streamlit as st
from utils.config import config
from utils.db import check_db_connection, get_connection_pool_status
from utils.event_analytics import EventDataLoader, EventAnalyticsMetrics, utc_now
from utils.event_analytics.constants import DASHBOARD_GROWTH_DAYS
from utils.event_analytics.fragments import (
    render_dashboard_cards,
    render_upcoming_events,
    render_recent_bookings,
)
import logging

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# ==================== PAGE CONFIGURATION ====================

APP_NAME = "Community Admin Console"
APP_ICON = "🎟️"
APP_VERSION = "1.0.0"

st.set_page_config(
    page_title=APP_NAME,
    page_icon=APP_ICON,
    layout="wide",
    initial_sidebar_state="expanded"
)

# ==================== CUSTOM CSS ====================

st.markdown("""
<style>
    .main-header {
        font-size: 2.5rem;
        font-weight: bold;
        margin-bottom: 0.5rem;
        color: #1f77b4;
    }

    .sub-header {
        font-size: 1.1rem;
        color: #666;
        margin-bottom: 2rem;
    }

    .footer {
        text-align: center;
        color: #888;
        padding: 1rem;
        margin-top: 3rem;
        border-top: 1px solid #eee;
        font-size: 0.9rem;
    }
</style>
""", unsafe_allow_html=True)


# ==================== HELPER FUNCTIONS ====================

def show_sidebar(loader: EventDataLoader):
    with st.sidebar:
        st.markdown(f"### {APP_ICON} {APP_NAME}")
        loaded_at = loader.get_loaded_at()
        if loaded_at:
            st.caption(f"Data loaded at {loaded_at:%H:%M:%S}")
        if st.button("🔄 Refresh data", width="stretch"):
            loader.clear_cache()
            st.rerun()


def show_dashboard():
    """Console home: cards with growth, upcoming events, recent reservations"""
    st.markdown(f'<p class="main-header">{APP_ICON} {APP_NAME}</p>', unsafe_allow_html=True)
    st.markdown('<p class="sub-header">Events, reservations and community at a glance</p>', unsafe_allow_html=True)

    db_ok, db_error = check_db_connection()
    if not db_ok:
        st.error(f"⚠️ {db_error}")
        st.info("Please check the database settings in .env or Streamlit secrets.")
        st.stop()

    loader = EventDataLoader()
    show_sidebar(loader)

    snapshot = loader.get_snapshot()
    metrics = EventAnalyticsMetrics(snapshot, now=utc_now())

    render_dashboard_cards(metrics.calculate_dashboard_summary(DASHBOARD_GROWTH_DAYS), DASHBOARD_GROWTH_DAYS)

    st.markdown("---")
    col_events, col_bookings = st.columns(2)
    with col_events:
        render_upcoming_events(metrics)
    with col_bookings:
        render_recent_bookings(metrics)

    if config.is_feature_enabled("DEBUG_MODE"):
        render_system_status()

    st.markdown(f"""
    <div class="footer">
        <strong>{APP_NAME}</strong> v{APP_VERSION}
    </div>
    """, unsafe_allow_html=True)


def render_system_status():
    with st.expander("🔧 System Status"):
        pool_status = get_connection_pool_status()

        col1, col2, col3 = st.columns(3)
        with col1:
            st.metric("DB Status", pool_status.get("status", "OK"))
        with col2:
            st.metric("Connections Used", pool_status.get("checked_out", 0))
        with col3:
            st.metric("Available", pool_status.get("checked_in", 0))


# ==================== MAIN ====================

def main():
    """Main application entry point"""
    show_dashboard()


if __name__ == "__main__":
    main()
