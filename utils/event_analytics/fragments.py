# utils/event_analytics/fragments.py
"""
Streamlit Fragments for Event Analytics

VERSION: 1.0.0
- render_dashboard_cards / render_kpi_cards: st.metric cards with real growth
- booking_trend_fragment, category_fragment, top_events_fragment,
  funnel_fragment: analytics screen sections (rerun independently)
- events_fragment, reservations_fragment, testimonials_fragment,
  subscribers_fragment: records screen with the event and status edits
"""

import logging
from typing import Dict, Optional
import pandas as pd
import streamlit as st

from utils.config import config
from .charts import (
    build_booking_trend_chart,
    build_count_trend_chart,
    build_category_chart,
    build_funnel_chart,
    build_top_events_chart,
)
from .comparison import format_change
from .constants import (
    COLORS,
    BOOKING_STATUSES,
    SUBSCRIBER_STATUSES,
    TOP_EVENTS_LIMIT,
    PERCENT_FORMAT,
    NUMBER_FORMAT,
    BOOKING_DISPLAY_COLUMNS,
    EVENT_DISPLAY_COLUMNS,
    LOOKBACK_DAYS,
)
from .metrics import EventAnalyticsMetrics
from .models import OverviewMetrics, PeriodComparison
from .ranking import RANK_BY_OPTIONS
from .queries import EventQueries

logger = logging.getLogger(__name__)


def _money(value: float) -> str:
    symbol = config.get_app_setting('CURRENCY_SYMBOL', 'R')
    return f"{symbol} {value:,.0f}"


def _local_time(series: pd.Series, fmt: str) -> pd.Series:
    """Naive UTC timestamps -> display strings in the configured timezone."""
    tz = config.get_app_setting('TIMEZONE', 'UTC')
    return series.dt.tz_localize('UTC').dt.tz_convert(tz).dt.strftime(fmt)


def _growth_delta(change_pct: Optional[float], current: float = 0) -> Optional[str]:
    """Delta text for st.metric; 'New' when growing from an empty baseline."""
    return format_change(PeriodComparison(current=current, previous=0, change_pct=change_pct))


# =============================================================================
# KPI CARDS
# =============================================================================

def render_dashboard_cards(summary: Dict, days: int):
    """Console home cards: totals with growth vs the previous `days`."""
    cards = [
        ('📅 Total Events', 'total_events', "All events on the platform"),
        ('🎟️ Reservations', 'total_reservations', f"Reservations created in the last {LOOKBACK_DAYS} days"),
        ('👥 Users', 'total_users', "Registered user profiles"),
        ('📧 Subscribers', 'active_subscribers', "Active newsletter subscribers"),
    ]
    for col, (label, key, help_text) in zip(st.columns(4), cards):
        card = summary[key]
        growth = card['growth']
        with col:
            st.metric(
                label=label,
                value=NUMBER_FORMAT.format(card['value']),
                delta=format_change(growth, suffix=f" vs prev {days}d") if growth else None,
                help=help_text,
            )


def render_kpi_cards(overview: OverviewMetrics, days: int):
    """Analytics overview: revenue, bookings, users, conversion."""
    with st.container(border=True):
        st.markdown(f"**📊 LAST {days} DAYS**")
        col1, col2, col3, col4 = st.columns(4)

        with col1:
            st.metric(
                label="Revenue",
                value=_money(overview.total_revenue),
                delta=_growth_delta(overview.revenue_change, overview.total_revenue),
                help="Sum of reservation payment amounts created in the period"
            )
        with col2:
            st.metric(
                label="Bookings",
                value=NUMBER_FORMAT.format(overview.total_bookings),
                delta=_growth_delta(overview.booking_growth, overview.total_bookings),
                help="Reservations created in the period"
            )
        with col3:
            st.metric(
                label="New Users",
                value=NUMBER_FORMAT.format(overview.new_users),
                delta=_growth_delta(overview.user_growth, overview.new_users),
            )
        with col4:
            st.metric(
                label="Conversion",
                value=PERCENT_FORMAT.format(overview.conversion_rate),
                help="Confirmed / all reservations in the period"
            )

        col5, col6, col7, col8 = st.columns(4)
        with col5:
            st.metric(label="Avg Booking", value=_money(overview.average_booking_value))
        with col6:
            st.metric(
                label="Fill Rate",
                value=PERCENT_FORMAT.format(overview.overall_fill_rate * 100),
                help="Booked seats / capacity across all events"
            )
        with col7:
            st.metric(
                label="Upcoming Events",
                value=NUMBER_FORMAT.format(overview.upcoming_events),
                delta=f"{overview.past_events} past",
                delta_color="off",
            )
        with col8:
            st.metric(
                label="New Subscribers",
                value=NUMBER_FORMAT.format(overview.new_subscribers),
                delta=_growth_delta(overview.subscriber_growth, overview.new_subscribers),
            )


# =============================================================================
# ANALYTICS SECTIONS
# =============================================================================

@st.fragment
def booking_trend_fragment(metrics: EventAnalyticsMetrics, settings: Dict):
    st.subheader("📈 Trends")
    tab_bookings, tab_subscribers = st.tabs(["Bookings & Revenue", "Subscribers"])

    with tab_bookings:
        points = metrics.calculate_booking_trend(settings['buckets'], settings['granularity'])
        st.altair_chart(build_booking_trend_chart(points), width="stretch")

    with tab_subscribers:
        points = metrics.calculate_subscriber_trend(settings['buckets'], settings['granularity'])
        st.altair_chart(
            build_count_trend_chart(points, "New Subscribers", COLORS['subscribers']),
            width="stretch"
        )


@st.fragment
def category_fragment(metrics: EventAnalyticsMetrics, fragment_key: str = "ea_category"):
    st.subheader("🗂️ Categories")
    value = st.radio(
        "Measure", ['revenue', 'booked', 'capacity'],
        format_func=str.title, horizontal=True, key=f"{fragment_key}_value"
    )
    entries = metrics.calculate_category_breakdown(value)
    st.altair_chart(build_category_chart(entries, value.title()), width="stretch")


@st.fragment
def top_events_fragment(metrics: EventAnalyticsMetrics, days: int, fragment_key: str = "ea_top"):
    """Reservation counts use the selected time range; revenue and fill rate are lifetime."""
    st.subheader("🏆 Top Events")
    col_by, col_n = st.columns([3, 1])
    with col_by:
        by = st.selectbox(
            "Rank by", RANK_BY_OPTIONS,
            format_func=lambda v: v.replace('_', ' ').title(), key=f"{fragment_key}_by"
        )
    with col_n:
        n = st.number_input(
            "Show", min_value=1, max_value=50,
            value=config.get_app_setting('TOP_EVENTS_LIMIT', TOP_EVENTS_LIMIT),
            key=f"{fragment_key}_n"
        )

    entries = metrics.calculate_top_events(int(n), by=by, days=days)
    st.altair_chart(
        build_top_events_chart(entries, by.replace('_', ' ').title()), width="stretch"
    )


@st.fragment
def funnel_fragment(report: Dict):
    st.subheader("🔻 Funnels")
    col1, col2 = st.columns(2)
    with col1:
        funnel = report['conversion_funnel']
        st.altair_chart(build_funnel_chart(funnel, "Reservation Status"), width="stretch")
        if funnel.unmatched:
            st.caption(f"{funnel.unmatched} reservation(s) with another status")
    with col2:
        funnel = report['payment_funnel']
        st.altair_chart(build_funnel_chart(funnel, "Payment Status"), width="stretch")


# =============================================================================
# HOME TABLES
# =============================================================================

def render_upcoming_events(metrics: EventAnalyticsMetrics):
    st.markdown("**📅 Upcoming Events**")
    events = metrics.get_upcoming_events()
    if events.empty:
        st.info("No upcoming events")
        return
    table = events[list(EVENT_DISPLAY_COLUMNS)].rename(columns=EVENT_DISPLAY_COLUMNS)
    table['Date'] = table['Date'].dt.strftime('%Y-%m-%d')
    st.dataframe(table, hide_index=True, width="stretch")


def render_recent_bookings(metrics: EventAnalyticsMetrics):
    st.markdown("**🎟️ Recent Reservations**")
    bookings = metrics.get_recent_bookings()
    if bookings.empty:
        st.info("No reservations yet")
        return
    table = bookings[list(BOOKING_DISPLAY_COLUMNS)].rename(columns=BOOKING_DISPLAY_COLUMNS)
    table['Booked At'] = _local_time(table['Booked At'], '%Y-%m-%d %H:%M')
    st.dataframe(table, hide_index=True, width="stretch")


# =============================================================================
# RECORDS SCREEN
# =============================================================================

def _apply_edit(action, success_message: str, on_saved) -> bool:
    try:
        action()
    except Exception as e:
        st.error(f"❌ Update failed: {e}")
        return False
    st.success(success_message)
    on_saved()
    return True


@st.fragment
def events_fragment(
    metrics: EventAnalyticsMetrics,
    queries: EventQueries,
    on_saved,
    fragment_key: str = "ea_events"
):
    """Event list and an edit form for listing, seats and price."""
    st.subheader("📅 Events")
    events = metrics.events.sort_values('date', na_position='last', kind='stable')

    table = events[list(EVENT_DISPLAY_COLUMNS)].rename(columns=EVENT_DISPLAY_COLUMNS)
    table['Date'] = table['Date'].dt.strftime('%Y-%m-%d')
    st.dataframe(table, hide_index=True, width="stretch")
    if events.empty:
        return

    event_id = st.selectbox(
        "Event", events['id'].tolist(),
        format_func=lambda eid: events.loc[events['id'] == eid, 'title'].iloc[0] or str(eid),
        key=f"{fragment_key}_id"
    )
    event = events[events['id'] == event_id].iloc[0]

    with st.form(f"{fragment_key}_form_{event_id}"):
        col_title, col_category = st.columns([2, 1])
        with col_title:
            title = st.text_input("Title", value=event['title'])
        with col_category:
            category = st.text_input("Category", value=event['category'])

        col_date, col_location = st.columns([1, 2])
        with col_date:
            date = st.date_input(
                "Date", value=None if pd.isna(event['date']) else event['date'].date()
            )
        with col_location:
            location = st.text_input("Location", value=event['location'])

        col_cap, col_spots, col_price, col_free = st.columns(4)
        with col_cap:
            capacity = st.number_input("Capacity", min_value=0, value=int(event['capacity']), step=1)
        with col_spots:
            available_spots = st.number_input(
                "Spots left", min_value=0, value=int(event['available_spots']), step=1
            )
        with col_price:
            price = st.number_input("Price", min_value=0.0, value=float(event['unit_price']), step=10.0)
        with col_free:
            st.write("")
            is_free = st.checkbox("Free event", value=bool(event['is_free']))

        if st.form_submit_button("💾 Save", type="primary"):
            _apply_edit(
                lambda: queries.update_event(
                    event_id, title, category, date, location,
                    capacity, available_spots, price, is_free,
                ),
                f"Saved {title or 'event'}",
                on_saved,
            )


@st.fragment
def reservations_fragment(
    metrics: EventAnalyticsMetrics,
    queries: EventQueries,
    on_saved,
    fragment_key: str = "ea_reservations"
):
    """Reservation list with status filter and per-row status update."""
    st.subheader("🎟️ Reservations")
    bookings = metrics.get_recent_bookings(limit=len(metrics.bookings))

    status_filter = st.selectbox(
        "Status", ['all'] + BOOKING_STATUSES, key=f"{fragment_key}_filter"
    )
    if status_filter != 'all':
        bookings = bookings[bookings['status'] == status_filter]

    st.dataframe(
        bookings[['id'] + list(BOOKING_DISPLAY_COLUMNS)].rename(columns=BOOKING_DISPLAY_COLUMNS),
        hide_index=True, width="stretch"
    )
    if bookings.empty:
        return

    col_id, col_status, col_btn = st.columns([3, 2, 1])
    with col_id:
        reservation_id = st.selectbox(
            "Reservation", bookings['id'].tolist(),
            format_func=lambda rid: _booking_label(bookings, rid),
            key=f"{fragment_key}_id"
        )
    with col_status:
        new_status = st.selectbox("New status", BOOKING_STATUSES, key=f"{fragment_key}_status")
    with col_btn:
        st.write("")
        if st.button("Update", key=f"{fragment_key}_save", type="primary"):
            _apply_edit(
                lambda: queries.update_reservation_status(reservation_id, new_status),
                f"Reservation set to {new_status}",
                on_saved,
            )


def _booking_label(bookings: pd.DataFrame, reservation_id) -> str:
    row = bookings[bookings['id'] == reservation_id].iloc[0]
    return f"{row['user_name'] or row['user_email'] or reservation_id} ({row['status']})"


@st.fragment
def testimonials_fragment(
    metrics: EventAnalyticsMetrics,
    queries: EventQueries,
    on_saved,
    fragment_key: str = "ea_testimonials"
):
    """Moderation: approve pending testimonials, toggle featured."""
    st.subheader("💬 Testimonials")
    summary = metrics.calculate_testimonial_summary()

    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Total", summary['total'])
    col2.metric("Pending", summary['pending'])
    col3.metric("Featured", summary['featured'])
    col4.metric("Avg Rating", f"{summary['average_rating']:.1f} ★")

    st.altair_chart(
        build_funnel_chart(metrics.calculate_rating_distribution(), "Rating Distribution"),
        width="stretch"
    )

    testimonials = metrics.testimonials
    for row in testimonials.itertuples(index=False):
        with st.container(border=True):
            col_text, col_approve, col_feature = st.columns([4, 1, 1])
            with col_text:
                state = "✅ approved" if row.is_approved else "⏳ pending"
                star = " · ⭐ featured" if row.is_featured else ""
                st.markdown(f"**{row.name or 'Anonymous'}** · {row.rating}★ · {state}{star}")
            with col_approve:
                if not row.is_approved and st.button("Approve", key=f"{fragment_key}_ok_{row.id}"):
                    _apply_edit(
                        lambda: queries.approve_testimonial(row.id), "Testimonial approved", on_saved
                    )
            with col_feature:
                label = "Unfeature" if row.is_featured else "Feature"
                if st.button(label, key=f"{fragment_key}_ft_{row.id}"):
                    _apply_edit(
                        lambda: queries.set_testimonial_featured(row.id, not row.is_featured),
                        "Featured flag updated",
                        on_saved,
                    )


@st.fragment
def subscribers_fragment(
    metrics: EventAnalyticsMetrics,
    queries: EventQueries,
    on_saved,
    fragment_key: str = "ea_subscribers"
):
    st.subheader("📧 Newsletter Subscribers")
    funnel = metrics.calculate_subscriber_funnel()

    cols = st.columns(len(funnel.stages))
    for col, stage in zip(cols, funnel.stages):
        col.metric(stage.status.title(), stage.count, f"{stage.percentage:.1f}%", delta_color="off")

    subscribers = metrics.subscribers
    st.dataframe(
        subscribers[['id', 'email', 'name', 'status', 'subscribed_at']],
        hide_index=True, width="stretch"
    )
    if subscribers.empty:
        return

    col_id, col_status, col_btn = st.columns([3, 2, 1])
    with col_id:
        subscriber_id = st.selectbox(
            "Subscriber", subscribers['id'].tolist(),
            format_func=lambda sid: subscribers.loc[subscribers['id'] == sid, 'email'].iloc[0],
            key=f"{fragment_key}_id"
        )
    with col_status:
        new_status = st.selectbox("New status", SUBSCRIBER_STATUSES, key=f"{fragment_key}_status")
    with col_btn:
        st.write("")
        if st.button("Update", key=f"{fragment_key}_save", type="primary"):
            _apply_edit(
                lambda: queries.update_subscriber_status(subscriber_id, new_status),
                f"Subscriber set to {new_status}",
                on_saved,
            )
