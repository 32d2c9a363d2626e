# utils/event_analytics/charts.py
"""
Altair Charts for Event Analytics

VERSION: 1.0.0
Charts:
- empty_chart: Placeholder message when there is nothing to plot
- build_booking_trend_chart: Bookings bars with revenue line (dual axis)
- build_count_trend_chart: Single-series count line (subscribers, events)
- build_category_chart: Horizontal bars per category with % share
- build_funnel_chart: Status counts in declared order
- build_top_events_chart: Ranked horizontal bars
"""

import logging
from typing import List
import pandas as pd
import altair as alt

from .constants import COLORS, STATUS_COLORS, CHART_WIDTH, CHART_HEIGHT
from .models import (
    CategoryBreakdownEntry,
    ConversionFunnel,
    TimeSeriesPoint,
    TopEventEntry,
    entries_to_frame,
)

logger = logging.getLogger(__name__)


def empty_chart(message: str = "No data available") -> alt.Chart:
    """Return an empty chart with a message."""
    return alt.Chart(pd.DataFrame({'text': [message]})).mark_text(
        fontSize=14, color='#999999'
    ).encode(
        text='text:N'
    ).properties(width=CHART_WIDTH, height=100)


def _trend_frame(points: List[TimeSeriesPoint]) -> pd.DataFrame:
    df = entries_to_frame(points)
    if df.empty:
        return df
    # x axis follows bucket order, not label order
    df['order'] = range(len(df))
    return df


# =============================================================================
# TRENDS
# =============================================================================

def build_booking_trend_chart(points: List[TimeSeriesPoint]) -> alt.Chart:
    """Bookings per bucket (bars) with revenue per bucket (line, right axis)."""
    df = _trend_frame(points)
    if df.empty:
        return empty_chart("No bookings in this period")
    if 'revenue' not in df.columns:
        df['revenue'] = 0.0
    if df['count'].sum() == 0 and df['revenue'].sum() == 0:
        return empty_chart("No bookings in this period")

    x = alt.X('label:N', sort=alt.SortField('order'), title=None, axis=alt.Axis(labelAngle=-45))

    bars = alt.Chart(df).mark_bar(
        color=COLORS['bookings'], cornerRadiusTopLeft=2, cornerRadiusTopRight=2
    ).encode(
        x=x,
        y=alt.Y('count:Q', title='Bookings'),
        tooltip=[
            alt.Tooltip('label:N', title='Period'),
            alt.Tooltip('count:Q', title='Bookings'),
            alt.Tooltip('revenue:Q', title='Revenue', format=',.0f'),
        ]
    )

    line = alt.Chart(df).mark_line(
        color=COLORS['revenue'],
        strokeWidth=2,
        point=alt.OverlayMarkDef(color=COLORS['revenue'], size=30)
    ).encode(
        x=x,
        y=alt.Y('revenue:Q', title='Revenue (R)', axis=alt.Axis(format='~s')),
    )

    return alt.layer(bars, line).resolve_scale(y='independent').properties(
        width=CHART_WIDTH, height=CHART_HEIGHT, title="Bookings & Revenue"
    )


def build_count_trend_chart(
    points: List[TimeSeriesPoint],
    title: str,
    color: str = COLORS['primary']
) -> alt.Chart:
    df = _trend_frame(points)
    if df.empty or df['count'].sum() == 0:
        return empty_chart(f"No data for {title.lower()}")

    return alt.Chart(df).mark_area(
        line={'color': color}, color=color, opacity=0.3
    ).encode(
        x=alt.X('label:N', sort=alt.SortField('order'), title=None, axis=alt.Axis(labelAngle=-45)),
        y=alt.Y('count:Q', title='Count'),
        tooltip=[
            alt.Tooltip('label:N', title='Period'),
            alt.Tooltip('count:Q', title='Count'),
        ]
    ).properties(width=CHART_WIDTH, height=CHART_HEIGHT, title=title)


# =============================================================================
# BREAKDOWNS
# =============================================================================

def build_category_chart(
    entries: List[CategoryBreakdownEntry],
    value_title: str = 'Revenue'
) -> alt.Chart:
    df = entries_to_frame(entries)
    if df.empty:
        return empty_chart("No events to group")

    df['key'] = df['key'].astype(str)
    base = alt.Chart(df).encode(
        y=alt.Y('key:N', sort=None, title='Category'),
        x=alt.X('total:Q', title=value_title),
    )
    bars = base.mark_bar(color=COLORS['primary']).encode(
        tooltip=[
            alt.Tooltip('key:N', title='Category'),
            alt.Tooltip('total:Q', title=value_title, format=',.0f'),
            alt.Tooltip('count:Q', title='Events'),
            alt.Tooltip('percentage:Q', title='Share %', format='.1f'),
        ]
    )
    labels = base.mark_text(align='left', dx=4, fontSize=10, color=COLORS['text_dark']).encode(
        text=alt.Text('percentage:Q', format='.1f')
    )
    return (bars + labels).properties(
        width=CHART_WIDTH, height=max(120, 40 * len(df)), title=f"{value_title} by Category (%)"
    )


def build_funnel_chart(funnel: ConversionFunnel, title: str) -> alt.Chart:
    """Stages in declared order; colored by status where a color is known."""
    if funnel.total == 0:
        return empty_chart(f"No data for {title.lower()}")

    df = funnel.to_frame()
    df['status'] = df['status'].astype(str)
    df['color'] = df['status'].map(STATUS_COLORS).fillna(COLORS['secondary'])
    order = df['status'].tolist()

    return alt.Chart(df).mark_bar().encode(
        x=alt.X('status:N', sort=order, title=None, axis=alt.Axis(labelAngle=0)),
        y=alt.Y('count:Q', title='Count'),
        color=alt.Color('color:N', scale=None),
        tooltip=[
            alt.Tooltip('status:N', title='Status'),
            alt.Tooltip('count:Q', title='Count'),
            alt.Tooltip('percentage:Q', title='Share %', format='.1f'),
        ]
    ).properties(width=CHART_WIDTH, height=CHART_HEIGHT, title=title)


def build_top_events_chart(entries: List[TopEventEntry], value_title: str = 'Revenue') -> alt.Chart:
    df = entries_to_frame(entries)
    if df.empty:
        return empty_chart("No events to rank")

    df['label'] = df['rank'].astype(str) + '. ' + df['title'].astype(str)
    return alt.Chart(df).mark_bar(color=COLORS['revenue']).encode(
        y=alt.Y('label:N', sort=alt.SortField('rank'), title=None),
        x=alt.X('value:Q', title=value_title),
        tooltip=[
            alt.Tooltip('title:N', title='Event'),
            alt.Tooltip('category:N', title='Category'),
            alt.Tooltip('value:Q', title=value_title, format=',.2f'),
            alt.Tooltip('booked:Q', title='Booked'),
            alt.Tooltip('capacity:Q', title='Capacity'),
        ]
    ).properties(width=CHART_WIDTH, height=max(120, 40 * len(df)), title=f"Top Events by {value_title}")
