# utils/event_analytics/constants.py
"""
Constants for the Event Analytics Module

VERSION: 1.0.0
"""

# =============================================================================
# ENTITY KINDS
# =============================================================================
KIND_EVENT = 'event'
KIND_BOOKING = 'booking'
KIND_SUBSCRIBER = 'subscriber'
KIND_TESTIMONIAL = 'testimonial'
KIND_PROFILE = 'profile'

ENTITY_KINDS = [KIND_EVENT, KIND_BOOKING, KIND_SUBSCRIBER, KIND_TESTIMONIAL, KIND_PROFILE]

# =============================================================================
# DEFAULTS & ENUMERATIONS
# =============================================================================
DEFAULT_CATEGORY = 'General'
UNKNOWN_STATUS = 'unknown'
DEFAULT_RATING = 5
RATING_SCALE = [5, 4, 3, 2, 1]
# Upper bound for seat counts (Postgres integer column)
MAX_COUNT = 2**31 - 1

# Funnel order is conceptual, not by magnitude
BOOKING_STATUSES = ['confirmed', 'pending', 'cancelled']
PAYMENT_STATUSES = ['completed', 'pending', 'failed']
SUBSCRIBER_STATUSES = ['active', 'pending', 'unsubscribed']

# =============================================================================
# CANONICAL COLUMNS (per entity kind, in output order)
# =============================================================================
EVENT_COLUMNS = [
    'id', 'title', 'category', 'date', 'location', 'start_time',
    'capacity', 'available_spots', 'unit_price', 'is_free',
    'booked', 'revenue', 'fill_rate',
]
BOOKING_COLUMNS = [
    'id', 'event_id', 'user_name', 'user_email',
    'status', 'payment_status', 'payment_amount', 'created_at',
]
SUBSCRIBER_COLUMNS = ['id', 'email', 'name', 'status', 'subscribed_at']
TESTIMONIAL_COLUMNS = ['id', 'name', 'rating', 'is_approved', 'is_featured', 'created_at']
PROFILE_COLUMNS = ['id', 'full_name', 'is_admin', 'created_at']

# =============================================================================
# TIME BUCKETS
# =============================================================================
GRANULARITY_DAYS = {
    'day': 1,
    'week': 7,
    'month': 30,  # fixed width keeps buckets equal-sized
}

BUCKET_LABEL_FORMATS = {
    'day': '%b %d',
    'week': '%b %d',
    'month': '%b %Y',
}

# Analytics screen time ranges: comparison window + trend buckets
TIME_RANGES = {
    '7days': {'label': '7 Days', 'days': 7, 'granularity': 'day', 'buckets': 7},
    '30days': {'label': '30 Days', 'days': 30, 'granularity': 'day', 'buckets': 30},
    '90days': {'label': '90 Days', 'days': 90, 'granularity': 'week', 'buckets': 13},
    '12months': {'label': '12 Months', 'days': 360, 'granularity': 'month', 'buckets': 12},
}
DEFAULT_TIME_RANGE = '30days'

TOP_EVENTS_LIMIT = 5
UPCOMING_EVENTS_LIMIT = 5
RECENT_BOOKINGS_LIMIT = 5
DASHBOARD_GROWTH_DAYS = 30

# =============================================================================
# DATA LOADING SETTINGS
# =============================================================================
LOOKBACK_DAYS = 730

# =============================================================================
# SESSION STATE KEYS (prefixed _ea_ to avoid collisions between pages)
# =============================================================================
CACHE_KEY_SNAPSHOT = '_ea_snapshot_cache'
CACHE_KEY_TIME_RANGE = '_ea_time_range'

# =============================================================================
# COLOR SCHEME
# =============================================================================
COLORS = {
    "primary": "#1f77b4",
    "secondary": "#aec7e8",
    "neutral": "#d3d3d3",
    "revenue": "#2ca02c",
    "bookings": "#1f77b4",
    "subscribers": "#17becf",
    "fill_rate": "#800080",
    "growth_positive": "#28a745",
    "growth_negative": "#dc3545",
    "text_dark": "#333333",
    "text_light": "#666666",
    "grid": "#e0e0e0",
}

STATUS_COLORS = {
    'confirmed': '#28a745',
    'completed': '#28a745',
    'active': '#28a745',
    'pending': '#ffc107',
    'cancelled': '#dc3545',
    'failed': '#dc3545',
    'unsubscribed': '#dc3545',
}

# =============================================================================
# CHART DIMENSIONS
# =============================================================================
CHART_WIDTH = 'container'
CHART_HEIGHT = 320

# =============================================================================
# DEBUG SETTINGS
# Use environment variables to enable: EA_DEBUG_TIMING=true / EA_DEBUG_QUERY=true
# =============================================================================
import os as _os
DEBUG_TIMING = _os.getenv('EA_DEBUG_TIMING', 'false').lower() == 'true'
DEBUG_QUERY_TIMING = _os.getenv('EA_DEBUG_QUERY', 'false').lower() == 'true'

# =============================================================================
# METRIC DISPLAY
# =============================================================================
PERCENT_FORMAT = "{:.1f}%"
NUMBER_FORMAT = "{:,.0f}"

BOOKING_DISPLAY_COLUMNS = {
    'created_at': 'Booked At',
    'user_name': 'Name',
    'user_email': 'Email',
    'status': 'Status',
    'payment_status': 'Payment',
    'payment_amount': 'Amount',
}

EVENT_DISPLAY_COLUMNS = {
    'date': 'Date',
    'title': 'Event',
    'category': 'Category',
    'location': 'Location',
    'booked': 'Booked',
    'capacity': 'Capacity',
    'available_spots': 'Spots Left',
}
