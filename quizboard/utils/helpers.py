"""
Helper Functions
Utility functions used across the application
"""
from datetime import datetime, timezone
import math
import pytz


def now_utc():
    """Get current UTC timestamp"""
    return datetime.now(timezone.utc)


def utc_to_local(utc_dt, tz_name='Asia/Kolkata'):
    """Convert UTC datetime to the configured display timezone"""
    if not utc_dt:
        return None
    if utc_dt.tzinfo is None:
        utc_dt = utc_dt.replace(tzinfo=pytz.utc)
    return utc_dt.astimezone(pytz.timezone(tz_name))


def round_half_up(value):
    """Round to nearest integer, .5 always rounds up"""
    return int(math.floor(value + 0.5))


def rank_suffix(rank):
    """Ordinal suffix for a rank: 1st, 2nd, 3rd, 11th..."""
    if 11 <= rank % 100 <= 13:
        return "th"
    return {1: "st", 2: "nd", 3: "rd"}.get(rank % 10, "th")
