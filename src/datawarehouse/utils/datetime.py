"""DateTime utilities for run timestamps and "today" comparisons.

All wall-clock reads go through these helpers so a run uses one time zone
and tests can pin the clock.
"""

from datetime import date, datetime
from typing import Optional

import pytz


def get_current_timestamp(time_zone: Optional[str] = None) -> datetime:
    """Get the current timestamp.

    Args:
        time_zone: pytz time zone name. Defaults to UTC.

    Returns:
        Naive datetime in the requested zone, truncated to microseconds
        (storage layers keep naive timestamps)
    """
    tz = pytz.timezone(time_zone or "UTC")
    return datetime.now(tz).replace(tzinfo=None)


def get_current_date(time_zone: Optional[str] = None) -> date:
    """Get today's calendar date in the given time zone."""
    return get_current_timestamp(time_zone).date()
