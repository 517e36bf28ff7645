"""Datetime utilities with consistent timezone handling.

Statistics windows are computed on timezone-aware datetimes, in the timezone
of the "now" they are given. Naive values are treated as UTC.
"""

import calendar
from datetime import datetime, timedelta, timezone
from typing import Optional


def now_utc() -> datetime:
    """Return current datetime in UTC timezone."""
    return datetime.now(timezone.utc)


def now_local() -> datetime:
    """Return current datetime in the machine's local timezone."""
    return datetime.now().astimezone()


def ensure_aware(dt: Optional[datetime]) -> Optional[datetime]:
    """Ensure datetime is timezone-aware, assuming UTC if naive.

    Args:
        dt: Datetime to check/convert, or None

    Returns:
        Timezone-aware datetime, or None if input was None
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)

    return dt


def start_of_day(dt: datetime) -> datetime:
    """Return midnight of the day containing ``dt``."""
    return dt.replace(hour=0, minute=0, second=0, microsecond=0)


def end_of_day(dt: datetime) -> datetime:
    """Return the last representable instant of the day containing ``dt``."""
    return dt.replace(hour=23, minute=59, second=59, microsecond=999999)


def sunday_first_weekday(dt: datetime) -> int:
    """Day of week with Sunday as 0, Saturday as 6."""
    return (dt.weekday() + 1) % 7


def shift_months(dt: datetime, months: int) -> datetime:
    """Move ``dt`` by a number of calendar months.

    The day of month is clamped to the length of the target month, so
    March 31st minus one month is February 28th (or 29th).
    """
    month_index = dt.month - 1 + months
    year = dt.year + month_index // 12
    month = month_index % 12 + 1
    day = min(dt.day, calendar.monthrange(year, month)[1])
    return dt.replace(year=year, month=month, day=day)


def last_day_of_previous_month(dt: datetime) -> datetime:
    """Return the final instant of the month before the one containing ``dt``."""
    first = start_of_day(dt.replace(day=1))
    return end_of_day(first - timedelta(days=1))


def to_iso_date(dt: datetime) -> str:
    """Format the calendar date of ``dt`` as YYYY-MM-DD."""
    return dt.date().isoformat()
