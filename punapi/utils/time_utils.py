"""
Helpers for request timestamps and market-local time.
"""

import calendar
import re
from datetime import date, datetime, time
from typing import Optional, Tuple

import pytz

from ..exceptions import TimestampFormatError

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M"
DATE_FORMAT = "%Y-%m-%d"
END_OF_DAY = time(23, 59)
# strptime alone accepts single-digit fields such as "2024-3-5 4:1"
TIMESTAMP_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}( \d{2}:\d{2})?$")


def market_now(timezone: str = "Europe/Rome") -> datetime:
    """Current wall-clock time in the market timezone, as a naive datetime."""
    return datetime.now(pytz.timezone(timezone)).replace(tzinfo=None)


def parse_timestamp(value: Optional[str], now: datetime) -> datetime:
    """
    Parse the time query parameter.

    Accepts "YYYY-MM-DD HH:MM" or a bare "YYYY-MM-DD". An empty value means
    now. A bare date means now when it is today, otherwise 23:59 on that
    day, so past days count as fully elapsed.

    Raises:
        TimestampFormatError: for any other format
    """
    if value is None or not value.strip():
        return now
    value = value.strip()
    if not TIMESTAMP_PATTERN.match(value):
        raise TimestampFormatError(
            f"Time parameter format must be yyyy-mm-dd hh:mm or yyyy-mm-dd, got '{value}'")

    try:
        return datetime.strptime(value, TIMESTAMP_FORMAT)
    except ValueError:
        pass

    try:
        day = datetime.strptime(value, DATE_FORMAT).date()
    except ValueError:
        raise TimestampFormatError(
            f"Time parameter format must be yyyy-mm-dd hh:mm or yyyy-mm-dd, got '{value}'")

    if day == now.date():
        return now
    return datetime.combine(day, END_OF_DAY)


def month_range(day: date) -> Tuple[date, date]:
    """First and last day of the calendar month containing day."""
    last = calendar.monthrange(day.year, day.month)[1]
    return day.replace(day=1), day.replace(day=last)
