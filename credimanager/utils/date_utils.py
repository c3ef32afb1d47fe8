"""Date manipulation utilities"""

import calendar
from datetime import date


def add_months(from_date: date, months: int) -> date:
    """
    Advance a date by whole calendar months.

    The day of month is clamped to the last valid day of the target month
    (Jan 31 + 1 month -> Feb 28/29), so the same inputs always give the same date.
    """
    year = from_date.year + (from_date.month - 1 + months) // 12
    month = (from_date.month - 1 + months) % 12 + 1
    day = min(from_date.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def days_between(start: date, end: date) -> int:
    """Whole days from start to end (negative when end is earlier)"""
    return (end - start).days
