"""Calendar arithmetic for schedule generation"""

import calendar
from datetime import date


def months_between(start: date, end: date) -> int:
    """
    Whole calendar months from start to end.

    Day-of-month is ignored: Jan 31 -> Feb 1 counts as one month and
    Jan 1 -> Jan 31 counts as zero.
    """
    return (end.year - start.year) * 12 + (end.month - start.month)


def add_months(from_date: date, months: int) -> date:
    """Add months keeping the day, clamped to the last day of the target month (Jan 31 + 1 -> Feb 28/29)"""
    month_index = from_date.month - 1 + months
    year = from_date.year + month_index // 12
    month = month_index % 12 + 1
    day = min(from_date.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def set_day_of_month(from_date: date, day: int) -> date:
    """Move a date to the given day of its own month, clamped to the month's last day"""
    last_day = calendar.monthrange(from_date.year, from_date.month)[1]
    return from_date.replace(day=min(day, last_day))
