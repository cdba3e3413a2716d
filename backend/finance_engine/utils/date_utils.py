# backend/finance_engine/utils/date_utils.py
"""
Date utility functions for the finance engine.

Shared calendar helpers used by amortization schedules, cash flow
projections and the static rate provider. Centralizing these keeps
month arithmetic consistent everywhere.

Usage:
    from finance_engine.utils.date_utils import add_months

    next_payment = add_months(first_payment, 1)
"""

import calendar
from datetime import date, timedelta


def get_business_days(start_date: date, end_date: date) -> list[date]:
    """
    Get list of business days (weekdays) in a date range.

    Business days are Monday through Friday (weekday() < 5).
    This is a simplified check that doesn't account for market holidays.

    Example:
        >>> get_business_days(date(2024, 1, 1), date(2024, 1, 7))
        [date(2024, 1, 1), date(2024, 1, 2), date(2024, 1, 3),
         date(2024, 1, 4), date(2024, 1, 5)]  # Mon-Fri
    """
    days = []
    current = start_date

    while current <= end_date:
        if current.weekday() < 5:  # Monday = 0, Friday = 4
            days.append(current)
        current += timedelta(days=1)

    return days


def add_months(d: date, months: int) -> date:
    """
    Shift a date by whole calendar months.

    The day is clamped to the length of the target month, so
    Jan 31 + 1 month is Feb 28 (or Feb 29 in a leap year).

    Example:
        >>> add_months(date(2024, 1, 31), 1)
        date(2024, 2, 29)
    """
    month_index = d.month - 1 + months
    year = d.year + month_index // 12
    month = month_index % 12 + 1
    day = min(d.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def month_start(d: date) -> date:
    return d.replace(day=1)


def month_end(d: date) -> date:
    return d.replace(day=calendar.monthrange(d.year, d.month)[1])
