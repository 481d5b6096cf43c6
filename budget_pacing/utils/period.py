"""
Period math for budget pacing.

Resolves how many days a budget period has and how far into it a reference
date is, for either the calendar month containing that date or an explicit
inclusive start/end range. Nothing here raises on odd inputs; values are
clamped instead.
"""

import calendar
from datetime import date, datetime
from typing import NamedTuple, Optional, Union


class Period(NamedTuple):
    """Length of a budget period and the elapsed day count."""
    days_in_period: int
    day_of_period: int

    @property
    def days_remaining(self) -> int:
        return max(self.days_in_period - self.day_of_period, 0)


def days_in_month(d: date) -> int:
    """Last calendar day number of the month containing d."""
    return calendar.monthrange(d.year, d.month)[1]


def day_of_month(d: date) -> int:
    return d.day


def month_start(d: date) -> date:
    """First day of the month containing d."""
    return d.replace(day=1)


def days_between(a: date, b: date) -> int:
    """Inclusive number of calendar days between two dates."""
    return abs((b - a).days) + 1


def resolve_period(
    today: date,
    start: Optional[date] = None,
    end: Optional[date] = None
) -> Period:
    """
    Resolve the pacing period for a reference date.

    Args:
        today: Reference date
        start: Optional explicit period start (inclusive)
        end: Optional explicit period end (inclusive)

    Returns:
        Period with days_in_period >= 1 and
        0 <= day_of_period <= days_in_period
    """
    if start is None or end is None:
        return Period(days_in_month(today), day_of_month(today))

    total = days_between(start, end)

    if today < start:
        elapsed = 0
    elif today > end:
        elapsed = total
    else:
        elapsed = days_between(start, today)

    return Period(total, min(max(elapsed, 0), total))


def parse_iso_date(value: Union[str, date, datetime, None]) -> Optional[date]:
    """
    Coerce an ISO string, date or datetime into a date.

    Returns None for None or empty strings.

    Raises:
        ValueError: If a string is not an ISO date
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def format_iso_date(d: date) -> str:
    """Format a date as YYYY-MM-DD."""
    return d.strftime("%Y-%m-%d")
