"""Date parsing utilities for statement and listing filters."""

from datetime import date, datetime, time, timedelta
from typing import Optional

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

WEEKDAYS = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]


def _period_start(period: str, today: date) -> Optional[date]:
    """First day of the current 'week', 'month' or 'year'."""
    if period == "week":
        return today - timedelta(days=today.weekday())
    if period == "month":
        return today.replace(day=1)
    if period == "year":
        return today.replace(month=1, day=1)
    return None


def _shift(period: str, start: date, step: int) -> date:
    if period == "week":
        return start + timedelta(weeks=step)
    if period == "month":
        return start + relativedelta(months=step)
    return start + relativedelta(years=step)


def parse_date(date_str: str, today: Optional[date] = None) -> date:
    """Parse a date string into a date object.

    Supports absolute dates ("2024-01-15", "January 15, 2024") and relative
    ones: "today", "yesterday", "tomorrow", "N days ago", and
    "last/this/next week|month|year" (the first day of that period), or
    "last monday" and the like.

    Args:
        date_str: Date string
        today: Reference day, defaults to the current date

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    text = date_str.strip().lower()
    today = today or date.today()

    named = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "tomorrow": today + timedelta(days=1),
    }
    if text in named:
        return named[text]

    words = text.split()
    if len(words) == 3 and words[1:] == ["days", "ago"] and words[0].isdigit():
        return today - timedelta(days=int(words[0]))

    if len(words) == 2 and words[0] in ("last", "this", "next"):
        step = {"last": -1, "this": 0, "next": 1}[words[0]]
        start = _period_start(words[1], today)
        if start is not None:
            return _shift(words[1], start, step)
        if words[0] == "last" and words[1] in WEEKDAYS:
            days_ago = (today.weekday() - WEEKDAYS.index(words[1])) % 7 or 7
            return today - timedelta(days=days_ago)

    try:
        return date_parser.parse(text).date()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def get_date_range(period: str, today: Optional[date] = None) -> tuple[date, date]:
    """Get inclusive start and end dates for a named period.

    Args:
        period: One of this-week, this-month, this-year, last-week,
            last-month, last-year

    Returns:
        Tuple of (start_date, end_date)

    Raises:
        ValueError: If period string is not recognized
    """
    today = today or date.today()
    which, _, unit = period.strip().lower().partition("-")
    start = _period_start(unit, today)
    if start is None or which not in ("this", "last"):
        raise ValueError(
            f"Unknown period: '{period}'. Supported periods: this-week, this-month, "
            "this-year, last-week, last-month, last-year"
        )
    if which == "this":
        return start, today
    previous = _shift(unit, start, -1)
    return previous, start - timedelta(days=1)


def to_datetime_bounds(
    start_date: Optional[date], end_date: Optional[date]
) -> tuple[Optional[datetime], Optional[datetime]]:
    """Turn an inclusive date range into a [start, end) timestamp range."""
    start = datetime.combine(start_date, time.min) if start_date is not None else None
    end = datetime.combine(end_date + timedelta(days=1), time.min) if end_date is not None else None
    return start, end
