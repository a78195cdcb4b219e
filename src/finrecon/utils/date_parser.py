"""Date parsing utilities."""

from datetime import date, timedelta
from typing import Optional

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta


def parse_date(date_str: str) -> date:
    """Parse a date string into a date object.

    Supports absolute dates ("2024-01-15", "January 15, 2024", "01/15/2024")
    and the relative words "today", "yesterday" and "tomorrow".

    Args:
        date_str: Date string

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    text = date_str.strip().lower()
    today = date.today()

    relative_dates = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "tomorrow": today + timedelta(days=1),
    }
    if text in relative_dates:
        return relative_dates[text]

    try:
        return date_parser.parse(text).date()
    except (ValueError, TypeError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str.strip()}': {e}") from None


def get_window(period: str, today: Optional[date] = None) -> tuple[date, date]:
    """Get the full calendar window for a named period.

    Unlike a report range, a calendar window covers the whole period,
    including the days after today, so future occurrences are visible.

    Args:
        period: One of this-week, next-week, this-month, last-month,
            next-month, this-year, next-year
        today: Reference day (defaults to today)

    Returns:
        Tuple of (first_day, last_day), both inclusive

    Raises:
        ValueError: If period string is not recognized
    """
    period = period.strip().lower()
    today = today or date.today()

    if period in ("this-week", "next-week"):
        start = today - timedelta(days=today.weekday())
        if period == "next-week":
            start += timedelta(weeks=1)
        return start, start + timedelta(days=6)

    if period in ("this-month", "last-month", "next-month"):
        offset = {"this-month": 0, "last-month": -1, "next-month": 1}[period]
        start = today.replace(day=1) + relativedelta(months=offset)
        return start, start + relativedelta(day=31)

    if period in ("this-year", "next-year"):
        year = today.year + (1 if period == "next-year" else 0)
        return date(year, 1, 1), date(year, 12, 31)

    raise ValueError(
        f"Unknown period: '{period}'. Supported periods: this-week, next-week, "
        "this-month, last-month, next-month, this-year, next-year"
    )
