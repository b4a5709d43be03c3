"""Date parsing and formatting utilities."""

from datetime import date, timedelta
from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

DISPLAY_FORMAT = "%d/%m/%Y"

PERIODS = (
    "this-month",
    "this-year",
    "this-week",
    "last-month",
    "last-year",
    "last-week",
)


def _relative_start(word: str, period: str, today: date) -> date | None:
    """First day of a relative period ("last month", "next week", ...)."""
    offset = {"last": -1, "this": 0, "next": 1}.get(word)
    if offset is None:
        return None
    if period == "month":
        return today.replace(day=1) + relativedelta(months=offset)
    if period == "year":
        return today.replace(month=1, day=1) + relativedelta(years=offset)
    if period == "week":
        return today - timedelta(days=today.weekday()) + timedelta(weeks=offset)
    return None


def parse_date(date_str: str) -> date:
    """Parse a date string into a date object.

    Supports:
    - ISO dates: "2024-01-15"
    - Day-first dates: "15/01/2024", "15-01-2024", "15 Jan 2024"
    - Relative dates: "today", "yesterday", "tomorrow", "last month",
      "this year", "next week"

    Args:
        date_str: Date string

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    date_str = date_str.strip().lower()
    today = date.today()

    relative_dates = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "tomorrow": today + timedelta(days=1),
    }
    if date_str in relative_dates:
        return relative_dates[date_str]

    parts = date_str.split()
    if len(parts) == 2:
        start = _relative_start(parts[0], parts[1], today)
        if start is not None:
            return start

    try:
        return date.fromisoformat(date_str)
    except ValueError:
        pass

    try:
        return date_parser.parse(date_str, dayfirst=True).date()
    except (ValueError, TypeError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def format_date(value: date) -> str:
    """Format a date as DD/MM/YYYY."""
    return value.strftime(DISPLAY_FORMAT)


def get_date_range(period: str) -> tuple[date, date]:
    """Get start and end dates for a specified period.

    "this-*" periods end today; "last-*" periods cover the whole previous
    month, year or Monday-to-Sunday week.

    Raises:
        ValueError: If period string is not recognized
    """
    period = period.strip().lower()
    today = date.today()

    if period not in PERIODS:
        raise ValueError(
            f"Unknown period: '{period}'. Supported periods: {', '.join(PERIODS)}"
        )

    word, unit = period.split("-")
    start = _relative_start(word, unit, today)
    if word == "this":
        return start, today

    next_start = _relative_start("this", unit, today)
    return start, next_start - timedelta(days=1)
