"""
Calendar-day helpers.

Dates are stored as YYYY-MM-DD text. Lookups use the half-open range
[day, next day) so rows whose stored value carries a time component
still match their calendar day.
"""

from datetime import date, datetime, timedelta
from typing import Tuple, Union

from .exceptions import InvalidArgument

DateLike = Union[str, date, datetime]


def parse_day(value: DateLike, field: str = "date") -> date:
    """
    Normalize a date, datetime or date string to its calendar day.

    Accepts YYYY-MM-DD and ISO 8601 datetimes (a trailing 'Z' is allowed).

    Raises:
        InvalidArgument: If the value is empty or not a valid calendar date
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        raise InvalidArgument(f"{field} is required", field=field)

    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        if len(text) == 10:
            return datetime.strptime(text, "%Y-%m-%d").date()
        return datetime.fromisoformat(text).date()
    except ValueError:
        raise InvalidArgument(
            f"Invalid {field} '{value}'. Use YYYY-MM-DD", field=field
        )


def format_day(day: date) -> str:
    """Format a date as YYYY-MM-DD."""
    return day.strftime("%Y-%m-%d")


def day_range(value: DateLike, field: str = "date") -> Tuple[str, str]:
    """Return the [start, end) bounds of a calendar day as stored strings."""
    day = parse_day(value, field)
    return format_day(day), format_day(day + timedelta(days=1))


def now_iso() -> str:
    return datetime.now().isoformat()
