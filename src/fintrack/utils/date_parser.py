"""Date parsing utilities."""

from datetime import date, datetime, time, timedelta
import re
from typing import Optional

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

PERIODS = ("this-month", "last-month", "this-year", "last-year")

_DAYS_AGO_RE = re.compile(r"^(\d+)\s+days?\s+ago$")


def parse_date(date_str: str, today: Optional[date] = None) -> date:
    """Parse a date string into a date object.

    Accepts ISO and other absolute formats understood by dateutil, plus
    "today", "yesterday", "tomorrow" and "N days ago".

    Raises:
        ValueError: If date string cannot be parsed
    """
    today = today or date.today()
    text = date_str.strip().lower()

    relative = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "tomorrow": today + timedelta(days=1),
    }
    if text in relative:
        return relative[text]

    match = _DAYS_AGO_RE.match(text)
    if match:
        return today - timedelta(days=int(match.group(1)))

    try:
        return date_parser.parse(date_str, default=datetime.combine(today, time())).date()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def period_range(period: str, today: Optional[date] = None) -> tuple[date, date]:
    """Return the inclusive (start, end) dates of a named period.

    Args:
        period: One of ``PERIODS``
        today: Reference day, defaults to the current date
    """
    today = today or date.today()
    if period == "this-month":
        start = today.replace(day=1)
        return start, start + relativedelta(months=1) - timedelta(days=1)
    if period == "last-month":
        start = today.replace(day=1) - relativedelta(months=1)
        return start, today.replace(day=1) - timedelta(days=1)
    if period == "this-year":
        return today.replace(month=1, day=1), today.replace(month=12, day=31)
    if period == "last-year":
        year = today.year - 1
        return date(year, 1, 1), date(year, 12, 31)
    raise ValueError(f"Unknown period '{period}'. Expected one of: {', '.join(PERIODS)}")
