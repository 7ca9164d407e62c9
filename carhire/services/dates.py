"""Calendar-date parsing for booking intervals."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any

from dateutil.parser import isoparse


def parse_calendar_date(value: Any) -> date:
    """Return the calendar date of an ISO-8601 date or datetime.

    Time of day is discarded. Raises ValueError for anything that is not a
    date, a datetime or an ISO-8601 string.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise ValueError(f"not a date: {value!r}")
    return isoparse(value.strip()).date()
