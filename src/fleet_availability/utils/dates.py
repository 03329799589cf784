# src/fleet_availability/utils/dates.py
"""
Wire-format date helpers.

Records keep dates as DD-MM-YYYY and times as HH:MM (24h, local, no offset).
Everything is parsed here, at the boundary; comparisons happen on
date/datetime values only.
"""

from __future__ import annotations

import re
from datetime import date, datetime, time

from fleet_availability.errors import InvalidInputError

DATE_FORMAT = "%d-%m-%Y"
TIME_FORMAT = "%H:%M"

_DATE_RE = re.compile(r"^\d{2}-\d{2}-\d{4}$")
_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_TIME_RE = re.compile(r"^([01]?[0-9]|2[0-3]):([0-5][0-9])$")


def parse_date(value: str) -> date:
    """Parse DD-MM-YYYY into a date. Rejects days that do not exist (31-02-2024)."""
    if not isinstance(value, str) or not _DATE_RE.match(value.strip()):
        raise InvalidInputError(f"Invalid date (expected DD-MM-YYYY): {value!r}")
    try:
        return datetime.strptime(value.strip(), DATE_FORMAT).date()
    except ValueError as e:
        raise InvalidInputError(f"Invalid date: {value!r}") from e


def parse_time(value: str) -> time:
    """Parse H:MM or HH:MM (00:00 - 23:59)."""
    if not isinstance(value, str):
        raise InvalidInputError(f"Invalid time (expected HH:MM): {value!r}")
    m = _TIME_RE.match(value.strip())
    if not m:
        raise InvalidInputError(f"Invalid time (expected HH:MM): {value!r}")
    return time(int(m.group(1)), int(m.group(2)))


def combine(date_str: str, time_str: str) -> datetime:
    return datetime.combine(parse_date(date_str), parse_time(time_str))


def coerce_date(value: str | date | datetime) -> date:
    """
    Accepts DD-MM-YYYY, YYYY-MM-DD (CLI convenience), date or datetime.
    A datetime loses its time-of-day.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and _ISO_DATE_RE.match(value.strip()):
        try:
            return datetime.strptime(value.strip(), "%Y-%m-%d").date()
        except ValueError as e:
            raise InvalidInputError(f"Invalid date: {value!r}") from e
    return parse_date(value)


def format_date(d: date | datetime) -> str:
    return d.strftime(DATE_FORMAT)


def format_time(dt: datetime | time) -> str:
    return dt.strftime(TIME_FORMAT)


def is_blank(value) -> bool:
    """None, empty string, or a pandas/float NaN read from a blank cell."""
    if value is None:
        return True
    if isinstance(value, float) and value != value:
        return True
    return isinstance(value, str) and not value.strip()
