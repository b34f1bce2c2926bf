"""Local-calendar helpers shared by the trend builder and the summary aggregator.

All datetimes handled here are naive and expressed in system local time, which is
the calendar the dashboard buckets alerts by.
"""

from __future__ import annotations

import calendar
import math
import re
from datetime import date, datetime
from typing import Any, Optional, Tuple

MONTH_NAMES = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)

_EPOCH_RE = re.compile(r"^-?\d+(\.\d+)?$")
_MONTH_KEY_RE = re.compile(r"^(\d{4})-(\d{2})$")


def _from_epoch_ms(value: float) -> Optional[datetime]:
    if not math.isfinite(value):
        return None
    try:
        return datetime.fromtimestamp(value / 1000.0)
    except (OverflowError, OSError, ValueError):
        return None


# PUBLIC_INTERFACE
def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse an alert timestamp into a naive local datetime.

    Accepts ISO-8601 strings (with or without offset, 'Z' included) and epoch
    milliseconds given as a number or numeric string. Offset-aware values are
    converted to local time; naive ISO values are taken as local already.
    Returns None when the value cannot be parsed.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return _from_epoch_ms(float(value))

    text = str(value).strip()
    if not text:
        return None
    if _EPOCH_RE.match(text):
        return _from_epoch_ms(float(text))
    if text[-1] in ("Z", "z"):
        text = text[:-1] + "+00:00"

    try:
        dt = datetime.fromisoformat(text)
    except ValueError:
        return None

    if dt.tzinfo is not None:
        dt = dt.astimezone().replace(tzinfo=None)
    return dt


# PUBLIC_INTERFACE
def epoch_ms(dt: datetime) -> int:
    """Epoch milliseconds for a naive local datetime."""
    return int(dt.timestamp() * 1000)


def start_of_day(dt: datetime) -> datetime:
    return datetime(dt.year, dt.month, dt.day)


def start_of_hour(dt: datetime) -> datetime:
    return dt.replace(minute=0, second=0, microsecond=0)


# PUBLIC_INTERFACE
def add_months(year: int, month: int, delta: int) -> Tuple[int, int]:
    """Shift a (year, month) pair by delta months; month is 1-based."""
    y, m0 = divmod(year * 12 + (month - 1) + delta, 12)
    return y, m0 + 1


def month_start(year: int, month: int, delta: int = 0) -> datetime:
    y, m = add_months(year, month, delta)
    return datetime(y, m, 1)


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


# PUBLIC_INTERFACE
def month_key(dt: date) -> str:
    """Format a month key as YYYY-MM."""
    return f"{dt.year:04d}-{dt.month:02d}"


# PUBLIC_INTERFACE
def parse_month_key(value: str) -> Tuple[int, int]:
    """
    Parse a YYYY-MM month key into (year, month).

    Raises ValueError for anything that is not a four-digit year and a
    two-digit month between 01 and 12.
    """
    m = _MONTH_KEY_RE.match((value or "").strip())
    if not m:
        raise ValueError(f"invalid month key {value!r}; expected YYYY-MM")
    year, month = int(m.group(1)), int(m.group(2))
    if not 1 <= month <= 12 or year < 1:
        raise ValueError(f"invalid month key {value!r}; month must be 01-12")
    return year, month


# Display formats (en-US style, independent of process locale).


def _hour12(dt: datetime) -> Tuple[int, str]:
    return (dt.hour % 12 or 12), ("AM" if dt.hour < 12 else "PM")


def hour_label(dt: datetime) -> str:
    """'3 PM'"""
    h, meridiem = _hour12(dt)
    return f"{h} {meridiem}"


def hour_tooltip(dt: datetime) -> str:
    """'Oct 19, 3:00 PM'"""
    h, meridiem = _hour12(dt)
    return f"{MONTH_NAMES[dt.month - 1][:3]} {dt.day}, {h}:{dt.minute:02d} {meridiem}"


def short_day(d: date) -> str:
    """'Oct 19'"""
    return f"{MONTH_NAMES[d.month - 1][:3]} {d.day}"


def short_date(d: date) -> str:
    """'Oct 19, 2026'"""
    return f"{short_day(d)}, {d.year}"


def long_date(d: date) -> str:
    """'October 19, 2026'"""
    return f"{MONTH_NAMES[d.month - 1]} {d.day}, {d.year}"


def short_month(year: int, month: int) -> str:
    """'Oct'"""
    return MONTH_NAMES[month - 1][:3]


def long_month(year: int, month: int) -> str:
    """'October 2026'"""
    return f"{MONTH_NAMES[month - 1]} {year}"
