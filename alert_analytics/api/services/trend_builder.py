from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Callable, Dict, Hashable, Iterable, List, Optional, Tuple

from alert_analytics.api.schemas.alerts import Alert
from alert_analytics.api.schemas.analytics import SelectOption, TrendPoint
from alert_analytics.api.schemas.common import local_now
from alert_analytics.api.services.timewindows import (
    add_months,
    days_in_month,
    hour_label,
    hour_tooltip,
    long_date,
    long_month,
    month_key,
    month_start,
    parse_month_key,
    parse_timestamp,
    short_date,
    short_day,
    short_month,
    start_of_day,
    start_of_hour,
)

logger = logging.getLogger(__name__)

# Selector order for the dashboard.
TREND_RANGES: Tuple[Tuple[str, str], ...] = (
    ("1d", "1D"),
    ("7d", "7D"),
    ("14d", "14D"),
    ("month", "Month"),
    ("year", "Last year"),
)


@dataclass
class _Bucket:
    key: Hashable
    label: str
    tooltip: str
    value: int = 0


# Maps a parsed timestamp to its bucket key, or None when it falls outside the window.
KeyFn = Callable[[datetime], Optional[Hashable]]


def _hourly_buckets(start: datetime, hours: int) -> List[_Bucket]:
    out: List[_Bucket] = []
    for i in range(hours):
        slot = start + timedelta(hours=i)
        out.append(_Bucket(key=slot, label=hour_label(slot), tooltip=hour_tooltip(slot)))
    return out


def _daily_buckets(
    start: date,
    days: int,
    label: Callable[[date], str],
    tooltip: Callable[[date], str],
) -> List[_Bucket]:
    out: List[_Bucket] = []
    for i in range(days):
        day = start + timedelta(days=i)
        out.append(_Bucket(key=day, label=label(day), tooltip=tooltip(day)))
    return out


def _monthly_buckets(year: int, month: int, months: int) -> List[_Bucket]:
    out: List[_Bucket] = []
    for i in range(months):
        y, m = add_months(year, month, i)
        out.append(_Bucket(key=(y, m), label=short_month(y, m), tooltip=long_month(y, m)))
    return out


def _day_label(d: date) -> str:
    return str(d.day)


def _last_day_window(now: datetime) -> Tuple[List[_Bucket], KeyFn]:
    start = start_of_hour(now) - timedelta(hours=23)

    def key_for(ts: datetime) -> Optional[Hashable]:
        if ts < start:
            return None
        return start_of_hour(ts)

    return _hourly_buckets(start, 24), key_for


def _trailing_days_window(now: datetime, days: int) -> Tuple[List[_Bucket], KeyFn]:
    start = start_of_day(now) - timedelta(days=days - 1)

    def key_for(ts: datetime) -> Optional[Hashable]:
        if ts < start:
            return None
        return ts.date()

    return _daily_buckets(start.date(), days, short_day, short_date), key_for


def _month_window(year: int, month: int) -> Tuple[List[_Bucket], KeyFn]:
    def key_for(ts: datetime) -> Optional[Hashable]:
        # Calendar-aligned view, not a trailing window.
        if ts.year != year or ts.month != month:
            return None
        return ts.date()

    first = date(year, month, 1)
    return _daily_buckets(first, days_in_month(year, month), _day_label, long_date), key_for


def _year_window(now: datetime) -> Tuple[List[_Bucket], KeyFn]:
    start = month_start(now.year, now.month, -11)
    end = month_start(now.year, now.month, 1)

    def key_for(ts: datetime) -> Optional[Hashable]:
        if ts < start or ts >= end:
            return None
        return (ts.year, ts.month)

    return _monthly_buckets(start.year, start.month, 12), key_for


def _fold(alerts: Iterable[Alert], buckets: List[_Bucket], key_for: KeyFn) -> Dict[str, int]:
    """Count alerts into pre-allocated buckets; returns traversal stats for logging."""
    by_key = {b.key: b for b in buckets}
    stats = {"counted": 0, "unparseable": 0, "outside": 0}
    for alert in alerts:
        ts = parse_timestamp(alert.timestamp)
        if ts is None:
            stats["unparseable"] += 1
            continue
        key = key_for(ts)
        bucket = by_key.get(key) if key is not None else None
        if bucket is None:
            stats["outside"] += 1
            continue
        bucket.value += 1
        stats["counted"] += 1
    return stats


# PUBLIC_INTERFACE
def build_trend_data(
    alerts: Iterable[Alert],
    trend_range: str,
    month: Optional[str] = None,
    now: Optional[datetime] = None,
) -> List[TrendPoint]:
    """
    Build a dense, chronological alert-count series for a dashboard range.

    Ranges:
      - '1d': 24 hourly buckets ending with the current hour
      - '7d' / '14d': daily buckets ending today
      - 'month': one bucket per day of `month` (YYYY-MM), current month by default
      - 'year': 12 monthly buckets ending with the current month

    Every slot is present even when empty. Alerts with unparseable timestamps or
    outside the window are skipped. Raises ValueError for an unknown range or a
    malformed month key.
    """
    now = now or local_now()

    if trend_range == "1d":
        buckets, key_for = _last_day_window(now)
    elif trend_range in ("7d", "14d"):
        buckets, key_for = _trailing_days_window(now, 7 if trend_range == "7d" else 14)
    elif trend_range == "month":
        year, mon = parse_month_key(month) if month else (now.year, now.month)
        buckets, key_for = _month_window(year, mon)
    elif trend_range == "year":
        buckets, key_for = _year_window(now)
    else:
        raise ValueError(f"unknown trend range {trend_range!r}")

    stats = _fold(alerts, buckets, key_for)
    logger.debug(
        "Built %s trend: buckets=%s counted=%s outside=%s unparseable=%s",
        trend_range,
        len(buckets),
        stats["counted"],
        stats["outside"],
        stats["unparseable"],
    )
    return [TrendPoint(label=b.label, tooltip=b.tooltip, value=b.value) for b in buckets]


# PUBLIC_INTERFACE
def build_month_options(count: int = 12, base: Optional[datetime] = None) -> List[SelectOption]:
    """Return the last `count` months (newest first) as YYYY-MM / 'October 2026' options."""
    base = base or local_now()
    out: List[SelectOption] = []
    for i in range(max(0, int(count))):
        y, m = add_months(base.year, base.month, -i)
        out.append(SelectOption(value=month_key(date(y, m, 1)), label=long_month(y, m)))
    return out


# PUBLIC_INTERFACE
def build_range_options() -> List[SelectOption]:
    """Return the trend range selector options in display order."""
    return [SelectOption(value=value, label=label) for value, label in TREND_RANGES]
