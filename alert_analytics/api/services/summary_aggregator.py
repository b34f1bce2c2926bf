from __future__ import annotations

import logging
from collections import Counter
from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from alert_analytics.api.config import (
    DEFAULT_TEAMS,
    DEFAULT_TOP_NOISY_LIMIT,
    DEFAULT_TOP_SOURCES_LIMIT,
    TeamConfig,
)
from alert_analytics.api.schemas.alerts import Alert
from alert_analytics.api.schemas.analytics import (
    AnalyticsSummary,
    BusiestDay,
    FrequencyStat,
    PeriodCounts,
    RankingEntry,
    TeamStat,
)
from alert_analytics.api.schemas.common import Severity, local_now
from alert_analytics.api.services.timewindows import (
    epoch_ms,
    month_start,
    parse_timestamp,
    short_day,
    start_of_day,
)

logger = logging.getLogger(__name__)

# (alert, parsed local timestamp or None)
_Parsed = List[Tuple[Alert, Optional[datetime]]]


def monitoring_label(alert: Alert) -> str:
    """Display label of the alert's source instance ('' when blank)."""
    label = alert.source_label if alert.source_label is not None else alert.source
    return label.strip()


def _in(ts: datetime, start: datetime, end: datetime) -> bool:
    return start <= ts < end


def _period_counts(parsed: _Parsed, now: datetime) -> PeriodCounts:
    today = start_of_day(now)
    tomorrow = today + timedelta(days=1)
    yesterday = today - timedelta(days=1)
    this_month = month_start(now.year, now.month)
    next_month = month_start(now.year, now.month, 1)
    last_month = month_start(now.year, now.month, -1)
    this_year = datetime(now.year, 1, 1)
    next_year = datetime(now.year + 1, 1, 1)
    last_year = datetime(now.year - 1, 1, 1)

    counts = Counter()
    for _, ts in parsed:
        if ts is None:
            continue
        if _in(ts, today, tomorrow):
            counts["currentDay"] += 1
        elif _in(ts, yesterday, today):
            counts["lastDay"] += 1
        if _in(ts, this_month, next_month):
            counts["currentMonth"] += 1
        elif _in(ts, last_month, this_month):
            counts["lastMonth"] += 1
        if _in(ts, this_year, next_year):
            counts["currentYear"] += 1
        elif _in(ts, last_year, this_year):
            counts["lastYear"] += 1

    return PeriodCounts(
        currentDay=counts["currentDay"],
        lastDay=counts["lastDay"],
        currentMonth=counts["currentMonth"],
        lastMonth=counts["lastMonth"],
        currentYear=counts["currentYear"],
        lastYear=counts["lastYear"],
    )


def _ranking(counter: Counter, limit: int) -> List[RankingEntry]:
    # Counter keeps insertion order and most_common() is stable, so ties stay first-seen.
    return [RankingEntry(name=name, count=count) for name, count in counter.most_common(max(0, limit))]


def median_age(ages: Sequence[float]) -> float:
    """
    Median of alert ages as the element at index n // 2 of the sorted list.

    Even-length lists yield the upper of the two middle values rather than
    their average ([10, 20, 30, 40] -> 30).
    """
    if not ages:
        return 0
    ordered = sorted(ages)
    return ordered[len(ordered) // 2]


def _durations(parsed: _Parsed, now: datetime) -> Tuple[float, float]:
    now_ms = epoch_ms(now)
    ages = [max(0, now_ms - epoch_ms(ts)) for _, ts in parsed if ts is not None]
    mean = (sum(ages) / len(ages)) if ages else 0.0
    return float(mean), float(median_age(ages))


def _frequency(parsed: _Parsed, now: datetime, days: int) -> FrequencyStat:
    start = start_of_day(now) - timedelta(days=days - 1)
    window = [(start + timedelta(days=i)).date() for i in range(days)]
    per_day: Dict[date, int] = {d: 0 for d in window}

    for _, ts in parsed:
        if ts is None or ts < start:
            continue
        day = ts.date()
        if day in per_day:
            per_day[day] += 1

    total = sum(per_day.values())
    busiest_day, busiest_count = window[0], 0
    for day in window:
        if per_day[day] > busiest_count:
            busiest_day, busiest_count = day, per_day[day]

    return FrequencyStat(
        total=total,
        average=total / days,
        busiest=BusiestDay(date=short_day(busiest_day), count=busiest_count),
    )


def _team_stat(team: TeamConfig, parsed: _Parsed) -> TeamStat:
    members = [(a, ts) for a, ts in parsed if a.source in team.sources]
    critical = sum(1 for a, _ in members if a.severity == Severity.critical)

    labels = Counter()
    for a, _ in members:
        label = monitoring_label(a)
        if label:
            labels[label] += 1
    top = labels.most_common(1)

    last_seen = max((epoch_ms(ts) for _, ts in members if ts is not None), default=0)

    return TeamStat(
        id=team.id,
        name=team.name,
        total=len(members),
        critical=critical,
        topLabel=top[0][0] if top else "None",
        lastSeen=max(0, last_seen),
    )


# PUBLIC_INTERFACE
def build_analytics_summary(
    alerts: Iterable[Alert],
    teams: Sequence[TeamConfig] = DEFAULT_TEAMS,
    now: Optional[datetime] = None,
    top_sources_limit: int = DEFAULT_TOP_SOURCES_LIMIT,
    top_noisy_limit: int = DEFAULT_TOP_NOISY_LIMIT,
) -> AnalyticsSummary:
    """
    Aggregate an alert snapshot into dashboard statistics.

    Produces:
      - day/month/year counts for the current and previous calendar period
      - top sources (by source label) and noisiest alert names
      - mean/median alert age in ms as MTTA/MTTR proxies
      - 7d and 30d frequency with the busiest day
      - one rollup per configured team

    Never raises for bad input: unparseable timestamps only drop the alert from
    the time-based figures, and an empty list yields an all-zero summary.
    """
    now = now or local_now()
    parsed: _Parsed = [(a, parse_timestamp(a.timestamp)) for a in alerts]

    traffic = Counter()
    noisy = Counter()
    for alert, _ in parsed:
        label = monitoring_label(alert)
        if label:
            traffic[label] += 1
        noisy[alert.name] += 1

    mean_duration, median_duration = _durations(parsed, now)

    summary = AnalyticsSummary(
        counts=_period_counts(parsed, now),
        topSources=_ranking(traffic, top_sources_limit),
        topNoisyAlerts=_ranking(noisy, top_noisy_limit),
        meanDuration=mean_duration,
        medianDuration=median_duration,
        frequency7d=_frequency(parsed, now, 7),
        frequency30d=_frequency(parsed, now, 30),
        teamStats=[_team_stat(team, parsed) for team in teams],
    )

    logger.debug(
        "Built analytics summary: alerts=%s unparseable=%s teams=%s",
        len(parsed),
        sum(1 for _, ts in parsed if ts is None),
        len(summary.team_stats),
    )
    return summary
