from __future__ import annotations

import math
from typing import List, Sequence

from alert_analytics.api.schemas.alerts import Alert
from alert_analytics.api.schemas.analytics import AnalyticsSummary, DeltaOut, StatCard


# PUBLIC_INTERFACE
def format_delta(current: int, previous: int) -> DeltaOut:
    """
    Percentage change of `current` against `previous`.

    A zero baseline yields '0.0%' when nothing changed and a fixed '+100.0%'
    otherwise; there is no meaningful ratio to report in that case.
    """
    if previous == 0:
        if current == 0:
            return DeltaOut(trend="up", text="0.0%")
        return DeltaOut(trend="up", text="+100.0%")

    diff = (current - previous) / previous * 100
    sign = "+" if diff >= 0 else "-"
    return DeltaOut(trend="up" if diff >= 0 else "down", text=f"{sign}{abs(diff):.1f}%")


# PUBLIC_INTERFACE
def format_duration(ms: float) -> str:
    """Compact duration: '2d 3h', '4h 12m' or '35m' (floored; '0m' for empty values)."""
    try:
        value = float(ms)
    except (TypeError, ValueError):
        return "0m"
    if not math.isfinite(value) or value <= 0:
        return "0m"

    minutes = int(value // 60000)
    hours = minutes // 60
    days = hours // 24
    if days > 0:
        return f"{days}d {hours % 24}h"
    if hours > 0:
        return f"{hours}h {minutes % 60}m"
    return f"{minutes}m"


def format_count(value: int) -> str:
    return f"{int(value):,}"


# PUBLIC_INTERFACE
def build_stat_cards(alerts: Sequence[Alert], summary: AnalyticsSummary) -> List[StatCard]:
    """Headline cards for active/today/month/year counts with their deltas."""
    counts = summary.counts
    rows = [
        ("active", "Active Alerts", len(alerts), counts.last_day),
        ("today", "Alerts Today", counts.current_day, counts.last_day),
        ("month", "Alerts This Month", counts.current_month, counts.last_month),
        ("year", "Alerts This Year", counts.current_year, counts.last_year),
    ]
    cards: List[StatCard] = []
    for card_id, title, current, previous in rows:
        delta = format_delta(current, previous)
        cards.append(
            StatCard(
                id=card_id,
                title=title,
                value=format_count(current),
                change=delta.text,
                trend=delta.trend,
            )
        )
    return cards
