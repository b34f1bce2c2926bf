from __future__ import annotations

from typing import List, Optional

from fastapi import Request

from alert_analytics.api.schemas.alerts import Alert
from alert_analytics.api.schemas.analytics import (
    AnalyticsSummary,
    OverviewResponse,
    SelectOption,
    SummaryResponse,
    TrendRequest,
    TrendResponse,
)
from alert_analytics.api.schemas.common import local_now, utc_now
from alert_analytics.api.services.formatting import build_stat_cards, format_duration
from alert_analytics.api.services.summary_aggregator import build_analytics_summary
from alert_analytics.api.services.timewindows import month_key
from alert_analytics.api.services.trend_builder import build_month_options, build_trend_data
from alert_analytics.api.state import get_state


def _summary_for(request: Request, alerts: List[Alert]) -> AnalyticsSummary:
    cfg = get_state(request.app).config
    return build_analytics_summary(
        alerts,
        teams=cfg.teams,
        top_sources_limit=cfg.top_sources_limit,
        top_noisy_limit=cfg.top_noisy_limit,
    )


# PUBLIC_INTERFACE
def get_trend(request: Request, payload: TrendRequest) -> TrendResponse:
    """
    Build the trend series for the requested range.

    Raises ValueError for a malformed month key (routers map it to 400).
    """
    month: Optional[str] = None
    if payload.range == "month":
        month = payload.month or month_key(local_now())

    points = build_trend_data(payload.alerts, payload.range, month=month)
    return TrendResponse(
        range=payload.range,
        month=month,
        points=points,
        total=sum(p.value for p in points),
    )


# PUBLIC_INTERFACE
def get_summary(request: Request, alerts: List[Alert]) -> SummaryResponse:
    """Aggregate the posted alerts using the configured teams and ranking sizes."""
    summary = _summary_for(request, alerts)
    return SummaryResponse(summary=summary, generatedAt=utc_now())


# PUBLIC_INTERFACE
def get_overview(request: Request, alerts: List[Alert]) -> OverviewResponse:
    """Headline stat cards plus formatted MTTA/MTTR proxies."""
    summary = _summary_for(request, alerts)
    return OverviewResponse(
        cards=build_stat_cards(alerts, summary),
        meanDurationText=format_duration(summary.mean_duration),
        medianDurationText=format_duration(summary.median_duration),
        generatedAt=utc_now(),
    )


# PUBLIC_INTERFACE
def list_month_options(request: Request, count: Optional[int] = None) -> List[SelectOption]:
    """Month selector options, newest first; defaults to the configured count."""
    cfg = get_state(request.app).config
    return build_month_options(count if count is not None else cfg.month_options_count)
