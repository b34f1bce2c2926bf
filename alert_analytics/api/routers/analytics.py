from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, HTTPException, Query, Request

from alert_analytics.api.schemas.alerts import AlertBatch
from alert_analytics.api.schemas.analytics import (
    DeltaOut,
    OverviewResponse,
    SelectOptionList,
    SummaryResponse,
    TrendRequest,
    TrendResponse,
)
from alert_analytics.api.schemas.common import ErrorResponse
from alert_analytics.api.services import analytics_service
from alert_analytics.api.services.formatting import format_delta
from alert_analytics.api.services.timewindows import parse_month_key
from alert_analytics.api.services.trend_builder import build_range_options

router = APIRouter(prefix="/api/analytics", tags=["Analytics"])


@router.get(
    "/ranges",
    response_model=SelectOptionList,
    summary="List trend ranges",
    description="Trend range selector options in display order.",
    operation_id="list_trend_ranges",
)
def list_ranges() -> SelectOptionList:
    """List the supported trend ranges."""
    items = build_range_options()
    return SelectOptionList(items=items, total=len(items))


@router.get(
    "/months",
    response_model=SelectOptionList,
    summary="List month options",
    description="Recent months (newest first) for the monthly trend view.",
    operation_id="list_month_options",
)
def list_months(
    request: Request,
    count: Optional[int] = Query(default=None, ge=1, le=60, description="Number of months to return."),
) -> SelectOptionList:
    """List month keys for the monthly trend selector."""
    items = analytics_service.list_month_options(request, count=count)
    return SelectOptionList(items=items, total=len(items))


@router.post(
    "/trend",
    response_model=TrendResponse,
    responses={400: {"model": ErrorResponse}},
    summary="Build alert trend",
    description=(
        "Bucket the posted alerts into a dense time series for the range: 1d (hourly), 7d/14d (daily), "
        "month (daily, for the YYYY-MM month) or year (monthly)."
    ),
    operation_id="build_alert_trend",
)
def build_trend(request: Request, payload: TrendRequest) -> TrendResponse:
    """Build a trend series."""
    if payload.range == "month" and payload.month is not None:
        try:
            parse_month_key(payload.month)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc))
    return analytics_service.get_trend(request, payload)


@router.post(
    "/summary",
    response_model=SummaryResponse,
    summary="Build analytics summary",
    description=(
        "Period counts, top sources, noisy alerts, alert-age proxies, 7d/30d frequency and team rollups "
        "for the posted alerts."
    ),
    operation_id="build_analytics_summary",
)
def build_summary(request: Request, payload: AlertBatch) -> SummaryResponse:
    """Aggregate alerts into the dashboard summary."""
    return analytics_service.get_summary(request, payload.alerts)


@router.post(
    "/overview",
    response_model=OverviewResponse,
    summary="Build headline cards",
    description="Active/today/month/year cards with period-over-period deltas, plus formatted age proxies.",
    operation_id="build_analytics_overview",
)
def build_overview(request: Request, payload: AlertBatch) -> OverviewResponse:
    """Build stat cards for the dashboard header."""
    return analytics_service.get_overview(request, payload.alerts)


@router.get(
    "/delta",
    response_model=DeltaOut,
    summary="Format a period delta",
    description="Signed percentage change of current vs previous (a zero baseline is capped at +100.0%).",
    operation_id="format_period_delta",
)
def get_delta(
    current: int = Query(..., ge=0, description="Count for the current period."),
    previous: int = Query(..., ge=0, description="Count for the previous period."),
) -> DeltaOut:
    """Format a period-over-period delta."""
    return format_delta(current, previous)
