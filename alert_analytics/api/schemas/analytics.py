from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from alert_analytics.api.schemas.alerts import AlertBatch


TrendRange = Literal["1d", "7d", "14d", "month", "year"]
TrendDirection = Literal["up", "down"]

DEFAULT_TREND_RANGE: TrendRange = "14d"


class TrendPoint(BaseModel):
    """One bucket of a trend series."""

    label: str = Field(..., description="Short label for the axis.")
    tooltip: str = Field(..., description="Long label for hover tooltips.")
    value: int = Field(..., ge=0, description="Number of alerts in the bucket.")


class TrendRequest(AlertBatch):
    """Request body for building a trend series."""

    range: TrendRange = Field(DEFAULT_TREND_RANGE, description="Trend range selector.")
    month: Optional[str] = Field(
        default=None,
        description="Target month (YYYY-MM) for the 'month' range; defaults to the current month.",
    )


class TrendResponse(BaseModel):
    """Dense, chronological trend series for the requested range."""

    range: TrendRange = Field(..., description="Range the series was built for.")
    month: Optional[str] = Field(default=None, description="Month key used for the 'month' range.")
    points: List[TrendPoint] = Field(..., description="Buckets in chronological order.")
    total: int = Field(..., ge=0, description="Sum of all bucket values.")


class PeriodCounts(BaseModel):
    """Alert counts for the current and previous day, month and year."""

    current_day: int = Field(0, ge=0, alias="currentDay")
    last_day: int = Field(0, ge=0, alias="lastDay")
    current_month: int = Field(0, ge=0, alias="currentMonth")
    last_month: int = Field(0, ge=0, alias="lastMonth")
    current_year: int = Field(0, ge=0, alias="currentYear")
    last_year: int = Field(0, ge=0, alias="lastYear")


class RankingEntry(BaseModel):
    """A ranked name with its alert count."""

    name: str = Field(..., description="Source label or alert name.")
    count: int = Field(..., ge=1, description="Number of alerts.")


class BusiestDay(BaseModel):
    """Day with the most alerts inside a frequency window."""

    date: str = Field(..., description="Display date (e.g. 'Oct 19').")
    count: int = Field(..., ge=0, description="Alerts on that day.")


class FrequencyStat(BaseModel):
    """Alert frequency over a trailing window of days."""

    total: int = Field(..., ge=0, description="Alerts inside the window.")
    average: float = Field(..., ge=0, description="Alerts per day over the window.")
    busiest: BusiestDay = Field(..., description="Busiest day of the window.")


class TeamStat(BaseModel):
    """Per-team rollup derived from the team -> sources mapping."""

    id: str = Field(..., description="Team identifier.")
    name: str = Field(..., description="Team display name.")
    total: int = Field(..., ge=0, description="Alerts from the team's sources.")
    critical: int = Field(..., ge=0, description="Critical alerts from the team's sources.")
    top_label: str = Field(..., description="Most frequent source label, or 'None'.", alias="topLabel")
    last_seen: int = Field(..., ge=0, description="Latest alert timestamp in epoch ms, or 0.", alias="lastSeen")


class AnalyticsSummary(BaseModel):
    """Counts, rankings, age proxies, frequency and team stats for an alert set."""

    counts: PeriodCounts
    top_sources: List[RankingEntry] = Field(default_factory=list, alias="topSources")
    top_noisy_alerts: List[RankingEntry] = Field(default_factory=list, alias="topNoisyAlerts")
    mean_duration: float = Field(0.0, ge=0, description="Mean alert age (ms).", alias="meanDuration")
    median_duration: float = Field(0.0, ge=0, description="Median alert age (ms).", alias="medianDuration")
    frequency_7d: FrequencyStat = Field(..., alias="frequency7d")
    frequency_30d: FrequencyStat = Field(..., alias="frequency30d")
    team_stats: List[TeamStat] = Field(default_factory=list, alias="teamStats")


class SummaryResponse(BaseModel):
    """Envelope for the analytics summary."""

    summary: AnalyticsSummary
    generated_at: datetime = Field(..., description="UTC timestamp when the summary was built.", alias="generatedAt")


class DeltaOut(BaseModel):
    """Period-over-period change."""

    trend: TrendDirection = Field(..., description="'up' when the change is >= 0, else 'down'.")
    text: str = Field(..., description="Signed percentage with one decimal (e.g. '+12.5%').")


class StatCard(BaseModel):
    """Headline card: a count plus its change against the previous period."""

    id: str = Field(..., description="Card identifier (active|today|month|year).")
    title: str = Field(..., description="Card title.")
    value: str = Field(..., description="Formatted count.")
    change: str = Field(..., description="Formatted delta text.")
    trend: TrendDirection = Field(..., description="Delta direction.")


class OverviewResponse(BaseModel):
    """Headline cards and formatted age proxies for the dashboard header."""

    cards: List[StatCard]
    mean_duration_text: str = Field(..., alias="meanDurationText")
    median_duration_text: str = Field(..., alias="medianDurationText")
    generated_at: datetime = Field(..., alias="generatedAt")


class SelectOption(BaseModel):
    """A value/label pair for UI selectors."""

    value: str
    label: str


class SelectOptionList(BaseModel):
    """Envelope for selector options."""

    items: List[SelectOption]
    total: int = Field(..., ge=0)
