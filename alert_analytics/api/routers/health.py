from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Request
from pydantic import BaseModel, Field

from alert_analytics.api.schemas.common import HealthResponse, utc_now
from alert_analytics.api.state import get_state

router = APIRouter(tags=["Health"])


class TeamOut(BaseModel):
    """A configured team as reported by diagnostics."""

    id: str = Field(..., description="Team identifier.")
    name: str = Field(..., description="Team display name.")
    sources: List[str] = Field(..., description="Alert sources owned by the team (sorted).")


class ConfigDiagnosticsResponse(BaseModel):
    """Diagnostics describing the analytics configuration in effect."""

    teams_source: str = Field(..., description="Where the team mapping came from (ANALYTICS_TEAMS, ANALYTICS_TEAMS_FILE, default).")
    teams_file_path: Optional[str] = Field(default=None, description="Teams file path when one was used.")
    teams: List[TeamOut] = Field(..., description="Configured teams.")
    top_sources_limit: int = Field(..., description="Number of top sources returned by the summary.")
    top_noisy_limit: int = Field(..., description="Number of noisy alert names returned by the summary.")
    month_options_count: int = Field(..., description="Default number of month selector options.")
    timestamp: str = Field(..., description="UTC timestamp when the diagnostics were produced (ISO string).")


@router.get(
    "/",
    response_model=HealthResponse,
    summary="Health check",
    description="Basic service liveness check used by deployment and the frontend.",
    operation_id="health_check",
)
def health_check() -> HealthResponse:
    """Return service liveness status."""
    return HealthResponse(status="ok", message="Healthy", timestamp=utc_now())


@router.get(
    "/api/health/config",
    response_model=ConfigDiagnosticsResponse,
    summary="Analytics configuration diagnostics",
    description="Reports the team mapping and ranking sizes in effect, and where the team mapping was loaded from.",
    operation_id="config_diagnostics",
)
def config_diagnostics(request: Request) -> ConfigDiagnosticsResponse:
    """Return analytics configuration diagnostics."""
    cfg = get_state(request.app).config
    return ConfigDiagnosticsResponse(
        teams_source=cfg.teams_source,
        teams_file_path=cfg.teams_file_path,
        teams=[TeamOut(id=t.id, name=t.name, sources=sorted(t.sources)) for t in cfg.teams],
        top_sources_limit=int(cfg.top_sources_limit),
        top_noisy_limit=int(cfg.top_noisy_limit),
        month_options_count=int(cfg.month_options_count),
        timestamp=utc_now().isoformat(),
    )
