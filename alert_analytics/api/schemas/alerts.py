from __future__ import annotations

from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from alert_analytics.api.schemas.common import Severity


class Alert(BaseModel):
    """A single alert as collected from a monitoring source (read-only input)."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., description="Alert identifier.")
    source: str = Field(..., description="Monitoring source type (Prometheus, Zabbix, Kuma, ...).")
    source_label: Optional[str] = Field(
        default=None,
        description="Configured display name of the source instance; falls back to source when absent.",
        alias="sourceLabel",
    )
    name: str = Field(..., description="Alert name (rule / trigger / monitor name).")
    severity: Severity = Field(..., description="Alert severity.")
    message: Optional[str] = Field(default=None, description="Free-form alert message.")
    instance: Optional[str] = Field(default=None, description="Affected instance, when reported.")
    timestamp: Optional[Union[str, int, float]] = Field(
        default=None,
        description=(
            "When the alert fired: ISO-8601 string or epoch milliseconds. Missing or unparseable values "
            "only drop the alert from time-based figures."
        ),
    )


class AlertBatch(BaseModel):
    """Request body carrying the alert snapshot held by the caller."""

    alerts: List[Alert] = Field(default_factory=list, description="Alerts to aggregate (any order).")
