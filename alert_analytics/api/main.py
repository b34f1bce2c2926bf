from __future__ import annotations

import logging
import os
from typing import List

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from alert_analytics.api.config import load_config
from alert_analytics.api.routers import analytics, health
from alert_analytics.api.state import get_state, init_state

openapi_tags = [
    {"name": "Health", "description": "Service health and configuration diagnostics."},
    {"name": "Analytics", "description": "Alert trends, summaries, rankings and period deltas."},
]

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Alert Analytics API",
    description=(
        "Aggregation backend for the alert analytics dashboard. "
        "Callers post the alert snapshot they hold (Prometheus, Zabbix, Kuma, ...) and receive trend series, "
        "period counts, top-N rankings, alert-age proxies and per-team rollups. The service keeps no data."
    ),
    version="0.1.0",
    openapi_tags=openapi_tags,
)

# Initialize typed app state (config)
init_state(app, load_config())
logging.getLogger("alert_analytics").setLevel(get_state(app).config.log_level)


def _env_frontend_url() -> str | None:
    # Support both:
    # - standardized: FRONTEND_URL
    # - legacy: REACT_APP_FRONTEND_URL
    return os.getenv("FRONTEND_URL") or os.getenv("REACT_APP_FRONTEND_URL")


def _env_cors_extra_origins() -> List[str]:
    # Comma-separated list for preview deployments, etc.
    raw = os.getenv("CORS_ALLOW_ORIGINS") or ""
    parts = [p.strip() for p in raw.split(",") if p.strip()]
    return parts


# CORS: allow local frontend by default, plus explicit frontend URL and optional extra origins.
allowed_origins: List[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]
frontend_url = _env_frontend_url()
if frontend_url:
    allowed_origins.append(frontend_url)
allowed_origins.extend(_env_cors_extra_origins())

# De-dupe while preserving order
_seen = set()
allowed_origins = [o for o in allowed_origins if not (o in _seen or _seen.add(o))]
logger.info("CORS allowed origins: %s", ", ".join(allowed_origins))

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(analytics.router)
