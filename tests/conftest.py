from __future__ import annotations

from collections.abc import AsyncIterator, Callable
from datetime import datetime
from itertools import count
from typing import Optional, Union

import httpx
import pytest

from alert_analytics.api.config import load_config
from alert_analytics.api.schemas.alerts import Alert
from alert_analytics.api.state import init_state

# Fixed local wall-clock instant used by engine tests: Monday, Oct 19 2026, 15:30.
NOW = datetime(2026, 10, 19, 15, 30)

_ANALYTICS_ENV = [
    "ANALYTICS_TEAMS",
    "ANALYTICS_TEAMS_FILE",
    "ANALYTICS_TOP_SOURCES_LIMIT",
    "ANALYTICS_TOP_NOISY_LIMIT",
    "ANALYTICS_MONTH_OPTIONS",
    "ANALYTICS_LOG_LEVEL",
]


@pytest.fixture
def anyio_backend() -> str:
    """Run async tests on asyncio only."""
    return "asyncio"


@pytest.fixture
def now() -> datetime:
    """Pinned 'now' for deterministic aggregation tests."""
    return NOW


@pytest.fixture
def frozen_now(monkeypatch: pytest.MonkeyPatch) -> datetime:
    """Pin the wall clock read by the services to NOW so API tests are deterministic."""
    from alert_analytics.api.services import analytics_service, summary_aggregator, trend_builder

    for module in (analytics_service, summary_aggregator, trend_builder):
        monkeypatch.setattr(module, "local_now", lambda: NOW)
    return NOW


@pytest.fixture
def make_alert() -> Callable[..., Alert]:
    """
    Factory for Alert models.

    `ts` may be a naive local datetime (rendered as ISO), a raw string or epoch ms.
    """
    ids = count(1)

    def _make(
        ts: Union[datetime, str, int, float],
        source: str = "Prometheus",
        source_label: Optional[str] = None,
        name: str = "HighCPU",
        severity: str = "warning",
    ) -> Alert:
        timestamp = ts.isoformat() if isinstance(ts, datetime) else ts
        return Alert(
            id=f"alert-{next(ids)}",
            source=source,
            sourceLabel=source_label,
            name=name,
            severity=severity,
            timestamp=timestamp,
        )

    return _make


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    """Remove analytics env vars so config falls back to defaults."""
    for name in _ANALYTICS_ENV:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


@pytest.fixture
def app(clean_env: pytest.MonkeyPatch):
    """
    FastAPI app fixture with config reloaded from a clean environment.

    Tests that need custom config set env vars and call the `reload_config` fixture.
    """
    from alert_analytics.api.main import app as fastapi_app

    init_state(fastapi_app, load_config())
    return fastapi_app


@pytest.fixture
def reload_config(app) -> Callable[[], None]:
    """Re-read env config into the app state."""

    def _reload() -> None:
        init_state(app, load_config())

    return _reload


@pytest.fixture
async def async_client(app) -> AsyncIterator[httpx.AsyncClient]:
    """Async HTTP client bound to the FastAPI ASGI app."""
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def alert_payload() -> Callable[..., dict]:
    """Factory for JSON alert bodies as the dashboard would post them."""
    return _alert_payload


def _alert_payload(ts: Union[datetime, str, int, None], **overrides) -> dict:
    body = {
        "id": overrides.pop("id", "a-1"),
        "source": overrides.pop("source", "Prometheus"),
        "name": overrides.pop("name", "HighCPU"),
        "severity": overrides.pop("severity", "warning"),
        "timestamp": ts.isoformat() if isinstance(ts, datetime) else ts,
    }
    body.update(overrides)
    return body
