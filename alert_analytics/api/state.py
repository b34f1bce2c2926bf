from __future__ import annotations

from dataclasses import dataclass

from fastapi import FastAPI

from alert_analytics.api.config import AnalyticsConfig


@dataclass
class AppState:
    """Typed app.state container for shared singletons."""

    config: AnalyticsConfig


# PUBLIC_INTERFACE
def init_state(app: FastAPI, config: AnalyticsConfig) -> None:
    """Initialize app.state with the loaded config."""
    app.state.state = AppState(config=config)


# PUBLIC_INTERFACE
def get_state(app: FastAPI) -> AppState:
    """Fetch typed AppState from a FastAPI app."""
    return app.state.state  # type: ignore[attr-defined]
