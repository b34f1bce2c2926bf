from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, FrozenSet, Optional, Tuple

logger = logging.getLogger(__name__)


def _env_int(name: str, default: int) -> int:
    """Parse an int env var with a default."""
    try:
        return int(os.getenv(name, str(default)))
    except Exception:
        return int(default)


def _clamp_int(v: int, lo: int, hi: int) -> int:
    """Clamp integer to [lo, hi]."""
    return max(lo, min(hi, int(v)))


@dataclass(frozen=True)
class TeamConfig:
    """A team and the alert sources it owns."""

    id: str
    name: str
    sources: FrozenSet[str]


DEFAULT_TEAMS: Tuple[TeamConfig, ...] = (
    TeamConfig(id="infra", name="Core Infra", sources=frozenset({"Prometheus"})),
    TeamConfig(id="platform", name="Platform Ops", sources=frozenset({"Zabbix"})),
    TeamConfig(id="apps", name="App Health", sources=frozenset({"Kuma"})),
)

DEFAULT_TOP_SOURCES_LIMIT = 8
DEFAULT_TOP_NOISY_LIMIT = 6


@dataclass(frozen=True)
class AnalyticsConfig:
    """Runtime configuration loaded from env and an optional teams file."""

    teams: Tuple[TeamConfig, ...]

    # Ranking sizes for the summary.
    top_sources_limit: int
    top_noisy_limit: int

    # Default number of entries returned by the month selector endpoint.
    month_options_count: int

    # Level applied to the service loggers at startup.
    log_level: str

    # Diagnostics: where the team mapping came from.
    teams_source: str
    teams_file_path: Optional[str]


# PUBLIC_INTERFACE
def parse_teams(raw: Any) -> Tuple[TeamConfig, ...]:
    """
    Parse a team mapping from decoded JSON.

    Expected shape:
      [{"id": "infra", "name": "Core Infra", "sources": ["Prometheus"]}, ...]

    Raises ValueError with a message naming the offending entry.
    """
    if not isinstance(raw, list):
        raise ValueError("teams must be a JSON list")

    teams = []
    seen_ids = set()
    for idx, entry in enumerate(raw):
        if not isinstance(entry, dict):
            raise ValueError(f"team #{idx} must be an object")
        team_id = str(entry.get("id") or "").strip()
        name = str(entry.get("name") or team_id).strip()
        sources = entry.get("sources")
        if not team_id:
            raise ValueError(f"team #{idx} is missing 'id'")
        if team_id in seen_ids:
            raise ValueError(f"duplicate team id '{team_id}'")
        if not isinstance(sources, list) or not all(isinstance(s, str) for s in sources):
            raise ValueError(f"team '{team_id}' must list its sources as strings")
        seen_ids.add(team_id)
        teams.append(TeamConfig(id=team_id, name=name, sources=frozenset(s.strip() for s in sources if s.strip())))
    return tuple(teams)


def _read_teams_file(path: str) -> Tuple[TeamConfig, ...]:
    candidate = Path(path).expanduser()
    try:
        raw = json.loads(candidate.read_text(encoding="utf-8"))
    except Exception as exc:
        logger.exception("Failed reading/parsing teams file at %s", str(candidate))
        raise RuntimeError(f"ANALYTICS_TEAMS_FILE could not be read as JSON: {candidate}") from exc
    try:
        return parse_teams(raw)
    except ValueError as exc:
        raise RuntimeError(f"ANALYTICS_TEAMS_FILE is invalid ({candidate}): {exc}") from exc


def _resolve_teams() -> Tuple[Tuple[TeamConfig, ...], str, Optional[str]]:
    """
    Resolve the team mapping.

    Priority:
      1) ANALYTICS_TEAMS (inline JSON)
      2) ANALYTICS_TEAMS_FILE (path to a JSON file)
      3) built-in defaults
    """
    inline = os.getenv("ANALYTICS_TEAMS")
    if inline and inline.strip():
        try:
            return parse_teams(json.loads(inline)), "ANALYTICS_TEAMS", None
        except (ValueError, TypeError) as exc:
            # json.JSONDecodeError is a ValueError.
            raise RuntimeError(f"ANALYTICS_TEAMS is invalid: {exc}") from exc

    file_path = os.getenv("ANALYTICS_TEAMS_FILE")
    if file_path and file_path.strip():
        return _read_teams_file(file_path.strip()), "ANALYTICS_TEAMS_FILE", file_path.strip()

    return DEFAULT_TEAMS, "default", None


# PUBLIC_INTERFACE
def load_config() -> AnalyticsConfig:
    """Load AnalyticsConfig from env vars (team mapping from inline JSON, a file, or defaults)."""
    teams, teams_source, teams_file_path = _resolve_teams()

    top_sources_limit = _clamp_int(_env_int("ANALYTICS_TOP_SOURCES_LIMIT", DEFAULT_TOP_SOURCES_LIMIT), 1, 100)
    top_noisy_limit = _clamp_int(_env_int("ANALYTICS_TOP_NOISY_LIMIT", DEFAULT_TOP_NOISY_LIMIT), 1, 100)
    month_options_count = _clamp_int(_env_int("ANALYTICS_MONTH_OPTIONS", 12), 1, 60)
    log_level = (os.getenv("ANALYTICS_LOG_LEVEL") or "INFO").strip().upper()
    if log_level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
        log_level = "INFO"

    logger.info(
        "Resolved analytics config teams_source=%s teams=%s top_sources=%s top_noisy=%s",
        teams_source,
        ",".join(t.id for t in teams),
        top_sources_limit,
        top_noisy_limit,
    )

    return AnalyticsConfig(
        teams=teams,
        top_sources_limit=top_sources_limit,
        top_noisy_limit=top_noisy_limit,
        month_options_count=month_options_count,
        log_level=log_level,
        teams_source=teams_source,
        teams_file_path=teams_file_path,
    )
