from __future__ import annotations

from datetime import datetime, timedelta

from alert_analytics.api.config import DEFAULT_TEAMS, TeamConfig
from alert_analytics.api.services.summary_aggregator import build_analytics_summary, median_age
from alert_analytics.api.services.timewindows import epoch_ms


def test_empty_input_yields_zero_summary(now):
    summary = build_analytics_summary([], now=now)

    counts = summary.counts
    assert (
        counts.current_day,
        counts.last_day,
        counts.current_month,
        counts.last_month,
        counts.current_year,
        counts.last_year,
    ) == (0, 0, 0, 0, 0, 0)
    assert summary.top_sources == []
    assert summary.top_noisy_alerts == []
    assert summary.mean_duration == 0
    assert summary.median_duration == 0

    assert summary.frequency_7d.total == 0
    assert summary.frequency_7d.average == 0
    assert summary.frequency_7d.busiest.date == "Oct 13"
    assert summary.frequency_7d.busiest.count == 0
    assert summary.frequency_30d.busiest.date == "Sep 20"

    assert [t.id for t in summary.team_stats] == [t.id for t in DEFAULT_TEAMS]
    for team in summary.team_stats:
        assert team.total == 0
        assert team.critical == 0
        assert team.top_label == "None"
        assert team.last_seen == 0


def test_today_and_yesterday_scenario(now, make_alert):
    alerts = [
        make_alert(datetime(2026, 10, 19, 9, 0), source_label="api-1", severity="critical"),
        make_alert(datetime(2026, 10, 18, 9, 0), source_label="api-1", severity="warning"),
    ]
    summary = build_analytics_summary(alerts, now=now)

    assert summary.counts.current_day == 1
    assert summary.counts.last_day == 1
    assert summary.top_noisy_alerts[0].name == "HighCPU"
    assert summary.top_noisy_alerts[0].count == 2
    assert summary.top_sources[0].name == "api-1"


def test_period_counts_use_half_open_calendar_intervals(now, make_alert):
    alerts = [
        make_alert(datetime(2026, 10, 19, 0, 0)),  # today, this month, this year
        make_alert(datetime(2026, 10, 20, 0, 0)),  # tomorrow: month + year only
        make_alert(datetime(2026, 10, 1, 0, 0)),  # this month
        make_alert(datetime(2026, 9, 30, 23, 59)),  # last month
        make_alert(datetime(2026, 9, 1, 0, 0)),  # last month
        make_alert(datetime(2026, 1, 1, 0, 0)),  # this year
        make_alert(datetime(2025, 12, 31, 23, 59)),  # last year
        make_alert(datetime(2024, 6, 1, 12, 0)),  # nothing
        make_alert("garbage"),
    ]
    counts = build_analytics_summary(alerts, now=now).counts

    assert counts.current_day == 1
    assert counts.last_day == 0
    assert counts.current_month == 3
    assert counts.last_month == 2
    assert counts.current_year == 6
    assert counts.last_year == 1


def test_last_month_wraps_to_december(make_alert):
    now = datetime(2026, 1, 1, 0, 30)
    alerts = [
        make_alert(datetime(2025, 12, 31, 23, 0)),
        make_alert(datetime(2025, 12, 1, 0, 0)),
    ]
    counts = build_analytics_summary(alerts, now=now).counts
    assert counts.last_day == 1
    assert counts.last_month == 2
    assert counts.last_year == 2
    assert counts.current_year == 0


def test_top_sources_rank_by_label_with_stable_ties(now, make_alert):
    ts = now - timedelta(hours=1)
    alerts = [
        make_alert(ts, source_label="beta"),
        make_alert(ts, source_label="alpha"),
        make_alert(ts, source_label="alpha"),
        make_alert(ts, source_label="  gamma  "),
        make_alert(ts, source_label="beta"),
        make_alert(ts, source="Zabbix"),  # no label: falls back to source
        make_alert(ts, source="Kuma", source_label="   "),  # blank: excluded
        make_alert(ts, source="Kuma", source_label=""),  # empty label does not fall back
    ]
    summary = build_analytics_summary(alerts, now=now)

    assert [(e.name, e.count) for e in summary.top_sources] == [
        ("beta", 2),
        ("alpha", 2),
        ("gamma", 1),
        ("Zabbix", 1),
    ]


def test_rankings_are_truncated(now, make_alert):
    ts = now - timedelta(minutes=5)
    alerts = []
    for i in range(12):
        alerts.extend(make_alert(ts, source_label=f"src-{i}", name=f"alert-{i}") for _ in range(12 - i))
    summary = build_analytics_summary(alerts, now=now)

    assert len(summary.top_sources) == 8
    assert len(summary.top_noisy_alerts) == 6
    assert summary.top_sources[0].name == "src-0"
    assert summary.top_noisy_alerts[-1].name == "alert-5"
    counts = [e.count for e in summary.top_sources]
    assert counts == sorted(counts, reverse=True)

    custom = build_analytics_summary(alerts, now=now, top_sources_limit=3, top_noisy_limit=2)
    assert len(custom.top_sources) == 3
    assert len(custom.top_noisy_alerts) == 2


def test_unparseable_alerts_still_ranked(now, make_alert):
    alerts = [make_alert("n/a", name="Flapping"), make_alert("n/a", name="Flapping")]
    summary = build_analytics_summary(alerts, now=now)
    assert summary.top_noisy_alerts[0].name == "Flapping"
    assert summary.top_noisy_alerts[0].count == 2
    assert summary.mean_duration == 0
    assert summary.frequency_7d.total == 0


def test_median_uses_upper_middle_element():
    assert median_age([10, 20, 30, 40]) == 30
    assert median_age([40, 10, 30, 20]) == 30
    assert median_age([5, 1, 3]) == 3
    assert median_age([7]) == 7
    assert median_age([]) == 0


def test_duration_proxies(now, make_alert):
    minute = 60_000
    alerts = [
        make_alert(now - timedelta(minutes=1)),
        make_alert(now - timedelta(minutes=2)),
        make_alert(now - timedelta(minutes=3)),
        make_alert(now - timedelta(minutes=6)),
        make_alert(now + timedelta(hours=2)),  # future: age clamps to 0
        make_alert("bad"),
    ]
    summary = build_analytics_summary(alerts, now=now)

    assert summary.mean_duration == (1 + 2 + 3 + 6) * minute / 5
    # sorted ages: [0, 1, 2, 3, 6] minutes -> index 2
    assert summary.median_duration == 2 * minute


def test_frequency_windows(now, make_alert):
    alerts = [
        make_alert(datetime(2026, 10, 14, 8, 0)),
        make_alert(datetime(2026, 10, 14, 9, 0)),
        make_alert(datetime(2026, 10, 17, 9, 0)),
        make_alert(datetime(2026, 10, 17, 10, 0)),  # ties Oct 14: first day wins
        make_alert(datetime(2026, 10, 19, 12, 0)),
        make_alert(datetime(2026, 10, 1, 12, 0)),  # 30d only
        make_alert(datetime(2026, 10, 1, 13, 0)),
        make_alert(datetime(2026, 10, 1, 14, 0)),
        make_alert(datetime(2026, 9, 19, 23, 0)),  # before both windows
    ]
    summary = build_analytics_summary(alerts, now=now)

    f7 = summary.frequency_7d
    assert f7.total == 5
    assert f7.average == 5 / 7
    assert f7.busiest.date == "Oct 14"
    assert f7.busiest.count == 2

    f30 = summary.frequency_30d
    assert f30.total == 8
    assert f30.average == 8 / 30
    assert f30.busiest.date == "Oct 1"
    assert f30.busiest.count == 3


def test_team_stats_from_explicit_config(now, make_alert):
    teams = (
        TeamConfig(id="metrics", name="Metrics", sources=frozenset({"Prometheus"})),
        TeamConfig(id="all", name="Everything", sources=frozenset({"Prometheus", "Zabbix"})),
        TeamConfig(id="uptime", name="Uptime", sources=frozenset({"Kuma"})),
    )
    latest = datetime(2026, 10, 19, 14, 0)
    alerts = [
        make_alert(datetime(2026, 10, 19, 9, 0), source="Prometheus", source_label="prom-a", severity="critical"),
        make_alert(latest, source="Prometheus", source_label="prom-b"),
        make_alert(datetime(2026, 10, 18, 9, 0), source="Prometheus", source_label="prom-b", severity="critical"),
        make_alert("unknown", source="Zabbix", severity="critical"),
    ]
    stats = {t.id: t for t in build_analytics_summary(alerts, teams=teams, now=now).team_stats}

    metrics = stats["metrics"]
    assert metrics.name == "Metrics"
    assert metrics.total == 3
    assert metrics.critical == 2
    assert metrics.top_label == "prom-b"
    assert metrics.last_seen == epoch_ms(latest)

    # Overlapping membership: Prometheus alerts count for both teams.
    everything = stats["all"]
    assert everything.total == 4
    assert everything.critical == 3
    assert everything.last_seen == epoch_ms(latest)

    uptime = stats["uptime"]
    assert (uptime.total, uptime.critical, uptime.top_label, uptime.last_seen) == (0, 0, "None", 0)


def test_team_top_label_none_when_only_blank_labels(now, make_alert):
    alerts = [make_alert(now, source="Kuma", source_label=" ")]
    stats = {t.id: t for t in build_analytics_summary(alerts, now=now).team_stats}
    assert stats["apps"].total == 1
    assert stats["apps"].top_label == "None"


def test_summary_is_idempotent(now, make_alert):
    alerts = [make_alert(now - timedelta(hours=h), source_label=f"s{h % 3}") for h in range(50)]
    first = build_analytics_summary(alerts, now=now)
    second = build_analytics_summary(alerts, now=now)
    assert first == second
    assert first.model_dump(by_alias=True) == second.model_dump(by_alias=True)
