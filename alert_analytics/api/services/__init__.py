"""Business-logic layer: pure alert aggregation, no persistence.

Analytics engine services live in:
- trend_builder.py (dense time-bucketed series per range)
- summary_aggregator.py (period counts, rankings, age proxies, frequency, team rollups)
- formatting.py (period deltas, durations, stat cards)
- analytics_service.py (request-scoped glue that applies the loaded config)
"""

# Import side-effects are intentionally avoided here; modules are imported by routers/services as needed.
