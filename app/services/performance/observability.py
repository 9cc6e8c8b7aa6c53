"""Prometheus metrics for performance scoring."""

from __future__ import annotations

from prometheus_client import Counter, Histogram

EMPLOYEE_COMPUTATIONS = Counter(
    "performance_employee_computations_total",
    "Employee performance computations",
    ["status"],  # status: success, skipped
)

AGGREGATE_LATENCY = Histogram(
    "performance_aggregate_seconds",
    "Time to compute an aggregate performance view",
    ["scope"],  # scope: team, team_dashboard, all_teams, department, company, trend, all_employees
)
