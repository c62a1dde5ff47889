# Project FinSight - Project profitability analytics for SMBs
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Project FinSight
----------------

A Python engine that turns a tenant's ledger (invoices, expenses, vendor
bills, credit notes, projects) into comparable financial metrics. Every
computation is a pure function of an in-memory snapshot: nothing is read
from or written to storage, and nothing is cached between calls.

Main capabilities:
- credit allocation (applied credit notes reduce invoice revenue, floored
  at zero),
- monthly revenue / expense / profit series with period-over-period deltas
  (MoM, QoQ, YoY),
- per-project P&L on cash and accrual bases, with budget variance,
- project health score and rule-based early warnings,
- what-if scenario simulation,
- templated month-over-month insights,
- pandas views for dashboards and exports (portfolio summary, revenue
  breakdown).

Usage:
    from project_finsight import compute_project_financials, compute_health_score
"""

from .credits import allocate_credits, net_revenue
from .early_warnings import detect_early_warnings
from .health import compute_health_score
from .insights import generate_auto_insights
from .monthly import aggregate_monthly, compare_periods, compute_monthly_metrics
from .rollup import compute_portfolio_financials, compute_project_financials
from .scenario import simulate_scenario

__all__ = [
    "aggregate_monthly",
    "allocate_credits",
    "compare_periods",
    "compute_health_score",
    "compute_monthly_metrics",
    "compute_portfolio_financials",
    "compute_project_financials",
    "detect_early_warnings",
    "generate_auto_insights",
    "net_revenue",
    "simulate_scenario",
]

__version__ = "0.1.0"
