# Project FinSight - Project profitability analytics for SMBs
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""What-if simulation of cost and pricing adjustments."""

from typing import Any

from .models import HUNDRED, ZERO, ScenarioResult, to_decimal
from .monthly import margin_percent


def simulate_scenario(
    revenue: Any,
    expenses: Any,
    profit: Any,
    margin: Any,
    cost_adjustment_pct: Any = 0,
    pricing_adjustment_pct: Any = 0,
) -> ScenarioResult:
    """
    Apply percentage adjustments to revenue and expenses.

    The adjustments are not range-checked: dashboards bound the sliders
    (cost +/-50%, pricing +/-30%) but any value is accepted here.

    Args:
        revenue, expenses, profit, margin:
            Current figures (e.g. ``paid_revenue``, cash outflow,
            ``net_profit`` and ``profit_margin`` of a rollup).
        cost_adjustment_pct:
            Percentage applied to expenses (``-10`` cuts costs by 10%).
        pricing_adjustment_pct:
            Percentage applied to revenue.

    Returns:
        A ScenarioResult. ``change_percent`` is relative to ``abs(profit)``
        and is 0 when the current profit is 0.
    """
    revenue = to_decimal(revenue)
    expenses = to_decimal(expenses)
    profit = to_decimal(profit)
    margin = to_decimal(margin)

    adjusted_revenue = revenue * (1 + to_decimal(pricing_adjustment_pct) / HUNDRED)
    adjusted_expenses = expenses * (1 + to_decimal(cost_adjustment_pct) / HUNDRED)
    projected_profit = adjusted_revenue - adjusted_expenses
    change = projected_profit - profit

    return ScenarioResult(
        original_profit=profit,
        projected_profit=projected_profit,
        change=change,
        change_percent=change / abs(profit) * HUNDRED if profit != 0 else ZERO,
        new_margin=margin_percent(projected_profit, adjusted_revenue),
        original_margin=margin,
        adjusted_revenue=adjusted_revenue,
        adjusted_expenses=adjusted_expenses,
    )
