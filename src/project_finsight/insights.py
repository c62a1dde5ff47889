# Project FinSight - Project profitability analytics for SMBs
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Templated month-over-month insights.

Each consecutive pair of months in a breakdown gets one sentence chosen
from five templates, depending on the profit change and on how revenue
and expenses moved. This is deterministic text generation; it needs no
network access and is always available, unlike the AI advisor.
"""

from collections.abc import Sequence
from decimal import Decimal
from typing import Optional

from .models import (
    ZERO,
    AutoInsight,
    InsightMetrics,
    InsightTrend,
    MonthlyMetrics,
)

STABLE_THRESHOLD = Decimal("5")


def classify_change(
    profit_change: Decimal,
    revenue_change: Decimal,
    expense_change: Decimal,
) -> InsightTrend:
    """Pick the narrative for one month-over-month change."""
    if abs(profit_change) < STABLE_THRESHOLD:
        return InsightTrend.STABLE
    if profit_change > 0:
        if revenue_change > expense_change:
            return InsightTrend.REVENUE_GROWTH
        return InsightTrend.COST_REDUCTION
    if expense_change > revenue_change:
        return InsightTrend.COST_DRIVEN_DECLINE
    return InsightTrend.REVENUE_DECLINE


def _sentence(
    trend: InsightTrend,
    profit_change: Decimal,
    revenue_change: Decimal,
    expense_change: Decimal,
) -> str:
    if trend is InsightTrend.STABLE:
        return (
            "Profit remained relatively stable with minimal changes in revenue "
            "and expenses."
        )
    if trend is InsightTrend.REVENUE_GROWTH:
        return (
            f"Profit increased by {profit_change:.1f}% primarily due to "
            f"{revenue_change:.1f}% revenue growth outpacing "
            f"{expense_change:.1f}% expense increase."
        )
    if trend is InsightTrend.COST_REDUCTION:
        return (
            f"Profit improved by {profit_change:.1f}% thanks to "
            f"{abs(expense_change):.1f}% reduction in expenses."
        )
    if trend is InsightTrend.COST_DRIVEN_DECLINE:
        return (
            f"Profit declined by {abs(profit_change):.1f}% as expenses increased "
            f"{expense_change:.1f}% while revenue only grew {revenue_change:.1f}%."
        )
    return (
        f"Profit decreased by {abs(profit_change):.1f}% due to "
        f"{abs(revenue_change):.1f}% revenue decline."
    )


def _or_zero(value: Optional[Decimal]) -> Decimal:
    return ZERO if value is None else value


def generate_auto_insights(
    monthly_breakdown: Optional[Sequence[MonthlyMetrics]],
) -> list[AutoInsight]:
    """
    Return one insight per consecutive pair of months, oldest first.

    Missing change fields count as 0. A breakdown of fewer than two months
    yields no insight.
    """
    months = list(monthly_breakdown or ())
    insights: list[AutoInsight] = []

    for previous, current in zip(months, months[1:]):
        revenue_change = _or_zero(current.revenue_change)
        expense_change = _or_zero(current.expenses_change)
        profit_change = _or_zero(current.profit_change)

        trend = classify_change(profit_change, revenue_change, expense_change)
        insights.append(
            AutoInsight(
                month=current.month,
                previous_month=previous.month,
                insight=_sentence(trend, profit_change, revenue_change, expense_change),
                metrics=InsightMetrics(
                    revenue_change=revenue_change,
                    expense_change=expense_change,
                    profit_change=profit_change,
                ),
                trend=trend,
            )
        )

    return insights
