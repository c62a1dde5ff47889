# Project FinSight - Project profitability analytics for SMBs
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Rule-based early warnings for a project rollup.

Every rule is evaluated; all the rules that fire are returned, in rule
order:

1. margin erosion   - last month's margin is more than 5 points below the
                      month before (high),
2. budget overrun   - cash outflow above budget (high above 20%, medium
                      above 10%, low otherwise),
3. revenue shortfall - negative cash-basis net profit (high),
4. negative trend   - profit fell in at least 2 of the last 3 months
                      (medium).
"""

from decimal import Decimal

from .models import (
    ZERO,
    EarlyWarning,
    ProjectFinancialDetail,
    WarningSeverity,
    WarningType,
)

MARGIN_EROSION_POINTS = Decimal("-5")
OVERRUN_HIGH_PERCENT = Decimal("20")
OVERRUN_MEDIUM_PERCENT = Decimal("10")
TREND_MONTHS = 3
TREND_MIN_DECLINES = 2


def _overrun_severity(overrun_percent: Decimal) -> WarningSeverity:
    if overrun_percent > OVERRUN_HIGH_PERCENT:
        return WarningSeverity.HIGH
    if overrun_percent > OVERRUN_MEDIUM_PERCENT:
        return WarningSeverity.MEDIUM
    return WarningSeverity.LOW


def detect_early_warnings(detail: ProjectFinancialDetail) -> list[EarlyWarning]:
    """Return every warning raised by the rollup (possibly none)."""
    warnings: list[EarlyWarning] = []
    months = detail.monthly_breakdown

    if len(months) >= 2:
        margin_change = months[-1].profit_margin - months[-2].profit_margin
        if margin_change < MARGIN_EROSION_POINTS:
            warnings.append(
                EarlyWarning(
                    severity=WarningSeverity.HIGH,
                    type=WarningType.MARGIN_EROSION,
                    message=(
                        f"Profit margin declined by {abs(margin_change):.1f} "
                        "points last month"
                    ),
                    recommendation=(
                        "Review recent cost increases and consider pricing "
                        "adjustments"
                    ),
                )
            )

    budget = detail.budget_vs_actual
    if budget.variance < 0:
        overrun = abs(budget.variance_percent)
        warnings.append(
            EarlyWarning(
                severity=_overrun_severity(overrun),
                type=WarningType.BUDGET_OVERRUN,
                message=f"Project is {overrun:.1f}% over budget",
                recommendation="Implement cost controls and review expense categories",
            )
        )

    if detail.net_profit < 0:
        warnings.append(
            EarlyWarning(
                severity=WarningSeverity.HIGH,
                type=WarningType.REVENUE_SHORTFALL,
                message="Project is currently operating at a loss",
                recommendation=(
                    "Increase revenue through pricing or reduce operational costs"
                ),
            )
        )

    if len(months) >= TREND_MONTHS:
        declines = sum(
            1 for m in months[-TREND_MONTHS:] if (m.profit_change or ZERO) < 0
        )
        if declines >= TREND_MIN_DECLINES:
            warnings.append(
                EarlyWarning(
                    severity=WarningSeverity.MEDIUM,
                    type=WarningType.NEGATIVE_TREND,
                    message="Profit declining for multiple consecutive months",
                    recommendation=(
                        "Analyze cost drivers and revenue patterns to reverse "
                        "the trend"
                    ),
                )
            )

    return warnings
