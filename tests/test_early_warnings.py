from decimal import Decimal

import pytest

from project_finsight.early_warnings import detect_early_warnings
from project_finsight.models import (
    BudgetVsActual,
    MonthlyMetrics,
    Project,
    ProjectFinancialDetail,
    WarningSeverity,
    WarningType,
)


def _month(month, margin=0, profit_change=None):
    return MonthlyMetrics(
        month=month,
        revenue=Decimal(0),
        expenses=Decimal(0),
        net_profit=Decimal(0),
        profit_margin=Decimal(str(margin)),
        profit_change=None if profit_change is None else Decimal(str(profit_change)),
    )


def _detail(net_profit=100, variance=0, variance_percent=0, months=()):
    return ProjectFinancialDetail(
        project=Project(id="p1", name="P", budget=1000, start_date="2025-01-01"),
        expected_revenue=Decimal(0),
        paid_revenue=Decimal(0),
        total_op_expenses=Decimal(0),
        paid_op_expenses=Decimal(0),
        total_payables=Decimal(0),
        paid_payables=Decimal(0),
        outstanding_payables=Decimal(0),
        net_profit=Decimal(str(net_profit)),
        net_profit_expected=Decimal(0),
        profit_margin=Decimal(0),
        projected_revenue=Decimal(0),
        projected_expenses=Decimal(0),
        budget_vs_actual=BudgetVsActual(
            budget=Decimal(1000),
            actual=Decimal(1000) - Decimal(str(variance)),
            variance=Decimal(str(variance)),
            variance_percent=Decimal(str(variance_percent)),
        ),
        monthly_breakdown=tuple(months),
    )


def _types(warnings):
    return [w.type for w in warnings]


def test_healthy_project_has_no_warnings() -> None:
    months = [_month("2025-04", 30), _month("2025-05", 31, 5), _month("2025-06", 32, 5)]

    assert detect_early_warnings(_detail(months=months)) == []


def test_margin_erosion_above_five_points() -> None:
    months = [_month("2025-05", 40), _month("2025-06", 34.9)]

    warnings = detect_early_warnings(_detail(months=months))

    assert _types(warnings) == [WarningType.MARGIN_EROSION]
    assert warnings[0].severity is WarningSeverity.HIGH
    assert warnings[0].message
    assert warnings[0].recommendation


def test_margin_drop_of_exactly_five_points_is_tolerated() -> None:
    months = [_month("2025-05", 40), _month("2025-06", 35)]

    assert detect_early_warnings(_detail(months=months)) == []


def test_margin_erosion_needs_two_months() -> None:
    assert detect_early_warnings(_detail(months=[_month("2025-06", -80)])) == []


@pytest.mark.parametrize(
    "variance_percent, severity",
    [
        (-25, WarningSeverity.HIGH),
        (-20, WarningSeverity.MEDIUM),
        (-15, WarningSeverity.MEDIUM),
        (-10, WarningSeverity.LOW),
        (-2, WarningSeverity.LOW),
    ],
)
def test_budget_overrun_severity(variance_percent, severity) -> None:
    detail = _detail(variance=variance_percent * 10, variance_percent=variance_percent)

    warnings = detect_early_warnings(detail)

    assert _types(warnings) == [WarningType.BUDGET_OVERRUN]
    assert warnings[0].severity is severity


def test_budget_overrun_without_budget() -> None:
    """A zero budget has a 0% variance; any spending is a low overrun."""
    detail = _detail(variance=-300, variance_percent=0)

    warnings = detect_early_warnings(detail)

    assert warnings[0].type is WarningType.BUDGET_OVERRUN
    assert warnings[0].severity is WarningSeverity.LOW


def test_revenue_shortfall_on_loss() -> None:
    warnings = detect_early_warnings(_detail(net_profit=-1))

    assert _types(warnings) == [WarningType.REVENUE_SHORTFALL]
    assert warnings[0].severity is WarningSeverity.HIGH


def test_negative_trend_two_of_last_three_months() -> None:
    months = [
        _month("2025-03", 10, 50),
        _month("2025-04", 10, -5),
        _month("2025-05", 10, 8),
        _month("2025-06", 10, -1),
    ]

    warnings = detect_early_warnings(_detail(months=months))

    assert _types(warnings) == [WarningType.NEGATIVE_TREND]
    assert warnings[0].severity is WarningSeverity.MEDIUM


def test_negative_trend_ignores_older_months_and_missing_changes() -> None:
    months = [
        _month("2025-03", 10, -50),
        _month("2025-04", 10, -5),
        _month("2025-05", 10, None),
        _month("2025-06", 10, 3),
    ]

    assert detect_early_warnings(_detail(months=months)) == []


def test_all_rules_fire_together() -> None:
    months = [
        _month("2025-04", 20, -10),
        _month("2025-05", 10, -20),
        _month("2025-06", -10, -30),
    ]
    detail = _detail(net_profit=-500, variance=-400, variance_percent=-40, months=months)

    warnings = detect_early_warnings(detail)

    assert _types(warnings) == [
        WarningType.MARGIN_EROSION,
        WarningType.BUDGET_OVERRUN,
        WarningType.REVENUE_SHORTFALL,
        WarningType.NEGATIVE_TREND,
    ]
