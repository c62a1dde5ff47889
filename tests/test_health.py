from decimal import Decimal

import pytest

from project_finsight.health import compute_health_score, rating_for
from project_finsight.models import (
    BudgetVsActual,
    HealthRating,
    MonthlyMetrics,
    Project,
    ProjectFinancialDetail,
)


def _months(*profit_changes):
    """Breakdown whose months after the first carry the given profit changes."""
    months = [
        MonthlyMetrics(
            month="2025-01",
            revenue=Decimal(0),
            expenses=Decimal(0),
            net_profit=Decimal(0),
            profit_margin=Decimal(0),
        )
    ]
    for i, change in enumerate(profit_changes, start=2):
        months.append(
            MonthlyMetrics(
                month=f"2025-{i:02d}",
                revenue=Decimal(0),
                expenses=Decimal(0),
                net_profit=Decimal(0),
                profit_margin=Decimal(0),
                revenue_change=Decimal(0),
                expenses_change=Decimal(0),
                profit_change=None if change is None else Decimal(str(change)),
                margin_change=Decimal(0),
            )
        )
    return tuple(months)


def _detail(margin=0, variance_percent=0, months=(), budget=10000):
    budget = Decimal(budget)
    variance_percent = Decimal(str(variance_percent))
    variance = budget * variance_percent / 100
    return ProjectFinancialDetail(
        project=Project(id="p1", name="P", budget=budget, start_date="2025-01-01"),
        expected_revenue=Decimal(0),
        paid_revenue=Decimal(0),
        total_op_expenses=Decimal(0),
        paid_op_expenses=Decimal(0),
        total_payables=Decimal(0),
        paid_payables=Decimal(0),
        outstanding_payables=Decimal(0),
        net_profit=Decimal(0),
        net_profit_expected=Decimal(0),
        profit_margin=Decimal(str(margin)),
        projected_revenue=Decimal(0),
        projected_expenses=Decimal(0),
        budget_vs_actual=BudgetVsActual(
            budget=budget,
            actual=budget - variance,
            variance=variance,
            variance_percent=variance_percent,
        ),
        monthly_breakdown=months,
    )


def test_perfect_project_scores_100() -> None:
    health = compute_health_score(_detail(margin=30, variance_percent=0, months=_months(25, 25, 25)))

    assert health.score == 100
    assert health.rating is HealthRating.EXCELLENT
    assert health.factors.profit_margin == 100
    assert health.factors.cost_control == 100
    assert health.factors.trend == 100


def test_neutral_trend_with_short_history() -> None:
    health = compute_health_score(_detail(margin=15, months=_months()))

    # 50*0.4 + 100*0.3 + 50*0.3
    assert health.score == 65
    assert health.rating is HealthRating.GOOD
    assert health.factors.profit_margin == 50
    assert health.factors.trend == 50


def test_trend_averages_last_three_profit_changes() -> None:
    # last three: 10, -20, None -> avg (10 - 20 + 0) / 3 = -3.33
    health = compute_health_score(_detail(months=_months(90, 10, -20, None)))

    assert health.factors.trend == 43


def test_overrun_penalised_more_than_underrun_rewarded() -> None:
    # variance = budget - actual: negative means over budget
    over = compute_health_score(_detail(variance_percent=-20))
    under = compute_health_score(_detail(variance_percent=20))

    assert over.factors.cost_control == 80
    assert under.factors.cost_control == 100
    half_over = compute_health_score(_detail(variance_percent=-50))
    assert half_over.factors.cost_control == 50


def test_cost_factor_symmetry_of_penalty() -> None:
    """A 10% overrun loses 10 points, an underrun never exceeds 100."""
    assert compute_health_score(_detail(variance_percent=-10)).factors.cost_control == 90
    assert compute_health_score(_detail(variance_percent=80)).factors.cost_control == 100


@pytest.mark.parametrize(
    "margin, variance_percent, changes",
    [
        (-500, -900, (-1000, -1000, -1000)),
        (10_000, 10_000, (1e6, 1e6, 1e6)),
        (0, 0, ()),
        (-30, 50, (None, None)),
    ],
)
def test_score_stays_within_bounds(margin, variance_percent, changes) -> None:
    health = compute_health_score(
        _detail(margin=margin, variance_percent=variance_percent, months=_months(*changes))
    )

    assert 0 <= health.score <= 100
    for factor in (
        health.factors.profit_margin,
        health.factors.cost_control,
        health.factors.trend,
    ):
        assert 0 <= factor <= 100


def test_pathological_project_is_critical() -> None:
    health = compute_health_score(
        _detail(margin=-500, variance_percent=-300, months=_months(-100, -100, -100))
    )

    assert health.score == 0
    assert health.rating is HealthRating.CRITICAL


@pytest.mark.parametrize(
    "score, rating",
    [
        (100, HealthRating.EXCELLENT),
        (80, HealthRating.EXCELLENT),
        (79, HealthRating.GOOD),
        (60, HealthRating.GOOD),
        (59, HealthRating.FAIR),
        (40, HealthRating.FAIR),
        (39, HealthRating.POOR),
        (20, HealthRating.POOR),
        (19, HealthRating.CRITICAL),
        (0, HealthRating.CRITICAL),
    ],
)
def test_rating_thresholds(score: int, rating: HealthRating) -> None:
    assert rating_for(score) is rating
