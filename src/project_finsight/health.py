# Project FinSight - Project profitability analytics for SMBs
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Project health score.

The score (0-100) is a weighted sum of three sub-scores, each clamped to
[0, 100] before weighting:

- profit margin (weight 0.4): a 30% margin scores 100,
- cost control (weight 0.3): 100 on budget, +50 points per 100% under
  budget, -100 points per 100% over budget,
- trend (weight 0.3): 50 + 2 x the average profit change of the last three
  months, or a neutral 50 with fewer than two months of history.
"""

from decimal import ROUND_HALF_UP, Decimal

from .models import (
    HUNDRED,
    ZERO,
    HealthFactors,
    HealthRating,
    HealthScore,
    ProjectFinancialDetail,
)

MARGIN_WEIGHT = Decimal("0.4")
COST_WEIGHT = Decimal("0.3")
TREND_WEIGHT = Decimal("0.3")

# Margin (in percent) considered a perfect score.
MARGIN_BENCHMARK = Decimal("30")

NEUTRAL_TREND = Decimal("50")
TREND_MONTHS = 3

# Lower bounds, checked from the top.
RATING_THRESHOLDS: tuple[tuple[int, HealthRating], ...] = (
    (80, HealthRating.EXCELLENT),
    (60, HealthRating.GOOD),
    (40, HealthRating.FAIR),
    (20, HealthRating.POOR),
)


def _clamp(value: Decimal) -> Decimal:
    return min(max(value, ZERO), HUNDRED)


def _round(value: Decimal) -> int:
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def rating_for(score: int) -> HealthRating:
    """Map a 0-100 score to its rating."""
    for threshold, rating in RATING_THRESHOLDS:
        if score >= threshold:
            return rating
    return HealthRating.CRITICAL


def compute_health_score(detail: ProjectFinancialDetail) -> HealthScore:
    """Compute the health score of a project rollup."""
    margin_raw = _clamp(detail.profit_margin / MARGIN_BENCHMARK * HUNDRED)

    variance = detail.budget_vs_actual.variance_percent / HUNDRED
    if variance >= 0:
        cost_raw = _clamp(HUNDRED + variance * 50)
    else:
        cost_raw = _clamp(HUNDRED + variance * 100)

    months = detail.monthly_breakdown
    if len(months) < 2:
        trend_raw = NEUTRAL_TREND
    else:
        recent = months[-TREND_MONTHS:]
        changes = [m.profit_change or ZERO for m in recent]
        avg_change = sum(changes, ZERO) / len(changes)
        trend_raw = _clamp(NEUTRAL_TREND + avg_change * 2)

    weighted = (
        margin_raw * MARGIN_WEIGHT + cost_raw * COST_WEIGHT + trend_raw * TREND_WEIGHT
    )
    score = _round(weighted)

    return HealthScore(
        score=score,
        rating=rating_for(score),
        factors=HealthFactors(
            profit_margin=_round(margin_raw),
            cost_control=_round(cost_raw),
            trend=_round(trend_raw),
        ),
    )
