# Project FinSight - Project profitability analytics for SMBs
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Monthly metrics aggregation.

This module buckets paid ledger activity into calendar months and computes
month-over-month deltas. It is used both for the tenant-wide dashboard and,
scoped to one project's records, for the project rollup (rollup.py).

Bucketing rules
---------------
For a window of months (default: the 6 months ending with the current
month, oldest first):

- paid invoices add their net revenue (after applied credit notes) to
  ``revenue``,
- paid expenses and paid payable invoices add their amount to
  ``expenses`` (operational costs and vendor bills are one figure at this
  granularity),
- records dated outside the window are ignored, never folded into the
  nearest bucket,
- records whose date cannot be parsed are skipped and reported (see
  ``MonthlyAggregation.skipped``) so one bad row cannot break the series.

Derived fields
--------------
- ``net_profit = revenue - expenses``
- ``profit_margin = net_profit / revenue * 100`` (0 when revenue is 0)
- for every bucket but the first:
    - ``revenue_change`` / ``expenses_change``: percent change, with a
      previous value of 0 giving 100 (current > 0) or 0,
    - ``profit_change``: percent change against ``abs(previous)``, with a
      previous profit of 0 giving 0,
    - ``margin_change``: difference in margin points.

  The zero-handling of ``profit_change`` differs from the revenue and
  expense changes. Existing dashboards rely on it; keep it as is.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Optional

from .credits import allocate_credits, net_revenue
from .logging_config import get_logger
from .models import (
    HUNDRED,
    ZERO,
    ComparisonPeriod,
    CreditNote,
    Expense,
    ExpenseStatus,
    Invoice,
    InvoiceStatus,
    MonthlyMetrics,
    PayableInvoice,
    PayableStatus,
    PeriodComparison,
)
from .periods import comparison_lag, month_key, month_window

logger = get_logger("monthly")


@dataclass(frozen=True)
class SkippedRecord:
    """A record left out of the monthly buckets because of its date."""

    kind: str
    record_id: str
    raw_date: Any


@dataclass(frozen=True)
class MonthlyAggregation:
    """
    Result of ``aggregate_monthly``.

    Attributes
    ----------
    metrics :
        One MonthlyMetrics per month of the window, oldest first.
    skipped :
        Paid records whose date could not be parsed.
    out_of_window :
        Number of paid records dated outside the window.
    """

    metrics: list[MonthlyMetrics]
    skipped: tuple[SkippedRecord, ...]
    out_of_window: int


def _growth_change(curr: Decimal, prev: Decimal) -> Decimal:
    if prev == 0:
        return HUNDRED if curr > 0 else ZERO
    return (curr - prev) / prev * HUNDRED


def _profit_change(curr: Decimal, prev: Decimal) -> Decimal:
    if prev == 0:
        return ZERO
    return (curr - prev) / abs(prev) * HUNDRED


def margin_percent(profit: Decimal, revenue: Decimal) -> Decimal:
    """Return ``profit / revenue * 100``, or 0 when revenue is not positive."""
    if revenue > 0:
        return profit / revenue * HUNDRED
    return ZERO


def aggregate_monthly(
    invoices: Optional[Iterable[Invoice]],
    expenses: Optional[Iterable[Expense]],
    payables: Optional[Iterable[PayableInvoice]] = None,
    credit_notes: Optional[Iterable[CreditNote]] = None,
    window_months: int = 6,
    reference_date: Optional[date] = None,
) -> MonthlyAggregation:
    """Bucket paid activity into months and report what was left out.

    Steps:
        1. Build the applied-credit map.
        2. Initialise one zeroed bucket per month of the window.
        3. Add paid invoices (net of credits), paid expenses and paid
           payables to the bucket of their month.
        4. Compute profit and margin per bucket, then the deltas against
           the previous bucket.

    Args:
        invoices, expenses, payables, credit_notes:
            Record sets, possibly pre-scoped to one project. ``None`` is
            treated as an empty collection.
        window_months:
            Number of months in the window (default 6).
        reference_date:
            Any date in the last month of the window (default: today).

    Returns:
        A MonthlyAggregation with the metrics and the skipped records.
    """
    credits = allocate_credits(credit_notes)
    months = month_window(window_months, reference_date)
    revenue: dict[str, Decimal] = {m: ZERO for m in months}
    outflow: dict[str, Decimal] = {m: ZERO for m in months}

    skipped: list[SkippedRecord] = []
    out_of_window = 0

    def _bucket(kind: str, record_id: str, raw_date: Any) -> Optional[str]:
        nonlocal out_of_window
        key = month_key(raw_date)
        if key is None:
            skipped.append(SkippedRecord(kind, record_id, raw_date))
            return None
        if key not in revenue:
            out_of_window += 1
            logger.debug(
                "monthly_record_out_of_window",
                extra={"kind": kind, "record_id": record_id, "month": key},
            )
            return None
        return key

    for inv in invoices or ():
        if inv.status is not InvoiceStatus.PAID:
            continue
        key = _bucket("invoice", inv.id, inv.date)
        if key is not None:
            revenue[key] += net_revenue(inv, credits)

    for exp in expenses or ():
        if exp.status is not ExpenseStatus.PAID:
            continue
        key = _bucket("expense", exp.id, exp.date)
        if key is not None:
            outflow[key] += exp.amount

    for pay in payables or ():
        if pay.status is not PayableStatus.PAID:
            continue
        key = _bucket("payable", pay.id, pay.date)
        if key is not None:
            outflow[key] += pay.amount

    if skipped:
        logger.warning(
            "monthly_dates_skipped",
            extra={
                "count": len(skipped),
                "records": [f"{s.kind}:{s.record_id}" for s in skipped],
            },
        )

    metrics: list[MonthlyMetrics] = []
    prev: Optional[MonthlyMetrics] = None
    for month in months:
        rev = revenue[month]
        exp_total = outflow[month]
        profit = rev - exp_total
        margin = margin_percent(profit, rev)

        if prev is None:
            current = MonthlyMetrics(
                month=month,
                revenue=rev,
                expenses=exp_total,
                net_profit=profit,
                profit_margin=margin,
            )
        else:
            current = MonthlyMetrics(
                month=month,
                revenue=rev,
                expenses=exp_total,
                net_profit=profit,
                profit_margin=margin,
                revenue_change=_growth_change(rev, prev.revenue),
                expenses_change=_growth_change(exp_total, prev.expenses),
                profit_change=_profit_change(profit, prev.net_profit),
                margin_change=margin - prev.profit_margin,
            )
        metrics.append(current)
        prev = current

    return MonthlyAggregation(
        metrics=metrics,
        skipped=tuple(skipped),
        out_of_window=out_of_window,
    )


def compute_monthly_metrics(
    invoices: Optional[Iterable[Invoice]],
    expenses: Optional[Iterable[Expense]],
    payables: Optional[Iterable[PayableInvoice]] = None,
    credit_notes: Optional[Iterable[CreditNote]] = None,
    window_months: int = 6,
    reference_date: Optional[date] = None,
) -> list[MonthlyMetrics]:
    """Return the monthly metrics series (see ``aggregate_monthly``)."""
    return aggregate_monthly(
        invoices,
        expenses,
        payables,
        credit_notes,
        window_months=window_months,
        reference_date=reference_date,
    ).metrics


def compare_periods(
    metrics: Sequence[MonthlyMetrics],
    index: int,
    period: ComparisonPeriod = ComparisonPeriod.MOM,
) -> Optional[PeriodComparison]:
    """
    Compare the bucket at ``index`` with the bucket one period earlier.

    MoM compares with the previous bucket, QoQ with the bucket 3 months
    earlier and YoY with the bucket 12 months earlier. The change formulas
    are the month-over-month ones. Returns ``None`` when the series has no
    bucket at that distance (the window is too short, or ``index`` is out
    of range).
    """
    lag = comparison_lag(period)
    if index < 0 or index >= len(metrics) or index - lag < 0:
        return None

    curr = metrics[index]
    prev = metrics[index - lag]
    return PeriodComparison(
        period=ComparisonPeriod(period),
        month=curr.month,
        compared_month=prev.month,
        revenue_change=_growth_change(curr.revenue, prev.revenue),
        expenses_change=_growth_change(curr.expenses, prev.expenses),
        profit_change=_profit_change(curr.net_profit, prev.net_profit),
        margin_change=curr.profit_margin - prev.profit_margin,
    )
