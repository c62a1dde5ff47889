# Project FinSight - Project profitability analytics for SMBs
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Project financial rollup.

``compute_project_financials`` builds the full P&L of one project from the
tenant ledger:

- records are scoped by ``project_id`` equality; records pointing to an
  unknown or missing project simply do not belong to any rollup,
- credit notes are scoped by ``project_id`` first, then only ``applied``
  ones are allocated to their invoices,
- revenue is reported on two bases: expected (every non-cancelled invoice)
  and paid (paid invoices only), both net of credits,
- outflow is split into operational expenses and payable invoices
  (vendor bills), each on a total (non-cancelled) and paid basis,
- the budget is compared with the cash-basis outflow only, since a budget
  tracks what has actually been spent,
- the monthly breakdown is the monthly aggregator run on the scoped records.
"""

from collections.abc import Iterable
from datetime import date
from decimal import Decimal
from typing import Optional

from .credits import allocate_credits, net_revenue
from .logging_config import get_logger
from .models import (
    HUNDRED,
    ZERO,
    BudgetVsActual,
    CreditNote,
    CreditNoteStatus,
    Expense,
    ExpenseStatus,
    Invoice,
    InvoiceStatus,
    LedgerSnapshot,
    PayableInvoice,
    PayableStatus,
    Project,
    ProjectFinancialDetail,
)
from .monthly import compute_monthly_metrics, margin_percent

logger = get_logger("rollup")


def _total(amounts: Iterable[Decimal]) -> Decimal:
    return sum(amounts, ZERO)


def compute_project_financials(
    project: Project,
    invoices: Optional[Iterable[Invoice]],
    expenses: Optional[Iterable[Expense]],
    payables: Optional[Iterable[PayableInvoice]] = None,
    credit_notes: Optional[Iterable[CreditNote]] = None,
    window_months: int = 6,
    reference_date: Optional[date] = None,
) -> ProjectFinancialDetail:
    """
    Compute the ProjectFinancialDetail of one project.

    Parameters
    ----------
    project:
        The project to roll up.
    invoices, expenses, payables, credit_notes:
        Ledger records, typically for the whole tenant. Only the records
        whose ``project_id`` equals ``project.id`` are used. ``None`` is
        treated as an empty collection.
    window_months, reference_date:
        Window of the monthly breakdown (see ``compute_monthly_metrics``).

    Returns
    -------
    ProjectFinancialDetail
    """
    pid = project.id
    project_invoices = [i for i in invoices or () if i.project_id == pid]
    project_expenses = [e for e in expenses or () if e.project_id == pid]
    project_payables = [p for p in payables or () if p.project_id == pid]
    project_credits = [
        c
        for c in credit_notes or ()
        if c.project_id == pid and c.status is CreditNoteStatus.APPLIED
    ]

    credits = allocate_credits(project_credits)

    # Revenue (net of applied credits)
    expected_revenue = _total(
        net_revenue(i, credits)
        for i in project_invoices
        if i.status is not InvoiceStatus.CANCELLED
    )
    paid_revenue = _total(
        net_revenue(i, credits)
        for i in project_invoices
        if i.status is InvoiceStatus.PAID
    )

    # Operational expenses
    total_op_expenses = _total(
        e.amount for e in project_expenses if e.status is not ExpenseStatus.CANCELLED
    )
    paid_op_expenses = _total(
        e.amount for e in project_expenses if e.status is ExpenseStatus.PAID
    )

    # Payables (liabilities)
    total_payables = _total(
        p.amount for p in project_payables if p.status is not PayableStatus.CANCELLED
    )
    paid_payables = _total(
        p.amount for p in project_payables if p.status is PayableStatus.PAID
    )
    outstanding_payables = _total(
        p.amount
        for p in project_payables
        if p.status not in (PayableStatus.PAID, PayableStatus.CANCELLED)
    )

    cash_outflow = paid_op_expenses + paid_payables
    expected_outflow = total_op_expenses + total_payables

    net_profit = paid_revenue - cash_outflow
    net_profit_expected = expected_revenue - expected_outflow
    profit_margin = margin_percent(net_profit, paid_revenue)

    budget = project.budget
    variance = budget - cash_outflow
    variance_percent = variance / budget * HUNDRED if budget > 0 else ZERO

    monthly_breakdown = compute_monthly_metrics(
        project_invoices,
        project_expenses,
        project_payables,
        project_credits,
        window_months=window_months,
        reference_date=reference_date,
    )

    logger.debug(
        "project_rollup_computed",
        extra={
            "project_id": pid,
            "invoices": len(project_invoices),
            "expenses": len(project_expenses),
            "payables": len(project_payables),
            "credit_notes": len(project_credits),
        },
    )

    return ProjectFinancialDetail(
        project=project,
        expected_revenue=expected_revenue,
        paid_revenue=paid_revenue,
        total_op_expenses=total_op_expenses,
        paid_op_expenses=paid_op_expenses,
        total_payables=total_payables,
        paid_payables=paid_payables,
        outstanding_payables=outstanding_payables,
        net_profit=net_profit,
        net_profit_expected=net_profit_expected,
        profit_margin=profit_margin,
        projected_revenue=expected_revenue,
        projected_expenses=expected_outflow,
        budget_vs_actual=BudgetVsActual(
            budget=budget,
            actual=cash_outflow,
            variance=variance,
            variance_percent=variance_percent,
        ),
        monthly_breakdown=tuple(monthly_breakdown),
    )


def compute_portfolio_financials(
    snapshot: LedgerSnapshot,
    window_months: int = 6,
    reference_date: Optional[date] = None,
) -> list[ProjectFinancialDetail]:
    """Roll up every project of a snapshot, in snapshot order."""
    return [
        compute_project_financials(
            project,
            snapshot.invoices,
            snapshot.expenses,
            snapshot.payables,
            snapshot.credit_notes,
            window_months=window_months,
            reference_date=reference_date,
        )
        for project in snapshot.projects
    ]
