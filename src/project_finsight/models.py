# Project FinSight - Project profitability analytics for SMBs
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Data model for Project FinSight.

This module defines the typed value objects exchanged by the engine:

1. Ledger records
   ---------------
   Invoices, expenses, payable invoices (vendor bills), credit notes and
   projects, as handed over by the storage layer for one tenant. Records
   are frozen dataclasses; their constructors normalise:
   - amounts to ``Decimal`` (so long summations do not drift),
   - status strings to closed enumerations (unknown values raise
     ``ValueError``).

   Dates are kept as given (``date``, ``datetime`` or ISO string) and are
   only parsed when a computation needs a calendar month. A malformed date
   therefore never prevents a record from being built; the monthly
   aggregator skips and reports it instead.

2. LedgerSnapshot
   ---------------
   An immutable, by-value bundle of the five record sets. Every engine
   function works on plain iterables, the snapshot only makes it easy to
   pass a whole tenant around and to scope it to one project.

3. Derived results
   ----------------
   MonthlyMetrics, ProjectFinancialDetail, HealthScore, EarlyWarning,
   ScenarioResult, AutoInsight and PeriodComparison. They are recomputed on
   demand and never cached by the engine.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Optional, Union

DateLike = Union[date, datetime, str]

ZERO = Decimal("0")
HUNDRED = Decimal("100")


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class InvoiceStatus(str, Enum):
    DRAFT = "draft"
    SENT = "sent"
    PAID = "paid"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"
    PENDING = "pending"


class ExpenseStatus(str, Enum):
    PAID = "paid"
    PENDING = "pending"
    CANCELLED = "cancelled"


class ExpenseType(str, Enum):
    FIXED = "fixed"
    VARIABLE = "variable"


class PayableStatus(str, Enum):
    DRAFT = "draft"
    RECEIVED = "received"
    PAID = "paid"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"


class CreditNoteStatus(str, Enum):
    PENDING = "pending"
    APPLIED = "applied"
    VOID = "void"


class ProjectStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    ON_HOLD = "on-hold"
    ARCHIVED = "archived"


class HealthRating(str, Enum):
    EXCELLENT = "Excellent"
    GOOD = "Good"
    FAIR = "Fair"
    POOR = "Poor"
    CRITICAL = "Critical"


class WarningSeverity(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class WarningType(str, Enum):
    MARGIN_EROSION = "margin_erosion"
    BUDGET_OVERRUN = "budget_overrun"
    REVENUE_SHORTFALL = "revenue_shortfall"
    NEGATIVE_TREND = "negative_trend"


class InsightTrend(str, Enum):
    STABLE = "stable"
    REVENUE_GROWTH = "revenue_growth"
    COST_REDUCTION = "cost_reduction"
    COST_DRIVEN_DECLINE = "cost_driven_decline"
    REVENUE_DECLINE = "revenue_decline"


class ComparisonPeriod(str, Enum):
    MOM = "MoM"
    QOQ = "QoQ"
    YOY = "YoY"


# ---------------------------------------------------------------------------
# Coercion helpers
# ---------------------------------------------------------------------------


def to_decimal(value: Any) -> Decimal:
    """Convert a numeric value to ``Decimal``.

    Floats go through ``str()`` so that ``0.1`` becomes ``Decimal("0.1")``
    rather than its binary expansion. ``None`` is treated as zero.

    Raises:
        ValueError: if the value is not numeric (or is NaN/infinite).
    """
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, bool):
        raise ValueError(f"Invalid amount: {value!r}")
    elif isinstance(value, int):
        result = Decimal(value)
    else:
        try:
            result = Decimal(str(value).strip())
        except InvalidOperation as exc:
            raise ValueError(f"Invalid amount: {value!r}") from exc

    if not result.is_finite():
        raise ValueError(f"Invalid amount: {value!r}")
    return result


def _set(obj: Any, name: str, value: Any) -> None:
    object.__setattr__(obj, name, value)


def as_tuple(items: Optional[Iterable[Any]]) -> tuple:
    """Return ``items`` as a tuple, treating ``None`` as an empty collection."""
    if items is None:
        return ()
    return tuple(items)


# ---------------------------------------------------------------------------
# Ledger records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Invoice:
    """Customer invoice. Only ``paid`` invoices are recognised revenue."""

    id: str
    project_id: Optional[str]
    client_name: str
    amount: Decimal
    date: DateLike
    status: InvoiceStatus

    def __post_init__(self) -> None:
        _set(self, "amount", to_decimal(self.amount))
        _set(self, "status", InvoiceStatus(self.status))


@dataclass(frozen=True)
class Expense:
    """Operational expense. Only ``paid`` expenses are a cash outflow."""

    id: str
    project_id: Optional[str]
    category: str
    amount: Decimal
    date: DateLike
    type: ExpenseType
    status: ExpenseStatus

    def __post_init__(self) -> None:
        _set(self, "amount", to_decimal(self.amount))
        _set(self, "type", ExpenseType(self.type))
        _set(self, "status", ExpenseStatus(self.status))


@dataclass(frozen=True)
class PayableInvoice:
    """
    Bill owed to a vendor (a liability).

    ``paid`` bills are a cash outflow; bills that are neither paid nor
    cancelled are "outstanding". ``project_id`` may be ``None`` for bills
    not assigned to any project.
    """

    id: str
    vendor_name: str
    amount: Decimal
    date: DateLike
    due_date: DateLike
    status: PayableStatus
    project_id: Optional[str] = None

    def __post_init__(self) -> None:
        _set(self, "amount", to_decimal(self.amount))
        _set(self, "status", PayableStatus(self.status))


@dataclass(frozen=True)
class CreditNote:
    """Credit issued against an invoice. Only ``applied`` notes reduce revenue."""

    id: str
    invoice_id: Optional[str]
    project_id: Optional[str]
    amount: Decimal
    status: CreditNoteStatus
    reason: Optional[str] = None
    created_at: Optional[DateLike] = None

    def __post_init__(self) -> None:
        _set(self, "amount", to_decimal(self.amount))
        _set(self, "status", CreditNoteStatus(self.status))


@dataclass(frozen=True)
class Project:
    """
    A project owning invoices, expenses, payables and credit notes.

    ``budget`` is compared with the actual paid outflow (expenses plus
    payables), never with accrued outflow.
    """

    id: str
    name: str
    budget: Decimal
    start_date: DateLike
    status: ProjectStatus = ProjectStatus.ACTIVE
    expected_revenue: Optional[Decimal] = None
    end_date: Optional[DateLike] = None

    def __post_init__(self) -> None:
        _set(self, "budget", to_decimal(self.budget))
        _set(self, "status", ProjectStatus(self.status))
        if self.expected_revenue is not None:
            _set(self, "expected_revenue", to_decimal(self.expected_revenue))


@dataclass(frozen=True)
class LedgerSnapshot:
    """Immutable in-memory snapshot of one tenant's records."""

    invoices: tuple[Invoice, ...] = ()
    expenses: tuple[Expense, ...] = ()
    payables: tuple[PayableInvoice, ...] = ()
    credit_notes: tuple[CreditNote, ...] = ()
    projects: tuple[Project, ...] = ()

    @classmethod
    def build(
        cls,
        invoices: Optional[Iterable[Invoice]] = None,
        expenses: Optional[Iterable[Expense]] = None,
        payables: Optional[Iterable[PayableInvoice]] = None,
        credit_notes: Optional[Iterable[CreditNote]] = None,
        projects: Optional[Iterable[Project]] = None,
    ) -> "LedgerSnapshot":
        """Build a snapshot from any iterables; ``None`` means empty."""
        return cls(
            invoices=as_tuple(invoices),
            expenses=as_tuple(expenses),
            payables=as_tuple(payables),
            credit_notes=as_tuple(credit_notes),
            projects=as_tuple(projects),
        )

    def for_project(self, project_id: str) -> "LedgerSnapshot":
        """Return the records referencing ``project_id`` (by equality)."""
        return LedgerSnapshot(
            invoices=tuple(i for i in self.invoices if i.project_id == project_id),
            expenses=tuple(e for e in self.expenses if e.project_id == project_id),
            payables=tuple(p for p in self.payables if p.project_id == project_id),
            credit_notes=tuple(
                c for c in self.credit_notes if c.project_id == project_id
            ),
            projects=tuple(p for p in self.projects if p.id == project_id),
        )


# ---------------------------------------------------------------------------
# Derived results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class MonthlyMetrics:
    """
    One calendar-month bucket.

    The ``*_change`` fields compare with the previous bucket of the same
    series. They are ``None`` for the first bucket, which has no prior
    period to compare with. ``margin_change`` is a difference in points,
    the other changes are percentages.
    """

    month: str
    revenue: Decimal
    expenses: Decimal
    net_profit: Decimal
    profit_margin: Decimal
    revenue_change: Optional[Decimal] = None
    expenses_change: Optional[Decimal] = None
    profit_change: Optional[Decimal] = None
    margin_change: Optional[Decimal] = None


@dataclass(frozen=True)
class BudgetVsActual:
    budget: Decimal
    actual: Decimal
    variance: Decimal
    variance_percent: Decimal


@dataclass(frozen=True)
class ProjectFinancialDetail:
    """
    Full P&L rollup for one project.

    Attributes
    ----------
    expected_revenue :
        Net revenue of all non-cancelled invoices (accrual basis).
    paid_revenue :
        Net revenue of paid invoices (cash basis).
    total_op_expenses / paid_op_expenses :
        Non-cancelled / paid operational expenses.
    total_payables / paid_payables / outstanding_payables :
        Non-cancelled / paid / neither paid nor cancelled vendor bills.
    net_profit :
        ``paid_revenue - (paid_op_expenses + paid_payables)``.
    net_profit_expected :
        ``expected_revenue - (total_op_expenses + total_payables)``.
    profit_margin :
        ``net_profit / paid_revenue * 100``, 0 when nothing was paid.
    projected_revenue / projected_expenses :
        Planning figures (accrual basis).
    budget_vs_actual :
        Budget compared with the cash-basis outflow.
    monthly_breakdown :
        Monthly series restricted to this project's records.
    """

    project: Project
    expected_revenue: Decimal
    paid_revenue: Decimal
    total_op_expenses: Decimal
    paid_op_expenses: Decimal
    total_payables: Decimal
    paid_payables: Decimal
    outstanding_payables: Decimal
    net_profit: Decimal
    net_profit_expected: Decimal
    profit_margin: Decimal
    projected_revenue: Decimal
    projected_expenses: Decimal
    budget_vs_actual: BudgetVsActual
    monthly_breakdown: tuple[MonthlyMetrics, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class HealthFactors:
    """Raw 0-100 sub-scores, before weighting."""

    profit_margin: int
    cost_control: int
    trend: int


@dataclass(frozen=True)
class HealthScore:
    score: int
    rating: HealthRating
    factors: HealthFactors


@dataclass(frozen=True)
class EarlyWarning:
    severity: WarningSeverity
    type: WarningType
    message: str
    recommendation: str


@dataclass(frozen=True)
class ScenarioResult:
    original_profit: Decimal
    projected_profit: Decimal
    change: Decimal
    change_percent: Decimal
    new_margin: Decimal
    original_margin: Decimal
    adjusted_revenue: Decimal
    adjusted_expenses: Decimal


@dataclass(frozen=True)
class InsightMetrics:
    revenue_change: Decimal
    expense_change: Decimal
    profit_change: Decimal


@dataclass(frozen=True)
class AutoInsight:
    month: str
    previous_month: str
    insight: str
    metrics: InsightMetrics
    trend: InsightTrend


@dataclass(frozen=True)
class PeriodComparison:
    """Comparison of one bucket with the bucket ``period`` earlier."""

    period: ComparisonPeriod
    month: str
    compared_month: str
    revenue_change: Decimal
    expenses_change: Decimal
    profit_change: Decimal
    margin_change: Decimal
