# Project FinSight - Project profitability analytics for SMBs
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Tabular views for dashboards and exports.

The engine modules return typed Decimal results. This module assembles them
into pandas DataFrames for the presentation layer:

1. ``monthly_metrics_frame``
   One row per month of a monthly series (revenue, expenses, profit,
   margin and the change columns; NaN where a change is not defined).

2. ``project_summary_frame``
   One row per project of a snapshot: cash-basis revenue, expenses,
   payables, profit and margin, first activity date, health score,
   rating and number of early warnings.

3. ``revenue_breakdown_frame`` / ``group_revenue_breakdown``
   Invoice-level revenue with applied credits, and its grouping by project,
   client, month or status with each group's share of the total.

Amounts are converted to floats rounded to 2 decimals here, and only here:
these frames are meant for display and CSV export, not for further
aggregation.
"""

from collections.abc import Iterable, Sequence
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional

import pandas as pd

from .config import EngineConfig
from .credits import allocate_credits, net_revenue
from .early_warnings import detect_early_warnings
from .health import compute_health_score
from .logging_config import get_logger
from .models import (
    CreditNote,
    Invoice,
    InvoiceStatus,
    LedgerSnapshot,
    MonthlyMetrics,
    Project,
)
from .periods import month_key
from .rollup import compute_project_financials

logger = get_logger("portfolio")

GROUP_KEYS: tuple[str, ...] = ("project", "client", "month", "status")

_MONTHLY_COLUMNS = [
    "month",
    "revenue",
    "expenses",
    "net_profit",
    "profit_margin",
    "revenue_change",
    "expenses_change",
    "profit_change",
    "margin_change",
]

_BREAKDOWN_COLUMNS = [
    "id",
    "project",
    "client",
    "date",
    "month",
    "status",
    "amount",
    "applied_credit",
    "net_revenue",
]


def _money(value: Optional[Decimal]) -> float:
    if value is None:
        return float("nan")
    return round(float(value), 2)


def monthly_metrics_frame(metrics: Sequence[MonthlyMetrics]) -> pd.DataFrame:
    """Return a monthly series as a DataFrame (one row per month)."""
    rows = [
        {
            "month": m.month,
            "revenue": _money(m.revenue),
            "expenses": _money(m.expenses),
            "net_profit": _money(m.net_profit),
            "profit_margin": _money(m.profit_margin),
            "revenue_change": _money(m.revenue_change),
            "expenses_change": _money(m.expenses_change),
            "profit_change": _money(m.profit_change),
            "margin_change": _money(m.margin_change),
        }
        for m in metrics
    ]
    return pd.DataFrame(rows, columns=_MONTHLY_COLUMNS)


def _as_timestamp(value: Any) -> Optional[pd.Timestamp]:
    if value is None:
        return None
    if isinstance(value, (datetime, date)):
        ts = pd.Timestamp(value)
    elif isinstance(value, str):
        ts = pd.to_datetime(value.strip(), errors="coerce", format="ISO8601")
    else:
        return None
    if pd.isna(ts):
        return None
    if ts.tzinfo is not None:
        ts = ts.tz_convert("UTC").tz_localize(None)
    return ts


def first_activity_date(
    project: Project,
    snapshot: LedgerSnapshot,
) -> Optional[pd.Timestamp]:
    """
    Return the earliest dated activity of a project, or None.

    Activity covers the project's invoices, expenses and payables, plus the
    creation date of credit notes whose invoice belongs to the project.
    Unparseable dates are ignored.
    """
    pid = project.id
    project_invoice_ids = {i.id for i in snapshot.invoices if i.project_id == pid}

    raw_dates: list[Any] = [i.date for i in snapshot.invoices if i.project_id == pid]
    raw_dates += [e.date for e in snapshot.expenses if e.project_id == pid]
    raw_dates += [p.date for p in snapshot.payables if p.project_id == pid]
    raw_dates += [
        c.created_at
        for c in snapshot.credit_notes
        if c.invoice_id and c.invoice_id in project_invoice_ids
    ]

    stamps = [ts for ts in (_as_timestamp(d) for d in raw_dates) if ts is not None]
    return min(stamps) if stamps else None


def project_summary_frame(
    snapshot: LedgerSnapshot,
    config: Optional[EngineConfig] = None,
    reference_date: Optional[date] = None,
) -> pd.DataFrame:
    """
    Return one summary row per project of the snapshot.

    Columns: project_id, name, status, revenue, paid_op_expenses,
    total_op_expenses, paid_payables, total_payables, profit, margin,
    first_activity_date, health_score, rating, warnings.

    ``revenue`` and ``profit`` are cash-basis figures. ``margin`` is
    rounded to ``config.margin_decimals``.
    """
    cfg = config or EngineConfig()
    rows = []
    for project in snapshot.projects:
        detail = compute_project_financials(
            project,
            snapshot.invoices,
            snapshot.expenses,
            snapshot.payables,
            snapshot.credit_notes,
            window_months=cfg.window_months,
            reference_date=reference_date,
        )
        health = compute_health_score(detail)
        warnings = detect_early_warnings(detail)

        rows.append(
            {
                "project_id": project.id,
                "name": project.name,
                "status": project.status.value,
                "revenue": _money(detail.paid_revenue),
                "paid_op_expenses": _money(detail.paid_op_expenses),
                "total_op_expenses": _money(detail.total_op_expenses),
                "paid_payables": _money(detail.paid_payables),
                "total_payables": _money(detail.total_payables),
                "profit": _money(detail.net_profit),
                "margin": round(float(detail.profit_margin), cfg.margin_decimals),
                "first_activity_date": first_activity_date(project, snapshot),
                "health_score": health.score,
                "rating": health.rating.value,
                "warnings": len(warnings),
            }
        )

    logger.info(
        "project_summary_built",
        extra={"projects": len(rows), "window_months": cfg.window_months},
    )
    return pd.DataFrame(
        rows,
        columns=[
            "project_id",
            "name",
            "status",
            "revenue",
            "paid_op_expenses",
            "total_op_expenses",
            "paid_payables",
            "total_payables",
            "profit",
            "margin",
            "first_activity_date",
            "health_score",
            "rating",
            "warnings",
        ],
    )


def revenue_breakdown_frame(
    invoices: Optional[Iterable[Invoice]],
    credit_notes: Optional[Iterable[CreditNote]] = None,
    projects: Optional[Iterable[Project]] = None,
    status: Optional[str] = None,
    query: Optional[str] = None,
) -> pd.DataFrame:
    """
    Return invoice-level revenue with the credits applied to each invoice.

    Parameters
    ----------
    invoices, credit_notes:
        Records to break down (``None`` is treated as empty).
    projects:
        Optional projects, used to display project names instead of ids.
    status:
        Keep only invoices with this status (e.g. ``"paid"``).
    query:
        Case-insensitive search over invoice id, project and client.

    Returns
    -------
    pandas.DataFrame
        Columns: id, project, client, date, month, status, amount,
        applied_credit, net_revenue. ``net_revenue`` is the post-credit
        amount for paid invoices and 0 for the others. Rows are sorted by
        date (unparseable dates last).
    """
    credits = allocate_credits(credit_notes)
    names = {p.id: p.name for p in projects or ()}
    wanted_status = InvoiceStatus(status) if status else None
    needle = query.strip().lower() if query else ""

    rows = []
    for inv in invoices or ():
        if wanted_status is not None and inv.status is not wanted_status:
            continue

        project_label = names.get(inv.project_id or "", inv.project_id or "")
        client = inv.client_name or "Unknown Client"
        if needle and not any(
            needle in text.lower() for text in (inv.id, project_label, client)
        ):
            continue

        paid = inv.status is InvoiceStatus.PAID
        rows.append(
            {
                "id": inv.id,
                "project": project_label,
                "client": client,
                "date": _as_timestamp(inv.date),
                "month": month_key(inv.date),
                "status": inv.status.value,
                "amount": _money(inv.amount),
                "applied_credit": _money(credits.get(inv.id, Decimal("0"))),
                "net_revenue": _money(net_revenue(inv, credits)) if paid else 0.0,
            }
        )

    frame = pd.DataFrame(rows, columns=_BREAKDOWN_COLUMNS)
    if frame.empty:
        return frame
    return frame.sort_values("date", na_position="last", kind="stable").reset_index(
        drop=True
    )


def _group_label(value: Any) -> str:
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return "Unassigned"
    text = str(value)
    return text if text.strip() else "Unassigned"


def group_revenue_breakdown(frame: pd.DataFrame, by: str) -> pd.DataFrame:
    """
    Group a revenue breakdown by project, client, month or status.

    Returns one row per group with columns: key, invoices, net, amount,
    credits, percent. ``percent`` is the group's share of the total net
    revenue (0 when the total is 0). Groups are sorted by net revenue,
    descending. Invoices without a project or month are grouped under
    "Unassigned".
    """
    if by not in GROUP_KEYS:
        raise ValueError(
            f"Invalid group key: {by!r}. Expected one of {', '.join(GROUP_KEYS)}."
        )

    columns = ["key", "invoices", "net", "amount", "credits", "percent"]
    if frame.empty:
        return pd.DataFrame(columns=columns)

    d = frame.copy()
    keys = pd.Series([_group_label(v) for v in d[by]], index=d.index)
    if by == "status":
        keys = keys.str.upper()
    d["key"] = keys

    grouped = (
        d.groupby("key", sort=False)
        .agg(
            invoices=("id", "count"),
            net=("net_revenue", "sum"),
            amount=("amount", "sum"),
            credits=("applied_credit", "sum"),
        )
        .reset_index()
    )

    total_net = float(d["net_revenue"].sum())
    if total_net > 0:
        grouped["percent"] = (grouped["net"] / total_net * 100).round(2)
    else:
        grouped["percent"] = 0.0

    for col in ("net", "amount", "credits"):
        grouped[col] = grouped[col].round(2)

    return (
        grouped.sort_values("net", ascending=False, kind="stable")
        .reset_index(drop=True)[columns]
    )
