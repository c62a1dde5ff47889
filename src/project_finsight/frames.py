# Project FinSight - Project profitability analytics for SMBs
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Building a LedgerSnapshot from tabular data.

Storage layers and exports usually hand records over as tables. This module
turns pandas DataFrames into typed records:

- column names are case-insensitive and accept both camelCase (as used by
  the web API: ``projectId``, ``clientName``, ``dueDate``, ...) and
  snake_case,
- NaN / empty values in optional columns become ``None``,
- missing required columns raise a ValueError listing them.

Expected columns
----------------
invoices      : id, project_id, client_name, amount, date, status
expenses      : id, project_id, category, amount, date, type, status
payables      : id, vendor_name, amount, date, due_date, status
                (optional: project_id)
credit_notes  : id, invoice_id, project_id, amount, status
                (optional: reason, created_at)
projects      : id, name, budget, start_date
                (optional: status, expected_revenue, end_date)

Dates are passed through as read; the monthly aggregator parses them and
skips the ones it cannot read.
"""

import re
from typing import Any, Callable, Optional

import pandas as pd

from .models import (
    CreditNote,
    Expense,
    Invoice,
    LedgerSnapshot,
    PayableInvoice,
    Project,
)

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def _snake(name: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", str(name).strip()).lower()


def _clean(value: Any) -> Any:
    """Return None for NaN/NaT/empty strings, the value otherwise."""
    if value is None:
        return None
    if isinstance(value, str):
        return value if value.strip() else None
    try:
        if pd.isna(value):
            return None
    except (TypeError, ValueError):
        pass
    if isinstance(value, pd.Timestamp):
        return value.to_pydatetime()
    return value


def _text(value: Any) -> Optional[str]:
    cleaned = _clean(value)
    return None if cleaned is None else str(cleaned)


def _normalize(df: pd.DataFrame, kind: str, required: set[str]) -> pd.DataFrame:
    d = df.copy()
    d.columns = [_snake(c) for c in d.columns]
    missing = required - set(d.columns)
    if missing:
        raise ValueError(
            f"Missing columns for {kind}: {', '.join(sorted(missing))}."
        )
    return d


def _rows(
    df: Optional[pd.DataFrame],
    kind: str,
    required: set[str],
    build: Callable[[dict[str, Any]], Any],
) -> list[Any]:
    if df is None or df.empty:
        return []
    d = _normalize(df, kind, required)
    return [build(row) for row in d.to_dict(orient="records")]


def _invoice(row: dict[str, Any]) -> Invoice:
    return Invoice(
        id=str(row["id"]),
        project_id=_text(row["project_id"]),
        client_name=_text(row["client_name"]) or "",
        amount=row["amount"],
        date=_clean(row["date"]),
        status=str(row["status"]).strip().lower(),
    )


def _expense(row: dict[str, Any]) -> Expense:
    return Expense(
        id=str(row["id"]),
        project_id=_text(row["project_id"]),
        category=_text(row["category"]) or "",
        amount=row["amount"],
        date=_clean(row["date"]),
        type=str(row["type"]).strip().lower(),
        status=str(row["status"]).strip().lower(),
    )


def _payable(row: dict[str, Any]) -> PayableInvoice:
    return PayableInvoice(
        id=str(row["id"]),
        vendor_name=_text(row["vendor_name"]) or "",
        amount=row["amount"],
        date=_clean(row["date"]),
        due_date=_clean(row["due_date"]),
        status=str(row["status"]).strip().lower(),
        project_id=_text(row.get("project_id")),
    )


def _credit_note(row: dict[str, Any]) -> CreditNote:
    return CreditNote(
        id=str(row["id"]),
        invoice_id=_text(row["invoice_id"]),
        project_id=_text(row["project_id"]),
        amount=row["amount"],
        status=str(row["status"]).strip().lower(),
        reason=_text(row.get("reason")),
        created_at=_clean(row.get("created_at")),
    )


def _project(row: dict[str, Any]) -> Project:
    status = _text(row.get("status"))
    return Project(
        id=str(row["id"]),
        name=_text(row["name"]) or "",
        budget=row["budget"],
        start_date=_clean(row["start_date"]),
        status=status.strip().lower() if status else "active",
        expected_revenue=_clean(row.get("expected_revenue")),
        end_date=_clean(row.get("end_date")),
    )


def snapshot_from_frames(
    invoices: Optional[pd.DataFrame] = None,
    expenses: Optional[pd.DataFrame] = None,
    payables: Optional[pd.DataFrame] = None,
    credit_notes: Optional[pd.DataFrame] = None,
    projects: Optional[pd.DataFrame] = None,
) -> LedgerSnapshot:
    """
    Build a LedgerSnapshot from DataFrames (any of them may be omitted).

    Raises
    ------
    ValueError
        If a DataFrame lacks a required column, or a row holds an invalid
        amount or status.
    """
    return LedgerSnapshot.build(
        invoices=_rows(
            invoices,
            "invoices",
            {"id", "project_id", "client_name", "amount", "date", "status"},
            _invoice,
        ),
        expenses=_rows(
            expenses,
            "expenses",
            {"id", "project_id", "category", "amount", "date", "type", "status"},
            _expense,
        ),
        payables=_rows(
            payables,
            "payables",
            {"id", "vendor_name", "amount", "date", "due_date", "status"},
            _payable,
        ),
        credit_notes=_rows(
            credit_notes,
            "credit_notes",
            {"id", "invoice_id", "project_id", "amount", "status"},
            _credit_note,
        ),
        projects=_rows(
            projects,
            "projects",
            {"id", "name", "budget", "start_date"},
            _project,
        ),
    )
