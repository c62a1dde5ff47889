# Project FinSight - Project profitability analytics for SMBs
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Calendar-month helpers for Project FinSight.

This module derives the month keys (``YYYY-MM``) used to bucket ledger
records, the rolling window of months shown by the dashboards, and the
bucket lag of the MoM / QoQ / YoY comparison periods.
"""

from datetime import date, datetime
from typing import Any, Optional

import pandas as pd

from .models import ComparisonPeriod

_COMPARISON_LAGS = {
    ComparisonPeriod.MOM: 1,
    ComparisonPeriod.QOQ: 3,
    ComparisonPeriod.YOY: 12,
}


def _today() -> date:
    """Return today's date as a date object (isolated for easier testing)."""
    return datetime.today().date()


def month_key(value: Any) -> Optional[str]:
    """
    Return the ``YYYY-MM`` month of a date-like value.

    Accepted values are ``date``/``datetime`` objects, pandas timestamps
    and ISO-8601 strings (``2025-03-14``, ``2025-03-14T10:00:00Z``, ...).
    Anything that cannot be parsed yields ``None``: callers skip such
    records instead of failing.
    """
    if isinstance(value, (datetime, date)):
        # pd.NaT is a datetime subclass
        if pd.isna(value):
            return None
        return f"{value.year:04d}-{value.month:02d}"

    if not isinstance(value, str) or not value.strip():
        return None

    parsed = pd.to_datetime(value.strip(), errors="coerce", format="ISO8601")
    if pd.isna(parsed):
        return None
    return f"{parsed.year:04d}-{parsed.month:02d}"


def month_window(
    window_months: int = 6,
    reference: Optional[date] = None,
) -> list[str]:
    """
    Return the calendar months ending with the reference month, oldest first.

    Parameters
    ----------
    window_months:
        Number of months in the window (the reference month included).
        Zero or a negative value gives an empty window.
    reference:
        Any date within the last month of the window. Defaults to today.
    """
    ref = reference or _today()
    months: list[str] = []
    for offset in range(window_months - 1, -1, -1):
        total = ref.year * 12 + (ref.month - 1) - offset
        year, month_index = divmod(total, 12)
        months.append(f"{year:04d}-{month_index + 1:02d}")
    return months


def comparison_lag(period: ComparisonPeriod) -> int:
    """Number of monthly buckets between a month and its comparison month."""
    return _COMPARISON_LAGS[ComparisonPeriod(period)]
