# Project FinSight - Project profitability analytics for SMBs
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Credit allocation.

Credit notes reduce the recognised revenue of the invoice they target.
Only ``applied`` notes linked to an invoice count; ``pending`` and ``void``
notes, and notes without an invoice, are ignored everywhere.

The net revenue of an invoice is floored at zero: over-crediting an
invoice never produces negative revenue.
"""

from collections.abc import Iterable, Mapping
from decimal import Decimal
from typing import Optional

from .models import ZERO, CreditNote, CreditNoteStatus, Invoice


def allocate_credits(
    credit_notes: Optional[Iterable[CreditNote]],
) -> dict[str, Decimal]:
    """
    Sum the applied credit per invoice.

    Args:
        credit_notes: Credit notes to consider (``None`` is treated as empty).

    Returns:
        A dictionary ``{invoice_id -> total applied credit}``. Invoices with
        no applied credit are absent from the mapping.
    """
    credits: dict[str, Decimal] = {}
    for note in credit_notes or ():
        if note.status is not CreditNoteStatus.APPLIED or not note.invoice_id:
            continue
        credits[note.invoice_id] = credits.get(note.invoice_id, ZERO) + note.amount
    return credits


def net_revenue(invoice: Invoice, credits: Mapping[str, Decimal]) -> Decimal:
    """Return ``max(invoice.amount - applied credit, 0)`` for one invoice."""
    applied = credits.get(invoice.id, ZERO)
    return max(invoice.amount - applied, ZERO)
