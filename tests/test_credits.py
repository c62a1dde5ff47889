from decimal import Decimal

import pytest

from project_finsight.credits import allocate_credits, net_revenue
from project_finsight.models import CreditNote, Invoice


def _invoice(amount, invoice_id="inv-1", status="paid"):
    return Invoice(
        id=invoice_id,
        project_id="p1",
        client_name="ACME",
        amount=amount,
        date="2025-03-10",
        status=status,
    )


def _credit(amount, invoice_id="inv-1", status="applied", note_id="cn-1"):
    return CreditNote(
        id=note_id,
        invoice_id=invoice_id,
        project_id="p1",
        amount=amount,
        status=status,
    )


def test_allocate_credits_sums_applied_notes_per_invoice() -> None:
    notes = [
        _credit(100, note_id="a"),
        _credit("250.50", note_id="b"),
        _credit(40, invoice_id="inv-2", note_id="c"),
    ]

    credits = allocate_credits(notes)

    assert credits == {"inv-1": Decimal("350.50"), "inv-2": Decimal("40")}


@pytest.mark.parametrize("status", ["pending", "void"])
def test_allocate_credits_ignores_non_applied_notes(status: str) -> None:
    assert allocate_credits([_credit(100, status=status)]) == {}


def test_allocate_credits_ignores_notes_without_invoice() -> None:
    assert allocate_credits([_credit(100, invoice_id=None)]) == {}
    assert allocate_credits([_credit(100, invoice_id="")]) == {}


def test_allocate_credits_treats_none_as_empty() -> None:
    assert allocate_credits(None) == {}


@pytest.mark.parametrize(
    "credit, expected",
    [
        (0, Decimal("1000")),
        (400, Decimal("600")),
        (1000, Decimal("0")),
        (1500, Decimal("0")),
    ],
)
def test_net_revenue_is_clamped_at_zero(credit, expected) -> None:
    """Net revenue is max(amount - applied credit, 0)."""
    invoice = _invoice(1000)
    credits = allocate_credits([_credit(credit)]) if credit else {}

    assert net_revenue(invoice, credits) == expected


def test_net_revenue_uses_only_the_invoice_own_credits() -> None:
    credits = allocate_credits([_credit(300, invoice_id="other")])

    assert net_revenue(_invoice(1000), credits) == Decimal("1000")
