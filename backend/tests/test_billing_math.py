from datetime import datetime, timezone
from decimal import Decimal

from app.utils.billing_math import document_totals, exchange_totals, line_total, money, totals_mismatch
from app.utils.numbering import document_number


def test_line_total():
    assert line_total(10, 6000, 500, 0, 2) == Decimal("121000.00")
    assert line_total("2.345", "6123.50", "150", "75.25", 1) == Decimal("14584.86")


def test_money_rounds_half_up():
    assert money("1.005") == Decimal("1.01")
    assert money("2.675") == Decimal("2.68")
    assert money(None) == Decimal("0.00")


def test_document_totals_apply_discount_before_tax():
    totals = document_totals([Decimal("100000"), Decimal("21000")], discount_percentage=10, tax_percentage=3)

    assert totals == {
        "subtotal": Decimal("121000.00"),
        "discount_amount": Decimal("12100.00"),
        "tax_amount": Decimal("3267.00"),
        "total_amount": Decimal("112167.00"),
    }


def test_document_totals_without_items():
    assert document_totals([])["total_amount"] == Decimal("0.00")


def test_exchange_totals():
    assert exchange_totals("4.5", 5000, Decimal("60500")) == {
        "old_gold_value": Decimal("22500.00"),
        "exchange_difference": Decimal("38000.00"),
    }


def test_totals_mismatch_uses_tolerance_and_skips_missing():
    expected = {"subtotal": Decimal("100.00"), "tax_amount": Decimal("3.00"), "total_amount": Decimal("103.00")}
    supplied = {"subtotal": Decimal("100.01"), "tax_amount": None, "total_amount": Decimal("110")}

    assert totals_mismatch(supplied, expected) == ["total_amount"]
    assert totals_mismatch(supplied, expected, tolerance=10) == []


def test_document_number_format():
    now = datetime(2026, 3, 14, 9, 26, 53, 589000, tzinfo=timezone.utc)
    millis = int(now.timestamp() * 1000)

    number = document_number("INV", now)

    assert number == f"INV-2026-{millis % 1_000_000:06d}"
    assert document_number("INV", now, bump=1) != number
    assert document_number("BILL", now).startswith("BILL-2026-")
