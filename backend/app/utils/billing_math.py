"""
Bill arithmetic shared by the calculate endpoint and the verification pass
that runs on every bill/invoice submission.

    line total   = (weight x rate + making_charge + wastage_charge) x quantity
    discount     = subtotal x discount% / 100
    tax          = (subtotal - discount) x tax% / 100
    total        = subtotal - discount + tax

Amounts are rounded half-up to paise (2 places).
"""
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Iterable, List, Optional

TWO_PLACES = Decimal("0.01")
HUNDRED = Decimal("100")


def _d(value) -> Decimal:
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def money(value) -> Decimal:
    return _d(value).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def line_total(weight, rate, making_charge=0, wastage_charge=0, quantity: int = 1) -> Decimal:
    unit = _d(weight) * _d(rate) + _d(making_charge) + _d(wastage_charge)
    return money(unit * int(quantity))


def document_totals(item_totals: Iterable, discount_percentage=0, tax_percentage=0) -> Dict[str, Decimal]:
    subtotal = money(sum((_d(t) for t in item_totals), Decimal("0")))
    discount_amount = money(subtotal * _d(discount_percentage) / HUNDRED)
    tax_amount = money((subtotal - discount_amount) * _d(tax_percentage) / HUNDRED)
    return {
        "subtotal": subtotal,
        "discount_amount": discount_amount,
        "tax_amount": tax_amount,
        "total_amount": money(subtotal - discount_amount + tax_amount),
    }


def exchange_totals(old_weight, old_rate, items_total) -> Dict[str, Decimal]:
    old_value = money(_d(old_weight) * _d(old_rate))
    return {
        "old_gold_value": old_value,
        "exchange_difference": money(_d(items_total) - old_value),
    }


def totals_mismatch(
    supplied: Dict[str, Optional[Decimal]],
    expected: Dict[str, Decimal],
    tolerance=Decimal("0.01"),
) -> List[str]:
    """Names of the supplied fields that differ from the expected ones by more than tolerance."""
    tolerance = _d(tolerance)
    mismatched = []
    for field, expected_value in expected.items():
        value = supplied.get(field)
        if value is None:
            continue
        if abs(_d(value) - expected_value) > tolerance:
            mismatched.append(field)
    return mismatched
