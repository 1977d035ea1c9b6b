from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING, Any, Iterable, Mapping, Union

from .models.totals import InvoiceTotals
from .numbers import parse_lenient_number, round2, to_decimal

if TYPE_CHECKING:
    from .models.line_item import LineItem

    LineItemLike = Union[LineItem, Mapping[str, Any]]


def compute_line_total(quantity: Any, unit_price: Any) -> float:
    """Return ``quantity * unit_price`` rounded half-up to cents.

    Inputs are coerced leniently. A non-positive quantity or a negative unit
    price contributes nothing rather than raising; blocking those values is
    the job of :mod:`billing_engine.validation`.
    """
    qty = parse_lenient_number(quantity)
    price = parse_lenient_number(unit_price)
    if qty <= 0 or price < 0:
        return 0.0
    return round2(to_decimal(qty) * to_decimal(price))


def _line_total(item: "LineItemLike") -> Decimal:
    if isinstance(item, Mapping):
        unit_price = item.get("unitPrice", item.get("unit_price"))
        return to_decimal(compute_line_total(item.get("quantity"), unit_price))
    return to_decimal(compute_line_total(item.quantity, item.unit_price))


def compute_invoice_totals(items: Iterable["LineItemLike"], tax_amount: Any = 0) -> InvoiceTotals:
    """Subtotal and grand total for a set of line items.

    Line totals are recomputed from quantity and unit price, summed exactly
    and rounded once. An empty item list is valid and yields the tax alone.
    """
    subtotal = sum((_line_total(item) for item in items), Decimal(0))
    tax = to_decimal(tax_amount)
    return InvoiceTotals(
        subtotal=round2(subtotal),
        tax_amount=round2(tax),
        total_amount=round2(subtotal + tax),
    )


__all__ = ["compute_line_total", "compute_invoice_totals"]
