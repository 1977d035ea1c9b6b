import random

import pytest

from billing_engine.calculator import compute_invoice_totals, compute_line_total
from billing_engine.models.line_item import LineItem


def _items():
    return [
        LineItem(description="Design", quantity=2, unit_price=100),
        LineItem(description="Copy", quantity=1, unit_price=50),
    ]


def test_line_total_rounds_to_cents():
    assert compute_line_total(3, 19.99) == 59.97
    assert compute_line_total(1.5, 33.333) == 50.0
    assert compute_line_total(0.1, 0.01) == 0.0


def test_line_total_is_forgiving():
    assert compute_line_total(0, 100) == 0.0
    assert compute_line_total(-2, 100) == 0.0
    assert compute_line_total(2, -5) == 0.0
    assert compute_line_total(None, 10) == 0.0
    assert compute_line_total("abc", 10) == 0.0
    assert compute_line_total("2", "12.50") == 25.0


def test_line_item_total_price_tracks_quantity_and_price():
    item = LineItem(description="Hosting", quantity="3", unit_price="9.99")
    assert item.total_price == 29.97
    dumped = item.model_dump(by_alias=True)
    assert dumped["totalPrice"] == 29.97
    assert dumped["unitPrice"] == 9.99


def test_line_item_ignores_supplied_total_price():
    item = LineItem.model_validate({"description": "x", "quantity": 2, "unitPrice": 10, "totalPrice": 999})
    assert item.total_price == 20.0


def test_invoice_totals_scenario():
    totals = compute_invoice_totals(_items(), 10)
    assert totals.subtotal == 250.0
    assert totals.total_amount == 260.0
    assert totals.tax_amount == 10.0


def test_empty_invoice_totals_are_the_tax():
    totals = compute_invoice_totals([], 18.5)
    assert totals.subtotal == 0.0
    assert totals.total_amount == 18.5


def test_invoice_totals_accept_mappings():
    totals = compute_invoice_totals([{"quantity": 2, "unitPrice": 10}, {"quantity": 1, "unit_price": 5}], "1.5")
    assert totals.subtotal == 25.0
    assert totals.total_amount == 26.5


def test_invoice_totals_are_idempotent_and_order_independent():
    items = [LineItem(description=f"row {i}", quantity=i + 1, unit_price=0.1 * (i + 3)) for i in range(25)]
    first = compute_invoice_totals(items, 7.77)
    second = compute_invoice_totals(items, 7.77)
    shuffled = list(items)
    random.Random(4).shuffle(shuffled)
    assert first == second
    assert compute_invoice_totals(shuffled, 7.77) == first


def test_invoice_subtotal_is_additive():
    items_a = [LineItem(description="a", quantity=3, unit_price=0.1), LineItem(description="b", quantity=1, unit_price=0.2)]
    items_b = [LineItem(description="c", quantity=7, unit_price=12.34)]
    combined = compute_invoice_totals(items_a + items_b, 0).subtotal
    separate = compute_invoice_totals(items_a, 0).subtotal + compute_invoice_totals(items_b, 0).subtotal
    assert combined == pytest.approx(separate)


def test_invoice_totals_do_not_mutate_items():
    items = _items()
    before = [item.model_dump() for item in items]
    compute_invoice_totals(items, 10)
    assert [item.model_dump() for item in items] == before


def test_large_line_totals_stay_numeric():
    assert compute_line_total(1e26, 10) == 1e27
    assert compute_line_total(1e300, 1e300) == 0.0
    totals = compute_invoice_totals([LineItem(description="Bulk", quantity=1e27, unit_price=1)], 0)
    assert totals.total_amount == 1e27
