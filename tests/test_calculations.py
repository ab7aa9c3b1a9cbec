# tests/test_calculations.py
from mimipro.constants import CASH_NOTES
from mimipro.database.repositories.products_repo import Product
from mimipro.modules.delivery.calculations import (
    CashCount,
    DeliveryLineItem,
    ExpenseEntry,
    aggregate,
    aggregate_expenses,
    compute_line,
    compute_totals,
    default_cash_counts,
)
from mimipro.utils.helpers import round_half_up

CARTON_24 = Product(product_id=1, name="Coca Cola 250ml", pcs=24, price=20)
CARTON_12 = Product(product_id=2, name="Juice 1L", pcs=12, price=90)
PRODUCTS = {1: CARTON_24, 2: CARTON_12}


def test_sold_pieces_from_cartons_and_pieces():
    item = DeliveryLineItem(product_id=1, delivered_cartons=2, returned_pieces=2, unit_price=20)
    result = compute_line(item, CARTON_24)
    assert result.sold_pieces == 46
    assert result.line_total == 920


def test_returns_exceeding_delivery_sell_nothing():
    item = DeliveryLineItem(product_id=1, delivered_pieces=5, returned_cartons=1, unit_price=20)
    assert compute_line(item, CARTON_24).sold_pieces == 0
    assert compute_line(item, CARTON_24).line_total == 0


def test_unresolved_lines_do_not_change_sales():
    lines = [
        DeliveryLineItem(product_id=1, delivered_cartons=1, unit_price=20),
        DeliveryLineItem(),                                        # nothing selected
        DeliveryLineItem(product_id=404, delivered_cartons=5, unit_price=20),  # unknown
    ]
    assert aggregate(lines, PRODUCTS) == 480


def test_only_positive_expenses_count():
    expenses = [ExpenseEntry("Fuel", 50), ExpenseEntry("Refund", -10), ExpenseEntry("Zero", 0)]
    assert aggregate_expenses(expenses) == 50


def test_totals_and_net():
    lines = [
        DeliveryLineItem(product_id=1, delivered_cartons=1, returned_pieces=4, unit_price=20),
        DeliveryLineItem(product_id=2, delivered_pieces=3, unit_price=90),
    ]
    cash = default_cash_counts({500: 1, 100: 2})
    t = compute_totals(lines, PRODUCTS, cash, [ExpenseEntry("Fuel", 50)])
    assert t.sales_total == 400 + 270
    assert t.cash_total == 700
    assert t.expense_total == 50
    assert t.net_total == 670 - 700 - 50


def test_totals_round_half_up_before_net():
    lines = [DeliveryLineItem(product_id=1, delivered_pieces=1, unit_price=2.5)]
    t = compute_totals(lines, PRODUCTS, [], [ExpenseEntry("Tip", 0.5)])
    assert t.sales_total == 3
    assert t.expense_total == 1
    assert t.net_total == 2


def test_round_half_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(2.49) == 2
    assert round_half_up(-2.5) == -2


def test_default_cash_counts_order_and_totals():
    counts = default_cash_counts({20: 3})
    assert [c.denomination for c in counts] == list(CASH_NOTES)
    assert sum(c.line_total for c in counts) == 60
    assert CashCount(1000, 2).line_total == 2000
