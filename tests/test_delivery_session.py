# tests/test_delivery_session.py
import pytest

from mimipro.constants import CASH_NOTES, MODE_CREATE
from mimipro.database.errors import ValidationError
from mimipro.modules.delivery.calculations import DeliveryLineItem
from mimipro.modules.delivery.session import DeliverySession


@pytest.fixture()
def session(catalogue):
    s = DeliverySession()
    s.set_products(catalogue.values())
    s.clear()
    return s


def test_clear_gives_blank_form(session):
    session.add_line()
    session.add_expense("Fuel", 20)
    session.set_cash_quantity(100, 3)
    session.editing_id = 7
    session.customer_name = "X"

    session.clear()

    assert session.line_items == [DeliveryLineItem()]
    assert session.expenses == []
    assert [c.denomination for c in session.cash_counts] == list(CASH_NOTES)
    assert all(c.quantity == 0 for c in session.cash_counts)
    assert session.mode == MODE_CREATE
    assert session.customer_name == ""


def test_selecting_product_fills_price(session, coke, products):
    pid = products.create("Premium Water", 12, 35)
    session.set_products(products.list_products())
    session.select_product(0, coke.product_id)
    assert session.line_items[0].unit_price == coke.price
    assert session.line_items[0].product_name == coke.name

    session.line_items[0].unit_price = 99
    session.select_product(0, pid)
    assert session.line_items[0].unit_price == 35

    session.select_product(0, None)
    assert session.line_items[0].product_name == ""
    assert session.line_result(0) is None


@pytest.mark.parametrize("label, amount", [("", 10), ("Fuel", 0), ("Fuel", -1), ("Fuel", "abc")])
def test_add_expense_validation(session, label, amount):
    with pytest.raises(ValidationError):
        session.add_expense(label, amount)
    assert session.expenses == []


def test_totals_follow_session_state(session, coke):
    session.select_product(0, coke.product_id)
    session.line_items[0].delivered_cartons = 1
    session.add_expense(" Toll ", "30")
    session.set_cash_quantity(200, 2)

    t = session.totals()
    assert (t.sales_total, t.cash_total, t.expense_total, t.net_total) == (480, 400, 30, 50)
    assert session.expenses[0].label == "Toll"

    session.remove_expense(0)
    session.remove_line(0)
    assert session.totals().sales_total == 0


def test_unknown_cash_note(session):
    with pytest.raises(ValidationError):
        session.set_cash_quantity(3, 1)
