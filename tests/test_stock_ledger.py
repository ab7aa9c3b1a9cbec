# tests/test_stock_ledger.py
import pytest

from mimipro.constants import (
    MANUAL_RESTOCK_REASON,
    STOCK_STATUS_LOW,
    STOCK_STATUS_NORMAL,
    STOCK_STATUS_OUT,
    STORE_STOCK,
)
from mimipro.database.errors import NotFoundError, ValidationError
from mimipro.database.repositories import stock_status


def test_restock_accumulates(ledger, coke):
    ledger.restock(coke.product_id, coke.name, 10)
    rec = ledger.restock(coke.product_id, coke.name, 50, notes="  Truck 7 ")
    assert rec.quantity == 60
    assert ledger.get_for_product(coke.product_id).quantity == 60

    hist = ledger.history(coke.product_id)
    assert [h.change for h in hist] == [50, 10]              # newest first
    assert [h.reason for h in hist] == ["Truck 7", MANUAL_RESTOCK_REASON]
    assert (hist[0].old_quantity, hist[0].new_quantity) == (10, 60)


def test_restock_flags_record_for_sync(ledger, sync, coke):
    rec = ledger.restock(coke.product_id, coke.name, 5)
    pending = sync.pending_items()
    assert len(pending) == 1
    assert pending[0]["store_name"] == STORE_STOCK
    assert pending[0]["record_id"] == rec.stock_id


@pytest.mark.parametrize("qty", [0, -3, "abc", 1.5, None, "inf", float("inf"), float("nan"), "1e400"])
def test_restock_rejects_bad_quantity(ledger, coke, qty):
    with pytest.raises(ValidationError):
        ledger.restock(coke.product_id, coke.name, qty)
    assert ledger.get_for_product(coke.product_id) is None


def test_over_decrement_clamps_at_zero(ledger, coke):
    ledger.restock(coke.product_id, coke.name, 10)
    rec = ledger.adjust(coke.product_id, -30, "Delivery to Test")
    assert rec.quantity == 0

    entry = ledger.history(coke.product_id, limit=1)[0]
    assert entry.change == -30
    assert entry.old_quantity == 10
    assert entry.new_quantity == 0
    assert entry.applied_change == -10


def test_adjust_without_stock_record(ledger, coke):
    with pytest.raises(NotFoundError):
        ledger.adjust(coke.product_id, -1, "x")


def test_adjust_rejects_fractional_delta(ledger, coke):
    ledger.initialize(coke.product_id, coke.name)
    with pytest.raises(ValidationError):
        ledger.adjust(coke.product_id, 0.5)


@pytest.mark.parametrize("value", [float("inf"), "-inf", float("nan")])
def test_non_finite_amounts_rejected(ledger, coke, value):
    rec = ledger.restock(coke.product_id, coke.name, 10)
    with pytest.raises(ValidationError):
        ledger.adjust(coke.product_id, value, "x")
    with pytest.raises(ValidationError):
        ledger.adjust_to(rec.stock_id, value, "Count correction")
    assert ledger.get_for_product(coke.product_id).quantity == 10


def test_initialize_is_idempotent(ledger, store, coke):
    a = ledger.initialize(coke.product_id, coke.name)
    b = ledger.initialize(coke.product_id, coke.name)
    assert a.stock_id == b.stock_id
    assert a.quantity == 0
    assert store.count(STORE_STOCK) == 1


def test_adjust_to_sets_absolute_quantity(ledger, sync, coke):
    rec = ledger.restock(coke.product_id, coke.name, 40)
    out = ledger.adjust_to(rec.stock_id, 25, "Count correction")
    assert out.quantity == 25
    entry = ledger.history(coke.product_id, limit=1)[0]
    assert (entry.change, entry.old_quantity, entry.new_quantity) == (-15, 40, 25)
    assert entry.reason == "Count correction"
    assert len(sync.pending_items()) == 2


def test_adjust_to_requires_reason(ledger, coke):
    rec = ledger.restock(coke.product_id, coke.name, 40)
    with pytest.raises(ValidationError):
        ledger.adjust_to(rec.stock_id, 10, "   ")
    with pytest.raises(ValidationError):
        ledger.adjust_to(rec.stock_id, -1, "Damaged")
    assert ledger.get(rec.stock_id).quantity == 40


def test_adjust_to_unknown_stock(ledger):
    with pytest.raises(NotFoundError):
        ledger.adjust_to(12345, 1, "x")


def test_list_stock_sorted_by_name(ledger, coke, pepsi):
    ledger.initialize(pepsi.product_id, pepsi.name)
    ledger.initialize(coke.product_id, coke.name)
    assert [s.product_name for s in ledger.list_stock()] == [coke.name, pepsi.name]


@pytest.mark.parametrize("qty, status", [
    (0, STOCK_STATUS_OUT),
    (1, STOCK_STATUS_LOW),
    (49, STOCK_STATUS_LOW),
    (50, STOCK_STATUS_NORMAL),
    (500, STOCK_STATUS_NORMAL),
])
def test_stock_status_thresholds(qty, status):
    assert stock_status(qty) == status
