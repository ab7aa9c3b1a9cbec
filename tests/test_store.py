# tests/test_store.py
import pytest

from mimipro.constants import STORE_PRODUCTS, STORE_STOCK
from mimipro.database import get_connection, PersistenceError, RecordStore
from mimipro.database.seeders.default_data import SAMPLE_PRODUCTS


def test_seeded_catalogue(store):
    assert store.count(STORE_PRODUCTS) == len(SAMPLE_PRODUCTS)
    names = {r["name"] for r in store.get_all(STORE_PRODUCTS)}
    assert "Coca Cola 250ml" in names


def test_seed_is_applied_once(tmp_path):
    path = tmp_path / "again.db"
    get_connection(path).close()
    con = get_connection(path)
    try:
        assert RecordStore(con).count(STORE_PRODUCTS) == len(SAMPLE_PRODUCTS)
    finally:
        con.close()


def test_unseeded_connection_is_empty(tmp_path):
    con = get_connection(tmp_path / "empty.db", seed=False)
    try:
        assert RecordStore(con).count(STORE_PRODUCTS) == 0
    finally:
        con.close()


def test_add_and_get_merge_id(store):
    key = store.add(STORE_STOCK, {"product_id": 99, "product_name": "X", "quantity": 3})
    rec = store.get(STORE_STOCK, key)
    assert rec == {"id": key, "product_id": 99, "product_name": "X", "quantity": 3}
    assert store.get(STORE_STOCK, key + 1000) is None


def test_update_upserts_by_id(store):
    key = store.add(STORE_STOCK, {"product_id": 7, "product_name": "Y", "quantity": 1})
    store.update(STORE_STOCK, {"id": key, "product_id": 7, "product_name": "Y", "quantity": 5})
    assert store.get(STORE_STOCK, key)["quantity"] == 5
    assert store.count(STORE_STOCK) == 1


def test_get_by_index(store):
    store.add(STORE_STOCK, {"product_id": 1, "product_name": "A", "quantity": 0})
    store.add(STORE_STOCK, {"product_id": 2, "product_name": "B", "quantity": 0})
    rows = store.get_by_index(STORE_STOCK, "product_id", 2)
    assert [r["product_name"] for r in rows] == ["B"]


def test_unknown_index_raises(store):
    with pytest.raises(PersistenceError):
        store.get_by_index(STORE_STOCK, "nope", 1)


def test_unknown_store_raises(store):
    with pytest.raises(PersistenceError):
        store.get_all("customers")


def test_unique_index_violation_is_persistence_error(store):
    with pytest.raises(PersistenceError):
        store.add(STORE_PRODUCTS, {"name": "Coca Cola 250ml", "pcs": 24, "price": 20})


def test_transaction_rolls_back_on_error(store):
    with pytest.raises(RuntimeError):
        with store.transaction():
            store.add(STORE_STOCK, {"product_id": 5, "product_name": "Z", "quantity": 1})
            raise RuntimeError("boom")
    assert store.count(STORE_STOCK) == 0


def test_remove_and_clear(store):
    k = store.add(STORE_STOCK, {"product_id": 5, "product_name": "Z", "quantity": 1})
    store.remove(STORE_STOCK, k)
    assert store.get(STORE_STOCK, k) is None
    store.clear(STORE_PRODUCTS)
    assert store.count(STORE_PRODUCTS) == 0
