# tests/conftest.py
# ---------------------------------------------------------------------
# Ground rules:
# - pytest-qt owns QApplication (use qapp/qtbot fixtures)
# - Qt runs offscreen so the suite works headless
# - Every test gets its own SQLite file under tmp_path, seeded with the
#   sample catalogue (5 products, no stock)
# ---------------------------------------------------------------------

from __future__ import annotations

import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest

from mimipro.database import get_connection, RecordStore
from mimipro.database.repositories import ProductsRepo, StockLedger, SyncStatusRepo
from mimipro.modules.delivery.service import DeliveryService


# ---------- Qt: let pytest-qt own the app ----------
@pytest.fixture(scope="session")
def app(qapp):  # alias to match code that expects an `app` fixture
    return qapp


# ---------- Per-test database ----------
@pytest.fixture()
def conn(tmp_path):
    con = get_connection(tmp_path / "test.db")
    try:
        yield con
    finally:
        con.close()


@pytest.fixture()
def store(conn) -> RecordStore:
    return RecordStore(conn)


@pytest.fixture()
def products(store) -> ProductsRepo:
    return ProductsRepo(store)


@pytest.fixture()
def ledger(store) -> StockLedger:
    return StockLedger(store)


@pytest.fixture()
def sync(store) -> SyncStatusRepo:
    return SyncStatusRepo(store)


@pytest.fixture()
def service(store) -> DeliveryService:
    return DeliveryService(store)


# ---------- Handy lookups ----------
@pytest.fixture()
def catalogue(products) -> dict:
    """{product_id: Product} for the seeded products."""
    return {p.product_id: p for p in products.list_products()}


@pytest.fixture()
def coke(products):
    return products.get_by_name("Coca Cola 250ml")


@pytest.fixture()
def pepsi(products):
    return products.get_by_name("Pepsi 250ml")
