# tests/test_products_repo.py
import pytest

from mimipro.database.errors import DomainError, NotFoundError, ValidationError


def test_list_products_sorted(products):
    names = [p.name for p in products.list_products()]
    assert names == sorted(names, key=str.lower)
    assert len(names) == 5


def test_create_and_get(products):
    pid = products.create("  Water 500ml ", "12", "15.5")
    p = products.get(pid)
    assert (p.name, p.pcs, p.price) == ("Water 500ml", 12, 15.5)
    assert products.get_by_name("Water 500ml").product_id == pid


def test_duplicate_name_rejected(products):
    with pytest.raises(ValidationError):
        products.create("Coca Cola 250ml", 24, 20)


@pytest.mark.parametrize("name, pcs, price", [
    ("", 24, 20),
    ("Bad pcs", 0, 20),
    ("Fraction pcs", 1.5, 20),
    ("Bad price", 24, -1),
    ("No price", 24, ""),
    ("Infinite pcs", "inf", 20),
    ("Infinite price", 24, float("inf")),
    ("NaN price", 24, "nan"),
])
def test_invalid_products_rejected(products, name, pcs, price):
    with pytest.raises(ValidationError):
        products.create(name, pcs, price)


def test_update(products, coke):
    products.update(coke.product_id, coke.name, 12, 25)
    p = products.get(coke.product_id)
    assert (p.pcs, p.price) == (12, 25)


def test_update_name_clash(products, coke):
    with pytest.raises(ValidationError):
        products.update(coke.product_id, "Pepsi 250ml", 24, 20)


def test_update_missing(products):
    with pytest.raises(NotFoundError):
        products.update(9999, "Ghost", 1, 1)


def test_delete_blocked_once_stocked(products, ledger, coke, pepsi):
    ledger.initialize(coke.product_id, coke.name)
    with pytest.raises(DomainError):
        products.delete(coke.product_id)
    products.delete(pepsi.product_id)
    assert products.get(pepsi.product_id) is None
    assert products.get(coke.product_id) is not None
