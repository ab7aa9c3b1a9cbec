# tests/test_deliveries_repo.py
import pytest

from mimipro.database.errors import NotFoundError
from mimipro.database.repositories.deliveries_repo import DeliveriesRepo, DeliveryRecord


def _record(customer, date, net=0):
    return DeliveryRecord(
        record_id=None, customer_name=customer, date=date,
        sales_total=net, cash_total=0, expense_total=0, net_total=net,
    )


@pytest.fixture()
def deliveries(store) -> DeliveriesRepo:
    repo = DeliveriesRepo(store)
    for customer, date in [
        ("Rahim Store", "2023-12-31T18:00:00"),
        ("Corner Shop", "2024-01-15T09:30:00"),
        ("Karim Traders", "2024-01-15T17:05:00"),
        ("Rahim Store", "2024-03-02T11:00:00"),
    ]:
        repo.add(_record(customer, date))
    return repo


def test_list_newest_first(deliveries):
    dates = [d.date for d in deliveries.list_records()]
    assert dates == sorted(dates, reverse=True)
    assert len(dates) == 4


@pytest.mark.parametrize("filters, customers", [
    ({"year": 2024}, ["Rahim Store", "Karim Traders", "Corner Shop"]),
    ({"year": 2023}, ["Rahim Store"]),
    ({"month": 1}, ["Karim Traders", "Corner Shop"]),
    ({"month": 12}, ["Rahim Store"]),
    ({"year": 2023, "month": 1}, []),
    ({"day": "2024-01-15"}, ["Karim Traders", "Corner Shop"]),
    ({"year": 2024, "month": 3, "day": "2024-03-02"}, ["Rahim Store"]),
    ({"day": "2024-02-01"}, []),
    ({"year": None, "month": None, "day": None}, ["Rahim Store", "Karim Traders", "Corner Shop", "Rahim Store"]),
])
def test_list_filters(deliveries, filters, customers):
    assert [d.customer_name for d in deliveries.list_records(**filters)] == customers


def test_years(deliveries, store):
    assert deliveries.years() == [2024, 2023]
    assert DeliveriesRepo(store).list_unreconciled() == []


def test_remove(deliveries):
    target = deliveries.list_records(day="2024-03-02")[0]
    removed = deliveries.remove(target.record_id)
    assert removed.customer_name == "Rahim Store"
    assert deliveries.get(target.record_id) is None
    assert len(deliveries.list_records()) == 3
    assert deliveries.years() == [2024, 2023]


def test_remove_missing(deliveries):
    with pytest.raises(NotFoundError):
        deliveries.remove(9999)
    assert len(deliveries.list_records()) == 4
