import logging

from ...constants import STORE_PRODUCTS

_log = logging.getLogger(__name__)

SAMPLE_PRODUCTS = [
    {"name": "Coca Cola 250ml", "pcs": 24, "price": 20},
    {"name": "Pepsi 250ml", "pcs": 24, "price": 20},
    {"name": "Sprite 250ml", "pcs": 24, "price": 20},
    {"name": "Fanta 250ml", "pcs": 24, "price": 20},
    {"name": "Mountain Dew 250ml", "pcs": 24, "price": 22},
]


def seed(store):
    # if no products exist, create the sample catalogue
    if store.count(STORE_PRODUCTS) == 0:
        store.bulk_add(STORE_PRODUCTS, [dict(p) for p in SAMPLE_PRODUCTS])
        _log.info("Seeded %d sample products", len(SAMPLE_PRODUCTS))
