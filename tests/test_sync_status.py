# tests/test_sync_status.py
from mimipro.constants import STORE_STOCK


def test_nothing_pending_initially(sync):
    assert sync.pending_items() == []
    assert sync.pending_summary() == {}
    assert sync.perform_sync() == 0
    assert sync.last_sync_time() is None


def test_pending_summary_and_sync(sync):
    sync.mark_pending(STORE_STOCK, 1)
    sync.mark_pending(STORE_STOCK, 2)
    sync.mark_pending("products", 3)
    assert sync.pending_summary() == {STORE_STOCK: 2, "products": 1}

    assert sync.perform_sync() == 3
    assert sync.pending_items() == []
    assert sync.last_sync_time() is not None
