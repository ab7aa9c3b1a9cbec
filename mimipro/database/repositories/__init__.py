# mimipro/database/repositories/__init__.py
"""
Repository layer public API.

Usage:
    from mimipro.database.repositories import (
        # Products
        ProductsRepo, Product,
        # Stock ledger
        StockLedger, StockRecord, StockHistoryEntry, stock_status,
        # Deliveries (history collection)
        DeliveriesRepo, DeliveryRecord,
        # Sync flags
        SyncStatusRepo,
    )
"""

# ---------------- Products -----------------
from .products_repo import ProductsRepo, Product

# ------------------ Stock ------------------
from .stock_repo import StockLedger, StockRecord, StockHistoryEntry, stock_status

# ---------------- Deliveries ---------------
from .deliveries_repo import DeliveriesRepo, DeliveryRecord

# ------------------- Sync ------------------
from .sync_status_repo import SyncStatusRepo

__all__ = [
    # products_repo
    "ProductsRepo",
    "Product",
    # stock_repo
    "StockLedger",
    "StockRecord",
    "StockHistoryEntry",
    "stock_status",
    # deliveries_repo
    "DeliveriesRepo",
    "DeliveryRecord",
    # sync_status_repo
    "SyncStatusRepo",
]
