from __future__ import annotations

"""
Stock ledger: current on-hand quantity per product plus an append-only
adjustment history.

Collections:
- stock          one record per product (unique index on product_id),
                 the single source of truth for the current quantity.
- stock_history  one entry per mutation; never consulted for quantities.

Quantities are whole pieces and never go below zero. Over-decrementing clamps
to zero instead of failing. History contract for a clamped adjustment:
  - `change` is the requested delta (e.g. -30),
  - `old_quantity`/`new_quantity` are the stored values before/after
    (e.g. 10 -> 0), so the applied delta is new_quantity - old_quantity.

Each mutation writes the stock record and its history entry in one store
transaction.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from ...constants import (
    LOW_STOCK_THRESHOLD,
    MANUAL_RESTOCK_REASON,
    STOCK_STATUS_LOW,
    STOCK_STATUS_NORMAL,
    STOCK_STATUS_OUT,
    STORE_STOCK,
    STORE_STOCK_HISTORY,
)
from ...utils.helpers import now_iso
from ...utils.validators import non_empty, parse_whole_number
from ..errors import NotFoundError, ValidationError
from ..store import RecordStore
from .sync_status_repo import SyncStatusRepo

_log = logging.getLogger(__name__)


@dataclass
class StockRecord:
    stock_id: int | None
    product_id: int
    product_name: str
    quantity: int
    last_updated: str | None

    @classmethod
    def from_record(cls, rec: dict) -> "StockRecord":
        return cls(
            stock_id=int(rec["id"]) if rec.get("id") is not None else None,
            product_id=int(rec["product_id"]),
            product_name=rec.get("product_name") or "",
            quantity=int(rec.get("quantity") or 0),
            last_updated=rec.get("last_updated"),
        )

    def to_record(self) -> dict:
        rec = {
            "product_id": self.product_id,
            "product_name": self.product_name,
            "quantity": self.quantity,
            "last_updated": self.last_updated,
        }
        if self.stock_id is not None:
            rec["id"] = self.stock_id
        return rec

    @property
    def status(self) -> str:
        return stock_status(self.quantity)


@dataclass
class StockHistoryEntry:
    entry_id: int | None
    product_id: int
    product_name: str
    change: int
    old_quantity: int
    new_quantity: int
    reason: str
    date: str

    @classmethod
    def from_record(cls, rec: dict) -> "StockHistoryEntry":
        return cls(
            entry_id=int(rec["id"]) if rec.get("id") is not None else None,
            product_id=int(rec["product_id"]),
            product_name=rec.get("product_name") or "",
            change=int(rec.get("change") or 0),
            old_quantity=int(rec.get("old_quantity") or 0),
            new_quantity=int(rec.get("new_quantity") or 0),
            reason=rec.get("reason") or "",
            date=rec.get("date") or "",
        )

    @property
    def applied_change(self) -> int:
        return self.new_quantity - self.old_quantity


def stock_status(quantity: int) -> str:
    """Display classification; never stored."""
    if quantity <= 0:
        return STOCK_STATUS_OUT
    if quantity < LOW_STOCK_THRESHOLD:
        return STOCK_STATUS_LOW
    return STOCK_STATUS_NORMAL


class StockLedger:
    def __init__(self, store: RecordStore, sync: SyncStatusRepo | None = None):
        self.store = store
        self.sync = sync or SyncStatusRepo(store)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    def get_for_product(self, product_id: int) -> StockRecord | None:
        rows = self.store.get_by_index(STORE_STOCK, "product_id", int(product_id))
        return StockRecord.from_record(rows[0]) if rows else None

    def get(self, stock_id: int) -> StockRecord | None:
        rec = self.store.get(STORE_STOCK, stock_id)
        return StockRecord.from_record(rec) if rec else None

    def list_stock(self) -> List[StockRecord]:
        rows = [StockRecord.from_record(r) for r in self.store.get_all(STORE_STOCK)]
        return sorted(rows, key=lambda s: s.product_name.lower())

    def history(self, product_id: Optional[int] = None, limit: Optional[int] = None) -> List[StockHistoryEntry]:
        """Newest first; optionally for one product and capped at `limit`."""
        if product_id is None:
            rows = self.store.get_all(STORE_STOCK_HISTORY)
        else:
            rows = self.store.get_by_index(STORE_STOCK_HISTORY, "product_id", int(product_id))
        entries = [StockHistoryEntry.from_record(r) for r in rows]
        entries.sort(key=lambda e: e.entry_id or 0, reverse=True)
        return entries[:limit] if limit else entries

    # ------------------------------------------------------------------
    # Core operations
    # ------------------------------------------------------------------
    def initialize(self, product_id: int, product_name: str) -> StockRecord:
        """Return the product's stock record, creating it at quantity 0 if missing."""
        existing = self.get_for_product(product_id)
        if existing:
            return existing
        rec = StockRecord(
            stock_id=None,
            product_id=int(product_id),
            product_name=product_name,
            quantity=0,
            last_updated=now_iso(),
        )
        rec.stock_id = self.store.add(STORE_STOCK, rec.to_record())
        _log.info("Stock record created for %s (product %s)", product_name, product_id)
        return rec

    def adjust(self, product_id: int, delta, reason: str = "") -> StockRecord:
        """
        Apply a signed delta, clamping the result at zero.
        Raises NotFoundError when the product has no stock record.
        """
        try:
            delta_n = parse_whole_number(delta)
        except ValueError as e:
            raise ValidationError(f"Invalid stock change: {delta!r}") from e

        return self._mutate(product_id, lambda old: (delta_n, max(0, old + delta_n)), reason)

    def set_absolute(self, product_id: int, new_quantity, reason: str) -> StockRecord:
        """
        Overwrite the quantity (clamped at zero). `change` is new - old as
        requested; a reason is mandatory.
        """
        if not non_empty(reason):
            raise ValidationError("Please provide a reason for the adjustment.")
        try:
            target = parse_whole_number(new_quantity)
        except ValueError as e:
            raise ValidationError(f"Invalid quantity: {new_quantity!r}") from e

        return self._mutate(product_id, lambda old: (target - old, max(0, target)), reason)

    def _mutate(self, product_id: int, plan, reason: str) -> StockRecord:
        """`plan(old_quantity)` returns (recorded change, new quantity)."""
        with self.store.transaction():
            current = self.get_for_product(product_id)
            if current is None:
                raise NotFoundError(f"Stock record not found for product {product_id}.")
            old = current.quantity
            change, current.quantity = plan(old)
            current.last_updated = now_iso()
            self.store.add(STORE_STOCK_HISTORY, {
                "product_id": current.product_id,
                "product_name": current.product_name,
                "change": change,
                "old_quantity": old,
                "new_quantity": current.quantity,
                "reason": (reason or "").strip(),
                "date": current.last_updated,
            })
            self.store.update(STORE_STOCK, current.to_record())
        if old + change < 0:
            _log.warning(
                "Stock for %s clamped at 0 (had %s, change %s)",
                current.product_name, old, change,
            )
        _log.info(
            "Stock %s: %s -> %s (%+d) %s",
            current.product_name, old, current.quantity, change, reason,
        )
        return current

    # ------------------------------------------------------------------
    # Manual flows (stock screen); these flag the stock record for sync
    # ------------------------------------------------------------------
    def restock(self, product_id: int, product_name: str, quantity, notes: str | None = None) -> StockRecord:
        """Add pieces to a product's stock, creating the record on first use."""
        try:
            qty = parse_whole_number(quantity)
        except ValueError as e:
            raise ValidationError("Please enter a valid quantity.") from e
        if qty <= 0:
            raise ValidationError("Please enter a valid quantity.")

        self.initialize(product_id, product_name)
        reason = notes.strip() if non_empty(notes) else MANUAL_RESTOCK_REASON
        rec = self.adjust(product_id, qty, reason)
        self.sync.mark_pending(STORE_STOCK, rec.stock_id)
        return rec

    def adjust_to(self, stock_id: int, new_quantity, reason: str) -> StockRecord:
        """Set a stock record (by its own id) to an absolute quantity."""
        try:
            qty = parse_whole_number(new_quantity)
        except ValueError as e:
            raise ValidationError("Please enter a valid quantity.") from e
        if qty < 0:
            raise ValidationError("Please enter a valid quantity.")
        if not non_empty(reason):
            raise ValidationError("Please provide a reason for the adjustment.")

        stock = self.get(stock_id)
        if stock is None:
            raise NotFoundError("Stock record not found.")
        rec = self.set_absolute(stock.product_id, qty, reason)
        self.sync.mark_pending(STORE_STOCK, rec.stock_id)
        return rec
