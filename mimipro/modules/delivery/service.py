"""
modules/delivery/service.py

Purpose
-------
Validate and persist a delivery settlement, then reconcile stock.

Public interface
----------------
- DeliveryService.save(customer_name, line_items, expenses, cash_counts, products,
                       mode="create", existing_id=None) -> DeliveryRecord
- DeliveryService.save_session(session) -> DeliveryRecord
- DeliveryService.load_for_edit(record_id) -> EditableDelivery
- DeliveryService.open_for_edit(session, record_id) -> None
- DeliveryService.delete_record(record_id, session=None) -> DeliveryRecord
- DeliveryService.retry_reconciliation(record_id) -> DeliveryRecord
- DeliveryService.list_unreconciled() -> list[DeliveryRecord]

Save sequence (create mode)
---------------------------
1. Validate everything; ValidationError leaves the store untouched.
2. Write the history record (stock_reconciled=True).
3. Decrement stock per line, in line order.
4. If a decrement fails, the record is rewritten with stock_reconciled=False
   and the decrements still to apply, and UnreconciledDeliveryError is raised.
   Nothing is rolled back: the record is the settlement of money already
   collected and must not be lost.

A failure at step 2 raises PersistenceError and no stock is touched.
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from typing import Dict, Iterable, List, Mapping, Optional

from ...constants import (
    CASH_NOTES,
    DELIVERY_EDIT_REASON,
    DELIVERY_REASON,
    MODE_CREATE,
    MODE_UPDATE,
    RECONCILE_STOCK_ON_UPDATE,
    RETRY_REASON_SUFFIX,
)
from ...database.errors import (
    DomainError,
    UnreconciledDeliveryError,
    ValidationError,
)
from ...database.repositories.deliveries_repo import DeliveriesRepo, DeliveryRecord
from ...database.repositories.products_repo import Product, ProductsRepo
from ...database.repositories.stock_repo import StockLedger
from ...database.store import RecordStore
from ...utils.helpers import now_iso
from ...utils.validators import non_empty, parse_whole_number, try_parse_float
from .calculations import (
    CashCount,
    DeliveryLineItem,
    ExpenseEntry,
    compute_line,
    compute_totals,
    default_cash_counts,
    resolve_product,
)
from .session import DeliverySession, EditableDelivery

_log = logging.getLogger(__name__)


class DeliveryService:
    def __init__(
        self,
        store: RecordStore,
        *,
        products: ProductsRepo | None = None,
        deliveries: DeliveriesRepo | None = None,
        ledger: StockLedger | None = None,
        reconcile_on_update: bool = RECONCILE_STOCK_ON_UPDATE,
    ):
        self.store = store
        self.products = products or ProductsRepo(store)
        self.deliveries = deliveries or DeliveriesRepo(store)
        self.ledger = ledger or StockLedger(store)
        self.reconcile_on_update = reconcile_on_update

    # ------------------------------------------------------------------
    # Save
    # ------------------------------------------------------------------
    def save(
        self,
        customer_name: str,
        line_items: Iterable[DeliveryLineItem],
        expenses: Iterable[ExpenseEntry],
        cash_counts: Iterable[CashCount],
        products: Mapping[int, Product],
        mode: str = MODE_CREATE,
        existing_id: Optional[int] = None,
    ) -> DeliveryRecord:
        if mode not in (MODE_CREATE, MODE_UPDATE):
            raise ValidationError(f"Unknown save mode: {mode!r}")

        existing = None
        if mode == MODE_UPDATE:
            if existing_id is None:
                raise ValidationError("No delivery record selected for editing.")
            existing = self.deliveries.require(existing_id)
            name = customer_name.strip() if non_empty(customer_name) else existing.customer_name
        else:
            if not non_empty(customer_name):
                raise ValidationError("Please enter a customer name.")
            name = customer_name.strip()

        lines = self._validated_lines(line_items, products)
        expense_rows = self._validated_expenses(expenses)
        cash_rows = self._validated_cash(cash_counts)

        totals = compute_totals(
            [item for item, _ in lines],
            products,
            [CashCount(c["denomination"], c["quantity"]) for c in cash_rows],
            [ExpenseEntry(e["label"], e["amount"]) for e in expense_rows],
        )
        line_rows = [self._line_row(item, product) for item, product in lines]

        if existing is None:
            record = DeliveryRecord(
                record_id=None,
                customer_name=name,
                date=now_iso(),
                sales_total=totals.sales_total,
                cash_total=totals.cash_total,
                expense_total=totals.expense_total,
                net_total=totals.net_total,
                line_items=line_rows,
                expenses=expense_rows,
                cash_counts=cash_rows,
            )
            self.deliveries.add(record)
            _log.info(
                "Delivery %s saved for %s: sales %s, cash %s, expenses %s, net %s",
                record.record_id, name, totals.sales_total, totals.cash_total,
                totals.expense_total, totals.net_total,
            )
            changes = [
                {"product_id": r["product_id"], "product_name": r["product_name"],
                 "change": -r["sold_pieces"]}
                for r in line_rows if r["sold_pieces"] > 0
            ]
            self._apply_stock_changes(record, changes, DELIVERY_REASON.format(customer=name))
            return record

        record = DeliveryRecord(
            record_id=existing.record_id,
            customer_name=name,
            date=existing.date,
            sales_total=totals.sales_total,
            cash_total=totals.cash_total,
            expense_total=totals.expense_total,
            net_total=totals.net_total,
            line_items=line_rows,
            expenses=expense_rows,
            cash_counts=cash_rows,
            updated_at=now_iso(),
            stock_reconciled=existing.stock_reconciled,
            unreconciled_items=existing.unreconciled_items,
        )
        self.deliveries.replace(record)
        _log.info("Delivery %s updated for %s: net %s", record.record_id, name, totals.net_total)
        if self.reconcile_on_update:
            changes = self._edit_changes(existing.line_items, line_rows)
            self._apply_stock_changes(
                record, changes, DELIVERY_EDIT_REASON.format(customer=name),
                pending=existing.unreconciled_items,
            )
        return record

    def save_session(self, session: DeliverySession) -> DeliveryRecord:
        """
        Save the session's form state. The session is cleared once the record
        exists (including when stock could not be reconciled); on any earlier
        failure it is left as is so the user can fix and retry.
        """
        try:
            record = self.save(
                session.customer_name,
                session.line_items,
                session.expenses,
                session.cash_counts,
                session.products,
                mode=session.mode,
                existing_id=session.editing_id,
            )
        except UnreconciledDeliveryError:
            session.clear()
            raise
        session.clear()
        return record

    # ------------------------------------------------------------------
    # Edit
    # ------------------------------------------------------------------
    def load_for_edit(self, record_id: int) -> EditableDelivery:
        record = self.deliveries.require(record_id)
        lines = [
            DeliveryLineItem(
                product_id=row.get("product_id"),
                delivered_cartons=int(row.get("delivered_cartons") or 0),
                delivered_pieces=int(row.get("delivered_pieces") or 0),
                returned_cartons=int(row.get("returned_cartons") or 0),
                returned_pieces=int(row.get("returned_pieces") or 0),
                unit_price=float(row.get("unit_price") or 0),
                product_name=row.get("product_name") or "",
            )
            for row in record.line_items
        ]
        expenses = [ExpenseEntry(e["label"], float(e["amount"])) for e in record.expenses]
        cash = default_cash_counts({c["denomination"]: c["quantity"] for c in record.cash_counts})
        return EditableDelivery(
            record_id=record.record_id,
            customer_name=record.customer_name,
            line_items=lines or [DeliveryLineItem()],
            expenses=expenses,
            cash_counts=cash,
        )

    def open_for_edit(self, session: DeliverySession, record_id: int) -> None:
        session.load(self.load_for_edit(record_id))

    def delete_record(self, record_id: int, session: DeliverySession | None = None) -> DeliveryRecord:
        """
        Remove a saved settlement. Stock already decremented for it stays as
        is. A session that was editing the record is cleared.
        """
        record = self.deliveries.remove(record_id)
        _log.info(
            "Delivery %s for %s deleted (net %s)",
            record.record_id, record.customer_name, record.net_total,
        )
        if session is not None and session.editing_id == record_id:
            session.clear()
        return record

    # ------------------------------------------------------------------
    # Reconciliation
    # ------------------------------------------------------------------
    def list_unreconciled(self) -> List[DeliveryRecord]:
        return self.deliveries.list_unreconciled()

    def retry_reconciliation(self, record_id: int) -> DeliveryRecord:
        """Apply the stock changes a failed save left behind."""
        record = self.deliveries.require(record_id)
        if record.stock_reconciled and not record.unreconciled_items:
            return record
        reason = DELIVERY_REASON.format(customer=record.customer_name) + RETRY_REASON_SUFFIX
        self._apply_stock_changes(record, list(record.unreconciled_items), reason)
        record.stock_reconciled = True
        record.unreconciled_items = []
        self.deliveries.replace(record)
        _log.info("Delivery %s reconciled with stock", record.record_id)
        return record

    def _apply_stock_changes(
        self,
        record: DeliveryRecord,
        changes: List[dict],
        reason: str,
        pending: Iterable[dict] = (),
    ) -> None:
        """
        Apply `changes` in order. On failure the record keeps `pending`
        (changes left over from an earlier failure) followed by the
        changes not yet applied.
        """
        for i, item in enumerate(changes):
            try:
                self.ledger.initialize(item["product_id"], item["product_name"])
                self.ledger.adjust(item["product_id"], item["change"], reason)
            except DomainError as e:
                _log.error(
                    "Stock update failed for %s on delivery %s: %s",
                    item["product_name"], record.record_id, e,
                )
                self._flag_unreconciled(record, list(pending) + changes[i:])
                raise UnreconciledDeliveryError(
                    f"Delivery saved, but stock could not be updated for "
                    f"{item['product_name']}: {e}",
                    record.record_id,
                ) from e

    def _flag_unreconciled(self, record: DeliveryRecord, remaining: List[dict]) -> None:
        record.stock_reconciled = False
        record.unreconciled_items = remaining
        try:
            self.deliveries.replace(record)
        except DomainError:
            _log.exception("Could not flag delivery %s as unreconciled", record.record_id)

    @staticmethod
    def _edit_changes(old_rows: List[dict], new_rows: List[dict]) -> List[dict]:
        """Stock changes that take stock from the old sold quantities to the new ones."""
        def sold_by_product(rows):
            out: Dict[int, list] = OrderedDict()
            for r in rows:
                pid = r.get("product_id")
                if pid is None:
                    continue
                entry = out.setdefault(pid, [r.get("product_name") or "", 0])
                entry[1] += int(r.get("sold_pieces") or 0)
            return out

        old = sold_by_product(old_rows)
        new = sold_by_product(new_rows)
        changes = []
        for pid in list(new) + [p for p in old if p not in new]:
            name = (new.get(pid) or old.get(pid))[0]
            delta = new.get(pid, [name, 0])[1] - old.get(pid, [name, 0])[1]
            if delta:
                changes.append({"product_id": pid, "product_name": name, "change": -delta})
        return changes

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------
    @staticmethod
    def _validated_lines(line_items, products: Mapping[int, Product]) -> List[tuple]:
        """
        Lines with a resolved product, as (normalized item, product) pairs.

        Lines with no product selected are skipped. A line pointing at a
        product that is no longer in the catalogue is an error, not a skip,
        so an edited record never loses a stored line silently.
        """
        out = []
        for n, item in enumerate(line_items, start=1):
            if item.product_id is None:
                continue
            product = resolve_product(item, products)
            if product is None:
                label = item.product_name or f"product #{item.product_id}"
                raise ValidationError(
                    f"Line {n}: {label} is no longer in the product list. "
                    f"Remove the line or pick another product."
                )
            try:
                counts = [
                    parse_whole_number(getattr(item, f))
                    for f in ("delivered_cartons", "delivered_pieces",
                              "returned_cartons", "returned_pieces")
                ]
            except ValueError as e:
                raise ValidationError(f"Line {n}: quantities must be whole numbers.") from e
            if any(c < 0 for c in counts):
                raise ValidationError(f"Line {n}: quantities cannot be negative.")
            ok, price = try_parse_float(item.unit_price)
            if not ok or price < 0:
                raise ValidationError(f"Line {n}: price must be a non-negative number.")
            dc, dp, rc, rp = counts
            out.append((
                DeliveryLineItem(
                    product_id=product.product_id,
                    delivered_cartons=dc,
                    delivered_pieces=dp,
                    returned_cartons=rc,
                    returned_pieces=rp,
                    unit_price=price,
                    product_name=product.name,
                ),
                product,
            ))
        if not out:
            raise ValidationError("Please add at least one product before saving.")
        return out

    @staticmethod
    def _line_row(item: DeliveryLineItem, product: Product) -> dict:
        result = compute_line(item, product)
        row = item.to_dict()
        row.update(pcs=product.pcs, sold_pieces=result.sold_pieces, line_total=result.line_total)
        return row

    @staticmethod
    def _validated_expenses(expenses) -> List[dict]:
        rows = []
        for e in expenses:
            ok, amount = try_parse_float(e.amount)
            if not ok or amount < 0:
                raise ValidationError("Expense amounts must be non-negative numbers.")
            if amount == 0:
                continue
            if not non_empty(e.label):
                raise ValidationError("Expense name cannot be empty.")
            rows.append({"label": e.label.strip(), "amount": amount})
        return rows

    @staticmethod
    def _validated_cash(cash_counts) -> List[dict]:
        """Only notes with a non-zero count are stored."""
        rows = []
        for c in cash_counts:
            if c.denomination not in CASH_NOTES:
                raise ValidationError(f"Unknown cash note: {c.denomination}")
            try:
                qty = parse_whole_number(c.quantity)
            except ValueError as e:
                raise ValidationError(f"Count for {c.denomination} notes must be a whole number.") from e
            if qty < 0:
                raise ValidationError(f"Count for {c.denomination} notes cannot be negative.")
            if qty:
                rows.append({
                    "denomination": c.denomination,
                    "quantity": qty,
                    "line_total": c.denomination * qty,
                })
        return rows
