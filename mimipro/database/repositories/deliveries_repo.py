from __future__ import annotations

"""
Repository for saved delivery settlements (the `history` collection).

A DeliveryRecord owns its line items, expenses and cash counts; they are
embedded in the document and have no identity of their own. Records are
written whole: `add` for new settlements, `replace` when a settlement is
edited (same id). Totals are stored rounded to whole currency units.

Line items are stored with the sold quantity and line total computed at save
time, so later product price/pcs changes never rewrite history.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from ...constants import STORE_HISTORY
from ..errors import NotFoundError
from ..store import RecordStore


@dataclass
class DeliveryRecord:
    record_id: int | None
    customer_name: str
    date: str
    sales_total: int
    cash_total: int
    expense_total: int
    net_total: int
    line_items: List[dict] = field(default_factory=list)
    expenses: List[dict] = field(default_factory=list)
    cash_counts: List[dict] = field(default_factory=list)
    updated_at: str | None = None
    stock_reconciled: bool = True
    unreconciled_items: List[dict] = field(default_factory=list)

    @classmethod
    def from_record(cls, rec: dict) -> "DeliveryRecord":
        return cls(
            record_id=int(rec["id"]) if rec.get("id") is not None else None,
            customer_name=rec.get("customer_name") or "",
            date=rec.get("date") or "",
            sales_total=int(rec.get("sales_total") or 0),
            cash_total=int(rec.get("cash_total") or 0),
            expense_total=int(rec.get("expense_total") or 0),
            net_total=int(rec.get("net_total") or 0),
            line_items=list(rec.get("line_items") or []),
            expenses=list(rec.get("expenses") or []),
            cash_counts=list(rec.get("cash_counts") or []),
            updated_at=rec.get("updated_at"),
            stock_reconciled=bool(rec.get("stock_reconciled", True)),
            unreconciled_items=list(rec.get("unreconciled_items") or []),
        )

    def to_record(self) -> dict:
        rec = {
            "customer_name": self.customer_name,
            "date": self.date,
            "sales_total": self.sales_total,
            "cash_total": self.cash_total,
            "expense_total": self.expense_total,
            "net_total": self.net_total,
            "line_items": self.line_items,
            "expenses": self.expenses,
            "cash_counts": self.cash_counts,
            "updated_at": self.updated_at,
            "stock_reconciled": self.stock_reconciled,
            "unreconciled_items": self.unreconciled_items,
        }
        if self.record_id is not None:
            rec["id"] = self.record_id
        return rec

    @property
    def label(self) -> str:
        """'<customer>, <date>' as shown in history lists."""
        return f"{self.customer_name}, {self.date[:10]}"


class DeliveriesRepo:
    def __init__(self, store: RecordStore):
        self.store = store

    def list_records(
        self,
        *,
        year: Optional[int] = None,
        month: Optional[int] = None,
        day: Optional[str] = None,
    ) -> List[DeliveryRecord]:
        """
        Newest first (date DESC, id DESC).

        Filters match the record's local save date and combine: `year` (2024),
        `month` (1-12, any year unless `year` is given) and `day` ("YYYY-MM-DD").
        """
        rows = [DeliveryRecord.from_record(r) for r in self.store.get_all(STORE_HISTORY)]
        if year is not None:
            rows = [d for d in rows if d.date[:4] == f"{int(year):04d}"]
        if month is not None:
            rows = [d for d in rows if d.date[5:7] == f"{int(month):02d}"]
        if day:
            rows = [d for d in rows if d.date[:10] == day]
        rows.sort(key=lambda d: (d.date, d.record_id or 0), reverse=True)
        return rows

    def get(self, record_id: int) -> Optional[DeliveryRecord]:
        rec = self.store.get(STORE_HISTORY, record_id)
        return DeliveryRecord.from_record(rec) if rec else None

    def require(self, record_id: int) -> DeliveryRecord:
        rec = self.get(record_id)
        if rec is None:
            raise NotFoundError(f"Delivery record {record_id} not found.")
        return rec

    def add(self, record: DeliveryRecord) -> int:
        data = record.to_record()
        data.pop("id", None)
        record.record_id = self.store.add(STORE_HISTORY, data)
        return record.record_id

    def replace(self, record: DeliveryRecord) -> None:
        if record.record_id is None:
            raise NotFoundError("Cannot replace a delivery record without an id.")
        self.store.update(STORE_HISTORY, record.to_record())

    def list_unreconciled(self) -> List[DeliveryRecord]:
        return [r for r in self.list_records() if not r.stock_reconciled]

    def years(self) -> List[int]:
        """Years that have at least one record, newest first."""
        found = {
            int(r["date"][:4])
            for r in self.store.get_all(STORE_HISTORY)
            if str(r.get("date") or "")[:4].isdigit()
        }
        return sorted(found, reverse=True)

    def remove(self, record_id: int) -> DeliveryRecord:
        """Delete a record and return what was deleted. Stock is not touched."""
        record = self.require(record_id)
        self.store.remove(STORE_HISTORY, record_id)
        return record
