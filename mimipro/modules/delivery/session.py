"""
Per-screen delivery state.

A DeliverySession holds everything the delivery form edits: the product
snapshot used for calculations, the line items, expenses, cash counts and the
id of the record being edited (None for a new settlement). The controller
owns one session; table models read and write it, and totals are always
recomputed from it, never from what is on screen.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from ...constants import CASH_NOTES, MODE_CREATE, MODE_UPDATE
from ...database.errors import ValidationError
from ...database.repositories.products_repo import Product
from ...utils.validators import non_empty, try_parse_float
from .calculations import (
    CashCount,
    DeliveryLineItem,
    ExpenseEntry,
    LineResult,
    Totals,
    compute_line,
    compute_totals,
    default_cash_counts,
    resolve_product,
)


@dataclass
class EditableDelivery:
    """Form state rebuilt from a saved record."""
    record_id: int
    customer_name: str
    line_items: List[DeliveryLineItem]
    expenses: List[ExpenseEntry]
    cash_counts: List[CashCount]


@dataclass
class DeliverySession:
    products: Dict[int, Product] = field(default_factory=dict)
    line_items: List[DeliveryLineItem] = field(default_factory=list)
    expenses: List[ExpenseEntry] = field(default_factory=list)
    cash_counts: List[CashCount] = field(default_factory=default_cash_counts)
    editing_id: Optional[int] = None
    customer_name: str = ""

    @property
    def mode(self) -> str:
        return MODE_UPDATE if self.editing_id is not None else MODE_CREATE

    def set_products(self, products: Iterable[Product]) -> None:
        self.products = {p.product_id: p for p in products}

    # ---------- line items ----------

    def add_line(self, product_id: Optional[int] = None) -> DeliveryLineItem:
        item = DeliveryLineItem()
        self.line_items.append(item)
        if product_id is not None:
            self.select_product(len(self.line_items) - 1, product_id)
        return item

    def select_product(self, index: int, product_id: Optional[int]) -> None:
        """Pick a product for a line; the line's price is refilled from the product."""
        item = self.line_items[index]
        item.product_id = product_id
        product = self.products.get(product_id) if product_id is not None else None
        if product is not None:
            item.product_name = product.name
            item.unit_price = product.price
        else:
            item.product_name = ""

    def remove_line(self, index: int) -> None:
        del self.line_items[index]

    def line_result(self, index: int) -> Optional[LineResult]:
        item = self.line_items[index]
        product = resolve_product(item, self.products)
        return compute_line(item, product) if product is not None else None

    # ---------- expenses ----------

    def add_expense(self, label: str, amount) -> ExpenseEntry:
        ok, value = try_parse_float(amount)
        if not non_empty(label) or not ok or value <= 0:
            raise ValidationError("Please enter a valid expense name and amount.")
        entry = ExpenseEntry(label=label.strip(), amount=value)
        self.expenses.append(entry)
        return entry

    def remove_expense(self, index: int) -> None:
        del self.expenses[index]

    # ---------- cash ----------

    def set_cash_quantity(self, denomination: int, quantity: int) -> None:
        if denomination not in CASH_NOTES:
            raise ValidationError(f"Unknown cash note: {denomination}")
        for c in self.cash_counts:
            if c.denomination == denomination:
                c.quantity = quantity
                return

    # ---------- totals / lifecycle ----------

    def totals(self) -> Totals:
        return compute_totals(self.line_items, self.products, self.cash_counts, self.expenses)

    def clear(self) -> None:
        """Back to a blank form: one empty line, no expenses, zero cash."""
        self.line_items = [DeliveryLineItem()]
        self.expenses = []
        self.cash_counts = default_cash_counts()
        self.editing_id = None
        self.customer_name = ""

    def load(self, editable: EditableDelivery) -> None:
        self.line_items = list(editable.line_items)
        self.expenses = list(editable.expenses)
        self.cash_counts = list(editable.cash_counts)
        self.editing_id = editable.record_id
        self.customer_name = editable.customer_name
