"""
delivery/calculations.py

Pure settlement math for a delivery run:
- sold pieces per line from delivered/returned cartons and pieces,
- sales, cash (note count) and expense totals,
- net settlement = sales - cash - expenses.

Do not import repos or open DB connections here. Products are passed in and
only their `pcs` multiplier is read, at computation time. Internal sums stay
unrounded; `compute_totals` rounds each total half-up to a whole unit and
derives the net from the rounded parts.
"""
from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Iterable, List, Mapping, Optional, Protocol

from ...constants import CASH_NOTES
from ...utils.helpers import round_half_up

__all__ = [
    "DeliveryLineItem",
    "CashCount",
    "ExpenseEntry",
    "LineResult",
    "Totals",
    "clamp_non_negative",
    "compute_line",
    "resolve_product",
    "aggregate",
    "aggregate_cash",
    "aggregate_expenses",
    "net_total",
    "compute_totals",
    "default_cash_counts",
]


class HasPcs(Protocol):
    pcs: int


# -----------------------------
# Value types
# -----------------------------

@dataclass
class DeliveryLineItem:
    product_id: Optional[int] = None
    delivered_cartons: int = 0
    delivered_pieces: int = 0
    returned_cartons: int = 0
    returned_pieces: int = 0
    unit_price: float = 0.0
    product_name: str = ""

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class CashCount:
    denomination: int
    quantity: int = 0

    @property
    def line_total(self) -> int:
        return self.denomination * self.quantity


@dataclass
class ExpenseEntry:
    label: str
    amount: float


@dataclass(frozen=True)
class LineResult:
    sold_pieces: int
    line_total: float


@dataclass(frozen=True)
class Totals:
    sales_total: int
    cash_total: int
    expense_total: int
    net_total: int


# -----------------------------
# Core utilities
# -----------------------------

def clamp_non_negative(x):
    """Return x if x > 0, else 0 (returns exceeding deliveries sell nothing)."""
    return x if x > 0 else 0


def compute_line(item: DeliveryLineItem, product: HasPcs) -> LineResult:
    """
    delivered = dc * pcs + dp; returned = rc * pcs + rp
    sold = max(0, delivered - returned); total = sold * unit_price
    """
    pcs = product.pcs
    delivered = item.delivered_cartons * pcs + item.delivered_pieces
    returned = item.returned_cartons * pcs + item.returned_pieces
    sold = clamp_non_negative(delivered - returned)
    return LineResult(sold_pieces=sold, line_total=sold * item.unit_price)


def resolve_product(item: DeliveryLineItem, products: Mapping[int, HasPcs]):
    """The line's product, or None when nothing (or an unknown id) is selected."""
    if item.product_id is None:
        return None
    return products.get(item.product_id)


# -----------------------------
# Aggregates
# -----------------------------

def aggregate(line_items: Iterable[DeliveryLineItem], products: Mapping[int, HasPcs]) -> float:
    """Unrounded sales total; lines without a resolved product are skipped."""
    total = 0.0
    for item in line_items:
        product = resolve_product(item, products)
        if product is None:
            continue
        total += compute_line(item, product).line_total
    return total


def aggregate_cash(cash_counts: Iterable[CashCount]) -> float:
    return float(sum(c.denomination * c.quantity for c in cash_counts))


def aggregate_expenses(expenses: Iterable[ExpenseEntry]) -> float:
    """Only positive amounts count."""
    return float(sum(e.amount for e in expenses if e.amount > 0))


def net_total(sales_total: float, cash_total: float, expense_total: float) -> float:
    return sales_total - cash_total - expense_total


def compute_totals(
    line_items: Iterable[DeliveryLineItem],
    products: Mapping[int, HasPcs],
    cash_counts: Iterable[CashCount],
    expenses: Iterable[ExpenseEntry],
) -> Totals:
    sales = round_half_up(aggregate(line_items, products))
    cash = round_half_up(aggregate_cash(cash_counts))
    expense = round_half_up(aggregate_expenses(expenses))
    return Totals(
        sales_total=sales,
        cash_total=cash,
        expense_total=expense,
        net_total=int(net_total(sales, cash, expense)),
    )


def default_cash_counts(quantities: Mapping[int, int] | None = None) -> List[CashCount]:
    """One CashCount per note in CASH_NOTES order, quantities defaulting to 0."""
    quantities = quantities or {}
    return [CashCount(denomination=n, quantity=int(quantities.get(n, 0))) for n in CASH_NOTES]
