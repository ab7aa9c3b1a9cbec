# mimipro/database/repositories/products_repo.py
from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Optional

from ...constants import STORE_PRODUCTS, STORE_STOCK
from ...utils.validators import non_empty, parse_whole_number, try_parse_float
from ..errors import DomainError, NotFoundError, ValidationError
from ..store import RecordStore


@dataclass
class Product:
    product_id: int | None
    name: str
    pcs: int        # pieces per carton
    price: float    # unit (piece) price

    @classmethod
    def from_record(cls, rec: dict) -> "Product":
        return cls(
            product_id=int(rec["id"]) if rec.get("id") is not None else None,
            name=rec.get("name", ""),
            pcs=int(rec.get("pcs") or 1),
            price=float(rec.get("price") or 0),
        )

    def to_record(self) -> dict:
        rec = asdict(self)
        rec["id"] = rec.pop("product_id")
        return rec


class ProductsRepo:
    def __init__(self, store: RecordStore):
        self.store = store

    # ---------------------------- Products ----------------------------

    def list_products(self) -> list[Product]:
        rows = self.store.get_all(STORE_PRODUCTS)
        return sorted((Product.from_record(r) for r in rows), key=lambda p: p.name.lower())

    def get(self, product_id: int) -> Product | None:
        r = self.store.get(STORE_PRODUCTS, product_id)
        return Product.from_record(r) if r else None

    def get_by_name(self, name: str) -> Product | None:
        rows = self.store.get_by_index(STORE_PRODUCTS, "name", (name or "").strip())
        return Product.from_record(rows[0]) if rows else None

    def create(self, name: str, pcs, price) -> int:
        product = self._validated(None, name, pcs, price)
        if self.get_by_name(product.name):
            raise ValidationError(f"A product named '{product.name}' already exists.")
        rec = product.to_record()
        rec.pop("id")
        return self.store.add(STORE_PRODUCTS, rec)

    def update(self, product_id: int, name: str, pcs, price) -> None:
        """
        Rename/re-price a product. Saved deliveries keep the pcs/price they
        were computed with; only new calculations see the change.
        """
        if self.get(product_id) is None:
            raise NotFoundError(f"Product {product_id} not found.")
        product = self._validated(product_id, name, pcs, price)
        clash = self.get_by_name(product.name)
        if clash and clash.product_id != product_id:
            raise ValidationError(f"A product named '{product.name}' already exists.")
        self.store.update(STORE_PRODUCTS, product.to_record())

    def _product_is_referenced(self, product_id: int) -> bool:
        return bool(self.store.get_by_index(STORE_STOCK, "product_id", int(product_id)))

    def delete(self, product_id: int) -> None:
        """
        Safer delete: disallow once the product has a stock record, so stock
        and history never point at a missing product.
        """
        if self._product_is_referenced(product_id):
            raise DomainError(
                "Cannot delete product: it already has stock and history entries."
            )
        self.store.remove(STORE_PRODUCTS, product_id)

    # ---------------------------- Validation ----------------------------

    @staticmethod
    def _validated(product_id: Optional[int], name: str, pcs, price) -> Product:
        if not non_empty(name):
            raise ValidationError("Product name cannot be empty.")
        try:
            pcs_n = parse_whole_number(pcs)
        except ValueError as e:
            raise ValidationError("Pieces per carton must be a whole number.") from e
        if pcs_n < 1:
            raise ValidationError("Pieces per carton must be at least 1.")
        ok, price_n = try_parse_float(price)
        if not ok or price_n < 0:
            raise ValidationError("Price must be a non-negative number.")
        return Product(product_id=product_id, name=name.strip(), pcs=pcs_n, price=price_n)


__all__ = ["Product", "ProductsRepo"]
