"""
Stock dialogs.

- AddStockForm:    pick a product, enter pieces to add (> 0), optional notes.
- AdjustStockForm: set one product's quantity to an absolute value (>= 0);
                   a reason is required.

Both validate inline and expose the result through `payload()`.
"""

from __future__ import annotations

from typing import Iterable

from PySide6.QtWidgets import (
    QComboBox,
    QDialog,
    QDialogButtonBox,
    QFormLayout,
    QLabel,
    QLineEdit,
    QSpinBox,
    QVBoxLayout,
    QWidget,
)

from ...database.repositories.products_repo import Product
from ...database.repositories.stock_repo import StockRecord
from ...utils.validators import non_empty

_MAX_PIECES = 10**7


class _StockDialog(QDialog):
    def __init__(self, parent: QWidget | None, title: str):
        super().__init__(parent)
        self.setWindowTitle(title)
        self.setModal(True)
        self.setMinimumWidth(380)
        self._payload = None

        self.lbl_error = QLabel("")
        self.lbl_error.setStyleSheet("color:#b00020;")
        self.lbl_error.setVisible(False)

        self.buttons = QDialogButtonBox(QDialogButtonBox.Ok | QDialogButtonBox.Cancel)
        self.buttons.accepted.connect(self.accept)
        self.buttons.rejected.connect(self.reject)

        self.form = QFormLayout()
        layout = QVBoxLayout(self)
        layout.addLayout(self.form)
        layout.addWidget(self.lbl_error)
        layout.addWidget(self.buttons)

    def _show_error(self, text: str, widget: QWidget):
        self.lbl_error.setText(text)
        self.lbl_error.setVisible(True)
        widget.setFocus()

    def payload(self) -> dict | None:
        return self._payload


class AddStockForm(_StockDialog):
    def __init__(self, parent: QWidget | None = None, *, products: Iterable[Product] = ()):
        super().__init__(parent, "Add Stock")

        self.cmb_product = QComboBox()
        self.cmb_product.addItem("Select product…", None)
        for p in products:
            self.cmb_product.addItem(p.name, p)

        self.spin_qty = QSpinBox()
        self.spin_qty.setRange(0, _MAX_PIECES)

        self.edt_notes = QLineEdit()
        self.edt_notes.setPlaceholderText("Optional (defaults to 'Manual restock')")

        self.form.addRow("Product*", self.cmb_product)
        self.form.addRow("Pieces*", self.spin_qty)
        self.form.addRow("Notes", self.edt_notes)

    def accept(self):
        product = self.cmb_product.currentData()
        qty = int(self.spin_qty.value())
        if product is None:
            self._show_error("Please select a product.", self.cmb_product)
            return
        if qty <= 0:
            self._show_error("Please enter a valid quantity.", self.spin_qty)
            return
        self._payload = {
            "product_id": product.product_id,
            "product_name": product.name,
            "quantity": qty,
            "notes": self.edt_notes.text().strip() or None,
        }
        super().accept()


class AdjustStockForm(_StockDialog):
    def __init__(self, parent: QWidget | None = None, *, stock: StockRecord):
        super().__init__(parent, f"Adjust Stock: {stock.product_name}")
        self._stock = stock

        self.spin_qty = QSpinBox()
        self.spin_qty.setRange(0, _MAX_PIECES)
        self.spin_qty.setValue(stock.quantity)

        self.edt_reason = QLineEdit()
        self.edt_reason.setPlaceholderText("e.g., Damaged, Count correction…")

        self.form.addRow("Current", QLabel(str(stock.quantity)))
        self.form.addRow("New quantity*", self.spin_qty)
        self.form.addRow("Reason*", self.edt_reason)

    def accept(self):
        reason = self.edt_reason.text()
        if not non_empty(reason):
            self._show_error("Please provide a reason for the adjustment.", self.edt_reason)
            return
        self._payload = {
            "stock_id": self._stock.stock_id,
            "new_quantity": int(self.spin_qty.value()),
            "reason": reason.strip(),
        }
        super().accept()
