"""
Dialog for adding one delivery expense.

Validates: non-empty label, amount > 0.
On accept, `payload()` returns {"label": str, "amount": float}.
"""

from __future__ import annotations

from PySide6.QtWidgets import (
    QDialog,
    QDialogButtonBox,
    QFormLayout,
    QLineEdit,
    QDoubleSpinBox,
    QVBoxLayout,
    QLabel,
    QWidget,
)
from PySide6.QtCore import Qt

from ...utils.validators import non_empty


class ExpenseForm(QDialog):
    def __init__(self, parent: QWidget | None = None):
        super().__init__(parent)
        self.setWindowTitle("Add Expense")
        self.setModal(True)
        self.setMinimumWidth(360)
        self._payload = None

        self.edt_label = QLineEdit()
        self.edt_label.setPlaceholderText("e.g., Fuel, Labour, Toll…")

        self.spin_amount = QDoubleSpinBox()
        self.spin_amount.setMinimum(0.0)   # validation enforces > 0
        self.spin_amount.setMaximum(10**9)
        self.spin_amount.setDecimals(2)
        self.spin_amount.setButtonSymbols(QDoubleSpinBox.ButtonSymbols.NoButtons)
        self.spin_amount.setAlignment(Qt.AlignRight)

        self.lbl_error = QLabel("")
        self.lbl_error.setStyleSheet("color:#b00020;")
        self.lbl_error.setVisible(False)

        self.buttons = QDialogButtonBox(QDialogButtonBox.Ok | QDialogButtonBox.Cancel)
        self.buttons.accepted.connect(self.accept)
        self.buttons.rejected.connect(self.reject)

        layout = QVBoxLayout(self)
        form = QFormLayout()
        form.addRow("Expense*", self.edt_label)
        form.addRow("Amount*", self.spin_amount)
        layout.addLayout(form)
        layout.addWidget(self.lbl_error)
        layout.addWidget(self.buttons)

    def _show_error(self, text: str, widget: QWidget):
        self.lbl_error.setText(text)
        self.lbl_error.setVisible(True)
        widget.setFocus()

    def accept(self):
        label = self.edt_label.text()
        amount = float(self.spin_amount.value())
        if not non_empty(label):
            self._show_error("Please enter an expense name.", self.edt_label)
            return
        if amount <= 0:
            self._show_error("Amount must be greater than zero.", self.spin_amount)
            return
        self._payload = {"label": label.strip(), "amount": amount}
        super().accept()

    def payload(self) -> dict | None:
        return self._payload
