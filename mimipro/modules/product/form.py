from PySide6.QtWidgets import (
    QDialog, QFormLayout, QLineEdit, QDialogButtonBox, QVBoxLayout, QLabel,
)
from ...database.repositories.products_repo import Product
from ...utils.validators import non_empty, is_non_negative_number, parse_whole_number


class ProductForm(QDialog):
    """
    Name, pieces per carton and unit price.

    Checks here are for inline feedback only; ProductsRepo validates again
    (and also enforces unique names).
    """

    def __init__(self, parent=None, initial_product: Product | None = None):
        super().__init__(parent)
        self.setWindowTitle("Product")
        self.setModal(True)
        self._payload = None
        root = QVBoxLayout(self)

        self.name = QLineEdit()
        self.pcs = QLineEdit()
        self.pcs.setPlaceholderText("e.g., 24")
        self.price = QLineEdit()
        self.price.setPlaceholderText("0.00")

        field_width = 200
        for w in (self.name, self.pcs, self.price):
            w.setMaximumWidth(field_width)

        if initial_product is not None:
            self.name.setText(initial_product.name)
            self.pcs.setText(str(initial_product.pcs))
            self.price.setText(f"{initial_product.price:g}")

        form = QFormLayout()
        form.addRow("Name*", self.name)
        form.addRow("Pcs per carton*", self.pcs)
        form.addRow("Unit price*", self.price)
        root.addLayout(form)

        self.lbl_error = QLabel("")
        self.lbl_error.setStyleSheet("color: red;")
        self.lbl_error.setVisible(False)
        root.addWidget(self.lbl_error)

        btns = QDialogButtonBox(QDialogButtonBox.Ok | QDialogButtonBox.Cancel)
        btns.accepted.connect(self.accept)
        btns.rejected.connect(self.reject)
        root.addWidget(btns)

    def _fail(self, text: str, widget):
        self.lbl_error.setText(text)
        self.lbl_error.setVisible(True)
        widget.setFocus()

    def accept(self):
        if not non_empty(self.name.text()):
            self._fail("Name is required.", self.name)
            return
        try:
            pcs = parse_whole_number(self.pcs.text())
        except ValueError:
            pcs = 0
        if pcs < 1:
            self._fail("Pieces per carton must be a whole number of at least 1.", self.pcs)
            return
        if not is_non_negative_number(self.price.text()):
            self._fail("Price must be a non-negative number.", self.price)
            return
        self._payload = {
            "name": self.name.text().strip(),
            "pcs": pcs,
            "price": float(self.price.text()),
        }
        super().accept()

    def payload(self):
        return self._payload
