import sqlite3

from PySide6.QtCore import Qt, QRegularExpression
from PySide6.QtWidgets import QWidget

from ..base_module import BaseModule
from .view import ProductView
from .form import ProductForm
from .model import ProductsTableModel, ProductFilterProxy
from ...database.errors import DomainError
from ...database.repositories.products_repo import ProductsRepo
from ...database.store import RecordStore
from ...utils.ui_helpers import info, error, confirm


class ProductController(BaseModule):
    def __init__(self, conn: sqlite3.Connection):
        super().__init__()
        self.conn = conn
        self.repo = ProductsRepo(RecordStore(conn))
        self.view = ProductView()
        self.base_model = ProductsTableModel([])
        self.proxy = ProductFilterProxy(self.view)
        self.proxy.setSourceModel(self.base_model)
        self.proxy.setFilterCaseSensitivity(Qt.CaseInsensitive)
        self.view.table.setModel(self.proxy)
        self._connect_signals()
        self.refresh()

    def get_widget(self) -> QWidget:
        return self.view

    def _connect_signals(self):
        self.view.btn_add.clicked.connect(self._add)
        self.view.btn_edit.clicked.connect(self._edit)
        self.view.btn_del.clicked.connect(self._delete)
        self.view.search.textChanged.connect(self._apply_filter)
        self.view.table.doubleClicked.connect(lambda _=None: self._edit())

    def refresh(self) -> None:
        self.base_model.replace(self.repo.list_products())
        self.view.table.resizeColumnsToContents()

    def _apply_filter(self, text: str):
        self.proxy.setFilterRegularExpression(
            QRegularExpression(QRegularExpression.escape(text), QRegularExpression.CaseInsensitiveOption)
        )

    def _selected_id(self) -> int | None:
        r = self.view.table.selected_row()
        return self.base_model.at(r).product_id if r is not None else None

    def _add(self):
        dlg = ProductForm(self.view)
        if not dlg.exec():
            return
        data = dlg.payload()
        if not data:
            return
        try:
            pid = self.repo.create(**data)
        except DomainError as e:
            error(self.view, "Cannot save", str(e))
            return
        info(self.view, "Saved", f"Product #{pid} created.")
        self.refresh()
        self.dataChanged.emit()

    def _edit(self):
        pid = self._selected_id()
        if not pid:
            info(self.view, "Select", "Please select a product to edit.")
            return
        dlg = ProductForm(self.view, initial_product=self.repo.get(pid))
        if not dlg.exec():
            return
        data = dlg.payload()
        if not data:
            return
        try:
            self.repo.update(pid, **data)
        except DomainError as e:
            error(self.view, "Cannot save", str(e))
            return
        info(self.view, "Saved", f"Product #{pid} updated.")
        self.refresh()
        self.dataChanged.emit()

    def _delete(self):
        """
        Delete the selected product unless it already has stock.
        Shows the DomainError message if deletion is blocked.
        """
        pid = self._selected_id()
        if not pid:
            info(self.view, "Select", "Please select a product to delete.")
            return
        if not confirm(self.view, "Delete", f"Delete product #{pid}?"):
            return
        try:
            self.repo.delete(pid)
        except DomainError as de:
            error(self.view, "Blocked", str(de))
            return
        info(self.view, "Deleted", f"Product #{pid} deleted.")
        self.refresh()
        self.dataChanged.emit()
