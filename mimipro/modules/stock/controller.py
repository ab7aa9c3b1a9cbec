from __future__ import annotations

import sqlite3

from PySide6.QtCore import QSortFilterProxyModel
from PySide6.QtWidgets import QWidget

from ..base_module import BaseModule
from .form import AddStockForm, AdjustStockForm
from .model import StockHistoryTableModel, StockTableModel
from .view import StockView
from ...constants import STOCK_STATUS_LOW, STOCK_STATUS_OUT
from ...database.errors import DomainError
from ...database.repositories.products_repo import ProductsRepo
from ...database.repositories.stock_repo import StockLedger
from ...database.store import RecordStore
from ...utils.ui_helpers import error, info

HISTORY_LIMIT = 500


class StockController(BaseModule):
    """
    Stock screen.

    Tabs:
      1) Stock Levels   (quantity and Out of Stock / Low Stock / Normal status)
      2) Stock History  (newest adjustments first)
    """

    def __init__(self, conn: sqlite3.Connection):
        super().__init__()
        self.conn = conn
        self.store = RecordStore(conn)
        self.ledger = StockLedger(self.store)
        self.products = ProductsRepo(self.store)

        self.view = StockView()
        self.stock_model = StockTableModel()
        self.proxy = QSortFilterProxyModel(self.view)
        self.proxy.setSourceModel(self.stock_model)
        self.view.tbl_stock.setModel(self.proxy)
        self.history_model = StockHistoryTableModel()
        self.view.tbl_history.setModel(self.history_model)

        self.view.btn_add.clicked.connect(self._add)
        self.view.btn_adjust.clicked.connect(self._adjust)
        self.view.btn_refresh.clicked.connect(self.refresh)
        self.view.tbl_stock.doubleClicked.connect(lambda _=None: self._adjust())

        self.refresh()

    def get_widget(self) -> QWidget:
        return self.view

    def refresh(self) -> None:
        rows = self.ledger.list_stock()
        self.stock_model.replace(rows)
        self.history_model.replace(self.ledger.history(limit=HISTORY_LIMIT))
        self.view.tbl_stock.resizeColumnsToContents()
        low = sum(1 for s in rows if s.status == STOCK_STATUS_LOW)
        out = sum(1 for s in rows if s.status == STOCK_STATUS_OUT)
        self.view.lbl_summary.setText(f"{len(rows)} products | {low} low | {out} out of stock")

    def _selected_stock(self):
        r = self.view.tbl_stock.selected_row()
        return self.stock_model.at(r) if r is not None else None

    def _add(self):
        dlg = AddStockForm(self.view, products=self.products.list_products())
        if not dlg.exec():
            return
        data = dlg.payload()
        if not data:
            return
        try:
            rec = self.ledger.restock(
                data["product_id"], data["product_name"], data["quantity"], data["notes"]
            )
        except DomainError as e:
            error(self.view, "Cannot add stock", str(e))
            return
        self.refresh()
        self.dataChanged.emit()
        info(self.view, "Saved", f"{rec.product_name}: {rec.quantity} pieces in stock.")

    def _adjust(self):
        stock = self._selected_stock()
        if stock is None:
            info(self.view, "Select", "Please select a product to adjust.")
            return
        dlg = AdjustStockForm(self.view, stock=stock)
        if not dlg.exec():
            return
        data = dlg.payload()
        if not data:
            return
        try:
            self.ledger.adjust_to(data["stock_id"], data["new_quantity"], data["reason"])
        except DomainError as e:
            error(self.view, "Cannot adjust stock", str(e))
            return
        self.refresh()
        self.dataChanged.emit()
