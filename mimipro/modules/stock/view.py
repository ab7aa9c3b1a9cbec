from __future__ import annotations

from PySide6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QPushButton, QLabel, QTabWidget,
)

from ...widgets.table_view import TableView


class StockView(QWidget):
    def __init__(self, parent: QWidget | None = None):
        super().__init__(parent)
        root = QVBoxLayout(self)
        root.setContentsMargins(8, 8, 8, 8)
        root.setSpacing(8)

        row = QHBoxLayout()
        self.btn_add = QPushButton("Add Stock", objectName="btn_add")
        self.btn_adjust = QPushButton("Adjust", objectName="btn_adjust")
        self.btn_refresh = QPushButton("Refresh", objectName="btn_refresh")
        row.addWidget(self.btn_add)
        row.addWidget(self.btn_adjust)
        row.addStretch(1)
        self.lbl_summary = QLabel("")
        row.addWidget(self.lbl_summary)
        row.addWidget(self.btn_refresh)
        root.addLayout(row)

        self.tabs = QTabWidget()
        self.tbl_stock = TableView(objectName="tbl_stock")
        self.tbl_stock.setEditTriggers(self.tbl_stock.EditTrigger.NoEditTriggers)
        self.tabs.addTab(self.tbl_stock, "Stock Levels")

        self.tbl_history = TableView(sortable=False, objectName="tbl_history")
        self.tbl_history.setEditTriggers(self.tbl_history.EditTrigger.NoEditTriggers)
        self.tabs.addTab(self.tbl_history, "Stock History")
        root.addWidget(self.tabs, 1)
