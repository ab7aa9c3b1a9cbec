from __future__ import annotations

from typing import List

from PySide6.QtCore import QAbstractTableModel, Qt, QModelIndex
from PySide6.QtGui import QColor

from ...constants import STOCK_STATUS_LOW, STOCK_STATUS_OUT
from ...database.repositories.stock_repo import StockHistoryEntry, StockRecord
from ...utils.helpers import fmt_timestamp

_STATUS_COLORS = {
    STOCK_STATUS_OUT: QColor("#b00020"),
    STOCK_STATUS_LOW: QColor("#b26a00"),
}


class StockTableModel(QAbstractTableModel):
    HEADERS: List[str] = ["Product", "Quantity", "Status", "Last Updated"]

    def __init__(self, rows: List[StockRecord] | None = None) -> None:
        super().__init__()
        self._rows: List[StockRecord] = list(rows or [])

    def rowCount(self, parent: QModelIndex = QModelIndex()) -> int:
        return len(self._rows)

    def columnCount(self, parent: QModelIndex = QModelIndex()) -> int:
        return len(self.HEADERS)

    def data(self, index: QModelIndex, role: int = Qt.DisplayRole):
        if not index.isValid():
            return None
        s = self._rows[index.row()]
        col = index.column()
        if role == Qt.DisplayRole:
            return [s.product_name, s.quantity, s.status, fmt_timestamp(s.last_updated)][col]
        if role == Qt.ForegroundRole and col == 2:
            return _STATUS_COLORS.get(s.status)
        if role == Qt.TextAlignmentRole and col == 1:
            return int(Qt.AlignRight | Qt.AlignVCenter)
        return None

    def headerData(self, section, orientation, role=Qt.DisplayRole):
        if orientation == Qt.Horizontal and role == Qt.DisplayRole:
            return self.HEADERS[section]
        return super().headerData(section, orientation, role)

    def at(self, row: int) -> StockRecord:
        return self._rows[row]

    def replace(self, rows: List[StockRecord]) -> None:
        self.beginResetModel()
        self._rows = list(rows)
        self.endResetModel()


class StockHistoryTableModel(QAbstractTableModel):
    HEADERS: List[str] = ["Date", "Product", "Change", "Before", "After", "Reason"]

    def __init__(self, rows: List[StockHistoryEntry] | None = None) -> None:
        super().__init__()
        self._rows: List[StockHistoryEntry] = list(rows or [])

    def rowCount(self, parent: QModelIndex = QModelIndex()) -> int:
        return len(self._rows)

    def columnCount(self, parent: QModelIndex = QModelIndex()) -> int:
        return len(self.HEADERS)

    def data(self, index: QModelIndex, role: int = Qt.DisplayRole):
        if not index.isValid():
            return None
        e = self._rows[index.row()]
        if role == Qt.DisplayRole:
            return [
                fmt_timestamp(e.date),
                e.product_name,
                f"{e.change:+d}",
                e.old_quantity,
                e.new_quantity,
                e.reason,
            ][index.column()]
        if role == Qt.TextAlignmentRole and 2 <= index.column() <= 4:
            return int(Qt.AlignRight | Qt.AlignVCenter)
        return None

    def headerData(self, section, orientation, role=Qt.DisplayRole):
        if orientation == Qt.Horizontal and role == Qt.DisplayRole:
            return self.HEADERS[section]
        return super().headerData(section, orientation, role)

    def replace(self, rows: List[StockHistoryEntry]) -> None:
        self.beginResetModel()
        self._rows = list(rows)
        self.endResetModel()
