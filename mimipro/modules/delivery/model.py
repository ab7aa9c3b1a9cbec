from PySide6.QtCore import QAbstractTableModel, Qt, QModelIndex, Signal
from PySide6.QtWidgets import QComboBox, QStyledItemDelegate

from ...database.repositories.deliveries_repo import DeliveryRecord
from ...utils.helpers import fmt_money, fmt_timestamp
from ...utils.validators import parse_whole_number, try_parse_float
from .session import DeliverySession


class LineItemsTableModel(QAbstractTableModel):
    """
    Editable view over `session.line_items`. Edits are written straight into
    the session; `totalsChanged` fires after every accepted edit so the
    controller can refresh the summary.
    """
    HEADERS = ["Product", "Del. Ctn", "Del. Pcs", "Ret. Ctn", "Ret. Pcs", "Price", "Sold", "Total"]
    COL_PRODUCT, COL_DC, COL_DP, COL_RC, COL_RP, COL_PRICE, COL_SOLD, COL_TOTAL = range(8)
    _COUNT_FIELDS = {
        COL_DC: "delivered_cartons",
        COL_DP: "delivered_pieces",
        COL_RC: "returned_cartons",
        COL_RP: "returned_pieces",
    }

    totalsChanged = Signal()

    def __init__(self, session: DeliverySession):
        super().__init__()
        self.session = session

    def rowCount(self, parent=QModelIndex()):
        return len(self.session.line_items)

    def columnCount(self, parent=QModelIndex()):
        return len(self.HEADERS)

    def flags(self, index):
        if not index.isValid():
            return Qt.NoItemFlags
        f = Qt.ItemIsSelectable | Qt.ItemIsEnabled
        if index.column() not in (self.COL_SOLD, self.COL_TOTAL):
            f |= Qt.ItemIsEditable
        return f

    def data(self, index, role=Qt.DisplayRole):
        if not index.isValid():
            return None
        r, c = index.row(), index.column()
        item = self.session.line_items[r]
        if role == Qt.UserRole and c == self.COL_PRODUCT:
            return item.product_id
        if role == Qt.TextAlignmentRole and c != self.COL_PRODUCT:
            return int(Qt.AlignRight | Qt.AlignVCenter)
        if role not in (Qt.DisplayRole, Qt.EditRole):
            return None
        if c == self.COL_PRODUCT:
            return item.product_name or ("" if role == Qt.EditRole else "Select product…")
        if c in self._COUNT_FIELDS:
            return getattr(item, self._COUNT_FIELDS[c])
        if c == self.COL_PRICE:
            return item.unit_price if role == Qt.EditRole else f"{item.unit_price:g}"
        result = self.session.line_result(r)
        if c == self.COL_SOLD:
            return result.sold_pieces if result else 0
        return fmt_money(result.line_total if result else 0)

    def setData(self, index, value, role=Qt.EditRole):
        if not index.isValid() or role != Qt.EditRole:
            return False
        r, c = index.row(), index.column()
        item = self.session.line_items[r]
        if c == self.COL_PRODUCT:
            self.session.select_product(r, value)
        elif c in self._COUNT_FIELDS:
            try:
                n = parse_whole_number(value)
            except ValueError:
                return False
            if n < 0:
                return False
            setattr(item, self._COUNT_FIELDS[c], n)
        elif c == self.COL_PRICE:
            ok, price = try_parse_float(value)
            if not ok or price < 0:
                return False
            item.unit_price = price
        else:
            return False
        self.dataChanged.emit(self.index(r, 0), self.index(r, self.COL_TOTAL))
        self.totalsChanged.emit()
        return True

    def headerData(self, section, orientation, role=Qt.DisplayRole):
        if orientation == Qt.Horizontal and role == Qt.DisplayRole:
            return self.HEADERS[section]
        return super().headerData(section, orientation, role)

    def add_line(self):
        n = len(self.session.line_items)
        self.beginInsertRows(QModelIndex(), n, n)
        self.session.add_line()
        self.endInsertRows()

    def remove_line(self, row: int):
        self.beginRemoveRows(QModelIndex(), row, row)
        self.session.remove_line(row)
        self.endRemoveRows()
        self.totalsChanged.emit()

    def reset(self):
        """Call after the session was cleared or reloaded."""
        self.beginResetModel()
        self.endResetModel()
        self.totalsChanged.emit()


class ProductDelegate(QStyledItemDelegate):
    """Combo editor for the product column, fed from the session's products."""

    def __init__(self, session: DeliverySession, parent=None):
        super().__init__(parent)
        self.session = session

    def createEditor(self, parent, option, index):
        cmb = QComboBox(parent)
        cmb.addItem("Select product…", None)
        for p in sorted(self.session.products.values(), key=lambda p: p.name.lower()):
            cmb.addItem(p.name, p.product_id)
        return cmb

    def setEditorData(self, editor, index):
        i = editor.findData(index.data(Qt.UserRole))
        editor.setCurrentIndex(max(i, 0))

    def setModelData(self, editor, model, index):
        model.setData(index, editor.currentData(), Qt.EditRole)


class CashCountsTableModel(QAbstractTableModel):
    HEADERS = ["Note", "Count", "Total"]

    totalsChanged = Signal()

    def __init__(self, session: DeliverySession):
        super().__init__()
        self.session = session

    def rowCount(self, parent=QModelIndex()):
        return len(self.session.cash_counts)

    def columnCount(self, parent=QModelIndex()):
        return len(self.HEADERS)

    def flags(self, index):
        if not index.isValid():
            return Qt.NoItemFlags
        f = Qt.ItemIsSelectable | Qt.ItemIsEnabled
        return f | Qt.ItemIsEditable if index.column() == 1 else f

    def data(self, index, role=Qt.DisplayRole):
        if not index.isValid():
            return None
        c = self.session.cash_counts[index.row()]
        if role == Qt.TextAlignmentRole:
            return int(Qt.AlignRight | Qt.AlignVCenter)
        if role in (Qt.DisplayRole, Qt.EditRole):
            return [fmt_money(c.denomination), c.quantity, fmt_money(c.line_total)][index.column()]
        return None

    def setData(self, index, value, role=Qt.EditRole):
        if not index.isValid() or role != Qt.EditRole or index.column() != 1:
            return False
        try:
            n = parse_whole_number(value)
        except ValueError:
            return False
        if n < 0:
            return False
        c = self.session.cash_counts[index.row()]
        self.session.set_cash_quantity(c.denomination, n)
        self.dataChanged.emit(self.index(index.row(), 0), self.index(index.row(), 2))
        self.totalsChanged.emit()
        return True

    def headerData(self, section, orientation, role=Qt.DisplayRole):
        if orientation == Qt.Horizontal and role == Qt.DisplayRole:
            return self.HEADERS[section]
        return super().headerData(section, orientation, role)

    def reset(self):
        self.beginResetModel()
        self.endResetModel()


class ExpensesTableModel(QAbstractTableModel):
    HEADERS = ["Expense", "Amount"]

    def __init__(self, session: DeliverySession):
        super().__init__()
        self.session = session

    def rowCount(self, parent=QModelIndex()):
        return len(self.session.expenses)

    def columnCount(self, parent=QModelIndex()):
        return len(self.HEADERS)

    def data(self, index, role=Qt.DisplayRole):
        if not index.isValid():
            return None
        e = self.session.expenses[index.row()]
        if role == Qt.DisplayRole:
            return [e.label, fmt_money(e.amount)][index.column()]
        if role == Qt.TextAlignmentRole and index.column() == 1:
            return int(Qt.AlignRight | Qt.AlignVCenter)
        return None

    def headerData(self, section, orientation, role=Qt.DisplayRole):
        if orientation == Qt.Horizontal and role == Qt.DisplayRole:
            return self.HEADERS[section]
        return super().headerData(section, orientation, role)

    def reset(self):
        self.beginResetModel()
        self.endResetModel()


class HistoryTableModel(QAbstractTableModel):
    HEADERS = ["ID", "Customer", "Date", "Sales", "Cash", "Expenses", "Net", "Stock"]

    def __init__(self, rows: list[DeliveryRecord]):
        super().__init__()
        self._rows = rows

    def rowCount(self, parent=QModelIndex()):
        return len(self._rows)

    def columnCount(self, parent=QModelIndex()):
        return len(self.HEADERS)

    def data(self, index, role=Qt.DisplayRole):
        if not index.isValid():
            return None
        d = self._rows[index.row()]
        if role == Qt.DisplayRole:
            return [
                d.record_id,
                d.customer_name,
                fmt_timestamp(d.date),
                fmt_money(d.sales_total),
                fmt_money(d.cash_total),
                fmt_money(d.expense_total),
                fmt_money(d.net_total),
                "OK" if d.stock_reconciled else "Needs review",
            ][index.column()]
        return None

    def headerData(self, section, orientation, role=Qt.DisplayRole):
        if orientation == Qt.Horizontal and role == Qt.DisplayRole:
            return self.HEADERS[section]
        return super().headerData(section, orientation, role)

    def at(self, row: int) -> DeliveryRecord:
        return self._rows[row]

    def replace(self, rows: list[DeliveryRecord]):
        self.beginResetModel()
        self._rows = rows
        self.endResetModel()
