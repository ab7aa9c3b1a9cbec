from PySide6.QtCore import QDate, QLocale
from PySide6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QPushButton, QLabel, QGroupBox,
    QFormLayout, QTabWidget, QAbstractItemView, QComboBox, QCheckBox, QDateEdit,
)
from ...widgets.table_view import TableView


class DeliveryView(QWidget):
    def __init__(self, parent=None):
        super().__init__(parent)
        root = QVBoxLayout(self)
        self.tabs = QTabWidget()
        root.addWidget(self.tabs)

        # ---------------- Settlement tab ----------------
        entry = QWidget()
        layout = QVBoxLayout(entry)

        self.lbl_mode = QLabel("New delivery")
        self.lbl_mode.setStyleSheet("font-weight: bold;")
        layout.addWidget(self.lbl_mode)

        lines_box = QGroupBox("Products")
        lb = QVBoxLayout(lines_box)
        self.tbl_lines = TableView(sortable=False)
        self.tbl_lines.setEditTriggers(
            QAbstractItemView.DoubleClicked
            | QAbstractItemView.SelectedClicked
            | QAbstractItemView.EditKeyPressed
        )
        lb.addWidget(self.tbl_lines, 1)
        row = QHBoxLayout()
        self.btn_add_line = QPushButton("Add Line")
        self.btn_remove_line = QPushButton("Remove Line")
        row.addWidget(self.btn_add_line)
        row.addWidget(self.btn_remove_line)
        row.addStretch(1)
        lb.addLayout(row)
        layout.addWidget(lines_box, 2)

        bottom = QHBoxLayout()

        cash_box = QGroupBox("Cash")
        cb = QVBoxLayout(cash_box)
        self.tbl_cash = TableView(sortable=False)
        cb.addWidget(self.tbl_cash)
        bottom.addWidget(cash_box, 1)

        exp_box = QGroupBox("Expenses")
        eb = QVBoxLayout(exp_box)
        self.tbl_expenses = TableView(sortable=False)
        eb.addWidget(self.tbl_expenses)
        erow = QHBoxLayout()
        self.btn_add_expense = QPushButton("Add Expense")
        self.btn_remove_expense = QPushButton("Remove Expense")
        erow.addWidget(self.btn_add_expense)
        erow.addWidget(self.btn_remove_expense)
        erow.addStretch(1)
        eb.addLayout(erow)
        bottom.addWidget(exp_box, 1)

        totals_box = QGroupBox("Summary")
        form = QFormLayout(totals_box)
        self.lbl_sales = QLabel("0")
        self.lbl_cash = QLabel("0")
        self.lbl_expense = QLabel("0")
        self.lbl_net = QLabel("0")
        self.lbl_net.setStyleSheet("font-weight: bold;")
        form.addRow("Sales:", self.lbl_sales)
        form.addRow("Cash:", self.lbl_cash)
        form.addRow("Expenses:", self.lbl_expense)
        form.addRow("Net:", self.lbl_net)
        bottom.addWidget(totals_box)

        layout.addLayout(bottom, 1)

        actions = QHBoxLayout()
        actions.addStretch(1)
        self.btn_clear = QPushButton("Clear")
        self.btn_save = QPushButton("Save Delivery")
        actions.addWidget(self.btn_clear)
        actions.addWidget(self.btn_save)
        layout.addLayout(actions)

        self.tabs.addTab(entry, "Delivery")

        # ---------------- History tab ----------------
        hist = QWidget()
        hl = QVBoxLayout(hist)
        hrow = QHBoxLayout()
        self.btn_edit = QPushButton("Edit Selected")
        self.btn_retry = QPushButton("Retry Stock Update")
        self.btn_delete = QPushButton("Delete")
        self.btn_refresh = QPushButton("Refresh")
        hrow.addWidget(self.btn_edit)
        hrow.addWidget(self.btn_retry)
        hrow.addWidget(self.btn_delete)
        hrow.addStretch(1)
        hrow.addWidget(self.btn_refresh)
        hl.addLayout(hrow)

        frow = QHBoxLayout()
        frow.addWidget(QLabel("Year:"))
        self.cmb_year = QComboBox()
        self.cmb_year.addItem("All", userData=None)
        frow.addWidget(self.cmb_year)
        frow.addSpacing(8)
        frow.addWidget(QLabel("Month:"))
        self.cmb_month = QComboBox()
        self.cmb_month.addItem("All", userData=None)
        for m in range(1, 13):
            self.cmb_month.addItem(QLocale().monthName(m), userData=m)
        frow.addWidget(self.cmb_month)
        frow.addSpacing(8)
        self.chk_day = QCheckBox("Date:")
        self.dt_day = QDateEdit()
        self.dt_day.setCalendarPopup(True)
        self.dt_day.setDisplayFormat("yyyy-MM-dd")
        self.dt_day.setDate(QDate.currentDate())
        self.dt_day.setEnabled(False)
        self.chk_day.toggled.connect(self.dt_day.setEnabled)
        frow.addWidget(self.chk_day)
        frow.addWidget(self.dt_day)
        frow.addStretch(1)
        self.btn_clear_filters = QPushButton("Clear Filters")
        frow.addWidget(self.btn_clear_filters)
        hl.addLayout(frow)

        self.tbl_history = TableView(sortable=False)
        hl.addWidget(self.tbl_history, 1)
        self.tabs.addTab(hist, "History")

    def set_totals(self, sales: str, cash: str, expense: str, net: str):
        self.lbl_sales.setText(sales)
        self.lbl_cash.setText(cash)
        self.lbl_expense.setText(expense)
        self.lbl_net.setText(net)

    # ---------------- History filters ----------------
    def set_years(self, years):
        """Refill the year choices, keeping the current one when it still exists."""
        current = self.cmb_year.currentData()
        self.cmb_year.blockSignals(True)
        self.cmb_year.clear()
        self.cmb_year.addItem("All", userData=None)
        for y in years:
            self.cmb_year.addItem(str(y), userData=y)
        idx = self.cmb_year.findData(current) if current is not None else 0
        self.cmb_year.setCurrentIndex(max(idx, 0))
        self.cmb_year.blockSignals(False)

    def history_filters(self) -> dict:
        return {
            "year": self.cmb_year.currentData(),
            "month": self.cmb_month.currentData(),
            "day": self.dt_day.date().toString("yyyy-MM-dd") if self.chk_day.isChecked() else None,
        }

    def clear_filters(self):
        for w in (self.cmb_year, self.cmb_month, self.chk_day, self.dt_day):
            w.blockSignals(True)
        self.cmb_year.setCurrentIndex(0)
        self.cmb_month.setCurrentIndex(0)
        self.chk_day.setChecked(False)
        self.dt_day.setEnabled(False)
        self.dt_day.setDate(QDate.currentDate())
        for w in (self.cmb_year, self.cmb_month, self.chk_day, self.dt_day):
            w.blockSignals(False)
