"""
Controller for the delivery module.

Owns one DeliverySession and wires it to the settlement tables, the expense
dialog and the history tab. All money shown on screen is recomputed from the
session; nothing is read back from widgets.
"""

from __future__ import annotations

import logging
import sqlite3

from PySide6.QtWidgets import QWidget

from ..base_module import BaseModule
from .view import DeliveryView
from .form import ExpenseForm
from .model import (
    CashCountsTableModel,
    ExpensesTableModel,
    HistoryTableModel,
    LineItemsTableModel,
    ProductDelegate,
)
from .service import DeliveryService
from .session import DeliverySession
from ...constants import MODE_UPDATE
from ...database.errors import (
    DomainError,
    PersistenceError,
    UnreconciledDeliveryError,
    ValidationError,
)
from ...database.store import RecordStore
from ...utils import ui_helpers as ui
from ...utils.helpers import fmt_money

_log = logging.getLogger(__name__)


class DeliveryController(BaseModule):
    def __init__(self, conn: sqlite3.Connection, *, service: DeliveryService | None = None):
        super().__init__()
        self.conn = conn
        self.store = RecordStore(conn)
        self.service = service or DeliveryService(self.store)

        self.session = DeliverySession()
        self.session.clear()

        self.view = DeliveryView()
        self.lines_model = LineItemsTableModel(self.session)
        self.cash_model = CashCountsTableModel(self.session)
        self.expenses_model = ExpensesTableModel(self.session)
        self.history_model = HistoryTableModel([])

        self.view.tbl_lines.setModel(self.lines_model)
        self.view.tbl_lines.setItemDelegateForColumn(
            LineItemsTableModel.COL_PRODUCT, ProductDelegate(self.session, self.view.tbl_lines)
        )
        self.view.tbl_cash.setModel(self.cash_model)
        self.view.tbl_expenses.setModel(self.expenses_model)
        self.view.tbl_history.setModel(self.history_model)

        self._connect_signals()
        self.refresh()

    def get_widget(self) -> QWidget:
        return self.view

    def _connect_signals(self):
        self.lines_model.totalsChanged.connect(self._refresh_totals)
        self.cash_model.totalsChanged.connect(self._refresh_totals)
        self.view.btn_add_line.clicked.connect(self._add_line)
        self.view.btn_remove_line.clicked.connect(self._remove_line)
        self.view.btn_add_expense.clicked.connect(self._add_expense)
        self.view.btn_remove_expense.clicked.connect(self._remove_expense)
        self.view.btn_clear.clicked.connect(self._clear)
        self.view.btn_save.clicked.connect(self._save)
        self.view.btn_edit.clicked.connect(self._edit_selected)
        self.view.btn_retry.clicked.connect(self._retry_selected)
        self.view.btn_delete.clicked.connect(self._delete_selected)
        self.view.btn_refresh.clicked.connect(self._reload_history)
        self.view.cmb_year.currentIndexChanged.connect(self._reload_history)
        self.view.cmb_month.currentIndexChanged.connect(self._reload_history)
        self.view.chk_day.toggled.connect(self._reload_history)
        self.view.dt_day.dateChanged.connect(self._reload_history)
        self.view.btn_clear_filters.clicked.connect(self._clear_filters)
        self.view.tbl_history.doubleClicked.connect(lambda _=None: self._edit_selected())

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------
    def refresh(self) -> None:
        self.session.set_products(self.service.products.list_products())
        self.lines_model.reset()
        self._reload_history()

    def _reload_history(self, *_):
        self.view.set_years(self.service.deliveries.years())
        self.history_model.replace(
            self.service.deliveries.list_records(**self.view.history_filters())
        )
        self.view.tbl_history.resizeColumnsToContents()

    def _reset_form(self):
        self.lines_model.reset()
        self.cash_model.reset()
        self.expenses_model.reset()
        self._refresh_mode()
        self._refresh_totals()

    def _refresh_mode(self):
        if self.session.mode == MODE_UPDATE:
            self.view.lbl_mode.setText(
                f"Editing delivery #{self.session.editing_id} ({self.session.customer_name})"
            )
            self.view.btn_save.setText("Update Delivery")
        else:
            self.view.lbl_mode.setText("New delivery")
            self.view.btn_save.setText("Save Delivery")

    def _refresh_totals(self):
        t = self.session.totals()
        self.view.set_totals(
            fmt_money(t.sales_total),
            fmt_money(t.cash_total),
            fmt_money(t.expense_total),
            fmt_money(t.net_total),
        )

    # ------------------------------------------------------------------
    # Form actions
    # ------------------------------------------------------------------
    def _add_line(self):
        self.lines_model.add_line()

    def _remove_line(self):
        r = self.view.tbl_lines.selected_row()
        if r is None:
            ui.info(self.view, "Select", "Please select a line to remove.")
            return
        self.lines_model.remove_line(r)

    def _add_expense(self):
        dlg = ExpenseForm(self.view)
        if not dlg.exec():
            return
        data = dlg.payload()
        if not data:
            return
        try:
            self.session.add_expense(data["label"], data["amount"])
        except ValidationError as e:
            ui.error(self.view, "Invalid expense", str(e))
            return
        self.expenses_model.reset()
        self._refresh_totals()

    def _remove_expense(self):
        r = self.view.tbl_expenses.selected_row()
        if r is None:
            ui.info(self.view, "Select", "Please select an expense to remove.")
            return
        self.session.remove_expense(r)
        self.expenses_model.reset()
        self._refresh_totals()

    def _clear(self):
        self.session.clear()
        self._reset_form()

    def _save(self):
        if self.session.mode != MODE_UPDATE:
            name = ui.ask_text(self.view, "Customer", "Customer name:")
            if name is None:
                return
            self.session.customer_name = name

        try:
            record = self.service.save_session(self.session)
        except ValidationError as e:
            ui.error(self.view, "Cannot save", str(e))
            return
        except UnreconciledDeliveryError as e:
            _log.warning("Delivery %s saved without full stock update", e.record_id)
            self._reset_form()
            self._reload_history()
            self.dataChanged.emit()
            ui.error(
                self.view,
                "Stock not updated",
                f"{e}\n\nUse 'Retry Stock Update' in History once the problem is fixed.",
            )
            return
        except PersistenceError as e:
            ui.error(self.view, "Save failed", f"The delivery was not saved.\n\n{e}")
            return
        except DomainError as e:
            ui.error(self.view, "Cannot save", str(e))
            return

        self._reset_form()
        self._reload_history()
        self.dataChanged.emit()
        ui.info(self.view, "Saved", f"Delivery #{record.record_id} saved ({fmt_money(record.net_total)} net).")

    # ------------------------------------------------------------------
    # History actions
    # ------------------------------------------------------------------
    def _selected_record_id(self) -> int | None:
        r = self.view.tbl_history.selected_row()
        return self.history_model.at(r).record_id if r is not None else None

    def _edit_selected(self):
        rid = self._selected_record_id()
        if rid is None:
            ui.info(self.view, "Select", "Please select a delivery to edit.")
            return
        try:
            self.service.open_for_edit(self.session, rid)
        except DomainError as e:
            ui.error(self.view, "Cannot open", str(e))
            return
        self._reset_form()
        self.view.tabs.setCurrentIndex(0)

    def _retry_selected(self):
        rid = self._selected_record_id()
        if rid is None:
            ui.info(self.view, "Select", "Please select a delivery.")
            return
        try:
            self.service.retry_reconciliation(rid)
        except DomainError as e:
            ui.error(self.view, "Stock not updated", str(e))
            self._reload_history()
            return
        self._reload_history()
        self.dataChanged.emit()
        ui.info(self.view, "Done", f"Stock updated for delivery #{rid}.")

    def _delete_selected(self):
        r = self.view.tbl_history.selected_row()
        if r is None:
            ui.info(self.view, "Select", "Please select a delivery to delete.")
            return
        rec = self.history_model.at(r)
        if not ui.confirm(
            self.view,
            "Delete delivery",
            f"Delete delivery #{rec.record_id} ({rec.label})?\n\nStock levels are not changed.",
        ):
            return
        was_editing = self.session.editing_id == rec.record_id
        try:
            self.service.delete_record(rec.record_id, self.session)
        except DomainError as e:
            ui.error(self.view, "Cannot delete", str(e))
            return
        if was_editing:
            self._reset_form()
        self._reload_history()
        self.dataChanged.emit()

    def _clear_filters(self):
        self.view.clear_filters()
        self._reload_history()
