# tests/test_ui.py
import pytest

pytest.importorskip("PySide6")

from PySide6.QtCore import QDate, Qt

from mimipro.database.errors import PersistenceError
from mimipro.database.repositories.deliveries_repo import DeliveryRecord
from mimipro.main import MainWindow
from mimipro.modules.delivery.controller import DeliveryController
from mimipro.modules.delivery.form import ExpenseForm
from mimipro.modules.delivery.model import LineItemsTableModel
from mimipro.modules.product.form import ProductForm
from mimipro.modules.stock.controller import StockController
from mimipro.modules.stock.form import AddStockForm, AdjustStockForm
from mimipro.utils import ui_helpers
from mimipro.utils.helpers import fmt_money
from mimipro.widgets.sync_badge import SyncBadge


@pytest.fixture()
def quiet_dialogs(monkeypatch):
    """Record message boxes instead of showing them."""
    shown = []
    monkeypatch.setattr(ui_helpers, "info", lambda p, t, m: shown.append(("info", t, m)))
    monkeypatch.setattr(ui_helpers, "error", lambda p, t, m: shown.append(("error", t, m)))
    return shown


def _fill_coke_line(ctrl, coke, cartons=1):
    m = ctrl.lines_model
    assert m.setData(m.index(0, LineItemsTableModel.COL_PRODUCT), coke.product_id)
    assert m.setData(m.index(0, LineItemsTableModel.COL_DC), cartons)


def test_line_edits_update_totals(qtbot, conn, coke):
    ctrl = DeliveryController(conn)
    qtbot.addWidget(ctrl.get_widget())

    _fill_coke_line(ctrl, coke)
    m = ctrl.lines_model
    assert m.data(m.index(0, LineItemsTableModel.COL_SOLD)) == 24
    assert ctrl.view.lbl_sales.text() == fmt_money(480)

    assert not m.setData(m.index(0, LineItemsTableModel.COL_DP), -2)
    assert not m.setData(m.index(0, LineItemsTableModel.COL_PRICE), "x")
    assert not m.setData(m.index(0, LineItemsTableModel.COL_TOTAL), 5)

    cash = ctrl.cash_model
    row_500 = [c.denomination for c in ctrl.session.cash_counts].index(500)
    assert cash.setData(cash.index(row_500, 1), 1)
    assert ctrl.view.lbl_net.text() == fmt_money(-20)


def test_save_from_controller(qtbot, conn, coke, ledger, monkeypatch, quiet_dialogs):
    ctrl = DeliveryController(conn)
    qtbot.addWidget(ctrl.get_widget())
    monkeypatch.setattr(ui_helpers, "ask_text", lambda *a, **k: "Karim Traders")

    _fill_coke_line(ctrl, coke, cartons=2)
    with qtbot.waitSignal(ctrl.dataChanged, timeout=1000):
        ctrl._save()

    assert quiet_dialogs[-1][0] == "info"
    assert ctrl.history_model.rowCount() == 1
    assert ctrl.history_model.at(0).customer_name == "Karim Traders"
    assert ctrl.session.line_items[0].product_id is None
    assert ledger.get_for_product(coke.product_id).quantity == 0


def test_save_validation_keeps_form(qtbot, conn, coke, monkeypatch, quiet_dialogs):
    ctrl = DeliveryController(conn)
    qtbot.addWidget(ctrl.get_widget())
    monkeypatch.setattr(ui_helpers, "ask_text", lambda *a, **k: "")

    _fill_coke_line(ctrl, coke)
    ctrl._save()

    assert quiet_dialogs[-1][0] == "error"
    assert ctrl.history_model.rowCount() == 0
    assert ctrl.session.line_items[0].product_id == coke.product_id


def test_cancelled_name_prompt_does_nothing(qtbot, conn, coke, monkeypatch, quiet_dialogs):
    ctrl = DeliveryController(conn)
    qtbot.addWidget(ctrl.get_widget())
    monkeypatch.setattr(ui_helpers, "ask_text", lambda *a, **k: None)
    _fill_coke_line(ctrl, coke)
    ctrl._save()
    assert quiet_dialogs == []
    assert ctrl.history_model.rowCount() == 0


def test_history_delete_and_filters(qtbot, conn, coke, monkeypatch, quiet_dialogs):
    ctrl = DeliveryController(conn)
    qtbot.addWidget(ctrl.get_widget())
    repo = ctrl.service.deliveries
    for customer, date in [("Old Shop", "2023-05-04T10:00:00"), ("New Shop", "2024-02-09T10:00:00")]:
        repo.add(DeliveryRecord(None, customer, date, 100, 0, 0, -100))
    ctrl.refresh()

    view = ctrl.view
    assert [view.cmb_year.itemData(i) for i in range(view.cmb_year.count())] == [None, 2024, 2023]
    view.cmb_year.setCurrentIndex(view.cmb_year.findData(2023))
    assert [ctrl.history_model.at(r).customer_name for r in range(ctrl.history_model.rowCount())] == ["Old Shop"]

    view.cmb_year.setCurrentIndex(0)
    view.dt_day.setDate(QDate(2024, 2, 9))
    view.chk_day.setChecked(True)
    assert ctrl.history_model.rowCount() == 1
    assert ctrl.history_model.at(0).customer_name == "New Shop"

    monkeypatch.setattr(ui_helpers, "confirm", lambda *a, **k: False)
    view.tbl_history.selectRow(0)
    ctrl._delete_selected()
    assert len(repo.list_records()) == 2

    monkeypatch.setattr(ui_helpers, "confirm", lambda *a, **k: True)
    with qtbot.waitSignal(ctrl.dataChanged, timeout=1000):
        ctrl._delete_selected()
    assert [d.customer_name for d in repo.list_records()] == ["Old Shop"]
    assert ctrl.history_model.rowCount() == 0

    view.btn_clear_filters.click()
    assert not view.chk_day.isChecked()
    assert ctrl.history_model.rowCount() == 1
    assert [view.cmb_year.itemData(i) for i in range(view.cmb_year.count())] == [None, 2023]


def test_expense_form_validation(qtbot):
    dlg = ExpenseForm()
    qtbot.addWidget(dlg)
    dlg.accept()
    assert dlg.payload() is None
    assert not dlg.lbl_error.isHidden()

    dlg.edt_label.setText(" Fuel ")
    dlg.spin_amount.setValue(40)
    dlg.accept()
    assert dlg.payload() == {"label": "Fuel", "amount": 40.0}


def test_product_form_validation(qtbot):
    dlg = ProductForm()
    qtbot.addWidget(dlg)
    dlg.name.setText("Water")
    dlg.pcs.setText("0")
    dlg.price.setText("10")
    dlg.accept()
    assert dlg.payload() is None

    dlg.pcs.setText("12")
    dlg.accept()
    assert dlg.payload() == {"name": "Water", "pcs": 12, "price": 10.0}


def test_stock_forms(qtbot, ledger, catalogue, coke):
    add = AddStockForm(products=catalogue.values())
    qtbot.addWidget(add)
    add.accept()
    assert add.payload() is None
    add.cmb_product.setCurrentIndex(add.cmb_product.findText(coke.name))
    add.spin_qty.setValue(12)
    add.accept()
    assert add.payload() == {
        "product_id": coke.product_id, "product_name": coke.name, "quantity": 12, "notes": None,
    }

    rec = ledger.restock(coke.product_id, coke.name, 12)
    adj = AdjustStockForm(stock=rec)
    qtbot.addWidget(adj)
    adj.spin_qty.setValue(5)
    adj.accept()
    assert adj.payload() is None
    adj.edt_reason.setText("Damaged")
    adj.accept()
    assert adj.payload() == {"stock_id": rec.stock_id, "new_quantity": 5, "reason": "Damaged"}


def test_stock_screen_lists_status(qtbot, conn, ledger, coke, pepsi):
    ledger.restock(coke.product_id, coke.name, 60)
    ledger.initialize(pepsi.product_id, pepsi.name)
    ctrl = StockController(conn)
    qtbot.addWidget(ctrl.get_widget())

    m = ctrl.stock_model
    assert m.rowCount() == 2
    statuses = {m.at(r).product_name: m.data(m.index(r, 2)) for r in range(m.rowCount())}
    assert statuses == {coke.name: "Normal", pepsi.name: "Out of Stock"}
    assert ctrl.history_model.rowCount() == 1
    assert "1 out of stock" in ctrl.view.lbl_summary.text()


def test_sync_badge(qtbot, sync, ledger, coke):
    badge = SyncBadge(sync)
    qtbot.addWidget(badge)
    assert badge.text() == "Up to date"

    ledger.restock(coke.product_id, coke.name, 5)
    badge.refresh()
    assert "1 pending" in badge.text()

    with qtbot.waitSignal(badge.synced, timeout=1000) as blocker:
        badge.sync_now()
    assert blocker.args == [1]
    assert badge.text() == "Up to date"
    assert badge.toolTip().startswith("Last sync:")


def test_main_window_navigation(qtbot, conn):
    win = MainWindow(conn)
    qtbot.addWidget(win)
    assert [win.nav.item(i).text() for i in range(win.nav.count())] == ["Delivery", "Stock", "Products"]
    win.nav.setCurrentRow(1)
    assert win.stack.currentIndex() == 1


def test_menu_sync_failure_is_reported(qtbot, conn, monkeypatch, quiet_dialogs):
    win = MainWindow(conn)
    qtbot.addWidget(win)

    def broken():
        raise PersistenceError("database is locked")

    monkeypatch.setattr(win.sync_badge.repo, "perform_sync", broken)
    win._sync_now()
    assert quiet_dialogs == [("error", "Sync failed", "database is locked")]
