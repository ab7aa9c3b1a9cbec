from PySide6.QtWidgets import (
    QApplication,
    QMainWindow,
    QWidget,
    QListWidget,
    QListWidgetItem,
    QStackedWidget,
    QHBoxLayout,
)
from PySide6.QtGui import QAction
import logging
import os
import sys

from .config import LOG_PATH
from .constants import APP_NAME, APP_VERSION
from .database import get_connection
from .database.errors import DomainError
from .database.store import RecordStore
from .database.repositories.sync_status_repo import SyncStatusRepo
from .modules.base_module import BaseModule
from .modules.delivery import DeliveryController
from .modules.product import ProductController
from .modules.stock import StockController
from .utils import ui_helpers as ui
from .utils.loggers import get_logger
from .widgets.sync_badge import SyncBadge

_log = logging.getLogger(__name__)


class MainWindow(QMainWindow):
    def __init__(self, conn):
        super().__init__()
        self.conn = conn
        self.setWindowTitle(f"{APP_NAME} {APP_VERSION}")

        central = QWidget()
        layout = QHBoxLayout(central)
        self.nav = QListWidget()
        self.nav.setFixedWidth(160)
        self.stack = QStackedWidget()
        layout.addWidget(self.nav)
        layout.addWidget(self.stack, 1)
        self.setCentralWidget(central)

        self.modules: list[BaseModule] = []
        self.add_module("Delivery", DeliveryController(conn))
        self.add_module("Stock", StockController(conn))
        self.add_module("Products", ProductController(conn))

        self.sync_badge = SyncBadge(SyncStatusRepo(RecordStore(conn)), self)
        self.statusBar().addPermanentWidget(self.sync_badge)

        sync_action = QAction("Sync now", self)
        sync_action.triggered.connect(self._sync_now)
        self.menuBar().addMenu("&Data").addAction(sync_action)

        self.nav.currentRowChanged.connect(self._on_nav_changed)
        self.nav.setCurrentRow(0)

    def add_module(self, title: str, module: BaseModule):
        self.modules.append(module)
        self.nav.addItem(QListWidgetItem(title))
        self.stack.addWidget(module.get_widget())
        module.dataChanged.connect(self._on_data_changed)

    def _on_nav_changed(self, index: int):
        if index < 0:
            return
        self.stack.setCurrentIndex(index)
        self.modules[index].refresh()

    def _on_data_changed(self):
        self.sync_badge.refresh()

    def _sync_now(self):
        try:
            n = self.sync_badge.sync_now()
        except DomainError as e:
            _log.error("Sync failed: %s", e)
            ui.error(self, "Sync failed", str(e))
            return
        self.statusBar().showMessage(f"{n} record(s) synced.", 5000)


def main():
    get_logger(log_file=LOG_PATH)

    # Check if QApplication already exists (for dev_launcher.py compatibility)
    app = QApplication.instance()
    if app is None:
        app = QApplication(sys.argv)
    app.setApplicationName(APP_NAME)

    conn = get_connection()
    _log.info("%s %s started", APP_NAME, APP_VERSION)

    win = MainWindow(conn)
    win.resize(1100, 700)
    win.show()

    # When running under dev_launcher.py, return and let it run the event loop
    if os.environ.get("__DEV_LAUNCHER__") != "1":
        sys.exit(app.exec())


if __name__ == "__main__":
    main()
