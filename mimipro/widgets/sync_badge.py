from __future__ import annotations

import logging

from PySide6.QtCore import QTimer, Signal
from PySide6.QtWidgets import QToolButton, QWidget

from ..constants import SYNC_CHECK_INTERVAL_MS
from ..database.errors import DomainError
from ..database.repositories.sync_status_repo import SyncStatusRepo
from ..utils.helpers import fmt_timestamp
from ..utils.ui_helpers import confirm, error, info

_log = logging.getLogger(__name__)


class SyncBadge(QToolButton):
    """
    Status-bar badge with the number of records waiting to sync.

    Re-counts every SYNC_CHECK_INTERVAL_MS and whenever `refresh()` is called.
    Clicking shows the pending breakdown and offers to sync now.
    """

    synced = Signal(int)

    def __init__(self, repo: SyncStatusRepo, parent: QWidget | None = None,
                 interval_ms: int = SYNC_CHECK_INTERVAL_MS):
        super().__init__(parent)
        self.repo = repo
        self.setAutoRaise(True)
        self.clicked.connect(self._on_clicked)

        self.timer = QTimer(self)
        self.timer.setInterval(interval_ms)
        self.timer.timeout.connect(self.refresh)
        self.timer.start()
        self.refresh()

    def pending_count(self) -> int:
        return sum(self.repo.pending_summary().values())

    def refresh(self) -> None:
        try:
            n = self.pending_count()
        except DomainError as e:
            _log.warning("Sync status check failed: %s", e)
            self.setText("Sync: unavailable")
            return
        if n:
            self.setText(f"{n} pending")
            self.setStyleSheet("color:#b26a00; font-weight:bold;")
        else:
            self.setText("Up to date")
            self.setStyleSheet("color:#2e7d32;")
        last = self.repo.last_sync_time()
        self.setToolTip(f"Last sync: {fmt_timestamp(last)}" if last else "Never synced")

    def sync_now(self) -> int:
        n = self.repo.perform_sync()
        self.refresh()
        self.synced.emit(n)
        return n

    def _on_clicked(self) -> None:
        try:
            summary = self.repo.pending_summary()
        except DomainError as e:
            error(self, "Sync", str(e))
            return
        if not summary:
            info(self, "Sync", "Everything is synced.")
            return
        lines = "\n".join(f"{store}: {count}" for store, count in summary.items())
        if not confirm(self, "Sync", f"Pending changes:\n{lines}\n\nSync now?"):
            return
        try:
            n = self.sync_now()
        except DomainError as e:
            error(self, "Sync failed", str(e))
            return
        info(self, "Sync", f"{n} record(s) synced.")
