"""
Development launcher: runs MimiPro Admin and restarts it when a source file
under mimipro/ changes.

    python dev_launcher.py
"""
import os
import sys
import time
from pathlib import Path

from PySide6.QtCore import QObject, Signal
from PySide6.QtWidgets import QApplication
from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from mimipro.utils.loggers import get_logger

log = get_logger("mimipro.dev")

PACKAGE_DIR = Path(__file__).parent.resolve() / "mimipro"


class Restarter(QObject):
    restart_signal = Signal()

    def __init__(self, path_to_watch: str, debounce_s: float = 1.0):
        super().__init__()
        self.path_to_watch = path_to_watch
        self.last_restart = 0.0
        self.debounce_s = debounce_s

        self.observer = Observer()
        self.observer.schedule(Handler(self.restart_signal), self.path_to_watch, recursive=True)
        self.observer.start()

    def due(self) -> bool:
        return time.time() - self.last_restart > self.debounce_s

    def stop(self):
        self.observer.stop()
        self.observer.join()


class Handler(FileSystemEventHandler):
    """Emits `restart_signal` for modified .py files outside caches."""

    def __init__(self, restart_signal):
        self.restart_signal = restart_signal

    def on_modified(self, event):
        if event.is_directory or not str(event.src_path).endswith(".py"):
            return
        changed = Path(event.src_path).resolve()
        if "__pycache__" in changed.parts:
            return
        log.info("Change detected in %s", changed)
        self.restart_signal.emit()


def main():
    app = QApplication(sys.argv)
    restarter = Restarter(str(PACKAGE_DIR))

    def trigger_restart():
        if not restarter.due():
            return
        log.info("Restarting application...")
        restarter.last_restart = time.time()
        restarter.stop()
        app.quit()
        os.execv(sys.executable, [sys.executable] + sys.argv)

    restarter.restart_signal.connect(trigger_restart)

    os.environ["__DEV_LAUNCHER__"] = "1"
    try:
        from mimipro.main import main as main_app
        main_app()
    finally:
        os.environ.pop("__DEV_LAUNCHER__", None)

    exit_code = app.exec()
    restarter.stop()
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
