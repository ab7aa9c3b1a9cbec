from PySide6.QtWidgets import QWidget, QMessageBox, QInputDialog, QLineEdit


def info(parent: QWidget, title: str, text: str):
    QMessageBox.information(parent, title, text)


def error(parent: QWidget, title: str, text: str):
    QMessageBox.critical(parent, title, text)


def confirm(parent: QWidget, title: str, text: str) -> bool:
    choice = QMessageBox.question(
        parent, title, text, QMessageBox.Yes | QMessageBox.No, QMessageBox.No
    )
    return choice == QMessageBox.Yes


def ask_text(parent: QWidget, title: str, label: str, default: str = "") -> str | None:
    """Single-line prompt; returns the stripped text, or None when cancelled."""
    text, ok = QInputDialog.getText(parent, title, label, QLineEdit.Normal, default)
    if not ok:
        return None
    return text.strip()
