from PySide6.QtCore import QObject, Signal
from PySide6.QtWidgets import QWidget


class BaseModule(QObject):
    """One screen of the main window."""

    # Emitted after the module wrote data that other screens display.
    dataChanged = Signal()

    def get_widget(self) -> QWidget:
        raise NotImplementedError

    def refresh(self) -> None:
        """Reload from the store; called when the screen is shown."""
        pass
