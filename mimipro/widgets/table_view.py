from PySide6.QtCore import QSortFilterProxyModel
from PySide6.QtWidgets import QTableView


class TableView(QTableView):
    """Single-row-selection table shared by all screens."""

    def __init__(self, parent=None, *, sortable: bool = True, **kwargs):
        super().__init__(parent, **kwargs)
        self.setSortingEnabled(sortable)
        self.setAlternatingRowColors(True)
        self.setSelectionBehavior(QTableView.SelectRows)
        self.setSelectionMode(QTableView.SingleSelection)
        self.horizontalHeader().setStretchLastSection(True)
        self.verticalHeader().setVisible(False)

    def selected_row(self) -> int | None:
        """Selected row in source-model terms (mapped through a proxy), or None."""
        sm = self.selectionModel()
        if sm is None:
            return None
        idxs = sm.selectedRows()
        if not idxs:
            return None
        idx = idxs[0]
        model = self.model()
        if isinstance(model, QSortFilterProxyModel):
            idx = model.mapToSource(idx)
        return idx.row()
