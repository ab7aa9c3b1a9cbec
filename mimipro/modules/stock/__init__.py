from .controller import StockController
from .view import StockView
from .form import AddStockForm, AdjustStockForm
from .model import StockTableModel, StockHistoryTableModel

__all__ = [
    "StockController",
    "StockView",
    "AddStockForm",
    "AdjustStockForm",
    "StockTableModel",
    "StockHistoryTableModel",
]
