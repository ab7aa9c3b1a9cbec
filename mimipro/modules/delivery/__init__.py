"""
Delivery module package exports.

- DeliveryController: settlement screen and delivery history.
- DeliveryService / DeliverySession: save, edit and stock reconciliation,
  usable without a window.
"""

from .controller import DeliveryController
from .service import DeliveryService
from .session import DeliverySession, EditableDelivery

__all__ = [
    "DeliveryController",
    "DeliveryService",
    "DeliverySession",
    "EditableDelivery",
]
