"""
Error taxonomy shared by the store, the repositories and the delivery engine.

Every error is a DomainError so controllers can catch one type and surface the
message to the user. Clamping (negative stock, negative sold quantity) is a
policy and never raises.
"""


class DomainError(Exception):
    """Domain-level error suitable for surfacing to the UI."""
    pass


class ValidationError(DomainError):
    """Input rejected before any write happened."""
    pass


class NotFoundError(DomainError):
    """A record the operation depends on does not exist."""
    pass


class PersistenceError(DomainError):
    """The underlying sqlite store failed to read or write."""
    pass


class UnreconciledDeliveryError(PersistenceError):
    """
    The delivery record was saved but one or more stock decrements failed.

    `record_id` identifies the saved record; its `unreconciled_items` hold the
    decrements still to apply (see DeliveryService.retry_reconciliation).
    """

    def __init__(self, message: str, record_id: int):
        super().__init__(message)
        self.record_id = record_id
