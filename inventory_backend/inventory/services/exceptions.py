# inventory/services/exceptions.py

"""
INVENTORY SERVICE ERRORS

Centralized domain errors for the ledger and every workflow that mutates it.
Raised inside the enclosing transaction.atomic block, so the whole call rolls back.
"""


class InventoryServiceError(Exception):
    """Base exception for all inventory ledger failures."""


class NotFoundError(InventoryServiceError):
    """Raised when a document, document line or ledger row does not exist."""


class InvalidStateError(InventoryServiceError):
    """Raised when an operation is attempted from the wrong workflow state."""


class InsufficientStockError(InventoryServiceError):
    """Raised when a requested quantity exceeds what the ledger can supply."""


class AlreadyPaidError(InvalidStateError):
    """Raised when payment is processed for an invoice that is already paid."""


class InvariantViolation(InventoryServiceError):
    """Raised when a mutation would break a ledger invariant (negative quantities)."""
