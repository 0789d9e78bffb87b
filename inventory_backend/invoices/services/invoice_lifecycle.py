"""
INVOICE LIFECYCLE DOMAIN RULES

This module defines the ONLY allowed lifecycle transitions
for Invoice entities.

DESIGN PRINCIPLES:
- No database writes
- No stock mutation
- No side effects
- Single source of truth
"""

from inventory.services.exceptions import AlreadyPaidError, InvalidStateError
from invoices.models import Invoice

# ============================================================
# STATE DEFINITIONS
# ============================================================

TERMINAL_STATES = {
    Invoice.STATUS_PAID,
    Invoice.STATUS_CANCELLED,
}

ALLOWED_TRANSITIONS = {
    Invoice.STATUS_DRAFT: {
        Invoice.STATUS_SENT,
        Invoice.STATUS_PAID,
        Invoice.STATUS_CANCELLED,
    },
    Invoice.STATUS_SENT: {
        Invoice.STATUS_PARTIALLY_PAID,
        Invoice.STATUS_PAID,
        Invoice.STATUS_CANCELLED,
    },
    Invoice.STATUS_PARTIALLY_PAID: {
        Invoice.STATUS_PAID,
    },
}


# ============================================================
# DOMAIN RULES
# ============================================================


def can_transition(*, from_status: str, to_status: str) -> bool:
    if from_status in TERMINAL_STATES:
        return False

    return to_status in ALLOWED_TRANSITIONS.get(from_status, set())


def validate_transition(*, invoice: Invoice, target_status: str):
    if invoice.status == Invoice.STATUS_PAID and target_status == Invoice.STATUS_PAID:
        raise AlreadyPaidError(f"Invoice {invoice.invoice_number} is already paid")

    if not can_transition(
        from_status=invoice.status,
        to_status=target_status,
    ):
        raise InvalidStateError(
            f"Invoice {invoice.invoice_number} cannot transition from "
            f"'{invoice.status}' to '{target_status}'"
        )


def validate_can_reserve(*, invoice: Invoice):
    if not Invoice.get_status_enum().get(invoice.status, {}).get("reservable", False):
        raise InvalidStateError(
            f"Invoice {invoice.invoice_number} is {invoice.status}; "
            "inventory cannot be reserved for it"
        )
