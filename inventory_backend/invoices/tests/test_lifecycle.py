# invoices/tests/test_lifecycle.py

from django.test import SimpleTestCase

from inventory.services.exceptions import AlreadyPaidError, InvalidStateError
from invoices.models import Invoice
from invoices.services.invoice_lifecycle import (
    can_transition,
    validate_can_reserve,
    validate_transition,
)


class InvoiceLifecycleRuleTests(SimpleTestCase):
    def test_allowed_transitions(self):
        self.assertTrue(can_transition(from_status=Invoice.STATUS_DRAFT, to_status=Invoice.STATUS_PAID))
        self.assertTrue(can_transition(from_status=Invoice.STATUS_SENT, to_status=Invoice.STATUS_CANCELLED))
        self.assertTrue(
            can_transition(from_status=Invoice.STATUS_PARTIALLY_PAID, to_status=Invoice.STATUS_PAID)
        )

    def test_terminal_states_do_not_move(self):
        for terminal in (Invoice.STATUS_PAID, Invoice.STATUS_CANCELLED):
            self.assertFalse(can_transition(from_status=terminal, to_status=Invoice.STATUS_SENT))

    def test_partially_paid_cannot_be_cancelled(self):
        invoice = Invoice(invoice_number="INV-0001", status=Invoice.STATUS_PARTIALLY_PAID)

        with self.assertRaises(InvalidStateError):
            validate_transition(invoice=invoice, target_status=Invoice.STATUS_CANCELLED)

    def test_paying_twice_is_already_paid(self):
        invoice = Invoice(invoice_number="INV-0001", status=Invoice.STATUS_PAID)

        with self.assertRaises(AlreadyPaidError):
            validate_transition(invoice=invoice, target_status=Invoice.STATUS_PAID)

    def test_already_paid_is_an_invalid_state(self):
        self.assertTrue(issubclass(AlreadyPaidError, InvalidStateError))

    def test_only_open_invoices_are_reservable(self):
        validate_can_reserve(invoice=Invoice(status=Invoice.STATUS_SENT))

        with self.assertRaises(InvalidStateError):
            validate_can_reserve(invoice=Invoice(status=Invoice.STATUS_CANCELLED))

    def test_status_table_marks_terminal_states_unreservable(self):
        for code, meta in Invoice.get_status_enum().items():
            if meta["terminal"]:
                with self.assertRaises(InvalidStateError):
                    validate_can_reserve(invoice=Invoice(status=code))
            else:
                validate_can_reserve(invoice=Invoice(status=code))
