# purchases/tests/test_receiving.py

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.test import TestCase

from inventory.models import StockMovement
from inventory.services.exceptions import InvalidStateError, NotFoundError
from inventory.services.reports import verify_ledger
from inventory.tests.helpers import ledger_row, make_product, make_user, make_warehouse
from purchases.models import PurchaseOrder, Vendor
from purchases.services.receiving_service import (
    cancel_purchase_order,
    create_purchase_order,
    receive_purchase_order,
)


class PurchaseOrderReceivingTests(TestCase):
    """
    Receiving tests.

    GUARANTEES:
    - each delivered line credits on_hand and records one PURCHASE movement
    - movements carry the ordered unit cost
    - partial and repeated receipts accumulate
    """

    def setUp(self):
        self.user = make_user()
        self.vendor = Vendor.objects.create(name="Acme Supply")
        self.warehouse = make_warehouse()
        self.widget = make_product()
        self.gadget = make_product(sku="SKU-200", name="Gadget", cost_price="7.00")

        self.order = create_purchase_order(
            vendor_id=self.vendor.id,
            lines=[
                {"product_id": self.widget.id, "quantity_ordered": 10, "unit_cost": "2.50"},
                {"product_id": self.gadget.id, "quantity_ordered": 4, "unit_cost": "7.00"},
            ],
            tax_amount="3.00",
            user=self.user,
        )
        self.widget_line = self.order.items.get(product=self.widget)
        self.gadget_line = self.order.items.get(product=self.gadget)

    def test_create_numbers_and_totals(self):
        self.assertEqual(self.order.po_number, "PO-0001")
        self.assertEqual(self.order.status, PurchaseOrder.STATUS_DRAFT)
        self.assertEqual(self.order.subtotal_amount, Decimal("53.00"))
        self.assertEqual(self.order.total_amount, Decimal("56.00"))

    def test_create_without_lines_fails(self):
        with self.assertRaises(ValidationError):
            create_purchase_order(vendor_id=self.vendor.id, lines=[])

    def test_create_with_unknown_vendor_fails(self):
        with self.assertRaises(NotFoundError):
            create_purchase_order(
                vendor_id="00000000-0000-0000-0000-000000000000",
                lines=[{"product_id": self.widget.id, "quantity_ordered": 1, "unit_cost": "1.00"}],
            )

    def test_receive_credits_ledger_with_cost(self):
        received = receive_purchase_order(
            purchase_order_id=self.order.id,
            received_items=[
                {"item_id": self.widget_line.id, "quantity_received": 10},
                {"item_id": self.gadget_line.id, "quantity_received": 4},
            ],
            warehouse_id=self.warehouse.id,
            user=self.user,
        )

        self.assertEqual(received.status, PurchaseOrder.STATUS_RECEIVED)
        self.assertIsNotNone(received.received_date)
        self.assertEqual(ledger_row(self.widget, self.warehouse).quantity_on_hand, 10)
        self.assertEqual(ledger_row(self.gadget, self.warehouse).quantity_on_hand, 4)

        movement = StockMovement.objects.get(
            reference_id=self.order.id, product=self.widget
        )
        self.assertEqual(movement.movement_type, StockMovement.MovementType.PURCHASE)
        self.assertEqual(movement.reference_type, StockMovement.ReferenceType.PURCHASE_ORDER)
        self.assertEqual(movement.unit_cost, Decimal("2.50"))
        self.assertEqual(movement.total_cost, Decimal("25.00"))
        self.assertEqual(verify_ledger(), [])

    def test_partial_then_repeated_receipt_accumulates(self):
        for qty in (3, 5):
            receive_purchase_order(
                purchase_order_id=self.order.id,
                received_items=[{"item_id": self.widget_line.id, "quantity_received": qty}],
                warehouse_id=self.warehouse.id,
            )

        self.widget_line.refresh_from_db()
        self.assertEqual(self.widget_line.quantity_received, 8)
        self.assertEqual(self.widget_line.quantity_outstanding, 2)
        self.assertEqual(ledger_row(self.widget, self.warehouse).quantity_on_hand, 8)
        self.assertEqual(
            StockMovement.objects.filter(reference_id=self.order.id).count(), 2
        )

    def test_over_receipt_is_allowed(self):
        receive_purchase_order(
            purchase_order_id=self.order.id,
            received_items=[{"item_id": self.gadget_line.id, "quantity_received": 6}],
            warehouse_id=self.warehouse.id,
        )

        self.gadget_line.refresh_from_db()
        self.assertEqual(self.gadget_line.quantity_received, 6)
        self.assertEqual(ledger_row(self.gadget, self.warehouse).quantity_on_hand, 6)

    def test_receiving_cancelled_order_fails(self):
        cancel_purchase_order(purchase_order_id=self.order.id)

        with self.assertRaises(InvalidStateError):
            receive_purchase_order(
                purchase_order_id=self.order.id,
                received_items=[{"item_id": self.widget_line.id, "quantity_received": 1}],
                warehouse_id=self.warehouse.id,
            )

        self.assertFalse(StockMovement.objects.filter(reference_id=self.order.id).exists())

    def test_foreign_line_is_not_found_and_nothing_posts(self):
        other = create_purchase_order(
            vendor_id=self.vendor.id,
            lines=[{"product_id": self.widget.id, "quantity_ordered": 1, "unit_cost": "1.00"}],
        )

        with self.assertRaises(NotFoundError):
            receive_purchase_order(
                purchase_order_id=self.order.id,
                received_items=[
                    {"item_id": self.widget_line.id, "quantity_received": 2},
                    {"item_id": other.items.get().id, "quantity_received": 1},
                ],
                warehouse_id=self.warehouse.id,
            )

        self.assertFalse(StockMovement.objects.filter(reference_id=self.order.id).exists())

    def test_unknown_warehouse_is_not_found(self):
        with self.assertRaises(NotFoundError):
            receive_purchase_order(
                purchase_order_id=self.order.id,
                received_items=[{"item_id": self.widget_line.id, "quantity_received": 1}],
                warehouse_id="00000000-0000-0000-0000-000000000000",
            )

    def test_cancel_after_receipt_fails(self):
        receive_purchase_order(
            purchase_order_id=self.order.id,
            received_items=[{"item_id": self.widget_line.id, "quantity_received": 1}],
            warehouse_id=self.warehouse.id,
        )

        with self.assertRaises(InvalidStateError):
            cancel_purchase_order(purchase_order_id=self.order.id)
