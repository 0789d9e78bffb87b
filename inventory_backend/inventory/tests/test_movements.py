# inventory/tests/test_movements.py

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db.models import Sum
from django.test import TestCase

from inventory.models import StockMovement
from inventory.services.exceptions import InsufficientStockError, NotFoundError
from inventory.services.movements import (
    adjust_inventory_quantity,
    post_stock_movement,
    record_movement,
)
from inventory.tests.helpers import (
    ledger_row,
    make_product,
    make_user,
    make_warehouse,
    seed_stock,
)


class MovementRecorderTests(TestCase):
    """
    Movement log tests.

    GUARANTEES:
    - every on-hand change has exactly one signed movement
    - movements are append-only
    - movement direction matches movement type
    """

    def setUp(self):
        self.user = make_user()
        self.product = make_product()
        self.warehouse = make_warehouse()

    def _movement_total(self):
        return (
            StockMovement.objects.filter(product=self.product, warehouse=self.warehouse)
            .aggregate(total=Sum("quantity"))
            .get("total")
            or 0
        )

    def test_post_stock_movement_updates_ledger_and_log_together(self):
        posted = post_stock_movement(
            product_id=self.product.id,
            warehouse_id=self.warehouse.id,
            quantity=12,
            movement_type=StockMovement.MovementType.PURCHASE,
            reference_type=StockMovement.ReferenceType.MANUAL,
            unit_cost=Decimal("3.00"),
            user=self.user,
        )

        self.assertEqual(posted.item.quantity_on_hand, 12)
        self.assertEqual(posted.movement.quantity, 12)
        self.assertEqual(posted.movement.total_cost, Decimal("36.00"))
        self.assertEqual(self._movement_total(), 12)

    def test_movements_are_immutable(self):
        movement = record_movement(
            product_id=self.product.id,
            warehouse_id=self.warehouse.id,
            movement_type=StockMovement.MovementType.ADJUSTMENT,
            quantity=1,
            reference_type=StockMovement.ReferenceType.MANUAL,
        )

        movement.notes = "edited"
        with self.assertRaises(ValidationError):
            movement.save()

        with self.assertRaises(ValidationError):
            movement.delete()

    def test_sale_movement_must_be_negative(self):
        with self.assertRaises(ValidationError):
            record_movement(
                product_id=self.product.id,
                warehouse_id=self.warehouse.id,
                movement_type=StockMovement.MovementType.SALE,
                quantity=5,
                reference_type=StockMovement.ReferenceType.MANUAL,
            )

    def test_document_reference_requires_reference_id(self):
        with self.assertRaises(ValidationError):
            record_movement(
                product_id=self.product.id,
                warehouse_id=self.warehouse.id,
                movement_type=StockMovement.MovementType.PURCHASE,
                quantity=5,
                reference_type=StockMovement.ReferenceType.PURCHASE_ORDER,
            )

    def test_manual_adjustment_adds_and_removes_stock(self):
        seed_stock(self.product, self.warehouse, 10, user=self.user)

        posted = adjust_inventory_quantity(
            product_id=self.product.id,
            warehouse_id=self.warehouse.id,
            quantity_change=-4,
            user=self.user,
            notes="damaged",
        )

        self.assertEqual(posted.item.quantity_on_hand, 6)
        self.assertEqual(posted.movement.movement_type, StockMovement.MovementType.ADJUSTMENT)
        self.assertEqual(posted.movement.reference_type, StockMovement.ReferenceType.MANUAL)
        self.assertEqual(posted.movement.quantity, -4)
        self.assertEqual(self._movement_total(), ledger_row(self.product, self.warehouse).quantity_on_hand)

    def test_manual_adjustment_rejects_zero(self):
        with self.assertRaises(ValidationError):
            adjust_inventory_quantity(
                product_id=self.product.id,
                warehouse_id=self.warehouse.id,
                quantity_change=0,
            )

    def test_manual_adjustment_cannot_remove_reserved_units(self):
        item = seed_stock(self.product, self.warehouse, 5)
        item.quantity_reserved = 3
        item.save()

        with self.assertRaises(InsufficientStockError):
            adjust_inventory_quantity(
                product_id=self.product.id,
                warehouse_id=self.warehouse.id,
                quantity_change=-3,
            )

        self.assertEqual(ledger_row(self.product, self.warehouse).quantity_on_hand, 5)
        self.assertEqual(self._movement_total(), 5)

    def test_manual_removal_without_row_is_not_found(self):
        with self.assertRaises(NotFoundError):
            adjust_inventory_quantity(
                product_id=self.product.id,
                warehouse_id=self.warehouse.id,
                quantity_change=-1,
            )
