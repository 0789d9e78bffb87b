# inventory/models/inventory_item.py

"""
INVENTORY ITEM (LEDGER ROW)

One row per (product, warehouse) pair.

GUARANTEES:
- quantity_on_hand >= 0, quantity_reserved >= 0
- quantity_available == quantity_on_hand - quantity_reserved (ALWAYS derived)
- Rows are created on first receipt/adjustment and never deleted
- Quantities are mutated ONLY via inventory.services.ledger
"""

import uuid

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import F, Q

from inventory.models.warehouse import Warehouse
from products.models import Product


class InventoryItem(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    product = models.ForeignKey(
        Product,
        on_delete=models.PROTECT,
        related_name="inventory_items",
    )
    warehouse = models.ForeignKey(
        Warehouse,
        on_delete=models.PROTECT,
        related_name="inventory_items",
    )

    quantity_on_hand = models.IntegerField(
        default=0,
        help_text="Physically present units (service-managed only)",
    )
    quantity_reserved = models.IntegerField(
        default=0,
        help_text="Units committed to unfulfilled invoices (service-managed only)",
    )
    # Derived field: NEVER edited directly
    quantity_available = models.IntegerField(default=0)

    last_stock_date = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-updated_at"]
        indexes = [
            models.Index(fields=["warehouse", "product"], name="inv_item_wh_product_idx"),
            models.Index(fields=["quantity_available"], name="inv_item_available_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["product", "warehouse"],
                name="uniq_inventory_item_product_warehouse",
            ),
            models.CheckConstraint(
                condition=Q(quantity_on_hand__gte=0),
                name="chk_inventory_item_on_hand_gte_zero",
            ),
            models.CheckConstraint(
                condition=Q(quantity_reserved__gte=0),
                name="chk_inventory_item_reserved_gte_zero",
            ),
            models.CheckConstraint(
                condition=Q(quantity_available__gte=0),
                name="chk_inventory_item_available_gte_zero",
            ),
            models.CheckConstraint(
                condition=Q(
                    quantity_available=F("quantity_on_hand") - F("quantity_reserved")
                ),
                name="chk_inventory_item_available_consistent",
            ),
        ]

    def clean(self):
        if self.quantity_on_hand < 0:
            raise ValidationError(
                {"quantity_on_hand": "quantity_on_hand cannot be negative"}
            )

        if self.quantity_reserved < 0:
            raise ValidationError(
                {"quantity_reserved": "quantity_reserved cannot be negative"}
            )

        if self.quantity_reserved > self.quantity_on_hand:
            raise ValidationError(
                {"quantity_reserved": "quantity_reserved cannot exceed quantity_on_hand"}
            )

    def save(self, *args, **kwargs):
        self.quantity_available = int(self.quantity_on_hand or 0) - int(
            self.quantity_reserved or 0
        )
        self.full_clean()
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("InventoryItem rows are never deleted")

    def __str__(self):
        product_name = getattr(self.product, "name", "Product")
        warehouse_name = getattr(self.warehouse, "name", "Warehouse")
        return (
            f"{warehouse_name} | {product_name} | "
            f"on_hand={self.quantity_on_hand} reserved={self.quantity_reserved}"
        )
