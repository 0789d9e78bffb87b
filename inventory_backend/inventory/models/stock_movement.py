# inventory/models/stock_movement.py

"""
CANONICAL INVENTORY MOVEMENT LOG

Immutable ledger entry explaining ONE signed change to quantity_on_hand.

GUARANTEES:
- Append-only (no updates, no deletes)
- quantity is the signed delta actually applied to the ledger row
- Sum of quantity per (product, warehouse) == InventoryItem.quantity_on_hand
- Direction validated against movement_type:
    purchase   -> positive
    sale       -> negative
    transfer   -> non-zero (negative at source, positive at destination)
    adjustment -> any sign
"""

import uuid
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone

from inventory.models.warehouse import Warehouse
from products.models import Product


class StockMovement(models.Model):
    class MovementType(models.TextChoices):
        PURCHASE = "purchase", "Purchase Receipt"
        SALE = "sale", "Sale"
        ADJUSTMENT = "adjustment", "Adjustment"
        TRANSFER = "transfer", "Transfer"

    class ReferenceType(models.TextChoices):
        STOCK_ADJUSTMENT = "stock_adjustment", "Stock Adjustment"
        STOCK_TRANSFER = "stock_transfer", "Stock Transfer"
        PURCHASE_ORDER = "purchase_order", "Purchase Order"
        INVOICE = "invoice", "Invoice"
        MANUAL = "manual", "Manual Adjustment"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    product = models.ForeignKey(
        Product, on_delete=models.PROTECT, related_name="stock_movements"
    )
    warehouse = models.ForeignKey(
        Warehouse, on_delete=models.PROTECT, related_name="stock_movements"
    )

    movement_type = models.CharField(max_length=20, choices=MovementType.choices)

    reference_type = models.CharField(
        max_length=32,
        choices=ReferenceType.choices,
        null=True,
        blank=True,
    )
    reference_id = models.UUIDField(null=True, blank=True)

    quantity = models.IntegerField(help_text="Signed delta applied to quantity_on_hand")

    unit_cost = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
        default=None,
        help_text="Unit cost at movement time (immutable).",
    )

    notes = models.CharField(max_length=255, blank=True, default="")

    movement_date = models.DateTimeField(default=timezone.now)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="stock_movements",
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["movement_date", "created_at"]
        indexes = [
            models.Index(
                fields=["product", "warehouse", "movement_date"],
                name="stock_mv_pair_date_idx",
            ),
            models.Index(
                fields=["reference_type", "reference_id"],
                name="stock_mv_reference_idx",
            ),
            models.Index(fields=["movement_type"], name="stock_mv_type_idx"),
        ]

    def clean(self):
        q = int(self.quantity) if self.quantity is not None else None
        if q is None:
            raise ValidationError({"quantity": "quantity is required"})

        if self.movement_type == self.MovementType.PURCHASE and q <= 0:
            raise ValidationError("purchase movements must be positive")

        if self.movement_type == self.MovementType.SALE and q >= 0:
            raise ValidationError("sale movements must be negative")

        if self.movement_type == self.MovementType.TRANSFER and q == 0:
            raise ValidationError("transfer movements cannot be zero")

        if self.reference_type and self.reference_type != self.ReferenceType.MANUAL:
            if not self.reference_id:
                raise ValidationError(
                    {"reference_id": f"{self.reference_type} movements must reference a document"}
                )

        if self.unit_cost is not None and self.unit_cost < Decimal("0.00"):
            raise ValidationError({"unit_cost": "unit_cost cannot be negative"})

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("StockMovement records are immutable")

        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError(
            "StockMovement records are immutable and cannot be deleted"
        )

    @property
    def total_cost(self) -> Decimal:
        unit_cost = self.unit_cost if self.unit_cost is not None else Decimal("0.00")
        return unit_cost * Decimal(abs(int(self.quantity or 0)))

    def __str__(self):
        product_name = getattr(self.product, "name", "Product")
        return f"{product_name} | {self.movement_type} | {self.quantity:+d}"
