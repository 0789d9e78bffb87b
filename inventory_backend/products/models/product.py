# products/models/product.py

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q, Sum


class Product(models.Model):
    """
    Represents a stocked product.

    STOCK MODEL (IMPORTANT):
    - Product itself does NOT store stock
    - Stock lives in inventory.InventoryItem (one row per warehouse)
    - cost_price is the valuation basis and the unit_cost stamped on sale movements
    - reorder_level drives the low-stock report (0 disables it for this product)
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    sku = models.CharField(max_length=128, unique=True, db_index=True)
    name = models.CharField(max_length=255, db_index=True)
    description = models.TextField(blank=True, default="")

    cost_price = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    unit_price = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )

    reorder_level = models.PositiveIntegerField(default=0)
    reorder_quantity = models.PositiveIntegerField(default=0)

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        constraints = [
            models.CheckConstraint(
                condition=Q(cost_price__gte=Decimal("0.00")),
                name="chk_product_cost_price_nonnegative",
            ),
            models.CheckConstraint(
                condition=Q(unit_price__gte=Decimal("0.00")),
                name="chk_product_unit_price_nonnegative",
            ),
        ]

    def __str__(self):
        return f"{self.name} ({self.sku})"

    def clean(self):
        if not (self.sku or "").strip():
            raise ValidationError({"sku": "sku is required"})

        if self.cost_price is not None and Decimal(self.cost_price) < Decimal("0.00"):
            raise ValidationError({"cost_price": "cost_price cannot be negative"})

        if self.unit_price is not None and Decimal(self.unit_price) < Decimal("0.00"):
            raise ValidationError({"unit_price": "unit_price cannot be negative"})

    def save(self, *args, **kwargs):
        if self.sku is not None:
            self.sku = self.sku.strip()
        self.full_clean()
        return super().save(*args, **kwargs)

    @property
    def total_on_hand(self) -> int:
        """On-hand units summed across every warehouse."""
        return int(
            self.inventory_items.aggregate(total=Sum("quantity_on_hand")).get("total")
            or 0
        )

    @property
    def total_available(self) -> int:
        return int(
            self.inventory_items.aggregate(total=Sum("quantity_available")).get("total")
            or 0
        )
