# inventory/models/stock_adjustment.py

"""
STOCK ADJUSTMENT (HEADER + LINES)

Corrects on-hand quantity to an absolute counted value.

Lifecycle:
- created in DRAFT
- DRAFT -> APPROVED  (the only transition that touches the ledger)
- DRAFT -> CANCELLED (no ledger effect)
- APPROVED / CANCELLED are terminal
"""

import uuid
from functools import partial

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q
from django.utils import timezone

from inventory.models.warehouse import Warehouse
from inventory.services.numbering import save_with_document_number
from products.models import Product

User = settings.AUTH_USER_MODEL


class StockAdjustment(models.Model):
    STATUS_DRAFT = "draft"
    STATUS_APPROVED = "approved"
    STATUS_CANCELLED = "cancelled"

    STATUSES = [
        (STATUS_DRAFT, "Draft"),
        (STATUS_APPROVED, "Approved"),
        (STATUS_CANCELLED, "Cancelled"),
    ]

    TERMINAL_STATUSES = {STATUS_APPROVED, STATUS_CANCELLED}

    NUMBER_PREFIX = "ADJ"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    adjustment_number = models.CharField(max_length=32, unique=True, blank=True)

    warehouse = models.ForeignKey(
        Warehouse,
        on_delete=models.PROTECT,
        related_name="stock_adjustments",
    )

    adjustment_date = models.DateField(default=timezone.localdate)
    reason = models.CharField(max_length=255, blank=True, default="")
    notes = models.TextField(blank=True, default="")

    status = models.CharField(max_length=20, choices=STATUSES, default=STATUS_DRAFT)

    created_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="stock_adjustments_created",
    )
    approved_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="stock_adjustments_approved",
    )
    approved_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["warehouse", "status"], name="stock_adj_wh_status_idx"),
        ]

    @property
    def is_terminal(self) -> bool:
        return self.status in self.TERMINAL_STATUSES

    def clean(self):
        if self.status == self.STATUS_APPROVED and not self.approved_at:
            raise ValidationError(
                {"approved_at": "approved_at is required when status is approved"}
            )

    def save(self, *args, **kwargs):
        if not self.adjustment_number:
            return save_with_document_number(
                self,
                field="adjustment_number",
                prefix=self.NUMBER_PREFIX,
                save=partial(super().save, *args, **kwargs),
            )
        self.full_clean()
        return super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.adjustment_number} ({self.status})"


class StockAdjustmentItem(models.Model):
    """
    One counted product line.

    quantity_change is ALWAYS derived: quantity_after - quantity_before.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    adjustment = models.ForeignKey(
        StockAdjustment,
        on_delete=models.CASCADE,
        related_name="items",
    )
    product = models.ForeignKey(
        Product,
        on_delete=models.PROTECT,
        related_name="stock_adjustment_items",
    )

    quantity_before = models.IntegerField()
    quantity_after = models.IntegerField()
    quantity_change = models.IntegerField(default=0)

    notes = models.CharField(max_length=255, blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at"]
        constraints = [
            models.CheckConstraint(
                condition=Q(quantity_before__gte=0),
                name="chk_stock_adj_item_before_gte_zero",
            ),
            models.CheckConstraint(
                condition=Q(quantity_after__gte=0),
                name="chk_stock_adj_item_after_gte_zero",
            ),
        ]

    def clean(self):
        if self.quantity_before is None or self.quantity_before < 0:
            raise ValidationError({"quantity_before": "quantity_before must be >= 0"})

        if self.quantity_after is None or self.quantity_after < 0:
            raise ValidationError({"quantity_after": "quantity_after must be >= 0"})

    def save(self, *args, **kwargs):
        self.quantity_change = int(self.quantity_after or 0) - int(
            self.quantity_before or 0
        )
        self.full_clean()
        return super().save(*args, **kwargs)

    def __str__(self):
        product_name = getattr(self.product, "name", "Product")
        return f"{product_name}: {self.quantity_before} -> {self.quantity_after}"
