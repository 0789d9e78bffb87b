# inventory/models/stock_transfer.py

"""
STOCK TRANSFER (HEADER + LINES)

Moves quantity between two warehouses in two ledger steps.

Lifecycle:
- PENDING    -> IN_TRANSIT  (process: source deducted)
- IN_TRANSIT -> COMPLETED   (complete: destination credited with quantity_received)
- PENDING / IN_TRANSIT -> CANCELLED
- COMPLETED / CANCELLED are terminal
"""

import uuid
from functools import partial

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import F, Q
from django.utils import timezone

from inventory.models.warehouse import Warehouse
from inventory.services.numbering import save_with_document_number
from products.models import Product

User = settings.AUTH_USER_MODEL


class StockTransfer(models.Model):
    STATUS_PENDING = "pending"
    STATUS_IN_TRANSIT = "in_transit"
    STATUS_COMPLETED = "completed"
    STATUS_CANCELLED = "cancelled"

    STATUSES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_IN_TRANSIT, "In Transit"),
        (STATUS_COMPLETED, "Completed"),
        (STATUS_CANCELLED, "Cancelled"),
    ]

    TERMINAL_STATUSES = {STATUS_COMPLETED, STATUS_CANCELLED}

    NUMBER_PREFIX = "ST"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    transfer_number = models.CharField(max_length=32, unique=True, blank=True)

    from_warehouse = models.ForeignKey(
        Warehouse,
        on_delete=models.PROTECT,
        related_name="outgoing_transfers",
    )
    to_warehouse = models.ForeignKey(
        Warehouse,
        on_delete=models.PROTECT,
        related_name="incoming_transfers",
    )

    transfer_date = models.DateField(default=timezone.localdate)
    notes = models.TextField(blank=True, default="")

    status = models.CharField(max_length=20, choices=STATUSES, default=STATUS_PENDING)

    created_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="stock_transfers_created",
    )
    processed_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="stock_transfers_processed",
    )
    processed_at = models.DateTimeField(null=True, blank=True)
    completed_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="stock_transfers_completed",
    )
    completed_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status", "created_at"], name="stock_tr_status_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=~Q(from_warehouse=F("to_warehouse")),
                name="chk_stock_transfer_distinct_warehouses",
            ),
        ]

    @property
    def is_terminal(self) -> bool:
        return self.status in self.TERMINAL_STATUSES

    def clean(self):
        if (
            self.from_warehouse_id
            and self.to_warehouse_id
            and self.from_warehouse_id == self.to_warehouse_id
        ):
            raise ValidationError(
                {"to_warehouse": "Source and destination warehouses must differ"}
            )

    def save(self, *args, **kwargs):
        if not self.transfer_number:
            return save_with_document_number(
                self,
                field="transfer_number",
                prefix=self.NUMBER_PREFIX,
                save=partial(super().save, *args, **kwargs),
            )
        self.full_clean()
        return super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.transfer_number} ({self.status})"


class StockTransferItem(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    transfer = models.ForeignKey(
        StockTransfer,
        on_delete=models.CASCADE,
        related_name="items",
    )
    product = models.ForeignKey(
        Product,
        on_delete=models.PROTECT,
        related_name="stock_transfer_items",
    )

    quantity = models.PositiveIntegerField(help_text="Requested quantity")
    quantity_received = models.PositiveIntegerField(
        null=True,
        blank=True,
        help_text="Actual quantity received at destination (set on completion)",
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at"]
        constraints = [
            models.CheckConstraint(
                condition=Q(quantity__gt=0),
                name="chk_stock_transfer_item_quantity_gt_zero",
            ),
        ]

    @property
    def variance(self) -> int | None:
        """quantity_received - quantity (negative = shrinkage), None until received."""
        if self.quantity_received is None:
            return None
        return int(self.quantity_received) - int(self.quantity)

    def clean(self):
        if self.quantity is None or self.quantity <= 0:
            raise ValidationError({"quantity": "quantity must be greater than zero"})

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)

    def __str__(self):
        product_name = getattr(self.product, "name", "Product")
        return f"{product_name} x {self.quantity}"
