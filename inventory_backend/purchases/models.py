# purchases/models.py

import uuid
from decimal import Decimal
from functools import partial

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone

from inventory.services.numbering import save_with_document_number
from products.models import Product

TWOPLACES = Decimal("0.01")


def _money(v) -> Decimal:
    return Decimal(str(v or "0.00")).quantize(TWOPLACES)


User = settings.AUTH_USER_MODEL


class Vendor(models.Model):
    """
    Vendor master (only what purchase orders reference).
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    name = models.CharField(max_length=200)
    phone = models.CharField(max_length=50, blank=True, default="")
    email = models.EmailField(blank=True, default="")
    address = models.TextField(blank=True, default="")

    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["name"]
        indexes = [
            models.Index(fields=["name"], name="vendor_name_idx"),
        ]

    def __str__(self):
        return self.name


class PurchaseOrder(models.Model):
    """
    Purchase order header.

    Receiving is performed by purchases.services.receiving_service:
    - credits the receiving warehouse ledger per delivered line
    - records one PURCHASE movement per delivered line (unit_cost snapshot)
    - marks the order RECEIVED (partial and repeated receipts allowed)
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    STATUS_DRAFT = "draft"
    STATUS_SENT = "sent"
    STATUS_CONFIRMED = "confirmed"
    STATUS_RECEIVED = "received"
    STATUS_CANCELLED = "cancelled"

    STATUSES = [
        (STATUS_DRAFT, "Draft"),
        (STATUS_SENT, "Sent"),
        (STATUS_CONFIRMED, "Confirmed"),
        (STATUS_RECEIVED, "Received"),
        (STATUS_CANCELLED, "Cancelled"),
    ]

    NUMBER_PREFIX = "PO"

    po_number = models.CharField(max_length=32, unique=True, blank=True)

    vendor = models.ForeignKey(
        Vendor,
        on_delete=models.PROTECT,
        related_name="purchase_orders",
    )

    status = models.CharField(max_length=20, choices=STATUSES, default=STATUS_DRAFT)

    order_date = models.DateField(default=timezone.localdate)
    expected_date = models.DateField(null=True, blank=True)
    received_date = models.DateField(null=True, blank=True)

    subtotal_amount = models.DecimalField(
        max_digits=14, decimal_places=2, default=Decimal("0.00")
    )
    tax_amount = models.DecimalField(
        max_digits=14, decimal_places=2, default=Decimal("0.00")
    )
    total_amount = models.DecimalField(
        max_digits=14, decimal_places=2, default=Decimal("0.00")
    )

    notes = models.TextField(blank=True, default="")

    created_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="purchase_orders_created",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(subtotal_amount__gte=Decimal("0.00")),
                name="purchase_order_subtotal_nonnegative",
            ),
            models.CheckConstraint(
                condition=models.Q(tax_amount__gte=Decimal("0.00")),
                name="purchase_order_tax_nonnegative",
            ),
            models.CheckConstraint(
                condition=models.Q(total_amount__gte=Decimal("0.00")),
                name="purchase_order_total_nonnegative",
            ),
        ]
        indexes = [
            models.Index(fields=["vendor", "created_at"], name="po_vendor_created_idx"),
            models.Index(fields=["status", "created_at"], name="po_status_created_idx"),
        ]

    def clean(self):
        for field in ("subtotal_amount", "tax_amount", "total_amount"):
            value = getattr(self, field)
            if value is not None and value < Decimal("0.00"):
                raise ValidationError({field: f"{field} cannot be negative"})

        if self.status == self.STATUS_RECEIVED and not self.received_date:
            raise ValidationError(
                {"received_date": "received_date is required when status is received"}
            )

    def save(self, *args, **kwargs):
        if not self.po_number:
            return save_with_document_number(
                self,
                field="po_number",
                prefix=self.NUMBER_PREFIX,
                save=partial(super().save, *args, **kwargs),
            )
        self.full_clean()
        return super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.po_number} ({self.vendor.name})"


class PurchaseOrderItem(models.Model):
    """
    Purchase order line. quantity_received accumulates across receipts.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    purchase_order = models.ForeignKey(
        PurchaseOrder,
        on_delete=models.CASCADE,
        related_name="items",
    )
    product = models.ForeignKey(
        Product,
        on_delete=models.PROTECT,
        related_name="purchase_order_items",
    )

    quantity_ordered = models.PositiveIntegerField()
    quantity_received = models.PositiveIntegerField(default=0)
    unit_cost = models.DecimalField(
        max_digits=14, decimal_places=2, default=Decimal("0.00")
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity_ordered__gt=0),
                name="purchase_order_item_quantity_gt_zero",
            ),
            models.CheckConstraint(
                condition=models.Q(unit_cost__gte=Decimal("0.00")),
                name="purchase_order_item_unit_cost_nonnegative",
            ),
        ]

    def clean(self):
        if self.quantity_ordered is None or self.quantity_ordered <= 0:
            raise ValidationError({"quantity_ordered": "quantity_ordered must be > 0"})

        if self.unit_cost is not None and self.unit_cost < Decimal("0.00"):
            raise ValidationError({"unit_cost": "unit_cost cannot be negative"})

    @property
    def line_total(self) -> Decimal:
        return _money(Decimal(str(self.quantity_ordered)) * Decimal(str(self.unit_cost)))

    @property
    def quantity_outstanding(self) -> int:
        return max(int(self.quantity_ordered) - int(self.quantity_received or 0), 0)

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)

    def __str__(self):
        product_name = getattr(self.product, "name", "Product")
        return f"{product_name} x {self.quantity_ordered}"
