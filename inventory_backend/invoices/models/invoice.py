# invoices/models/invoice.py

import uuid
from decimal import Decimal
from functools import partial

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone

from inventory.models import Warehouse
from inventory.services.numbering import save_with_document_number

User = settings.AUTH_USER_MODEL


class Invoice(models.Model):
    """
    Customer invoice (ledger-relevant subset).

    GUARANTEES:
    - At most ONE outstanding reservation, recorded in reserved_warehouse
    - reserved_warehouse is cleared when the reservation is released or consumed
    - Inventory leaves the ledger only when the invoice is paid
    """

    STATUS_DRAFT = "draft"
    STATUS_SENT = "sent"
    STATUS_PARTIALLY_PAID = "partially_paid"
    STATUS_PAID = "paid"
    STATUS_CANCELLED = "cancelled"

    STATUS_CHOICES = [
        (STATUS_DRAFT, "Draft"),
        (STATUS_SENT, "Sent"),
        (STATUS_PARTIALLY_PAID, "Partially Paid"),
        (STATUS_PAID, "Paid"),
        (STATUS_CANCELLED, "Cancelled"),
    ]

    STATUS_ENUM = {
        STATUS_DRAFT: {"label": "Draft", "terminal": False, "reservable": True},
        STATUS_SENT: {"label": "Sent", "terminal": False, "reservable": True},
        STATUS_PARTIALLY_PAID: {"label": "Partially Paid", "terminal": False, "reservable": True},
        STATUS_PAID: {"label": "Paid", "terminal": True, "reservable": False},
        STATUS_CANCELLED: {"label": "Cancelled", "terminal": True, "reservable": False},
    }

    NUMBER_PREFIX = "INV"

    @classmethod
    def get_status_enum(cls):
        return cls.STATUS_ENUM

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    invoice_number = models.CharField(
        max_length=32,
        unique=True,
        blank=True,
        help_text="System-generated invoice number",
    )

    customer_name = models.CharField(max_length=255, blank=True, default="")

    status = models.CharField(
        max_length=32,
        choices=STATUS_CHOICES,
        default=STATUS_DRAFT,
    )

    issue_date = models.DateField(default=timezone.localdate)
    due_date = models.DateField(null=True, blank=True)

    subtotal_amount = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    tax_amount = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    total_amount = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )

    reserved_warehouse = models.ForeignKey(
        Warehouse,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="reserved_invoices",
        help_text="Warehouse holding this invoice's outstanding reservation",
    )
    reserved_at = models.DateTimeField(null=True, blank=True)

    paid_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)

    created_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="invoices_created",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status", "created_at"], name="invoice_status_created_idx"),
        ]

    @property
    def has_reservation(self) -> bool:
        return self.reserved_warehouse_id is not None

    def clean(self):
        if self.status == self.STATUS_PAID and not self.paid_at:
            raise ValidationError({"paid_at": "paid_at is required when status is paid"})

        if self.status in (self.STATUS_PAID, self.STATUS_CANCELLED) and self.reserved_warehouse_id:
            raise ValidationError(
                {"reserved_warehouse": f"A {self.status} invoice cannot hold a reservation"}
            )

        if bool(self.reserved_warehouse_id) != bool(self.reserved_at):
            raise ValidationError(
                {"reserved_at": "reserved_at and reserved_warehouse must be set together"}
            )

    def save(self, *args, **kwargs):
        if not self.invoice_number:
            return save_with_document_number(
                self,
                field="invoice_number",
                prefix=self.NUMBER_PREFIX,
                save=partial(super().save, *args, **kwargs),
            )
        self.full_clean()
        return super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.invoice_number} ({self.status})"
