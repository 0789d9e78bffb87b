"""
======================================================
PATH: inventory/migrations/0001_initial.py
======================================================
MIGRATION: CREATE inventory ledger, movement log, adjustments and transfers
"""

from __future__ import annotations

import uuid

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("products", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        # ---------------------------------------------------------
        # Warehouse
        # ---------------------------------------------------------
        migrations.CreateModel(
            name="Warehouse",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        primary_key=True, default=uuid.uuid4, editable=False, serialize=False
                    ),
                ),
                ("name", models.CharField(max_length=255)),
                (
                    "code",
                    models.CharField(
                        max_length=50,
                        null=True,
                        blank=True,
                        db_index=True,
                        help_text="Unique warehouse code (optional). If set, must be unique.",
                    ),
                ),
                ("address", models.TextField(blank=True, default="")),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["name"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("code",),
                        condition=models.Q(("code__isnull", False))
                        & ~models.Q(("code", "")),
                        name="uniq_warehouse_code_when_present",
                    ),
                ],
            },
        ),
        # ---------------------------------------------------------
        # InventoryItem (ledger row)
        # ---------------------------------------------------------
        migrations.CreateModel(
            name="InventoryItem",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        primary_key=True, default=uuid.uuid4, editable=False, serialize=False
                    ),
                ),
                (
                    "quantity_on_hand",
                    models.IntegerField(
                        default=0,
                        help_text="Physically present units (service-managed only)",
                    ),
                ),
                (
                    "quantity_reserved",
                    models.IntegerField(
                        default=0,
                        help_text="Units committed to unfulfilled invoices (service-managed only)",
                    ),
                ),
                ("quantity_available", models.IntegerField(default=0)),
                ("last_stock_date", models.DateTimeField(null=True, blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="inventory_items",
                        to="products.product",
                    ),
                ),
                (
                    "warehouse",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="inventory_items",
                        to="inventory.warehouse",
                    ),
                ),
            ],
            options={
                "ordering": ["-updated_at"],
                "indexes": [
                    models.Index(
                        fields=["warehouse", "product"], name="inv_item_wh_product_idx"
                    ),
                    models.Index(
                        fields=["quantity_available"], name="inv_item_available_idx"
                    ),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("product", "warehouse"),
                        name="uniq_inventory_item_product_warehouse",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("quantity_on_hand__gte", 0)),
                        name="chk_inventory_item_on_hand_gte_zero",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("quantity_reserved__gte", 0)),
                        name="chk_inventory_item_reserved_gte_zero",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("quantity_available__gte", 0)),
                        name="chk_inventory_item_available_gte_zero",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(
                            (
                                "quantity_available",
                                models.F("quantity_on_hand") - models.F("quantity_reserved"),
                            )
                        ),
                        name="chk_inventory_item_available_consistent",
                    ),
                ],
            },
        ),
        # ---------------------------------------------------------
        # StockMovement (append-only)
        # ---------------------------------------------------------
        migrations.CreateModel(
            name="StockMovement",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        primary_key=True, default=uuid.uuid4, editable=False, serialize=False
                    ),
                ),
                (
                    "movement_type",
                    models.CharField(
                        max_length=20,
                        choices=[
                            ("purchase", "Purchase Receipt"),
                            ("sale", "Sale"),
                            ("adjustment", "Adjustment"),
                            ("transfer", "Transfer"),
                        ],
                    ),
                ),
                (
                    "reference_type",
                    models.CharField(
                        max_length=32,
                        null=True,
                        blank=True,
                        choices=[
                            ("stock_adjustment", "Stock Adjustment"),
                            ("stock_transfer", "Stock Transfer"),
                            ("purchase_order", "Purchase Order"),
                            ("invoice", "Invoice"),
                            ("manual", "Manual Adjustment"),
                        ],
                    ),
                ),
                ("reference_id", models.UUIDField(null=True, blank=True)),
                (
                    "quantity",
                    models.IntegerField(help_text="Signed delta applied to quantity_on_hand"),
                ),
                (
                    "unit_cost",
                    models.DecimalField(
                        max_digits=12,
                        decimal_places=2,
                        null=True,
                        blank=True,
                        default=None,
                        help_text="Unit cost at movement time (immutable).",
                    ),
                ),
                ("notes", models.CharField(max_length=255, blank=True, default="")),
                (
                    "movement_date",
                    models.DateTimeField(default=django.utils.timezone.now),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "created_by",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.SET_NULL,
                        null=True,
                        blank=True,
                        related_name="stock_movements",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="stock_movements",
                        to="products.product",
                    ),
                ),
                (
                    "warehouse",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="stock_movements",
                        to="inventory.warehouse",
                    ),
                ),
            ],
            options={
                "ordering": ["movement_date", "created_at"],
                "indexes": [
                    models.Index(
                        fields=["product", "warehouse", "movement_date"],
                        name="stock_mv_pair_date_idx",
                    ),
                    models.Index(
                        fields=["reference_type", "reference_id"],
                        name="stock_mv_reference_idx",
                    ),
                    models.Index(fields=["movement_type"], name="stock_mv_type_idx"),
                ],
            },
        ),
        # ---------------------------------------------------------
        # StockAdjustment + items
        # ---------------------------------------------------------
        migrations.CreateModel(
            name="StockAdjustment",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        primary_key=True, default=uuid.uuid4, editable=False, serialize=False
                    ),
                ),
                (
                    "adjustment_number",
                    models.CharField(max_length=32, unique=True, blank=True),
                ),
                (
                    "adjustment_date",
                    models.DateField(default=django.utils.timezone.localdate),
                ),
                ("reason", models.CharField(max_length=255, blank=True, default="")),
                ("notes", models.TextField(blank=True, default="")),
                (
                    "status",
                    models.CharField(
                        max_length=20,
                        choices=[
                            ("draft", "Draft"),
                            ("approved", "Approved"),
                            ("cancelled", "Cancelled"),
                        ],
                        default="draft",
                    ),
                ),
                ("approved_at", models.DateTimeField(null=True, blank=True)),
                ("cancelled_at", models.DateTimeField(null=True, blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "approved_by",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.SET_NULL,
                        null=True,
                        blank=True,
                        related_name="stock_adjustments_approved",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "created_by",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.SET_NULL,
                        null=True,
                        blank=True,
                        related_name="stock_adjustments_created",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "warehouse",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="stock_adjustments",
                        to="inventory.warehouse",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(
                        fields=["warehouse", "status"], name="stock_adj_wh_status_idx"
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="StockAdjustmentItem",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        primary_key=True, default=uuid.uuid4, editable=False, serialize=False
                    ),
                ),
                ("quantity_before", models.IntegerField()),
                ("quantity_after", models.IntegerField()),
                ("quantity_change", models.IntegerField(default=0)),
                ("notes", models.CharField(max_length=255, blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "adjustment",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="items",
                        to="inventory.stockadjustment",
                    ),
                ),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="stock_adjustment_items",
                        to="products.product",
                    ),
                ),
            ],
            options={
                "ordering": ["created_at"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("quantity_before__gte", 0)),
                        name="chk_stock_adj_item_before_gte_zero",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("quantity_after__gte", 0)),
                        name="chk_stock_adj_item_after_gte_zero",
                    ),
                ],
            },
        ),
        # ---------------------------------------------------------
        # StockTransfer + items
        # ---------------------------------------------------------
        migrations.CreateModel(
            name="StockTransfer",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        primary_key=True, default=uuid.uuid4, editable=False, serialize=False
                    ),
                ),
                (
                    "transfer_number",
                    models.CharField(max_length=32, unique=True, blank=True),
                ),
                (
                    "transfer_date",
                    models.DateField(default=django.utils.timezone.localdate),
                ),
                ("notes", models.TextField(blank=True, default="")),
                (
                    "status",
                    models.CharField(
                        max_length=20,
                        choices=[
                            ("pending", "Pending"),
                            ("in_transit", "In Transit"),
                            ("completed", "Completed"),
                            ("cancelled", "Cancelled"),
                        ],
                        default="pending",
                    ),
                ),
                ("processed_at", models.DateTimeField(null=True, blank=True)),
                ("completed_at", models.DateTimeField(null=True, blank=True)),
                ("cancelled_at", models.DateTimeField(null=True, blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "completed_by",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.SET_NULL,
                        null=True,
                        blank=True,
                        related_name="stock_transfers_completed",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "created_by",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.SET_NULL,
                        null=True,
                        blank=True,
                        related_name="stock_transfers_created",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "from_warehouse",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="outgoing_transfers",
                        to="inventory.warehouse",
                    ),
                ),
                (
                    "processed_by",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.SET_NULL,
                        null=True,
                        blank=True,
                        related_name="stock_transfers_processed",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "to_warehouse",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="incoming_transfers",
                        to="inventory.warehouse",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(
                        fields=["status", "created_at"], name="stock_tr_status_idx"
                    ),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(
                            ("from_warehouse", models.F("to_warehouse")), _negated=True
                        ),
                        name="chk_stock_transfer_distinct_warehouses",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="StockTransferItem",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        primary_key=True, default=uuid.uuid4, editable=False, serialize=False
                    ),
                ),
                (
                    "quantity",
                    models.PositiveIntegerField(help_text="Requested quantity"),
                ),
                (
                    "quantity_received",
                    models.PositiveIntegerField(
                        null=True,
                        blank=True,
                        help_text="Actual quantity received at destination (set on completion)",
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="stock_transfer_items",
                        to="products.product",
                    ),
                ),
                (
                    "transfer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="items",
                        to="inventory.stocktransfer",
                    ),
                ),
            ],
            options={
                "ordering": ["created_at"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("quantity__gt", 0)),
                        name="chk_stock_transfer_item_quantity_gt_zero",
                    ),
                ],
            },
        ),
    ]
