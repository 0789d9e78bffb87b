# inventory/admin.py

from django.contrib import admin

from inventory.models import (
    InventoryItem,
    StockAdjustment,
    StockAdjustmentItem,
    StockMovement,
    StockTransfer,
    StockTransferItem,
    Warehouse,
)


# ======================================================
# WAREHOUSE ADMIN
# ======================================================


@admin.register(Warehouse)
class WarehouseAdmin(admin.ModelAdmin):
    list_display = ("name", "code", "is_active", "created_at")
    search_fields = ("name", "code")
    list_filter = ("is_active",)


# ======================================================
# LEDGER ADMIN (quantities are service-managed)
# ======================================================


@admin.register(InventoryItem)
class InventoryItemAdmin(admin.ModelAdmin):
    list_display = (
        "product",
        "warehouse",
        "quantity_on_hand",
        "quantity_reserved",
        "quantity_available",
        "last_stock_date",
    )
    readonly_fields = (
        "product",
        "warehouse",
        "quantity_on_hand",
        "quantity_reserved",
        "quantity_available",
        "last_stock_date",
        "created_at",
        "updated_at",
    )
    search_fields = ("product__name", "product__sku", "warehouse__name")
    list_filter = ("warehouse",)

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(StockMovement)
class StockMovementAdmin(admin.ModelAdmin):
    list_display = (
        "movement_date",
        "product",
        "warehouse",
        "movement_type",
        "quantity",
        "reference_type",
        "reference_id",
    )
    list_filter = ("movement_type", "reference_type", "warehouse")
    search_fields = ("product__name", "product__sku", "notes")

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


# ======================================================
# DOCUMENTS
# ======================================================


class StockAdjustmentItemInline(admin.TabularInline):
    model = StockAdjustmentItem
    extra = 0
    readonly_fields = ("quantity_change",)


@admin.register(StockAdjustment)
class StockAdjustmentAdmin(admin.ModelAdmin):
    list_display = ("adjustment_number", "warehouse", "status", "adjustment_date", "approved_at")
    readonly_fields = ("adjustment_number", "status", "approved_by", "approved_at", "cancelled_at")
    search_fields = ("adjustment_number", "reason")
    list_filter = ("status", "warehouse")
    inlines = [StockAdjustmentItemInline]


class StockTransferItemInline(admin.TabularInline):
    model = StockTransferItem
    extra = 0
    readonly_fields = ("quantity_received",)


@admin.register(StockTransfer)
class StockTransferAdmin(admin.ModelAdmin):
    list_display = (
        "transfer_number",
        "from_warehouse",
        "to_warehouse",
        "status",
        "transfer_date",
    )
    readonly_fields = (
        "transfer_number",
        "status",
        "processed_by",
        "processed_at",
        "completed_by",
        "completed_at",
        "cancelled_at",
    )
    search_fields = ("transfer_number",)
    list_filter = ("status",)
    inlines = [StockTransferItemInline]
