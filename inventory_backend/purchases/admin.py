# purchases/admin.py

from django.contrib import admin

from purchases.models import PurchaseOrder, PurchaseOrderItem, Vendor


@admin.register(Vendor)
class VendorAdmin(admin.ModelAdmin):
    list_display = ("name", "email", "phone", "is_active")
    search_fields = ("name", "email")
    list_filter = ("is_active",)


class PurchaseOrderItemInline(admin.TabularInline):
    model = PurchaseOrderItem
    extra = 0
    readonly_fields = ("quantity_received",)


@admin.register(PurchaseOrder)
class PurchaseOrderAdmin(admin.ModelAdmin):
    list_display = (
        "po_number",
        "vendor",
        "status",
        "order_date",
        "received_date",
        "total_amount",
    )
    readonly_fields = (
        "po_number",
        "subtotal_amount",
        "total_amount",
        "received_date",
        "created_at",
    )
    search_fields = ("po_number", "vendor__name")
    list_filter = ("status", "order_date")
    inlines = [PurchaseOrderItemInline]
