# products/admin.py
"""
PATH: products/admin.py

Product master data. Stock levels are shown read-only; they change only
through the inventory services.
"""

from django.contrib import admin

from products.models import Product


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = (
        "sku",
        "name",
        "cost_price",
        "unit_price",
        "reorder_level",
        "total_on_hand",
        "is_active",
    )
    list_filter = ("is_active",)
    search_fields = ("sku", "name")
    readonly_fields = ("total_on_hand", "total_available", "created_at", "updated_at")
