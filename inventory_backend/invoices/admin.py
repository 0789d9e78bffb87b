# invoices/admin.py

from django.contrib import admin

from invoices.models import Invoice, InvoiceItem


class InvoiceItemInline(admin.TabularInline):
    model = InvoiceItem
    extra = 0


# ======================================================
# INVOICE ADMIN (reservation fields are service-managed)
# ======================================================


@admin.register(Invoice)
class InvoiceAdmin(admin.ModelAdmin):
    list_display = (
        "invoice_number",
        "customer_name",
        "status",
        "total_amount",
        "reserved_warehouse",
        "paid_at",
    )
    readonly_fields = (
        "invoice_number",
        "reserved_warehouse",
        "reserved_at",
        "paid_at",
        "cancelled_at",
        "created_at",
    )
    search_fields = ("invoice_number", "customer_name")
    list_filter = ("status", "issue_date")
    inlines = [InvoiceItemInline]
