# invoices/api/serializers.py

from rest_framework import serializers

from invoices.models import Invoice, InvoiceItem


class InvoiceItemSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source="product.name", read_only=True, default=None)

    class Meta:
        model = InvoiceItem
        fields = ("id", "product", "product_name", "description", "quantity", "unit_price")
        read_only_fields = fields


class InvoiceSerializer(serializers.ModelSerializer):
    items = InvoiceItemSerializer(many=True, read_only=True)

    class Meta:
        model = Invoice
        fields = (
            "id",
            "invoice_number",
            "customer_name",
            "status",
            "issue_date",
            "due_date",
            "subtotal_amount",
            "tax_amount",
            "total_amount",
            "reserved_warehouse",
            "reserved_at",
            "paid_at",
            "cancelled_at",
            "created_at",
            "items",
        )
        read_only_fields = fields


class InvoiceWarehouseSerializer(serializers.Serializer):
    """Body of reserve / release / process-payment, or query of the read-only checks."""

    warehouse_id = serializers.UUIDField()
