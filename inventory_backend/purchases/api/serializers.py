# purchases/api/serializers.py

from rest_framework import serializers

from purchases.models import PurchaseOrder


class PurchaseOrderItemCreateSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    quantity_ordered = serializers.IntegerField(min_value=1)
    unit_cost = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=0)


class PurchaseOrderCreateSerializer(serializers.Serializer):
    vendor_id = serializers.UUIDField()
    order_date = serializers.DateField(required=False)
    expected_date = serializers.DateField(required=False, allow_null=True)
    tax_amount = serializers.DecimalField(
        max_digits=14, decimal_places=2, min_value=0, required=False, default=0
    )
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    items = PurchaseOrderItemCreateSerializer(many=True, allow_empty=False)


class PurchaseOrderSerializer(serializers.ModelSerializer):
    vendor_name = serializers.CharField(source="vendor.name", read_only=True)
    items = serializers.SerializerMethodField()

    class Meta:
        model = PurchaseOrder
        fields = (
            "id",
            "po_number",
            "vendor",
            "vendor_name",
            "status",
            "order_date",
            "expected_date",
            "received_date",
            "subtotal_amount",
            "tax_amount",
            "total_amount",
            "notes",
            "created_at",
            "items",
        )
        read_only_fields = fields

    def get_items(self, obj):
        qs = obj.items.select_related("product").all()
        return [
            {
                "id": str(it.id),
                "product_id": str(it.product_id),
                "product_name": getattr(it.product, "name", ""),
                "quantity_ordered": it.quantity_ordered,
                "quantity_received": it.quantity_received,
                "unit_cost": str(it.unit_cost),
                "line_total": str(it.line_total),
            }
            for it in qs
        ]


class ReceivedItemSerializer(serializers.Serializer):
    item_id = serializers.UUIDField()
    quantity_received = serializers.IntegerField(min_value=1)


class ReceivePurchaseOrderSerializer(serializers.Serializer):
    warehouse_id = serializers.UUIDField()
    items = ReceivedItemSerializer(many=True, allow_empty=False)
