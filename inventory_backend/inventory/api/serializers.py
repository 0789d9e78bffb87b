# inventory/api/serializers.py

from rest_framework import serializers

from inventory.models import (
    InventoryItem,
    StockAdjustment,
    StockAdjustmentItem,
    StockMovement,
    StockTransfer,
    StockTransferItem,
)


# ======================================================
# READ SERIALIZERS
# ======================================================


class InventoryItemSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source="product.name", read_only=True)
    warehouse_name = serializers.CharField(source="warehouse.name", read_only=True)

    class Meta:
        model = InventoryItem
        fields = (
            "id",
            "product",
            "product_name",
            "warehouse",
            "warehouse_name",
            "quantity_on_hand",
            "quantity_reserved",
            "quantity_available",
            "last_stock_date",
        )
        read_only_fields = fields


class StockMovementSerializer(serializers.ModelSerializer):
    total_cost = serializers.DecimalField(max_digits=18, decimal_places=2, read_only=True)

    class Meta:
        model = StockMovement
        fields = (
            "id",
            "product",
            "warehouse",
            "movement_type",
            "reference_type",
            "reference_id",
            "quantity",
            "unit_cost",
            "total_cost",
            "notes",
            "movement_date",
        )
        read_only_fields = fields


class StockAdjustmentItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = StockAdjustmentItem
        fields = (
            "id",
            "product",
            "quantity_before",
            "quantity_after",
            "quantity_change",
            "notes",
        )
        read_only_fields = fields


class StockAdjustmentSerializer(serializers.ModelSerializer):
    items = StockAdjustmentItemSerializer(many=True, read_only=True)

    class Meta:
        model = StockAdjustment
        fields = (
            "id",
            "adjustment_number",
            "warehouse",
            "adjustment_date",
            "reason",
            "notes",
            "status",
            "created_by",
            "approved_by",
            "approved_at",
            "cancelled_at",
            "created_at",
            "items",
        )
        read_only_fields = fields


class StockTransferItemSerializer(serializers.ModelSerializer):
    variance = serializers.IntegerField(read_only=True, allow_null=True)

    class Meta:
        model = StockTransferItem
        fields = ("id", "product", "quantity", "quantity_received", "variance")
        read_only_fields = fields


class StockTransferSerializer(serializers.ModelSerializer):
    items = StockTransferItemSerializer(many=True, read_only=True)

    class Meta:
        model = StockTransfer
        fields = (
            "id",
            "transfer_number",
            "from_warehouse",
            "to_warehouse",
            "transfer_date",
            "notes",
            "status",
            "created_by",
            "processed_by",
            "processed_at",
            "completed_by",
            "completed_at",
            "cancelled_at",
            "created_at",
            "items",
        )
        read_only_fields = fields


# ======================================================
# COMMAND SERIALIZERS (typed input boundary)
# ======================================================


class AdjustQuantitySerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    warehouse_id = serializers.UUIDField()
    quantity_change = serializers.IntegerField()
    notes = serializers.CharField(required=False, allow_blank=True, default="", max_length=255)

    def validate_quantity_change(self, value):
        if value == 0:
            raise serializers.ValidationError("quantity_change cannot be 0")
        return value


class StockAdjustmentLineSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    quantity_before = serializers.IntegerField(min_value=0)
    quantity_after = serializers.IntegerField(min_value=0)
    notes = serializers.CharField(required=False, allow_blank=True, default="", max_length=255)


class StockAdjustmentCreateSerializer(serializers.Serializer):
    warehouse_id = serializers.UUIDField()
    reason = serializers.CharField(required=False, allow_blank=True, default="", max_length=255)
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    items = StockAdjustmentLineSerializer(many=True, allow_empty=False)


class StockAdjustmentApproveSerializer(serializers.Serializer):
    warehouse_id = serializers.UUIDField(required=False, allow_null=True)


class StockTransferLineSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1)


class StockTransferCreateSerializer(serializers.Serializer):
    from_warehouse_id = serializers.UUIDField()
    to_warehouse_id = serializers.UUIDField()
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    items = StockTransferLineSerializer(many=True, allow_empty=False)

    def validate(self, attrs):
        if attrs["from_warehouse_id"] == attrs["to_warehouse_id"]:
            raise serializers.ValidationError(
                {"to_warehouse_id": "Source and destination warehouses must differ"}
            )
        return attrs


class StockTransferReceivedLineSerializer(serializers.Serializer):
    item_id = serializers.UUIDField()
    quantity_received = serializers.IntegerField(min_value=0)


class StockTransferCompleteSerializer(serializers.Serializer):
    items = StockTransferReceivedLineSerializer(many=True, required=False)


class WarehouseQuerySerializer(serializers.Serializer):
    warehouse_id = serializers.UUIDField(required=False)


class LowStockQuerySerializer(serializers.Serializer):
    limit = serializers.IntegerField(required=False, min_value=1, max_value=1000)


class MovementReportQuerySerializer(serializers.Serializer):
    product_id = serializers.UUIDField(required=False)
    warehouse_id = serializers.UUIDField(required=False)
    movement_type = serializers.ChoiceField(
        choices=StockMovement.MovementType.choices, required=False
    )
    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)
    limit = serializers.IntegerField(required=False, min_value=1, max_value=5000)

    def validate(self, attrs):
        start, end = attrs.get("start_date"), attrs.get("end_date")
        if start and end and start > end:
            raise serializers.ValidationError(
                {"end_date": "end_date cannot be before start_date"}
            )
        return attrs
