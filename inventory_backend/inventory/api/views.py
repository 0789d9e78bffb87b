# inventory/api/views.py

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from inventory.api.errors import HANDLED_ERRORS, service_error_response
from inventory.api.serializers import (
    AdjustQuantitySerializer,
    InventoryItemSerializer,
    LowStockQuerySerializer,
    MovementReportQuerySerializer,
    StockAdjustmentApproveSerializer,
    StockAdjustmentCreateSerializer,
    StockAdjustmentSerializer,
    StockMovementSerializer,
    StockTransferCompleteSerializer,
    StockTransferCreateSerializer,
    StockTransferSerializer,
    WarehouseQuerySerializer,
)
from inventory.services import reports
from inventory.services.movements import adjust_inventory_quantity
from inventory.services.stock_adjustments import (
    approve_stock_adjustment,
    cancel_stock_adjustment,
    create_stock_adjustment,
)
from inventory.services.stock_transfers import (
    cancel_stock_transfer,
    complete_stock_transfer,
    create_stock_transfer,
    process_stock_transfer,
)


# ======================================================
# MANUAL ADJUSTMENT + REPORTS
# ======================================================


class AdjustQuantityView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = AdjustQuantitySerializer

    @extend_schema(tags=["inventory"], request=AdjustQuantitySerializer)
    def post(self, request):
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        try:
            posted = adjust_inventory_quantity(
                product_id=data["product_id"],
                warehouse_id=data["warehouse_id"],
                quantity_change=data["quantity_change"],
                notes=data.get("notes", ""),
                user=request.user,
            )
        except HANDLED_ERRORS as exc:
            return service_error_response(exc)

        return Response(
            {
                "inventory_item": InventoryItemSerializer(posted.item).data,
                "movement": StockMovementSerializer(posted.movement).data,
            },
            status=status.HTTP_200_OK,
        )


class LowStockView(GenericAPIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        tags=["inventory"],
        parameters=[OpenApiParameter("limit", int, required=False)],
    )
    def get(self, request):
        q = LowStockQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)
        items = reports.low_stock_items(limit=q.validated_data.get("limit"))
        return Response({"count": len(items), "results": items}, status=status.HTTP_200_OK)


class InventoryValuationView(GenericAPIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        tags=["inventory"],
        parameters=[OpenApiParameter("warehouse_id", str, required=False)],
    )
    def get(self, request):
        q = WarehouseQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)
        result = reports.inventory_valuation(
            warehouse_id=q.validated_data.get("warehouse_id")
        )
        return Response(result, status=status.HTTP_200_OK)


class InventoryStatsView(GenericAPIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(tags=["inventory"])
    def get(self, request):
        return Response(reports.inventory_stats(), status=status.HTTP_200_OK)


class StockMovementReportView(GenericAPIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        tags=["inventory"],
        parameters=[
            OpenApiParameter("product_id", str, required=False),
            OpenApiParameter("warehouse_id", str, required=False),
            OpenApiParameter("movement_type", str, required=False),
            OpenApiParameter("start_date", str, required=False),
            OpenApiParameter("end_date", str, required=False),
            OpenApiParameter("limit", int, required=False),
        ],
    )
    def get(self, request):
        q = MovementReportQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)
        result = reports.stock_movement_report(**q.validated_data)
        return Response(result, status=status.HTTP_200_OK)


class ProductStockView(GenericAPIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(tags=["inventory"])
    def get(self, request, product_id):
        try:
            result = reports.product_stock(product_id=product_id)
        except HANDLED_ERRORS as exc:
            return service_error_response(exc)

        return Response(result, status=status.HTTP_200_OK)


class ProductWarehouseStockView(GenericAPIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(tags=["inventory"])
    def get(self, request, product_id, warehouse_id):
        try:
            result = reports.product_warehouse_stock(
                product_id=product_id, warehouse_id=warehouse_id
            )
        except HANDLED_ERRORS as exc:
            return service_error_response(exc)

        return Response(result, status=status.HTTP_200_OK)


# ======================================================
# STOCK ADJUSTMENTS
# ======================================================


class StockAdjustmentCreateView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = StockAdjustmentCreateSerializer

    @extend_schema(
        tags=["inventory"],
        request=StockAdjustmentCreateSerializer,
        responses={201: StockAdjustmentSerializer},
    )
    def post(self, request):
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        try:
            adjustment = create_stock_adjustment(
                warehouse_id=data["warehouse_id"],
                lines=data["items"],
                reason=data.get("reason", ""),
                notes=data.get("notes", ""),
                user=request.user,
            )
        except HANDLED_ERRORS as exc:
            return service_error_response(exc)

        return Response(
            StockAdjustmentSerializer(adjustment).data, status=status.HTTP_201_CREATED
        )


class StockAdjustmentApproveView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = StockAdjustmentApproveSerializer

    @extend_schema(
        tags=["inventory"],
        request=StockAdjustmentApproveSerializer,
        responses={200: StockAdjustmentSerializer},
    )
    def post(self, request, adjustment_id):
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            adjustment = approve_stock_adjustment(
                adjustment_id=adjustment_id,
                warehouse_id=s.validated_data.get("warehouse_id"),
                user=request.user,
            )
        except HANDLED_ERRORS as exc:
            return service_error_response(exc)

        return Response(StockAdjustmentSerializer(adjustment).data, status=status.HTTP_200_OK)


class StockAdjustmentCancelView(GenericAPIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(tags=["inventory"], request=None, responses={200: StockAdjustmentSerializer})
    def post(self, request, adjustment_id):
        try:
            adjustment = cancel_stock_adjustment(
                adjustment_id=adjustment_id, user=request.user
            )
        except HANDLED_ERRORS as exc:
            return service_error_response(exc)

        return Response(StockAdjustmentSerializer(adjustment).data, status=status.HTTP_200_OK)


# ======================================================
# STOCK TRANSFERS
# ======================================================


class StockTransferCreateView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = StockTransferCreateSerializer

    @extend_schema(
        tags=["inventory"],
        request=StockTransferCreateSerializer,
        responses={201: StockTransferSerializer},
    )
    def post(self, request):
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        try:
            transfer = create_stock_transfer(
                from_warehouse_id=data["from_warehouse_id"],
                to_warehouse_id=data["to_warehouse_id"],
                lines=data["items"],
                notes=data.get("notes", ""),
                user=request.user,
            )
        except HANDLED_ERRORS as exc:
            return service_error_response(exc)

        return Response(StockTransferSerializer(transfer).data, status=status.HTTP_201_CREATED)


class StockTransferProcessView(GenericAPIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(tags=["inventory"], request=None, responses={200: StockTransferSerializer})
    def post(self, request, transfer_id):
        try:
            transfer = process_stock_transfer(transfer_id=transfer_id, user=request.user)
        except HANDLED_ERRORS as exc:
            return service_error_response(exc)

        return Response(StockTransferSerializer(transfer).data, status=status.HTTP_200_OK)


class StockTransferCompleteView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = StockTransferCompleteSerializer

    @extend_schema(
        tags=["inventory"],
        request=StockTransferCompleteSerializer,
        responses={200: StockTransferSerializer},
    )
    def post(self, request, transfer_id):
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            transfer = complete_stock_transfer(
                transfer_id=transfer_id,
                received_lines=s.validated_data.get("items"),
                user=request.user,
            )
        except HANDLED_ERRORS as exc:
            return service_error_response(exc)

        return Response(StockTransferSerializer(transfer).data, status=status.HTTP_200_OK)


class StockTransferCancelView(GenericAPIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(tags=["inventory"], request=None, responses={200: StockTransferSerializer})
    def post(self, request, transfer_id):
        try:
            transfer = cancel_stock_transfer(transfer_id=transfer_id, user=request.user)
        except HANDLED_ERRORS as exc:
            return service_error_response(exc)

        return Response(StockTransferSerializer(transfer).data, status=status.HTTP_200_OK)
