# purchases/api/views.py

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from inventory.api.errors import HANDLED_ERRORS, service_error_response
from purchases.api.serializers import (
    PurchaseOrderCreateSerializer,
    PurchaseOrderSerializer,
    ReceivePurchaseOrderSerializer,
)
from purchases.services.receiving_service import (
    cancel_purchase_order,
    create_purchase_order,
    receive_purchase_order,
)


class PurchaseOrderCreateView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = PurchaseOrderCreateSerializer

    @extend_schema(
        tags=["purchases"],
        request=PurchaseOrderCreateSerializer,
        responses={201: PurchaseOrderSerializer},
    )
    def post(self, request):
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        try:
            order = create_purchase_order(
                vendor_id=data["vendor_id"],
                lines=data["items"],
                tax_amount=data.get("tax_amount"),
                order_date=data.get("order_date"),
                expected_date=data.get("expected_date"),
                notes=data.get("notes", ""),
                user=request.user,
            )
        except HANDLED_ERRORS as exc:
            return service_error_response(exc)

        return Response(PurchaseOrderSerializer(order).data, status=status.HTTP_201_CREATED)


class PurchaseOrderReceiveView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = ReceivePurchaseOrderSerializer

    @extend_schema(
        tags=["purchases"],
        request=ReceivePurchaseOrderSerializer,
        responses={200: PurchaseOrderSerializer},
    )
    def post(self, request, purchase_order_id):
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        try:
            order = receive_purchase_order(
                purchase_order_id=purchase_order_id,
                received_items=data["items"],
                warehouse_id=data["warehouse_id"],
                user=request.user,
            )
        except HANDLED_ERRORS as exc:
            return service_error_response(exc)

        return Response(PurchaseOrderSerializer(order).data, status=status.HTTP_200_OK)


class PurchaseOrderCancelView(GenericAPIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(tags=["purchases"], request=None, responses={200: PurchaseOrderSerializer})
    def post(self, request, purchase_order_id):
        try:
            order = cancel_purchase_order(
                purchase_order_id=purchase_order_id, user=request.user
            )
        except HANDLED_ERRORS as exc:
            return service_error_response(exc)

        return Response(PurchaseOrderSerializer(order).data, status=status.HTTP_200_OK)
