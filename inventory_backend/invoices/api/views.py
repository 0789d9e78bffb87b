# invoices/api/views.py

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from inventory.api.errors import HANDLED_ERRORS, service_error_response
from invoices.api.serializers import InvoiceSerializer, InvoiceWarehouseSerializer
from invoices.services.fulfillment_service import (
    cancel_invoice,
    check_inventory_availability,
    get_invoice_inventory_status,
    process_invoice_payment,
    release_inventory_for_invoice,
    reserve_inventory_for_invoice,
)

WAREHOUSE_PARAM = OpenApiParameter("warehouse_id", str, required=True)


# ======================================================
# READ-ONLY CHECKS
# ======================================================


class InvoiceAvailabilityView(GenericAPIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(tags=["invoices"], parameters=[WAREHOUSE_PARAM])
    def get(self, request, invoice_id):
        q = InvoiceWarehouseSerializer(data=request.query_params)
        q.is_valid(raise_exception=True)

        try:
            result = check_inventory_availability(
                invoice_id=invoice_id, warehouse_id=q.validated_data["warehouse_id"]
            )
        except HANDLED_ERRORS as exc:
            return service_error_response(exc)

        return Response(result, status=status.HTTP_200_OK)


class InvoiceInventoryStatusView(GenericAPIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(tags=["invoices"], parameters=[WAREHOUSE_PARAM])
    def get(self, request, invoice_id):
        q = InvoiceWarehouseSerializer(data=request.query_params)
        q.is_valid(raise_exception=True)

        try:
            result = get_invoice_inventory_status(
                invoice_id=invoice_id, warehouse_id=q.validated_data["warehouse_id"]
            )
        except HANDLED_ERRORS as exc:
            return service_error_response(exc)

        return Response(result, status=status.HTTP_200_OK)


# ======================================================
# LEDGER-MUTATING COMMANDS
# ======================================================


class InvoiceReserveView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = InvoiceWarehouseSerializer

    @extend_schema(
        tags=["invoices"],
        request=InvoiceWarehouseSerializer,
        responses={200: InvoiceSerializer},
    )
    def post(self, request, invoice_id):
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            invoice = reserve_inventory_for_invoice(
                invoice_id=invoice_id, warehouse_id=s.validated_data["warehouse_id"]
            )
        except HANDLED_ERRORS as exc:
            return service_error_response(exc)

        return Response(InvoiceSerializer(invoice).data, status=status.HTTP_200_OK)


class InvoiceReleaseView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = InvoiceWarehouseSerializer

    @extend_schema(
        tags=["invoices"],
        request=InvoiceWarehouseSerializer,
        responses={200: InvoiceSerializer},
    )
    def post(self, request, invoice_id):
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            invoice = release_inventory_for_invoice(
                invoice_id=invoice_id, warehouse_id=s.validated_data["warehouse_id"]
            )
        except HANDLED_ERRORS as exc:
            return service_error_response(exc)

        return Response(InvoiceSerializer(invoice).data, status=status.HTTP_200_OK)


class InvoicePaymentView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = InvoiceWarehouseSerializer

    @extend_schema(
        tags=["invoices"],
        request=InvoiceWarehouseSerializer,
        responses={200: InvoiceSerializer},
    )
    def post(self, request, invoice_id):
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            invoice = process_invoice_payment(
                invoice_id=invoice_id,
                warehouse_id=s.validated_data["warehouse_id"],
                user=request.user,
            )
        except HANDLED_ERRORS as exc:
            return service_error_response(exc)

        return Response(InvoiceSerializer(invoice).data, status=status.HTTP_200_OK)


class InvoiceCancelView(GenericAPIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(tags=["invoices"], request=None, responses={200: InvoiceSerializer})
    def post(self, request, invoice_id):
        try:
            invoice = cancel_invoice(invoice_id=invoice_id, user=request.user)
        except HANDLED_ERRORS as exc:
            return service_error_response(exc)

        return Response(InvoiceSerializer(invoice).data, status=status.HTTP_200_OK)
