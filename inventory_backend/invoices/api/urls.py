# invoices/api/urls.py

from django.urls import path

from invoices.api.views import (
    InvoiceAvailabilityView,
    InvoiceCancelView,
    InvoiceInventoryStatusView,
    InvoicePaymentView,
    InvoiceReleaseView,
    InvoiceReserveView,
)

urlpatterns = [
    path(
        "<uuid:invoice_id>/inventory-availability/",
        InvoiceAvailabilityView.as_view(),
        name="invoice-inventory-availability",
    ),
    path(
        "<uuid:invoice_id>/inventory-status/",
        InvoiceInventoryStatusView.as_view(),
        name="invoice-inventory-status",
    ),
    path(
        "<uuid:invoice_id>/reserve-inventory/",
        InvoiceReserveView.as_view(),
        name="invoice-reserve-inventory",
    ),
    path(
        "<uuid:invoice_id>/release-inventory/",
        InvoiceReleaseView.as_view(),
        name="invoice-release-inventory",
    ),
    path(
        "<uuid:invoice_id>/process-payment/",
        InvoicePaymentView.as_view(),
        name="invoice-process-payment",
    ),
    path("<uuid:invoice_id>/cancel/", InvoiceCancelView.as_view(), name="invoice-cancel"),
]
