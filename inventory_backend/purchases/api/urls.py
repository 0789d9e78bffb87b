# purchases/api/urls.py

from django.urls import path

from purchases.api.views import (
    PurchaseOrderCancelView,
    PurchaseOrderCreateView,
    PurchaseOrderReceiveView,
)

urlpatterns = [
    path("orders/", PurchaseOrderCreateView.as_view(), name="purchase-orders"),
    path(
        "orders/<uuid:purchase_order_id>/receive/",
        PurchaseOrderReceiveView.as_view(),
        name="purchase-order-receive",
    ),
    path(
        "orders/<uuid:purchase_order_id>/cancel/",
        PurchaseOrderCancelView.as_view(),
        name="purchase-order-cancel",
    ),
]
