# inventory/api/urls.py

from django.urls import path

from inventory.api.views import (
    AdjustQuantityView,
    InventoryStatsView,
    InventoryValuationView,
    LowStockView,
    ProductStockView,
    ProductWarehouseStockView,
    StockAdjustmentApproveView,
    StockAdjustmentCancelView,
    StockAdjustmentCreateView,
    StockMovementReportView,
    StockTransferCancelView,
    StockTransferCompleteView,
    StockTransferCreateView,
    StockTransferProcessView,
)

urlpatterns = [
    path("adjust-quantity/", AdjustQuantityView.as_view(), name="inventory-adjust-quantity"),
    path("low-stock/", LowStockView.as_view(), name="inventory-low-stock"),
    path("valuation/", InventoryValuationView.as_view(), name="inventory-valuation"),
    path("stats/", InventoryStatsView.as_view(), name="inventory-stats"),
    path("movements/", StockMovementReportView.as_view(), name="inventory-movement-report"),
    path(
        "products/<uuid:product_id>/",
        ProductStockView.as_view(),
        name="inventory-product-stock",
    ),
    path(
        "products/<uuid:product_id>/warehouses/<uuid:warehouse_id>/",
        ProductWarehouseStockView.as_view(),
        name="inventory-product-warehouse-stock",
    ),
    path(
        "adjustments/",
        StockAdjustmentCreateView.as_view(),
        name="stock-adjustment-create",
    ),
    path(
        "adjustments/<uuid:adjustment_id>/approve/",
        StockAdjustmentApproveView.as_view(),
        name="stock-adjustment-approve",
    ),
    path(
        "adjustments/<uuid:adjustment_id>/cancel/",
        StockAdjustmentCancelView.as_view(),
        name="stock-adjustment-cancel",
    ),
    path("transfers/", StockTransferCreateView.as_view(), name="stock-transfer-create"),
    path(
        "transfers/<uuid:transfer_id>/process/",
        StockTransferProcessView.as_view(),
        name="stock-transfer-process",
    ),
    path(
        "transfers/<uuid:transfer_id>/complete/",
        StockTransferCompleteView.as_view(),
        name="stock-transfer-complete",
    ),
    path(
        "transfers/<uuid:transfer_id>/cancel/",
        StockTransferCancelView.as_view(),
        name="stock-transfer-cancel",
    ),
]
