# inventory/tests/test_api.py

from django.db import IntegrityError
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from inventory.api.errors import HANDLED_ERRORS, service_error_response
from inventory.models import StockAdjustment, StockTransfer
from inventory.tests.helpers import (
    ledger_row,
    make_product,
    make_user,
    make_warehouse,
    seed_stock,
)


class InventoryApiTests(APITestCase):
    """
    HTTP boundary tests.

    GUARANTEES:
    - every ledger endpoint requires authentication
    - malformed input is rejected before reaching the services
    - service errors map to 404 / 409 / 400 with {"detail": ...}
    """

    def setUp(self):
        self.user = make_user()
        self.client.force_authenticate(user=self.user)

        self.product = make_product()
        self.warehouse = make_warehouse(name="Main")
        self.other_warehouse = make_warehouse(name="Branch")
        seed_stock(self.product, self.warehouse, 10)

    def test_requires_authentication(self):
        self.client.force_authenticate(user=None)

        res = self.client.get(reverse("inventory-stats"))

        self.assertEqual(res.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_adjust_quantity(self):
        res = self.client.post(
            reverse("inventory-adjust-quantity"),
            {
                "product_id": str(self.product.id),
                "warehouse_id": str(self.warehouse.id),
                "quantity_change": -2,
                "notes": "breakage",
            },
            format="json",
        )

        self.assertEqual(res.status_code, status.HTTP_200_OK, res.data)
        self.assertEqual(res.data["inventory_item"]["quantity_on_hand"], 8)
        self.assertEqual(res.data["movement"]["quantity"], -2)
        self.assertEqual(res.data["movement"]["total_cost"], "0.00")

    def test_adjust_quantity_rejects_malformed_ids(self):
        res = self.client.post(
            reverse("inventory-adjust-quantity"),
            {"product_id": "nope", "warehouse_id": str(self.warehouse.id), "quantity_change": 1},
            format="json",
        )

        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

    def test_adjust_quantity_insufficient_stock_is_400(self):
        res = self.client.post(
            reverse("inventory-adjust-quantity"),
            {
                "product_id": str(self.product.id),
                "warehouse_id": str(self.warehouse.id),
                "quantity_change": -50,
            },
            format="json",
        )

        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("detail", res.data)

    def test_adjustment_create_approve_and_conflict(self):
        res = self.client.post(
            reverse("stock-adjustment-create"),
            {
                "warehouse_id": str(self.warehouse.id),
                "reason": "count",
                "items": [
                    {
                        "product_id": str(self.product.id),
                        "quantity_before": 10,
                        "quantity_after": 12,
                    }
                ],
            },
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_201_CREATED, res.data)
        adjustment_id = res.data["id"]
        self.assertEqual(res.data["items"][0]["quantity_change"], 2)

        url = reverse("stock-adjustment-approve", args=[adjustment_id])
        res = self.client.post(url, {}, format="json")
        self.assertEqual(res.status_code, status.HTTP_200_OK, res.data)
        self.assertEqual(res.data["status"], StockAdjustment.STATUS_APPROVED)
        self.assertEqual(ledger_row(self.product, self.warehouse).quantity_on_hand, 12)

        res = self.client.post(url, {}, format="json")
        self.assertEqual(res.status_code, status.HTTP_409_CONFLICT)

    def test_adjustment_rejects_negative_counts(self):
        res = self.client.post(
            reverse("stock-adjustment-create"),
            {
                "warehouse_id": str(self.warehouse.id),
                "items": [
                    {
                        "product_id": str(self.product.id),
                        "quantity_before": 10,
                        "quantity_after": -1,
                    }
                ],
            },
            format="json",
        )

        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

    def test_unknown_adjustment_is_404(self):
        res = self.client.post(
            reverse(
                "stock-adjustment-cancel",
                args=["00000000-0000-0000-0000-000000000000"],
            )
        )

        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)

    def test_transfer_round_trip(self):
        res = self.client.post(
            reverse("stock-transfer-create"),
            {
                "from_warehouse_id": str(self.warehouse.id),
                "to_warehouse_id": str(self.other_warehouse.id),
                "items": [{"product_id": str(self.product.id), "quantity": 3}],
            },
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_201_CREATED, res.data)
        transfer_id = res.data["id"]

        res = self.client.post(reverse("stock-transfer-process", args=[transfer_id]))
        self.assertEqual(res.status_code, status.HTTP_200_OK, res.data)
        self.assertEqual(res.data["status"], StockTransfer.STATUS_IN_TRANSIT)

        res = self.client.post(
            reverse("stock-transfer-complete", args=[transfer_id]), {}, format="json"
        )
        self.assertEqual(res.status_code, status.HTTP_200_OK, res.data)
        self.assertEqual(res.data["status"], StockTransfer.STATUS_COMPLETED)

        self.assertEqual(ledger_row(self.product, self.warehouse).quantity_on_hand, 7)
        self.assertEqual(ledger_row(self.product, self.other_warehouse).quantity_on_hand, 3)

        res = self.client.post(reverse("stock-transfer-cancel", args=[transfer_id]))
        self.assertEqual(res.status_code, status.HTTP_409_CONFLICT)

    def test_transfer_to_same_warehouse_is_400(self):
        res = self.client.post(
            reverse("stock-transfer-create"),
            {
                "from_warehouse_id": str(self.warehouse.id),
                "to_warehouse_id": str(self.warehouse.id),
                "items": [{"product_id": str(self.product.id), "quantity": 1}],
            },
            format="json",
        )

        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

    def test_reports(self):
        res = self.client.get(reverse("inventory-low-stock"), {"limit": 10})
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["count"], 0)

        res = self.client.get(
            reverse("inventory-valuation"), {"warehouse_id": str(self.warehouse.id)}
        )
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["total_units"], 10)

        res = self.client.get(reverse("inventory-stats"))
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["total_warehouses"], 2)

    def test_movement_report(self):
        res = self.client.get(
            reverse("inventory-movement-report"),
            {"warehouse_id": str(self.warehouse.id), "movement_type": "adjustment"},
        )

        self.assertEqual(res.status_code, status.HTTP_200_OK, res.data)
        self.assertEqual(res.data["summary"]["total_movements"], 1)
        self.assertEqual(res.data["movements"][0]["quantity"], 10)

    def test_movement_report_rejects_inverted_dates(self):
        res = self.client.get(
            reverse("inventory-movement-report"),
            {"start_date": "2024-02-01", "end_date": "2024-01-01"},
        )

        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("end_date", res.data)

    def test_product_stock_lookups(self):
        res = self.client.get(
            reverse("inventory-product-stock", kwargs={"product_id": self.product.id})
        )
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["total_on_hand"], 10)
        self.assertEqual(len(res.data["warehouses"]), 1)

        res = self.client.get(
            reverse(
                "inventory-product-warehouse-stock",
                kwargs={"product_id": self.product.id, "warehouse_id": self.warehouse.id},
            )
        )
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["quantity_available"], 10)

    def test_product_stock_lookups_404(self):
        res = self.client.get(
            reverse(
                "inventory-product-warehouse-stock",
                kwargs={
                    "product_id": self.product.id,
                    "warehouse_id": self.other_warehouse.id,
                },
            )
        )
        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)
        self.assertIn("detail", res.data)

        res = self.client.get(
            reverse(
                "inventory-product-stock",
                kwargs={"product_id": "00000000-0000-0000-0000-000000000000"},
            )
        )
        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)

    def test_constraint_conflict_maps_to_409(self):
        res = service_error_response(IntegrityError("UNIQUE constraint failed"))

        self.assertEqual(res.status_code, status.HTTP_409_CONFLICT)
        self.assertIn("detail", res.data)
        self.assertIn(IntegrityError, HANDLED_ERRORS)

    def test_health_check_is_public(self):
        self.client.force_authenticate(user=None)

        res = self.client.get(reverse("health-check"))

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["db"], "ok")
