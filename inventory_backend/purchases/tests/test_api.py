# purchases/tests/test_api.py

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from inventory.tests.helpers import ledger_row, make_product, make_user, make_warehouse
from purchases.models import PurchaseOrder, Vendor


class PurchaseOrderApiTests(APITestCase):
    def setUp(self):
        self.client.force_authenticate(user=make_user())
        self.vendor = Vendor.objects.create(name="Acme Supply")
        self.warehouse = make_warehouse()
        self.product = make_product()

    def _create(self):
        res = self.client.post(
            reverse("purchase-orders"),
            {
                "vendor_id": str(self.vendor.id),
                "tax_amount": "1.00",
                "items": [
                    {
                        "product_id": str(self.product.id),
                        "quantity_ordered": 5,
                        "unit_cost": "2.00",
                    }
                ],
            },
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_201_CREATED, res.data)
        return res.data

    def test_create_and_receive(self):
        order = self._create()
        self.assertEqual(order["total_amount"], "11.00")

        res = self.client.post(
            reverse("purchase-order-receive", args=[order["id"]]),
            {
                "warehouse_id": str(self.warehouse.id),
                "items": [{"item_id": order["items"][0]["id"], "quantity_received": 5}],
            },
            format="json",
        )

        self.assertEqual(res.status_code, status.HTTP_200_OK, res.data)
        self.assertEqual(res.data["status"], PurchaseOrder.STATUS_RECEIVED)
        self.assertEqual(ledger_row(self.product, self.warehouse).quantity_on_hand, 5)

    def test_receive_rejects_zero_quantity(self):
        order = self._create()

        res = self.client.post(
            reverse("purchase-order-receive", args=[order["id"]]),
            {
                "warehouse_id": str(self.warehouse.id),
                "items": [{"item_id": order["items"][0]["id"], "quantity_received": 0}],
            },
            format="json",
        )

        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

    def test_receive_cancelled_order_is_conflict(self):
        order = self._create()
        res = self.client.post(reverse("purchase-order-cancel", args=[order["id"]]))
        self.assertEqual(res.status_code, status.HTTP_200_OK)

        res = self.client.post(
            reverse("purchase-order-receive", args=[order["id"]]),
            {
                "warehouse_id": str(self.warehouse.id),
                "items": [{"item_id": order["items"][0]["id"], "quantity_received": 1}],
            },
            format="json",
        )

        self.assertEqual(res.status_code, status.HTTP_409_CONFLICT)

    def test_unknown_order_is_404(self):
        res = self.client.post(
            reverse(
                "purchase-order-cancel",
                args=["00000000-0000-0000-0000-000000000000"],
            )
        )

        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)
