# invoices/tests/test_api.py

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from inventory.tests.helpers import (
    ledger_row,
    make_product,
    make_user,
    make_warehouse,
    seed_stock,
)
from invoices.models import Invoice
from invoices.services.invoice_service import create_invoice


class InvoiceApiTests(APITestCase):
    def setUp(self):
        self.client.force_authenticate(user=make_user())
        self.warehouse = make_warehouse()
        self.product = make_product()
        seed_stock(self.product, self.warehouse, 5)
        self.invoice = create_invoice(lines=[{"product_id": self.product.id, "quantity": 2}])
        self.body = {"warehouse_id": str(self.warehouse.id)}

    def _post(self, name, body=None):
        return self.client.post(
            reverse(name, args=[self.invoice.id]), body or {}, format="json"
        )

    def test_requires_authentication(self):
        self.client.force_authenticate(user=None)

        res = self._post("invoice-reserve-inventory", self.body)

        self.assertEqual(res.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_availability_and_status(self):
        res = self.client.get(
            reverse("invoice-inventory-availability", args=[self.invoice.id]), self.body
        )
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertTrue(res.data["all_available"])

        res = self.client.get(
            reverse("invoice-inventory-status", args=[self.invoice.id]), self.body
        )
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertFalse(res.data["reserved_here"])

    def test_availability_requires_warehouse(self):
        res = self.client.get(reverse("invoice-inventory-availability", args=[self.invoice.id]))

        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

    def test_reserve_release_and_pay(self):
        res = self._post("invoice-reserve-inventory", self.body)
        self.assertEqual(res.status_code, status.HTTP_200_OK, res.data)
        self.assertEqual(ledger_row(self.product, self.warehouse).quantity_reserved, 2)

        res = self._post("invoice-release-inventory", self.body)
        self.assertEqual(res.status_code, status.HTTP_200_OK, res.data)
        self.assertEqual(ledger_row(self.product, self.warehouse).quantity_reserved, 0)

        res = self._post("invoice-process-payment", self.body)
        self.assertEqual(res.status_code, status.HTTP_200_OK, res.data)
        self.assertEqual(res.data["status"], Invoice.STATUS_PAID)
        self.assertEqual(ledger_row(self.product, self.warehouse).quantity_on_hand, 3)

    def test_paying_twice_is_conflict(self):
        self._post("invoice-process-payment", self.body)

        res = self._post("invoice-process-payment", self.body)

        self.assertEqual(res.status_code, status.HTTP_409_CONFLICT)
        self.assertIn("already paid", res.data["detail"])

    def test_insufficient_stock_is_400(self):
        self.invoice = create_invoice(lines=[{"product_id": self.product.id, "quantity": 9}])

        res = self._post("invoice-reserve-inventory", self.body)

        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

    def test_release_without_reservation_is_conflict(self):
        res = self._post("invoice-release-inventory", self.body)

        self.assertEqual(res.status_code, status.HTTP_409_CONFLICT)

    def test_unknown_invoice_is_404(self):
        res = self.client.post(
            reverse("invoice-cancel", args=["00000000-0000-0000-0000-000000000000"])
        )

        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)

    def test_cancel(self):
        res = self._post("invoice-cancel")

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["status"], Invoice.STATUS_CANCELLED)
