# products/tests/test_products.py

from decimal import Decimal
from io import StringIO

from django.core.exceptions import ValidationError
from django.core.management import call_command
from django.test import TestCase

from inventory.models import InventoryItem, StockMovement
from inventory.services.reports import verify_ledger
from inventory.tests.helpers import make_product, make_warehouse, seed_stock
from products.models import Product


class ProductModelTests(TestCase):
    """
    Product model tests.

    GUARANTEES:
    - SKU is required and normalized
    - Pricing is sane
    - Stock totals come from the ledger, never the product row
    """

    def test_sku_is_stripped(self):
        product = make_product(sku="  SKU-1  ")

        self.assertEqual(product.sku, "SKU-1")

    def test_blank_sku_is_rejected(self):
        with self.assertRaises(ValidationError):
            Product.objects.create(sku="   ", name="Nameless")

    def test_sku_must_be_unique(self):
        make_product(sku="DUP-1")

        with self.assertRaises(ValidationError):
            make_product(sku="DUP-1", name="Other")

    def test_negative_cost_is_rejected(self):
        with self.assertRaises(ValidationError):
            Product.objects.create(sku="NEG-1", name="Broken", cost_price=Decimal("-1.00"))

    def test_totals_sum_every_warehouse(self):
        product = make_product()
        seed_stock(product, make_warehouse(name="Main"), 4)
        seed_stock(product, make_warehouse(name="Branch"), 6)

        self.assertEqual(product.total_on_hand, 10)
        self.assertEqual(product.total_available, 10)

    def test_totals_without_stock(self):
        self.assertEqual(make_product().total_on_hand, 0)


class SeedProductsCommandTests(TestCase):
    def test_seed_posts_opening_stock_through_movements(self):
        call_command("seed_products", "--quantity", "12", stdout=StringIO())

        self.assertEqual(Product.objects.count(), 4)
        self.assertEqual(InventoryItem.objects.count(), 4)
        self.assertEqual(
            StockMovement.objects.filter(
                reference_type=StockMovement.ReferenceType.MANUAL
            ).count(),
            4,
        )
        self.assertEqual(verify_ledger(), [])

    def test_seed_is_idempotent(self):
        call_command("seed_products", stdout=StringIO())
        call_command("seed_products", stdout=StringIO())

        self.assertEqual(Product.objects.count(), 4)
        self.assertEqual(StockMovement.objects.count(), 4)
