# inventory/tests/test_reports.py

from datetime import timedelta
from decimal import Decimal
from io import StringIO
from unittest import mock

from django.core.management import call_command
from django.core.management.base import CommandError
from django.db import IntegrityError
from django.test import TestCase
from django.utils import timezone

from inventory.models import InventoryItem, StockAdjustment, StockMovement
from inventory.services.exceptions import NotFoundError
from inventory.services.movements import post_stock_movement
from inventory.services.numbering import next_document_number
from inventory.services.reports import (
    inventory_stats,
    inventory_valuation,
    low_stock_items,
    product_stock,
    product_warehouse_stock,
    stock_movement_report,
    verify_ledger,
)
from inventory.tests.helpers import make_product, make_warehouse, seed_stock


class InventoryReportTests(TestCase):
    def setUp(self):
        self.main = make_warehouse(name="Main")
        self.branch = make_warehouse(name="Branch")
        self.low = make_product(sku="LOW-1", name="Low", cost_price="2.00", reorder_level=5)
        self.ok = make_product(sku="OK-1", name="Plenty", cost_price="1.50", reorder_level=5)
        self.untracked = make_product(sku="NT-1", name="Untracked", cost_price="4.00")

        seed_stock(self.low, self.main, 3)
        seed_stock(self.ok, self.main, 20)
        seed_stock(self.untracked, self.branch, 1)

    def test_low_stock_lists_rows_at_or_below_reorder_level(self):
        rows = low_stock_items()

        self.assertEqual([r["sku"] for r in rows], ["LOW-1"])
        self.assertEqual(rows[0]["quantity_available"], 3)
        self.assertEqual(rows[0]["reorder_level"], 5)

    def test_low_stock_ignores_inactive_products(self):
        self.low.is_active = False
        self.low.save()

        self.assertEqual(low_stock_items(), [])

    def test_valuation_multiplies_on_hand_by_cost(self):
        result = inventory_valuation()

        self.assertEqual(result["total_units"], 24)
        self.assertEqual(result["total_value"], Decimal("40.00"))

    def test_valuation_for_one_warehouse(self):
        result = inventory_valuation(warehouse_id=self.branch.id)

        self.assertEqual(len(result["items"]), 1)
        self.assertEqual(result["total_value"], Decimal("4.00"))

    def test_stats(self):
        stats = inventory_stats()

        self.assertEqual(stats["total_products"], 3)
        self.assertEqual(stats["total_warehouses"], 2)
        self.assertEqual(stats["low_stock_products"], 1)
        self.assertEqual(stats["total_inventory_value"], Decimal("40.00"))


class MovementReportTests(TestCase):
    """
    GUARANTEES:
    - filters narrow both the listing and the summary
    - total_value counts costed movements only, by absolute quantity
    """

    def setUp(self):
        self.main = make_warehouse(name="Main")
        self.branch = make_warehouse(name="Branch")
        self.widget = make_product(cost_price="2.50")
        self.gadget = make_product(sku="SKU-200", name="Gadget", cost_price="7.00")

        seed_stock(self.widget, self.main, 10)
        seed_stock(self.gadget, self.branch, 4)
        post_stock_movement(
            product_id=self.widget.id,
            warehouse_id=self.main.id,
            quantity=6,
            movement_type=StockMovement.MovementType.PURCHASE,
            unit_cost=Decimal("2.00"),
        )
        post_stock_movement(
            product_id=self.widget.id,
            warehouse_id=self.main.id,
            quantity=-3,
            movement_type=StockMovement.MovementType.SALE,
            unit_cost=Decimal("2.50"),
        )

    def test_unfiltered_summary(self):
        report = stock_movement_report()

        self.assertEqual(report["summary"]["total_movements"], 4)
        self.assertEqual(
            report["summary"]["by_type"],
            {"adjustment": 2, "purchase": 1, "sale": 1},
        )
        # 6 x 2.00 + 3 x 2.50; manual adjustments carry no cost
        self.assertEqual(report["summary"]["total_value"], Decimal("19.50"))
        self.assertEqual(len(report["movements"]), 4)

    def test_filters_by_product_warehouse_and_type(self):
        report = stock_movement_report(product_id=self.gadget.id)
        self.assertEqual([m["sku"] for m in report["movements"]], ["SKU-200"])

        report = stock_movement_report(warehouse_id=self.main.id, movement_type="sale")
        self.assertEqual(report["summary"]["by_type"], {"sale": 1})
        self.assertEqual(report["movements"][0]["quantity"], -3)
        self.assertEqual(report["movements"][0]["total_cost"], Decimal("7.50"))

    def test_date_bounds_are_inclusive(self):
        today = timezone.localdate()

        report = stock_movement_report(start_date=today, end_date=today)
        self.assertEqual(report["summary"]["total_movements"], 4)

        report = stock_movement_report(start_date=today + timedelta(days=1))
        self.assertEqual(report["summary"]["total_movements"], 0)
        self.assertEqual(report["summary"]["total_value"], Decimal("0.00"))

    def test_limit_caps_listing_not_summary(self):
        report = stock_movement_report(limit=1)

        self.assertEqual(len(report["movements"]), 1)
        self.assertEqual(report["movements"][0]["movement_type"], "sale")
        self.assertEqual(report["summary"]["total_movements"], 4)


class ProductStockLookupTests(TestCase):
    def setUp(self):
        self.main = make_warehouse(name="Main")
        self.branch = make_warehouse(name="Branch")
        self.product = make_product()
        seed_stock(self.product, self.main, 10)
        seed_stock(self.product, self.branch, 5)

    def test_product_stock_totals_every_warehouse(self):
        result = product_stock(product_id=self.product.id)

        self.assertEqual(
            [w["warehouse_name"] for w in result["warehouses"]], ["Branch", "Main"]
        )
        self.assertEqual(result["total_on_hand"], 15)
        self.assertEqual(result["total_available"], 15)
        self.assertEqual(result["total_reserved"], 0)

    def test_product_without_stock_has_empty_breakdown(self):
        other = make_product(sku="SKU-300", name="Spare")

        result = product_stock(product_id=other.id)

        self.assertEqual(result["warehouses"], [])
        self.assertEqual(result["total_on_hand"], 0)

    def test_unknown_product(self):
        with self.assertRaises(NotFoundError):
            product_stock(product_id="00000000-0000-0000-0000-000000000000")

    def test_single_warehouse_row(self):
        result = product_warehouse_stock(product_id=self.product.id, warehouse_id=self.branch.id)

        self.assertEqual(result["sku"], "SKU-100")
        self.assertEqual(result["warehouse_name"], "Branch")
        self.assertEqual(result["quantity_on_hand"], 5)

    def test_single_warehouse_row_missing(self):
        empty = make_warehouse(name="Empty")

        with self.assertRaises(NotFoundError):
            product_warehouse_stock(product_id=self.product.id, warehouse_id=empty.id)


class LedgerVerificationTests(TestCase):
    def setUp(self):
        self.warehouse = make_warehouse()
        self.product = make_product()
        seed_stock(self.product, self.warehouse, 5)

    def test_clean_ledger_has_no_discrepancies(self):
        self.assertEqual(verify_ledger(), [])

    def test_out_of_band_change_is_reported(self):
        # Bypass the services on purpose.
        InventoryItem.objects.filter(product=self.product).update(
            quantity_on_hand=9, quantity_available=9
        )

        problems = verify_ledger()

        self.assertEqual(len(problems), 1)
        self.assertEqual(problems[0].kind, "movements")
        self.assertEqual(problems[0].expected, 5)
        self.assertEqual(problems[0].actual, 9)

    def test_command_passes_on_clean_ledger(self):
        out = StringIO()

        call_command("verify_inventory_ledger", "--strict", stdout=out)

        self.assertIn("[OK]", out.getvalue())

    def test_command_strict_fails_on_discrepancy(self):
        InventoryItem.objects.filter(product=self.product).update(
            quantity_on_hand=9, quantity_available=9
        )

        with self.assertRaises(CommandError):
            call_command("verify_inventory_ledger", "--strict", stdout=StringIO(), stderr=StringIO())

    def test_command_without_strict_only_reports(self):
        InventoryItem.objects.filter(product=self.product).update(
            quantity_on_hand=9, quantity_available=9
        )
        err = StringIO()

        call_command("verify_inventory_ledger", stdout=StringIO(), stderr=err)

        self.assertIn("[FAIL]", err.getvalue())


class DocumentNumberingTests(TestCase):
    def test_first_number(self):
        self.assertEqual(
            next_document_number(StockAdjustment, field="adjustment_number", prefix="ADJ"),
            "ADJ-0001",
        )

    def test_numbers_grow_past_width(self):
        warehouse = make_warehouse()
        StockAdjustment.objects.create(warehouse=warehouse, adjustment_number="ADJ-9999")

        self.assertEqual(
            next_document_number(StockAdjustment, field="adjustment_number", prefix="ADJ"),
            "ADJ-10000",
        )

        StockAdjustment.objects.create(warehouse=warehouse, adjustment_number="ADJ-10000")
        self.assertEqual(
            next_document_number(StockAdjustment, field="adjustment_number", prefix="ADJ"),
            "ADJ-10001",
        )

    def test_number_taken_concurrently_is_redrawn(self):
        warehouse = make_warehouse()
        StockAdjustment.objects.create(warehouse=warehouse, adjustment_number="ADJ-0001")

        # Simulate a writer that read the maximum before ADJ-0001 committed.
        with mock.patch(
            "inventory.services.numbering.next_document_number",
            side_effect=["ADJ-0001", "ADJ-0002"],
        ):
            adjustment = StockAdjustment.objects.create(warehouse=warehouse)

        self.assertEqual(adjustment.adjustment_number, "ADJ-0002")
        self.assertEqual(StockAdjustment.objects.count(), 2)

    def test_number_collisions_give_up_after_attempts(self):
        warehouse = make_warehouse()
        StockAdjustment.objects.create(warehouse=warehouse, adjustment_number="ADJ-0001")

        with mock.patch(
            "inventory.services.numbering.next_document_number",
            return_value="ADJ-0001",
        ) as drawn:
            with self.assertRaises(IntegrityError):
                StockAdjustment.objects.create(warehouse=warehouse)

        self.assertEqual(drawn.call_count, 3)
        self.assertEqual(StockAdjustment.objects.count(), 1)
