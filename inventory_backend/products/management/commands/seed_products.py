from decimal import Decimal

from django.core.management.base import BaseCommand

from inventory.models import InventoryItem, Warehouse
from inventory.services.movements import adjust_inventory_quantity
from products.models import Product


class Command(BaseCommand):
    help = "Seed sample products, warehouses, and opening stock"

    def add_arguments(self, parser):
        parser.add_argument(
            "--quantity",
            type=int,
            default=40,
            help="Opening on-hand quantity per product in the main warehouse",
        )

    def handle(self, *args, **options):
        self.stdout.write(self.style.WARNING("Seeding products and stock..."))

        # -------------------------------
        # WAREHOUSES
        # -------------------------------
        warehouses = [
            ("MAIN", "Main Warehouse"),
            ("BR1", "Branch Store"),
        ]

        warehouse_objs = {}
        for code, name in warehouses:
            obj, _ = Warehouse.objects.get_or_create(code=code, defaults={"name": name})
            warehouse_objs[code] = obj

        # -------------------------------
        # PRODUCTS
        # -------------------------------
        products_data = [
            ("WID-100", "Widget", "2.50", "5.00", 10),
            ("GAD-200", "Gadget", "7.00", "12.00", 5),
            ("BOLT-M8", "M8 Bolt", "0.10", "0.25", 200),
            ("CBL-USB", "USB Cable", "1.20", "4.00", 20),
        ]

        product_objs = []

        for sku, name, cost, price, reorder in products_data:
            product, _ = Product.objects.get_or_create(
                sku=sku,
                defaults={
                    "name": name,
                    "cost_price": Decimal(cost),
                    "unit_price": Decimal(price),
                    "reorder_level": reorder,
                },
            )
            product_objs.append(product)

        # -------------------------------
        # OPENING STOCK (through the movement log)
        # -------------------------------
        main = warehouse_objs["MAIN"]
        seeded = 0
        for product in product_objs:
            if InventoryItem.objects.filter(product=product, warehouse=main).exists():
                continue
            adjust_inventory_quantity(
                product_id=product.id,
                warehouse_id=main.id,
                quantity_change=options["quantity"],
                notes="opening stock",
            )
            seeded += 1

        self.stdout.write(
            self.style.SUCCESS(
                f"Products and stock seeded successfully ({seeded} opening balances)."
            )
        )
