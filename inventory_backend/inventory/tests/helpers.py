# inventory/tests/helpers.py

"""
Shared fixtures for ledger tests.

Stock is always seeded through the movement recorder so the
movement log and the ledger agree from the first row.
"""

from decimal import Decimal

from django.contrib.auth import get_user_model

from inventory.models import InventoryItem, Warehouse
from inventory.services.movements import adjust_inventory_quantity
from products.models import Product

User = get_user_model()


def make_user(username="stock_clerk"):
    return User.objects.create_user(
        username=username,
        email=f"{username}@example.com",
        password="password123",
    )


def make_product(sku="SKU-100", name="Widget", cost_price="2.50", **extra):
    return Product.objects.create(
        sku=sku,
        name=name,
        cost_price=Decimal(cost_price),
        unit_price=Decimal(extra.pop("unit_price", "5.00")),
        **extra,
    )


def make_warehouse(name="Main", code=None):
    return Warehouse.objects.create(name=name, code=code)


def seed_stock(product, warehouse, quantity, user=None):
    return adjust_inventory_quantity(
        product_id=product.id,
        warehouse_id=warehouse.id,
        quantity_change=quantity,
        user=user,
        notes="opening stock",
    ).item


def ledger_row(product, warehouse):
    return InventoryItem.objects.get(product=product, warehouse=warehouse)
