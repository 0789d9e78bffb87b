# inventory/services/reports.py

"""
======================================================
PATH: inventory/services/reports.py
======================================================
INVENTORY REPORTS (READ-ONLY)

- low_stock_items(): ledger rows at or below the product reorder level
- inventory_valuation(): on-hand x product cost price
- inventory_stats(): dashboard counters
- stock_movement_report(): filtered movement log with a per-type summary
- product_stock() / product_warehouse_stock(): ledger lookups for one product
- verify_ledger(): consistency check of every ledger row against the movement log
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from django.conf import settings
from django.db.models import Count, DecimalField, ExpressionWrapper, F, Sum, Value
from django.db.models.functions import Abs, Coalesce

from inventory.models import InventoryItem, StockMovement, Warehouse
from inventory.services import ledger
from inventory.services.exceptions import NotFoundError
from products.models import Product

ZERO = Decimal("0.00")


def _line_value():
    return ExpressionWrapper(
        F("quantity_on_hand") * F("product__cost_price"),
        output_field=DecimalField(max_digits=18, decimal_places=2),
    )


def _low_stock_queryset():
    return InventoryItem.objects.filter(
        product__is_active=True,
        product__reorder_level__gt=0,
        quantity_available__lte=F("product__reorder_level"),
    )


def low_stock_items(*, limit: int | None = None) -> list[dict]:
    limit = int(limit or getattr(settings, "INVENTORY_LOW_STOCK_DEFAULT_LIMIT", 100))

    rows = (
        _low_stock_queryset()
        .select_related("product", "warehouse")
        .order_by("quantity_available", "product__name")[:limit]
    )

    return [
        {
            "inventory_item_id": str(row.id),
            "product_id": str(row.product_id),
            "product_name": row.product.name,
            "sku": row.product.sku,
            "warehouse_id": str(row.warehouse_id),
            "warehouse_name": row.warehouse.name,
            "quantity_on_hand": row.quantity_on_hand,
            "quantity_reserved": row.quantity_reserved,
            "quantity_available": row.quantity_available,
            "reorder_level": row.product.reorder_level,
            "reorder_quantity": row.product.reorder_quantity,
        }
        for row in rows
    ]


def inventory_valuation(*, warehouse_id=None) -> dict:
    qs = InventoryItem.objects.select_related("product", "warehouse")
    if warehouse_id is not None:
        qs = qs.filter(warehouse_id=warehouse_id)

    qs = qs.annotate(total_value=_line_value()).order_by("warehouse__name", "product__name")

    items = []
    total_value = ZERO
    total_units = 0
    for row in qs:
        value = row.total_value if row.total_value is not None else ZERO
        total_value += value
        total_units += int(row.quantity_on_hand)
        items.append(
            {
                "product_id": str(row.product_id),
                "product_name": row.product.name,
                "sku": row.product.sku,
                "warehouse_id": str(row.warehouse_id),
                "warehouse_name": row.warehouse.name,
                "quantity_on_hand": row.quantity_on_hand,
                "cost_price": row.product.cost_price,
                "total_value": value,
            }
        )

    return {
        "warehouse_id": str(warehouse_id) if warehouse_id is not None else None,
        "items": items,
        "total_units": total_units,
        "total_value": total_value,
    }


def inventory_stats() -> dict:
    total_value = InventoryItem.objects.aggregate(
        v=Coalesce(
            Sum(_line_value()),
            Value(ZERO),
            output_field=DecimalField(max_digits=18, decimal_places=2),
        )
    )["v"]

    return {
        "total_products": Product.objects.filter(is_active=True).count(),
        "total_warehouses": Warehouse.objects.filter(is_active=True).count(),
        "low_stock_products": _low_stock_queryset().values("product_id").distinct().count(),
        "total_inventory_value": total_value,
    }


# ============================================================
# STOCK MOVEMENT REPORT
# ============================================================


def stock_movement_report(
    *,
    product_id=None,
    warehouse_id=None,
    movement_type: str | None = None,
    start_date=None,
    end_date=None,
    limit: int | None = None,
) -> dict:
    """
    Movement log filtered by product / warehouse / type / movement date (inclusive).

    The summary covers every matching movement; the listing is capped at limit,
    newest first. total_value = sum(|quantity| x unit_cost) over costed movements.
    """
    limit = int(limit or getattr(settings, "INVENTORY_MOVEMENT_REPORT_DEFAULT_LIMIT", 500))

    qs = StockMovement.objects.all()
    if product_id is not None:
        qs = qs.filter(product_id=product_id)
    if warehouse_id is not None:
        qs = qs.filter(warehouse_id=warehouse_id)
    if movement_type:
        qs = qs.filter(movement_type=movement_type)
    if start_date is not None:
        qs = qs.filter(movement_date__date__gte=start_date)
    if end_date is not None:
        qs = qs.filter(movement_date__date__lte=end_date)

    by_type = {
        r["movement_type"]: r["count"]
        for r in qs.order_by().values("movement_type").annotate(count=Count("id"))
    }
    total_value = qs.aggregate(
        v=Coalesce(
            Sum(
                ExpressionWrapper(
                    Abs(F("quantity")) * F("unit_cost"),
                    output_field=DecimalField(max_digits=18, decimal_places=2),
                )
            ),
            Value(ZERO),
            output_field=DecimalField(max_digits=18, decimal_places=2),
        )
    )["v"]

    rows = qs.select_related("product", "warehouse").order_by("-movement_date", "-created_at")[:limit]

    return {
        "movements": [
            {
                "id": str(m.id),
                "product_id": str(m.product_id),
                "product_name": m.product.name,
                "sku": m.product.sku,
                "warehouse_id": str(m.warehouse_id),
                "warehouse_name": m.warehouse.name,
                "movement_type": m.movement_type,
                "reference_type": m.reference_type,
                "reference_id": str(m.reference_id) if m.reference_id else None,
                "quantity": m.quantity,
                "unit_cost": m.unit_cost,
                "total_cost": m.total_cost,
                "notes": m.notes,
                "movement_date": m.movement_date,
            }
            for m in rows
        ],
        "summary": {
            "total_movements": sum(by_type.values()),
            "by_type": by_type,
            "total_value": total_value,
        },
    }


# ============================================================
# PRODUCT STOCK LOOKUPS
# ============================================================


def _stock_row(row: InventoryItem) -> dict:
    return {
        "inventory_item_id": str(row.id),
        "warehouse_id": str(row.warehouse_id),
        "warehouse_name": row.warehouse.name,
        "quantity_on_hand": row.quantity_on_hand,
        "quantity_reserved": row.quantity_reserved,
        "quantity_available": row.quantity_available,
        "last_stock_date": row.last_stock_date,
    }


def product_stock(*, product_id) -> dict:
    """Ledger rows of one product across every warehouse, with totals."""
    product = Product.objects.filter(pk=product_id).first()
    if product is None:
        raise NotFoundError(f"Product {product_id} not found")

    rows = [
        _stock_row(row)
        for row in InventoryItem.objects.filter(product_id=product_id)
        .select_related("warehouse")
        .order_by("warehouse__name")
    ]

    return {
        "product_id": str(product.id),
        "product_name": product.name,
        "sku": product.sku,
        "warehouses": rows,
        "total_on_hand": sum(r["quantity_on_hand"] for r in rows),
        "total_reserved": sum(r["quantity_reserved"] for r in rows),
        "total_available": sum(r["quantity_available"] for r in rows),
    }


def product_warehouse_stock(*, product_id, warehouse_id) -> dict:
    row = ledger.get_item(product_id=product_id, warehouse_id=warehouse_id)
    if row is None:
        raise NotFoundError(
            f"No inventory for product={product_id} in warehouse={warehouse_id}"
        )

    return {
        "product_id": str(row.product_id),
        "product_name": row.product.name,
        "sku": row.product.sku,
        **_stock_row(row),
    }


# ============================================================
# LEDGER VERIFICATION
# ============================================================


@dataclass(frozen=True)
class LedgerDiscrepancy:
    product_id: str
    warehouse_id: str
    kind: str
    expected: int
    actual: int

    def describe(self) -> str:
        return (
            f"[{self.kind}] product={self.product_id} warehouse={self.warehouse_id} "
            f"expected={self.expected} actual={self.actual}"
        )


def verify_ledger() -> list[LedgerDiscrepancy]:
    """
    Check every ledger row:
    - available == on_hand - reserved
    - on_hand == sum of movement quantities for the pair
    Movements for a pair with no ledger row are reported too.
    """
    sums = {
        (str(r["product_id"]), str(r["warehouse_id"])): int(r["total"] or 0)
        for r in StockMovement.objects.values("product_id", "warehouse_id").annotate(
            total=Sum("quantity")
        )
    }

    problems: list[LedgerDiscrepancy] = []
    seen = set()

    for row in InventoryItem.objects.order_by("warehouse_id", "product_id"):
        key = (str(row.product_id), str(row.warehouse_id))
        seen.add(key)

        expected_available = int(row.quantity_on_hand) - int(row.quantity_reserved)
        if int(row.quantity_available) != expected_available:
            problems.append(
                LedgerDiscrepancy(
                    product_id=key[0],
                    warehouse_id=key[1],
                    kind="available",
                    expected=expected_available,
                    actual=int(row.quantity_available),
                )
            )

        movement_total = sums.get(key, 0)
        if int(row.quantity_on_hand) != movement_total:
            problems.append(
                LedgerDiscrepancy(
                    product_id=key[0],
                    warehouse_id=key[1],
                    kind="movements",
                    expected=movement_total,
                    actual=int(row.quantity_on_hand),
                )
            )

    for key, total in sorted(sums.items()):
        if key not in seen and total != 0:
            problems.append(
                LedgerDiscrepancy(
                    product_id=key[0],
                    warehouse_id=key[1],
                    kind="orphan_movements",
                    expected=total,
                    actual=0,
                )
            )

    return problems
