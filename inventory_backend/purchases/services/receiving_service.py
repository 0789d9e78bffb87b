# purchases/services/receiving_service.py


"""
======================================================
PATH: purchases/services/receiving_service.py
======================================================
PURCHASE ORDER RECEIVING SERVICE

create_purchase_order():
- numbers the order (PO-NNNN) and computes totals server-side
  subtotal = sum(quantity_ordered * unit_cost), total = subtotal + tax

receive_purchase_order() (atomic):
1) Lock order
2) Validate status + received lines
3) Per delivered line: credit the warehouse ledger + PURCHASE movement
   carrying the line's unit_cost
4) Accumulate quantity_received, mark the order RECEIVED

Partial and repeated receipts are allowed. Receiving more than was ordered is
allowed but logged as a warning.

cancel_purchase_order():
- only while nothing has been received
"""

from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from inventory.models import StockMovement, Warehouse
from inventory.services import ledger
from inventory.services.exceptions import InvalidStateError, NotFoundError
from inventory.services.movements import post_stock_movement
from products.models import Product
from purchases.models import PurchaseOrder, PurchaseOrderItem, Vendor

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")


def _money(v) -> Decimal:
    return Decimal(str(v or "0.00")).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def _lock_order(purchase_order_id) -> PurchaseOrder:
    try:
        return PurchaseOrder.objects.select_for_update().get(pk=purchase_order_id)
    except PurchaseOrder.DoesNotExist as exc:
        raise NotFoundError(f"Purchase order {purchase_order_id} not found") from exc


@transaction.atomic
def create_purchase_order(
    *,
    vendor_id,
    lines,
    tax_amount=None,
    order_date=None,
    expected_date=None,
    notes: str = "",
    user=None,
) -> PurchaseOrder:
    """
    lines: iterable of {"product_id", "quantity_ordered", "unit_cost"}
    """
    lines = list(lines or [])
    if not lines:
        raise ValidationError({"items": "At least one purchase order line is required"})

    try:
        vendor = Vendor.objects.get(pk=vendor_id, is_active=True)
    except Vendor.DoesNotExist as exc:
        raise NotFoundError(f"Vendor {vendor_id} not found") from exc

    product_ids = {str(line["product_id"]) for line in lines}
    found = {
        str(pk) for pk in Product.objects.filter(pk__in=product_ids).values_list("pk", flat=True)
    }
    missing = product_ids - found
    if missing:
        raise NotFoundError(f"Products not found: {', '.join(sorted(missing))}")

    subtotal = Decimal("0.00")
    for line in lines:
        subtotal += Decimal(str(line["unit_cost"])) * int(line["quantity_ordered"])
    subtotal = _money(subtotal)
    tax = _money(tax_amount)

    order = PurchaseOrder(
        vendor=vendor,
        status=PurchaseOrder.STATUS_DRAFT,
        order_date=order_date or timezone.localdate(),
        expected_date=expected_date,
        subtotal_amount=subtotal,
        tax_amount=tax,
        total_amount=_money(subtotal + tax),
        notes=notes or "",
        created_by=user,
    )
    order.save()

    for line in lines:
        PurchaseOrderItem(
            purchase_order=order,
            product_id=line["product_id"],
            quantity_ordered=int(line["quantity_ordered"]),
            unit_cost=_money(line["unit_cost"]),
        ).save()

    logger.info(
        "Purchase order created",
        extra={
            "purchase_order_id": str(order.id),
            "po_number": order.po_number,
            "total_amount": str(order.total_amount),
        },
    )
    return order


@transaction.atomic
def receive_purchase_order(
    *,
    purchase_order_id,
    received_items,
    warehouse_id,
    user=None,
) -> PurchaseOrder:
    """
    RECEIVE PURCHASE ORDER (atomic)

    received_items: iterable of {"item_id", "quantity_received" (> 0)}
    """
    order = _lock_order(purchase_order_id)

    if order.status == PurchaseOrder.STATUS_CANCELLED:
        raise InvalidStateError(
            f"Purchase order {order.po_number} is cancelled and cannot be received"
        )

    if not Warehouse.objects.filter(pk=warehouse_id).exists():
        raise NotFoundError(f"Warehouse {warehouse_id} not found")

    received_items = list(received_items or [])
    if not received_items:
        raise ValidationError({"items": "At least one received line is required"})

    items = {str(it.id): it for it in order.items.select_for_update()}

    lines = []
    for line in received_items:
        key = str(line["item_id"])
        item = items.get(key)
        if item is None:
            raise NotFoundError(
                f"Item {key} does not belong to purchase order {order.po_number}"
            )
        qty = int(line["quantity_received"])
        if qty <= 0:
            raise ValidationError({"quantity_received": "quantity_received must be > 0"})
        lines.append((item, qty))

    ledger.lock_items(
        warehouse_id=warehouse_id,
        product_ids=[item.product_id for item, _ in lines],
    )

    for item, qty in lines:
        new_total = int(item.quantity_received or 0) + qty
        if new_total > int(item.quantity_ordered):
            logger.warning(
                "Purchase order line over-received",
                extra={
                    "purchase_order_id": str(order.id),
                    "item_id": str(item.id),
                    "quantity_ordered": item.quantity_ordered,
                    "quantity_received": new_total,
                },
            )

        item.quantity_received = new_total
        item.save()

        post_stock_movement(
            product_id=item.product_id,
            warehouse_id=warehouse_id,
            quantity=qty,
            movement_type=StockMovement.MovementType.PURCHASE,
            reference_type=StockMovement.ReferenceType.PURCHASE_ORDER,
            reference_id=order.id,
            unit_cost=item.unit_cost,
            notes=f"Received on {order.po_number}",
            user=user,
        )

    order.status = PurchaseOrder.STATUS_RECEIVED
    order.received_date = timezone.localdate()
    order.save()

    logger.info(
        "Purchase order received",
        extra={
            "purchase_order_id": str(order.id),
            "po_number": order.po_number,
            "warehouse_id": str(warehouse_id),
            "lines_received": len(lines),
        },
    )
    return order


@transaction.atomic
def cancel_purchase_order(*, purchase_order_id, user=None) -> PurchaseOrder:
    order = _lock_order(purchase_order_id)

    if order.status == PurchaseOrder.STATUS_CANCELLED:
        raise InvalidStateError(f"Purchase order {order.po_number} is already cancelled")

    if order.items.filter(quantity_received__gt=0).exists():
        raise InvalidStateError(
            f"Purchase order {order.po_number} has received stock and cannot be cancelled"
        )

    order.status = PurchaseOrder.STATUS_CANCELLED
    order.save()

    logger.info(
        "Purchase order cancelled",
        extra={
            "purchase_order_id": str(order.id),
            "po_number": order.po_number,
            "user_id": getattr(user, "pk", None),
        },
    )
    return order
