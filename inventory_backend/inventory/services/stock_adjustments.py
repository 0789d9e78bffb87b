# inventory/services/stock_adjustments.py

"""
======================================================
PATH: inventory/services/stock_adjustments.py
======================================================
STOCK ADJUSTMENT WORKFLOW

draft -> approved   (ledger set to counted quantities, one movement per line)
draft -> cancelled  (no ledger effect)

Approval rules:
- header is locked; approving twice fails
- on_hand := quantity_after (absolute), available follows
- quantity_after below the reserved quantity is refused
- movement quantity == delta actually applied; when the ledger drifted away
  from quantity_before since the count, the drift is logged and the actual
  delta is recorded so movement sums keep matching on-hand
"""

from __future__ import annotations

import logging

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from inventory.models import StockAdjustment, StockAdjustmentItem, StockMovement, Warehouse
from inventory.services import ledger
from inventory.services.exceptions import (
    InsufficientStockError,
    InvalidStateError,
    NotFoundError,
)
from inventory.services.movements import record_movement
from products.models import Product

logger = logging.getLogger(__name__)


def _lock_adjustment(adjustment_id) -> StockAdjustment:
    try:
        return StockAdjustment.objects.select_for_update().get(pk=adjustment_id)
    except StockAdjustment.DoesNotExist as exc:
        raise NotFoundError(f"Stock adjustment {adjustment_id} not found") from exc


@transaction.atomic
def create_stock_adjustment(
    *,
    warehouse_id,
    lines,
    reason: str = "",
    notes: str = "",
    user=None,
) -> StockAdjustment:
    """
    lines: iterable of {"product_id", "quantity_before", "quantity_after", "notes"?}
    """
    lines = list(lines or [])
    if not lines:
        raise ValidationError({"items": "At least one adjustment line is required"})

    warehouse = Warehouse.objects.filter(pk=warehouse_id).first()
    if warehouse is None:
        raise NotFoundError(f"Warehouse {warehouse_id} not found")

    product_ids = {str(line["product_id"]) for line in lines}
    found = {
        str(pk) for pk in Product.objects.filter(pk__in=product_ids).values_list("pk", flat=True)
    }
    missing = product_ids - found
    if missing:
        raise NotFoundError(f"Products not found: {', '.join(sorted(missing))}")

    adjustment = StockAdjustment(
        warehouse=warehouse,
        reason=reason or "",
        notes=notes or "",
        status=StockAdjustment.STATUS_DRAFT,
        created_by=user,
    )
    adjustment.save()

    for line in lines:
        StockAdjustmentItem(
            adjustment=adjustment,
            product_id=line["product_id"],
            quantity_before=int(line["quantity_before"]),
            quantity_after=int(line["quantity_after"]),
            notes=line.get("notes") or "",
        ).save()

    logger.info(
        "Stock adjustment created",
        extra={
            "adjustment_id": str(adjustment.id),
            "adjustment_number": adjustment.adjustment_number,
            "warehouse_id": str(warehouse.id),
            "line_count": len(lines),
        },
    )
    return adjustment


@transaction.atomic
def approve_stock_adjustment(
    *,
    adjustment_id,
    warehouse_id=None,
    user=None,
) -> StockAdjustment:
    adjustment = _lock_adjustment(adjustment_id)

    if adjustment.is_terminal:
        raise InvalidStateError(
            f"Stock adjustment {adjustment.adjustment_number} is {adjustment.status}; "
            "only draft adjustments can be approved"
        )

    if warehouse_id is not None and str(warehouse_id) != str(adjustment.warehouse_id):
        raise InvalidStateError(
            f"Stock adjustment {adjustment.adjustment_number} belongs to warehouse "
            f"{adjustment.warehouse_id}, not {warehouse_id}"
        )

    items = list(adjustment.items.all())
    locked = ledger.lock_items(
        warehouse_id=adjustment.warehouse_id,
        product_ids=[i.product_id for i in items],
    )

    for item in items:
        row = locked.get(str(item.product_id))

        if row is None and int(item.quantity_before) != 0:
            raise NotFoundError(
                f"No inventory for product={item.product_id} in "
                f"warehouse={adjustment.warehouse_id} (quantity_before={item.quantity_before})"
            )

        if row is not None:
            if int(item.quantity_after) < int(row.quantity_reserved):
                raise InsufficientStockError(
                    f"Cannot set product={item.product_id} to {item.quantity_after}: "
                    f"{row.quantity_reserved} units are reserved"
                )
            if int(row.quantity_on_hand) != int(item.quantity_before):
                logger.warning(
                    "Adjustment baseline drifted from ledger",
                    extra={
                        "adjustment_id": str(adjustment.id),
                        "product_id": str(item.product_id),
                        "quantity_before": item.quantity_before,
                        "quantity_on_hand": row.quantity_on_hand,
                    },
                )

        updated, applied = ledger.set_on_hand(
            product_id=item.product_id,
            warehouse_id=adjustment.warehouse_id,
            quantity_on_hand=item.quantity_after,
            create_if_missing=True,
        )
        locked[str(item.product_id)] = updated

        record_movement(
            product_id=item.product_id,
            warehouse_id=adjustment.warehouse_id,
            movement_type=StockMovement.MovementType.ADJUSTMENT,
            quantity=applied,
            reference_type=StockMovement.ReferenceType.STOCK_ADJUSTMENT,
            reference_id=adjustment.id,
            notes=item.notes or adjustment.reason,
            user=user,
        )

    adjustment.status = StockAdjustment.STATUS_APPROVED
    adjustment.approved_by = user
    adjustment.approved_at = timezone.now()
    adjustment.save()

    logger.info(
        "Stock adjustment approved",
        extra={
            "adjustment_id": str(adjustment.id),
            "adjustment_number": adjustment.adjustment_number,
            "line_count": len(items),
        },
    )
    return adjustment


@transaction.atomic
def cancel_stock_adjustment(*, adjustment_id, user=None) -> StockAdjustment:
    adjustment = _lock_adjustment(adjustment_id)

    if adjustment.is_terminal:
        raise InvalidStateError(
            f"Stock adjustment {adjustment.adjustment_number} is {adjustment.status}; "
            "only draft adjustments can be cancelled"
        )

    adjustment.status = StockAdjustment.STATUS_CANCELLED
    adjustment.cancelled_at = timezone.now()
    adjustment.save()

    logger.info(
        "Stock adjustment cancelled",
        extra={"adjustment_id": str(adjustment.id), "user_id": getattr(user, "pk", None)},
    )
    return adjustment
