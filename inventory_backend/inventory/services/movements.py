# inventory/services/movements.py

"""
======================================================
PATH: inventory/services/movements.py
======================================================
MOVEMENT RECORDER

Purpose:
- record_movement(): pure append of one immutable StockMovement row
- post_stock_movement(): the transactional update path every workflow uses
  for on-hand changes (ledger delta + movement row, both or neither)
- adjust_inventory_quantity(): manual signed on-hand correction

Rules:
- movement.quantity is ALWAYS the signed delta actually applied to the ledger
- movements are never updated or deleted (model-enforced)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from inventory.models import InventoryItem, StockMovement
from inventory.services import ledger
from inventory.services.exceptions import InsufficientStockError, NotFoundError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PostedMovement:
    item: InventoryItem
    movement: StockMovement


def record_movement(
    *,
    product_id,
    warehouse_id,
    movement_type: str,
    quantity: int,
    reference_type: str | None = None,
    reference_id=None,
    unit_cost: Decimal | None = None,
    notes: str = "",
    user=None,
) -> StockMovement:
    """Append one movement row. Caller owns the transaction."""
    return StockMovement.objects.create(
        product_id=product_id,
        warehouse_id=warehouse_id,
        movement_type=movement_type,
        reference_type=reference_type,
        reference_id=reference_id,
        quantity=int(quantity),
        unit_cost=unit_cost,
        notes=(notes or "")[:255],
        movement_date=timezone.now(),
        created_by=user,
    )


@transaction.atomic
def post_stock_movement(
    *,
    product_id,
    warehouse_id,
    quantity: int,
    movement_type: str,
    reference_type: str | None = None,
    reference_id=None,
    unit_cost: Decimal | None = None,
    notes: str = "",
    user=None,
    reserved_delta: int = 0,
) -> PostedMovement:
    """
    Apply a signed on-hand delta to the ledger and log it in one transaction.

    quantity > 0 credits on-hand (creating the row when absent)
    quantity < 0 debits on-hand and available
    reserved_delta lets a sale consume its own reservation in the same write
    (on-hand and reserved drop together, available is unchanged)
    """
    qty = int(quantity)

    item = ledger.apply_delta(
        product_id=product_id,
        warehouse_id=warehouse_id,
        on_hand_delta=qty,
        reserved_delta=reserved_delta,
    )

    movement = record_movement(
        product_id=product_id,
        warehouse_id=warehouse_id,
        movement_type=movement_type,
        quantity=qty,
        reference_type=reference_type,
        reference_id=reference_id,
        unit_cost=unit_cost,
        notes=notes,
        user=user,
    )

    return PostedMovement(item=item, movement=movement)


@transaction.atomic
def adjust_inventory_quantity(
    *,
    product_id,
    warehouse_id,
    quantity_change,
    user=None,
    notes: str = "",
) -> PostedMovement:
    """
    Manual signed correction of on-hand stock (no adjustment document).

    +N -> adds N units (creates the ledger row when absent)
    -N -> removes N units; refused when fewer than N units are available
    """
    if isinstance(quantity_change, bool):
        raise ValidationError({"quantity_change": "quantity_change must be an integer"})
    delta = int(quantity_change)
    if delta == 0:
        raise ValidationError({"quantity_change": "quantity_change cannot be 0"})

    if delta < 0:
        item = ledger.lock_item(product_id=product_id, warehouse_id=warehouse_id)
        if item is None:
            raise NotFoundError(
                f"No inventory for product={product_id} in warehouse={warehouse_id}"
            )
        if int(item.quantity_available) < abs(delta):
            logger.warning(
                "Manual adjustment rejected: insufficient available stock",
                extra={
                    "product_id": str(product_id),
                    "warehouse_id": str(warehouse_id),
                    "quantity_available": item.quantity_available,
                    "quantity_change": delta,
                },
            )
            raise InsufficientStockError(
                f"Cannot remove {abs(delta)} units of product={product_id}: "
                f"available={item.quantity_available}"
            )

    posted = post_stock_movement(
        product_id=product_id,
        warehouse_id=warehouse_id,
        quantity=delta,
        movement_type=StockMovement.MovementType.ADJUSTMENT,
        reference_type=StockMovement.ReferenceType.MANUAL,
        notes=notes,
        user=user,
    )

    logger.info(
        "Manual inventory adjustment posted",
        extra={
            "product_id": str(product_id),
            "warehouse_id": str(warehouse_id),
            "quantity_change": delta,
            "movement_id": str(posted.movement.id),
        },
    )
    return posted
