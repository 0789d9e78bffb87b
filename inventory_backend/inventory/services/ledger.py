# inventory/services/ledger.py

"""
======================================================
PATH: inventory/services/ledger.py
======================================================
INVENTORY LEDGER STORE

Single writer of InventoryItem rows.

Rules:
- Every mutation locks the (product, warehouse) row with SELECT ... FOR UPDATE
  and joins the caller's transaction (transaction.atomic nests as a savepoint)
- quantity_available is recomputed on every write (on_hand - reserved)
- A mutation that would leave any quantity negative raises InvariantViolation;
  workflows are expected to pre-validate and raise InsufficientStockError first
- A missing row is created only for a positive on-hand delta; every other
  operation on a missing row raises NotFoundError

Workflows must not call this module for on-hand changes directly:
inventory.services.movements.post_stock_movement pairs the ledger write with
its StockMovement row. Reservation changes (reserved_delta) carry no movement.
"""

from __future__ import annotations

import logging

from django.db import transaction
from django.utils import timezone

from inventory.models import InventoryItem
from inventory.services.exceptions import InvariantViolation, NotFoundError

logger = logging.getLogger(__name__)


def get_item(*, product_id, warehouse_id) -> InventoryItem | None:
    """Read the current ledger row without locking (None when absent)."""
    return InventoryItem.objects.filter(
        product_id=product_id, warehouse_id=warehouse_id
    ).first()


def lock_item(*, product_id, warehouse_id) -> InventoryItem | None:
    return (
        InventoryItem.objects.select_for_update()
        .filter(product_id=product_id, warehouse_id=warehouse_id)
        .first()
    )


def lock_items(*, warehouse_id, product_ids) -> dict:
    """
    Lock every existing ledger row for product_ids at warehouse_id.

    Rows are locked in product-id order so two workflows touching overlapping
    products cannot deadlock each other. Must be called inside a transaction.
    Returns {str(product_id): InventoryItem} for the rows that exist.
    """
    ids = sorted({pid for pid in product_ids if pid is not None}, key=str)
    if not ids:
        return {}

    rows = (
        InventoryItem.objects.select_for_update()
        .filter(warehouse_id=warehouse_id, product_id__in=ids)
        .order_by("product_id")
    )
    return {str(row.product_id): row for row in rows}


def _check_invariants(*, product_id, warehouse_id, on_hand: int, reserved: int) -> None:
    if on_hand < 0 or reserved < 0 or on_hand - reserved < 0:
        logger.error(
            "Ledger invariant violation rejected",
            extra={
                "product_id": str(product_id),
                "warehouse_id": str(warehouse_id),
                "quantity_on_hand": on_hand,
                "quantity_reserved": reserved,
            },
        )
        raise InvariantViolation(
            f"Ledger row product={product_id} warehouse={warehouse_id} would become "
            f"on_hand={on_hand}, reserved={reserved}, available={on_hand - reserved}"
        )


@transaction.atomic
def apply_delta(
    *,
    product_id,
    warehouse_id,
    on_hand_delta: int = 0,
    reserved_delta: int = 0,
) -> InventoryItem:
    """
    Apply signed deltas to a ledger row and return the saved row.

    on_hand_delta  -> quantity_on_hand
    reserved_delta -> quantity_reserved
    quantity_available always follows (on_hand - reserved).
    """
    on_hand_delta = int(on_hand_delta or 0)
    reserved_delta = int(reserved_delta or 0)

    item = lock_item(product_id=product_id, warehouse_id=warehouse_id)

    if item is None:
        if on_hand_delta <= 0:
            raise NotFoundError(
                f"No inventory for product={product_id} in warehouse={warehouse_id}"
            )

        _check_invariants(
            product_id=product_id,
            warehouse_id=warehouse_id,
            on_hand=on_hand_delta,
            reserved=reserved_delta,
        )
        item = InventoryItem(
            product_id=product_id,
            warehouse_id=warehouse_id,
            quantity_on_hand=on_hand_delta,
            quantity_reserved=reserved_delta,
            last_stock_date=timezone.now(),
        )
        item.save()
        logger.info(
            "Ledger row created",
            extra={
                "product_id": str(product_id),
                "warehouse_id": str(warehouse_id),
                "quantity_on_hand": item.quantity_on_hand,
            },
        )
        return item

    new_on_hand = int(item.quantity_on_hand) + on_hand_delta
    new_reserved = int(item.quantity_reserved) + reserved_delta

    _check_invariants(
        product_id=product_id,
        warehouse_id=warehouse_id,
        on_hand=new_on_hand,
        reserved=new_reserved,
    )

    item.quantity_on_hand = new_on_hand
    item.quantity_reserved = new_reserved
    item.last_stock_date = timezone.now()
    item.save()
    return item


@transaction.atomic
def set_on_hand(
    *,
    product_id,
    warehouse_id,
    quantity_on_hand: int,
    create_if_missing: bool = False,
) -> tuple[InventoryItem, int]:
    """
    Set quantity_on_hand to an absolute value (stock counts).

    Returns (row, applied_delta) so the caller can log the exact signed change.
    """
    target = int(quantity_on_hand)

    item = lock_item(product_id=product_id, warehouse_id=warehouse_id)

    if item is None:
        if not create_if_missing:
            raise NotFoundError(
                f"No inventory for product={product_id} in warehouse={warehouse_id}"
            )
        _check_invariants(
            product_id=product_id,
            warehouse_id=warehouse_id,
            on_hand=target,
            reserved=0,
        )
        item = InventoryItem(
            product_id=product_id,
            warehouse_id=warehouse_id,
            quantity_on_hand=target,
            quantity_reserved=0,
            last_stock_date=timezone.now(),
        )
        item.save()
        return item, target

    _check_invariants(
        product_id=product_id,
        warehouse_id=warehouse_id,
        on_hand=target,
        reserved=int(item.quantity_reserved),
    )

    applied = target - int(item.quantity_on_hand)
    item.quantity_on_hand = target
    item.last_stock_date = timezone.now()
    item.save()
    return item, applied
