# inventory/services/stock_transfers.py

"""
======================================================
PATH: inventory/services/stock_transfers.py
======================================================
STOCK TRANSFER WORKFLOW

pending    -> in_transit  process():  source on-hand debited (-qty transfer movements)
in_transit -> completed   complete(): destination credited with quantity_received
pending    -> cancelled   cancel():   no ledger effect
in_transit -> cancelled   cancel():   status only; debited quantities stay off the ledger

Goods in transit belong to no warehouse ledger; the transfer document holds them.
"""

from __future__ import annotations

import logging

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from inventory.models import StockMovement, StockTransfer, StockTransferItem, Warehouse
from inventory.services import ledger
from inventory.services.exceptions import (
    InsufficientStockError,
    InvalidStateError,
    NotFoundError,
)
from inventory.services.movements import post_stock_movement
from products.models import Product

logger = logging.getLogger(__name__)


def _lock_transfer(transfer_id) -> StockTransfer:
    try:
        return StockTransfer.objects.select_for_update().get(pk=transfer_id)
    except StockTransfer.DoesNotExist as exc:
        raise NotFoundError(f"Stock transfer {transfer_id} not found") from exc


def _post_transfer_line(*, transfer, item, warehouse_id, quantity, user):
    post_stock_movement(
        product_id=item.product_id,
        warehouse_id=warehouse_id,
        quantity=quantity,
        movement_type=StockMovement.MovementType.TRANSFER,
        reference_type=StockMovement.ReferenceType.STOCK_TRANSFER,
        reference_id=transfer.id,
        notes=f"Transfer {transfer.transfer_number}",
        user=user,
    )


@transaction.atomic
def create_stock_transfer(
    *,
    from_warehouse_id,
    to_warehouse_id,
    lines,
    notes: str = "",
    user=None,
) -> StockTransfer:
    """
    lines: iterable of {"product_id", "quantity"}
    """
    lines = list(lines or [])
    if not lines:
        raise ValidationError({"items": "At least one transfer line is required"})

    if str(from_warehouse_id) == str(to_warehouse_id):
        raise ValidationError(
            {"to_warehouse_id": "Source and destination warehouses must differ"}
        )

    warehouses = Warehouse.objects.in_bulk([from_warehouse_id, to_warehouse_id])
    for wid in (from_warehouse_id, to_warehouse_id):
        if not any(str(pk) == str(wid) for pk in warehouses):
            raise NotFoundError(f"Warehouse {wid} not found")

    product_ids = {str(line["product_id"]) for line in lines}
    found = {
        str(pk) for pk in Product.objects.filter(pk__in=product_ids).values_list("pk", flat=True)
    }
    missing = product_ids - found
    if missing:
        raise NotFoundError(f"Products not found: {', '.join(sorted(missing))}")

    transfer = StockTransfer(
        from_warehouse_id=from_warehouse_id,
        to_warehouse_id=to_warehouse_id,
        notes=notes or "",
        status=StockTransfer.STATUS_PENDING,
        created_by=user,
    )
    transfer.save()

    for line in lines:
        StockTransferItem(
            transfer=transfer,
            product_id=line["product_id"],
            quantity=int(line["quantity"]),
        ).save()

    logger.info(
        "Stock transfer created",
        extra={
            "transfer_id": str(transfer.id),
            "transfer_number": transfer.transfer_number,
            "from_warehouse_id": str(from_warehouse_id),
            "to_warehouse_id": str(to_warehouse_id),
        },
    )
    return transfer


@transaction.atomic
def process_stock_transfer(*, transfer_id, user=None) -> StockTransfer:
    transfer = _lock_transfer(transfer_id)

    if transfer.status != StockTransfer.STATUS_PENDING:
        raise InvalidStateError(
            f"Stock transfer {transfer.transfer_number} is {transfer.status}; "
            "only pending transfers can be processed"
        )

    items = list(transfer.items.all())
    locked = ledger.lock_items(
        warehouse_id=transfer.from_warehouse_id,
        product_ids=[i.product_id for i in items],
    )

    # Cumulative per product so repeated lines cannot overdraw the source.
    needed: dict[str, int] = {}
    for item in items:
        key = str(item.product_id)
        needed[key] = needed.get(key, 0) + int(item.quantity)

    for key, qty in needed.items():
        row = locked.get(key)
        if row is None:
            raise NotFoundError(
                f"No inventory for product={key} in warehouse={transfer.from_warehouse_id}"
            )
        if int(row.quantity_available) < qty:
            logger.warning(
                "Transfer rejected: insufficient stock at source",
                extra={
                    "transfer_id": str(transfer.id),
                    "product_id": key,
                    "quantity_available": row.quantity_available,
                    "quantity_requested": qty,
                },
            )
            raise InsufficientStockError(
                f"Insufficient stock for product={key} in warehouse="
                f"{transfer.from_warehouse_id}: available={row.quantity_available}, "
                f"requested={qty}"
            )

    for item in items:
        _post_transfer_line(
            transfer=transfer,
            item=item,
            warehouse_id=transfer.from_warehouse_id,
            quantity=-int(item.quantity),
            user=user,
        )

    transfer.status = StockTransfer.STATUS_IN_TRANSIT
    transfer.processed_by = user
    transfer.processed_at = timezone.now()
    transfer.save()

    logger.info(
        "Stock transfer processed",
        extra={"transfer_id": str(transfer.id), "transfer_number": transfer.transfer_number},
    )
    return transfer


@transaction.atomic
def complete_stock_transfer(
    *,
    transfer_id,
    received_lines=None,
    user=None,
) -> StockTransfer:
    """
    received_lines: iterable of {"item_id", "quantity_received"}.
    None receives every line in full.
    """
    transfer = _lock_transfer(transfer_id)

    if transfer.status != StockTransfer.STATUS_IN_TRANSIT:
        raise InvalidStateError(
            f"Stock transfer {transfer.transfer_number} is {transfer.status}; "
            "only in-transit transfers can be completed"
        )

    items = {str(i.id): i for i in transfer.items.select_for_update()}

    if received_lines is None:
        received = {key: int(item.quantity) for key, item in items.items()}
    else:
        received = {}
        for line in received_lines:
            key = str(line["item_id"])
            if key not in items:
                raise NotFoundError(
                    f"Item {key} does not belong to transfer {transfer.transfer_number}"
                )
            qty = int(line["quantity_received"])
            if qty < 0:
                raise ValidationError(
                    {"quantity_received": "quantity_received cannot be negative"}
                )
            received[key] = qty

    # Lock destination rows up front in product order.
    ledger.lock_items(
        warehouse_id=transfer.to_warehouse_id,
        product_ids=[items[key].product_id for key in received],
    )

    for key in sorted(received, key=lambda k: str(items[k].product_id)):
        item = items[key]
        qty = received[key]

        item.quantity_received = qty
        item.save()

        if qty != int(item.quantity):
            logger.warning(
                "Transfer received quantity differs from sent quantity",
                extra={
                    "transfer_id": str(transfer.id),
                    "item_id": key,
                    "quantity": item.quantity,
                    "quantity_received": qty,
                },
            )

        if qty == 0:
            continue

        _post_transfer_line(
            transfer=transfer,
            item=item,
            warehouse_id=transfer.to_warehouse_id,
            quantity=qty,
            user=user,
        )

    transfer.status = StockTransfer.STATUS_COMPLETED
    transfer.completed_by = user
    transfer.completed_at = timezone.now()
    transfer.save()

    logger.info(
        "Stock transfer completed",
        extra={
            "transfer_id": str(transfer.id),
            "transfer_number": transfer.transfer_number,
            "lines_received": len(received),
        },
    )
    return transfer


@transaction.atomic
def cancel_stock_transfer(*, transfer_id, user=None) -> StockTransfer:
    """
    Mark a pending or in-transit transfer cancelled. Status only: quantities
    already debited from the source by process() are not credited back.
    """
    transfer = _lock_transfer(transfer_id)

    if transfer.is_terminal:
        raise InvalidStateError(
            f"Stock transfer {transfer.transfer_number} is {transfer.status} "
            "and cannot be cancelled"
        )

    previous_status = transfer.status
    if previous_status == StockTransfer.STATUS_IN_TRANSIT:
        logger.warning(
            "In-transit stock transfer cancelled without ledger reversal",
            extra={
                "transfer_id": str(transfer.id),
                "transfer_number": transfer.transfer_number,
                "from_warehouse_id": str(transfer.from_warehouse_id),
                "quantity_in_transit": sum(int(i.quantity) for i in transfer.items.all()),
            },
        )

    transfer.status = StockTransfer.STATUS_CANCELLED
    transfer.cancelled_at = timezone.now()
    transfer.save()

    logger.info(
        "Stock transfer cancelled",
        extra={
            "transfer_id": str(transfer.id),
            "transfer_number": transfer.transfer_number,
            "previous_status": previous_status,
            "user_id": getattr(user, "pk", None),
        },
    )
    return transfer
