# invoices/services/fulfillment_service.py

"""
======================================================
PATH: invoices/services/fulfillment_service.py
======================================================
INVOICE FULFILLMENT RECONCILIATION

Connects invoices to the inventory ledger.

Reservation:
- reserve: available -> reserved for every product line (all or nothing)
- release: reserved -> available, only for the warehouse holding the reservation
- an invoice holds at most one reservation (Invoice.reserved_warehouse)

Payment:
- reservation at the paying warehouse -> consumed (on_hand and reserved drop)
- reservation elsewhere               -> released first, then a normal sale
- no reservation                      -> available must cover every line
- one negative SALE movement per product line, product cost price as unit_cost

Lines for the same product are always judged cumulatively.
"""

from __future__ import annotations

import logging

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from inventory.models import InventoryItem, StockMovement, Warehouse
from inventory.services import ledger
from inventory.services.exceptions import InsufficientStockError, InvalidStateError, NotFoundError
from inventory.services.movements import post_stock_movement
from invoices.models import Invoice
from invoices.services.invoice_lifecycle import validate_can_reserve, validate_transition

logger = logging.getLogger(__name__)


# ============================================================
# HELPERS
# ============================================================


def _get_invoice(invoice_id, *, for_update: bool = False) -> Invoice:
    qs = Invoice.objects.all()
    if for_update:
        qs = qs.select_for_update()
    try:
        return qs.get(pk=invoice_id)
    except Invoice.DoesNotExist as exc:
        raise NotFoundError(f"Invoice {invoice_id} not found") from exc


def _ensure_warehouse(warehouse_id) -> Warehouse:
    warehouse = Warehouse.objects.filter(pk=warehouse_id).first()
    if warehouse is None:
        raise NotFoundError(f"Warehouse {warehouse_id} not found")
    return warehouse


def _product_lines(invoice: Invoice) -> list:
    return list(
        invoice.items.select_related("product").filter(product__isnull=False).order_by("created_at")
    )


def _needs_by_product(lines) -> dict:
    """{str(product_id): {"product": Product, "quantity": total}} in product-id order."""
    needs: dict[str, dict] = {}
    for line in lines:
        key = str(line.product_id)
        entry = needs.setdefault(key, {"product": line.product, "quantity": 0})
        entry["quantity"] += int(line.quantity)
    return dict(sorted(needs.items()))


def _release(invoice: Invoice, *, warehouse_id) -> None:
    needs = _needs_by_product(_product_lines(invoice))
    ledger.lock_items(warehouse_id=warehouse_id, product_ids=list(needs))

    for key, need in needs.items():
        ledger.apply_delta(
            product_id=key,
            warehouse_id=warehouse_id,
            reserved_delta=-need["quantity"],
        )

    invoice.reserved_warehouse = None
    invoice.reserved_at = None


# ============================================================
# READ-ONLY CHECKS
# ============================================================


def check_inventory_availability(*, invoice_id, warehouse_id) -> dict:
    invoice = _get_invoice(invoice_id)
    _ensure_warehouse(warehouse_id)

    lines = _product_lines(invoice)
    rows = {
        str(r.product_id): r
        for r in InventoryItem.objects.filter(
            warehouse_id=warehouse_id, product_id__in=[line.product_id for line in lines]
        )
    }

    running: dict[str, int] = {}
    items = []
    for line in lines:
        key = str(line.product_id)
        running[key] = running.get(key, 0) + int(line.quantity)
        row = rows.get(key)
        available = int(row.quantity_available) if row else 0
        items.append(
            {
                "invoice_item_id": str(line.id),
                "product_id": key,
                "product_name": line.product.name,
                "quantity_needed": int(line.quantity),
                "quantity_available": available,
                "is_available": available >= running[key],
            }
        )

    return {
        "invoice_id": str(invoice.id),
        "warehouse_id": str(warehouse_id),
        "items": items,
        "all_available": all(i["is_available"] for i in items),
    }


def get_invoice_inventory_status(*, invoice_id, warehouse_id) -> dict:
    invoice = _get_invoice(invoice_id)
    _ensure_warehouse(warehouse_id)

    reserved_here = str(invoice.reserved_warehouse_id) == str(warehouse_id)

    lines = _product_lines(invoice)
    rows = {
        str(r.product_id): r
        for r in InventoryItem.objects.filter(
            warehouse_id=warehouse_id, product_id__in=[line.product_id for line in lines]
        )
    }

    running: dict[str, int] = {}
    items = []
    for line in lines:
        key = str(line.product_id)
        running[key] = running.get(key, 0) + int(line.quantity)
        row = rows.get(key)
        on_hand = int(row.quantity_on_hand) if row else 0
        reserved = int(row.quantity_reserved) if row else 0
        available = int(row.quantity_available) if row else 0

        # A reservation held here already set these units aside.
        coverable = on_hand >= running[key] if reserved_here else available >= running[key]

        items.append(
            {
                "invoice_item_id": str(line.id),
                "product_id": key,
                "product_name": line.product.name,
                "quantity": int(line.quantity),
                "quantity_on_hand": on_hand,
                "quantity_reserved": reserved,
                "quantity_available": available,
                "can_fulfill": coverable,
            }
        )

    return {
        "invoice_id": str(invoice.id),
        "invoice_number": invoice.invoice_number,
        "status": invoice.status,
        "warehouse_id": str(warehouse_id),
        "reserved_here": reserved_here,
        "reserved_warehouse_id": (
            str(invoice.reserved_warehouse_id) if invoice.reserved_warehouse_id else None
        ),
        "items": items,
        "all_fulfillable": all(i["can_fulfill"] for i in items),
    }


# ============================================================
# RESERVATION
# ============================================================


@transaction.atomic
def reserve_inventory_for_invoice(*, invoice_id, warehouse_id) -> Invoice:
    invoice = _get_invoice(invoice_id, for_update=True)
    validate_can_reserve(invoice=invoice)

    if invoice.has_reservation:
        raise InvalidStateError(
            f"Invoice {invoice.invoice_number} already holds a reservation at "
            f"warehouse {invoice.reserved_warehouse_id}"
        )

    warehouse = _ensure_warehouse(warehouse_id)

    needs = _needs_by_product(_product_lines(invoice))
    if not needs:
        raise ValidationError({"items": "Invoice has no product lines to reserve"})

    locked = ledger.lock_items(warehouse_id=warehouse.id, product_ids=list(needs))

    for key, need in needs.items():
        row = locked.get(key)
        available = int(row.quantity_available) if row else 0
        if available < need["quantity"]:
            logger.warning(
                "Invoice reservation rejected: insufficient stock",
                extra={
                    "invoice_id": str(invoice.id),
                    "product_id": key,
                    "quantity_available": available,
                    "quantity_requested": need["quantity"],
                },
            )
            raise InsufficientStockError(
                f"Insufficient stock for {need['product'].name}: "
                f"available={available}, requested={need['quantity']}"
            )

    for key, need in needs.items():
        ledger.apply_delta(
            product_id=key,
            warehouse_id=warehouse.id,
            reserved_delta=need["quantity"],
        )

    invoice.reserved_warehouse = warehouse
    invoice.reserved_at = timezone.now()
    invoice.save()

    logger.info(
        "Invoice inventory reserved",
        extra={
            "invoice_id": str(invoice.id),
            "invoice_number": invoice.invoice_number,
            "warehouse_id": str(warehouse.id),
            "product_count": len(needs),
        },
    )
    return invoice


@transaction.atomic
def release_inventory_for_invoice(*, invoice_id, warehouse_id) -> Invoice:
    invoice = _get_invoice(invoice_id, for_update=True)

    if str(invoice.reserved_warehouse_id) != str(warehouse_id):
        raise InvalidStateError(
            f"Invoice {invoice.invoice_number} holds no reservation at warehouse {warehouse_id}"
        )

    _release(invoice, warehouse_id=invoice.reserved_warehouse_id)
    invoice.save()

    logger.info(
        "Invoice inventory released",
        extra={"invoice_id": str(invoice.id), "warehouse_id": str(warehouse_id)},
    )
    return invoice


# ============================================================
# PAYMENT + CANCELLATION
# ============================================================


@transaction.atomic
def process_invoice_payment(*, invoice_id, warehouse_id, user=None) -> Invoice:
    invoice = _get_invoice(invoice_id, for_update=True)
    validate_transition(invoice=invoice, target_status=Invoice.STATUS_PAID)

    warehouse = _ensure_warehouse(warehouse_id)

    if invoice.has_reservation and str(invoice.reserved_warehouse_id) != str(warehouse.id):
        logger.info(
            "Releasing reservation held at another warehouse before payment",
            extra={
                "invoice_id": str(invoice.id),
                "reserved_warehouse_id": str(invoice.reserved_warehouse_id),
                "warehouse_id": str(warehouse.id),
            },
        )
        _release(invoice, warehouse_id=invoice.reserved_warehouse_id)

    consume_reservation = invoice.has_reservation

    needs = _needs_by_product(_product_lines(invoice))
    locked = ledger.lock_items(warehouse_id=warehouse.id, product_ids=list(needs))

    if not consume_reservation:
        for key, need in needs.items():
            row = locked.get(key)
            available = int(row.quantity_available) if row else 0
            if available < need["quantity"]:
                logger.warning(
                    "Invoice payment rejected: insufficient stock",
                    extra={
                        "invoice_id": str(invoice.id),
                        "product_id": key,
                        "quantity_available": available,
                        "quantity_requested": need["quantity"],
                    },
                )
                raise InsufficientStockError(
                    f"Insufficient stock for {need['product'].name}: "
                    f"available={available}, requested={need['quantity']}"
                )

    for key, need in needs.items():
        qty = need["quantity"]
        post_stock_movement(
            product_id=key,
            warehouse_id=warehouse.id,
            quantity=-qty,
            reserved_delta=-qty if consume_reservation else 0,
            movement_type=StockMovement.MovementType.SALE,
            reference_type=StockMovement.ReferenceType.INVOICE,
            reference_id=invoice.id,
            unit_cost=need["product"].cost_price,
            notes=f"Invoice {invoice.invoice_number}",
            user=user,
        )

    invoice.reserved_warehouse = None
    invoice.reserved_at = None
    invoice.status = Invoice.STATUS_PAID
    invoice.paid_at = timezone.now()
    invoice.save()

    logger.info(
        "Invoice paid and inventory deducted",
        extra={
            "invoice_id": str(invoice.id),
            "invoice_number": invoice.invoice_number,
            "warehouse_id": str(warehouse.id),
            "consumed_reservation": consume_reservation,
        },
    )
    return invoice


@transaction.atomic
def cancel_invoice(*, invoice_id, user=None) -> Invoice:
    invoice = _get_invoice(invoice_id, for_update=True)
    validate_transition(invoice=invoice, target_status=Invoice.STATUS_CANCELLED)

    if invoice.has_reservation:
        _release(invoice, warehouse_id=invoice.reserved_warehouse_id)

    invoice.status = Invoice.STATUS_CANCELLED
    invoice.cancelled_at = timezone.now()
    invoice.save()

    logger.info(
        "Invoice cancelled",
        extra={
            "invoice_id": str(invoice.id),
            "invoice_number": invoice.invoice_number,
            "user_id": getattr(user, "pk", None),
        },
    )
    return invoice
