# invoices/services/invoice_service.py

"""
INVOICE CREATION

Creates an invoice with its lines and server-computed totals:
subtotal = sum(quantity * unit_price), total = subtotal + tax.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from django.core.exceptions import ValidationError
from django.db import transaction

from inventory.services.exceptions import NotFoundError
from invoices.models import Invoice, InvoiceItem
from products.models import Product

TWOPLACES = Decimal("0.01")


def _money(v) -> Decimal:
    return Decimal(str(v or "0.00")).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


@transaction.atomic
def create_invoice(
    *,
    lines,
    customer_name: str = "",
    tax_amount=None,
    issue_date=None,
    due_date=None,
    status: str = Invoice.STATUS_DRAFT,
    user=None,
) -> Invoice:
    """
    lines: iterable of {"product_id"?, "description"?, "quantity", "unit_price"?}
    """
    lines = list(lines or [])
    if not lines:
        raise ValidationError({"items": "At least one invoice line is required"})

    product_ids = {str(line["product_id"]) for line in lines if line.get("product_id")}
    products = {str(p.pk): p for p in Product.objects.filter(pk__in=product_ids)}
    missing = product_ids - set(products)
    if missing:
        raise NotFoundError(f"Products not found: {', '.join(sorted(missing))}")

    subtotal = Decimal("0.00")
    prepared = []
    for line in lines:
        product = products.get(str(line["product_id"])) if line.get("product_id") else None
        unit_price = line.get("unit_price")
        if unit_price is None:
            unit_price = product.unit_price if product is not None else Decimal("0.00")
        unit_price = _money(unit_price)
        quantity = int(line["quantity"])
        subtotal += unit_price * quantity
        prepared.append((product, line.get("description") or "", quantity, unit_price))

    subtotal = _money(subtotal)
    tax = _money(tax_amount)

    invoice = Invoice(
        customer_name=customer_name or "",
        status=status,
        due_date=due_date,
        subtotal_amount=subtotal,
        tax_amount=tax,
        total_amount=_money(subtotal + tax),
        created_by=user,
    )
    if issue_date is not None:
        invoice.issue_date = issue_date
    invoice.save()

    for product, description, quantity, unit_price in prepared:
        InvoiceItem(
            invoice=invoice,
            product=product,
            description=description,
            quantity=quantity,
            unit_price=unit_price,
        ).save()

    return invoice
