# inventory/services/numbering.py

"""
DOCUMENT NUMBERING

Sequential, zero-padded document numbers: ADJ-0001, ST-0001, PO-0001, INV-0001.

Rules:
- The next number is (highest existing numeric suffix for the prefix) + 1
- Width comes from settings.INVENTORY_DOCUMENT_NUMBER_WIDTH (default 4);
  numbers grow past the width instead of wrapping
- Uniqueness is finally enforced by the unique constraint on the number field;
  a writer that loses the race draws the next number and saves again
"""

from __future__ import annotations

import logging

from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models.functions import Length

logger = logging.getLogger(__name__)


def next_document_number(model, *, field: str, prefix: str, width: int | None = None) -> str:
    width = int(width or getattr(settings, "INVENTORY_DOCUMENT_NUMBER_WIDTH", 4))
    head = f"{prefix}-"

    # Longest first, then lexical: the numeric maximum for zero-padded suffixes.
    candidates = (
        model.objects.filter(**{f"{field}__startswith": head})
        .order_by(Length(field).desc(), f"-{field}")
        .values_list(field, flat=True)
    )

    last_number = 0
    for value in candidates[:20]:
        suffix = str(value)[len(head):]
        if suffix.isdigit():
            last_number = int(suffix)
            break

    return f"{head}{last_number + 1:0{width}d}"


def save_with_document_number(instance, *, field: str, prefix: str, save, attempts: int | None = None):
    """
    Number a new document and insert it.

    Each attempt runs in a savepoint. An IntegrityError is retried with a
    fresh number only when the number it drew is now taken; anything else,
    or running out of attempts, propagates.
    """
    model = type(instance)
    attempts = int(attempts or getattr(settings, "INVENTORY_DOCUMENT_NUMBER_ATTEMPTS", 3))

    for attempt in range(1, attempts + 1):
        number = next_document_number(model, field=field, prefix=prefix)
        setattr(instance, field, number)
        # The unique check on the number belongs to the database here.
        instance.full_clean(exclude=[field])

        try:
            with transaction.atomic():
                return save()
        except IntegrityError:
            taken = model.objects.filter(**{field: number}).exists()
            setattr(instance, field, "")
            if not taken or attempt >= attempts:
                raise
            logger.warning(
                "Document number taken by a concurrent writer; retrying",
                extra={"model": model.__name__, "number": number, "attempt": attempt},
            )
