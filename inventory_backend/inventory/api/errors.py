# inventory/api/errors.py

"""
API ERROR NORMALIZATION

Maps domain errors raised by the inventory services (and the purchase /
invoice workflows built on them) to HTTP responses with body {"detail": msg}.
"""

from __future__ import annotations

import logging

from django.core.exceptions import ValidationError
from django.db import IntegrityError
from rest_framework import status
from rest_framework.response import Response

from inventory.services.exceptions import (
    InsufficientStockError,
    InvalidStateError,
    InvariantViolation,
    InventoryServiceError,
    NotFoundError,
)

logger = logging.getLogger(__name__)

# Order matters: AlreadyPaidError is an InvalidStateError.
STATUS_BY_ERROR = (
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (InvalidStateError, status.HTTP_409_CONFLICT),
    (InsufficientStockError, status.HTTP_400_BAD_REQUEST),
    (InvariantViolation, status.HTTP_500_INTERNAL_SERVER_ERROR),
)

HANDLED_ERRORS = (InventoryServiceError, ValidationError, IntegrityError)


def _validation_message(exc: ValidationError) -> str:
    if hasattr(exc, "message_dict"):
        return "; ".join(
            f"{field}: {' '.join(messages)}" for field, messages in exc.message_dict.items()
        )
    return " ".join(exc.messages)


def service_error_response(exc: Exception) -> Response:
    """Canonical error response for a service-layer exception."""
    if isinstance(exc, ValidationError):
        return Response(
            {"detail": _validation_message(exc)}, status=status.HTTP_400_BAD_REQUEST
        )

    if isinstance(exc, IntegrityError):
        logger.warning("Write rejected by a database constraint", exc_info=exc)
        return Response(
            {"detail": "Conflicting write; retry the request"},
            status=status.HTTP_409_CONFLICT,
        )

    http_status = status.HTTP_400_BAD_REQUEST
    for error_class, mapped in STATUS_BY_ERROR:
        if isinstance(exc, error_class):
            http_status = mapped
            break

    if http_status >= 500:
        logger.error("Inventory invariant violation surfaced to API", exc_info=exc)

    return Response({"detail": str(exc)}, status=http_status)
