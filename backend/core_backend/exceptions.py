"""
Domain exceptions for the POS core and their REST translation.

Every service-layer error is recoverable by the caller: correct the input,
or reload the order and retry. Nothing here is fatal to the process.
"""
import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class POSError(Exception):
    """Base class for all order/payment core errors."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message=""):
        super().__init__(message)
        self.message = message


class ValidationError(POSError):
    """Malformed input (empty cart, missing fulfillment target, bad split)."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(POSError):
    """Unknown order id, menu item or cart line."""

    status_code = status.HTTP_404_NOT_FOUND


class InvalidTransitionError(POSError):
    """Requested status or payment-status change is not reachable."""

    status_code = status.HTTP_409_CONFLICT


class ActionNotPermittedError(InvalidTransitionError):
    """The acting role's policy does not allow this change."""

    status_code = status.HTTP_403_FORBIDDEN


class InvalidStateError(POSError):
    """Operation not allowed in the order's current state."""

    status_code = status.HTTP_409_CONFLICT


class ConflictError(POSError):
    """Optimistic revision mismatch; reload the order and retry."""

    status_code = status.HTTP_409_CONFLICT


def pos_exception_handler(exc, context):
    """
    DRF exception handler that renders POSError subclasses as JSON.

    Anything else falls through to DRF's default handler.
    """
    if isinstance(exc, POSError):
        request = context.get("request")
        logger.warning(
            f"Rejected {request.method if request else ''} "
            f"{request.path if request else ''}: {exc.__class__.__name__}: {exc.message}"
        )
        return Response(
            {"error": exc.__class__.__name__, "detail": exc.message},
            status=exc.status_code,
        )

    return exception_handler(exc, context)
