from typing import Dict, Optional
from fastapi import HTTPException, status
import logging

logger = logging.getLogger(__name__)


class MarketplaceError(Exception):
    """Base class for domain failures raised by the service layer.

    Each subclass carries the HTTP status the API layer reports it with, so
    routes can simply let these propagate (see ``to_http``).
    """

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, field_errors: Optional[Dict[str, str]] = None):
        super().__init__(message)
        self.message = message
        self.field_errors = field_errors or {}


class ValidationError(MarketplaceError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


class InsufficientBalance(MarketplaceError):
    status_code = status.HTTP_400_BAD_REQUEST


class InvalidTransition(MarketplaceError):
    status_code = status.HTTP_409_CONFLICT


class Forbidden(MarketplaceError):
    status_code = status.HTTP_403_FORBIDDEN


class DuplicateRating(MarketplaceError):
    status_code = status.HTTP_409_CONFLICT


class NotFound(MarketplaceError):
    status_code = status.HTTP_404_NOT_FOUND


class ConcurrentUpdate(MarketplaceError):
    """The row changed between read and conditional write; the caller may retry."""

    status_code = status.HTTP_409_CONFLICT


def error_response(
    message: str,
    field_errors: Dict[str, str],
    code: int = status.HTTP_422_UNPROCESSABLE_ENTITY,
) -> HTTPException:
    """Return an HTTPException with a consistent structure and log details."""
    logger.error("%s %s", message, field_errors)
    detail = {"message": message, "field_errors": field_errors}
    return HTTPException(status_code=code, detail=detail)


def to_http(exc: MarketplaceError) -> HTTPException:
    return error_response(exc.message, exc.field_errors, exc.status_code)
