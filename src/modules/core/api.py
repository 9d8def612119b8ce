"""Standardized API error responses.

Every error leaves the API in the same envelope::

    {"type": "client_error", "errors": [{"code": "...", "detail": "...", "attr": null}]}

Domain errors from the service layer map onto HTTP statuses here, so views
can let them propagate instead of repeating try/except blocks.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import structlog
from pydantic import ValidationError as PydanticValidationError
from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

from modules.core.exceptions import (
    ConcurrentModification,
    InvalidTransition,
    MarketplaceError,
    NotFound,
    StoreUnavailable,
    Unauthorized,
)

logger = structlog.get_logger(__name__)

DOMAIN_STATUS_CODES = (
    (NotFound, status.HTTP_404_NOT_FOUND),
    (Unauthorized, status.HTTP_403_FORBIDDEN),
    (InvalidTransition, status.HTTP_409_CONFLICT),
    (ConcurrentModification, status.HTTP_409_CONFLICT),
    (StoreUnavailable, status.HTTP_503_SERVICE_UNAVAILABLE),
)


def exception_handler(exc: Exception, context: Dict[str, Any]) -> Optional[Response]:
    if isinstance(exc, MarketplaceError):
        return _domain_error_response(exc, context)

    if isinstance(exc, PydanticValidationError):
        errors = [
            {
                "code": "invalid",
                "detail": error["msg"],
                "attr": ".".join(str(part) for part in error["loc"]) or None,
            }
            for error in exc.errors()
        ]
        return Response(
            {"type": "validation_error", "errors": errors},
            status=status.HTTP_400_BAD_REQUEST,
        )

    response = drf_exception_handler(exc, context)
    if response is None:
        return None

    if isinstance(exc, exceptions.ValidationError):
        error_type = "validation_error"
    elif response.status_code >= 500:
        error_type = "server_error"
    else:
        error_type = "client_error"

    details = exc.get_full_details() if isinstance(exc, exceptions.APIException) else {}
    response.data = {"type": error_type, "errors": _flatten(details)}
    return response


def _domain_error_response(exc: MarketplaceError, context: Dict[str, Any]) -> Response:
    status_code = status.HTTP_400_BAD_REQUEST
    for error_class, code in DOMAIN_STATUS_CODES:
        if isinstance(exc, error_class):
            status_code = code
            break

    view = context.get("view")
    logger.warning(
        "api.domain_error",
        code=exc.code,
        detail=str(exc),
        view=view.__class__.__name__ if view else None,
        status_code=status_code,
    )
    error: Dict[str, Any] = {"code": exc.code, "detail": str(exc), "attr": None}
    if isinstance(exc, InvalidTransition):
        error["requested"] = exc.requested
        error["current"] = exc.current
    return Response(
        {
            "type": "server_error" if status_code >= 500 else "client_error",
            "retryable": exc.retryable,
            "errors": [error],
        },
        status=status_code,
    )


def _flatten(details: Any, attr: Optional[str] = None) -> List[Dict[str, Any]]:
    if isinstance(details, dict) and {"message", "code"} <= details.keys():
        return [{"code": details["code"], "detail": str(details["message"]), "attr": attr}]
    if isinstance(details, dict):
        flattened: List[Dict[str, Any]] = []
        for key, value in details.items():
            child = attr if key in ("detail", "non_field_errors") else key
            if attr and child != attr:
                child = f"{attr}.{child}"
            flattened.extend(_flatten(value, child))
        return flattened
    if isinstance(details, list):
        flattened = []
        for item in details:
            flattened.extend(_flatten(item, attr))
        return flattened
    return [{"code": "error", "detail": str(details), "attr": attr}]
