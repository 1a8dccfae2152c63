"""Shared error primitives and the project-wide DRF exception handler.

``ApiError`` is the base of every domain error that maps onto an HTTP
response; it carries the status the API layer should use and renders the
``{"error": ..., "details": ...}`` body.  ``CheckoutError`` groups the
errors that can end a checkout request.

Domain errors are translated explicitly by each view; the handler below
reshapes the errors raised by the framework itself (malformed JSON,
authentication, permissions, throttling, unknown routes) so that every
error body the API returns has the same shape.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import structlog
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = structlog.get_logger(__name__)


class ApiError(Exception):
    """Domain error with an HTTP status and a JSON body."""

    status_code = 500

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"error": self.message}
        if self.details:
            body["details"] = self.details
        return body


class CheckoutError(ApiError):
    """Base class for errors that abort (or degrade) a checkout."""


def _first_message(detail: Any) -> str:
    if isinstance(detail, dict):
        if "detail" in detail:
            return _first_message(detail["detail"])
        for value in detail.values():
            return _first_message(value)
        return ""
    if isinstance(detail, (list, tuple)):
        return _first_message(detail[0]) if detail else ""
    return str(detail)


def api_exception_handler(exc: Exception, context: dict) -> Optional[Response]:
    """Wrap DRF's default handler and normalise the response body."""
    if isinstance(exc, ApiError):
        logger.warning(
            "api.domain_error",
            status_code=exc.status_code,
            error_type=type(exc).__name__,
        )
        return Response(exc.to_dict(), status=exc.status_code)

    response = exception_handler(exc, context)
    if response is None:
        return None

    original = response.data
    body: Dict[str, Any] = {"error": _first_message(original)}
    if isinstance(original, dict) and set(original) != {"detail"}:
        body["details"] = original
    elif isinstance(original, list):
        body["details"] = original

    logger.warning(
        "api.error",
        status_code=response.status_code,
        error_type=type(exc).__name__,
    )
    response.data = body
    return response
