"""Project-wide DRF exception handler.

Wraps every error that escapes a view in the response envelope:
framework ``APIException`` subclasses keep their status code (401, 403,
404, 405, 415, 429, ...); anything else is logged and reported as 500.
Domain exceptions are translated by the views themselves and never
reach this handler.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import structlog
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from modules.core.responses import failure

logger = structlog.get_logger(__name__)


def _message(detail: Any) -> str:
    if isinstance(detail, dict):
        return "; ".join(
            f"{key}: {_message(value)}" if key != "detail" else _message(value)
            for key, value in detail.items()
        )
    if isinstance(detail, list):
        return " ".join(_message(item) for item in detail)
    return str(detail)


def envelope_exception_handler(
    exc: Exception, context: Dict[str, Any]
) -> Optional[Response]:
    response = exception_handler(exc, context)

    if response is None:
        view = context.get("view")
        logger.exception(
            "request.unexpected_error",
            view=type(view).__name__ if view else None,
            error=type(exc).__name__,
        )
        return failure(
            "An unexpected error occurred.",
            status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    headers = {
        name: response[name]
        for name in ("WWW-Authenticate", "Retry-After", "Allow")
        if response.has_header(name)
    }
    return failure(_message(response.data), response.status_code, headers=headers)
