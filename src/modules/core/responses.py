"""Uniform response envelope.

Every API response carries ``{success, status, message, data?}``.
``data`` is omitted when ``None`` (failures, and successes without a
payload such as delete).
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from rest_framework.response import Response


def envelope(
    message: str,
    status_code: int = 200,
    data: Any = None,
) -> Dict[str, Any]:
    body: Dict[str, Any] = {
        "success": status_code < 400,
        "status": status_code,
        "message": message,
    }
    if data is not None:
        body["data"] = data
    return body


def success(
    message: str, data: Any = None, status_code: int = 200
) -> Response:
    return Response(envelope(message, status_code, data), status=status_code)


def failure(
    message: str,
    status_code: int,
    headers: Optional[Dict[str, str]] = None,
) -> Response:
    return Response(
        envelope(message, status_code),
        status=status_code,
        headers=headers,
    )
