"""Small helpers shared by the module API views."""

from __future__ import annotations

from typing import Any, Dict

from rest_framework import status as http_status
from rest_framework.request import Request
from rest_framework.response import Response


def request_payload(request: Request) -> Dict[str, Any]:
    """Return the request body as a plain dict (JSON or form encoded)."""
    data = request.data
    if hasattr(data, "dict"):
        return data.dict()
    if not isinstance(data, dict):
        return {}
    return dict(data)


def mutation_response(
    message: str, data: Any, status: int = http_status.HTTP_200_OK
) -> Response:
    """Successful mutations answer ``{"message": ..., "data": ...}``."""
    return Response({"message": message, "data": data}, status=status)
