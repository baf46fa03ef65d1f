"""Shared helper functions for Robyn API routes."""

import json
from typing import Any

from robyn import Request, Response

JSON_HEADERS = {"Content-Type": "application/json"}


def json_response(data: Any, status_code: int = 200) -> Response:
    """Create a JSON response.

    Args:
        data: Data to serialize to JSON. Protocol models are emitted in
              their wire form (camelCase aliases, ``None`` fields dropped).
        status_code: HTTP status code (default: 200)

    Returns:
        Robyn Response with JSON body and appropriate headers
    """
    if hasattr(data, "to_wire"):
        body = json.dumps(data.to_wire())
    elif isinstance(data, list) and data and hasattr(data[0], "to_wire"):
        body = json.dumps([item.to_wire() for item in data])
    else:
        body = json.dumps(data, default=str)

    return Response(status_code, dict(JSON_HEADERS), body)


def error_response(detail: str, status_code: int = 400) -> Response:
    """Create an error response of the form ``{"detail": "message"}``."""
    body = json.dumps({"detail": detail})
    return Response(status_code, dict(JSON_HEADERS), body)


def request_text(request: Request) -> str:
    """Return the request body as text.

    Raises:
        UnicodeDecodeError: If a bytes body is not valid UTF-8
    """
    body = request.body
    if isinstance(body, bytes):
        body = body.decode("utf-8")
    return body or ""


def parse_json_body(request: Request) -> dict[str, Any]:
    """Parse JSON body from request.

    Args:
        request: Robyn request object

    Returns:
        Parsed JSON object. Returns empty dict if body is empty.

    Raises:
        json.JSONDecodeError: If body is not valid JSON
        ValueError: If the body is not UTF-8, or is valid JSON but not an object
    """
    body = request_text(request)
    if not body:
        return {}
    data = json.loads(body)
    if not isinstance(data, dict):
        raise ValueError("Request body must be a JSON object")
    return data
