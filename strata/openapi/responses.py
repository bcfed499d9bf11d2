"""
Standard responses.

Every documented operation carries six error responses unless the route
declares the same status itself.
"""

from __future__ import annotations

from typing import Any, Dict

from ..schemas.builtins import ErrorResponse, ValidationErrorResponse


STATUS_DESCRIPTIONS: Dict[int, str] = {
    200: "Successful response",
    201: "Resource created",
    202: "Accepted for processing",
    204: "No content",
    400: "Validation error",
    401: "Unauthorized",
    403: "Forbidden",
    404: "Not found",
    409: "Conflict",
    422: "Unprocessable entity",
    429: "Too many requests",
    500: "Internal server error",
}

# status -> schema of the auto-included error responses
AUTO_ERROR_RESPONSES: Dict[int, Any] = {
    400: ValidationErrorResponse,
    401: ErrorResponse,
    403: ErrorResponse,
    404: ErrorResponse,
    409: ErrorResponse,
    500: ErrorResponse,
}


def describe_status(status: int) -> str:
    return STATUS_DESCRIPTIONS.get(status, f"HTTP {status}")


def json_response(description: str, schema_node: Dict[str, Any] | None) -> Dict[str, Any]:
    """Response object with an optional JSON body."""
    response: Dict[str, Any] = {"description": description}
    if schema_node is not None:
        response["content"] = {"application/json": {"schema": schema_node}}
    return response
