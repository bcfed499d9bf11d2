"""
Built-in reusable schemas.

These shapes back the auto-included error responses and the common
path/query parameters, and are exported for reuse in route declarations.
"""

from __future__ import annotations

from typing import Any, Dict, Type

from .core import Schema, SchemaMeta
from .facets import (
    DateTimeFacet,
    IntFacet,
    ListFacet,
    ObjectFacet,
    TextFacet,
    UnionFacet,
    UUIDFacet,
    as_facet,
)


__all__ = [
    "IdParam",
    "PaginationQuery",
    "PaginationMeta",
    "SuccessMessage",
    "ErrorResponse",
    "ValidationErrorResponse",
    "paginated",
    "DEFAULT_PAGE",
    "DEFAULT_LIMIT",
    "MAX_LIMIT",
]

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 20
MAX_LIMIT = 100


class IdParam(Schema):
    """Single UUID path parameter."""
    id = UUIDFacet(help_text="Resource identifier")


class PaginationQuery(Schema):
    """Page/limit query parameters."""
    page = IntFacet(min_value=1, default=DEFAULT_PAGE, help_text="Page number (1-based)")
    limit = IntFacet(min_value=1, max_value=MAX_LIMIT, default=DEFAULT_LIMIT, help_text="Items per page")


class PaginationMeta(Schema):
    page = IntFacet(min_value=1)
    limit = IntFacet(min_value=1, max_value=MAX_LIMIT)
    total = IntFacet(min_value=0)
    totalPages = IntFacet(min_value=0)

    class Spec:
        name = "PaginationMeta"


class SuccessMessage(Schema):
    message = TextFacet(help_text="Human-readable result")

    class Spec:
        name = "SuccessMessage"
        description = "Generic success acknowledgement"


class ErrorResponse(Schema):
    code = TextFacet(help_text="Stable machine-readable error code")
    message = TextFacet(help_text="Human-readable error message")
    timestamp = DateTimeFacet(help_text="When the error occurred")
    metadata = ObjectFacet(additional_properties=True, required=False, help_text="Additional error details")

    class Spec:
        name = "ErrorResponse"
        description = "Standard error shape"


_issue = ObjectFacet(
    {
        "path": ListFacet(UnionFacet([TextFacet(), IntFacet()])),
        "message": TextFacet(),
        "code": TextFacet(help_text="Constraint that failed"),
    },
    component="ValidationIssue",
)


class ValidationErrorResponse(ErrorResponse):
    issues = ListFacet(_issue)

    class Spec:
        name = "ValidationErrorResponse"
        description = "Request validation failure"


def paginated(item: Any, *, name: str | None = None) -> Type[Schema]:
    """
    Build a ``{data, pagination}`` envelope around ``item``.

    The envelope is a named component when ``name`` is given or when the
    item schema itself is named (``Paginated<Item>``).
    """
    item_facet = as_facet(item)
    if name is None and item_facet.component:
        name = f"Paginated{item_facet.component}"

    namespace: Dict[str, Any] = {
        "data": ListFacet(item_facet),
        "pagination": PaginationMeta.as_facet(),
        "Spec": type("Spec", (), {"name": name}),
    }
    return SchemaMeta(name or "PaginatedEnvelope", (Schema,), namespace)
