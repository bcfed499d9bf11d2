"""
Strata Schemas — one declaration for validation and documentation.

Facets are schema nodes; ``Schema`` classes are declarative object nodes.
The adapter renders either as an OpenAPI node or as a runtime validator.
"""

from .exceptions import CastFault, ValidationFault, ValidationIssue
from .facets import (
    Facet,
    TextFacet,
    EmailFacet,
    IntFacet,
    FloatFacet,
    BoolFacet,
    UUIDFacet,
    DateTimeFacet,
    ChoiceFacet,
    ListFacet,
    ObjectFacet,
    UnionFacet,
    JSONFacet,
    UNSET,
    as_facet,
)
from .core import Schema, SchemaMeta
from .adapter import (
    ComponentRegistry,
    ValidationResult,
    component_ref,
    to_document_node,
    to_validator,
)
from .builtins import (
    IdParam,
    PaginationQuery,
    PaginationMeta,
    SuccessMessage,
    ErrorResponse,
    ValidationErrorResponse,
    paginated,
)

__all__ = [
    # Errors
    "CastFault",
    "ValidationFault",
    "ValidationIssue",
    # Facets
    "Facet",
    "TextFacet",
    "EmailFacet",
    "IntFacet",
    "FloatFacet",
    "BoolFacet",
    "UUIDFacet",
    "DateTimeFacet",
    "ChoiceFacet",
    "ListFacet",
    "ObjectFacet",
    "UnionFacet",
    "JSONFacet",
    "UNSET",
    "as_facet",
    # Schema
    "Schema",
    "SchemaMeta",
    # Adapter
    "ComponentRegistry",
    "ValidationResult",
    "component_ref",
    "to_document_node",
    "to_validator",
    # Built-ins
    "IdParam",
    "PaginationQuery",
    "PaginationMeta",
    "SuccessMessage",
    "ErrorResponse",
    "ValidationErrorResponse",
    "paginated",
]
