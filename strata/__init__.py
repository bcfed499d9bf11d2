"""
Strata - convention-routed controllers with a co-generated OpenAPI document

Complete integration of:
- Controllers: Convention routing (index/show/create/update/patch/destroy)
- Schemas: One declaration drives request validation and documentation
- OpenAPI: 3.1.0 document synthesis with tag/security inheritance
- Visibility: Static hide flags and per-request dynamic route filters
- Config: Layered configuration with per-request overrides
- Faults: Structured error handling with fault domains
"""

__version__ = "0.1.0"

# ============================================================================
# Controllers
# ============================================================================

from .controller import (
    Controller,
    ControllerBuilder,
    ControllerDescriptor,
    RouteDescriptor,
    ResponseSpec,
    RouteRegistry,
    RequestValidator,
    Route,
    GET,
    POST,
    PUT,
    PATCH,
    DELETE,
)

# ============================================================================
# Schemas
# ============================================================================

from .schemas import (
    Schema,
    ComponentRegistry,
    to_document_node,
    to_validator,
    IdParam,
    PaginationQuery,
    SuccessMessage,
    ErrorResponse,
    ValidationErrorResponse,
    paginated,
)

# ============================================================================
# OpenAPI
# ============================================================================

from .openapi import (
    OpenAPIConfig,
    OpenAPIGenerator,
    OpenAPIEndpoints,
    RequestScopedConfig,
    request_scope,
)

from .config import ConfigLoader

from .faults import Fault, FaultDomain, Severity

__all__ = [
    "__version__",
    # Controllers
    "Controller",
    "ControllerBuilder",
    "ControllerDescriptor",
    "RouteDescriptor",
    "ResponseSpec",
    "RouteRegistry",
    "RequestValidator",
    "Route",
    "GET", "POST", "PUT", "PATCH", "DELETE",
    # Schemas
    "Schema",
    "ComponentRegistry",
    "to_document_node",
    "to_validator",
    "IdParam",
    "PaginationQuery",
    "SuccessMessage",
    "ErrorResponse",
    "ValidationErrorResponse",
    "paginated",
    # OpenAPI
    "OpenAPIConfig",
    "OpenAPIGenerator",
    "OpenAPIEndpoints",
    "RequestScopedConfig",
    "request_scope",
    # Config
    "ConfigLoader",
    # Faults
    "Fault",
    "FaultDomain",
    "Severity",
]
