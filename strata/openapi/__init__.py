"""
Strata OpenAPI

Synthesizes an OpenAPI 3.1.0 document from the route registry and serves
it with per-request configuration.

Example:
    from strata.controller import RouteRegistry
    from strata.openapi import OpenAPIConfig, OpenAPIGenerator, OpenAPIEndpoints

    registry = RouteRegistry([UsersController])
    generator = OpenAPIGenerator(registry, OpenAPIConfig(title="Users API"))
    spec = generator.render()
    app = OpenAPIEndpoints(generator)
"""

from .config import API_KEY_SCHEME, BEARER_SCHEME, OpenAPIConfig
from .endpoints import DocsResponse, OpenAPIEndpoints, render_docs_html
from .generator import (
    AssembledDocument,
    AssemblyState,
    OpenAPIGenerator,
    render_document,
)
from .merge import SESSION_SCHEME, merge_security, merge_tags, security_requirements
from .request_config import RequestScopedConfig, current_config, request_scope
from .responses import AUTO_ERROR_RESPONSES, STATUS_DESCRIPTIONS
from .visibility import RouteFilter, accept_all, apply_route_filter, effective_hidden

__all__ = [
    # Config
    "OpenAPIConfig",
    "BEARER_SCHEME",
    "API_KEY_SCHEME",
    "SESSION_SCHEME",
    # Generation
    "OpenAPIGenerator",
    "AssembledDocument",
    "AssemblyState",
    "render_document",
    # Serving
    "OpenAPIEndpoints",
    "DocsResponse",
    "render_docs_html",
    # Request scope
    "RequestScopedConfig",
    "current_config",
    "request_scope",
    # Merging and visibility
    "merge_tags",
    "merge_security",
    "security_requirements",
    "RouteFilter",
    "accept_all",
    "apply_route_filter",
    "effective_hidden",
    # Responses
    "AUTO_ERROR_RESPONSES",
    "STATUS_DESCRIPTIONS",
]
