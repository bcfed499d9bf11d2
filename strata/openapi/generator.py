"""
OpenAPI 3.1.0 document synthesis for Strata controllers.

Assembly walks the route registry once and produces an immutable
``AssembledDocument``:

- Verb, path and success status resolved by convention routing
- Request body, path and query parameters from the route schemas
- Success response plus explicit and auto-included error responses
- Tags and security merged from controller and route
- Named schemas collected once under ``components.schemas``

Rendering applies the effective (possibly request-overridden)
configuration to that document: info, servers, security schemes and the
dynamic route filter. The assembled document is cached until the
registry changes.
"""

from __future__ import annotations

import copy
import logging
import re
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple

from ..controller.conventions import RouteResolution, path_parameters
from ..controller.metadata import ControllerDescriptor, ResponseSpec, RouteDescriptor
from ..controller.registry import RouteRegistry
from ..faults import DuplicateRouteFault, MissingResponseSchemaFault
from ..schemas.adapter import ComponentRegistry, to_document_node
from ..schemas.facets import ObjectFacet, as_facet
from .config import OpenAPIConfig
from .merge import merge_security, merge_tags, security_requirements
from .responses import AUTO_ERROR_RESPONSES, describe_status, json_response
from .visibility import apply_route_filter, effective_hidden


logger = logging.getLogger("strata.openapi")

OPENAPI_VERSION = "3.1.0"

_PARAM_NAME_RE = re.compile(r"\{[^}]+\}")
_NON_IDENT_RE = re.compile(r"[^A-Za-z0-9]+")


class AssemblyState(str, Enum):
    COLLECTING = "collecting"
    RESOLVING = "resolving"
    ASSEMBLING = "assembling"
    READY = "ready"


@dataclass(frozen=True)
class AssembledDocument:
    """
    Result of one assembly pass.

    Never mutated after publication; ``render`` works on deep copies.

    Attributes:
        paths: path template -> path item (lowercase verb -> operation)
        schemas: Named component schemas
        tags: Top-level tag objects in first-seen order
        registry_version: Registry version the document was built from
    """
    paths: Dict[str, Dict[str, Any]]
    schemas: Dict[str, Dict[str, Any]]
    tags: Tuple[Dict[str, Any], ...] = ()
    registry_version: int = 0
    hidden: Tuple[str, ...] = field(default=(), repr=False)

    @property
    def operation_count(self) -> int:
        return sum(len(item) for item in self.paths.values())


class OpenAPIGenerator:
    """
    OpenAPI 3.1.0 document generator.

    Usage::

        registry = RouteRegistry([UsersController])
        generator = OpenAPIGenerator(registry, OpenAPIConfig(title="My API"))
        spec = generator.render()

    Assembly failures (missing response schema, duplicate verb and path,
    conflicting component names, unresolvable routes) are fatal faults
    raised from ``assemble``.
    """

    def __init__(
        self,
        registry: RouteRegistry,
        config: Optional[OpenAPIConfig] = None,
    ):
        self.registry = registry
        self.config = config or OpenAPIConfig()
        self.state = AssemblyState.COLLECTING
        self._document: Optional[AssembledDocument] = None
        self._lock = threading.Lock()
        registry.on_change(self._on_registry_change)

    # ── Assembly ─────────────────────────────────────────────────────────

    def assemble(self) -> AssembledDocument:
        """Build (or return the cached) document for the current registry."""
        document = self._document
        if document is not None and document.registry_version == self.registry.version:
            return document

        with self._lock:
            document = self._document
            if document is not None and document.registry_version == self.registry.version:
                return document
            try:
                document = self._build()
            except Exception:
                self.state = AssemblyState.COLLECTING
                raise
            self._document = document
            self.state = AssemblyState.READY

        logger.info(
            "Assembled OpenAPI document: %d paths, %d operations, %d component schemas",
            len(document.paths), document.operation_count, len(document.schemas),
        )
        return document

    def invalidate(self) -> None:
        """Drop the cached document; the next render reassembles."""
        with self._lock:
            self._document = None
            self.state = AssemblyState.COLLECTING

    def _on_registry_change(self, registry: RouteRegistry) -> None:
        logger.debug("Route registry changed (version %d); invalidating document", registry.version)
        self.invalidate()

    def _build(self) -> AssembledDocument:
        version = self.registry.version
        self.state = AssemblyState.RESOLVING
        resolved = self._resolve_routes()

        self.state = AssemblyState.ASSEMBLING
        components = ComponentRegistry()
        paths: Dict[str, Dict[str, Any]] = {}
        tags: Dict[str, Dict[str, Any]] = {}
        hidden: List[str] = []
        operation_ids: Dict[str, int] = {}

        for route, resolution in resolved:
            controller = route.controller
            if effective_hidden(route.hide_from_docs, controller.hide_from_docs):
                hidden.append(route.qualified_name)
                continue

            with components.origin(route.qualified_name):
                operation = self._build_operation(route, resolution, components)

            operation_id = operation["operationId"]
            seen = operation_ids.get(operation_id, 0)
            operation_ids[operation_id] = seen + 1
            if seen:
                operation["operationId"] = f"{operation_id}_{seen + 1}"

            for tag in operation.get("tags", ()):
                if tag not in tags:
                    tags[tag] = self._tag_object(tag, controller)

            paths.setdefault(resolution.openapi_path, {})[resolution.verb.lower()] = operation

        if hidden:
            logger.debug("Hidden from document: %s", ", ".join(hidden))

        return AssembledDocument(
            paths=paths,
            schemas=components.schemas(),
            tags=tuple(tags.values()),
            registry_version=version,
            hidden=tuple(hidden),
        )

    def _resolve_routes(self) -> List[Tuple[RouteDescriptor, RouteResolution]]:
        """Resolve every route and enforce the declaration invariants."""
        resolved: List[Tuple[RouteDescriptor, RouteResolution]] = []
        owners: Dict[Tuple[str, str], str] = {}

        for controller in self.registry.controllers:
            for route in controller.routes:
                resolution = route.resolve()
                if route.response is None:
                    raise MissingResponseSchemaFault(controller.name, route.name)

                key = (resolution.verb, _PARAM_NAME_RE.sub("{}", resolution.openapi_path))
                if key in owners:
                    raise DuplicateRouteFault(
                        resolution.verb, resolution.full_path, [owners[key], route.qualified_name],
                    )
                owners[key] = route.qualified_name
                resolved.append((route, resolution))

        return resolved

    # ── Operations ───────────────────────────────────────────────────────

    def _build_operation(
        self,
        route: RouteDescriptor,
        resolution: RouteResolution,
        components: ComponentRegistry,
    ) -> Dict[str, Any]:
        """Build a complete OpenAPI operation object."""
        controller = route.controller

        operation: Dict[str, Any] = {
            "operationId": route.operation_id or _operation_id(controller, route),
            "summary": route.summary or route.name.replace("_", " ").title(),
        }
        if route.description:
            operation["description"] = route.description

        tags = merge_tags(controller.tags, route.tags)
        if tags:
            operation["tags"] = tags

        parameters = self._build_parameters(route, resolution, components)
        if parameters:
            operation["parameters"] = parameters

        if route.body is not None:
            body = as_facet(route.body)
            operation["requestBody"] = {
                "required": body.required,
                "content": {"application/json": {"schema": body.to_schema(components)}},
            }

        operation["responses"] = self._build_responses(route, resolution, components)

        if route.deprecated:
            operation["deprecated"] = True

        security = merge_security(controller.security, route.security, route.has_guards)
        if security:
            operation["security"] = security_requirements(security)

        return operation

    def _build_parameters(
        self,
        route: RouteDescriptor,
        resolution: RouteResolution,
        components: ComponentRegistry,
    ) -> List[Dict[str, Any]]:
        """
        Expand params and query schemas into parameter objects.

        Path placeholders without a declared schema are still documented,
        as plain strings.
        """
        parameters: List[Dict[str, Any]] = []
        declared = _object_fields(route.params)

        for name in path_parameters(resolution.full_path):
            facet = declared.pop(name, None)
            schema = facet.to_schema(components) if facet is not None else {"type": "string"}
            param: Dict[str, Any] = {"name": name, "in": "path", "required": True, "schema": schema}
            if facet is not None and facet.help_text:
                param["description"] = facet.help_text
            parameters.append(param)

        if declared:
            logger.warning(
                "%s declares path parameters not present in %s: %s",
                route.qualified_name, resolution.full_path, ", ".join(declared),
            )

        for name, facet in _object_fields(route.query).items():
            param = {
                "name": name,
                "in": "query",
                "required": facet.required,
                "schema": facet.to_schema(components),
            }
            if facet.help_text:
                param["description"] = facet.help_text
            parameters.append(param)

        return parameters

    def _build_responses(
        self,
        route: RouteDescriptor,
        resolution: RouteResolution,
        components: ComponentRegistry,
    ) -> Dict[str, Any]:
        """Success response, explicit responses, then missing standard errors."""
        status = resolution.success_status
        responses: Dict[int, Dict[str, Any]] = {
            status: json_response(describe_status(status), to_document_node(route.response, components)),
        }

        for code, declared in route.responses.items():
            responses[code] = _explicit_response(code, declared, components)

        for code, schema in AUTO_ERROR_RESPONSES.items():
            if code not in responses:
                responses[code] = json_response(describe_status(code), to_document_node(schema, components))

        return {str(code): responses[code] for code in sorted(responses)}

    @staticmethod
    def _tag_object(tag: str, controller: ControllerDescriptor) -> Dict[str, Any]:
        tag_info: Dict[str, Any] = {"name": tag}
        if controller.description and tag in controller.tags:
            tag_info["description"] = controller.description
        return tag_info

    # ── Rendering ────────────────────────────────────────────────────────

    def render(self, config: Optional[OpenAPIConfig] = None) -> Dict[str, Any]:
        """
        Render the document for one request.

        Args:
            config: Effective configuration (defaults to the base config)

        Returns:
            A fresh dict; callers may mutate it freely.
        """
        config = config or self.config
        document = self.assemble()

        paths = apply_route_filter(copy.deepcopy(document.paths), config.route_filter)
        security_schemes = config.all_security_schemes()

        spec: Dict[str, Any] = {
            "openapi": OPENAPI_VERSION,
            "info": config.info(),
            "servers": copy.deepcopy(config.servers) or [{"url": "/", "description": "Current server"}],
        }
        if document.tags:
            spec["tags"] = copy.deepcopy(list(document.tags))
        spec["paths"] = paths
        spec["components"] = {
            "schemas": copy.deepcopy(document.schemas),
            "securitySchemes": copy.deepcopy(security_schemes),
        }
        spec["securitySchemes"] = security_schemes

        if config.external_docs_url:
            spec["externalDocs"] = {"url": config.external_docs_url}
            if config.external_docs_description:
                spec["externalDocs"]["description"] = config.external_docs_description

        return spec

    def document(self) -> Dict[str, Any]:
        """Render with the base configuration."""
        return self.render(self.config)


# ── Helpers ──────────────────────────────────────────────────────────────

def _object_fields(schema: Any) -> Dict[str, Any]:
    if schema is None:
        return {}
    facet = as_facet(schema)
    if not isinstance(facet, ObjectFacet):
        raise TypeError(f"Parameter schemas must be objects, got {facet!r}")
    return dict(facet.fields)


def _explicit_response(code: int, declared: Any, components: ComponentRegistry) -> Dict[str, Any]:
    if isinstance(declared, ResponseSpec):
        node = to_document_node(declared.schema, components) if declared.schema is not None else None
        return json_response(declared.description, node)
    if isinstance(declared, str):
        return json_response(declared, None)
    if declared is None:
        return json_response(describe_status(code), None)
    return json_response(describe_status(code), to_document_node(declared, components))


def _operation_id(controller: ControllerDescriptor, route: RouteDescriptor) -> str:
    stem = controller.name
    if stem.endswith("Controller") and stem != "Controller":
        stem = stem[: -len("Controller")]
    stem = _NON_IDENT_RE.sub("_", stem).strip("_") or "root"
    return f"{stem}_{route.name}"


def render_document(
    registry: RouteRegistry,
    config: Optional[OpenAPIConfig] = None,
) -> Dict[str, Any]:
    """One-shot convenience: assemble and render."""
    return OpenAPIGenerator(registry, config).document()
